"""Tests for the language-model client, with the SDK mocked out."""

import httpx
import pytest
from unittest.mock import MagicMock, patch

from openai import APIConnectionError, APITimeoutError

from inboxparser.integrations.llm_client import LLMClient


REQUEST = httpx.Request("POST", "http://localhost:11434/v1/chat/completions")


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def llm_client():
    with patch("inboxparser.integrations.llm_client.OpenAI") as mock_openai:
        client = LLMClient(base_url="http://localhost:11434/v1", model="mistral", probe_timeout=1.0)
        client.client = mock_openai.return_value
        yield client


class TestLLMClient:
    """Test connection probing and completion handling."""

    def test_configuration_from_env(self, monkeypatch):
        monkeypatch.setenv("LLM_BASE_URL", "http://llm.internal:8000/v1")
        monkeypatch.setenv("LLM_MODEL", "llama3")
        with patch("inboxparser.integrations.llm_client.OpenAI") as mock_openai:
            client = LLMClient()
        assert client.base_url == "http://llm.internal:8000/v1"
        assert client.model == "llama3"
        assert mock_openai.call_args.kwargs["max_retries"] == 0

    def test_check_connection(self, llm_client):
        assert llm_client.check_connection() is True
        llm_client.client.models.list.assert_called_once_with(timeout=1.0)

    def test_check_connection_unreachable(self, llm_client):
        llm_client.client.models.list.side_effect = APIConnectionError(request=REQUEST)
        assert llm_client.check_connection() is False

    def test_complete_returns_stripped_text(self, llm_client):
        llm_client.client.chat.completions.create.return_value = _completion('  {"what": null}\n')
        assert llm_client.complete("prompt", timeout=2.0) == '{"what": null}'

        kwargs = llm_client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "mistral"
        assert kwargs["timeout"] == 2.0
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}

    def test_complete_default_timeout(self, llm_client):
        llm_client.client.chat.completions.create.return_value = _completion("ok")
        llm_client.complete("prompt")
        assert llm_client.client.chat.completions.create.call_args.kwargs["timeout"] == 10.0

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_response(self, llm_client, content):
        llm_client.client.chat.completions.create.return_value = _completion(content)
        assert llm_client.complete("prompt") is None

    @pytest.mark.parametrize("error", [
        APITimeoutError(request=REQUEST),
        APIConnectionError(request=REQUEST),
        RuntimeError("socket closed"),
    ])
    def test_errors_return_none(self, llm_client, error):
        llm_client.client.chat.completions.create.side_effect = error
        assert llm_client.complete("prompt") is None
