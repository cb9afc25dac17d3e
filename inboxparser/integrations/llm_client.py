"""Language-model service integration for inboxparser.

Talks to any OpenAI-compatible endpoint (Ollama by default) through the
openai SDK. One prompt in, free text out; no state is kept between calls.
"""

import os
import logging
from typing import Optional
from openai import OpenAI, APIError, APITimeoutError
from dotenv import load_dotenv

from inboxparser.models.constants import (
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROBE_TIMEOUT_SEC,
    DEFAULT_LLM_TIMEOUT_MS,
)

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an entity extraction assistant. Respond only with valid JSON."


class LLMClient:
    """Client for an OpenAI-compatible chat completion service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        probe_timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Endpoint URL. If None, reads LLM_BASE_URL.
            model: Model name. If None, reads LLM_MODEL.
            api_key: API key. If None, reads LLM_API_KEY (Ollama ignores it).
            probe_timeout: Seconds allowed for the connectivity probe.
        """
        self.base_url = base_url or os.getenv("LLM_BASE_URL", DEFAULT_LLM_BASE_URL)
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL)
        self.probe_timeout = probe_timeout or float(
            os.getenv("LLM_PROBE_TIMEOUT_SEC", str(DEFAULT_LLM_PROBE_TIMEOUT_SEC))
        )
        # The SDK refuses to build without a key
        self.client = OpenAI(
            base_url=self.base_url,
            api_key=api_key or os.getenv("LLM_API_KEY", "ollama"),
            max_retries=0,
        )

    def check_connection(self) -> bool:
        """Fast probe: True if the service lists its models within the probe timeout."""
        try:
            self.client.models.list(timeout=self.probe_timeout)
            return True
        except APIError as e:
            logger.info(f"Language-model service unavailable: {type(e).__name__}")
            return False
        except Exception as e:
            logger.info(f"Language-model probe failed: {type(e).__name__}")
            return False

    def complete(self, prompt: str, timeout: Optional[float] = None) -> Optional[str]:
        """Send one prompt and return the response text.

        Args:
            prompt: Full prompt text
            timeout: Seconds before the request is abandoned

        Returns:
            Response text, or None if the call failed, timed out or returned nothing
        """
        if timeout is None:
            timeout = DEFAULT_LLM_TIMEOUT_MS / 1000
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.2,
                timeout=timeout,
            )
            content = response.choices[0].message.content if response.choices else None
            if not content or not content.strip():
                logger.warning("Language-model service returned an empty response")
                return None
            return content.strip()
        except APITimeoutError:
            logger.warning(f"Language-model request timed out after {timeout}s")
            return None
        except APIError as e:
            status_code = getattr(e, 'status_code', None)
            # Don't log the message, it may echo request content
            logger.error(f"Language-model API error: {status_code or 'unknown'} ({type(e).__name__})")
            return None
        except Exception as e:
            logger.error(f"Error calling language-model service: {type(e).__name__}")
            return None
