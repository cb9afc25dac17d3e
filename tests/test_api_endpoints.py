"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

import json
import time
import pytest
from fastapi.testclient import TestClient


TODAY = "2026-01-07"

ENHANCEMENT_RESPONSE = json.dumps({
    "what": {"value": "Pay rent", "confidence": 0.9},
    "aspect": {"value": "financial", "confidence": 0.9},
    "when": {"date": "2026-01-08", "confidence": 0.85},
})


def _parse(test_client: TestClient, text: str, **extra) -> dict:
    response = test_client.post("/parse", json={"text": text, "today": TODAY, **extra})
    assert response.status_code == 200
    return response.json()


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestParseEndpoint:
    """Test POST /parse."""

    def test_confident_capture(self, test_client, fake_llm):
        data = _parse(test_client, "training today at 7pm bunker kota damansara")

        assert data["result"]["what"]["value"] == "Training"
        assert data["result"]["intent"]["value"] == "fitness"
        assert data["result"]["confidence_level"] == "high"
        assert data["show_quick_confirm"] is True
        assert data["field_actions"]["date"] == "auto"
        assert data["analysis"]["can_proceed"] is True
        assert data["enhancement_pending"] is False
        assert fake_llm.prompts == []

    def test_goal_linked(self, test_client, sample_goals):
        data = _parse(test_client, "training today at 7pm bunker kota damansara")
        assert data["result"]["goal_match"]["goal_id"] == "goal-train"
        assert data["result"]["suggested_task"]["weekly_goal_id"] == "goal-train"

    def test_noise(self, test_client):
        data = _parse(test_client, "asdkjasd")
        assert data["result"]["overall_confidence"] == 0.0
        assert data["result"]["confidence_level"] == "low"
        assert data["show_quick_confirm"] is False
        assert data["missing_fields"] == ["activity", "category", "date"]

    def test_inline_enhancement(self, test_client, fake_llm):
        fake_llm.response = ENHANCEMENT_RESPONSE
        data = _parse(test_client, "asdkjasd", enhance=True)

        assert data["result"]["parsing_method"] == "hybrid"
        assert data["result"]["what"]["value"] == "Pay rent"
        assert data["result"]["what"]["source"] == "llm"
        assert data["enhancement_pending"] is False

    def test_inline_enhancement_failure_keeps_rule_result(self, test_client, fake_llm):
        fake_llm.response = "not json"
        data = _parse(test_client, "asdkjasd", enhance=True)
        assert data["result"]["parsing_method"] == "rule"

    def test_background_enhancement(self, test_client, fake_llm):
        fake_llm.response = ENHANCEMENT_RESPONSE
        data = _parse(test_client, "asdkjasd")
        assert data["enhancement_pending"] is True
        assert data["result"]["parsing_method"] == "rule"

        enhanced = None
        deadline = time.monotonic() + 3
        while time.monotonic() < deadline:
            response = test_client.get(f"/parse/{data['capture_id']}/enhanced")
            if response.status_code == 200:
                enhanced = response.json()
                break
            time.sleep(0.05)

        assert enhanced is not None
        assert enhanced["parsing_method"] == "hybrid"
        assert enhanced["intent"]["value"] == "financial"

    def test_unknown_enhanced_capture(self, test_client):
        assert test_client.get("/parse/nope/enhanced").status_code == 404

    def test_text_too_long(self, test_client):
        response = test_client.post("/parse", json={"text": "a" * 2001})
        assert response.status_code == 422


class TestClarifyEndpoints:
    """Test the clarification flow."""

    def test_analyze(self, test_client):
        result = _parse(test_client, "cook dinner tomorrow")["result"]
        response = test_client.post("/clarify/analyze", json={"result": result})
        assert response.status_code == 200
        assert response.json()["missing_required"] == ["where"]

    def test_questions_fall_back_to_templates(self, test_client):
        result = _parse(test_client, "cook dinner tomorrow")["result"]
        response = test_client.post("/clarify/questions", json={"text": "cook dinner tomorrow", "result": result})
        assert response.status_code == 200
        data = response.json()
        assert data["generation_method"] == "rule"
        assert [q["slot"] for q in data["questions"]] == ["where"]

    def test_merge(self, test_client):
        result = _parse(test_client, "cook dinner tomorrow")["result"]
        response = test_client.post(
            "/clarify/merge", json={"result": result, "answers": {"where": "Home"}, "today": TODAY}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["result"]["where"]["value"] == "Home"
        assert data["result"]["where"]["source"] == "user"
        assert data["analysis"]["can_proceed"] is True

    def test_merge_unknown_slot(self, test_client):
        result = _parse(test_client, "cook dinner tomorrow")["result"]
        response = test_client.post("/clarify/merge", json={"result": result, "answers": {"mood": "happy"}})
        assert response.status_code == 400


class TestTaskEndpoints:
    """Test POST /tasks."""

    def test_create_task(self, test_client, sample_goals, task_repository):
        text = "training today at 7pm bunker kota damansara"
        result = _parse(test_client, text)["result"]
        response = test_client.post("/tasks", json={"result": result, "source_text": text})

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Training"
        assert data["aspect"] == "fitness"
        assert data["weekly_goal_id"] == "goal-train"
        assert data["hard_scheduled_time"] == "19:00"
        assert task_repository.get(data["id"]) is not None

    def test_incomplete_capture_rejected(self, test_client):
        result = _parse(test_client, "asdkjasd")["result"]
        response = test_client.post("/tasks", json={"result": result})
        assert response.status_code == 400


class TestBreakdownEndpoints:
    """Test deep prompts and breakdown generation."""

    def test_deep_prompts(self, test_client):
        response = test_client.get("/deep-prompts/fitness")
        assert response.status_code == 200
        assert response.json()[0]["question_key"] == "session_type"

    def test_deep_prompts_unknown_aspect(self, test_client):
        assert test_client.get("/deep-prompts/hobbies").status_code == 400

    def test_breakdown(self, test_client):
        response = test_client.post(
            "/breakdown", json={"aspect": "fitness", "time": "19:00", "location": "Home", "total_duration": 90}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["trigger"] == "When it's 7pm and I'm at Home"
        assert [s["duration"] for s in data["steps"]] == [14, 63, 14]

    def test_breakdown_from_answers(self, test_client):
        response = test_client.post("/breakdown", json={"aspect": "fitness", "answers": {"session_type": "sparring"}})
        assert response.status_code == 200
        assert sum(s["duration"] for s in response.json()["steps"]) == 90

    @pytest.mark.parametrize("payload", [
        {"aspect": "hobbies"},
        {"aspect": "fitness", "time": "7pm"},
        {"aspect": "fitness", "total_duration": 0},
    ])
    def test_breakdown_validation(self, test_client, payload):
        assert test_client.post("/breakdown", json=payload).status_code == 422
