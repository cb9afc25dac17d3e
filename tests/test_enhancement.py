"""Tests for language-model response validation and merge precedence."""

import json
import pytest

from inboxparser.engine.enhancement import build_extraction_prompt, merge_extraction, parse_extraction_response
from inboxparser.engine.pipeline import CapturePipeline, ParserConfig
from inboxparser.models.enums import LifeAspect, SlotSource, TimePreference, WhoType
from inboxparser.models.parsed import AspectSlot, ParsedResult, TextSlot, WhenSlot

from tests.conftest import FakeLLMClient


class TestParseExtractionResponse:
    """Test response validation."""

    def test_valid_response_wrapped_in_prose(self):
        response = "Here you go:\n" + json.dumps({
            "what": {"value": "Pay rent", "confidence": 0.9},
            "when": {"date": "2026-01-09", "time": "09:00", "timePreference": "morning", "confidence": 0.85},
            "where": {"value": "Home", "confidence": 0.7},
            "who": {"value": "solo", "confidence": 0.9},
            "duration": {"value": 15, "confidence": 0.8},
            "aspect": {"value": "Financial", "confidence": 0.95},
            "reasoning": "Rent is a bill",
        }) + "\nHope that helps."
        extraction = parse_extraction_response(response)

        assert extraction.what.value == "Pay rent"
        assert extraction.when.date == "2026-01-09"
        assert extraction.when.time == "09:00"
        assert extraction.when.time_preference == TimePreference.MORNING
        assert extraction.duration.value == 15
        assert extraction.aspect.value == LifeAspect.FINANCIAL
        assert extraction.reasoning == "Rent is a bill"

    def test_no_json(self):
        assert parse_extraction_response("no idea") is None
        assert parse_extraction_response("") is None
        assert parse_extraction_response(None) is None

    def test_malformed_json(self):
        assert parse_extraction_response("{what: nope}") is None

    def test_invalid_fields_are_nulled(self):
        extraction = parse_extraction_response(json.dumps({
            "what": {"value": "", "confidence": 0.9},
            "when": {"date": "2026-02-30", "time": "7pm", "timePreference": "dawn", "confidence": 0.8},
            "duration": {"value": True, "confidence": 0.9},
            "aspect": {"value": "hobbies", "confidence": 0.9},
            "who": "solo",
        }))
        assert extraction.what is None
        assert extraction.when.date is None
        assert extraction.when.time is None
        assert extraction.when.time_preference == TimePreference.ANYTIME
        assert extraction.duration is None
        assert extraction.aspect is None
        assert extraction.who is None

    def test_confidence_is_clamped(self):
        extraction = parse_extraction_response(json.dumps({
            "what": {"value": "Run", "confidence": 1.7},
            "where": {"value": "Park", "confidence": "high"},
        }))
        assert extraction.what.confidence == 1.0
        assert extraction.where.confidence == 0.0

    def test_negative_duration_is_dropped(self):
        extraction = parse_extraction_response(json.dumps({"duration": {"value": -30, "confidence": 0.9}}))
        assert extraction.duration is None


class TestMergeExtraction:
    """Test that language-model values only win when strictly more confident."""

    @pytest.fixture
    def rule_result(self):
        return ParsedResult(
            what=TextSlot(value="Call client", confidence=0.5),
            intent=AspectSlot(value=LifeAspect.CAREER, confidence=0.4),
            when=WhenSlot(date=TextSlot(value="2026-01-08", confidence=0.98)),
        )

    def test_more_confident_values_win(self, rule_result):
        extraction = parse_extraction_response(json.dumps({
            "what": {"value": "Call client about invoice", "confidence": 0.8},
            "aspect": {"value": "career", "confidence": 0.9},
        }))
        updates, overridden = merge_extraction(rule_result, extraction)

        assert overridden is True
        assert updates["what"].value == "Call client about invoice"
        assert updates["what"].source == SlotSource.LLM
        assert updates["intent"].value == LifeAspect.CAREER
        assert updates["intent"].confidence == pytest.approx(0.9)

    def test_ties_keep_rule_value(self, rule_result):
        extraction = parse_extraction_response(json.dumps({
            "what": {"value": "Something else", "confidence": 0.5},
            "when": {"date": "2026-01-10", "confidence": 0.98},
        }))
        updates, overridden = merge_extraction(rule_result, extraction)
        assert updates == {}
        assert overridden is False

    def test_when_parts_merge_independently(self, rule_result):
        extraction = parse_extraction_response(json.dumps({
            "when": {"date": "2026-01-10", "time": "15:00", "timePreference": "afternoon", "confidence": 0.9},
        }))
        updates, _ = merge_extraction(rule_result, extraction)
        when = updates["when"]
        assert when.date.value == "2026-01-08"
        assert when.date.source == SlotSource.RULE
        assert when.time.value == "15:00"
        assert when.time.source == SlotSource.LLM
        assert when.time_preference.value == TimePreference.AFTERNOON

    def test_anytime_preference_is_not_merged(self):
        extraction = parse_extraction_response(json.dumps({
            "when": {"timePreference": "whenever", "confidence": 0.9},
        }))
        updates, overridden = merge_extraction(ParsedResult(), extraction)
        assert "when" not in updates
        assert overridden is False

    def test_absent_slots_are_filled(self):
        extraction = parse_extraction_response(json.dumps({
            "who": {"value": "my team", "confidence": 0.6},
            "duration": {"value": 45.4, "confidence": 0.6},
        }))
        updates, overridden = merge_extraction(ParsedResult(), extraction)
        assert overridden is True
        assert updates["who"].who_type == WhoType.TEAM
        assert updates["duration"].value == 45


class TestExtractionPrompt:
    """Test prompt construction."""

    def test_prompt_carries_text_date_and_rule_slots(self, today):
        rule_result = ParsedResult(what=TextSlot(value="Call client", confidence=0.5))
        prompt = build_extraction_prompt("p1 call client tomorrow 3pm", rule_result, today)
        assert "p1 call client tomorrow 3pm" in prompt
        assert "2026-01-07" in prompt
        assert '"Call client"' in prompt


class TestOutOfRangeTimes:
    """Test that impossible clock times never reach a result."""

    @pytest.mark.parametrize("time_value", ["25:99", "24:00", "12:60"])
    def test_time_is_dropped(self, time_value):
        extraction = parse_extraction_response(json.dumps({
            "when": {"date": "2026-01-09", "time": time_value, "confidence": 0.99},
        }))
        assert extraction.when.time is None
        assert extraction.when.date == "2026-01-09"

    def test_boundary_time_is_kept(self):
        extraction = parse_extraction_response(json.dumps({"when": {"time": "23:59", "confidence": 0.9}}))
        assert extraction.when.time == "23:59"

    def test_impossible_time_never_reaches_the_task(self, today):
        response = json.dumps({
            "what": {"value": "Pay rent", "confidence": 0.9},
            "when": {"time": "25:99", "confidence": 0.99},
        })
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=response), config=ParserConfig())
        enhanced = pipeline.enhance_result("asdkjasd", pipeline.parse("asdkjasd", today), today)

        assert enhanced.what.value == "Pay rent"
        assert enhanced.when is None
        assert enhanced.suggested_task.hard_scheduled_time is None
