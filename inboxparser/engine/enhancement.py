"""Language-model extraction: prompt, response validation and merge-by-confidence.

The rule-based result is sent along as context. The response is salvaged
field by field; an invalid field is dropped, never the whole response.
"""

import json
import logging
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field

from inboxparser.extractors.who_extractor import classify_who_type
from inboxparser.models.enums import LifeAspect, SlotSource, TimePreference
from inboxparser.models.parsed import ParsedResult, Slot, WhenSlot, WhoSlot, make_slot

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are an NLP entity extraction system for a Malaysian personal task manager.

Extract structured information from the user's natural language input.

USER INPUT: "{text}"

EXISTING EXTRACTIONS (from rule-based parser):
{rule_extractions}

Return ONLY valid JSON with this exact structure (no markdown, no explanation):
{{
  "what": {{"value": "activity description", "confidence": 0.0-1.0}},
  "when": {{
    "date": "YYYY-MM-DD or null",
    "time": "HH:MM or null",
    "timePreference": "morning|afternoon|evening|anytime",
    "confidence": 0.0-1.0
  }},
  "where": {{"value": "location or null", "confidence": 0.0-1.0}},
  "who": {{"value": "people involved or null", "confidence": 0.0-1.0}},
  "duration": {{"value": null, "confidence": 0.0-1.0}},
  "aspect": {{"value": "fitness|nutrition|career|financial|side-projects|chores", "confidence": 0.0-1.0}},
  "reasoning": "brief explanation of extraction logic"
}}

CONTEXT:
- Current date: {today}
- Timezone: Asia/Kuala_Lumpur (UTC+8)
- Known locations: Bunker KD (gym), various Malaysian areas

IMPORTANT:
- Only fill fields you're confident about
- Return null for uncertain fields
- Malaysian context: "bunker" = gym, "kd" = Kota Damansara
- Training keywords -> fitness aspect
- Be conservative with confidence scores
- Duration value should be a number (minutes) or null"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME = re.compile(r"^\d{2}:\d{2}$")


class ExtractedValue(BaseModel):
    value: Any
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class ExtractedWhen(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = None
    time_preference: Optional[TimePreference] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class LLMExtraction(BaseModel):
    """Validated language-model extraction. Absent fields are None."""

    what: Optional[ExtractedValue] = None
    when: Optional[ExtractedWhen] = None
    where: Optional[ExtractedValue] = None
    who: Optional[ExtractedValue] = None
    duration: Optional[ExtractedValue] = None
    aspect: Optional[ExtractedValue] = None
    reasoning: Optional[str] = None


def build_extraction_prompt(text: str, rule_result: ParsedResult, today: date) -> str:
    rule_extractions = rule_result.model_dump(
        mode="json",
        include={"what", "when", "where", "who", "duration", "intent"},
        exclude_none=True,
    )
    return EXTRACTION_PROMPT.format(
        text=text,
        rule_extractions=json.dumps(rule_extractions, indent=2),
        today=today.isoformat(),
    )


def _clamp(value: Any) -> float:
    try:
        return max(0.0, min(1.0, float(value)))
    except (TypeError, ValueError):
        return 0.0


def _string_field(data: Dict[str, Any], key: str) -> Optional[ExtractedValue]:
    field = data.get(key)
    if not isinstance(field, dict):
        return None
    value = field.get("value")
    if not isinstance(value, str) or not value.strip():
        return None
    return ExtractedValue(value=value.strip(), confidence=_clamp(field.get("confidence")))


def _aspect_field(data: Dict[str, Any]) -> Optional[ExtractedValue]:
    field = _string_field(data, "aspect")
    if field is None:
        return None
    try:
        return ExtractedValue(value=LifeAspect(field.value.lower()), confidence=field.confidence)
    except ValueError:
        logger.warning(f"Dropping invalid aspect {field.value!r} from language-model response")
        return None


def _duration_field(data: Dict[str, Any]) -> Optional[ExtractedValue]:
    field = data.get("duration")
    if not isinstance(field, dict):
        return None
    value = field.get("value")
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return ExtractedValue(value=int(round(value)), confidence=_clamp(field.get("confidence")))


def _when_field(data: Dict[str, Any]) -> Optional[ExtractedWhen]:
    field = data.get("when")
    if not isinstance(field, dict):
        return None

    date_value = field.get("date")
    if not isinstance(date_value, str) or not _DATE.match(date_value):
        date_value = None
    elif not _is_real_date(date_value):
        date_value = None

    time_value = field.get("time")
    if not isinstance(time_value, str) or not _TIME.match(time_value):
        time_value = None
    elif not _is_real_time(time_value):
        time_value = None

    preference = None
    raw_preference = field.get("timePreference", field.get("time_preference"))
    if raw_preference is not None:
        try:
            preference = TimePreference(str(raw_preference).lower())
        except ValueError:
            preference = TimePreference.ANYTIME

    if date_value is None and time_value is None and preference is None:
        return None
    return ExtractedWhen(
        date=date_value,
        time=time_value,
        time_preference=preference,
        confidence=_clamp(field.get("confidence")),
    )


def _is_real_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        return False


def _is_real_time(value: str) -> bool:
    hours, minutes = (int(part) for part in value.split(":"))
    return hours <= 23 and minutes <= 59


def parse_extraction_response(response: Optional[str]) -> Optional[LLMExtraction]:
    """Validate the first JSON object in a free-text response.

    Returns:
        LLMExtraction with invalid fields nulled, or None if no JSON object was found
    """
    if not response:
        return None
    match = _JSON_OBJECT.search(response)
    if not match:
        logger.warning("Language-model response did not contain a JSON object")
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse language-model JSON: {e}")
        return None
    if not isinstance(data, dict):
        return None

    reasoning = data.get("reasoning")
    return LLMExtraction(
        what=_string_field(data, "what"),
        when=_when_field(data),
        where=_string_field(data, "where"),
        who=_string_field(data, "who"),
        duration=_duration_field(data),
        aspect=_aspect_field(data),
        reasoning=reasoning if isinstance(reasoning, str) else None,
    )


def _wins(candidate_confidence: float, existing: Optional[Slot]) -> bool:
    # Ties keep the existing value
    return existing is None or candidate_confidence > existing.confidence


def _llm_slot(value, confidence: float, raw: Optional[str] = None) -> Slot:
    return make_slot(value, confidence, raw if raw is not None else str(value), SlotSource.LLM)


def _merge_when(existing: Optional[WhenSlot], extracted: ExtractedWhen) -> Optional[WhenSlot]:
    when = existing or WhenSlot()
    updates: Dict[str, Any] = {}
    confidence = extracted.confidence

    if extracted.date and _wins(confidence, when.date):
        updates["date"] = _llm_slot(extracted.date, confidence)
        updates["is_relative"] = False
    if extracted.time and _wins(confidence, when.time):
        updates["time"] = _llm_slot(extracted.time, confidence)
    if (
        extracted.time_preference is not None
        and extracted.time_preference != TimePreference.ANYTIME
        and _wins(confidence, when.time_preference)
    ):
        updates["time_preference"] = _llm_slot(extracted.time_preference, confidence)

    if not updates:
        return None
    return when.model_copy(update=updates)


def merge_extraction(rule_result: ParsedResult, extraction: LLMExtraction) -> Tuple[Dict[str, Any], bool]:
    """Slot replacements where the language model is strictly more confident.

    Returns:
        (updates for rescore, whether any slot was overridden)
    """
    updates: Dict[str, Any] = {}

    if extraction.what is not None and _wins(extraction.what.confidence, rule_result.what):
        updates["what"] = _llm_slot(extraction.what.value, extraction.what.confidence)

    if extraction.aspect is not None and _wins(extraction.aspect.confidence, rule_result.intent):
        updates["intent"] = _llm_slot(extraction.aspect.value, extraction.aspect.confidence, extraction.aspect.value.value)

    if extraction.when is not None:
        when = _merge_when(rule_result.when, extraction.when)
        if when is not None:
            updates["when"] = when

    if extraction.where is not None and _wins(extraction.where.confidence, rule_result.where):
        updates["where"] = _llm_slot(extraction.where.value, extraction.where.confidence)

    if extraction.duration is not None and _wins(extraction.duration.confidence, rule_result.duration):
        updates["duration"] = _llm_slot(extraction.duration.value, extraction.duration.confidence)

    if extraction.who is not None and _wins(extraction.who.confidence, rule_result.who):
        updates["who"] = WhoSlot(
            value=extraction.who.value,
            raw_match=extraction.who.value,
            confidence=extraction.who.confidence,
            source=SlotSource.LLM,
            who_type=classify_who_type(extraction.who.value),
        )

    if updates:
        logger.debug(f"Language model overrode slots: {', '.join(sorted(updates))}")
    return updates, bool(updates)
