"""Clarification questions for missing slots, and merging the answers back.

Questions come from the language-model service when it is reachable, with
fixed templates as the fallback. Answers are merged at full confidence and
every derived field is recomputed.
"""

import json
import logging
import re
from datetime import date
from typing import Dict, List, Optional

from inboxparser.engine.confidence import rescore
from inboxparser.engine.slot_analyzer import get_slot_label
from inboxparser.extractors.date_extractor import extract_date
from inboxparser.extractors.regional import get_today
from inboxparser.extractors.time_extractor import extract_time
from inboxparser.extractors.who_extractor import classify_who_type
from inboxparser.models.clarification import (
    ClarificationResult,
    QuestionOption,
    SlotAnalysis,
    SlotQuestion,
)
from inboxparser.models.constants import ASPECT_LABELS, USER_CONFIDENCE
from inboxparser.models.enums import LifeAspect, SlotInputType, SlotSource, SlotType
from inboxparser.models.parsed import ParsedResult, Slot, WhenSlot, WhoSlot, make_slot

logger = logging.getLogger(__name__)


class ClarificationError(ValueError):
    """Raised for answers addressed to an unknown slot."""


ASPECT_OPTIONS = [QuestionOption(value=aspect.value, label=label) for aspect, label in ASPECT_LABELS.items()]

# question, placeholder, variants keyed by aspect value, "has_location" or "default"
QUESTION_TEMPLATES: Dict[SlotType, dict] = {
    SlotType.WHAT: {
        "question": "What specifically will you do?",
        "placeholder": "e.g., Sparring session, Team meeting, Cook dinner",
        "variants": {
            "fitness": "What's the training focus?",
            "nutrition": "What meal or food activity?",
            "career": "What work task specifically?",
            "side-projects": "What project activity?",
            "chores": "What chore needs doing?",
            "financial": "What financial task?",
        },
    },
    SlotType.WHEN: {
        "question": "When will you do this?",
        "placeholder": "e.g., Today at 7pm, Tomorrow morning, Next Monday",
        "variants": {"has_location": "What time at {location}?"},
    },
    SlotType.WHERE: {
        "question": "Where will this happen?",
        "placeholder": "e.g., Home, Bunker gym, Office",
        "variants": {
            "fitness": "Which gym or training location?",
            "nutrition": "Where will you cook/eat?",
            "career": "Office, home, or meeting venue?",
        },
    },
    SlotType.WHO: {
        "question": "Who's involved?",
        "placeholder": "e.g., Solo, With trainer, Team meeting",
        "variants": {
            "fitness": "Training solo or with someone?",
            "career": "Who's in this meeting/task?",
            "default": "Just you, or with others?",
        },
    },
    SlotType.WHY: {
        "question": "What area of life is this for?",
        "placeholder": "Select a life aspect",
        "variants": {},
    },
    SlotType.DURATION: {
        "question": "How long will this take?",
        "placeholder": "e.g., 30 minutes, 1 hour, 2 hours",
        "variants": {},
    },
}

QUESTION_PROMPT = """You are helping a user create a task from natural language input.

USER INPUT: "{text}"

ALREADY EXTRACTED:
{known}

MISSING REQUIRED INFORMATION: {missing_labels}

Generate 1 short, natural question for each missing field. Questions should:
1. Be contextual - reference what's already known
2. Be conversational - not formal or robotic
3. Include a helpful example in parentheses
4. Be specific to the activity type if known

Respond in this exact JSON format:
{{
  "questions": [
    {{
      "slot": "what|when|where|who|why|duration",
      "question": "Your question here",
      "placeholder": "example answer"
    }}
  ],
  "context": "Brief reasoning about the questions"
}}

Only include questions for: {missing_slots}"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def get_input_type_for_slot(slot: SlotType) -> SlotInputType:
    if slot == SlotType.WHY:
        return SlotInputType.SELECT
    if slot == SlotType.WHEN:
        return SlotInputType.DATETIME
    if slot == SlotType.DURATION:
        return SlotInputType.NUMBER
    return SlotInputType.TEXT


def _make_question(slot: SlotType, question: str, placeholder: Optional[str], context: Optional[str] = None) -> SlotQuestion:
    return SlotQuestion(
        slot=slot,
        question=question,
        placeholder=placeholder,
        input_type=get_input_type_for_slot(slot),
        options=list(ASPECT_OPTIONS) if slot == SlotType.WHY else None,
        required=True,
        context=context,
    )


def build_known_summary(analysis: SlotAnalysis) -> str:
    """Bullet list of filled slots, aspects shown with their labels."""
    lines = []
    for status in analysis.slots:
        if not status.filled or status.value is None:
            continue
        display = str(status.value)
        if status.slot == SlotType.WHY:
            try:
                display = ASPECT_LABELS[LifeAspect(status.value)]
            except ValueError:
                pass
        lines.append(f"- {get_slot_label(status.slot)}: {display}")
    return "\n".join(lines)


def generate_rule_based_questions(result: ParsedResult, analysis: SlotAnalysis) -> ClarificationResult:
    """Template questions, phrased for the detected aspect or location where possible."""
    # Aspect phrasing only once the aspect itself is no longer missing
    aspect = None
    if SlotType.WHY not in analysis.missing_required and result.intent is not None:
        aspect = result.intent.value.value
    location = result.where.value if result.where is not None else None

    questions = []
    for slot in analysis.missing_required:
        template = QUESTION_TEMPLATES[slot]
        variants = template["variants"]
        question = template["question"]
        if slot == SlotType.WHEN and location and "has_location" in variants:
            question = variants["has_location"].format(location=location)
        elif aspect and aspect in variants:
            question = variants[aspect]
        elif "default" in variants:
            question = variants["default"]
        questions.append(_make_question(slot, question, template["placeholder"]))

    return ClarificationResult(questions=questions, generation_method="rule")


def _parse_question_response(response: str, missing: List[SlotType]) -> Optional[ClarificationResult]:
    match = _JSON_OBJECT.search(response)
    if not match:
        logger.warning("Question response contained no JSON object")
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse question response JSON: {e}")
        return None

    raw_questions = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(raw_questions, list):
        return None

    context = data.get("context") if isinstance(data.get("context"), str) else None
    questions = []
    for item in raw_questions:
        if not isinstance(item, dict) or not isinstance(item.get("question"), str):
            continue
        try:
            slot = SlotType(item.get("slot"))
        except ValueError:
            continue
        # Drop anything that was not asked for
        if slot not in missing:
            continue
        placeholder = item.get("placeholder") or QUESTION_TEMPLATES[slot]["placeholder"]
        questions.append(_make_question(slot, item["question"], placeholder, context))

    if not questions:
        return None
    return ClarificationResult(questions=questions, generation_method="ai", context=context)


def generate_questions(
    text: str,
    result: ParsedResult,
    analysis: SlotAnalysis,
    llm_client=None,
    timeout: Optional[float] = None,
) -> ClarificationResult:
    """One question per unmet mandatory slot.

    Args:
        text: Original capture text
        result: Parsed result the analysis was computed from
        analysis: Output of analyze_slots
        llm_client: Optional client with check_connection() and complete(prompt, timeout)
        timeout: Seconds to wait for the language-model service

    Returns:
        ClarificationResult, generation_method "ai" or "rule"
    """
    missing = list(analysis.missing_required)
    if not missing:
        return ClarificationResult(questions=[], generation_method="rule")

    if llm_client is not None and llm_client.check_connection():
        prompt = QUESTION_PROMPT.format(
            text=text,
            known=build_known_summary(analysis) or "Nothing extracted yet",
            missing_labels=", ".join(get_slot_label(s) for s in missing),
            missing_slots=", ".join(s.value for s in missing),
        )
        response = llm_client.complete(prompt, timeout=timeout)
        if response:
            generated = _parse_question_response(response, missing)
            if generated is not None:
                return generated
        logger.info("Falling back to template questions")

    return generate_rule_based_questions(result, analysis)


def generate_follow_up_question(slot: SlotType) -> SlotQuestion:
    """Generic template question for a single slot."""
    try:
        slot = SlotType(slot)
    except ValueError:
        raise ClarificationError(f"Unknown slot: {slot}")
    template = QUESTION_TEMPLATES[slot]
    return _make_question(slot, template["question"], template["placeholder"])


_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h\b|jam)")
_MINUTES = re.compile(r"(\d+)\s*(?:minutes?|mins?|m\b|minit)")
_BARE_NUMBER = re.compile(r"^(\d+(?:\.\d+)?)$")


def parse_duration_string(value: str) -> Optional[int]:
    """Minutes from "90", "1.5 hours", "1 hour 30 minutes" or "45 min"; None if unrecognised."""
    normalized = (value or "").lower().strip()
    if normalized.isdigit():
        minutes = int(normalized)
        return minutes if minutes > 0 else None

    total = 0.0
    hours = _HOURS.search(normalized)
    if hours:
        total += float(hours.group(1)) * 60
    minutes = _MINUTES.search(normalized)
    if minutes:
        total += int(minutes.group(1))

    if total == 0:
        # Any other unit ("3 months") is unrecognised
        number = _BARE_NUMBER.match(normalized)
        if number:
            amount = float(number.group(1))
            # Small decimals read as hours ("1.5")
            total = amount * 60 if amount < 10 and "." in number.group(1) else amount

    result = int(round(total))
    return result if result > 0 else None


def _user_slot(value, raw: str) -> Slot:
    return make_slot(value, USER_CONFIDENCE, raw, SlotSource.USER)


def _merge_when(current: Optional[WhenSlot], answer: str, today: date) -> Optional[WhenSlot]:
    date_match = extract_date(answer, today)
    time_match = extract_time(answer)
    if date_match is None and time_match is None:
        return None

    when = current or WhenSlot()
    updates = {}
    if date_match is not None:
        updates["date"] = _user_slot(date_match.date, date_match.matched_text)
        updates["is_relative"] = date_match.is_relative
    if time_match is not None:
        if time_match.is_explicit:
            updates["time"] = _user_slot(time_match.time, time_match.matched_text)
        elif when.time is None:
            updates["time_preference"] = _user_slot(time_match.time_preference, time_match.matched_text)
    if not updates:
        return None
    return when.model_copy(update=updates)


def merge_answers(result: ParsedResult, answers: Dict[str, str], today: Optional[date] = None) -> ParsedResult:
    """Fold clarification answers into a new ParsedResult.

    Each accepted answer becomes a user-sourced slot at full confidence.
    Blank or unparseable answers leave their slot untouched.

    Raises:
        ClarificationError: If an answer names an unknown slot
    """
    today = today or get_today()
    updates = {}

    for name, raw in answers.items():
        try:
            slot = SlotType(name)
        except ValueError:
            raise ClarificationError(f"Unknown slot: {name}")
        value = (raw or "").strip()
        if not value:
            continue

        if slot == SlotType.WHAT or slot == SlotType.WHERE:
            updates[slot.value] = _user_slot(value, value)
        elif slot == SlotType.WHEN:
            when = _merge_when(updates.get("when", result.when), value, today)
            if when is None:
                logger.debug(f"Skipping unparseable when answer {value!r}")
                continue
            updates["when"] = when
        elif slot == SlotType.WHO:
            updates["who"] = WhoSlot(
                value=value,
                raw_match=value,
                confidence=USER_CONFIDENCE,
                source=SlotSource.USER,
                who_type=classify_who_type(value),
            )
        elif slot == SlotType.WHY:
            try:
                aspect = LifeAspect(value.lower())
            except ValueError:
                logger.debug(f"Skipping unknown aspect answer {value!r}")
                continue
            updates["intent"] = _user_slot(aspect, value)
        elif slot == SlotType.DURATION:
            minutes = parse_duration_string(value)
            if minutes is None:
                logger.debug(f"Skipping unparseable duration answer {value!r}")
                continue
            updates["duration"] = _user_slot(minutes, value)

    if not updates:
        return result
    return rescore(result, today, **updates)
