"""Confidence scoring and field-action policy.

Aggregate confidence is a weighted mean over the slots that are present;
absent slots contribute to neither numerator nor denominator.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from inboxparser.models.constants import (
    AUTO_FILL_THRESHOLD,
    HIGH_CONFIDENCE_THRESHOLD,
    MEDIUM_CONFIDENCE_THRESHOLD,
    SLOT_WEIGHTS,
    SUGGEST_THRESHOLD,
)
from inboxparser.models.enums import ConfidenceLevel, FieldAction, TimePreference, WhoType
from inboxparser.models.parsed import ParsedResult, Slot, SuggestedTask

logger = logging.getLogger(__name__)


def _weighted_slots(result: ParsedResult) -> Dict[str, Optional[Slot]]:
    when = result.when
    return {
        "what": result.what,
        "intent": result.intent,
        "date": when.date if when else None,
        "time": when.time if when else None,
        "where": result.where,
        "duration": result.duration,
        "priority": result.priority,
        "who": result.who,
    }


def calculate_overall_confidence(result: ParsedResult) -> float:
    """Weighted mean of present slot confidences, 0.0 when nothing is present."""
    total_weight = 0.0
    weighted_sum = 0.0
    for name, slot in _weighted_slots(result).items():
        if slot is None:
            continue
        weighted_sum += slot.confidence * SLOT_WEIGHTS[name]
        total_weight += SLOT_WEIGHTS[name]
    if total_weight == 0:
        return 0.0
    return round(weighted_sum / total_weight, 4)


def get_confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def get_action(confidence: Optional[float], auto_fill_threshold: float = AUTO_FILL_THRESHOLD) -> FieldAction:
    """Per-field policy: auto-fill, suggest, or ask for manual entry."""
    if not confidence:
        return FieldAction.MANUAL
    if confidence >= auto_fill_threshold:
        return FieldAction.AUTO
    if confidence >= SUGGEST_THRESHOLD:
        return FieldAction.SUGGEST
    return FieldAction.MANUAL


def _confidence(slot: Optional[Slot]) -> Optional[float]:
    return slot.confidence if slot is not None else None


def get_field_actions(result: ParsedResult, auto_fill_threshold: float = AUTO_FILL_THRESHOLD) -> Dict[str, FieldAction]:
    when = result.when
    return {
        "title": get_action(_confidence(result.what), auto_fill_threshold),
        "aspect": get_action(_confidence(result.intent), auto_fill_threshold),
        "date": get_action(_confidence(when.date) if when else None, auto_fill_threshold),
        "time": get_action(_confidence(when.time) if when else None, auto_fill_threshold),
        "time_preference": get_action(_confidence(when.time_preference) if when else None, auto_fill_threshold),
        "location": get_action(_confidence(result.where), auto_fill_threshold),
        "duration": get_action(_confidence(result.duration), auto_fill_threshold),
    }


def _meets(slot: Optional[Slot], threshold: float = SUGGEST_THRESHOLD) -> bool:
    return slot is not None and slot.confidence >= threshold


def is_actionable(result: ParsedResult) -> bool:
    """Activity and aspect both clear the suggest threshold."""
    return _meets(result.what) and _meets(result.intent)


def get_missing_fields(result: ParsedResult) -> List[str]:
    missing = []
    if not _meets(result.what):
        missing.append("activity")
    if not _meets(result.intent):
        missing.append("category")
    if not _meets(result.when.date if result.when else None):
        missing.append("date")
    return missing


def get_suggestions(result: ParsedResult) -> List[str]:
    """Hints for improving a capture."""
    suggestions = []
    has_date = result.when is not None and result.when.date is not None
    has_time = result.when is not None and result.when.time is not None
    if result.what is None:
        suggestions.append("What specific action will you take?")
    if result.intent is None:
        suggestions.append("What area of life does this relate to?")
    if not has_date:
        suggestions.append("When will you do this?")
    if has_date and not has_time:
        suggestions.append("Adding a specific time increases follow-through.")
    if result.duration is None:
        suggestions.append("How long will this take?")
    return suggestions


def build_suggested_task(result: ParsedResult, default_date: date) -> SuggestedTask:
    """Project a parsed result onto a task, copying only slots that clear the suggest threshold."""
    when = result.when
    date_slot = when.date if when else None
    time_slot = when.time if when else None
    pref_slot = when.time_preference if when else None

    return SuggestedTask(
        title=result.what.value if _meets(result.what) else None,
        aspect=result.intent.value if _meets(result.intent) else None,
        scheduled_date=date_slot.value if _meets(date_slot) else default_date.isoformat(),
        hard_scheduled_time=time_slot.value if _meets(time_slot) else None,
        time_preference=pref_slot.value if _meets(pref_slot) else TimePreference.ANYTIME,
        duration_estimate=result.duration.value if _meets(result.duration) else None,
        location=result.where.value if _meets(result.where) else None,
        who=result.who.value if result.who is not None else "solo",
        who_type=result.who.who_type if result.who is not None else WhoType.SOLO,
        priority=result.priority.value if _meets(result.priority) else None,
        weekly_goal_id=result.goal_match.weekly_goal_id if result.goal_match else None,
    )


def should_show_quick_confirm(result: ParsedResult, auto_fill_threshold: float = AUTO_FILL_THRESHOLD) -> bool:
    """High aggregate confidence and both activity and aspect clear the auto-fill threshold."""
    return (
        result.overall_confidence >= HIGH_CONFIDENCE_THRESHOLD
        and _meets(result.what, auto_fill_threshold)
        and _meets(result.intent, auto_fill_threshold)
    )


def rescore(result: ParsedResult, today: date, **updates) -> ParsedResult:
    """Build a new result with the given fields replaced, recomputing every derived field.

    All slot replacement goes through here so the aggregate confidence, tier
    and suggested task never go stale.
    """
    updated = result.model_copy(update=updates)
    overall = calculate_overall_confidence(updated)
    updated = updated.model_copy(
        update={
            "overall_confidence": overall,
            "confidence_level": get_confidence_level(overall),
        }
    )
    return updated.model_copy(update={"suggested_task": build_suggested_task(updated, today)})
