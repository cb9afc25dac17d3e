"""Slot analysis over the six canonical slots.

what/when/where/who/why are mandatory at a minimum confidence of 0.5;
duration is optional.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from inboxparser.models.clarification import SlotAnalysis, SlotStatus
from inboxparser.models.constants import MIN_SLOT_CONFIDENCE
from inboxparser.models.enums import SlotType
from inboxparser.models.parsed import ParsedResult, Slot, WhenSlot


@dataclass(frozen=True)
class SlotRequirement:
    required: bool
    min_confidence: float
    label: str


SLOT_REQUIREMENTS: Dict[SlotType, SlotRequirement] = {
    SlotType.WHAT: SlotRequirement(True, MIN_SLOT_CONFIDENCE, "Activity"),
    SlotType.WHEN: SlotRequirement(True, MIN_SLOT_CONFIDENCE, "Time"),
    SlotType.WHERE: SlotRequirement(True, MIN_SLOT_CONFIDENCE, "Location"),
    SlotType.WHO: SlotRequirement(True, MIN_SLOT_CONFIDENCE, "People"),
    SlotType.WHY: SlotRequirement(True, MIN_SLOT_CONFIDENCE, "Life Aspect"),
    SlotType.DURATION: SlotRequirement(False, MIN_SLOT_CONFIDENCE, "Duration"),
}


def is_when_satisfied(when: Optional[WhenSlot], min_confidence: float = MIN_SLOT_CONFIDENCE) -> bool:
    """Any one of date, clock time or day-part preference clearing the threshold is enough."""
    if when is None:
        return False
    return any(part.confidence >= min_confidence for part in when.parts())


def describe_when(when: Optional[WhenSlot]) -> Optional[str]:
    """Display string: "2026-01-07 at 19:00", "2026-01-07 (evening)", "at 19:00" or "evening"."""
    if when is None:
        return None
    if when.date is not None:
        if when.time is not None:
            return f"{when.date.value} at {when.time.value}"
        if when.time_preference is not None:
            return f"{when.date.value} ({when.time_preference.value.value})"
        return when.date.value
    if when.time is not None:
        return f"at {when.time.value}"
    if when.time_preference is not None:
        return when.time_preference.value.value
    return None


def _simple_status(slot_type: SlotType, slot: Optional[Slot]) -> SlotStatus:
    requirement = SLOT_REQUIREMENTS[slot_type]
    if slot is None:
        return SlotStatus(slot=slot_type, filled=False)
    return SlotStatus(
        slot=slot_type,
        filled=slot.confidence >= requirement.min_confidence,
        confidence=slot.confidence,
        value=slot.value.value if isinstance(slot.value, Enum) else slot.value,
        source=slot.source,
    )


def get_slot_status(result: ParsedResult, slot_type: SlotType) -> SlotStatus:
    if slot_type == SlotType.WHEN:
        when = result.when
        parts = when.parts() if when is not None else []
        return SlotStatus(
            slot=SlotType.WHEN,
            filled=is_when_satisfied(when, SLOT_REQUIREMENTS[SlotType.WHEN].min_confidence),
            confidence=max((p.confidence for p in parts), default=0.0),
            value=describe_when(when),
            source=parts[0].source if parts else None,
        )
    slot_by_type = {
        SlotType.WHAT: result.what,
        SlotType.WHERE: result.where,
        SlotType.WHO: result.who,
        SlotType.WHY: result.intent,
        SlotType.DURATION: result.duration,
    }
    return _simple_status(slot_type, slot_by_type[slot_type])


def analyze_slots(result: ParsedResult) -> SlotAnalysis:
    """Per-slot snapshot, unmet mandatory slots, completeness and the can-proceed gate."""
    statuses: List[SlotStatus] = []
    missing: List[SlotType] = []
    for slot_type, requirement in SLOT_REQUIREMENTS.items():
        status = get_slot_status(result, slot_type)
        statuses.append(status)
        if requirement.required and not status.filled:
            missing.append(slot_type)

    required = [s for s in statuses if SLOT_REQUIREMENTS[s.slot].required]
    filled = sum(1 for s in required if s.filled)
    completeness = filled / len(required) if required else 0.0

    return SlotAnalysis(
        slots=statuses,
        missing_required=missing,
        completeness=round(completeness, 4),
        can_proceed=not missing,
    )


def can_create_item(analysis: SlotAnalysis) -> bool:
    return analysis.can_proceed


def get_slot_label(slot: SlotType) -> str:
    return SLOT_REQUIREMENTS[SlotType(slot)].label


def is_slot_required(slot: SlotType) -> bool:
    return SLOT_REQUIREMENTS[SlotType(slot)].required


def get_slot_priority() -> List[SlotType]:
    """Slot types in order of importance."""
    return [SlotType.WHAT, SlotType.WHEN, SlotType.WHERE, SlotType.WHO, SlotType.WHY, SlotType.DURATION]


def get_slot_summary(analysis: SlotAnalysis) -> Dict[str, list]:
    filled = [
        {"slot": s.slot, "value": s.value}
        for s in analysis.slots
        if s.filled and s.value is not None
    ]
    return {"filled": filled, "missing": list(analysis.missing_required)}
