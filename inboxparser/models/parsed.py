"""Parsed capture data models for inboxparser.

A ParsedResult is built once per capture. Slots are immutable; later stages
(language-model merge, clarification answers) replace them wholesale.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from inboxparser.models.breakdown import TaskBreakdown
from inboxparser.models.constants import PARSER_VERSION
from inboxparser.models.enums import (
    ConfidenceLevel,
    LifeAspect,
    ParsingMethod,
    SlotSource,
    TimePreference,
    WhoType,
)
from inboxparser.models.goal import GoalMatch

T = TypeVar("T")


class Slot(BaseModel, Generic[T]):
    """One extracted field with provenance."""

    model_config = ConfigDict(frozen=True)

    value: T
    raw_match: str = Field("", description="Original matched text")
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: SlotSource = SlotSource.RULE


TextSlot = Slot[str]
IntSlot = Slot[int]
AspectSlot = Slot[LifeAspect]
PreferenceSlot = Slot[TimePreference]


def make_slot(value, confidence: float, raw_match: str = "", source: SlotSource = SlotSource.RULE) -> Slot:
    """Slot parametrized by the type of its value."""
    if isinstance(value, LifeAspect):
        slot_class = AspectSlot
    elif isinstance(value, TimePreference):
        slot_class = PreferenceSlot
    elif isinstance(value, int):
        slot_class = IntSlot
    else:
        slot_class = TextSlot
    return slot_class(value=value, raw_match=raw_match, confidence=confidence, source=source)


class WhoSlot(TextSlot):
    """Companion slot with a categorical companion type."""

    who_type: WhoType = WhoType.SOLO


class WhenSlot(BaseModel):
    """Composite date/time slot. Any of the three parts may be absent."""

    model_config = ConfigDict(frozen=True)

    date: Optional[TextSlot] = Field(None, description="ISO date, e.g. 2026-01-07")
    time: Optional[TextSlot] = Field(None, description="24-hour clock time, e.g. 19:00")
    time_preference: Optional[PreferenceSlot] = None
    is_relative: bool = False

    def parts(self) -> List[Slot]:
        return [p for p in (self.date, self.time, self.time_preference) if p is not None]


class SuggestedTask(BaseModel):
    """Pre-built task projection from a parsed capture."""

    title: Optional[str] = None
    aspect: Optional[LifeAspect] = None
    scheduled_date: Optional[str] = None
    time_preference: TimePreference = TimePreference.ANYTIME
    hard_scheduled_time: Optional[str] = None
    duration_estimate: Optional[int] = None
    location: Optional[str] = None
    who: str = "solo"
    who_type: WhoType = WhoType.SOLO
    priority: Optional[int] = None
    weekly_goal_id: Optional[str] = None
    status: str = "pending"
    defer_count: int = 0
    is_subtask: bool = False


class RawExtractions(BaseModel):
    """Debug information about what the rule engine matched."""

    tokens: List[str] = Field(default_factory=list)
    matched_patterns: List[str] = Field(default_factory=list)


class ParsedResult(BaseModel):
    """Complete parsing result for one capture."""

    model_config = ConfigDict(frozen=True)

    what: Optional[TextSlot] = None
    when: Optional[WhenSlot] = None
    where: Optional[TextSlot] = None
    who: Optional[WhoSlot] = None
    duration: Optional[IntSlot] = None
    priority: Optional[IntSlot] = None
    intent: Optional[AspectSlot] = None

    goal_match: Optional[GoalMatch] = None
    alternative_goals: List[GoalMatch] = Field(default_factory=list)

    overall_confidence: float = Field(0.0, ge=0.0, le=1.0)
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    parsing_method: ParsingMethod = ParsingMethod.RULE
    processing_time_ms: float = 0.0

    suggested_task: SuggestedTask = Field(default_factory=SuggestedTask)
    suggested_breakdown: Optional[TaskBreakdown] = None
    raw_extractions: RawExtractions = Field(default_factory=RawExtractions)
    parser_version: int = PARSER_VERSION

    @property
    def is_stale(self) -> bool:
        """True if produced by an older rule set."""
        return self.parser_version < PARSER_VERSION
