"""Data models for inboxparser."""

from inboxparser.models.enums import (
    ConfidenceLevel,
    FieldAction,
    FrequencyPeriod,
    GoalLevel,
    GoalStatus,
    LifeAspect,
    LocationType,
    ParsingMethod,
    SlotInputType,
    SlotSource,
    SlotType,
    StepStatus,
    TaskStatus,
    TimePreference,
    TriggerType,
    WhoType,
)
from inboxparser.models.breakdown import DeepPromptOption, DeepPromptQuestion, TaskBreakdown, TaskStep
from inboxparser.models.goal import FrequencyGoal, FrequencyProgress, Goal, GoalMatch, ParsedFrequency
from inboxparser.models.parsed import ParsedResult, RawExtractions, Slot, SuggestedTask, WhenSlot, WhoSlot
from inboxparser.models.clarification import (
    ClarificationResult,
    QuestionOption,
    SlotAnalysis,
    SlotQuestion,
    SlotStatus,
)
from inboxparser.models.task import Task

__all__ = [
    "ConfidenceLevel",
    "FieldAction",
    "FrequencyPeriod",
    "GoalLevel",
    "GoalStatus",
    "LifeAspect",
    "LocationType",
    "ParsingMethod",
    "SlotInputType",
    "SlotSource",
    "SlotType",
    "StepStatus",
    "TaskStatus",
    "TimePreference",
    "TriggerType",
    "WhoType",
    "DeepPromptOption",
    "DeepPromptQuestion",
    "TaskBreakdown",
    "TaskStep",
    "FrequencyGoal",
    "FrequencyProgress",
    "Goal",
    "GoalMatch",
    "ParsedFrequency",
    "ParsedResult",
    "RawExtractions",
    "Slot",
    "SuggestedTask",
    "WhenSlot",
    "WhoSlot",
    "ClarificationResult",
    "QuestionOption",
    "SlotAnalysis",
    "SlotQuestion",
    "SlotStatus",
    "Task",
]
