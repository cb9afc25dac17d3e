"""Enumerations shared across inboxparser models."""

from enum import Enum


class LifeAspect(str, Enum):
    """Life aspect a capture belongs to."""
    FITNESS = "fitness"
    NUTRITION = "nutrition"
    CAREER = "career"
    FINANCIAL = "financial"
    SIDE_PROJECTS = "side-projects"
    CHORES = "chores"


class TimePreference(str, Enum):
    """Day-part preference for a task."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANYTIME = "anytime"


class SlotSource(str, Enum):
    """Where a slot value came from."""
    RULE = "rule"
    LLM = "llm"
    USER = "user"


class WhoType(str, Enum):
    """Companion classification."""
    SOLO = "solo"
    ONE_ON_ONE = "one-on-one"
    GROUP = "group"
    TEAM = "team"


class ConfidenceLevel(str, Enum):
    """Confidence tier used for UI affordances."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ParsingMethod(str, Enum):
    """Extraction method that produced a result."""
    RULE = "rule"
    LLM = "llm"
    HYBRID = "hybrid"


class FieldAction(str, Enum):
    """Per-field policy decision."""
    AUTO = "auto"
    SUGGEST = "suggest"
    MANUAL = "manual"


class SlotType(str, Enum):
    """Canonical clarification slots."""
    WHAT = "what"
    WHEN = "when"
    WHERE = "where"
    WHO = "who"
    WHY = "why"
    DURATION = "duration"


class SlotInputType(str, Enum):
    """Input widget hint for a clarification question."""
    TEXT = "text"
    SELECT = "select"
    DATETIME = "datetime"
    NUMBER = "number"


class LocationType(str, Enum):
    """Kind of place a location alias resolves to."""
    GYM = "gym"
    HOME = "home"
    OFFICE = "office"
    VENUE = "venue"
    ONLINE = "online"
    OTHER = "other"


class TriggerType(str, Enum):
    """Implementation-intention trigger classification."""
    TIME = "time"
    LOCATION = "location"
    EVENT = "event"
    COMPLETION = "completion"


class StepStatus(str, Enum):
    """Execution status of a breakdown step."""
    PENDING = "pending"
    DONE = "done"
    SKIPPED = "skipped"


class GoalLevel(str, Enum):
    """Goal hierarchy level."""
    YEARLY = "yearly"
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class GoalStatus(str, Enum):
    """Goal lifecycle status."""
    ACTIVE = "active"
    PAUSED = "paused"
    ACHIEVED = "achieved"
    ABANDONED = "abandoned"


class FrequencyPeriod(str, Enum):
    """Recurrence period for frequency goals."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    DONE = "done"
    SKIPPED = "skipped"
    DEFERRED = "deferred"
