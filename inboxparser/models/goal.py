"""Goal data models for inboxparser."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from inboxparser.models.enums import FrequencyPeriod, GoalLevel, GoalStatus, LifeAspect


class FrequencyGoal(BaseModel):
    """Structured recurrence target, e.g. train 4x per week."""

    target: int = Field(..., ge=1)
    period: FrequencyPeriod
    action: Optional[str] = Field(None, description="Action verb used for keyword matching")


class ParsedFrequency(FrequencyGoal):
    """Frequency parsed from a goal title, with parser confidence."""

    confidence: float = Field(..., ge=0.0, le=1.0)


class Goal(BaseModel):
    """Goal record from the goal store.

    `period` is "YYYY" for yearly, "YYYY-MM" for monthly and "YYYY-Www" for weekly goals.
    """

    id: str
    level: GoalLevel = GoalLevel.WEEKLY
    parent_id: Optional[str] = None
    aspect: LifeAspect
    title: str
    period: str
    status: GoalStatus = GoalStatus.ACTIVE
    frequency: Optional[FrequencyGoal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FrequencyProgress(BaseModel):
    """Linked-task count toward a frequency target in the current period."""

    current: int
    target: int
    period: FrequencyPeriod


class GoalMatch(BaseModel):
    """Candidate goal for a capture."""

    goal_id: str
    goal_title: str
    goal_level: GoalLevel = GoalLevel.WEEKLY
    weekly_goal_id: str
    match_confidence: float = Field(..., ge=0.0, le=1.0)
    match_reasons: List[str] = Field(default_factory=list)
    frequency_progress: Optional[FrequencyProgress] = None
