"""SQLAlchemy database models for inboxparser."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey

from typing import Union, TypeVar, Type
from inboxparser.database.database import Base
from inboxparser.models.enums import (
    GoalLevel,
    GoalStatus,
    LifeAspect,
    TaskStatus,
    TimePreference,
    WhoType,
)

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class GoalDB(Base):
    """Database model for a yearly, monthly or weekly goal."""

    __tablename__ = "goals"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    level = Column(String, nullable=False, default=GoalLevel.WEEKLY.value, index=True)
    parent_id = Column(String, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True)

    aspect = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    # "YYYY", "YYYY-MM" or "YYYY-Www" depending on level
    period = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default=GoalStatus.ACTIVE.value)

    # Structured frequency target {"target", "period", "action"}
    frequency = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from inboxparser.models.goal import FrequencyGoal, Goal

        return Goal(
            id=self.id,
            level=value_to_enum(self.level, GoalLevel, GoalLevel.WEEKLY),
            parent_id=self.parent_id,
            aspect=LifeAspect(self.aspect),
            title=self.title,
            period=self.period,
            status=value_to_enum(self.status, GoalStatus, GoalStatus.ACTIVE),
            frequency=FrequencyGoal(**self.frequency) if self.frequency else None,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, goal):
        """Create database model from Pydantic model."""
        return cls(
            id=goal.id,
            level=enum_to_value(goal.level),
            parent_id=goal.parent_id,
            aspect=enum_to_value(goal.aspect),
            title=goal.title,
            period=goal.period,
            status=enum_to_value(goal.status),
            frequency=goal.frequency.model_dump(mode="json") if goal.frequency else None,
            created_at=goal.created_at or datetime.utcnow(),
            updated_at=goal.updated_at or datetime.utcnow(),
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    weekly_goal_id = Column(String, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True)

    aspect = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    # ISO date string, compared lexicographically for range queries
    scheduled_date = Column(String, nullable=False, index=True)
    time_preference = Column(String, nullable=False, default=TimePreference.ANYTIME.value)
    hard_scheduled_time = Column(String, nullable=True)
    duration_estimate = Column(Integer, nullable=True)
    location = Column(String, nullable=True)
    who = Column(String, nullable=False, default="solo")
    who_type = Column(String, nullable=False, default=WhoType.SOLO.value)
    priority = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value)

    # Capture provenance
    source_text = Column(String, nullable=True)
    parser_version = Column(Integer, nullable=True)

    breakdown = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from inboxparser.models.breakdown import TaskBreakdown
        from inboxparser.models.task import Task

        return Task(
            id=self.id,
            weekly_goal_id=self.weekly_goal_id,
            aspect=LifeAspect(self.aspect),
            title=self.title,
            scheduled_date=self.scheduled_date,
            time_preference=value_to_enum(self.time_preference, TimePreference, TimePreference.ANYTIME),
            hard_scheduled_time=self.hard_scheduled_time,
            duration_estimate=self.duration_estimate,
            location=self.location,
            who=self.who,
            who_type=value_to_enum(self.who_type, WhoType, WhoType.SOLO),
            priority=self.priority,
            status=value_to_enum(self.status, TaskStatus, TaskStatus.PENDING),
            source_text=self.source_text,
            parser_version=self.parser_version,
            breakdown=TaskBreakdown(**self.breakdown) if self.breakdown else None,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            weekly_goal_id=task.weekly_goal_id,
            aspect=enum_to_value(task.aspect),
            title=task.title,
            scheduled_date=task.scheduled_date,
            time_preference=enum_to_value(task.time_preference),
            hard_scheduled_time=task.hard_scheduled_time,
            duration_estimate=task.duration_estimate,
            location=task.location,
            who=task.who,
            who_type=enum_to_value(task.who_type),
            priority=task.priority,
            status=enum_to_value(task.status),
            source_text=task.source_text,
            parser_version=task.parser_version,
            breakdown=task.breakdown.model_dump(mode="json") if task.breakdown else None,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
