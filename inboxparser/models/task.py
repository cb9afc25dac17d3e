"""Task data model for inboxparser."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from inboxparser.models.breakdown import TaskBreakdown
from inboxparser.models.enums import LifeAspect, TaskStatus, TimePreference, WhoType


class Task(BaseModel):
    """Task created from a capture."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    weekly_goal_id: Optional[str] = Field(None, description="Linked weekly goal, if matched")
    aspect: LifeAspect
    title: str = Field(..., min_length=1)
    scheduled_date: str = Field(..., description="YYYY-MM-DD")
    time_preference: TimePreference = TimePreference.ANYTIME
    hard_scheduled_time: Optional[str] = Field(None, description="HH:MM")
    duration_estimate: Optional[int] = Field(None, description="Minutes")
    location: Optional[str] = None
    who: str = "solo"
    who_type: WhoType = WhoType.SOLO
    priority: Optional[int] = Field(None, ge=1, le=4)
    status: TaskStatus = TaskStatus.PENDING
    source_text: Optional[str] = Field(None, description="Original capture text")
    parser_version: Optional[int] = None
    breakdown: Optional[TaskBreakdown] = None
    created_at: datetime
    updated_at: datetime
