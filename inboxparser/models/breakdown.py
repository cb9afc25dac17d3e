"""Task breakdown models (trigger -> steps -> completion)."""

from typing import List, Optional

from pydantic import BaseModel, Field

from inboxparser.models.enums import LifeAspect, StepStatus, TriggerType


class TaskStep(BaseModel):
    """Individual step within a task breakdown."""

    id: str
    title: str
    duration: Optional[int] = Field(None, description="Minutes")
    order: int
    status: StepStatus = StepStatus.PENDING
    scheduled_time: Optional[str] = Field(None, description="HH:MM, for calendar display")


class TaskBreakdown(BaseModel):
    """Implementation-intention plan for a task."""

    trigger: str
    trigger_type: TriggerType
    environmental_cue: Optional[str] = None
    steps: List[TaskStep] = Field(default_factory=list)
    completion_criteria: str
    satisfaction_check: Optional[str] = None


class DeepPromptOption(BaseModel):
    """Selectable answer for a deep prompt."""

    value: str
    label: str
    default_duration: Optional[int] = None


class DeepPromptQuestion(BaseModel):
    """Sub-activity question asked before generating a breakdown."""

    id: str
    aspect: LifeAspect
    question_key: str
    question: str
    options: List[DeepPromptOption]
    required: bool = True
    order: int
