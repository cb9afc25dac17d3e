"""Slot analysis and clarification models."""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from inboxparser.models.enums import SlotInputType, SlotSource, SlotType


class SlotStatus(BaseModel):
    """Snapshot of one canonical slot."""

    slot: SlotType
    filled: bool
    confidence: float = 0.0
    value: Optional[Union[int, str]] = None
    source: Optional[SlotSource] = None


class SlotAnalysis(BaseModel):
    """Which mandatory slots are unmet and whether the capture can become a task."""

    slots: List[SlotStatus]
    missing_required: List[SlotType] = Field(default_factory=list)
    completeness: float = Field(0.0, ge=0.0, le=1.0)
    can_proceed: bool = False


class QuestionOption(BaseModel):
    value: str
    label: str


class SlotQuestion(BaseModel):
    """Follow-up question for a missing slot."""

    slot: SlotType
    question: str
    placeholder: Optional[str] = None
    input_type: SlotInputType = SlotInputType.TEXT
    options: Optional[List[QuestionOption]] = None
    required: bool = True
    context: Optional[str] = None


class ClarificationResult(BaseModel):
    """Questions plus how they were produced ("ai" or "rule")."""

    questions: List[SlotQuestion] = Field(default_factory=list)
    generation_method: str = "rule"
    context: Optional[str] = None
