"""Task creation factory for inboxparser.

Centralizes building a Task from a capture's suggested-task projection so
defaults stay consistent across the API and the pipeline.
"""

import uuid
from datetime import datetime
from typing import Optional

from inboxparser.models.breakdown import TaskBreakdown
from inboxparser.models.constants import PARSER_VERSION
from inboxparser.models.enums import TaskStatus, TimePreference, WhoType
from inboxparser.models.parsed import SuggestedTask
from inboxparser.models.task import Task


class IncompleteSuggestionError(ValueError):
    """Suggested task lacks a title or an aspect."""


def create_task_from_suggestion(
    suggested: SuggestedTask,
    source_text: Optional[str] = None,
    parser_version: int = PARSER_VERSION,
    breakdown: Optional[TaskBreakdown] = None,
    task_id: Optional[str] = None,
) -> Task:
    """Create a Task from a suggested-task projection.

    Args:
        suggested: Projection built from a parsed capture
        source_text: Original capture text, kept for re-parsing
        parser_version: Version of the rule set that produced the projection
        breakdown: Optional generated breakdown to attach
        task_id: Optional task ID (generates a UUID if not provided)

    Returns:
        Task instance

    Raises:
        IncompleteSuggestionError: If the projection has no title or no aspect
    """
    if not suggested.title or suggested.aspect is None:
        raise IncompleteSuggestionError("A task needs both a title and an aspect")
    if not suggested.scheduled_date:
        raise IncompleteSuggestionError("A task needs a scheduled date")

    now = datetime.utcnow()
    return Task(
        id=task_id or str(uuid.uuid4()),
        weekly_goal_id=suggested.weekly_goal_id,
        aspect=suggested.aspect,
        title=suggested.title,
        scheduled_date=suggested.scheduled_date,
        time_preference=suggested.time_preference or TimePreference.ANYTIME,
        hard_scheduled_time=suggested.hard_scheduled_time,
        duration_estimate=suggested.duration_estimate,
        location=suggested.location,
        who=suggested.who or "solo",
        who_type=suggested.who_type or WhoType.SOLO,
        priority=suggested.priority,
        status=TaskStatus.PENDING,
        source_text=source_text,
        parser_version=parser_version,
        breakdown=breakdown,
        created_at=now,
        updated_at=now,
    )
