"""Goal matching for parsed captures.

Candidates are the active weekly goals of the resolved aspect only. Each is
scored by summing independent contributions:

1. Aspect match +0.3 (always true after the filter, kept for transparency)
2. Temporal containment (capture date inside the goal period) +0.3
3. Action keyword match +0.3, or a weaker title-substring fallback +0.2

Goals below 0.3 are dropped. Matching is advisory and never reserves capacity.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from inboxparser.extractors.regional import get_today
from inboxparser.models.constants import (
    GOAL_ASPECT_SCORE,
    GOAL_KEYWORD_SCORE,
    GOAL_MAX_ALTERNATIVES,
    GOAL_MIN_MATCH_SCORE,
    GOAL_TEMPORAL_SCORE,
    GOAL_TITLE_FALLBACK_SCORE,
)
from inboxparser.models.enums import FrequencyPeriod, GoalLevel, LifeAspect
from inboxparser.models.goal import FrequencyGoal, FrequencyProgress, Goal, GoalMatch
from inboxparser.recurrence.frequency_parser import matches_action, parse_frequency_from_title
from inboxparser.recurrence.periods import date_in_period, period_range

logger = logging.getLogger(__name__)

_TEMPORAL_REASONS = {
    GoalLevel.WEEKLY: "temporal:this-week",
    GoalLevel.MONTHLY: "temporal:this-month",
    GoalLevel.YEARLY: "temporal:this-year",
}


@dataclass
class MatchInput:
    aspect: Optional[LifeAspect]
    scheduled_date: Optional[str] = None  # "2026-01-07"
    activity: Optional[str] = None
    location: Optional[str] = None


@dataclass
class MatchResult:
    best_match: Optional[GoalMatch] = None
    alternatives: List[GoalMatch] = field(default_factory=list)


class GoalMatcher:
    """Scores goals from a goal store against a parsed capture.

    Args:
        goal_repository: Provides get_active_weekly_goals(aspect, period=None)
        task_repository: Provides get_for_goal(goal_id, start, end)
    """

    def __init__(self, goal_repository, task_repository):
        self.goal_repository = goal_repository
        self.task_repository = task_repository

    def match(self, match_input: MatchInput, today: Optional[date] = None) -> MatchResult:
        """Best match plus up to three alternatives. Store failures degrade to no match."""
        if match_input.aspect is None:
            return MatchResult()

        try:
            goals = self.goal_repository.get_active_weekly_goals(match_input.aspect)
            # Hard aspect filter, independent of what the store returned
            candidates = [g for g in goals if g.aspect == match_input.aspect]
            if not candidates:
                return MatchResult()

            reference = self._reference_date(match_input.scheduled_date, today)
            scored = [self._score(goal, match_input, reference) for goal in candidates]
        except SQLAlchemyError as e:
            logger.warning(f"Goal store query failed during matching: {type(e).__name__}")
            return MatchResult()
        except Exception as e:
            logger.error(f"Unexpected error during goal matching: {type(e).__name__}: {str(e)}")
            return MatchResult()

        kept = [m for m in scored if m.match_confidence >= GOAL_MIN_MATCH_SCORE]
        # Stable sort keeps store order among equal scores
        kept.sort(key=lambda m: m.match_confidence, reverse=True)
        if not kept:
            return MatchResult()
        return MatchResult(best_match=kept[0], alternatives=kept[1:1 + GOAL_MAX_ALTERNATIVES])

    def find_goal_for_aspect(
        self, aspect: LifeAspect, activity: Optional[str] = None, today: Optional[date] = None
    ) -> Optional[GoalMatch]:
        """Best goal for an aspect and activity, dated today."""
        ref = today or get_today()
        return self.match(MatchInput(aspect=aspect, scheduled_date=ref.isoformat(), activity=activity), ref).best_match

    @staticmethod
    def _reference_date(scheduled_date: Optional[str], today: Optional[date]) -> date:
        if scheduled_date:
            try:
                return date.fromisoformat(scheduled_date)
            except ValueError:
                logger.debug(f"Unparseable scheduled date {scheduled_date!r}, using today")
        return today or get_today()

    def _score(self, goal: Goal, match_input: MatchInput, reference: date) -> GoalMatch:
        reasons: List[str] = []
        score = 0.0

        if goal.aspect == match_input.aspect:
            score += GOAL_ASPECT_SCORE
            reasons.append(f"aspect:{match_input.aspect.value}")

        if match_input.scheduled_date and date_in_period(reference, goal.period):
            score += GOAL_TEMPORAL_SCORE
            reasons.append(_TEMPORAL_REASONS.get(goal.level, "temporal:this-week"))

        frequency: Optional[FrequencyGoal] = goal.frequency or parse_frequency_from_title(goal.title, goal.aspect)
        activity = match_input.activity
        if frequency is not None and frequency.action and activity:
            if matches_action(activity, frequency.action):
                score += GOAL_KEYWORD_SCORE
                reasons.append(f"keyword:{frequency.action}")
        elif activity and goal.title:
            stem = activity.lower()[:-3]
            if stem and stem in goal.title.lower():
                score += GOAL_TITLE_FALLBACK_SCORE
                reasons.append("keyword:title-match")

        progress = None
        if frequency is not None:
            progress = FrequencyProgress(
                current=self._count_tasks_in_period(goal.id, frequency.period, reference),
                target=frequency.target,
                period=frequency.period,
            )

        return GoalMatch(
            goal_id=goal.id,
            goal_title=goal.title,
            goal_level=GoalLevel.WEEKLY,
            weekly_goal_id=goal.id,
            match_confidence=round(min(score, 1.0), 4),
            match_reasons=reasons,
            frequency_progress=progress,
        )

    def _count_tasks_in_period(self, goal_id: str, period: FrequencyPeriod, reference: date) -> int:
        start, end = period_range(reference, period)
        return len(self.task_repository.get_for_goal(goal_id, start, end))
