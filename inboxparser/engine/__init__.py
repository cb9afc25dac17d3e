"""Parsing engine for inboxparser."""

from inboxparser.engine.intent import classify_intent, get_all_intent_scores, infer_activity_description
from inboxparser.engine.confidence import (
    calculate_overall_confidence,
    get_confidence_level,
    get_field_actions,
    rescore,
    should_show_quick_confirm,
)
from inboxparser.engine.slot_analyzer import analyze_slots, is_when_satisfied
from inboxparser.engine.goal_matcher import GoalMatcher, MatchInput, MatchResult
from inboxparser.engine.breakdown import generate_breakdown, generate_breakdown_from_answers
from inboxparser.engine.clarification import ClarificationError, generate_questions, merge_answers
from inboxparser.engine.pipeline import CapturePipeline, ParserConfig, create_task_from_capture
from inboxparser.engine.scheduler import EnhancementScheduler

__all__ = [
    "classify_intent",
    "get_all_intent_scores",
    "infer_activity_description",
    "calculate_overall_confidence",
    "get_confidence_level",
    "get_field_actions",
    "rescore",
    "should_show_quick_confirm",
    "analyze_slots",
    "is_when_satisfied",
    "GoalMatcher",
    "MatchInput",
    "MatchResult",
    "generate_breakdown",
    "generate_breakdown_from_answers",
    "ClarificationError",
    "generate_questions",
    "merge_answers",
    "CapturePipeline",
    "ParserConfig",
    "create_task_from_capture",
    "EnhancementScheduler",
]
