"""Sub-activity questions asked before a breakdown is generated.

Selection-based so answering needs no typing. The first question of each
aspect picks the activity type; its options carry default durations.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from inboxparser.models.breakdown import DeepPromptOption, DeepPromptQuestion
from inboxparser.models.constants import ASPECT_DEFAULT_DURATIONS, DEFAULT_BREAKDOWN_DURATION_MIN
from inboxparser.models.enums import LifeAspect

logger = logging.getLogger(__name__)

OptionSpec = Tuple[str, str, Optional[int]]


def _question(
    aspect: LifeAspect,
    question_id: str,
    key: str,
    text: str,
    options: Sequence[OptionSpec],
    required: bool,
    order: int,
) -> DeepPromptQuestion:
    return DeepPromptQuestion(
        id=question_id,
        aspect=aspect,
        question_key=key,
        question=text,
        options=[DeepPromptOption(value=v, label=label, default_duration=d) for v, label, d in options],
        required=required,
        order=order,
    )


_F, _N, _C = LifeAspect.FITNESS, LifeAspect.NUTRITION, LifeAspect.CAREER
_FI, _S, _CH = LifeAspect.FINANCIAL, LifeAspect.SIDE_PROJECTS, LifeAspect.CHORES

DEEP_PROMPT_QUESTIONS: Dict[LifeAspect, List[DeepPromptQuestion]] = {
    _F: [
        _question(_F, "fitness-session-type", "session_type", "Session type?", [
            ("technique", "Technique", 90),
            ("heavy-bag", "Heavy Bag", 60),
            ("sparring", "Sparring", 90),
            ("conditioning", "Conditioning", 45),
            ("pads", "Pads", 60),
            ("strength", "Strength", 60),
            ("cardio", "Cardio", 45),
            ("flexibility", "Flexibility", 30),
        ], True, 1),
        _question(_F, "fitness-duration", "duration", "Duration?", [
            ("30", "30 min", 30),
            ("45", "45 min", 45),
            ("60", "1 hour", 60),
            ("90", "1.5 hours", 90),
            ("120", "2 hours", 120),
        ], True, 2),
        _question(_F, "fitness-intensity", "intensity", "Intensity level?", [
            ("light", "Light / Recovery", None),
            ("moderate", "Moderate", None),
            ("hard", "Hard Push", None),
            ("competition", "Competition Prep", None),
        ], False, 3),
    ],
    _N: [
        _question(_N, "nutrition-meal-type", "meal_type", "What type?", [
            ("quick", "Quick meal", 30),
            ("full-recipe", "Full recipe", 60),
            ("meal-prep", "Meal prep", 120),
            ("baking", "Baking", 90),
        ], True, 1),
        _question(_N, "nutrition-complexity", "complexity", "Complexity?", [
            ("simple", "Simple (<30min)", 30),
            ("medium", "Medium (30-60min)", 45),
            ("complex", "Complex (>1hr)", 90),
        ], True, 2),
        _question(_N, "nutrition-servings", "servings", "How many servings?", [
            ("1", "Just me", None),
            ("2", "For two", None),
            ("4", "Family (4+)", None),
            ("batch", "Batch cooking", None),
        ], False, 3),
    ],
    _C: [
        _question(_C, "career-work-type", "work_type", "Work type?", [
            ("deep-work", "Deep work / Coding", 120),
            ("meeting", "Meeting", 60),
            ("review", "Review / Feedback", 30),
            ("planning", "Planning", 45),
            ("communication", "Emails / Slack", 30),
            ("learning", "Learning / Research", 60),
        ], True, 1),
        _question(_C, "career-focus-level", "focus_level", "Focus needed?", [
            ("deep", "Deep focus (no interruptions)", None),
            ("moderate", "Moderate focus", None),
            ("shallow", "Can multitask", None),
        ], False, 2),
    ],
    _FI: [
        _question(_FI, "financial-task-type", "task_type", "What kind?", [
            ("review", "Review accounts", 30),
            ("transfer", "Transfer / Pay bills", 15),
            ("budget", "Budget review", 45),
            ("investment", "Investment check", 30),
            ("planning", "Financial planning", 60),
        ], True, 1),
    ],
    _S: [
        _question(_S, "side-project-type", "project_type", "Activity type?", [
            ("dj-practice", "DJ Practice", 120),
            ("music-production", "Music Production", 90),
            ("coding", "Personal Coding", 90),
            ("creative", "Creative Work", 60),
            ("learning", "Learning New Skill", 60),
        ], True, 1),
        _question(_S, "side-project-goal", "session_goal", "Session goal?", [
            ("explore", "Explore / Play", None),
            ("practice", "Deliberate practice", None),
            ("create", "Create something", None),
            ("finish", "Finish a project", None),
        ], False, 2),
    ],
    _CH: [
        _question(_CH, "chores-type", "chore_type", "What kind?", [
            ("cleaning", "Cleaning", 45),
            ("laundry", "Laundry", 60),
            ("shopping", "Shopping / Errands", 60),
            ("organizing", "Organizing", 45),
            ("maintenance", "Home maintenance", 60),
        ], True, 1),
    ],
}


def get_questions_for_aspect(aspect: LifeAspect) -> List[DeepPromptQuestion]:
    return list(DEEP_PROMPT_QUESTIONS.get(aspect, []))


def get_required_questions_for_aspect(aspect: LifeAspect) -> List[DeepPromptQuestion]:
    return [q for q in get_questions_for_aspect(aspect) if q.required]


def get_primary_activity_type(aspect: LifeAspect, answers: Dict[str, str]) -> Optional[str]:
    """Answer to the aspect's first (activity type) question, if given."""
    questions = DEEP_PROMPT_QUESTIONS.get(aspect)
    if not questions:
        return None
    return answers.get(questions[0].question_key)


def infer_duration_from_answers(aspect: LifeAspect, answers: Dict[str, str]) -> int:
    """Duration in minutes: explicit duration answer, else the selected type's default, else the aspect default."""
    explicit = answers.get("duration")
    if explicit:
        try:
            return int(explicit)
        except ValueError:
            logger.debug(f"Ignoring non-numeric duration answer {explicit!r}")

    questions = DEEP_PROMPT_QUESTIONS.get(aspect)
    if questions:
        first = questions[0]
        selected = answers.get(first.question_key)
        for option in first.options:
            if option.value == selected and option.default_duration:
                return option.default_duration

    return ASPECT_DEFAULT_DURATIONS.get(aspect, DEFAULT_BREAKDOWN_DURATION_MIN)
