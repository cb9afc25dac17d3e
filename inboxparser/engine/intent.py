"""Intent classification into life aspects.

Keyword-weighted scoring over three tiers per aspect:
1. Primary keywords +0.4 each, capped at 0.8
2. Secondary keywords +0.2 each, capped at 0.4
3. Contextual keywords +0.1 each, capped at 0.2

The sum is capped at 1.0. When the top two aspects score within the
ambiguity margin, the winner's score is discounted.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from inboxparser.models.constants import (
    CONTEXTUAL_KEYWORD_CAP,
    CONTEXTUAL_KEYWORD_WEIGHT,
    DEFAULT_AMBIGUITY_DISCOUNT,
    DEFAULT_AMBIGUITY_MARGIN,
    PRIMARY_KEYWORD_CAP,
    PRIMARY_KEYWORD_WEIGHT,
    SECONDARY_KEYWORD_CAP,
    SECONDARY_KEYWORD_WEIGHT,
)
from inboxparser.models.enums import LifeAspect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentResult:
    aspect: LifeAspect
    confidence: float
    matched_keywords: Tuple[str, ...]


INTENT_KEYWORDS: Dict[LifeAspect, Dict[str, List[str]]] = {
    LifeAspect.FITNESS: {
        "primary": [
            "training", "train", "gym", "workout", "muay thai", "muaythai", "sparring",
            "run", "running", "cardio", "strength", "yoga", "boxing", "kickboxing",
            "swimming", "swim", "cycling", "cycle", "bike", "hiit", "crossfit",
            "exercise", "leg day", "arm day", "chest day", "back day",
            "stretch", "stretching", "warmup", "warm up", "cooldown", "cool down",
            "gymnastics", "calisthenics", "handstand", "backflip", "flip", "tumbling",
            # Gyms in the location table count as strong fitness signals
            "bunker", "the bunker", "celebrity fitness", "fitness first", "ff 24",
            "anytime fitness", "chi fitness", "true fitness",
        ],
        "secondary": [
            "fitness", "lift", "lifting", "weights", "coach",
            "pt", "personal trainer", "class", "body", "muscle", "gains",
            "reps", "sets", "squat", "deadlift", "bench", "pull up", "pushup",
            "plank", "abs", "core", "flexibility", "mobility",
            "cartwheel", "somersault", "parkour", "freerunning", "tricking",
        ],
        "contextual": ["session", "practice", "active", "sweat", "burn", "pump"],
    },
    LifeAspect.NUTRITION: {
        "primary": [
            "cook", "cooking", "meal prep", "mealprep", "groceries", "grocery",
            "recipe", "breakfast", "lunch", "dinner", "snack", "meal",
            "food prep", "prep food", "make food", "prepare food",
        ],
        "secondary": [
            "eat", "eating", "food", "kitchen", "ingredients", "shopping",
            "jaya grocer", "village grocer", "aeon", "cold storage",
            "protein", "vegetables", "fruits", "healthy", "diet",
            "bake", "baking", "fry", "grill", "steam", "boil",
        ],
        "contextual": ["prep", "make", "buy", "market", "store", "hungry"],
    },
    LifeAspect.CAREER: {
        "primary": [
            "work", "meeting", "deadline", "project", "standup", "stand up",
            "code review", "deploy", "release", "presentation", "interview",
            "office", "paywatch", "fintech", "sprint", "jira", "ticket",
            "feature", "bug", "fix bug", "implement", "development",
        ],
        "secondary": [
            "call", "conference", "email", "slack", "zoom", "teams",
            "client", "stakeholder", "manager", "colleague", "boss",
            "report", "document", "documentation", "submit", "review",
            "pr", "pull request", "merge", "branch", "commit",
        ],
        "contextual": [
            "finish", "complete", "task", "todo", "followup", "follow up",
            "sync", "catch up", "update", "status",
        ],
    },
    LifeAspect.FINANCIAL: {
        "primary": [
            "pay", "payment", "transfer", "bill", "bills", "savings", "save",
            "invest", "investment", "budget", "budgeting", "epf", "kwsp",
            "tax", "taxes", "income", "expense", "expenses",
        ],
        "secondary": [
            "bank", "banking", "maybank", "cimb", "touch n go", "tng",
            "grab pay", "boost", "duit", "money", "ringgit", "rm",
            "deposit", "withdraw", "account", "balance", "transaction",
            "insurance", "loan", "mortgage", "credit", "debit",
        ],
        "contextual": ["check", "review", "track", "allocate", "spend", "spending"],
    },
    LifeAspect.SIDE_PROJECTS: {
        "primary": [
            "dj", "djing", "mix", "mixing", "rekordbox", "music", "set",
            "tracks", "ddj", "vinyl", "turntable", "controller",
            "build", "building", "code", "coding", "mvp", "launch", "ship",
            "app", "website", "project", "side project", "sideproject",
        ],
        "secondary": [
            "practice", "creative", "create", "design", "designing",
            "record", "recording", "produce", "production", "beat",
            "french house", "nu disco", "disco", "funk", "electronic",
            "transition", "blend", "beatmatch", "cue", "loop",
            "github", "repo", "repository", "prototype", "demo",
        ],
        "contextual": [
            "work on", "tinker", "experiment", "learn", "tutorial",
            "course", "youtube", "watch", "study",
        ],
    },
    LifeAspect.CHORES: {
        "primary": [
            "clean", "cleaning", "laundry", "vacuum", "vacuuming",
            "mop", "mopping", "wash", "washing", "dishes", "ironing",
            "tidy", "tidying", "organize", "organizing", "declutter",
            "fix", "repair", "repairing", "maintenance",
        ],
        "secondary": [
            "errands", "errand", "appointment", "dentist", "doctor",
            "car service", "service", "renew", "renewal", "license",
            "passport", "ic", "utility", "utilities", "garbage", "trash",
            "recycle", "recycling", "sort", "sorting", "fold", "folding",
        ],
        "contextual": [
            "take care of", "handle", "deal with", "sort out",
            "home", "house", "room", "bathroom", "bedroom", "kitchen",
        ],
    },
}

_TIERS = (
    ("primary", PRIMARY_KEYWORD_WEIGHT, PRIMARY_KEYWORD_CAP),
    ("secondary", SECONDARY_KEYWORD_WEIGHT, SECONDARY_KEYWORD_CAP),
    ("contextual", CONTEXTUAL_KEYWORD_WEIGHT, CONTEXTUAL_KEYWORD_CAP),
)


def _keyword_pattern(keyword: str) -> re.Pattern:
    # Word-bounded with an optional plural, so "ic" never hits "music"
    return re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"s?(?![a-z0-9])")


_COMPILED: Dict[LifeAspect, List[Tuple[str, float, float, List[Tuple[str, re.Pattern]]]]] = {
    aspect: [
        (tier, weight, cap, [(kw, _keyword_pattern(kw)) for kw in tiers[tier]])
        for tier, weight, cap in _TIERS
    ]
    for aspect, tiers in INTENT_KEYWORDS.items()
}


def _score_aspect(lower: str, aspect: LifeAspect) -> Tuple[float, List[str]]:
    score = 0.0
    matched: List[str] = []
    for _tier, weight, cap, keywords in _COMPILED[aspect]:
        tier_score = 0.0
        for keyword, pattern in keywords:
            if pattern.search(lower):
                tier_score += weight
                if keyword not in matched:
                    matched.append(keyword)
        score += min(tier_score, cap)
    return round(min(score, 1.0), 4), matched


def get_all_intent_scores(text: str) -> List[IntentResult]:
    """Score every aspect, highest first. Aspects with no match score 0."""
    lower = (text or "").lower()
    results = []
    for aspect in LifeAspect:
        score, matched = _score_aspect(lower, aspect)
        results.append(IntentResult(aspect, score, tuple(matched)))
    # Stable sort keeps enum order among ties
    return sorted(results, key=lambda r: r.confidence, reverse=True)


def classify_intent(
    text: str,
    *,
    ambiguity_margin: float = DEFAULT_AMBIGUITY_MARGIN,
    ambiguity_discount: float = DEFAULT_AMBIGUITY_DISCOUNT,
) -> Optional[IntentResult]:
    """Classify text into a life aspect.

    Args:
        text: Capture text
        ambiguity_margin: Score gap under which the top two are considered tied
        ambiguity_discount: Multiplier applied to the winner when tied

    Returns:
        IntentResult for the best aspect, or None if no keyword matched
    """
    candidates = [r for r in get_all_intent_scores(text) if r.matched_keywords]
    if not candidates:
        return None

    best = candidates[0]
    if len(candidates) >= 2 and round(best.confidence - candidates[1].confidence, 6) < ambiguity_margin:
        logger.debug(
            f"Ambiguous intent: {best.aspect.value}={best.confidence} vs "
            f"{candidates[1].aspect.value}={candidates[1].confidence}"
        )
        best = IntentResult(best.aspect, round(best.confidence * ambiguity_discount, 4), best.matched_keywords)
    return best


_ACTIVITY_NOISE = [
    re.compile(r"\b(day after tomorrow|today|tonight|tomorrow|yesterday|morning|afternoon|evening|night)\b"),
    re.compile(r"\b(this|next)\s+(week|monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b"),
    re.compile(r"\b\d{1,2}([:.]\d{2})?\s*(am|pm)?\b"),
    re.compile(r"\b(at|on|for|from|by)\s+\d"),
    re.compile(r"\b(at|in)\s+[a-z\s]+$"),
]


def infer_activity_description(text: str, intent: Optional[IntentResult]) -> str:
    """Short activity title with date words, clock times and a trailing place removed."""
    activity = (text or "").lower()
    for pattern in _ACTIVITY_NOISE:
        activity = pattern.sub("", activity)
    activity = " ".join(activity.split())

    if len(activity) < 3 and intent is not None and intent.matched_keywords:
        activity = intent.matched_keywords[0]

    return activity[:1].upper() + activity[1:]
