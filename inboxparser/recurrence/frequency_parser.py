"""Frequency parsing for goal titles.

Converts casual goal titles into a structured frequency target:

- "Train 4x per week" -> 4 / week / train
- "Cook 5 meals weekly" -> 5 / week / cook
- "DJ 3 sessions/month" -> 3 / month / dj

Patterns form an ordered table; the first that matches wins.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from inboxparser.models.enums import FrequencyPeriod, LifeAspect
from inboxparser.models.goal import ParsedFrequency

ACTION_KEYWORDS: Dict[LifeAspect, List[str]] = {
    LifeAspect.FITNESS: ["train", "workout", "exercise", "gym", "run", "swim", "lift", "cardio", "muay thai", "spar"],
    LifeAspect.NUTRITION: ["cook", "meal", "prep", "eat", "recipe", "breakfast", "lunch", "dinner"],
    LifeAspect.CAREER: ["work", "meeting", "review", "deploy", "ship", "standup", "sprint"],
    LifeAspect.FINANCIAL: ["save", "invest", "budget", "pay", "transfer", "review finances"],
    LifeAspect.SIDE_PROJECTS: ["dj", "practice", "mix", "produce", "code", "build", "stream", "create"],
    LifeAspect.CHORES: ["clean", "laundry", "vacuum", "wash", "organize", "declutter", "fix"],
}

ALL_ACTION_KEYWORDS = [kw for keywords in ACTION_KEYWORDS.values() for kw in keywords]

ACTION_SYNONYMS: Dict[str, List[str]] = {
    "train": ["workout", "exercise", "gym", "lift"],
    "workout": ["train", "exercise", "gym", "lift"],
    "cook": ["meal", "prep", "recipe"],
    "dj": ["mix", "practice", "spin"],
    "mix": ["dj", "practice"],
}

WORD_NUMBERS = {
    "once": 1, "one": 1,
    "twice": 2, "two": 2,
    "thrice": 3, "three": 3,
    "four": 4, "five": 5, "six": 6, "seven": 7,
}

_PERIODS = {
    "day": FrequencyPeriod.DAY, "daily": FrequencyPeriod.DAY,
    "week": FrequencyPeriod.WEEK, "weekly": FrequencyPeriod.WEEK,
    "month": FrequencyPeriod.MONTH, "monthly": FrequencyPeriod.MONTH,
}


def normalize_period(period: str) -> FrequencyPeriod:
    return _PERIODS.get(period.lower(), FrequencyPeriod.WEEK)


# (pattern, target extractor, period group, confidence)
FREQUENCY_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], int], int, float]] = [
    # "4x per week", "4x a week", "4x/week"
    (re.compile(r"(\d+)x\s*(per|a|each|/)\s*(day|week|month)"), lambda m: int(m.group(1)), 3, 0.95),
    # "4 times per week", "4 sessions weekly", "4 workouts a month"
    (
        re.compile(
            r"(\d+)\s*(times?|sessions?|workouts?|meals?|practices?)\s*(per|a|each|/)?\s*"
            r"(day|week|month|daily|weekly|monthly)"
        ),
        lambda m: int(m.group(1)),
        4,
        0.90,
    ),
    # "weekly 4", "daily 2"
    (re.compile(r"(daily|weekly|monthly)\s*(\d+)"), lambda m: int(m.group(2)), 1, 0.85),
    # "twice a week", "three times per month"
    (
        re.compile(r"\b(once|twice|thrice|one|two|three|four|five|six|seven)\s*(times?)?\s*(per|a|each|/)\s*(day|week|month)"),
        lambda m: WORD_NUMBERS[m.group(1)],
        4,
        0.85,
    ),
    # "every day", "every week"
    (re.compile(r"every\s*(day|week|month)"), lambda m: 1, 1, 0.70),
    # Leading "daily", "weekly", "monthly"
    (re.compile(r"^(daily|weekly|monthly)\b"), lambda m: 1, 1, 0.60),
]


def parse_frequency_from_title(title: str, aspect: Optional[LifeAspect] = None) -> Optional[ParsedFrequency]:
    """Parse a frequency target from a goal title.

    Args:
        title: Goal title, e.g. "Train 4x per week"
        aspect: Goal aspect, used to prioritise action keywords

    Returns:
        ParsedFrequency or None if no pattern matched
    """
    normalized = (title or "").lower().strip()
    for pattern, target_of, period_group, confidence in FREQUENCY_PATTERNS:
        m = pattern.search(normalized)
        if not m:
            continue
        target = target_of(m)
        if target < 1:
            continue
        return ParsedFrequency(
            target=target,
            period=normalize_period(m.group(period_group)),
            action=extract_action_keyword(normalized, aspect),
            confidence=confidence,
        )
    return None


def _contains_keyword(text: str, keyword: str) -> bool:
    # Word-start match so "train" finds "training" but "run" skips "brunch"
    return re.search(r"(?<![a-z0-9])" + re.escape(keyword), text) is not None


def extract_action_keyword(title: str, aspect: Optional[LifeAspect] = None) -> Optional[str]:
    """Known action word in a title, checking the aspect's own keywords first."""
    normalized = (title or "").lower()
    if aspect is not None:
        for keyword in ACTION_KEYWORDS[aspect]:
            if _contains_keyword(normalized, keyword):
                return keyword
    for keyword in ALL_ACTION_KEYWORDS:
        if _contains_keyword(normalized, keyword):
            return keyword
    return None


def _stem(word: str) -> str:
    word = re.sub(r"ing$", "", word)
    word = re.sub(r"s$", "", word)
    return re.sub(r"ed$", "", word)


def matches_action(activity: str, action: str) -> bool:
    """Fuzzy check that an activity phrase satisfies a goal's action ("training" ~ "train")."""
    normalized_activity = (activity or "").lower()
    normalized_action = (action or "").lower()
    if not normalized_activity or not normalized_action:
        return False

    if normalized_action in normalized_activity:
        return True

    activity_stem = _stem(normalized_activity)
    action_stem = _stem(normalized_action)
    if activity_stem and action_stem and (action_stem in activity_stem or activity_stem in action_stem):
        return True

    return any(synonym in normalized_activity for synonym in ACTION_SYNONYMS.get(normalized_action, []))


def get_action_keywords_for_aspect(aspect: LifeAspect) -> List[str]:
    return list(ACTION_KEYWORDS.get(aspect, []))
