"""Constants for inboxparser.

This module centralizes all magic numbers and default values used throughout the parser.
"""

from inboxparser.models.enums import LifeAspect


# Bumped whenever the rule set changes so stale persisted captures can be re-parsed
PARSER_VERSION = 1

# Regional context
DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"  # UTC+8

# Confidence tiers
HIGH_CONFIDENCE_THRESHOLD = 0.80
MEDIUM_CONFIDENCE_THRESHOLD = 0.50

# Field actions
AUTO_FILL_THRESHOLD = 0.80
SUGGEST_THRESHOLD = 0.50

# Slot analysis
MIN_SLOT_CONFIDENCE = 0.5

# User-provided answers are trusted completely
USER_CONFIDENCE = 1.0

# Weights for the aggregate confidence (absent slots are skipped, not zeroed)
SLOT_WEIGHTS = {
    "what": 0.25,
    "intent": 0.20,
    "date": 0.20,
    "time": 0.10,
    "where": 0.08,
    "duration": 0.08,
    "priority": 0.05,
    "who": 0.04,
}

# Intent classifier keyword tiers: (increment, cap)
PRIMARY_KEYWORD_WEIGHT = 0.4
PRIMARY_KEYWORD_CAP = 0.8
SECONDARY_KEYWORD_WEIGHT = 0.2
SECONDARY_KEYWORD_CAP = 0.4
CONTEXTUAL_KEYWORD_WEIGHT = 0.1
CONTEXTUAL_KEYWORD_CAP = 0.2

# Ambiguity discount applied when the top two aspects score within the margin
DEFAULT_AMBIGUITY_MARGIN = 0.10
DEFAULT_AMBIGUITY_DISCOUNT = 0.9

# Goal matching
GOAL_ASPECT_SCORE = 0.3
GOAL_TEMPORAL_SCORE = 0.3
GOAL_KEYWORD_SCORE = 0.3
GOAL_TITLE_FALLBACK_SCORE = 0.2
GOAL_MIN_MATCH_SCORE = 0.3
GOAL_MAX_ALTERNATIVES = 3

# Duration defaults per aspect when no explicit duration is given
ASPECT_DEFAULT_DURATIONS = {
    LifeAspect.FITNESS: 90,
    LifeAspect.NUTRITION: 60,
    LifeAspect.CAREER: 60,
    LifeAspect.FINANCIAL: 30,
    LifeAspect.SIDE_PROJECTS: 90,
    LifeAspect.CHORES: 45,
}
INFERRED_DURATION_CONFIDENCE = 0.50
DEFAULT_BREAKDOWN_DURATION_MIN = 60

# Human-readable aspect labels
ASPECT_LABELS = {
    LifeAspect.FITNESS: "Fitness",
    LifeAspect.NUTRITION: "Nutrition",
    LifeAspect.CAREER: "Career",
    LifeAspect.FINANCIAL: "Financial",
    LifeAspect.SIDE_PROJECTS: "Side Projects",
    LifeAspect.CHORES: "Chores",
}

# Language-model step
DEFAULT_LLM_TIMEOUT_MS = 10000
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_LLM_MODEL = "mistral"
DEFAULT_LLM_BASE_URL = "http://localhost:11434/v1"
DEFAULT_LLM_PROBE_TIMEOUT_SEC = 5.0
