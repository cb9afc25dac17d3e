"""Companion ("who") extraction.

Defaults to "solo" when no companion is mentioned, e.g.

- "training with coach" -> coach, one-on-one
- "standup with the team" -> team, team
- "training" -> solo, solo
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from inboxparser.models.enums import WhoType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhoMatch:
    who: str
    who_type: WhoType
    confidence: float
    matched_text: str


TEAM_INDICATORS = {"team", "squad"}

GROUP_INDICATORS = {
    "group", "class", "crew", "gang", "colleagues", "friends", "family", "everyone", "all",
}

ONE_ON_ONE_INDICATORS = {
    "coach", "trainer", "teacher", "instructor", "mentor", "boss", "manager",
    "client", "partner", "wife", "husband", "girlfriend", "boyfriend",
}

NOT_PERSON_WORDS = {
    "buy", "cook", "eat", "go", "do", "make", "get", "take", "finish", "complete",
    "start", "end", "review", "check", "clean", "prepare", "submit", "send",
    "call", "email", "message",
}

COMPANION_CONFIDENCE = 0.85
SOLO = "solo"


def clean_who_part(who: str) -> str:
    """Collapse whitespace and drop a leading article."""
    cleaned = " ".join(who.split()).lower()
    return re.sub(r"^(the|a|an)\s+", "", cleaned)


def is_likely_person(who: str) -> bool:
    lower = who.lower()
    if lower in NOT_PERSON_WORDS:
        return False
    if lower in GROUP_INDICATORS or lower in TEAM_INDICATORS or lower in ONE_ON_ONE_INDICATORS:
        return True
    # Single unknown word of some length is probably a name
    return " " not in lower and len(lower) > 2


def classify_who_type(who: str) -> WhoType:
    """Classify a companion phrase by keyword membership."""
    lower = (who or "").lower().strip()
    if not lower or lower in (SOLO, "alone", "by myself", "just me"):
        return WhoType.SOLO
    words = set(lower.split())
    if words & TEAM_INDICATORS:
        return WhoType.TEAM
    if words & GROUP_INDICATORS:
        return WhoType.GROUP
    # Known one-on-one roles and plain names both land here
    return WhoType.ONE_ON_ONE


def _companion(group: int) -> Callable[[re.Match], Optional[Tuple[str, WhoType]]]:
    def handler(m: re.Match) -> Optional[Tuple[str, WhoType]]:
        who = clean_who_part(m.group(group))
        return (who, classify_who_type(who)) if who else None
    return handler


def _and_person(m: re.Match) -> Optional[Tuple[str, WhoType]]:
    who = clean_who_part(m.group(1))
    if not is_likely_person(who):
        return None
    return who, classify_who_type(who)


def _possessive(m: re.Match) -> Optional[Tuple[str, WhoType]]:
    return clean_who_part(m.group(1)), WhoType.ONE_ON_ONE


def _explicit_solo(m: re.Match) -> Optional[Tuple[str, WhoType]]:
    return SOLO, WhoType.SOLO


_TERMINATORS = r"at|on|in|from|until|tomorrow|today|tonight"

WHO_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], Optional[Tuple[str, WhoType]]]]] = [
    (re.compile(r"\btogether\s+with\s+([\w\s]+?)(?:\s+(?:at|on|in)\b|$)"), _companion(1)),
    (re.compile(rf"\bwith\s+(my\s+)?([\w\s]+?)(?:\s+(?:{_TERMINATORS})\b|\s+\d|$)"), _companion(2)),
    (re.compile(r"\band\s+(\w+)(?:\s+(?:at|on|in|from|will)\b|\s*$)"), _and_person),
    (re.compile(r"\b(solo|alone|by myself)\b"), _explicit_solo),
    (re.compile(r"\b(\w+)'s\s+(?:session|class|training|meeting|call)\b"), _possessive),
]


def find_companion(text: str) -> Optional[WhoMatch]:
    """Explicit companion mention, or None when nothing in the text names one."""
    lower = (text or "").lower().strip()
    for pattern, handler in WHO_PATTERNS:
        m = pattern.search(lower)
        if not m:
            continue
        found = handler(m)
        if found is None:
            continue
        who, who_type = found
        if who == SOLO:
            return WhoMatch(SOLO, WhoType.SOLO, 1.0, m.group(0))
        logger.debug(f"Companion matched: {who} ({who_type.value})")
        return WhoMatch(who, who_type, COMPANION_CONFIDENCE, m.group(0))
    return None


def extract_who(text: str) -> WhoMatch:
    """Companion for a capture; "solo" at full confidence when none is named."""
    found = find_companion(text)
    if found is not None:
        return found
    return WhoMatch(SOLO, WhoType.SOLO, 1.0, "")
