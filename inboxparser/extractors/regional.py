"""Regional context for Malaysian captures.

Provides the location alias table, abbreviation expansion and timezone-aware
"today". Everything here is deterministic given an injected reference date.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from inboxparser.models.constants import DEFAULT_TIMEZONE
from inboxparser.models.enums import LocationType

logger = logging.getLogger(__name__)

REGION_TZ = ZoneInfo(DEFAULT_TIMEZONE)


@dataclass(frozen=True)
class LocationInfo:
    full_name: str
    area: str
    type: LocationType

    @property
    def display(self) -> str:
        if self.area and self.area != "Various":
            return f"{self.full_name}, {self.area}"
        return self.full_name


@dataclass(frozen=True)
class LocationMatch:
    location: str
    location_type: LocationType
    confidence: float
    raw_match: str


_G, _O, _V = LocationType.GYM, LocationType.OTHER, LocationType.VENUE

LOCATIONS = {
    # Gyms
    "bunker": LocationInfo("The Bunker", "Kota Damansara", _G),
    "the bunker": LocationInfo("The Bunker", "Kota Damansara", _G),
    "celebrity": LocationInfo("Celebrity Fitness", "Various", _G),
    "celebrity fitness": LocationInfo("Celebrity Fitness", "Various", _G),
    "ff": LocationInfo("Fitness First", "Various", _G),
    "fitness first": LocationInfo("Fitness First", "Various", _G),
    "ff 24": LocationInfo("Fitness First 24", "Various", _G),
    "anytime fitness": LocationInfo("Anytime Fitness", "Various", _G),
    "chi fitness": LocationInfo("Chi Fitness", "Various", _G),
    "true fitness": LocationInfo("True Fitness", "Various", _G),
    # Neighbourhoods
    "kd": LocationInfo("Kota Damansara", "Selangor", _O),
    "kota damansara": LocationInfo("Kota Damansara", "Selangor", _O),
    "pj": LocationInfo("Petaling Jaya", "Selangor", _O),
    "petaling jaya": LocationInfo("Petaling Jaya", "Selangor", _O),
    "kl": LocationInfo("Kuala Lumpur", "Kuala Lumpur", _O),
    "kuala lumpur": LocationInfo("Kuala Lumpur", "Kuala Lumpur", _O),
    "ttdi": LocationInfo("Taman Tun Dr Ismail", "Kuala Lumpur", _O),
    "bangsar": LocationInfo("Bangsar", "Kuala Lumpur", _O),
    "mont kiara": LocationInfo("Mont Kiara", "Kuala Lumpur", _O),
    "mk": LocationInfo("Mont Kiara", "Kuala Lumpur", _O),
    "damansara heights": LocationInfo("Damansara Heights", "Kuala Lumpur", _O),
    "dh": LocationInfo("Damansara Heights", "Kuala Lumpur", _O),
    "sunway": LocationInfo("Sunway", "Selangor", _O),
    "subang": LocationInfo("Subang Jaya", "Selangor", _O),
    "subang jaya": LocationInfo("Subang Jaya", "Selangor", _O),
    "ss2": LocationInfo("SS2", "Petaling Jaya", _O),
    "ss15": LocationInfo("SS15", "Subang Jaya", _O),
    "usj": LocationInfo("USJ", "Subang Jaya", _O),
    "cheras": LocationInfo("Cheras", "Kuala Lumpur", _O),
    "ampang": LocationInfo("Ampang", "Selangor", _O),
    "cyberjaya": LocationInfo("Cyberjaya", "Selangor", _O),
    "putrajaya": LocationInfo("Putrajaya", "Putrajaya", _O),
    "shah alam": LocationInfo("Shah Alam", "Selangor", _O),
    "klcc": LocationInfo("KLCC", "Kuala Lumpur", _O),
    "bukit bintang": LocationInfo("Bukit Bintang", "Kuala Lumpur", _O),
    "bb": LocationInfo("Bukit Bintang", "Kuala Lumpur", _O),
    # Malls
    "1u": LocationInfo("1 Utama", "Petaling Jaya", _V),
    "1 utama": LocationInfo("1 Utama", "Petaling Jaya", _V),
    "ikea": LocationInfo("IKEA", "Various", _V),
    "mid valley": LocationInfo("Mid Valley Megamall", "Kuala Lumpur", _V),
    "midvalley": LocationInfo("Mid Valley Megamall", "Kuala Lumpur", _V),
    "mv": LocationInfo("Mid Valley Megamall", "Kuala Lumpur", _V),
    "pavilion": LocationInfo("Pavilion KL", "Kuala Lumpur", _V),
    "sunway pyramid": LocationInfo("Sunway Pyramid", "Sunway", _V),
    "pyramid": LocationInfo("Sunway Pyramid", "Sunway", _V),
    "ioi": LocationInfo("IOI City Mall", "Putrajaya", _V),
    "ioi city": LocationInfo("IOI City Mall", "Putrajaya", _V),
    "the curve": LocationInfo("The Curve", "Petaling Jaya", _V),
    "curve": LocationInfo("The Curve", "Petaling Jaya", _V),
    "publika": LocationInfo("Publika", "Mont Kiara", _V),
    "nu sentral": LocationInfo("Nu Sentral", "Kuala Lumpur", _V),
    "suria klcc": LocationInfo("Suria KLCC", "Kuala Lumpur", _V),
    # Grocers
    "jaya grocer": LocationInfo("Jaya Grocer", "Various", _V),
    "village grocer": LocationInfo("Village Grocer", "Various", _V),
    "aeon": LocationInfo("AEON", "Various", _V),
    "cold storage": LocationInfo("Cold Storage", "Various", _V),
    # Work/home
    "office": LocationInfo("Office", "", LocationType.OFFICE),
    "wfh": LocationInfo("Work From Home", "", LocationType.HOME),
    "home": LocationInfo("Home", "", LocationType.HOME),
}

# Named places beat bare neighbourhoods ("bunker kota damansara" is The Bunker)
_NAMED_PLACE_TYPES = {LocationType.GYM, LocationType.VENUE, LocationType.OFFICE, LocationType.HOME}

_LOCATION_PATTERNS: List[Tuple[re.Pattern, str, LocationInfo]] = [
    (re.compile(r"(?<![a-z0-9])" + re.escape(alias) + r"(?![a-z0-9])"), alias, info)
    for alias, info in LOCATIONS.items()
]

_ABBREVIATIONS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\btmrw\b"), "tomorrow"),
    (re.compile(r"\btmr\b"), "tomorrow"),
    (re.compile(r"\besok\b"), "tomorrow"),
    (re.compile(r"\bhari ini\b"), "today"),
    (re.compile(r"\bhr ini\b"), "today"),
    (re.compile(r"\bmlm\b"), "malam"),
    (re.compile(r"\bptg\b"), "petang"),
    (re.compile(r"\bpg\b"), "pagi"),
    (re.compile(r"\blusa\b"), "day after tomorrow"),
]

_AT_PATTERN = re.compile(r"\bat\s+([a-z0-9\s]+?)(?=\s+(?:(?:at|on|for|from)\b|\d)|\s*$)", re.I)
_DAY_PART_WORDS = re.compile(r"\b(morning|afternoon|evening|night|tonight|noon|midnight|pm|am)\b", re.I)
# "7pm", "12:30 am", "10": a clock time, never a place
_STARTS_WITH_DIGIT = re.compile(r"^\d")


def get_today(tz: Optional[ZoneInfo] = None) -> date:
    """Current calendar date in the regional timezone."""
    return datetime.now(tz or REGION_TZ).date()


def normalize_text(text: str) -> str:
    """Lower-case, collapse whitespace and expand local abbreviations."""
    expanded = " ".join((text or "").lower().split())
    for pattern, replacement in _ABBREVIATIONS:
        expanded = pattern.sub(replacement, expanded)
    return expanded


def extract_location(text: str) -> Optional[LocationMatch]:
    """Find a known place alias, else fall back to an "at <phrase>" pattern."""
    lower = (text or "").lower()

    best: Optional[Tuple[Tuple[int, int], str, LocationInfo]] = None
    for pattern, alias, info in _LOCATION_PATTERNS:
        if not pattern.search(lower):
            continue
        rank = (1 if info.type in _NAMED_PLACE_TYPES else 0, len(alias))
        if best is None or rank > best[0]:
            best = (rank, alias, info)

    if best is not None:
        _, alias, info = best
        logger.debug(f"Location alias matched: {alias}")
        return LocationMatch(
            location=info.display,
            location_type=info.type,
            confidence=0.95 if len(alias) >= 4 else 0.85,
            raw_match=alias,
        )

    for match in _AT_PATTERN.finditer(lower):
        phrase = match.group(1).strip()
        if len(phrase) > 2 and not _STARTS_WITH_DIGIT.match(phrase) and not _DAY_PART_WORDS.search(phrase):
            return LocationMatch(
                location=phrase,
                location_type=LocationType.OTHER,
                confidence=0.60,
                raw_match=match.group(0).strip(),
            )

    return None


def get_location_info(name: str) -> Optional[LocationInfo]:
    return LOCATIONS.get((name or "").lower())


def has_location_keyword(text: str) -> bool:
    lower = (text or "").lower()
    return any(pattern.search(lower) for pattern, _, _ in _LOCATION_PATTERNS)
