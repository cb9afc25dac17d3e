"""Clock time, day-part and duration extraction."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from inboxparser.models.enums import TimePreference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeMatch:
    time: str  # 24-hour "19:00"
    confidence: float
    matched_text: str
    time_preference: TimePreference
    is_explicit: bool  # "7pm" vs "evening"


@dataclass(frozen=True)
class DurationMatch:
    minutes: int
    confidence: float
    matched_text: str


_TWELVE_HOUR = re.compile(r"\b(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm|a\.m\.?|p\.m\.?)(?![a-z])")
_TWENTY_FOUR_HOUR = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")

_MORNING = re.compile(r"\b(morning|pagi|this\s+morning)\b")
_AFTERNOON = re.compile(r"\b(afternoon|petang|tengahari|this\s+afternoon)\b")
_EVENING = re.compile(r"\b(evening|malam|this\s+evening)\b")
_NIGHT = re.compile(r"\b(night|tonight)\b")
_LUNCH = re.compile(r"\b(lunch|lunchtime|tengahari)\b")
_AFTER_WORK = re.compile(r"\b(after\s*work|lepas\s*kerja|after\s*office)\b")
_BEFORE_WORK = re.compile(r"\b(before\s*work|sebelum\s*kerja)\b")
_EARLY_MORNING = re.compile(r"\b(early\s*morning|subuh|awal\s*pagi)\b")
_LATE_MORNING = re.compile(r"\blate\s*morning\b")
_LATE_EVENING = re.compile(r"\b(late\s*evening|late\s*night)\b")
_NOON = re.compile(r"\b(noon|midday)\b")
_MIDNIGHT = re.compile(r"\b(midnight|tengah\s*malam)\b")

# Most specific phrases first: (pattern, default clock time, preference)
RELATIVE_TIMES: List[Tuple[re.Pattern, str, TimePreference]] = [
    (_EARLY_MORNING, "06:00", TimePreference.MORNING),
    (_LATE_MORNING, "11:00", TimePreference.MORNING),
    (_LATE_EVENING, "22:00", TimePreference.EVENING),
    (_BEFORE_WORK, "07:00", TimePreference.MORNING),
    (_AFTER_WORK, "18:00", TimePreference.EVENING),
    (_MIDNIGHT, "00:00", TimePreference.EVENING),
    (_NOON, "12:00", TimePreference.AFTERNOON),
    (_LUNCH, "12:30", TimePreference.AFTERNOON),
    (_MORNING, "09:00", TimePreference.MORNING),
    (_AFTERNOON, "14:00", TimePreference.AFTERNOON),
    (_EVENING, "19:00", TimePreference.EVENING),
    (_NIGHT, "21:00", TimePreference.EVENING),
]
RELATIVE_TIME_CONFIDENCE = 0.70

_DURATION_HOURS = re.compile(r"\b(\d+(?:\.\d+)?)\s*(hours?|hrs?|jam)\b")
_DURATION_MINUTES = re.compile(r"\b(\d+)\s*(minutes?|mins?|minit)\b")


def infer_time_preference(time_str: str) -> TimePreference:
    """Day-part band for a 24-hour clock time."""
    hour = int(time_str.split(":")[0])
    if 5 <= hour < 12:
        return TimePreference.MORNING
    if 12 <= hour < 17:
        return TimePreference.AFTERNOON
    return TimePreference.EVENING


def _to_24_hour(hours: int, minutes: int, period: str) -> str:
    is_pm = period.startswith("p")
    if is_pm and hours != 12:
        hours += 12
    elif not is_pm and hours == 12:
        hours = 0
    return f"{hours:02d}:{minutes:02d}"


def extract_time(text: str) -> Optional[TimeMatch]:
    """Extract a clock time, preferring explicit times over day-part phrases."""
    lower = (text or "").lower()

    m = _TWELVE_HOUR.search(lower)
    if m:
        hours = int(m.group(1))
        minutes = int(m.group(2) or 0)
        if 1 <= hours <= 12 and 0 <= minutes <= 59:
            time_str = _to_24_hour(hours, minutes, m.group(3))
            return TimeMatch(time_str, 0.95, m.group(0), infer_time_preference(time_str), True)

    m = _TWENTY_FOUR_HOUR.search(lower)
    if m:
        time_str = f"{int(m.group(1)):02d}:{m.group(2)}"
        return TimeMatch(time_str, 0.98, m.group(0), infer_time_preference(time_str), True)

    for pattern, default_time, preference in RELATIVE_TIMES:
        m = pattern.search(lower)
        if m:
            logger.debug(f"Relative time '{m.group(0)}' -> {default_time}")
            return TimeMatch(default_time, RELATIVE_TIME_CONFIDENCE, m.group(0), preference, False)

    return None


def extract_duration(text: str) -> Optional[DurationMatch]:
    """Extract an hour or minute quantity ("1.5 hours", "45 min")."""
    lower = (text or "").lower()

    m = _DURATION_HOURS.search(lower)
    if m:
        return DurationMatch(int(round(float(m.group(1)) * 60)), 0.95, m.group(0))

    m = _DURATION_MINUTES.search(lower)
    if m:
        return DurationMatch(int(m.group(1)), 0.95, m.group(0))

    return None


def infer_time_preference_from_text(text: str) -> Optional[TimePreference]:
    """Day-part preference from vague phrases only, without a clock time."""
    lower = (text or "").lower()
    if any(p.search(lower) for p in (_MORNING, _EARLY_MORNING, _BEFORE_WORK)):
        return TimePreference.MORNING
    if any(p.search(lower) for p in (_AFTERNOON, _LUNCH, _NOON)):
        return TimePreference.AFTERNOON
    if any(p.search(lower) for p in (_EVENING, _NIGHT, _AFTER_WORK, _LATE_EVENING)):
        return TimePreference.EVENING
    return None
