"""Date extraction from capture text.

Patterns are tried in strict priority order and the first one that yields a
valid date wins. English and Malay relative words are supported.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from inboxparser.extractors.regional import get_today

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateMatch:
    date: str  # ISO "2026-01-07"
    confidence: float
    matched_text: str
    is_relative: bool


# Monday = 0, matching date.weekday()
WEEKDAYS = {
    "monday": 0, "mon": 0, "isnin": 0,
    "tuesday": 1, "tue": 1, "selasa": 1,
    "wednesday": 2, "wed": 2, "rabu": 2,
    "thursday": 3, "thu": 3, "khamis": 3,
    "friday": 4, "fri": 4, "jumaat": 4,
    "saturday": 5, "sat": 5, "sabtu": 5,
    "sunday": 6, "sun": 6, "ahad": 6,
}

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_EN_DAYS = "monday|tuesday|wednesday|thursday|friday|saturday|sunday|mon|tue|wed|thu|fri|sat|sun"
_MY_DAYS = "isnin|selasa|rabu|khamis|jumaat|sabtu|ahad"
_MONTHS = "january|february|march|april|may|june|july|august|september|october|november|december|jan|feb|mar|apr|jun|jul|aug|sep|oct|nov|dec"


def this_weekday(weekday: int, today: date) -> date:
    """This week's occurrence of a weekday (may be in the past)."""
    return today + timedelta(days=weekday - today.weekday())


def next_weekday(weekday: int, today: date, *, force_next_week: bool = False) -> date:
    """Next occurrence of a weekday.

    Without force_next_week today counts as an occurrence. With it, a week is
    always added to this week's offset ("next friday" on a Wednesday is nine
    days out, "next monday" is five).
    """
    days = weekday - today.weekday()
    if force_next_week or days < 0:
        days += 7
    return today + timedelta(days=days)


def _roll_forward(year: int, month: int, day: int, today: date) -> Optional[date]:
    """Build a date in today's year, moving to next year if it already passed."""
    try:
        target = date(year, month, day)
    except ValueError:
        return None
    if target < today:
        try:
            target = date(year + 1, month, day)
        except ValueError:
            return None
    return target


def _offset(days: int, confidence: float) -> Callable[[re.Match, date], Optional[DateMatch]]:
    def handler(m: re.Match, today: date) -> Optional[DateMatch]:
        return DateMatch((today + timedelta(days=days)).isoformat(), confidence, m.group(0), True)
    return handler


def _this_weekday(m: re.Match, today: date) -> Optional[DateMatch]:
    target = this_weekday(WEEKDAYS[m.group(1)], today)
    return DateMatch(target.isoformat(), 0.90, m.group(0), True)


def _next_weekday(m: re.Match, today: date) -> Optional[DateMatch]:
    target = next_weekday(WEEKDAYS[m.group(1)], today, force_next_week=True)
    return DateMatch(target.isoformat(), 0.90, m.group(0), True)


def _day_month(m: re.Match, today: date) -> Optional[DateMatch]:
    target = _roll_forward(today.year, MONTHS[m.group(2)], int(m.group(1)), today)
    if target is None:
        return None
    return DateMatch(target.isoformat(), 0.95, m.group(0), False)


def _month_day(m: re.Match, today: date) -> Optional[DateMatch]:
    target = _roll_forward(today.year, MONTHS[m.group(1)], int(m.group(2)), today)
    if target is None:
        return None
    return DateMatch(target.isoformat(), 0.95, m.group(0), False)


def _slash_date(m: re.Match, today: date) -> Optional[DateMatch]:
    # Day-first regional convention
    day, month = int(m.group(1)), int(m.group(2))
    year_text = m.group(3)
    if year_text:
        year = int(year_text)
        if year < 100:
            year += 2000
        try:
            target = date(year, month, day)
        except ValueError:
            return None
        return DateMatch(target.isoformat(), 0.95, m.group(0), False)

    target = _roll_forward(today.year, month, day, today)
    if target is None:
        return None
    return DateMatch(target.isoformat(), 0.85, m.group(0), False)


def _bare_weekday(m: re.Match, today: date) -> Optional[DateMatch]:
    # Ambiguous between this week and next; resolves to the next occurrence including today
    target = next_weekday(WEEKDAYS[m.group(1)], today)
    return DateMatch(target.isoformat(), 0.75, m.group(0), True)


DATE_PATTERNS: List[Tuple[str, re.Pattern, Callable[[re.Match, date], Optional[DateMatch]]]] = [
    ("today", re.compile(r"\b(today|tonight|hari\s*ini|hr\s*ini)\b"), _offset(0, 0.98)),
    ("day_after_tomorrow", re.compile(r"\b(day\s*after\s*tomorrow|lusa)\b"), _offset(2, 0.95)),
    ("tomorrow", re.compile(r"\b(tomorrow|tmrw|tmr|esok)\b"), _offset(1, 0.98)),
    ("yesterday", re.compile(r"\b(yesterday|semalam|kelmarin)\b"), _offset(-1, 0.95)),
    ("this_weekday", re.compile(rf"\bthis\s+({_EN_DAYS})\b"), _this_weekday),
    ("next_week", re.compile(r"\bnext\s+week\b"), _offset(7, 0.85)),
    ("next_weekday", re.compile(rf"\bnext\s+({_EN_DAYS})\b"), _next_weekday),
    ("day_month", re.compile(rf"\b(\d{{1,2}})\s*({_MONTHS})\b"), _day_month),
    ("month_day", re.compile(rf"\b({_MONTHS})\s*(\d{{1,2}})\b"), _month_day),
    ("slash_date", re.compile(r"\b(\d{1,2})[/\-](\d{1,2})(?:[/\-](\d{2,4}))?\b"), _slash_date),
    ("weekday", re.compile(rf"\b({_EN_DAYS}|{_MY_DAYS})\b"), _bare_weekday),
]


def extract_date(text: str, today: Optional[date] = None) -> Optional[DateMatch]:
    """Extract a calendar date from text.

    Args:
        text: Capture text (abbreviations may or may not be expanded)
        today: Reference date (defaults to today in the regional timezone)

    Returns:
        DateMatch or None if no pattern matched
    """
    ref = today or get_today()
    lower = (text or "").lower()
    for name, pattern, handler in DATE_PATTERNS:
        m = pattern.search(lower)
        if not m:
            continue
        result = handler(m, ref)
        if result is not None:
            logger.debug(f"Date pattern '{name}' matched '{result.matched_text}' -> {result.date}")
            return result
    return None
