"""Period helpers for goal matching.

Weeks are ISO weeks (Monday start); week strings look like "2026-W02".
"""

import re
from datetime import date, timedelta
from typing import Optional, Tuple

from inboxparser.models.enums import FrequencyPeriod

_WEEK_STRING = re.compile(r"^(\d{4})-W(\d{2})$")
_MONTH_STRING = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_STRING = re.compile(r"^(\d{4})$")


def get_week_number(d: date) -> int:
    return d.isocalendar()[1]


def get_week_start(d: date) -> date:
    """Monday of the week containing d."""
    return d - timedelta(days=d.weekday())


def get_week_end(d: date) -> date:
    """Sunday of the week containing d."""
    return get_week_start(d) + timedelta(days=6)


def format_week_string(d: date) -> str:
    iso_year, iso_week, _ = d.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def format_month_string(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def parse_week_string(week: str) -> Optional[date]:
    """Monday of an ISO week string, or None if malformed."""
    m = _WEEK_STRING.match(week or "")
    if not m:
        return None
    try:
        return date.fromisocalendar(int(m.group(1)), int(m.group(2)), 1)
    except ValueError:
        return None


def is_same_week(d1: date, d2: date) -> bool:
    return format_week_string(d1) == format_week_string(d2)


def is_same_month(d1: date, d2: date) -> bool:
    return d1.year == d2.year and d1.month == d2.month


def date_in_period(d: date, period: str) -> bool:
    """True if d falls inside a goal period string ("YYYY", "YYYY-MM" or "YYYY-Www")."""
    period = (period or "").strip()
    if _WEEK_STRING.match(period):
        return format_week_string(d) == period
    m = _MONTH_STRING.match(period)
    if m:
        return d.year == int(m.group(1)) and d.month == int(m.group(2))
    m = _YEAR_STRING.match(period)
    if m:
        return d.year == int(m.group(1))
    return False


def period_range(d: date, period: FrequencyPeriod) -> Tuple[date, date]:
    """Inclusive (start, end) of the day, Monday-start week or month containing d."""
    if period == FrequencyPeriod.DAY:
        return d, d
    if period == FrequencyPeriod.WEEK:
        return get_week_start(d), get_week_end(d)
    start = d.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)
