"""Entity extractors: pure functions from capture text to typed matches."""

from inboxparser.extractors.date_extractor import DateMatch, extract_date
from inboxparser.extractors.priority_extractor import (
    PriorityMatch,
    extract_priority,
    remove_priority_from_text,
)
from inboxparser.extractors.regional import LocationMatch, extract_location, get_today, normalize_text
from inboxparser.extractors.time_extractor import (
    DurationMatch,
    TimeMatch,
    extract_duration,
    extract_time,
    infer_time_preference,
    infer_time_preference_from_text,
)
from inboxparser.extractors.who_extractor import WhoMatch, classify_who_type, extract_who, find_companion

__all__ = [
    "DateMatch",
    "DurationMatch",
    "LocationMatch",
    "PriorityMatch",
    "TimeMatch",
    "WhoMatch",
    "classify_who_type",
    "extract_date",
    "extract_duration",
    "extract_location",
    "extract_priority",
    "extract_time",
    "extract_who",
    "find_companion",
    "get_today",
    "infer_time_preference",
    "infer_time_preference_from_text",
    "normalize_text",
    "remove_priority_from_text",
]
