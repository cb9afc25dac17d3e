"""Tests for clock time, day-part and duration extraction."""

import pytest

from inboxparser.extractors.time_extractor import (
    extract_duration,
    extract_time,
    infer_time_preference,
    infer_time_preference_from_text,
)
from inboxparser.models.enums import TimePreference


class TestExplicitTimes:
    """Test 12-hour and 24-hour clock times."""

    def test_pm_time(self):
        match = extract_time("training today at 7pm")
        assert match.time == "19:00"
        assert match.confidence == pytest.approx(0.95)
        assert match.time_preference == TimePreference.EVENING
        assert match.is_explicit is True

    def test_am_time_with_minutes(self):
        match = extract_time("run 6:30am")
        assert match.time == "06:30"
        assert match.time_preference == TimePreference.MORNING

    def test_noon_and_midnight_edges(self):
        assert extract_time("lunch 12pm").time == "12:00"
        assert extract_time("deploy 12am").time == "00:00"

    def test_24_hour_time(self):
        match = extract_time("standup 09:15")
        assert match.time == "09:15"
        assert match.confidence == pytest.approx(0.98)

    def test_explicit_time_beats_day_part(self):
        assert extract_time("gym evening 6pm").time == "18:00"

    def test_out_of_range_hour_is_not_a_time(self):
        assert extract_time("13pm") is None


class TestRelativeTimes:
    """Test vague day-part phrases."""

    @pytest.mark.parametrize("text,expected_time,expected_preference", [
        ("gym morning", "09:00", TimePreference.MORNING),
        ("gym early morning", "06:00", TimePreference.MORNING),
        ("call after work", "18:00", TimePreference.EVENING),
        ("cook lunch", "12:30", TimePreference.AFTERNOON),
        ("dj practice tonight", "21:00", TimePreference.EVENING),
        ("masak malam", "19:00", TimePreference.EVENING),
    ])
    def test_day_parts(self, text, expected_time, expected_preference):
        match = extract_time(text)
        assert match.time == expected_time
        assert match.time_preference == expected_preference
        assert match.confidence == pytest.approx(0.70)
        assert match.is_explicit is False

    def test_no_time(self):
        assert extract_time("buy groceries") is None


class TestTimePreference:
    """Test day-part bands."""

    @pytest.mark.parametrize("time_str,expected", [
        ("05:00", TimePreference.MORNING),
        ("11:59", TimePreference.MORNING),
        ("12:00", TimePreference.AFTERNOON),
        ("16:59", TimePreference.AFTERNOON),
        ("17:00", TimePreference.EVENING),
        ("02:00", TimePreference.EVENING),
    ])
    def test_bands(self, time_str, expected):
        assert infer_time_preference(time_str) == expected

    def test_preference_from_vague_text(self):
        assert infer_time_preference_from_text("gym before work") == TimePreference.MORNING
        assert infer_time_preference_from_text("groceries afternoon") == TimePreference.AFTERNOON
        assert infer_time_preference_from_text("laundry tonight") == TimePreference.EVENING
        assert infer_time_preference_from_text("laundry") is None


class TestDuration:
    """Test duration quantities."""

    def test_hours(self):
        match = extract_duration("dj practice 2 hours")
        assert match.minutes == 120
        assert match.confidence == pytest.approx(0.95)

    def test_fractional_hours(self):
        assert extract_duration("muay thai 1.5 hrs").minutes == 90

    def test_minutes(self):
        assert extract_duration("stretch 20 min").minutes == 20

    def test_malay_units(self):
        assert extract_duration("masak 1 jam").minutes == 60

    def test_no_duration(self):
        assert extract_duration("cook dinner tomorrow") is None
