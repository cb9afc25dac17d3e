"""Tests for date extraction against a fixed reference date (Wednesday 2026-01-07)."""

import pytest
from datetime import date

from inboxparser.extractors.date_extractor import extract_date, next_weekday, this_weekday


class TestRelativeDays:
    """Test relative day words in English and Malay."""

    def test_today(self, today):
        match = extract_date("training today at 7pm", today)
        assert match.date == "2026-01-07"
        assert match.confidence == pytest.approx(0.98)
        assert match.is_relative is True

    def test_tonight_is_today(self, today):
        assert extract_date("dinner tonight", today).date == "2026-01-07"

    @pytest.mark.parametrize("text", ["cook dinner tomorrow", "gym tmrw", "gym tmr", "gym esok"])
    def test_tomorrow_variants(self, today, text):
        match = extract_date(text, today)
        assert match.date == "2026-01-08"
        assert match.confidence == pytest.approx(0.98)

    def test_day_after_tomorrow_beats_tomorrow(self, today):
        match = extract_date("laundry day after tomorrow", today)
        assert match.date == "2026-01-09"
        assert match.confidence == pytest.approx(0.95)

    def test_lusa(self, today):
        assert extract_date("gym lusa", today).date == "2026-01-09"

    def test_yesterday(self, today):
        assert extract_date("paid bills yesterday", today).date == "2026-01-06"

    def test_next_week(self, today):
        match = extract_date("budget review next week", today)
        assert match.date == "2026-01-14"
        assert match.confidence == pytest.approx(0.85)


class TestWeekdays:
    """Test weekday phrases."""

    def test_this_friday(self, today):
        assert extract_date("sparring this friday", today).date == "2026-01-09"

    def test_this_monday_may_be_in_the_past(self, today):
        assert extract_date("report this monday", today).date == "2026-01-05"

    def test_next_friday_adds_a_week(self, today):
        assert extract_date("sparring next friday", today).date == "2026-01-16"

    def test_next_monday(self, today):
        assert extract_date("standup next monday", today).date == "2026-01-12"

    def test_bare_weekday_is_lower_confidence(self, today):
        match = extract_date("training friday", today)
        assert match.date == "2026-01-09"
        assert match.confidence == pytest.approx(0.75)

    def test_bare_weekday_matching_today_resolves_to_today(self, today):
        assert extract_date("gym wednesday", today).date == "2026-01-07"

    def test_bare_weekday_already_passed_rolls_to_next_week(self, today):
        assert extract_date("gym monday", today).date == "2026-01-12"

    def test_malay_weekday(self, today):
        assert extract_date("gym jumaat", today).date == "2026-01-09"

    def test_weekday_helpers(self, today):
        assert this_weekday(0, today) == date(2026, 1, 5)
        assert next_weekday(2, today) == today
        assert next_weekday(2, today, force_next_week=True) == date(2026, 1, 14)


class TestAbsoluteDates:
    """Test day/month and slash dates."""

    def test_day_month(self, today):
        match = extract_date("dentist 15 jan", today)
        assert match.date == "2026-01-15"
        assert match.confidence == pytest.approx(0.95)
        assert match.is_relative is False

    def test_month_day(self, today):
        assert extract_date("tax filing march 3", today).date == "2026-03-03"

    def test_past_day_month_rolls_to_next_year(self, today):
        assert extract_date("renew passport 2 jan", today).date == "2027-01-02"

    def test_slash_date_is_day_first(self, today):
        match = extract_date("pay rent 5/2", today)
        assert match.date == "2026-02-05"
        assert match.confidence == pytest.approx(0.85)

    def test_slash_date_with_short_year(self, today):
        match = extract_date("insurance 1/3/27", today)
        assert match.date == "2027-03-01"
        assert match.confidence == pytest.approx(0.95)

    def test_invalid_calendar_date_is_ignored(self, today):
        assert extract_date("pay 31/2/2026", today) is None


class TestNoDate:
    """Test text without a date."""

    def test_no_date(self, today):
        assert extract_date("buy groceries", today) is None

    def test_empty_text(self, today):
        assert extract_date("", today) is None

    def test_weekday_inside_word_does_not_match(self, today):
        assert extract_date("summon the monsters", today) is None
