"""Tests for regional normalization and location matching."""

import pytest
from datetime import date

from inboxparser.extractors.regional import (
    REGION_TZ,
    extract_location,
    get_location_info,
    get_today,
    has_location_keyword,
    normalize_text,
)
from inboxparser.models.enums import LocationType


class TestNormalizeText:
    """Test abbreviation expansion."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_text("  Gym   TOMORROW ") == "gym tomorrow"

    @pytest.mark.parametrize("text,expected", [
        ("gym tmrw", "gym tomorrow"),
        ("gym tmr", "gym tomorrow"),
        ("gym esok", "gym tomorrow"),
        ("masak hari ini", "masak today"),
        ("gym lusa", "gym day after tomorrow"),
        ("makan mlm", "makan malam"),
    ])
    def test_expansions(self, text, expected):
        assert normalize_text(text) == expected

    def test_none_is_empty(self):
        assert normalize_text(None) == ""


class TestExtractLocation:
    """Test alias lookup and the "at <place>" fallback."""

    def test_named_gym_beats_neighbourhood(self):
        match = extract_location("training today at 7pm bunker kota damansara")
        assert match.location == "The Bunker, Kota Damansara"
        assert match.location_type == LocationType.GYM
        assert match.confidence == pytest.approx(0.95)

    def test_short_alias_is_lower_confidence(self):
        match = extract_location("lunch in pj")
        assert match.location == "Petaling Jaya, Selangor"
        assert match.confidence == pytest.approx(0.85)

    def test_longest_alias_wins(self):
        assert extract_location("shopping at sunway pyramid").location == "Sunway Pyramid, Sunway"

    def test_various_area_is_not_displayed(self):
        assert extract_location("gym at fitness first").location == "Fitness First"

    def test_office(self):
        match = extract_location("deep work at office")
        assert match.location == "Office"
        assert match.location_type == LocationType.OFFICE

    def test_alias_inside_word_is_ignored(self):
        assert extract_location("kdrama night") is None

    def test_at_phrase_fallback(self):
        match = extract_location("coffee at uncle lim cafe")
        assert match.location == "uncle lim cafe"
        assert match.location_type == LocationType.OTHER
        assert match.confidence == pytest.approx(0.60)

    def test_at_day_part_is_not_a_location(self):
        assert extract_location("gym at night") is None

    @pytest.mark.parametrize("text", [
        "training at 7pm",
        "gym at 12am",
        "standup at 9am",
        "call at 9:30",
        "meeting at 10 with boss",
        "lunch at noon",
    ])
    def test_at_clock_time_is_not_a_location(self, text):
        assert extract_location(text) is None

    def test_at_phrase_after_clock_time(self):
        match = extract_location("coffee at 3pm at uncle lim cafe")
        assert match.location == "uncle lim cafe"

    def test_at_phrase_before_clock_time(self):
        assert extract_location("lunch at nasi kandar at 1pm").location == "nasi kandar"

    def test_no_location(self):
        assert extract_location("cook dinner tomorrow") is None


class TestRegionalHelpers:
    """Test lookup helpers and the regional clock."""

    def test_get_location_info(self):
        info = get_location_info("1U")
        assert info.full_name == "1 Utama"
        assert get_location_info("nowhere") is None

    def test_has_location_keyword(self):
        assert has_location_keyword("groceries at jaya grocer") is True
        assert has_location_keyword("groceries") is False

    def test_get_today_uses_regional_timezone(self):
        assert str(REGION_TZ) == "Asia/Kuala_Lumpur"
        assert isinstance(get_today(), date)
