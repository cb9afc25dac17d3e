"""Tests for intent classification and activity descriptions."""

import pytest

from inboxparser.engine.intent import classify_intent, get_all_intent_scores, infer_activity_description
from inboxparser.models.enums import LifeAspect


class TestClassifyIntent:
    """Test keyword-weighted aspect classification."""

    def test_two_primary_keywords(self):
        result = classify_intent("training today at 7pm bunker kota damansara")
        assert result.aspect == LifeAspect.FITNESS
        assert result.confidence == pytest.approx(0.8)
        assert "training" in result.matched_keywords
        assert "bunker" in result.matched_keywords

    def test_single_primary_keyword(self):
        result = classify_intent("gym")
        assert result.aspect == LifeAspect.FITNESS
        assert result.confidence == pytest.approx(0.4)

    def test_nutrition(self):
        result = classify_intent("cook dinner tomorrow")
        assert result.aspect == LifeAspect.NUTRITION
        assert result.confidence == pytest.approx(0.8)

    def test_secondary_keywords_only(self):
        result = classify_intent("p1 call client tomorrow 3pm")
        assert result.aspect == LifeAspect.CAREER
        assert result.confidence == pytest.approx(0.4)

    def test_primary_tier_is_capped(self):
        result = classify_intent("gym workout cardio yoga")
        assert result.confidence == pytest.approx(0.8)

    def test_total_is_capped_at_one(self):
        result = classify_intent("gym workout lifting weights session practice")
        assert result.confidence <= 1.0

    def test_no_keywords(self):
        assert classify_intent("asdkjasd") is None

    def test_keywords_are_word_bounded(self):
        # "ic" is a chores keyword and must not fire inside "music"
        scores = {r.aspect: r for r in get_all_intent_scores("music")}
        assert scores[LifeAspect.CHORES].confidence == 0.0

    def test_plural_form_matches(self):
        assert classify_intent("meetings").aspect == LifeAspect.CAREER


class TestAmbiguity:
    """Test the ambiguity discount between close aspects."""

    def test_close_scores_are_discounted(self):
        # fitness "gym" 0.4 vs nutrition "cook" 0.4
        result = classify_intent("gym cook")
        assert result.confidence == pytest.approx(0.36)

    def test_ties_keep_enum_order(self):
        assert classify_intent("gym cook").aspect == LifeAspect.FITNESS

    def test_discount_is_configurable(self):
        result = classify_intent("gym cook", ambiguity_discount=0.5)
        assert result.confidence == pytest.approx(0.2)

    def test_clear_winner_is_not_discounted(self):
        result = classify_intent("training gym cook", ambiguity_margin=0.1)
        assert result.aspect == LifeAspect.FITNESS
        assert result.confidence == pytest.approx(0.8)

    def test_all_scores_sorted(self):
        scores = get_all_intent_scores("cook dinner")
        assert len(scores) == len(LifeAspect)
        assert scores[0].aspect == LifeAspect.NUTRITION
        assert [s.confidence for s in scores] == sorted((s.confidence for s in scores), reverse=True)


class TestActivityDescription:
    """Test activity title inference."""

    def test_strips_dates_times_and_place(self):
        intent = classify_intent("training today at 7pm bunker kota damansara")
        assert infer_activity_description("training today at 7pm bunker kota damansara", intent) == "Training"

    def test_strips_relative_day(self):
        assert infer_activity_description("cook dinner tomorrow", None) == "Cook dinner"

    def test_falls_back_to_keyword(self):
        intent = classify_intent("gym")
        assert infer_activity_description("tomorrow 7pm", intent) == "Gym"

    def test_empty(self):
        assert infer_activity_description("", None) == ""
