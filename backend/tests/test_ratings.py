# tests/test_ratings.py
"""
Rating normalizer tests.

Covers:
  1. Star / fraction notation
  2. Letter grades and grade ranges
  3. Percentages and bare numbers
  4. Sentiment keywords (inferred)
  5. Fallback default and matcher-chain composition
  6. Input that must fall back instead of raising
"""
from __future__ import annotations

import math

import pytest

from stagemeter.core.ratings import (
    RatingContext,
    RatingMatch,
    RatingNormalizer,
    match_letter_grade,
    match_percentage,
    match_star_rating,
    normalize_rating,
)

GRADE_ORDER = ["A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "D-", "F"]


# ---------------------------------------------------------------------------
# 1. Stars
# ---------------------------------------------------------------------------

class TestStarRatings:

    @pytest.mark.parametrize("text,expected", [
        ("4/5", 80),
        ("3.5/5", 70),
        ("3/4", 75),
        ("4 / 5 stars", 80),
        ("3.5 out of 5", 70),
        ("7 of 10", 70),
        ("3 stars", 60),
        ("1 star", 20),
        ("★★★★", 80),
        ("★★★½☆", 70),
        ("★★☆☆", 50),
    ])
    def test_star_formats(self, methodology, text, expected):
        rating = normalize_rating(text, methodology)
        assert rating.score == expected
        assert rating.inferred is False
        assert rating.method == "stars"

    @pytest.mark.parametrize("x,y", [(x, y) for y in (4, 5, 10) for x in range(0, y + 1)] + [(1, 8), (3, 8)])
    def test_fraction_is_rounded_percentage(self, methodology, x, y):
        expected = math.floor(x / y * 100 + 0.5)
        assert normalize_rating(f"{x}/{y}", methodology).score == expected

    def test_fraction_above_scale_is_clamped(self, methodology):
        assert normalize_rating("6/5", methodology).score == 100

    def test_star_scale_applies_when_denominator_missing(self, methodology):
        assert normalize_rating("3 stars", methodology, star_scale=4).score == 75

    def test_zero_denominator_is_not_a_star_match(self, methodology):
        ctx = RatingContext(methodology=methodology)
        assert match_star_rating("3/0", ctx) is None
        rating = normalize_rating("3/0", methodology)
        assert rating.inferred is True
        assert rating.method == "default"


# ---------------------------------------------------------------------------
# 2. Letter grades
# ---------------------------------------------------------------------------

class TestLetterGrades:

    def test_every_grade_is_exact(self, methodology):
        for grade in GRADE_ORDER:
            rating = normalize_rating(grade, methodology)
            assert rating.score == methodology.letter_grades[grade]
            assert rating.inferred is False
            assert rating.method == "letter"

    def test_grades_are_strictly_decreasing(self, methodology):
        scores = [normalize_rating(g, methodology).score for g in GRADE_ORDER]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    @pytest.mark.parametrize("text,expected", [
        ("b+", 88),
        (" A ", 95),
        ("A minus", 92),
        ("c plus", 78),
        ("Grade: B+", 88),
    ])
    def test_grade_spellings(self, methodology, text, expected):
        assert normalize_rating(text, methodology).score == expected

    def test_grade_range_slash_is_mean(self, methodology):
        rating = normalize_rating("B+/A-", methodology)
        assert rating.score == 90
        assert rating.method == "letter_range"
        assert rating.inferred is False

    def test_grade_range_to_rounds_half_up(self, methodology):
        # (85 + 88) / 2 = 86.5
        assert normalize_rating("B to B+", methodology).score == 87

    def test_unknown_grade_is_not_a_letter_match(self, methodology):
        ctx = RatingContext(methodology=methodology)
        assert match_letter_grade("F+", ctx) is None
        assert match_letter_grade("4/5", ctx) is None


# ---------------------------------------------------------------------------
# 3. Percentages and bare numbers
# ---------------------------------------------------------------------------

class TestPercentages:

    @pytest.mark.parametrize("text,expected", [
        ("60%", 60),
        ("85 %", 85),
        ("120%", 100),
        ("72", 72),
        ("0", 0),
        ("250", 100),
    ])
    def test_percentages(self, methodology, text, expected):
        rating = normalize_rating(text, methodology)
        assert rating.score == expected
        assert rating.inferred is False

    def test_bare_number_uses_max_scale(self, methodology):
        rating = normalize_rating("8", methodology, max_scale=10)
        assert rating.score == 80
        assert rating.method == "number"

    def test_percent_sign_ignores_max_scale(self, methodology):
        assert normalize_rating("8%", methodology, max_scale=10).score == 8

    def test_text_is_not_a_percentage(self, methodology):
        assert match_percentage("B+", RatingContext(methodology=methodology)) is None


# ---------------------------------------------------------------------------
# 4. Sentiment keywords
# ---------------------------------------------------------------------------

class TestSentimentKeywords:

    @pytest.mark.parametrize("text,expected", [
        ("Rave", 95),
        ("A rave from the Times", 95),
        ("positive", 80),
        ("Mixed-Positive", 65),
        ("mixed-negative", 45),
        ("Mixed", 55),
        ("NEGATIVE", 30),
        ("pan", 15),
    ])
    def test_keywords_are_inferred(self, methodology, text, expected):
        rating = normalize_rating(text, methodology)
        assert rating.score == expected
        assert rating.inferred is True
        assert rating.method == "sentiment"

    def test_keyword_must_be_a_whole_word(self, methodology):
        rating = normalize_rating("Panache to spare", methodology)
        assert rating.method == "default"


# ---------------------------------------------------------------------------
# 5. Fallback and chain composition
# ---------------------------------------------------------------------------

class TestFallback:

    @pytest.mark.parametrize("text", [None, "", "   ", "Critics' Pick", "see the show"])
    def test_unparseable_is_default_and_inferred(self, methodology, text):
        rating = normalize_rating(text, methodology)
        assert rating.score == 50
        assert rating.inferred is True
        assert rating.method == "default"

    def test_first_matcher_wins(self, methodology):
        # "4/5 - a rave" is read as stars, not sentiment
        assert normalize_rating("4/5 - a rave", methodology).method == "stars"

    def test_custom_chain(self, methodology):
        normalizer = RatingNormalizer(methodology, matchers=[match_percentage])
        assert normalizer.normalize("B+").method == "default"
        assert normalizer.normalize("77%").score == 77


# ---------------------------------------------------------------------------
# 6. Oversized and non-string input
# ---------------------------------------------------------------------------

class TestOversizedNumbers:

    @pytest.mark.parametrize("text", [
        "9" * 400 + "/5",
        "9" * 400 + "/" + "9" * 400,
        "9" * 400 + " stars",
        "9" * 400 + "%",
        "9" * 400,
    ])
    def test_too_long_for_a_float_is_default(self, methodology, text):
        rating = normalize_rating(text, methodology)
        assert rating.score == 50
        assert rating.method == "default"
        assert rating.inferred is True

    def test_huge_denominator_is_zero(self, methodology):
        assert normalize_rating("5/" + "9" * 400, methodology).score == 0

    def test_non_finite_custom_match_is_skipped(self, methodology):
        def always_nan(text, ctx):
            return RatingMatch(score=float("nan"), method="percent")

        normalizer = RatingNormalizer(methodology, matchers=[always_nan, match_percentage])
        assert normalizer.normalize("77%").score == 77

    def test_non_string_rating(self, methodology):
        rating = normalize_rating(4, methodology, max_scale=5)
        assert rating.score == 80
        assert rating.method == "number"
