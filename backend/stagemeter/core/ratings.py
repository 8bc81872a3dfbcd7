"""
Rating normalization: free-form critic ratings to a 0-100 score.

Each supported format is an independent matcher returning a RatingMatch or
None. Matchers are tried in order and the first match wins; when nothing
matches the methodology's default score is returned, flagged as inferred.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from stagemeter.schemas import Methodology, NormalizedRating
from stagemeter.utils import clamp_score, normalize_text, round_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingMatch:
    score: float
    method: str
    inferred: bool = False


@dataclass(frozen=True)
class RatingContext:
    methodology: Methodology
    max_scale: float = 100
    star_scale: float = 5


Matcher = Callable[[str, RatingContext], Optional[RatingMatch]]


# ---------------------------------------------------------------------------
# Stars and fractions
# ---------------------------------------------------------------------------

_NUMBER = r"(\d+(?:\.\d+)?)"
_FRACTION_RE = re.compile(rf"^{_NUMBER}\s*(?:/|out\s+of|of)\s*{_NUMBER}")
_STARS_RE = re.compile(rf"^{_NUMBER}\s*stars?\b")
_FULL_STAR = "★⭐"
_EMPTY_STAR = "☆"
_HALF_STAR = "½"


def _scaled_match(value: float, method: str) -> Optional[RatingMatch]:
    """Clamped 0-100 match; digit strings too long for a float are no match."""
    if not math.isfinite(value):
        return None
    return RatingMatch(score=round_score(clamp_score(value)), method=method)


def _fraction_score(value: float, maximum: float) -> Optional[RatingMatch]:
    if maximum <= 0:
        return None
    return _scaled_match(value / maximum * 100, "stars")


def match_star_rating(text: str, ctx: RatingContext) -> Optional[RatingMatch]:
    """'4/5', '3.5 out of 5', '3 stars', '★★★½☆'."""
    lowered = text.lower()

    fraction = _FRACTION_RE.match(lowered)
    if fraction:
        return _fraction_score(float(fraction.group(1)), float(fraction.group(2)))

    stars = _STARS_RE.match(lowered)
    if stars:
        return _fraction_score(float(stars.group(1)), ctx.star_scale)

    full = sum(lowered.count(glyph) for glyph in _FULL_STAR)
    half = lowered.count(_HALF_STAR)
    if full == 0 and half == 0:
        return None
    empty = lowered.count(_EMPTY_STAR)
    scale = full + half + empty if empty else max(ctx.star_scale, full + half)
    return _fraction_score(full + 0.5 * half, scale)


# ---------------------------------------------------------------------------
# Letter grades
# ---------------------------------------------------------------------------

_GRADE = r"([A-F])\s*(\+|-|PLUS\b|MINUS\b)?"
_GRADE_RE = re.compile(rf"^(?:GRADE\s*:?\s*)?{_GRADE}$")
_GRADE_RANGE_RE = re.compile(rf"^(?:GRADE\s*:?\s*)?{_GRADE}\s*(?:/|TO)\s*{_GRADE}$")
_MODIFIERS = {"+": "+", "PLUS": "+", "-": "-", "MINUS": "-"}


def _grade_key(letter: str, modifier: Optional[str]) -> str:
    return letter + _MODIFIERS.get(modifier or "", "")


def match_letter_grade(text: str, ctx: RatingContext) -> Optional[RatingMatch]:
    """'B+', 'a minus', 'Grade: B+', and ranges 'B+/A-' or 'B to B+'."""
    upper = text.upper()
    grades = ctx.methodology.letter_grades

    single = _GRADE_RE.match(upper)
    if single:
        key = _grade_key(single.group(1), single.group(2))
        if key in grades:
            return RatingMatch(score=grades[key], method="letter")
        return None

    span = _GRADE_RANGE_RE.match(upper)
    if span:
        low = _grade_key(span.group(1), span.group(2))
        high = _grade_key(span.group(3), span.group(4))
        if low in grades and high in grades:
            return RatingMatch(score=round_score((grades[low] + grades[high]) / 2), method="letter_range")

    return None


# ---------------------------------------------------------------------------
# Percentages and bare numbers
# ---------------------------------------------------------------------------

_PERCENT_RE = re.compile(rf"^{_NUMBER}\s*%$")
_BARE_NUMBER_RE = re.compile(rf"^{_NUMBER}$")


def match_percentage(text: str, ctx: RatingContext) -> Optional[RatingMatch]:
    """'85%' is always out of 100; a bare '8' is read against max_scale."""
    percent = _PERCENT_RE.match(text)
    if percent:
        return _scaled_match(float(percent.group(1)), "percent")

    bare = _BARE_NUMBER_RE.match(text)
    if bare and ctx.max_scale > 0:
        value = float(bare.group(1)) / ctx.max_scale * 100
        return _scaled_match(value, "number")

    return None


# ---------------------------------------------------------------------------
# Sentiment keywords
# ---------------------------------------------------------------------------

def match_sentiment_keyword(text: str, ctx: RatingContext) -> Optional[RatingMatch]:
    lowered = text.lower()
    for keyword, score in ctx.methodology.sentiment_keywords.items():
        if re.search(rf"(?<![\w-]){re.escape(keyword)}(?![\w-])", lowered):
            return RatingMatch(score=score, method="sentiment", inferred=True)
    return None


DEFAULT_MATCHERS: Sequence[Matcher] = (
    match_star_rating,
    match_letter_grade,
    match_percentage,
    match_sentiment_keyword,
)


class RatingNormalizer:
    """
    Runs the matcher chain for one methodology.

    Usage:
        normalizer = RatingNormalizer(methodology)
        rating = normalizer.normalize("B+")        # score=88, inferred=False
        rating = normalizer.normalize("a rave")    # score=95, inferred=True
    """

    def __init__(self, methodology: Methodology, matchers: Sequence[Matcher] = DEFAULT_MATCHERS):
        self.methodology = methodology
        self.matchers = tuple(matchers)

    def normalize(
        self,
        text: Optional[str],
        max_scale: float = 100,
        star_scale: Optional[float] = None,
    ) -> NormalizedRating:
        """
        Normalize one rating expression.

        Args:
            text: Rating as printed by the outlet
            max_scale: Scale for bare numbers ("8" with max_scale=10 -> 80)
            star_scale: Scale for "3 stars" without a denominator (default 5)

        Returns:
            NormalizedRating; never raises
        """
        cleaned = normalize_text(text)
        if cleaned:
            ctx = RatingContext(
                methodology=self.methodology,
                max_scale=max_scale,
                star_scale=star_scale or 5,
            )
            for matcher in self.matchers:
                match = matcher(cleaned, ctx)
                if match is not None and math.isfinite(match.score):
                    return NormalizedRating(
                        score=round_score(clamp_score(match.score)),
                        inferred=match.inferred,
                        method=match.method,
                    )

        logger.debug("Unrecognized rating %r, using default score", text)
        return NormalizedRating(
            score=round_score(self.methodology.default_score),
            inferred=True,
            method="default",
        )


def normalize_rating(
    text: Optional[str],
    methodology: Methodology,
    max_scale: float = 100,
    star_scale: Optional[float] = None,
) -> NormalizedRating:
    """Functional form of RatingNormalizer.normalize."""
    return RatingNormalizer(methodology).normalize(text, max_scale=max_scale, star_scale=star_scale)
