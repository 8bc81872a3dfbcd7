# tests/test_confidence.py
from __future__ import annotations

from datetime import date

import pytest

from conftest import AS_OF, platform, production, review, thread
from stagemeter.core.audience import compute_audience_score
from stagemeter.core.buzz import compute_buzz_score
from stagemeter.core.confidence import (
    COMPREHENSIVE_REASON,
    LIMITED_REASON,
    NO_DATA_REASON,
    assess_confidence,
    resolve_lifecycle,
)
from stagemeter.core.critic import compute_critic_score

TIER1 = ["NYT", "VULT", "VARIETY", "THR"]


def _reviews(count, tier1=0, **kwargs):
    ids = TIER1[:tier1] + [f"BLOG{i}" for i in range(count - tier1)]
    return [review(source_id, score=80, **kwargs) for source_id in ids]


def _assess(methodology, reviews=(), platforms=(), threads=(), lifecycle="open"):
    return assess_confidence(
        compute_critic_score(reviews, methodology),
        compute_audience_score(platforms, methodology),
        compute_buzz_score(threads, methodology, AS_OF),
        lifecycle,
        methodology,
    )


AGREEING = [platform("showscore", 4), platform("google", 4)]
BUSY = [thread(1)] * 5


class TestAssessConfidence:

    def test_no_data(self, methodology):
        result = _assess(methodology)
        assert result.level == "low"
        assert result.reasons == [NO_DATA_REASON]

    def test_comprehensive(self, methodology):
        result = _assess(methodology, _reviews(10, tier1=3), AGREEING, BUSY)
        assert result.level == "high"
        assert result.reasons == [COMPREHENSIVE_REASON]

    def test_many_reviews_few_tier1(self, methodology):
        result = _assess(methodology, _reviews(10, tier1=2), AGREEING, BUSY)
        assert result.level == "high"
        assert result.reasons == ["10 critic reviews but only 2 from tier-1 outlets (3+ preferred)"]

    def test_moderate_review_count(self, methodology):
        result = _assess(methodology, _reviews(6), AGREEING)
        assert result.level == "medium"
        assert result.reasons == ["6 critic reviews (10+ preferred)"]

    def test_thin_reviews_without_audience(self, methodology):
        result = _assess(methodology, _reviews(1))
        assert result.level == "low"
        assert result.reasons == ["Only 1 critic review", "No audience data"]

    def test_inferred_majority_is_penalized(self, methodology):
        inferred = [review(f"BLOG{i}", original_rating="a rave") for i in range(5)]
        result = _assess(methodology, inferred, AGREEING)
        # 2 (moderate) - 1 (inferred) + 2 (audience)
        assert result.level == "medium"
        assert "Many scores inferred from sentiment" in result.reasons

    def test_divergent_audience(self, methodology):
        divergent = [platform("showscore", 5), platform("google", 2)]
        result = _assess(methodology, _reviews(10, tier1=3), divergent)
        assert result.level == "medium"
        assert result.reasons == ["Audience platforms show divergent scores"]

    def test_previews_penalty(self, methodology):
        result = _assess(methodology, _reviews(10, tier1=3), AGREEING, lifecycle="previews")
        assert result.level == "medium"
        assert result.reasons == ["Production still in previews"]

    def test_buzz_only(self, methodology):
        result = _assess(methodology, threads=BUSY)
        assert result.level == "low"
        assert result.reasons == ["No critic reviews", "No audience data"]

    def test_reasons_never_empty(self, methodology):
        strict = methodology.model_copy(
            update={"confidence": methodology.confidence.model_copy(update={"high_cutoff": 99})}
        )
        result = _assess(strict, _reviews(10, tier1=3), AGREEING, BUSY)
        assert result.level == "medium"
        assert result.reasons == [LIMITED_REASON]


class TestLifecycle:

    @pytest.mark.parametrize("status,expected", [
        ("previews", "previews"),
        ("In Previews", "previews"),
        ("closed", "closed"),
        ("open", "open"),
        (None, "open"),
    ])
    def test_status(self, status, expected):
        assert resolve_lifecycle(production(status=status), AS_OF) == expected

    def test_closing_date_in_the_past(self):
        show = production(status=None, closing_date="2026-02-01")
        assert resolve_lifecycle(show, AS_OF) == "closed"

    def test_opening_date_in_the_future(self):
        show = production(status=None, opening_date=date(2026, 4, 1))
        assert resolve_lifecycle(show, AS_OF) == "previews"

    def test_running(self):
        show = production(status=None, opening_date="2026-01-15", closing_date="2026-06-30")
        assert resolve_lifecycle(show, AS_OF) == "open"

    def test_status_wins_over_dates(self):
        show = production(status="previews", opening_date="2026-01-15")
        assert resolve_lifecycle(show, AS_OF) == "previews"

    def test_previews_start_without_opening(self):
        show = production(status=None, previews_start_date="2026-02-10")
        assert resolve_lifecycle(show, AS_OF) == "previews"

    def test_previews_start_with_past_opening(self):
        show = production(status=None, previews_start_date="2026-01-02", opening_date="2026-01-20")
        assert resolve_lifecycle(show, AS_OF) == "open"

    def test_numeric_status_does_not_raise(self):
        assert resolve_lifecycle(production(status=3), AS_OF) == "open"
