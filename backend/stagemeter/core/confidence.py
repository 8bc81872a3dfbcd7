"""
Confidence assessment: a read-only verdict on already-computed results.

Points are awarded or removed by an ordered set of rules (critic sample size
and tier-1 coverage, inferred ratings, audience agreement, buzz volume,
lifecycle stage) and the total is bucketed into high / medium / low.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from stagemeter.models import Production
from stagemeter.schemas import (
    AudienceScoreResult,
    BuzzScoreResult,
    ConfidenceResult,
    CriticScoreResult,
    Lifecycle,
    Methodology,
)
from stagemeter.utils import normalize_text, parse_utc_datetime

logger = logging.getLogger(__name__)

NO_DATA_REASON = "No data: no critic reviews, audience ratings, or discussion threads"
COMPREHENSIVE_REASON = "Comprehensive data across multiple sources"
LIMITED_REASON = "Limited data across sources"


def resolve_lifecycle(production: Production, as_of: datetime) -> Lifecycle:
    """
    Lifecycle stage of a production at `as_of`.

    An explicit status wins; otherwise opening and closing dates decide. A
    show with a previews start but no announced opening is in previews.
    """
    status = normalize_text(production.status).lower()
    if "preview" in status:
        return "previews"
    if "closed" in status:
        return "closed"

    now = parse_utc_datetime(as_of)
    opening = parse_utc_datetime(production.opening_date)
    closing = parse_utc_datetime(production.closing_date)
    previews_start = parse_utc_datetime(production.previews_start_date)

    if closing is not None and closing < now:
        return "closed"
    if opening is not None and now < opening:
        return "previews"
    if opening is None and previews_start is not None:
        return "previews"
    return "open"


def assess_confidence(
    critic: Optional[CriticScoreResult],
    audience: Optional[AudienceScoreResult],
    buzz: Optional[BuzzScoreResult],
    lifecycle: Optional[str],
    methodology: Methodology,
) -> ConfidenceResult:
    """
    Judge how much to trust a production's scores.

    Args:
        critic: Critic result, None when absent
        audience: Audience result, None when absent
        buzz: Buzz result, None when absent
        lifecycle: "previews", "open" or "closed"
        methodology: Scoring configuration snapshot

    Returns:
        ConfidenceResult with at least one reason
    """
    rules = methodology.confidence

    if critic is None and audience is None and buzz is None:
        return ConfidenceResult(level="low", reasons=[NO_DATA_REASON])

    points = 0
    reasons: List[str] = []

    # Critic sample size and tier-1 coverage
    if critic is not None:
        count = critic.review_count
        if count >= rules.strong_min_reviews and critic.tier1_count >= rules.strong_min_tier1:
            points += rules.strong_points
        elif count >= rules.moderate_min_reviews:
            points += rules.moderate_points
            if count >= rules.strong_min_reviews:
                reasons.append(
                    f"{count} critic reviews but only {critic.tier1_count} from tier-1 outlets "
                    f"({rules.strong_min_tier1}+ preferred)"
                )
            else:
                reasons.append(f"{count} critic reviews ({rules.strong_min_reviews}+ preferred)")
        elif count > 0:
            points += rules.thin_points
            reasons.append(f"Only {count} critic review{'s' if count != 1 else ''}")

        if critic.inferred_count > count / 2:
            points -= rules.inferred_penalty
            reasons.append("Many scores inferred from sentiment")
    else:
        reasons.append("No critic reviews")

    # Cross-platform agreement
    if audience is not None:
        if len(audience.platforms) >= 2 and not audience.divergence_warning:
            points += rules.consistent_audience_points
        else:
            points += rules.single_audience_points
            if audience.divergence_warning:
                reasons.append("Audience platforms show divergent scores")
    else:
        reasons.append("No audience data")

    if buzz is not None and len(buzz.threads) >= rules.min_buzz_threads:
        points += rules.buzz_points

    if lifecycle == "previews":
        points -= rules.previews_penalty
        reasons.append("Production still in previews")

    if points >= rules.high_cutoff:
        level = "high"
    elif points >= rules.medium_cutoff:
        level = "medium"
    else:
        level = "low"

    if not reasons:
        reasons.append(COMPREHENSIVE_REASON if level == "high" else LIMITED_REASON)

    logger.debug("Confidence %s (%d points): %s", level, points, "; ".join(reasons))
    return ConfidenceResult(level=level, reasons=reasons)
