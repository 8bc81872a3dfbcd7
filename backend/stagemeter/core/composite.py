"""
Composite blending of the critic, audience and buzz family scores.
"""
from __future__ import annotations

import math
from typing import Dict, Optional

from stagemeter.schemas import (
    FAMILIES,
    AudienceScoreResult,
    BuzzScoreResult,
    CompositeScoreResult,
    CriticScoreResult,
    Methodology,
)
from stagemeter.utils import round_score


def compute_composite_score(
    critic: Optional[float],
    audience: Optional[float],
    buzz: Optional[float],
    methodology: Methodology,
) -> Optional[CompositeScoreResult]:
    """
    Blend whichever family scores are present.

    Absent families (None) get weight 0 and the remaining nominal weights are
    renormalized to sum to 1. A present score of 0 is weighted like any other.

    Returns:
        CompositeScoreResult, or None when all three families are absent
    """
    components: Dict[str, Optional[float]] = {"critic": critic, "audience": audience, "buzz": buzz}

    present = {
        family: methodology.component_weights.get(family, 0.0)
        for family, value in components.items()
        if value is not None
    }
    total_weight = math.fsum(present.values())
    if not present or total_weight <= 0:
        return None

    weights = {family: present.get(family, 0.0) / total_weight for family in FAMILIES}
    score = math.fsum(components[family] * weight for family, weight in weights.items() if weight)

    return CompositeScoreResult(
        score=round_score(score),
        weights=weights,
        components=components,
    )


def composite_from_results(
    critic: Optional[CriticScoreResult],
    audience: Optional[AudienceScoreResult],
    buzz: Optional[BuzzScoreResult],
    methodology: Methodology,
) -> Optional[CompositeScoreResult]:
    """Composite over aggregator results; the critic family contributes its tier-weighted average."""
    return compute_composite_score(
        critic.tier_weighted_average if critic else None,
        audience.score if audience else None,
        buzz.score if buzz else None,
        methodology,
    )


def score_bucket(score: Optional[float], methodology: Methodology) -> str:
    """Display bucket for a composite score ("must-see" .. "skip"); "pending" without a score."""
    if score is None:
        return "pending"
    for bucket, minimum in methodology.score_buckets:
        if score >= minimum:
            return bucket
    return methodology.score_buckets[-1][0]
