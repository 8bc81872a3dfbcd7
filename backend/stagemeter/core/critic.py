"""
Critic score aggregation.

Each review is normalized to 0-100, bumped for designations, and weighted by
its outlet's trust tier. Two averages come out: a simple mean and a
tier-weighted mean, where weight is total tier weight rather than count so a
few tier-1 outlets can outweigh many tier-3 ones.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Tuple

from stagemeter.core.outlets import OutletTrustResolver
from stagemeter.core.ratings import RatingNormalizer
from stagemeter.models import RawReviewRecord
from stagemeter.schemas import ComputedReview, CriticScoreResult, Methodology, NormalizedRating
from stagemeter.utils import clamp_score, normalize_key, round_half_up, round_score

logger = logging.getLogger(__name__)


def critic_label(score: float, methodology: Methodology) -> str:
    """Map a critic average to its qualitative band (bands are sorted high to low)."""
    for label, minimum in methodology.critic_labels:
        if score >= minimum:
            return label
    return methodology.critic_labels[-1][0]


def designation_bonus(designation: Optional[str], methodology: Methodology) -> float:
    """Configured bonus for a designation tag, 0 when absent or unrecognized."""
    if not designation:
        return 0.0
    return methodology.designation_bumps.get(normalize_key(designation), 0.0)


def resolve_base_score(
    review: RawReviewRecord,
    normalizer: RatingNormalizer,
    star_scale: Optional[float] = None,
) -> NormalizedRating:
    """
    Pick the base score for one review.

    Priority: explicit score > original rating text (unless it only fell back
    to the default) > bucket label > thumb > default.
    """
    methodology = normalizer.methodology

    if review.score is not None:
        return NormalizedRating(score=round_score(clamp_score(review.score)), inferred=False, method="explicit")

    if review.original_rating:
        rating = normalizer.normalize(review.original_rating, star_scale=star_scale)
        if rating.method != "default":
            return rating

    bucket = methodology.bucket_scores.get(normalize_key(review.bucket))
    if bucket is not None:
        return NormalizedRating(score=round_score(bucket), inferred=True, method="bucket")

    thumb = methodology.thumb_scores.get(normalize_key(review.thumb))
    if thumb is not None:
        return NormalizedRating(score=round_score(thumb), inferred=True, method="thumb")

    logger.debug(
        "No usable rating for %s review of %s, using default score",
        review.source_id, review.production_id,
    )
    return NormalizedRating(score=round_score(methodology.default_score), inferred=True, method="default")


def _review_sort_key(review: ComputedReview) -> Tuple:
    return (-review.score, review.tier, review.outlet_id, review.critic_name or "", review.url or "")


def compute_critic_score(
    reviews: Iterable[RawReviewRecord],
    methodology: Methodology,
    resolver: Optional[OutletTrustResolver] = None,
) -> Optional[CriticScoreResult]:
    """
    Aggregate all reviews for one production.

    Args:
        reviews: Review records for a single production
        methodology: Scoring configuration snapshot
        resolver: Outlet resolver to reuse across calls (built if omitted)

    Returns:
        CriticScoreResult, or None when there are no reviews
    """
    records: List[RawReviewRecord] = list(reviews)
    if not records:
        return None

    resolver = resolver or OutletTrustResolver(methodology)
    normalizer = RatingNormalizer(methodology)

    computed: List[ComputedReview] = []
    for review in records:
        trust = resolver.resolve(review.source_id, review.outlet_name, review.url)
        base = resolve_base_score(review, normalizer, star_scale=trust.max_scale)

        bonus = designation_bonus(review.designation, methodology)
        final = min(100.0, base.score + bonus)

        computed.append(
            ComputedReview(
                production_id=review.production_id,
                source_id=review.source_id,
                outlet_id=trust.outlet_id,
                outlet_name=review.outlet_name or trust.name,
                critic_name=review.critic_name,
                url=review.url,
                publish_date=review.publish_date,
                original_rating=review.original_rating,
                designation=review.designation,
                excerpt=review.excerpt,
                tier=trust.tier,
                tier_weight=trust.weight,
                base_score=base.score,
                designation_bonus=final - base.score,
                score=final,
                inferred=base.inferred,
                rating_method=base.method,
            )
        )

    total_weight = math.fsum(r.tier_weight for r in computed)
    for review in computed:
        review.contribution_weight = round_half_up(review.tier_weight / total_weight, 4)

    simple_average = round_half_up(math.fsum(r.score for r in computed) / len(computed), 2)
    weighted_average = round_half_up(math.fsum(r.score * r.tier_weight for r in computed) / total_weight, 2)

    computed.sort(key=_review_sort_key)

    return CriticScoreResult(
        simple_average=simple_average,
        tier_weighted_average=weighted_average,
        review_count=len(computed),
        tier1_count=sum(1 for r in computed if r.tier == 1),
        inferred_count=sum(1 for r in computed if r.inferred),
        label=critic_label(simple_average, methodology),
        reviews=computed,
    )
