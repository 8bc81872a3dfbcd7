"""
Scoring engine coordinator: runs every aggregator for one or many productions.

The three family aggregators run independently; their results feed the
composite blender and the confidence assessor, which never feed back.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from stagemeter.config import get_methodology
from stagemeter.core.audience import compute_audience_score
from stagemeter.core.buzz import compute_buzz_score
from stagemeter.core.composite import composite_from_results, score_bucket
from stagemeter.core.confidence import assess_confidence, resolve_lifecycle
from stagemeter.core.critic import compute_critic_score
from stagemeter.core.outlets import OutletTrustResolver
from stagemeter.models import (
    Production,
    RawAudiencePlatformRecord,
    RawBuzzThread,
    RawReviewRecord,
)
from stagemeter.schemas import Methodology, ProductionScores
from stagemeter.utils import now_utc, parse_utc_datetime

logger = logging.getLogger(__name__)

R = TypeVar("R", RawReviewRecord, RawAudiencePlatformRecord, RawBuzzThread)


def group_by_production(records: Iterable[R]) -> Dict[str, List[R]]:
    """
    Bucket records by production id, preserving input order within a bucket.

    Args:
        records: Review, audience or buzz records for any number of productions

    Returns:
        Mapping of production id to its records
    """
    grouped: Dict[str, List[R]] = defaultdict(list)
    for record in records:
        grouped[record.production_id].append(record)
    return grouped


def score_production(
    production: Production,
    reviews: Iterable[RawReviewRecord],
    audience: Iterable[RawAudiencePlatformRecord],
    threads: Iterable[RawBuzzThread],
    methodology: Optional[Methodology] = None,
    as_of: Optional[datetime] = None,
    resolver: Optional[OutletTrustResolver] = None,
) -> ProductionScores:
    """
    Compute every score for one production.

    Records belonging to other productions are ignored, so callers may pass
    unfiltered collections.

    Args:
        production: Catalog identity
        reviews: Critic review records
        audience: Audience platform records
        threads: Discussion threads
        methodology: Configuration snapshot (the configured one if omitted)
        as_of: Reference "now" for recency and lifecycle (read once if omitted)
        resolver: Outlet resolver to reuse across productions

    Returns:
        ProductionScores
    """
    methodology = methodology or get_methodology()
    as_of = parse_utc_datetime(as_of) or now_utc()

    own_reviews = [r for r in reviews if r.production_id == production.id]
    own_audience = [a for a in audience if a.production_id == production.id]
    own_threads = [t for t in threads if t.production_id == production.id]

    critic = compute_critic_score(own_reviews, methodology, resolver=resolver)
    audience_result = compute_audience_score(own_audience, methodology)
    buzz = compute_buzz_score(own_threads, methodology, as_of)

    composite = composite_from_results(critic, audience_result, buzz, methodology)
    lifecycle = resolve_lifecycle(production, as_of)
    confidence = assess_confidence(critic, audience_result, buzz, lifecycle, methodology)

    return ProductionScores(
        production_id=production.id,
        slug=production.slug,
        title=production.title,
        lifecycle=lifecycle,
        critic=critic,
        audience=audience_result,
        buzz=buzz,
        composite=composite,
        bucket=score_bucket(composite.score if composite else None, methodology),
        confidence=confidence,
        methodology_version=methodology.version,
        computed_at=as_of,
    )


def score_productions(
    productions: Sequence[Production],
    reviews: Iterable[RawReviewRecord],
    audience: Iterable[RawAudiencePlatformRecord],
    threads: Iterable[RawBuzzThread],
    methodology: Optional[Methodology] = None,
    as_of: Optional[datetime] = None,
) -> List[ProductionScores]:
    """
    Batch pass over many productions with one methodology and one "now".

    Args:
        productions: Catalog identities to score
        reviews, audience, threads: Records for any of those productions
        methodology: Configuration snapshot (the configured one if omitted)
        as_of: Reference "now" shared by the whole batch

    Returns:
        One ProductionScores per production, in input order
    """
    methodology = methodology or get_methodology()
    as_of = parse_utc_datetime(as_of) or now_utc()
    resolver = OutletTrustResolver(methodology)

    reviews_by_id = group_by_production(reviews)
    audience_by_id = group_by_production(audience)
    threads_by_id = group_by_production(threads)

    results = [
        score_production(
            production,
            reviews_by_id.get(production.id, []),
            audience_by_id.get(production.id, []),
            threads_by_id.get(production.id, []),
            methodology=methodology,
            as_of=as_of,
            resolver=resolver,
        )
        for production in productions
    ]

    scored = sum(1 for r in results if r.composite is not None)
    logger.info(
        "Scored %d productions (%d with a composite) using methodology %s",
        len(results), scored, methodology.version,
    )
    return results
