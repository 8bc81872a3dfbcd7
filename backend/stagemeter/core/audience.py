"""
Audience score aggregation across rating platforms.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from stagemeter.models import RawAudiencePlatformRecord
from stagemeter.schemas import AudienceScoreResult, ComputedPlatform, Methodology
from stagemeter.utils import clamp_score, normalize_key, round_score

logger = logging.getLogger(__name__)


def calculate_platform_weight(platform: str, methodology: Methodology) -> float:
    """
    Trust weight for an audience platform.

    Args:
        platform: Platform identifier, e.g. "showscore"

    Returns:
        Configured weight, or the default (lowest) weight for unknown platforms
    """
    return methodology.platform_weights.get(normalize_key(platform), methodology.default_platform_weight)


def divergence_warning(normalized: List[int], threshold: float) -> Optional[str]:
    """Advisory text when two or more platforms disagree by more than threshold points."""
    if len(normalized) < 2:
        return None
    spread = max(normalized) - min(normalized)
    if spread > threshold:
        return f"Platform scores vary by {spread} points."
    return None


def compute_audience_score(
    platforms: Iterable[RawAudiencePlatformRecord],
    methodology: Methodology,
) -> Optional[AudienceScoreResult]:
    """
    Aggregate per-platform audience ratings for one production.

    Args:
        platforms: One aggregate record per platform
        methodology: Scoring configuration snapshot

    Returns:
        AudienceScoreResult, or None when no usable platform data exists
    """
    computed: List[ComputedPlatform] = []

    for record in platforms:
        if record.max_scale <= 0:
            logger.warning(
                "Skipping %s audience rating for %s: max scale %s",
                record.platform, record.production_id, record.max_scale,
            )
            continue

        computed.append(
            ComputedPlatform(
                production_id=record.production_id,
                platform=record.platform,
                platform_name=record.platform_name,
                url=record.url,
                average_rating=record.average_rating,
                max_scale=record.max_scale,
                sample_size=max(0, record.sample_size),
                normalized=round_score(clamp_score(record.average_rating / record.max_scale * 100)),
                weight=calculate_platform_weight(record.platform, methodology),
            )
        )

    if not computed:
        return None

    weighted_sum = math.fsum(p.normalized * p.weight for p in computed)
    total_weight = math.fsum(p.weight for p in computed)

    normalized = [p.normalized for p in computed]

    return AudienceScoreResult(
        score=round_score(weighted_sum / total_weight),
        platforms=computed,
        total_sample_size=sum(p.sample_size for p in computed),
        spread=max(normalized) - min(normalized),
        divergence_warning=divergence_warning(normalized, methodology.divergence_threshold),
    )
