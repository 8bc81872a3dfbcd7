"""
Buzz score: discussion volume plus engagement-weighted sentiment.

    volume    = min(cap, min(2, threads / baseline) * 20 + min(10, log10(engagement + 1) * 3))
    sentiment = sum(value(thread) * log10(engagement(thread) + 10)) / sum(log10(...))
    buzz      = max(0, volume + sentiment - staleness penalty)

The staleness penalty applies when fewer than half of the threads fall inside
the recency window ending at `as_of`.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from stagemeter.models import RawBuzzThread
from stagemeter.schemas import BuzzScoreResult, BuzzSettings, BuzzThreadDetail, Methodology
from stagemeter.utils import normalize_text, parse_utc_datetime, round_score

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def calculate_volume_score(thread_count: int, total_engagement: int, cfg: BuzzSettings) -> int:
    """Activity subscore from thread count against the baseline and total engagement."""
    ratio = min(cfg.volume_ratio_cap, thread_count / cfg.baseline_threads)
    engagement_bonus = min(cfg.engagement_bonus_cap, math.log10(max(0, total_engagement) + 1) * cfg.engagement_bonus_factor)
    return round_score(min(cfg.volume_max_score, ratio * cfg.volume_ratio_points + engagement_bonus))


def calculate_engagement_weight(engagement: int) -> float:
    """Log scale so high-engagement threads count more without any one dominating."""
    return math.log10(max(0, engagement) + 10)


def sentiment_value(sentiment: str, cfg: BuzzSettings) -> float:
    key = normalize_text(sentiment).lower()
    if key not in cfg.sentiment_values:
        logger.debug("Unknown thread sentiment %r, treating as mixed", sentiment)
    return cfg.sentiment_values.get(key, cfg.sentiment_values.get("mixed", 0.0))


def _note(score: float, cfg: BuzzSettings, high: str, moderate: str, low: str) -> str:
    if score >= cfg.high_note_threshold:
        return high
    if score >= cfg.moderate_note_threshold:
        return moderate
    return low


def compute_buzz_score(
    threads: Iterable[RawBuzzThread],
    methodology: Methodology,
    as_of: datetime,
) -> Optional[BuzzScoreResult]:
    """
    Aggregate discussion threads for one production.

    Args:
        threads: Discussion threads for a single production
        methodology: Scoring configuration snapshot
        as_of: Reference "now" for the recency window

    Returns:
        BuzzScoreResult, or None when there are no threads
    """
    items: List[RawBuzzThread] = list(threads)
    if not items:
        return None

    cfg = methodology.buzz
    as_of = parse_utc_datetime(as_of)
    cutoff = as_of - timedelta(days=cfg.recency_window_days)

    details: List[BuzzThreadDetail] = []
    for thread in items:
        timestamp = parse_utc_datetime(thread.timestamp)
        details.append(
            BuzzThreadDetail(
                production_id=thread.production_id,
                platform=thread.platform,
                title=thread.title,
                url=thread.url,
                summary=thread.summary,
                upvotes=thread.upvotes,
                comments=thread.comments,
                sentiment=thread.sentiment,
                timestamp=timestamp,
                engagement=thread.engagement,
                sentiment_weight=calculate_engagement_weight(thread.engagement),
                recent=timestamp is not None and timestamp >= cutoff,
            )
        )

    total_engagement = sum(d.engagement for d in details)
    volume_score = calculate_volume_score(len(details), total_engagement, cfg)

    weight_total = math.fsum(d.sentiment_weight for d in details)
    weighted_sentiment = math.fsum(sentiment_value(d.sentiment, cfg) * d.sentiment_weight for d in details)
    sentiment_score = round_score(weighted_sentiment / weight_total)

    recent_count = sum(1 for d in details if d.recent)
    penalty = cfg.staleness_penalty if recent_count < len(details) / 2 else 0.0
    if penalty:
        logger.debug(
            "Buzz for %s is stale: %d of %d threads inside %d days",
            details[0].production_id, recent_count, len(details), cfg.recency_window_days,
        )

    details.sort(key=lambda d: (d.timestamp or _OLDEST, d.engagement), reverse=True)

    return BuzzScoreResult(
        score=max(0.0, volume_score + sentiment_score - penalty),
        volume_score=volume_score,
        sentiment_score=sentiment_score,
        volume_note=_note(volume_score, cfg, "High activity level", "Moderate activity level",
                          "Limited recent activity"),
        sentiment_note=_note(sentiment_score, cfg, "Predominantly positive sentiment", "Mixed sentiment",
                             "Predominantly negative sentiment"),
        recent_count=recent_count,
        staleness_penalty=penalty or None,
        threads=details,
    )
