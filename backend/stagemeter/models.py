"""
File: stagemeter/models.py
Raw input records handed to the engine by the data store.

Records are immutable; the engine never writes back to them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Union


JsonDict = Dict[str, Any]
Timestamp = Union[datetime, date, str, None]


def _pick(data: JsonDict, *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (snake_case first, then camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any) -> Optional[float]:
    try:
        number = float(value) if value is not None else None
    except (TypeError, ValueError):
        return None
    if number is None or not math.isfinite(number):
        return None
    return number


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_text(value: Any) -> Optional[str]:
    """Feeds sometimes send ratings and labels as bare numbers ("originalRating": 4)."""
    return None if value is None else str(value)


@dataclass(frozen=True)
class Production:
    """Catalog identity for one production. Owned by the catalog, read-only here."""

    id: str
    slug: str
    title: Optional[str] = None
    status: Optional[str] = None  # "previews" | "open" | "closed" | free text
    opening_date: Timestamp = None
    closing_date: Timestamp = None
    previews_start_date: Timestamp = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "Production":
        return cls(
            id=str(_pick(data, "id", default="")),
            slug=str(_pick(data, "slug", default="")),
            title=_as_text(_pick(data, "title")),
            status=_as_text(_pick(data, "status")),
            opening_date=_pick(data, "opening_date", "openingDate"),
            closing_date=_pick(data, "closing_date", "closingDate"),
            previews_start_date=_pick(data, "previews_start_date", "previewsStartDate"),
        )


@dataclass(frozen=True)
class RawReviewRecord:
    """One critic write-up.

    `score` is an explicit 0-100 value assigned upstream; when missing, the
    engine falls back to `original_rating`, then `bucket`, then `thumb`.
    """

    production_id: str
    source_id: str
    critic_name: Optional[str] = None
    score: Optional[float] = None
    original_rating: Optional[str] = None
    designation: Optional[str] = None  # e.g. "Critics_Pick"
    excerpt: Optional[str] = None

    outlet_name: Optional[str] = None
    url: Optional[str] = None
    bucket: Optional[str] = None  # "Rave" | "Positive" | "Mixed" | "Negative" | "Pan"
    thumb: Optional[str] = None  # "Up" | "Flat" | "Down"
    publish_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "RawReviewRecord":
        return cls(
            production_id=str(_pick(data, "production_id", "showId", default="")),
            source_id=str(_pick(data, "source_id", "outletId", "outlet", default="")),
            critic_name=_as_text(_pick(data, "critic_name", "criticName")),
            score=_as_float(_pick(data, "score", "assignedScore")),
            original_rating=_as_text(_pick(data, "original_rating", "originalRating")),
            designation=_as_text(_pick(data, "designation")),
            excerpt=_as_text(_pick(data, "excerpt", "quote", "pullQuote")),
            outlet_name=_as_text(_pick(data, "outlet_name", "outlet")),
            url=_as_text(_pick(data, "url")),
            bucket=_as_text(_pick(data, "bucket")),
            thumb=_as_text(_pick(data, "thumb")),
            publish_date=_as_text(_pick(data, "publish_date", "publishDate")),
        )


@dataclass(frozen=True)
class RawAudiencePlatformRecord:
    """Aggregate rating for one production on one audience platform."""

    production_id: str
    platform: str  # "showscore", "google", "mezzanine", ...
    average_rating: float
    max_scale: float
    sample_size: int = 0
    platform_name: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: JsonDict) -> "RawAudiencePlatformRecord":
        return cls(
            production_id=str(_pick(data, "production_id", "showId", default="")),
            platform=str(_pick(data, "platform", default="other")),
            average_rating=_as_float(_pick(data, "average_rating", "averageRating")) or 0.0,
            max_scale=_as_float(_pick(data, "max_scale", "maxRating")) or 0.0,
            sample_size=_as_int(_pick(data, "sample_size", "reviewCount")),
            platform_name=_as_text(_pick(data, "platform_name", "platformName")),
            url=_as_text(_pick(data, "url")),
        )


@dataclass(frozen=True)
class RawBuzzThread:
    """One discussion thread about a production."""

    production_id: str
    platform: str  # "reddit", ...
    upvotes: int
    comments: int
    sentiment: str  # "positive" | "mixed" | "negative"
    timestamp: Timestamp
    title: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None

    @property
    def engagement(self) -> int:
        return max(0, self.upvotes) + max(0, self.comments)

    @classmethod
    def from_dict(cls, data: JsonDict) -> "RawBuzzThread":
        return cls(
            production_id=str(_pick(data, "production_id", "showId", default="")),
            platform=str(_pick(data, "platform", default="")),
            upvotes=_as_int(_pick(data, "upvotes")),
            comments=_as_int(_pick(data, "comments", "commentCount")),
            sentiment=str(_pick(data, "sentiment", default="mixed")),
            timestamp=_pick(data, "timestamp", "date"),
            title=_as_text(_pick(data, "title")),
            url=_as_text(_pick(data, "url")),
            summary=_as_text(_pick(data, "summary")),
        )


__all__ = [
    "JsonDict",
    "Production",
    "RawReviewRecord",
    "RawAudiencePlatformRecord",
    "RawBuzzThread",
]
