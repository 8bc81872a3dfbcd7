"""
Shared utility functions for the scoring engine.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Optional, Union

import tldextract
from dateutil import parser as dateparser

# Offline extractor: bundled public-suffix snapshot, no fetch, no disk cache
_domain_extractor = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def normalize_text(text: str | None) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input text (None and bare numbers from loose feeds are accepted)

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if text is None or text == "":
        return ""
    return re.sub(r"\s+", " ", str(text)).strip()


def normalize_key(value: str | None) -> str:
    """
    Fold an identifier into a lookup key.

    "Critics' Pick" -> "critics_pick", "Show-Score" -> "show_score"
    """
    if not value:
        return ""
    folded = normalize_text(value).lower().replace("'", "").replace("’", "")
    return re.sub(r"[\s\-]+", "_", folded)


def extract_domain_from_url(url: str | None) -> str:
    """
    Extract the registered domain from a URL.

    Args:
        url: Full URL string

    Returns:
        Domain name in lowercase, empty string if none can be found
    """
    if not url:
        return ""
    try:
        extracted = _domain_extractor(url)
        domain = f"{extracted.domain}.{extracted.suffix}" if extracted.suffix else extracted.domain
        return domain.lower()
    except Exception:
        # Fallback to simple parsing
        from urllib.parse import urlparse
        netloc = urlparse(url).netloc.lower()
        return netloc[4:] if netloc.startswith("www.") else netloc


def parse_utc_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a timestamp and convert to UTC datetime.

    Args:
        value: datetime, date, or date string in various formats

    Returns:
        UTC datetime, or None if the value is missing or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = dateparser.parse(str(value))
        except (ValueError, OverflowError):
            return None

    if parsed.tzinfo:
        return parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=timezone.utc)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up (12.5 -> 13), unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round a score to the nearest integer, halves up."""
    return int(round_half_up(value))


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """
    Clamp a value to the score scale.

    Args:
        value: Input float value

    Returns:
        Value clamped to [low, high]
    """
    return max(low, min(high, value))
