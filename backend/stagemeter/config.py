"""
Engine configuration: environment settings and the default methodology.

The constant tables below are the authoritative methodology 2.1.0. A JSON
file named by METHODOLOGY_FILE can override any part of it.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from stagemeter.schemas import Methodology


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    METHODOLOGY_FILE: str = ""


settings = Settings(_env_file=".env", _env_file_encoding="utf-8")


class MethodologyError(ValueError):
    """Raised when a methodology override file cannot be loaded."""


METHODOLOGY_VERSION: str = "2.1.0"
METHODOLOGY_DATE: str = "2026-01-21"

# Family blend weights (renormalized over present families)
COMPONENT_WEIGHTS: Dict[str, float] = {
    "critic": 0.50,
    "audience": 0.35,
    "buzz": 0.15,
}

# Outlet trust tiers
TIER_WEIGHTS: Dict[int, float] = {
    1: 1.5,
    2: 1.0,
    3: 0.5,
}
DEFAULT_TIER: int = 3

OUTLET_TIERS: Dict[str, Dict[str, Any]] = {
    # Tier 1: Major national publications & top culture sites
    "NYT": {"tier": 1, "name": "The New York Times", "domains": ["nytimes.com"]},
    "WASHPOST": {"tier": 1, "name": "The Washington Post", "domains": ["washingtonpost.com"]},
    "LATIMES": {"tier": 1, "name": "Los Angeles Times", "domains": ["latimes.com"]},
    "WSJ": {"tier": 1, "name": "The Wall Street Journal", "domains": ["wsj.com"]},
    "AP": {"tier": 1, "name": "Associated Press", "domains": ["apnews.com"]},
    "VARIETY": {"tier": 1, "name": "Variety", "domains": ["variety.com"]},
    "THR": {"tier": 1, "name": "The Hollywood Reporter", "domains": ["hollywoodreporter.com"]},
    "VULT": {"tier": 1, "name": "Vulture", "domains": ["vulture.com"]},
    "GUARDIAN": {"tier": 1, "name": "The Guardian", "domains": ["theguardian.com"], "max_scale": 5},
    "TIMEOUTNY": {"tier": 1, "name": "Time Out New York", "domains": ["timeout.com"], "max_scale": 5},
    "BWAYNEWS": {"tier": 1, "name": "Broadway News", "domains": ["broadwaynews.com"]},

    # Tier 2: Regional papers, trades, theatre-specific outlets
    "CHTRIB": {"tier": 2, "name": "Chicago Tribune", "domains": ["chicagotribune.com"]},
    "USATODAY": {"tier": 2, "name": "USA Today", "domains": ["usatoday.com"]},
    "NYDN": {"tier": 2, "name": "New York Daily News", "domains": ["nydailynews.com"]},
    "NYP": {"tier": 2, "name": "New York Post", "domains": ["nypost.com"]},
    "WRAP": {"tier": 2, "name": "The Wrap", "domains": ["thewrap.com"]},
    "EW": {"tier": 2, "name": "Entertainment Weekly", "domains": ["ew.com"]},
    "INDIEWIRE": {"tier": 2, "name": "IndieWire", "domains": ["indiewire.com"]},
    "DEADLINE": {"tier": 2, "name": "Deadline", "domains": ["deadline.com"]},
    "SLANT": {"tier": 2, "name": "Slant Magazine", "domains": ["slantmagazine.com"], "max_scale": 4},
    "TDB": {"tier": 2, "name": "The Daily Beast", "domains": ["thedailybeast.com"]},
    "OBSERVER": {"tier": 2, "name": "Observer", "domains": ["observer.com"]},
    "NYTHTR": {"tier": 2, "name": "New York Theater", "domains": ["newyorktheater.me"]},
    "NYTG": {"tier": 2, "name": "New York Theatre Guide", "domains": ["newyorktheatreguide.com"]},
    "NYSR": {"tier": 2, "name": "New York Stage Review", "domains": ["nystagereview.com"]},
    "TMAN": {"tier": 2, "name": "TheaterMania", "domains": ["theatermania.com"]},
    "THLY": {"tier": 2, "name": "Theatrely", "domains": ["theatrely.com"]},

    # Tier 3: Smaller outlets, blogs, niche sites
    "AMNY": {"tier": 3, "name": "amNewYork", "domains": ["amny.com"]},
    "CITI": {"tier": 3, "name": "Cititour", "domains": ["cititour.com"]},
    "CSCE": {"tier": 3, "name": "Culture Sauce", "domains": ["culturesauce.com"], "max_scale": 5},
    "FRONTMEZZ": {"tier": 3, "name": "Front Mezz Junkies", "domains": ["frontmezzjunkies.com"]},
    "OMC": {"tier": 3, "name": "One Minute Critic", "domains": ["oneminutecritic.com"], "max_scale": 5},
    "BWW": {"tier": 3, "name": "BroadwayWorld", "domains": ["broadwayworld.com"]},
}

# Designation bumps (added after normalization, capped at 100)
DESIGNATION_BUMPS: Dict[str, float] = {
    "Critics_Pick": 3,      # NYT Critics' Pick
    "Critics_Choice": 2,    # Time Out Critic's Choice
    "Recommended": 2,       # Guardian Pick of the Week
}

# Letter grades -> 0-100, monotonic A+ .. F
LETTER_GRADE_MAP: Dict[str, float] = {
    "A+": 98,
    "A": 95,
    "A-": 92,
    "B+": 88,
    "B": 85,
    "B-": 82,
    "C+": 78,
    "C": 75,
    "C-": 72,
    "D+": 68,
    "D": 65,
    "D-": 62,
    "F": 50,
}

# Sentiment keywords -> 0-100; compound labels first so they win over their parts
SENTIMENT_KEYWORD_MAP: Dict[str, float] = {
    "mixed-positive": 65,
    "mixed-negative": 45,
    "rave": 95,
    "positive": 80,
    "mixed": 55,
    "negative": 30,
    "pan": 15,
}

# Critic-assigned bucket label -> 0-100
BUCKET_SCORE_MAP: Dict[str, float] = {
    "Rave": 90,
    "Positive": 82,
    "Mixed-Positive": 72,
    "Mixed": 65,
    "Mixed-Negative": 58,
    "Negative": 48,
    "Pan": 30,
}

THUMB_SCORE_MAP: Dict[str, float] = {
    "Up": 80,
    "Flat": 60,
    "Down": 35,
}

# Audience platform trust
AUDIENCE_PLATFORM_WEIGHTS: Dict[str, float] = {
    "showscore": 0.50,
    "google": 0.30,
    "mezzanine": 0.20,
}
DEFAULT_PLATFORM_WEIGHT: float = 0.10
AUDIENCE_DIVERGENCE_THRESHOLD: float = 20

CRITIC_LABEL_THRESHOLDS = [
    ("Rave", 85),
    ("Positive", 70),
    ("Mixed", 50),
    ("Negative", 0),
]

SCORE_BUCKET_THRESHOLDS = [
    ("must-see", 85),
    ("great", 75),
    ("good", 65),
    ("tepid", 55),
    ("skip", 0),
]

BUZZ_CONFIG: Dict[str, Any] = {
    "baseline_threads": 10,
    "volume_max_score": 50,
    "sentiment_values": {"positive": 50, "mixed": 25, "negative": 0},
    "recency_window_days": 30,
    "staleness_penalty": 10,
}

CONFIDENCE_RULES: Dict[str, Any] = {
    "strong_min_reviews": 10,
    "strong_min_tier1": 3,
    "moderate_min_reviews": 5,
    "min_buzz_threads": 5,
    "high_cutoff": 5,
    "medium_cutoff": 3,
}


def default_methodology_data() -> Dict[str, Any]:
    """Raw dict form of the built-in methodology (before validation)."""
    return {
        "version": METHODOLOGY_VERSION,
        "date": METHODOLOGY_DATE,
        "component_weights": dict(COMPONENT_WEIGHTS),
        "tier_weights": dict(TIER_WEIGHTS),
        "default_tier": DEFAULT_TIER,
        "outlets": {k: dict(v) for k, v in OUTLET_TIERS.items()},
        "letter_grades": dict(LETTER_GRADE_MAP),
        "sentiment_keywords": dict(SENTIMENT_KEYWORD_MAP),
        "bucket_scores": dict(BUCKET_SCORE_MAP),
        "thumb_scores": dict(THUMB_SCORE_MAP),
        "designation_bumps": dict(DESIGNATION_BUMPS),
        "platform_weights": dict(AUDIENCE_PLATFORM_WEIGHTS),
        "default_platform_weight": DEFAULT_PLATFORM_WEIGHT,
        "divergence_threshold": AUDIENCE_DIVERGENCE_THRESHOLD,
        "critic_labels": list(CRITIC_LABEL_THRESHOLDS),
        "score_buckets": list(SCORE_BUCKET_THRESHOLDS),
        "buzz": dict(BUZZ_CONFIG),
        "confidence": dict(CONFIDENCE_RULES),
    }


DEFAULT_METHODOLOGY: Methodology = Methodology.model_validate(default_methodology_data())


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base. Tables named in override replace nested dicts key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_methodology(path: Union[str, Path, None] = None) -> Methodology:
    """
    Load a methodology, optionally overriding the defaults from a JSON file.

    Args:
        path: JSON file with a full or partial methodology. None returns the defaults.

    Returns:
        Validated Methodology

    Raises:
        MethodologyError: If the file is missing, not JSON, or fails validation
    """
    if not path:
        return DEFAULT_METHODOLOGY

    try:
        with open(path, "r", encoding="utf-8") as f:
            override = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise MethodologyError(f"Cannot read methodology file {path}: {e}") from e

    if not isinstance(override, dict):
        raise MethodologyError(f"Methodology file {path} must contain a JSON object")

    try:
        return Methodology.model_validate(_merge(default_methodology_data(), override))
    except ValidationError as e:
        raise MethodologyError(f"Invalid methodology in {path}: {e}") from e


@lru_cache(maxsize=1)
def get_methodology() -> Methodology:
    """The configured methodology snapshot (METHODOLOGY_FILE or the defaults)."""
    return load_methodology(settings.METHODOLOGY_FILE or None)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from LOG_LEVEL / LOG_FORMAT."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
