# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from stagemeter.config import DEFAULT_METHODOLOGY, default_methodology_data
from stagemeter.models import (
    Production,
    RawAudiencePlatformRecord,
    RawBuzzThread,
    RawReviewRecord,
)
from stagemeter.schemas import Methodology

AS_OF = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def methodology() -> Methodology:
    return DEFAULT_METHODOLOGY


@pytest.fixture
def as_of() -> datetime:
    return AS_OF


@pytest.fixture
def scenario_methodology() -> Methodology:
    """Defaults plus two tier-1 test outlets."""
    data = default_methodology_data()
    data["outlets"] = {
        "tier1A": {"tier": 1, "name": "Tier One A"},
        "tier1B": {"tier": 1, "name": "Tier One B"},
    }
    return Methodology.model_validate(data)


def review(source_id: str, production_id: str = "show-1", **kwargs) -> RawReviewRecord:
    return RawReviewRecord(production_id=production_id, source_id=source_id, **kwargs)


def platform(name: str, avg: float, max_scale: float = 5, n: int = 100,
             production_id: str = "show-1") -> RawAudiencePlatformRecord:
    return RawAudiencePlatformRecord(
        production_id=production_id,
        platform=name,
        average_rating=avg,
        max_scale=max_scale,
        sample_size=n,
    )


def thread(days_ago: float, sentiment: str = "positive", upvotes: int = 0, comments: int = 0,
           production_id: str = "show-1", title: str = "") -> RawBuzzThread:
    return RawBuzzThread(
        production_id=production_id,
        platform="reddit",
        upvotes=upvotes,
        comments=comments,
        sentiment=sentiment,
        timestamp=AS_OF - timedelta(days=days_ago),
        title=title or None,
    )


def production(status: str = "open", production_id: str = "show-1", **kwargs) -> Production:
    return Production(id=production_id, slug=production_id, status=status, **kwargs)
