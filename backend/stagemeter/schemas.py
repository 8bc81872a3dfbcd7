# stagemeter/schemas.py
"""
Methodology snapshot and result structures.

A Methodology is the versioned configuration every aggregator reads; results
are the read-only structures the aggregators hand to reporting layers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator, model_validator

from stagemeter.utils import normalize_key, normalize_text

Family = Literal["critic", "audience", "buzz"]
Tier = Literal[1, 2, 3]
ConfidenceLevel = Literal["high", "medium", "low"]
Lifecycle = Literal["previews", "open", "closed"]

FAMILIES: Tuple[str, ...] = ("critic", "audience", "buzz")


# ---------------------------------------------------------------------------
# Methodology
# ---------------------------------------------------------------------------

class OutletConfigEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Tier
    name: str = ""
    domains: List[str] = Field(default_factory=list)
    max_scale: Optional[PositiveFloat] = None  # star scale for outlets that print "3 stars"


class BuzzSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline_threads: PositiveFloat = 10
    volume_max_score: float = Field(50, ge=0)
    volume_ratio_cap: float = Field(2, ge=0)
    volume_ratio_points: float = Field(20, ge=0)
    engagement_bonus_cap: float = Field(10, ge=0)
    engagement_bonus_factor: float = Field(3, ge=0)
    sentiment_values: Dict[str, float] = Field(
        default_factory=lambda: {"positive": 50, "mixed": 25, "negative": 0}
    )
    recency_window_days: int = Field(30, ge=0)
    staleness_penalty: float = Field(10, ge=0)
    high_note_threshold: float = 35
    moderate_note_threshold: float = 20


class ConfidenceSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    strong_min_reviews: int = 10
    strong_min_tier1: int = 3
    strong_points: int = 3
    moderate_min_reviews: int = 5
    moderate_points: int = 2
    thin_points: int = 1
    inferred_penalty: int = 1
    consistent_audience_points: int = 2
    single_audience_points: int = 1
    min_buzz_threads: int = 5
    buzz_points: int = 1
    previews_penalty: int = 1
    high_cutoff: int = 5
    medium_cutoff: int = 3


class Methodology(BaseModel):
    """Versioned, auditable scoring configuration.

    Passed explicitly into every aggregator so two versions can be scored
    side by side.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    date: str = ""

    component_weights: Dict[str, PositiveFloat]
    tier_weights: Dict[int, PositiveFloat]
    default_tier: Tier = 3
    outlets: Dict[str, OutletConfigEntry] = Field(default_factory=dict)

    letter_grades: Dict[str, float]
    sentiment_keywords: Dict[str, float]  # ordered, first whole-word match wins
    bucket_scores: Dict[str, float] = Field(default_factory=dict)
    thumb_scores: Dict[str, float] = Field(default_factory=dict)
    designation_bumps: Dict[str, float] = Field(default_factory=dict)
    default_score: float = Field(50, ge=0, le=100)

    platform_weights: Dict[str, PositiveFloat] = Field(default_factory=dict)
    default_platform_weight: PositiveFloat = 0.1
    divergence_threshold: float = Field(20, ge=0)

    critic_labels: List[Tuple[str, float]]
    score_buckets: List[Tuple[str, float]]

    buzz: BuzzSettings = Field(default_factory=BuzzSettings)
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)

    @field_validator("letter_grades", mode="before")
    @classmethod
    def _upper_grades(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {str(k).strip().upper(): v for k, v in value.items()}

    @field_validator("bucket_scores", "thumb_scores", "designation_bumps", "platform_weights",
                     mode="before")
    @classmethod
    def _fold_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {normalize_key(str(k)): v for k, v in value.items()}

    @field_validator("sentiment_keywords", mode="before")
    @classmethod
    def _lower_keywords(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {normalize_text(str(k)).lower(): v for k, v in value.items()}

    @field_validator("designation_bumps")
    @classmethod
    def _non_negative_bumps(cls, value: Dict[str, float]) -> Dict[str, float]:
        negative = [k for k, v in value.items() if v < 0]
        if negative:
            raise ValueError(f"designation bumps must be >= 0: {', '.join(negative)}")
        return value

    @field_validator("critic_labels", "score_buckets")
    @classmethod
    def _descending_bands(cls, value: List[Tuple[str, float]]) -> List[Tuple[str, float]]:
        if not value:
            raise ValueError("at least one score band is required")
        return sorted(value, key=lambda band: band[1], reverse=True)

    @model_validator(mode="after")
    def _check_tiers_and_families(self) -> "Methodology":
        if set(self.component_weights) != set(FAMILIES):
            raise ValueError(f"component weights must cover exactly: {', '.join(FAMILIES)}")
        if self.default_tier not in self.tier_weights:
            raise ValueError(f"default tier {self.default_tier} has no weight")
        if self.tier_weights[self.default_tier] > min(self.tier_weights.values()):
            raise ValueError("default tier must carry the lowest tier weight")
        unweighted = sorted(k for k, v in self.outlets.items() if v.tier not in self.tier_weights)
        if unweighted:
            raise ValueError(f"outlets in a tier without weight: {', '.join(unweighted)}")
        return self

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view for methodology pages and audit logs."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class NormalizedRating(BaseModel):
    score: int = Field(ge=0, le=100)
    inferred: bool
    method: Literal["stars", "letter", "letter_range", "percent", "number",
                    "sentiment", "bucket", "thumb", "explicit", "default"]


class OutletTrust(BaseModel):
    outlet_id: str
    name: str
    tier: Tier
    weight: float
    known: bool
    max_scale: Optional[float] = None


class ComputedReview(BaseModel):
    production_id: str
    source_id: str
    outlet_id: str
    outlet_name: str
    critic_name: Optional[str] = None
    url: Optional[str] = None
    publish_date: Optional[str] = None
    original_rating: Optional[str] = None
    designation: Optional[str] = None
    excerpt: Optional[str] = None

    tier: Tier
    tier_weight: float
    base_score: float
    designation_bonus: float = 0.0
    score: float  # final, post-bump
    inferred: bool
    rating_method: str
    contribution_weight: float = 0.0  # share of the tier-weighted average


class CriticScoreResult(BaseModel):
    simple_average: float
    tier_weighted_average: float
    review_count: int
    tier1_count: int
    inferred_count: int
    label: str
    reviews: List[ComputedReview]


class ComputedPlatform(BaseModel):
    production_id: str
    platform: str
    platform_name: Optional[str] = None
    url: Optional[str] = None
    average_rating: float
    max_scale: float
    sample_size: int
    normalized: int
    weight: float


class AudienceScoreResult(BaseModel):
    score: int
    platforms: List[ComputedPlatform]
    total_sample_size: int
    spread: int
    divergence_warning: Optional[str] = None


class BuzzThreadDetail(BaseModel):
    production_id: str
    platform: str
    title: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    upvotes: int
    comments: int
    sentiment: str
    timestamp: Optional[datetime] = None
    engagement: int
    sentiment_weight: float
    recent: bool


class BuzzScoreResult(BaseModel):
    score: float
    volume_score: int
    sentiment_score: int
    volume_note: str
    sentiment_note: str
    recent_count: int
    staleness_penalty: Optional[float] = None
    threads: List[BuzzThreadDetail]


class CompositeScoreResult(BaseModel):
    score: int
    weights: Dict[str, float]
    components: Dict[str, Optional[float]]


class ConfidenceResult(BaseModel):
    level: ConfidenceLevel
    reasons: List[str] = Field(min_length=1)


class ProductionScores(BaseModel):
    production_id: str
    slug: str
    title: Optional[str] = None
    lifecycle: Lifecycle
    critic: Optional[CriticScoreResult] = None
    audience: Optional[AudienceScoreResult] = None
    buzz: Optional[BuzzScoreResult] = None
    composite: Optional[CompositeScoreResult] = None
    bucket: str
    confidence: ConfidenceResult
    methodology_version: str
    computed_at: datetime
