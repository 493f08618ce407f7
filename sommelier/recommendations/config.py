from __future__ import annotations

from dataclasses import dataclass, field, fields


def _require_non_negative(obj: object) -> None:
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, (int, float)) and value < 0:
            raise ValueError(f"{type(obj).__name__}.{f.name} must be non-negative, got {value}")


@dataclass(frozen=True)
class ContentWeights:
    """Weights of the sub-signals inside a content-based score."""

    name: float = 0.4
    brand: float = 0.3
    spirit_type: float = 0.2
    proof: float = 0.05
    tasting_notes: float = 0.05
    price: float = 0.6
    visual: float = 0.9

    def __post_init__(self) -> None:
        _require_non_negative(self)


@dataclass(frozen=True)
class SourceWeights:
    """Multipliers applied per recommendation type when blending sources."""

    content: float = 0.6
    popularity: float = 0.2
    diversity: float = 0.2

    def __post_init__(self) -> None:
        _require_non_negative(self)


@dataclass(frozen=True)
class RecommendationConfig:
    max_recommendations: int = 10
    min_similarity_score: float = 0.2
    popularity_score: float = 0.5
    diversity_score: float = 0.45
    visual_reason_threshold: float = 0.5
    proof_reason_tolerance: float = 10.0
    max_proof_spread: float = 150.0
    scoring_workers: int = 4
    shuffle: bool = True
    content_weights: ContentWeights = field(default_factory=ContentWeights)
    source_weights: SourceWeights = field(default_factory=SourceWeights)

    def __post_init__(self) -> None:
        _require_non_negative(self)
        if self.max_recommendations < 1:
            raise ValueError("max_recommendations must be at least 1")
        if self.scoring_workers < 1:
            raise ValueError("scoring_workers must be at least 1")
        for name in ("popularity_score", "diversity_score", "min_similarity_score"):
            if getattr(self, name) > 1:
                raise ValueError(f"{name} must be at most 1, got {getattr(self, name)}")


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
