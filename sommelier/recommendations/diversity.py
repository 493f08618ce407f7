from __future__ import annotations

from typing import Iterable

from ..catalog.store import CatalogStore
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import RecommendationType, ScoredRecommendation
from .profile import normalize_id


class DiversitySampler:
    """Cold-start sample covering every spirit type in the catalog."""

    def __init__(
        self,
        catalog: CatalogStore,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.config = config

    def category_count(self) -> int:
        return len({w.spirit_type for w in self.catalog.all()})

    def recommend(
        self, limit: int, owned_ids: Iterable[str | int] = (),
    ) -> list[ScoredRecommendation]:
        owned = {normalize_id(i) for i in owned_ids}
        picks = [w for w in self.catalog.diverse(len(self.catalog)) if w.id not in owned]
        return [
            ScoredRecommendation(
                whisky=whisky,
                score=self.config.diversity_score,
                type=RecommendationType.diversity,
                reason=f"Diverse selection representing {whisky.spirit_type or 'an uncategorized'} category",
            )
            for whisky in picks[:limit]
        ]
