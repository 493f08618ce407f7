from __future__ import annotations

from typing import Iterable

from ..catalog.store import CatalogStore
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import RecommendationType, ScoredRecommendation
from .profile import normalize_id


class PopularityRanker:
    """Most popular catalog whiskies the user does not already own."""

    def __init__(
        self,
        catalog: CatalogStore,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.config = config

    def recommend(
        self, limit: int, owned_ids: Iterable[str | int] = (),
    ) -> list[ScoredRecommendation]:
        owned = {normalize_id(i) for i in owned_ids}
        results: list[ScoredRecommendation] = []
        for position, whisky in enumerate(self.catalog.popular(len(self.catalog)), start=1):
            if len(results) >= limit:
                break
            if whisky.id in owned:
                continue
            rank = whisky.ranking or position
            results.append(ScoredRecommendation(
                whisky=whisky,
                score=self.config.popularity_score,
                type=RecommendationType.popularity,
                reason=f"Popular choice ranked #{rank} with {whisky.popularity} popularity points",
            ))
        return results
