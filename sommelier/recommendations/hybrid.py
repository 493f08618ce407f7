from __future__ import annotations

import logging
import random
from typing import Iterable, Protocol

from ..catalog.store import CatalogStore
from ..embeddings.cache import EmbeddingCache
from ..similarity.lexical import TextSimilarity
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .content_based import ContentBasedScorer
from .diversity import DiversitySampler
from .models import BarItem, RecommendationType, ScoredRecommendation
from .popularity import PopularityRanker
from .profile import normalize_id

logger = logging.getLogger(__name__)


class OrderingPolicy(Protocol):
    def __call__(self, recommendations: list[ScoredRecommendation]) -> list[ScoredRecommendation]:
        ...


class ShuffleOrdering:
    """Uniform random permutation so near-ties do not always surface the same bottle first."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def __call__(self, recommendations: list[ScoredRecommendation]) -> list[ScoredRecommendation]:
        shuffled = list(recommendations)
        self._rng.shuffle(shuffled)
        return shuffled


class ScoreOrdering:
    """Keep the weighted-score order produced by the combiner."""

    def __call__(self, recommendations: list[ScoredRecommendation]) -> list[ScoredRecommendation]:
        return list(recommendations)


class HybridRecommender:
    """Routes between content-based and cold-start sources and merges their output."""

    def __init__(
        self,
        content: ContentBasedScorer,
        popularity: PopularityRanker,
        diversity: DiversitySampler,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
        ordering: OrderingPolicy | None = None,
    ) -> None:
        self.content = content
        self.popularity = popularity
        self.diversity = diversity
        self.config = config
        if ordering is None:
            ordering = ShuffleOrdering() if config.shuffle else ScoreOrdering()
        self.ordering = ordering

    def type_weight(self, rec_type: RecommendationType) -> float:
        weights = self.config.source_weights
        if rec_type is RecommendationType.content:
            return weights.content
        if rec_type is RecommendationType.popularity:
            return weights.popularity
        if rec_type is RecommendationType.diversity:
            return weights.diversity
        return 1.0

    def combine(
        self,
        primary: list[ScoredRecommendation],
        secondary: list[ScoredRecommendation],
        limit: int,
    ) -> list[ScoredRecommendation]:
        """Deduplicate, re-weight by source, truncate, then apply the ordering policy."""
        unique: dict[str, ScoredRecommendation] = {}
        for rec in [*primary, *secondary]:
            existing = unique.get(rec.whisky.id)
            if existing is None or rec.score > existing.score:
                unique[rec.whisky.id] = rec

        ranked = sorted(
            unique.values(),
            key=lambda rec: rec.score * self.type_weight(rec.type),
            reverse=True,
        )
        return self.ordering(ranked[:limit])

    def is_cold_start(self, owned_items: list[BarItem] | None) -> bool:
        return not owned_items

    def recommend(
        self,
        owned_items: list[BarItem] | None,
        limit: int | None = None,
        owned_ids: Iterable[str | int] | None = None,
    ) -> list[ScoredRecommendation]:
        if limit is None:
            limit = self.config.max_recommendations
        items = list(owned_items or [])
        owned = [normalize_id(item.product.id) for item in items]
        owned.extend(normalize_id(i) for i in owned_ids or ())

        if self.is_cold_start(items):
            logger.info("Cold start: blending popular and diverse whiskies")
            # Leave room for one pick per category below the popular ones.
            reserved = min(limit, self.diversity.category_count())
            primary = self.popularity.recommend(limit - reserved, owned)
            secondary = self.diversity.recommend(limit, owned)
        else:
            primary = self.content.recommend(items, limit * 2, owned)
            secondary = self.popularity.recommend(limit * 2, owned)
            logger.info(
                "Scored %d content and %d popular candidates for %d owned bottles",
                len(primary), len(secondary), len(items),
            )

        return self.combine(primary, secondary, limit)


def build_recommender(
    catalog: CatalogStore,
    embeddings: EmbeddingCache,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    text: TextSimilarity | None = None,
    ordering: OrderingPolicy | None = None,
) -> HybridRecommender:
    return HybridRecommender(
        content=ContentBasedScorer(catalog, embeddings, text, config),
        popularity=PopularityRanker(catalog, config),
        diversity=DiversitySampler(catalog, config),
        config=config,
        ordering=ordering,
    )
