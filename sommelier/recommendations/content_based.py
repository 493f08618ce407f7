from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from ..catalog.models import Whisky
from ..catalog.store import CatalogStore
from ..embeddings.cache import EmbeddingCache
from ..similarity.lexical import TextSimilarity, jaccard_similarity
from ..similarity.numeric import clamp, price_similarity, proof_similarity
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import BarItem, RecommendationType, ScoredRecommendation
from .profile import UserProfile, build_user_profile, to_float

logger = logging.getLogger(__name__)

FALLBACK_REASON = "similar characteristics to whiskies you might enjoy"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


class ContentBasedScorer:
    """Scores catalog whiskies against the bottles a user already owns."""

    def __init__(
        self,
        catalog: CatalogStore,
        embeddings: EmbeddingCache,
        text: TextSimilarity | None = None,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.embeddings = embeddings
        self.text = text if text is not None else TextSimilarity()
        self.config = config

    def build_profile(
        self, owned_items: Iterable[BarItem], owned_ids: Iterable[str | int] | None = None,
    ) -> UserProfile:
        return build_user_profile(owned_items, owned_ids, self.text.extract_adjectives)

    def score(self, candidate: Whisky, profile: UserProfile, visual_score: float | None = None) -> float:
        """Weighted blend of the content sub-signals, clamped to [0, 1]."""
        weights = self.config.content_weights
        if visual_score is None:
            visual_score = self.embeddings.visual_similarity(profile.owned_ids, candidate.id)

        score = 0.0
        if candidate.brand in profile.brands:
            score += weights.brand
        if candidate.spirit_type in profile.spirit_types:
            score += weights.spirit_type

        score += price_similarity(candidate.fair_price, profile.price_range) * weights.price
        score += clamp(visual_score) * weights.visual

        profile_text = " ".join(sorted(profile.brands) + sorted(profile.spirit_types))
        score += self.text.similarity(candidate.name, profile_text) * weights.name

        score += proof_similarity(
            candidate.proof, profile.avg_proof, self.config.max_proof_spread,
        ) * weights.proof

        if candidate.description:
            notes = self.text.extract_adjectives(candidate.description)
            score += jaccard_similarity(notes, profile.tasting_notes) * weights.tasting_notes

        return clamp(score)

    def reason(
        self,
        candidate: Whisky,
        owned_items: list[BarItem],
        price_range: tuple[float, float] | None,
        visual_score: float,
    ) -> str:
        reasons: list[str] = []

        if visual_score > self.config.visual_reason_threshold:
            reasons.append("visually similar to your selections")

        if price_range is not None:
            low, high = price_range
            if low <= candidate.fair_price <= high:
                reasons.append(
                    f"price (${_format_number(candidate.fair_price)}) is around your preferred range"
                )

        if any(item.product.brand == candidate.brand for item in owned_items):
            reasons.append(f"same brand ({candidate.brand}) as whiskies in your collection")

        if any(item.product.spirit == candidate.spirit_type for item in owned_items):
            reasons.append(f"same type ({candidate.spirit_type}) as your whiskies")

        proofs = [p for p in (to_float(item.product.proof) for item in owned_items) if p is not None]
        if proofs:
            avg_proof = sum(proofs) / len(proofs)
            if abs(candidate.proof - avg_proof) < self.config.proof_reason_tolerance:
                reasons.append(
                    f"similar proof ({_format_number(candidate.proof)}) to your collection average"
                )

        if not reasons:
            reasons.append(FALLBACK_REASON)

        return f"Recommended because it's {' and '.join(reasons)}."

    def recommend(
        self,
        owned_items: list[BarItem],
        limit: int,
        owned_ids: Iterable[str | int] | None = None,
    ) -> list[ScoredRecommendation]:
        if not owned_items:
            return []

        profile = self.build_profile(owned_items, owned_ids)
        owned = set(profile.owned_ids)

        def _evaluate(candidate: Whisky) -> tuple[Whisky, float, float]:
            visual = self.embeddings.visual_similarity(profile.owned_ids, candidate.id)
            return candidate, self.score(candidate, profile, visual), visual

        with ThreadPoolExecutor(
            max_workers=self.config.scoring_workers, thread_name_prefix="score",
        ) as executor:
            scored = list(executor.map(_evaluate, self.catalog.all()))

        kept = [
            entry for entry in scored
            if entry[0].id not in owned and entry[1] >= self.config.min_similarity_score
        ]
        kept.sort(key=lambda entry: entry[1], reverse=True)
        logger.debug("%d of %d candidates cleared the content threshold", len(kept), len(scored))

        return [
            ScoredRecommendation(
                whisky=whisky,
                score=score,
                type=RecommendationType.content,
                reason=self.reason(whisky, owned_items, profile.price_range, visual),
            )
            for whisky, score, visual in kept[:limit]
        ]
