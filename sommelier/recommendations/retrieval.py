from __future__ import annotations

import logging
import time

from ..errors import ProfileFetchError
from ..profiles.client import UserBarClient
from .hybrid import HybridRecommender
from .models import (
    DEFAULT_IMAGE_URL,
    RecommendationItem,
    RecommendationResponse,
    ScoredRecommendation,
    UserBar,
    WhiskyOut,
)

logger = logging.getLogger(__name__)


def _to_item(rec: ScoredRecommendation) -> RecommendationItem:
    whisky = rec.whisky
    return RecommendationItem(
        whisky=WhiskyOut(
            id=whisky.id,
            name=whisky.name,
            brand=whisky.brand,
            spirit_type=whisky.spirit_type,
            proof=whisky.proof,
            size=whisky.size,
            image_url=whisky.image_url or DEFAULT_IMAGE_URL,
            avg_msrp=whisky.avg_msrp,
            fair_price=whisky.fair_price,
            shelf_price=whisky.shelf_price,
        ),
        match_score=round(rec.score, 3),
        recommendation_type=rec.type,
        reason=rec.reason,
    )


def get_user_recommendations(
    username: str,
    recommender: HybridRecommender,
    bar_client: UserBarClient,
    limit: int | None = None,
) -> RecommendationResponse:
    start_time = time.time()

    # A missing or broken profile falls back to cold start.
    try:
        bar = bar_client.get_user_bar(username)
    except ProfileFetchError as exc:
        logger.warning("Failed to fetch user bar for %s, using cold start: %s", username, exc)
        bar = UserBar()

    recs = recommender.recommend(bar.items, limit, bar.whisky_ids)
    items = [_to_item(rec) for rec in recs]

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Recommended %d whiskies for %s (%d owned) in %.1f ms",
        len(items), username, len(bar.items), elapsed_ms,
    )

    return RecommendationResponse(
        username=username,
        has_existing_collection=bool(bar.items),
        count=len(items),
        recommendations=items,
    )
