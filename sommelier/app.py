from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .catalog.store import CatalogStore
from .embeddings.cache import EmbeddingCache
from .embeddings.config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig
from .embeddings.encoder import ImageEncoder
from .profiles.client import UserBarClient
from .recommendations.hybrid import HybridRecommender, build_recommender
from .recommendations.models import RecommendationResponse
from .recommendations.retrieval import get_user_recommendations

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s]: %(message)s"

NO_RECOMMENDATIONS = {
    "error": "No recommendations available",
    "suggestions": [
        "Try broadening your search criteria",
        "Our sommelier is working on new suggestions",
    ],
}


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_embedding_cache(
    catalog: CatalogStore,
    config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
    cancel_event: threading.Event | None = None,
) -> EmbeddingCache:
    """Load precomputed embeddings, or embed every catalog image.

    A model that fails to load raises ``EmbeddingModelError`` and aborts
    startup; individual images that fail are skipped.
    """
    if not config.enabled:
        logger.info("Visual similarity disabled; starting without image embeddings")
        return EmbeddingCache()
    if config.embeddings_path.exists():
        cache = EmbeddingCache.load(config.embeddings_path)
        logger.info("Loaded %d precomputed embeddings from %s", len(cache), config.embeddings_path)
        return cache

    encoder = ImageEncoder(config)
    try:
        return EmbeddingCache.build(
            catalog.all(), encoder.embed, config.max_workers, cancel_event,
        )
    finally:
        encoder.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    catalog = CatalogStore.from_csv()
    cancel = threading.Event()
    try:
        embeddings = await run_in_threadpool(build_embedding_cache, catalog, DEFAULT_EMBEDDING_CONFIG, cancel)
    except asyncio.CancelledError:
        cancel.set()
        raise

    app.state.catalog = catalog
    app.state.recommender = build_recommender(catalog, embeddings)
    app.state.bar_client = UserBarClient()
    try:
        yield
    finally:
        app.state.bar_client.close()


app = FastAPI(title="Whisky Recommendation API", version="1.0.0", lifespan=lifespan)


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_recommender(request: Request) -> HybridRecommender:
    return request.app.state.recommender


def get_bar_client(request: Request) -> UserBarClient:
    return request.app.state.bar_client


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(catalog: CatalogStore = Depends(get_catalog)) -> dict:
    return {
        "total_whiskies": len(catalog),
        "spirit_types": catalog.spirit_types(),
        "brands": catalog.brands(),
    }


@app.get(
    "/recommendations/user/{username}",
    response_model=RecommendationResponse,
    responses={404: {"description": "No recommendations available"}},
)
def user_recommendations(
    username: str,
    limit: int | None = Query(default=None, ge=1, le=50),
    recommender: HybridRecommender = Depends(get_recommender),
    bar_client: UserBarClient = Depends(get_bar_client),
):
    response = get_user_recommendations(username, recommender, bar_client, limit)
    if response.count == 0:
        return JSONResponse(status_code=404, content=NO_RECOMMENDATIONS)
    return response


@app.get("/cache/stats")
def cache_stats(bar_client: UserBarClient = Depends(get_bar_client)) -> dict:
    return bar_client.cache.stats()
