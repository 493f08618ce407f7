from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import Whisky

DEFAULT_IMAGE_URL = "https://via.placeholder.com/300x400?text=No+Image"


class RecommendationType(str, Enum):
    content = "content"
    popularity = "popularity"
    diversity = "diversity"


class ScoredRecommendation(BaseModel):
    whisky: Whisky
    score: float = Field(..., ge=0.0, le=1.0)
    type: RecommendationType
    reason: str


# ── User bar (profile service payload) ──────────────────────────────────


class BarProduct(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str
    name: str | None = None
    image_url: str | None = None
    brand_id: int | str | None = None
    brand: str | None = None
    spirit: str | None = None
    size: str | None = None
    proof: float | str | None = None
    average_msrp: float | str | None = None
    fair_price: float | str | None = None
    shelf_price: float | str | None = None
    popularity: int | str | None = None
    description: str | None = None


class BarItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    bar_id: int | str | None = None
    price: float | str | None = None
    note: str | None = None
    user_id: int | str | None = None
    release_id: int | str | None = None
    fill_percentage: float | str | None = None
    added: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    product: BarProduct


class UserBar(BaseModel):
    items: list[BarItem] = Field(default_factory=list)
    whisky_ids: list[str] = Field(default_factory=list)


# ── API response ─────────────────────────────────────────────────────────


class WhiskyOut(BaseModel):
    id: str
    name: str
    brand: str
    spirit_type: str
    proof: float
    size: str
    image_url: str
    avg_msrp: float
    fair_price: float
    shelf_price: float


class RecommendationItem(BaseModel):
    whisky: WhiskyOut
    match_score: float
    recommendation_type: RecommendationType
    reason: str


class RecommendationResponse(BaseModel):
    username: str
    has_existing_collection: bool
    count: int
    recommendations: list[RecommendationItem]
