from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Whisky(BaseModel):
    """A normalized catalog bottle. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    brand: str = ""
    brand_id: str = ""
    spirit_type: str = ""
    size: str = ""
    proof: float = 0.0
    abv: float = 0.0
    popularity: int = 0
    image_url: str = ""
    avg_msrp: float = 0.0
    fair_price: float = 0.0
    shelf_price: float = 0.0
    total_score: float = 0.0
    ranking: int = 0
    wishlist_count: int = 0
    vote_count: int = 0
    bar_count: int = 0
    description: str = ""
