from __future__ import annotations

import logging
from itertools import zip_longest
from pathlib import Path
from typing import Iterable

import pandas as pd

from ..errors import CatalogLoadError
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Whisky

logger = logging.getLogger(__name__)

# CSV column -> Whisky field
_TEXT_COLUMNS: dict[str, str] = {
    "name": "name",
    "brand": "brand",
    "brand_id": "brand_id",
    "spirit_type": "spirit_type",
    "size": "size",
    "image_url": "image_url",
    "description": "description",
}
_FLOAT_COLUMNS: dict[str, str] = {
    "proof": "proof",
    "abv": "abv",
    "avg_msrp": "avg_msrp",
    "fair_price": "fair_price",
    "shelf_price": "shelf_price",
    "total_score": "total_score",
}
_INT_COLUMNS: dict[str, str] = {
    "popularity": "popularity",
    "ranking": "ranking",
    "wishlist_count": "wishlist_count",
    "vote_count": "vote_count",
    "bar_count": "bar_count",
}
_NON_NEGATIVE = ("popularity", "avg_msrp", "fair_price", "shelf_price")


def normalize_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """Map a raw catalog frame onto the canonical Whisky columns.

    Missing or non-numeric values in numeric columns become 0; missing text
    becomes the empty string.
    """
    df = pd.DataFrame(index=raw.index)
    df["id"] = raw["id"].astype(str).str.strip()

    for column, field in _TEXT_COLUMNS.items():
        if column in raw.columns:
            df[field] = raw[column].fillna("").astype(str).str.strip()
        else:
            df[field] = ""

    for column, field in _FLOAT_COLUMNS.items():
        if column in raw.columns:
            df[field] = pd.to_numeric(raw[column], errors="coerce").fillna(0.0).astype(float)
        else:
            df[field] = 0.0

    for column, field in _INT_COLUMNS.items():
        if column in raw.columns:
            df[field] = pd.to_numeric(raw[column], errors="coerce").fillna(0).astype(int)
        else:
            df[field] = 0

    for field in _NON_NEGATIVE:
        df[field] = df[field].clip(lower=0)

    return df


class CatalogStore:
    """In-memory catalog with precomputed popularity and diversity views."""

    def __init__(
        self,
        whiskies: Iterable[Whisky],
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        self.config = config
        self._whiskies: list[Whisky] = list(whiskies)
        self._by_id: dict[str, Whisky] = {}
        for whisky in self._whiskies:
            self._by_id.setdefault(whisky.id, whisky)
        self._popular = self._rank_by_popularity(self._whiskies)[: config.popular_pool_size]
        self._diverse = self._sample_per_spirit_type(config.diversity_per_type)

    @classmethod
    def from_dataframe(
        cls, raw: pd.DataFrame, config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> CatalogStore:
        if "id" not in raw.columns:
            raise CatalogLoadError("catalog is missing the 'id' column")
        df = normalize_frame(raw)
        whiskies = [Whisky(**record) for record in df.to_dict(orient="records")]
        return cls(whiskies, config)

    @classmethod
    def from_csv(
        cls, path: Path | None = None, config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> CatalogStore:
        csv_path = path or config.dataset_path
        try:
            raw = pd.read_csv(csv_path, dtype={"id": str})
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise CatalogLoadError(f"Failed to load whisky data from {csv_path}") from exc
        store = cls.from_dataframe(raw, config)
        logger.info("Loaded %d whiskies from %s", len(store), csv_path)
        return store

    @staticmethod
    def _rank_by_popularity(whiskies: list[Whisky]) -> list[Whisky]:
        # sorted() is stable, so ties keep catalog order
        return sorted(whiskies, key=lambda w: w.popularity, reverse=True)

    def _sample_per_spirit_type(self, per_type: int) -> list[Whisky]:
        groups: dict[str, list[Whisky]] = {}
        for whisky in self._whiskies:
            groups.setdefault(whisky.spirit_type, []).append(whisky)

        top_per_type = [
            self._rank_by_popularity(members)[:per_type] for members in groups.values()
        ]
        # Round-robin so every category appears before any repeats.
        interleaved: list[Whisky] = []
        for tier in zip_longest(*top_per_type):
            interleaved.extend(w for w in tier if w is not None)
        return interleaved

    def __len__(self) -> int:
        return len(self._whiskies)

    def all(self) -> list[Whisky]:
        return list(self._whiskies)

    def get_by_id(self, whisky_id: str | int) -> Whisky | None:
        return self._by_id.get(str(whisky_id))

    def popular(self, limit: int = 10) -> list[Whisky]:
        return self._popular[:limit]

    def diverse(self, limit: int = 10) -> list[Whisky]:
        return self._diverse[:limit]

    def by_spirit_type(self, spirit_type: str) -> list[Whisky]:
        wanted = spirit_type.lower()
        return [w for w in self._whiskies if w.spirit_type.lower() == wanted]

    def by_brand(self, brand: str) -> list[Whisky]:
        wanted = brand.lower()
        return [w for w in self._whiskies if wanted in w.brand.lower()]

    def spirit_types(self) -> list[str]:
        return sorted({w.spirit_type for w in self._whiskies if w.spirit_type})

    def brands(self) -> list[str]:
        return sorted({w.brand for w in self._whiskies if w.brand})
