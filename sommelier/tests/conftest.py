from __future__ import annotations

from typing import Callable

import pandas as pd
import pytest

from sommelier.catalog.store import CatalogStore
from sommelier.embeddings.cache import EmbeddingCache
from sommelier.recommendations.models import BarItem
from sommelier.similarity.lexical import TextSimilarity
from sommelier.similarity.synonyms import SynonymIndex

CATALOG_ROWS = [
    # id, name, brand, spirit_type, proof, popularity, fair_price, shelf_price, image_url, ranking
    ("1", "Eagle Rare 10 Year", "Buffalo Trace", "Bourbon", 90, 900, 45, 50, "https://img/1.png", 3),
    ("2", "Buffalo Trace Bourbon", "Buffalo Trace", "Bourbon", 90, 1000, 30, 35, "https://img/2.png", 1),
    ("3", "Blanton's Single Barrel", "Blanton's", "Bourbon", 93, 800, 90, 120, "https://img/3.png", 5),
    ("4", "Lagavulin 16", "Lagavulin", "Scotch", 86, 700, 100, 110, "https://img/4.png", 7),
    ("5", "Laphroaig 10", "Laphroaig", "Scotch", 86, 650, 60, 65, "https://img/5.png", 8),
    ("6", "Sazerac Rye", "Sazerac", "Rye", 90, 600, 35, 40, "https://img/6.png", 9),
    ("7", "WhistlePig 10 Year", "WhistlePig", "Rye", 100, 500, 80, 90, "", 12),
    ("8", "Redbreast 12", "Redbreast", "Irish", 80, 950, 70, 75, "https://img/8.png", 2),
]

ADJECTIVES = {"smoky", "sweet", "spicy", "rich", "smooth", "oaky", "peaty", "bold"}

SYNONYMS = {
    "whiskey": {"whisky", "whiskey"},
    "whisky": {"whiskey", "whisky"},
    "barrel": {"cask", "barrel", "drum"},
}


def fake_tagger(words: list[str]) -> list[tuple[str, str]]:
    return [(w, "JJ" if w.lower() in ADJECTIVES else "NN") for w in words]


def fake_synonyms(word: str) -> set[str]:
    return SYNONYMS.get(word, set())


@pytest.fixture
def catalog_frame() -> pd.DataFrame:
    columns = [
        "id", "name", "brand", "spirit_type", "proof", "popularity",
        "fair_price", "shelf_price", "image_url", "ranking",
    ]
    return pd.DataFrame(CATALOG_ROWS, columns=columns)


@pytest.fixture
def catalog(catalog_frame: pd.DataFrame) -> CatalogStore:
    return CatalogStore.from_dataframe(catalog_frame)


@pytest.fixture
def empty_embeddings() -> EmbeddingCache:
    return EmbeddingCache()


@pytest.fixture
def text_similarity() -> TextSimilarity:
    return TextSimilarity(SynonymIndex(lookup=fake_synonyms), tagger=fake_tagger)


@pytest.fixture
def make_bar_item() -> Callable[..., BarItem]:
    def _make(
        product_id: int | str,
        brand: str = "Buffalo Trace",
        spirit: str = "Bourbon",
        proof: float | str | None = 90,
        shelf_price: float | str | None = 50,
        description: str | None = None,
        name: str = "Owned bottle",
    ) -> BarItem:
        return BarItem.model_validate({
            "id": f"bar-{product_id}",
            "bar_id": 1,
            "product": {
                "id": product_id,
                "name": name,
                "brand": brand,
                "spirit": spirit,
                "proof": proof,
                "shelf_price": shelf_price,
                "description": description,
                "image_url": f"https://img/{product_id}.png",
            },
        })

    return _make
