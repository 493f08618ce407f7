"""
Offline script to precompute bottle image embeddings.

Usage:
    python -m sommelier.embeddings.precompute
"""
from __future__ import annotations

import logging

from ..catalog.store import CatalogStore
from .cache import EmbeddingCache
from .config import DEFAULT_EMBEDDING_CONFIG
from .encoder import ImageEncoder


def run_precompute() -> None:
    catalog = CatalogStore.from_csv()
    encoder = ImageEncoder(DEFAULT_EMBEDDING_CONFIG)

    print(f"Encoding images for {len(catalog)} whiskies ...")
    try:
        cache = EmbeddingCache.build(
            catalog.all(), encoder.embed, max_workers=DEFAULT_EMBEDDING_CONFIG.max_workers,
        )
    finally:
        encoder.close()

    out_path = DEFAULT_EMBEDDING_CONFIG.embeddings_path
    cache.save(out_path)
    print(f"Saved {len(cache)} embeddings to {out_path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_precompute()
