from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, Mapping

import numpy as np

from ..catalog.models import Whisky
from ..similarity.numeric import cosine_similarity

logger = logging.getLogger(__name__)

Embedder = Callable[[str], np.ndarray]


class EmbeddingCache:
    """Read-only map of whisky id -> image embedding.

    Whiskies whose image could not be embedded have no entry; callers treat
    a missing entry as "no visual signal".
    """

    def __init__(self, embeddings: Mapping[str, np.ndarray] | None = None) -> None:
        self._embeddings: dict[str, np.ndarray] = {
            str(key): np.asarray(value, dtype=np.float32).ravel()
            for key, value in (embeddings or {}).items()
        }

    @classmethod
    def build(
        cls,
        whiskies: Iterable[Whisky],
        embed: Embedder,
        max_workers: int = 8,
        cancel_event: threading.Event | None = None,
    ) -> EmbeddingCache:
        """Embed every whisky image with bounded concurrency.

        Failures are logged and skipped. Setting *cancel_event* stops any
        work that has not started yet and returns what was collected.
        """
        cancel = cancel_event or threading.Event()
        targets = [w for w in whiskies if w.image_url]
        total = len(targets)
        embeddings: dict[str, np.ndarray] = {}

        def _embed_one(whisky: Whisky) -> np.ndarray | None:
            if cancel.is_set():
                return None
            return np.asarray(embed(whisky.image_url), dtype=np.float32).ravel()

        with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="embed") as executor:
            futures = {executor.submit(_embed_one, w): w for w in targets}
            for done, future in enumerate(as_completed(futures), start=1):
                whisky = futures[future]
                try:
                    vector = future.result()
                except Exception:
                    logger.warning(
                        "Error processing image for whisky %s (%s)",
                        whisky.id, whisky.image_url, exc_info=True,
                    )
                    continue
                if vector is not None and vector.size > 0:
                    embeddings[whisky.id] = vector
                    logger.debug("Compiled image: %d / %d [%s]", done, total, whisky.id)
                if cancel.is_set():
                    for pending in futures:
                        pending.cancel()
                    logger.warning("Embedding population cancelled after %d / %d images", done, total)
                    break

        logger.info("Embedded %d of %d whisky images", len(embeddings), total)
        return cls(embeddings)

    @classmethod
    def load(cls, path: Path) -> EmbeddingCache:
        with np.load(path) as data:
            return cls({key: data[key] for key in data.files})

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez_compressed(path, **self._embeddings)

    def __len__(self) -> int:
        return len(self._embeddings)

    def __contains__(self, whisky_id: object) -> bool:
        return str(whisky_id) in self._embeddings

    def get(self, whisky_id: str | int) -> np.ndarray | None:
        return self._embeddings.get(str(whisky_id))

    def visual_similarity(self, owned_ids: Iterable[str | int] | None, candidate_id: str | int) -> float:
        """Mean cosine similarity between the candidate and the owned bottles.

        Owned bottles without an embedding are skipped; 0 when nothing can be
        compared.
        """
        if not owned_ids:
            return 0.0
        candidate = self.get(candidate_id)
        if candidate is None:
            return 0.0

        similarities = [
            cosine_similarity(owned, candidate)
            for owned in (self.get(owned_id) for owned_id in owned_ids)
            if owned is not None
        ]
        if not similarities:
            return 0.0
        return sum(similarities) / len(similarities)
