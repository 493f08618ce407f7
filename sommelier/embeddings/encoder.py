from __future__ import annotations

import logging
import threading
from io import BytesIO

import httpx
import numpy as np
from PIL import Image
from sentence_transformers import SentenceTransformer

from ..errors import EmbeddingModelError, ImageEmbeddingError
from .config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig

logger = logging.getLogger(__name__)


def load_model(config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> SentenceTransformer:
    try:
        model = SentenceTransformer(config.model_name)
    except Exception as exc:
        raise EmbeddingModelError(f"Could not load image model {config.model_name!r}") from exc
    logger.info("Image embedding model %s loaded", config.model_name)
    return model


class ImageEncoder:
    """Turns a bottle image URL into a fixed-length embedding vector."""

    def __init__(
        self,
        config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
        model: SentenceTransformer | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._model = model if model is not None else load_model(config)
        self._client = client or httpx.Client(
            timeout=config.download_timeout, follow_redirects=True,
        )
        # Downloads run in parallel; inference is serialized.
        self._encode_lock = threading.Lock()

    def _download(self, image_url: str) -> Image.Image:
        try:
            response = self._client.get(image_url)
            response.raise_for_status()
            with Image.open(BytesIO(response.content)) as image:
                return image.convert("RGB")
        except (httpx.HTTPError, OSError) as exc:
            raise ImageEmbeddingError(f"Could not fetch image {image_url}") from exc

    def embed(self, image_url: str) -> np.ndarray:
        """Return the embedding of the image at *image_url* as a 1-D float32 array."""
        image = self._download(image_url)
        with self._encode_lock:
            vector = self._model.encode(image, show_progress_bar=False, convert_to_numpy=True)
        return np.asarray(vector, dtype=np.float32).ravel()

    def close(self) -> None:
        self._client.close()
