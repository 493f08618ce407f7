from __future__ import annotations

import threading
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import numpy as np
import pytest
from PIL import Image

from sommelier.app import build_embedding_cache
from sommelier.embeddings.cache import EmbeddingCache
from sommelier.embeddings.config import EmbeddingConfig
from sommelier.embeddings.encoder import ImageEncoder, load_model
from sommelier.errors import EmbeddingModelError, ImageEmbeddingError

VECTORS = {
    "https://img/1.png": [1.0, 0.0, 0.0],
    "https://img/2.png": [0.9, 0.1, 0.0],
    "https://img/3.png": [0.0, 1.0, 0.0],
    "https://img/4.png": [0.0, 0.0, 1.0],
}


def _embed(url: str) -> np.ndarray:
    if url not in VECTORS:
        raise ImageEmbeddingError(f"Could not fetch image {url}")
    return np.array(VECTORS[url])


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(120, 60, 20)).save(buffer, format="PNG")
    return buffer.getvalue()


# ── Cache population ────────────────────────────────────────────────────


def test_build_skips_failed_images(catalog):
    cache = EmbeddingCache.build(catalog.all(), _embed, max_workers=2)

    assert len(cache) == 4
    assert "1" in cache
    assert "5" not in cache  # image fetch failed
    assert cache.get(7) is None  # no image url


def test_build_only_calls_embedder_for_items_with_images(catalog):
    embed = MagicMock(return_value=np.ones(3))
    EmbeddingCache.build(catalog.all(), embed, max_workers=1)
    called_urls = {call.args[0] for call in embed.call_args_list}
    assert "" not in called_urls
    assert len(called_urls) == 7


def test_build_when_every_image_fails(catalog):
    def _broken(url: str) -> np.ndarray:
        raise ImageEmbeddingError("offline")

    cache = EmbeddingCache.build(catalog.all(), _broken)

    assert len(cache) == 0
    assert cache.visual_similarity(["1", "2"], "3") == 0.0


def test_build_cancelled_before_start(catalog):
    cancel = threading.Event()
    cancel.set()
    embed = MagicMock(return_value=np.ones(3))

    cache = EmbeddingCache.build(catalog.all(), embed, cancel_event=cancel)

    assert len(cache) == 0
    embed.assert_not_called()


# ── Visual similarity ───────────────────────────────────────────────────


@pytest.fixture
def cache() -> EmbeddingCache:
    return EmbeddingCache({
        "1": [1.0, 0.0],
        "2": [1.0, 0.0],
        "3": [0.0, 1.0],
        "4": [0.0, 0.0],
    })


def test_visual_similarity_empty_owned_list(cache):
    assert cache.visual_similarity([], "1") == 0.0


def test_visual_similarity_candidate_without_embedding(cache):
    assert cache.visual_similarity(["1"], "99") == 0.0


def test_visual_similarity_averages_over_owned(cache):
    assert cache.visual_similarity(["2", "3"], "1") == pytest.approx(0.5)


def test_visual_similarity_skips_owned_without_embedding(cache):
    assert cache.visual_similarity(["2", "missing"], "1") == pytest.approx(1.0)
    assert cache.visual_similarity(["missing"], "1") == 0.0


def test_visual_similarity_zero_vector(cache):
    assert cache.visual_similarity(["4"], "1") == 0.0


def test_save_and_load(tmp_path: Path, cache):
    path = tmp_path / "embeddings.npz"
    cache.save(path)
    loaded = EmbeddingCache.load(path)
    assert len(loaded) == 4
    np.testing.assert_allclose(loaded.get("3"), [0.0, 1.0])


# ── Encoder ─────────────────────────────────────────────────────────────


def test_encoder_embeds_downloaded_image():
    model = MagicMock()
    model.encode.return_value = np.arange(4, dtype=np.float64)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=_png_bytes()))
    encoder = ImageEncoder(EmbeddingConfig(), model=model, client=httpx.Client(transport=transport))

    vector = encoder.embed("https://img/1.png")

    assert vector.dtype == np.float32
    assert vector.shape == (4,)
    image = model.encode.call_args.args[0]
    assert isinstance(image, Image.Image)
    assert image.mode == "RGB"


def test_encoder_raises_on_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    encoder = ImageEncoder(EmbeddingConfig(), model=MagicMock(), client=httpx.Client(transport=transport))

    with pytest.raises(ImageEmbeddingError):
        encoder.embed("https://img/missing.png")


def test_encoder_raises_on_undecodable_image():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"not an image"))
    encoder = ImageEncoder(EmbeddingConfig(), model=MagicMock(), client=httpx.Client(transport=transport))

    with pytest.raises(ImageEmbeddingError):
        encoder.embed("https://img/broken.png")


@patch("sommelier.embeddings.encoder.SentenceTransformer", side_effect=OSError("no weights"))
def test_model_load_failure_aborts(mock_st):
    with pytest.raises(EmbeddingModelError):
        load_model(EmbeddingConfig())


# ── Startup wiring ──────────────────────────────────────────────────────


def test_startup_with_visual_disabled(catalog):
    cache = build_embedding_cache(catalog, EmbeddingConfig(enabled=False))
    assert len(cache) == 0


def test_startup_prefers_precomputed_file(tmp_path: Path, catalog, cache):
    path = tmp_path / "embeddings.npz"
    cache.save(path)

    with patch("sommelier.app.ImageEncoder") as mock_encoder:
        loaded = build_embedding_cache(catalog, EmbeddingConfig(enabled=True, embeddings_path=path))

    assert len(loaded) == 4
    mock_encoder.assert_not_called()


def test_startup_embeds_catalog_when_no_file(tmp_path: Path, catalog):
    config = EmbeddingConfig(enabled=True, embeddings_path=tmp_path / "absent.npz", max_workers=2)

    with patch("sommelier.app.ImageEncoder") as mock_encoder:
        mock_encoder.return_value.embed.side_effect = _embed
        built = build_embedding_cache(catalog, config)

    assert len(built) == 4
    mock_encoder.return_value.close.assert_called_once()
