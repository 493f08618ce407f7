from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class EmbeddingConfig:
    model_name: str = "clip-ViT-B-32"
    dimension: int = 512
    enabled: bool = os.getenv("SOMMELIER_VISUAL_ENABLED", "true").lower() in ("1", "true", "yes")
    max_workers: int = 8
    download_timeout: float = 10.0
    embeddings_path: Path = Path(__file__).resolve().parent.parent.parent / "data" / "embeddings.npz"


DEFAULT_EMBEDDING_CONFIG = EmbeddingConfig()
