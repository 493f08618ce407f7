from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_DATASET = Path(__file__).resolve().parent.parent.parent / "data" / "dataset.csv"


@dataclass(frozen=True)
class CatalogConfig:
    dataset_path: Path = Path(os.getenv("SOMMELIER_DATASET_PATH", str(_DEFAULT_DATASET)))
    popular_pool_size: int = 100
    diversity_per_type: int = 5


DEFAULT_CATALOG_CONFIG = CatalogConfig()
