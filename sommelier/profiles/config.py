from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ProfileAPIConfig:
    base_url: str = os.getenv("BAXUS_API_URL", "https://services.baxus.co/api")
    user_bar_endpoint: str = "/bar/user"
    timeout: float = 5.0
    cache_ttl: float = 300.0


DEFAULT_PROFILE_API_CONFIG = ProfileAPIConfig()
