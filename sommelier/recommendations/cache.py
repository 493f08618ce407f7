from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable

_DEFAULT_TTL = 300  # 5 minutes


def _make_key(request: Any) -> str:
    normalized = json.dumps(request, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


class TTLCache:
    """Small in-process cache whose entries expire after ``ttl`` seconds."""

    def __init__(self, ttl: float = _DEFAULT_TTL, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, request: Any) -> Any | None:
        key = _make_key(request)
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() - entry["created_at"] < self.ttl:
                self._hits += 1
                return entry["value"]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, request: Any, value: Any) -> None:
        key = _make_key(request)
        with self._lock:
            self._entries[key] = {"value": value, "created_at": self._clock()}

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
