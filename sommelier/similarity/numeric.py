from __future__ import annotations

import math
from typing import Sequence

import numpy as np

MAX_PROOF_SPREAD = 150.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if not math.isfinite(value):
        return low
    return max(low, min(high, value))


def cosine_similarity(a: Sequence[float] | np.ndarray | None, b: Sequence[float] | np.ndarray | None) -> float:
    """Cosine of the angle between two vectors, 0 if either has zero magnitude."""
    if a is None or b is None:
        return 0.0
    vec_a = np.asarray(a, dtype=np.float64).ravel()
    vec_b = np.asarray(b, dtype=np.float64).ravel()
    if vec_a.shape != vec_b.shape or vec_a.size == 0:
        return 0.0
    norm_a = float(np.linalg.norm(vec_a))
    norm_b = float(np.linalg.norm(vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    value = float(np.dot(vec_a, vec_b)) / (norm_a * norm_b)
    return value if math.isfinite(value) else 0.0


def price_similarity(price: float, price_range: tuple[float, float] | None) -> float:
    """1 inside the owned price range, decaying linearly to 0 outside it.

    The decay span is the upper bound of the range, so a bottle twice as
    expensive as the priciest owned bottle (or free) scores 0.
    """
    if price_range is None or not math.isfinite(price) or price <= 0:
        return 0.0
    low, high = price_range
    if low <= price <= high:
        return 1.0
    distance = low - price if price < low else price - high
    span = max(high, 1.0)
    return clamp(1.0 - distance / span)


def proof_similarity(proof: float, avg_proof: float, max_spread: float = MAX_PROOF_SPREAD) -> float:
    if max_spread <= 0 or not (math.isfinite(proof) and math.isfinite(avg_proof)):
        return 0.0
    return clamp(1.0 - abs(proof - avg_proof) / max_spread)
