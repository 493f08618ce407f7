from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from .models import BarItem


def to_float(value: object) -> float | None:
    """Parse a loosely typed numeric field; ``None`` if it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_id(value: object) -> str:
    """Render product ids the way the catalog stores them ("12", not "12.0")."""
    number = to_float(value)
    if number is not None and number.is_integer():
        return str(int(number))
    return str(value).strip()


@dataclass(frozen=True)
class UserProfile:
    """What a user's bar says about their taste. Built per request."""

    brands: frozenset[str]
    spirit_types: frozenset[str]
    proofs: tuple[float, ...]
    prices: tuple[float, ...]
    tasting_notes: frozenset[str]
    owned_ids: tuple[str, ...]

    @property
    def avg_proof(self) -> float:
        if not self.proofs:
            return 0.0
        return sum(self.proofs) / len(self.proofs)

    @property
    def price_range(self) -> tuple[float, float] | None:
        if not self.prices:
            return None
        return min(self.prices), max(self.prices)

    @property
    def is_empty(self) -> bool:
        return not self.owned_ids


def build_user_profile(
    items: Iterable[BarItem],
    owned_ids: Iterable[str | int] | None = None,
    extract_adjectives: Callable[[str], list[str]] | None = None,
) -> UserProfile:
    brands: set[str] = set()
    spirit_types: set[str] = set()
    proofs: list[float] = []
    prices: list[float] = []
    notes: set[str] = set()
    ids: list[str] = []

    for item in items:
        product = item.product
        ids.append(normalize_id(product.id))
        if product.brand:
            brands.add(product.brand)
        if product.spirit:
            spirit_types.add(product.spirit)
        proofs.append(to_float(product.proof) or 0.0)
        price = to_float(product.shelf_price)
        if price is not None and price > 0:
            prices.append(price)
        if product.description and extract_adjectives is not None:
            notes.update(extract_adjectives(product.description))

    if owned_ids is not None:
        ids.extend(normalize_id(i) for i in owned_ids)

    return UserProfile(
        brands=frozenset(brands),
        spirit_types=frozenset(spirit_types),
        proofs=tuple(proofs),
        prices=tuple(prices),
        tasting_notes=frozenset(notes),
        owned_ids=tuple(dict.fromkeys(ids)),
    )
