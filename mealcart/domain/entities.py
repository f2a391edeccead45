# mealcart/domain/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

MEAL_SLOTS: Tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")
SELECTIONS: Tuple[str, ...] = ("recipe", "skip", "eating_out", "leftovers")

UNASSIGNED = "Unassigned"
TARGET_PROVIDER = "target"


@dataclass(frozen=True)
class Ingredient:
    name: str
    qty: float | int | None
    unit: str | None
    store: str | None = None
    store_id: str | None = None


@dataclass(frozen=True)
class Recipe:
    id: str
    title: str
    servings: int | None
    ingredients: List[Ingredient]
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PlannedMeal:
    date: str  # ISO date key, e.g. "2026-10-19"
    slot: str
    selection: str
    recipe_id: str | None = None
    servings_override: int | None = None


# ----------------------------
# Online ordering (tagged union)
# ----------------------------
@dataclass(frozen=True)
class NoOnlineOrdering:
    enabled: bool = False


@dataclass(frozen=True)
class TargetOrdering:
    target_store_id: str
    enabled: bool = True
    provider: str = TARGET_PROVIDER

    def __post_init__(self) -> None:
        if not (self.target_store_id or "").strip():
            raise ValueError("target_store_id is required for Target online ordering")


@dataclass(frozen=True)
class IncompleteOnlineOrdering:
    """Stored record claims online ordering but lacks a usable provider/config pair."""

    provider: str | None = None
    enabled: bool = True


OnlineOrdering = Union[NoOnlineOrdering, TargetOrdering, IncompleteOnlineOrdering]


def online_ordering_from_record(
    supports: Any, provider: Any, config: Optional[Dict[str, Any]]
) -> OnlineOrdering:
    if not supports:
        return NoOnlineOrdering()
    provider_name = str(provider or "").strip().lower() or None
    if provider_name == TARGET_PROVIDER:
        target_store_id = str((config or {}).get("targetStoreId") or "").strip()
        if target_store_id:
            return TargetOrdering(target_store_id=target_store_id)
    return IncompleteOnlineOrdering(provider=provider_name)


@dataclass(frozen=True)
class Store:
    id: str
    name: str
    online_ordering: OnlineOrdering = field(default_factory=NoOnlineOrdering)


@dataclass(frozen=True)
class CatalogEntry:
    name: str  # normalized ingredient name
    default_store_id: str
    default_unit: str = "each"


@dataclass
class AggregatedItem:
    name: str
    unit: str
    store_id: str | None
    store_name: str
    qty: float | None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "unit": self.unit,
            "storeId": self.store_id,
            "store": self.store_name,
            "qty": self.qty,
        }


@dataclass(frozen=True)
class StoreBucket:
    store_id: str | None
    store_name: str
    items: List[AggregatedItem]

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class CartSessionItem:
    name: str
    qty: float | None
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "qty": self.qty, "unit": self.unit}


@dataclass(frozen=True)
class UnmatchedItem:
    name: str
    qty: float | None
    unit: str
    reason: str


@dataclass(frozen=True)
class CartSessionResult:
    provider: str
    session_id: str
    checkout_url: str
    unmatched_items: List[UnmatchedItem]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "sessionId": self.session_id,
            "checkoutUrl": self.checkout_url,
            "unmatchedItems": [
                {"name": u.name, "qty": u.qty, "unit": u.unit, "reason": u.reason}
                for u in self.unmatched_items
            ],
        }
