# mealcart/application/grocery_aggregator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from mealcart.application.normalize import collation_key, normalize_name, normalize_unit
from mealcart.application.scaling import effective_qty, normalize_servings, recipe_scale
from mealcart.application.store_resolver import StoreResolver
from mealcart.domain.entities import (
    MEAL_SLOTS,
    UNASSIGNED,
    AggregatedItem,
    CatalogEntry,
    PlannedMeal,
    Recipe,
    Store,
    StoreBucket,
)

log = logging.getLogger("app.grocery_aggregator")

_SLOT_ORDER = {slot: i for i, slot in enumerate(MEAL_SLOTS)}


def date_keys(start: str, end: str) -> List[str]:
    """Inclusive list of ISO date keys; empty when end < start."""
    d0, d1 = date.fromisoformat(start), date.fromisoformat(end)
    out: List[str] = []
    while d0 <= d1:
        out.append(d0.isoformat())
        d0 += timedelta(days=1)
    return out


def ordered_meals(meals: Iterable[PlannedMeal]) -> List[PlannedMeal]:
    """One meal per (date, slot), last write wins, sorted by date then slot."""
    by_slot: Dict[Tuple[str, str], PlannedMeal] = {}
    for m in meals:
        by_slot[(m.date, m.slot)] = m
    return sorted(by_slot.values(), key=lambda m: (m.date, _SLOT_ORDER.get(m.slot, len(_SLOT_ORDER)), m.slot))


@dataclass(frozen=True)
class GroceryList:
    buckets: List[StoreBucket]

    def items_by_store(self) -> Dict[str, List[AggregatedItem]]:
        return {b.store_name: b.items for b in self.buckets}

    def store_names(self) -> List[str]:
        return [b.store_name for b in self.buckets]

    def bucket(self, store_name: str) -> Optional[StoreBucket]:
        for b in self.buckets:
            if b.store_name == store_name:
                return b
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stores": [
                {
                    "storeId": b.store_id,
                    "store": b.store_name,
                    "count": b.count,
                    "items": [i.to_dict() for i in b.items],
                }
                for b in self.buckets
            ]
        }


# ----------------------------
# Aggregation
# ----------------------------
class GroceryAggregator:
    """Plan -> scaled ingredients -> store resolution -> merged per-store grocery list."""

    def __init__(
        self,
        stores: Iterable[Store],
        catalog: Iterable[CatalogEntry] = (),
        pantry: Iterable[str] = (),
        household_servings: int = 4,
    ) -> None:
        self.resolver = StoreResolver(stores, catalog)
        self.stores = [s for s in self.resolver.stores if normalize_name(s.name) != normalize_name(UNASSIGNED)]
        self._store_ids = {s.id for s in self.stores}
        self.pantry = {normalize_name(p) for p in pantry if normalize_name(p)}
        self.household_servings = normalize_servings(household_servings, 4)

    def aggregate(self, meals: Iterable[PlannedMeal], recipes: Iterable[Recipe]) -> GroceryList:
        recipes_by_id: Dict[str, Recipe] = {r.id: r for r in recipes}
        merged: Dict[Tuple[str, str, str], AggregatedItem] = {}

        for meal in ordered_meals(meals):
            if meal.selection != "recipe" or not meal.recipe_id:
                continue
            recipe = recipes_by_id.get(meal.recipe_id)
            if recipe is None:
                log.debug("Skipping %s %s: recipe %s no longer exists", meal.date, meal.slot, meal.recipe_id)
                continue

            servings = self.household_servings if meal.servings_override is None else meal.servings_override
            factor = recipe_scale(recipe, servings, self.household_servings)

            for ing in recipe.ingredients:
                name = normalize_name(ing.name)
                if not name or name in self.pantry:
                    continue
                unit = normalize_unit(ing.unit)
                store = self.resolver.resolve_ingredient(ing, name)
                if store is not None and store.id not in self._store_ids:
                    store = None
                qty = effective_qty(ing.qty, factor)

                key = (store.id if store else "", name, unit)
                prev = merged.get(key)
                if prev is None:
                    merged[key] = AggregatedItem(
                        name=name,
                        unit=unit,
                        store_id=store.id if store else None,
                        store_name=store.name if store else UNASSIGNED,
                        qty=qty,
                    )
                elif prev.qty is None or qty is None:
                    prev.qty = None
                else:
                    prev.qty += qty

        return GroceryList(buckets=self._bucketize(merged.values()))

    def _bucketize(self, items: Iterable[AggregatedItem]) -> List[StoreBucket]:
        grouped: Dict[str, List[AggregatedItem]] = {s.id: [] for s in self.stores}
        unassigned: List[AggregatedItem] = []
        for item in items:
            if item.store_id is None:
                unassigned.append(item)
            else:
                grouped.setdefault(item.store_id, []).append(item)

        def _sorted(xs: List[AggregatedItem]) -> List[AggregatedItem]:
            return sorted(xs, key=lambda i: (collation_key(i.name), i.unit))

        buckets = [StoreBucket(store_id=s.id, store_name=s.name, items=_sorted(grouped[s.id])) for s in self.stores]
        buckets.append(StoreBucket(store_id=None, store_name=UNASSIGNED, items=_sorted(unassigned)))
        return buckets
