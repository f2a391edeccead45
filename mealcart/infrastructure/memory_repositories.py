# mealcart/infrastructure/memory_repositories.py
from __future__ import annotations

from typing import Iterable, List, Optional

from mealcart.domain.entities import CatalogEntry, PlannedMeal, Recipe, Store
from mealcart.domain.repositories import CatalogReadRepo, MealPlanReadRepo, RecipeReadRepo, StoreReadRepo


class InMemoryRecipeRepository(RecipeReadRepo):
    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self._items = {r.id: r for r in recipes}

    def all(self) -> List[Recipe]:
        return list(self._items.values())

    def by_id(self, recipe_id: str) -> Optional[Recipe]:
        return self._items.get(str(recipe_id))


class InMemoryStoreRepository(StoreReadRepo):
    def __init__(self, stores: Iterable[Store] = ()) -> None:
        self._items = {s.id: s for s in stores}

    def all(self) -> List[Store]:
        return list(self._items.values())

    def by_id(self, store_id: str) -> Optional[Store]:
        return self._items.get((store_id or "").strip())


class InMemoryCatalogRepository(CatalogReadRepo):
    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        self._items = list(entries)

    def all(self) -> List[CatalogEntry]:
        return list(self._items)


class InMemoryMealPlanRepository(MealPlanReadRepo):
    def __init__(self, meals: Iterable[PlannedMeal] = ()) -> None:
        self._items = list(meals)

    def for_range(self, start: str, end: str) -> List[PlannedMeal]:
        return [m for m in self._items if start <= m.date <= end]
