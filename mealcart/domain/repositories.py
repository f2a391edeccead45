# mealcart/domain/repositories.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from mealcart.domain.entities import CatalogEntry, PlannedMeal, Recipe, Store


class RecipeReadRepo(ABC):
    @abstractmethod
    def all(self) -> List[Recipe]: ...

    @abstractmethod
    def by_id(self, recipe_id: str) -> Optional[Recipe]: ...


class StoreReadRepo(ABC):
    @abstractmethod
    def all(self) -> List[Store]: ...

    @abstractmethod
    def by_id(self, store_id: str) -> Optional[Store]: ...


class CatalogReadRepo(ABC):
    @abstractmethod
    def all(self) -> List[CatalogEntry]: ...


class MealPlanReadRepo(ABC):
    @abstractmethod
    def for_range(self, start: str, end: str) -> List[PlannedMeal]:
        """Planned meals whose date key falls in [start, end] (ISO dates, inclusive)."""
