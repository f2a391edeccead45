# mealcart/application/usecases.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from mealcart.application.checkout_session import CheckoutSessionBuilder
from mealcart.application.export_formatter import (
    DEFAULT_CHECKLIST_STORE,
    build_print_checklist_html,
    build_stores_export,
)
from mealcart.application.grocery_aggregator import GroceryAggregator, GroceryList, date_keys
from mealcart.application.week_balance import build_week_balance
from mealcart.domain.entities import CartSessionItem, CartSessionResult
from mealcart.domain.errors import StoreNotFoundError
from mealcart.domain.repositories import CatalogReadRepo, MealPlanReadRepo, RecipeReadRepo, StoreReadRepo


@dataclass(frozen=True)
class BuildGroceryList:
    recipe_repo: RecipeReadRepo
    store_repo: StoreReadRepo
    catalog_repo: CatalogReadRepo
    meal_plan_repo: MealPlanReadRepo
    pantry: Sequence[str] = field(default_factory=tuple)
    household_servings: int = 4

    def __call__(self, start: str, end: str) -> GroceryList:
        # Validates the range; an inverted range yields an empty plan.
        if not date_keys(start, end):
            meals = []
        else:
            meals = self.meal_plan_repo.for_range(start, end)
        aggregator = GroceryAggregator(
            stores=self.store_repo.all(),
            catalog=self.catalog_repo.all(),
            pantry=self.pantry,
            household_servings=self.household_servings,
        )
        return aggregator.aggregate(meals, self.recipe_repo.all())


@dataclass(frozen=True)
class ExportGroceryList:
    build_list: BuildGroceryList
    checklist_store: str = DEFAULT_CHECKLIST_STORE

    def text(self, start: str, end: str, stores: Optional[Iterable[str]] = None) -> str:
        grocery = self.build_list(start, end)
        order = list(stores) if stores else grocery.store_names()
        return build_stores_export(grocery.items_by_store(), order, checklist_store=self.checklist_store)

    def html(self, start: str, end: str, stores: Optional[Iterable[str]] = None) -> str:
        grocery = self.build_list(start, end)
        order = list(stores) if stores else grocery.store_names()
        return build_print_checklist_html(grocery.items_by_store(), order)


@dataclass(frozen=True)
class SummarizePlan:
    recipe_repo: RecipeReadRepo
    meal_plan_repo: MealPlanReadRepo
    household_servings: int = 4

    def __call__(self, start: str, end: str) -> Dict[str, Any]:
        meals = self.meal_plan_repo.for_range(start, end) if date_keys(start, end) else []
        return build_week_balance(meals, self.recipe_repo.all(), self.household_servings)


@dataclass(frozen=True)
class CreateCartSession:
    store_repo: StoreReadRepo
    builder: CheckoutSessionBuilder

    def __call__(self, store_id: str, items: List[CartSessionItem]) -> CartSessionResult:
        store = self.store_repo.by_id(store_id)
        if store is None:
            raise StoreNotFoundError()
        return self.builder.create(store, items)
