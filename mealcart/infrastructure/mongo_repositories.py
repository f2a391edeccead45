# mealcart/infrastructure/mongo_repositories.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.collection import Collection

from mealcart.domain.entities import (
    CatalogEntry,
    Ingredient,
    PlannedMeal,
    Recipe,
    Store,
    online_ordering_from_record,
)
from mealcart.domain.repositories import CatalogReadRepo, MealPlanReadRepo, RecipeReadRepo, StoreReadRepo

log = logging.getLogger("infra.mongo_repo")


def _as_str_id(v: Any) -> str:
    if isinstance(v, ObjectId):
        return str(v)
    return str(v)


def _opt_str(v: Any) -> Optional[str]:
    s = str(v).strip() if v is not None else ""
    return s or None


# ----------------------------
# Document parsing
# ----------------------------
def _parse_ingredient(raw: Any) -> Optional[Ingredient]:
    if not isinstance(raw, dict):
        log.warning("Skipping malformed ingredient entry: %r", raw)
        return None
    name = str(raw.get("name") or "").strip()
    if not name:
        log.warning("Skipping nameless ingredient entry: %r", raw)
        return None
    unit = raw.get("unit")
    return Ingredient(
        name=name,
        qty=raw.get("qty"),
        unit=str(unit) if unit is not None else None,
        store=_opt_str(raw.get("store")),
        store_id=_opt_str(raw.get("storeId")),
    )


def parse_recipe(doc: Dict[str, Any]) -> Recipe:
    """Bad ingredient entries are dropped; only a document with no usable id is rejected."""
    if not isinstance(doc, dict):
        raise ValueError(f"Invalid recipe document: {doc!r}")
    recipe_id = _opt_str(doc.get("id") or doc.get("_id"))
    if recipe_id is None:
        raise ValueError(f"Invalid recipe document (no id): {doc!r}")

    raw_ingredients = doc.get("ingredients")
    if not isinstance(raw_ingredients, (list, tuple)):
        raw_ingredients = []
    ingredients = [ing for ing in (_parse_ingredient(i) for i in raw_ingredients) if ing is not None]

    tags = doc.get("tags")
    return Recipe(
        id=recipe_id,
        title=str(doc.get("title") or "").strip(),
        servings=doc.get("servings"),
        ingredients=ingredients,
        tags=[str(t) for t in tags] if isinstance(tags, (list, tuple)) else [],
    )


def _parse_recipe_or_none(doc: Dict[str, Any]) -> Optional[Recipe]:
    try:
        return parse_recipe(doc)
    except ValueError as e:
        log.warning("Skipping recipe document: %s", e)
        return None


def parse_store(doc: Dict[str, Any]) -> Store:
    return Store(
        id=_as_str_id(doc.get("id") or doc.get("_id")),
        name=str(doc.get("name") or "").strip(),
        online_ordering=online_ordering_from_record(
            doc.get("supportsOnlineOrdering"),
            doc.get("onlineOrderingProvider"),
            doc.get("onlineOrderingConfig"),
        ),
    )


def parse_planned_meal(doc: Dict[str, Any]) -> PlannedMeal:
    selection = str(doc.get("selection") or "skip").strip().lower()
    override = doc.get("servingsOverride")
    return PlannedMeal(
        date=str(doc.get("date") or ""),
        slot=str(doc.get("slot") or "dinner").strip().lower(),
        selection=selection,
        recipe_id=_opt_str(doc.get("recipeId")) if selection == "recipe" else None,
        servings_override=override if isinstance(override, (int, float)) and not isinstance(override, bool) else None,
    )


# ----------------------------
# Repositories
# ----------------------------
class MongoRecipeRepository(RecipeReadRepo):
    """Read-only recipe repository; reads through on every call so deletions are seen."""

    def __init__(self, col: Collection) -> None:
        self._col = col

    def all(self) -> List[Recipe]:
        recipes = (_parse_recipe_or_none(doc) for doc in self._col.find({}))
        return [r for r in recipes if r is not None]

    def by_id(self, recipe_id: str) -> Recipe | None:
        doc = self._col.find_one({"id": str(recipe_id)})
        return _parse_recipe_or_none(doc) if doc else None


class MongoStoreRepository(StoreReadRepo):
    def __init__(self, col: Collection) -> None:
        self._col = col

    def all(self) -> List[Store]:
        return [parse_store(doc) for doc in self._col.find({}).sort("name", 1)]

    def by_id(self, store_id: str) -> Store | None:
        key = (store_id or "").strip()
        if not key:
            return None
        doc = self._col.find_one({"id": key})
        return parse_store(doc) if doc else None


class MongoCatalogRepository(CatalogReadRepo):
    def __init__(self, col: Collection) -> None:
        self._col = col

    def all(self) -> List[CatalogEntry]:
        out: List[CatalogEntry] = []
        for doc in self._col.find({}):
            name = str(doc.get("name") or "").strip().lower()
            store_id = str(doc.get("defaultStoreId") or "").strip()
            if not name or not store_id:
                continue
            out.append(CatalogEntry(name=name, default_store_id=store_id, default_unit=str(doc.get("defaultUnit") or "each")))
        return out


class MongoMealPlanRepository(MealPlanReadRepo):
    def __init__(self, col: Collection) -> None:
        self._col = col

    def for_range(self, start: str, end: str) -> List[PlannedMeal]:
        cursor = self._col.find({"date": {"$gte": start, "$lte": end}})
        return [parse_planned_meal(doc) for doc in cursor]
