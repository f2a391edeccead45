# mealcart/application/store_resolver.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from mealcart.application.normalize import normalize_name, normalize_unit
from mealcart.domain.entities import UNASSIGNED, CatalogEntry, Ingredient, Recipe, Store


class StoreResolver:
    """
    Purchasing location for an ingredient, first match wins:
      1. ingredient's assigned store id / explicit store text (case-insensitive name match)
      2. catalog default store for the normalized name
      3. Unassigned (store None)
    Never raises; unknown explicit stores fall through.
    """

    def __init__(self, stores: Iterable[Store], catalog: Iterable[CatalogEntry] = ()) -> None:
        self.stores: List[Store] = list(stores)
        self._by_id: Dict[str, Store] = {s.id: s for s in self.stores}
        self._by_name: Dict[str, Store] = {}
        for s in self.stores:
            key = normalize_name(s.name)
            if key and key != normalize_name(UNASSIGNED):
                self._by_name.setdefault(key, s)
        self._catalog: Dict[str, str] = {}
        for entry in catalog:
            name = normalize_name(entry.name)
            if name and entry.default_store_id and name not in self._catalog:
                self._catalog[name] = entry.default_store_id

    def by_name(self, store_text: Optional[str]) -> Optional[Store]:
        return self._by_name.get(normalize_name(store_text))

    def resolve(self, store_text: Optional[str], normalized_name: str, store_id: Optional[str] = None) -> Optional[Store]:
        if store_id:
            assigned = self._by_id.get(store_id.strip())
            if assigned:
                return assigned

        explicit = self.by_name(store_text)
        if explicit:
            return explicit

        default_id = self._catalog.get(normalized_name)
        if default_id:
            return self._by_id.get(default_id)
        return None

    def resolve_ingredient(self, ingredient: Ingredient, normalized_name: Optional[str] = None) -> Optional[Store]:
        name = normalized_name if normalized_name is not None else normalize_name(ingredient.name)
        return self.resolve(ingredient.store, name, ingredient.store_id)


# ----------------------------
# Catalog maintenance
# ----------------------------
def upsert_catalog(
    catalog: Dict[str, CatalogEntry], ingredients: Iterable[Ingredient], stores: Iterable[Store]
) -> Dict[str, CatalogEntry]:
    """Copy of `catalog` updated with every ingredient that names a known store."""

    resolver = StoreResolver(stores)
    out = dict(catalog)
    for ing in ingredients:
        name = normalize_name(ing.name)
        store = resolver.by_name(ing.store)
        if not name or store is None:
            continue
        out[name] = CatalogEntry(name=name, default_store_id=store.id, default_unit=normalize_unit(ing.unit))
    return out


def catalog_from_recipes(recipes: Iterable[Recipe], stores: Iterable[Store]) -> List[CatalogEntry]:
    stores = list(stores)
    catalog: Dict[str, CatalogEntry] = {}
    for recipe in recipes:
        catalog = upsert_catalog(catalog, recipe.ingredients, stores)
    return list(catalog.values())
