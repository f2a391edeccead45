from mealcart.application.store_resolver import StoreResolver, catalog_from_recipes
from mealcart.domain.entities import CatalogEntry, Ingredient, Recipe


def test_explicit_store_beats_catalog(stores):
    resolver = StoreResolver(stores, [CatalogEntry(name="milk", default_store_id="st_aldi")])
    store = resolver.resolve("target", "milk")
    assert store is not None and store.id == "st_target"


def test_unknown_explicit_store_falls_back_to_catalog(stores):
    resolver = StoreResolver(stores, [CatalogEntry(name="milk", default_store_id="st_aldi")])
    store = resolver.resolve("Whole Foods", "milk")
    assert store is not None and store.name == "Aldi"


def test_no_explicit_store_and_no_catalog_is_unassigned(stores):
    resolver = StoreResolver(stores, [])
    assert resolver.resolve("", "saffron") is None
    assert resolver.resolve(None, "saffron") is None


def test_assigned_store_id_wins(stores):
    resolver = StoreResolver(stores, [CatalogEntry(name="eggs", default_store_id="st_aldi")])
    ing = Ingredient(name="Eggs", qty=12, unit="each", store="Target", store_id="st_sprouts")
    assert resolver.resolve_ingredient(ing).id == "st_sprouts"


def test_catalog_pointing_at_missing_store_is_unassigned(stores):
    resolver = StoreResolver(stores, [CatalogEntry(name="eggs", default_store_id="st_gone")])
    assert resolver.resolve("", "eggs") is None


def test_catalog_from_recipes_skips_unknown_stores(stores):
    recipes = [
        Recipe(id="a", title="A", servings=2, ingredients=[
            Ingredient(name="Milk", qty=1, unit="gal", store="Target"),
            Ingredient(name="Kale", qty=1, unit="bunch", store="Nowhere"),
        ]),
        Recipe(id="b", title="B", servings=2, ingredients=[
            Ingredient(name="milk", qty=1, unit="gallons", store="Aldi"),
        ]),
    ]
    catalog = {e.name: e for e in catalog_from_recipes(recipes, stores)}
    assert set(catalog) == {"milk"}
    assert catalog["milk"].default_store_id == "st_aldi"
