from mealcart.infrastructure.mongo_repositories import MongoRecipeRepository, parse_recipe


class FakeCollection:
    def __init__(self, docs):
        self.docs = docs

    def find(self, query):
        return list(self.docs)

    def find_one(self, query):
        return next((d for d in self.docs if isinstance(d, dict) and d.get("id") == query.get("id")), None)


def test_parse_recipe_coerces_names_and_drops_bad_ingredients():
    recipe = parse_recipe({
        "id": "r1",
        "title": "Omelette",
        "servings": 2,
        "ingredients": [
            {"name": 42, "qty": 1, "unit": "each"},
            "eggs",
            None,
            {"name": "  eggs ", "qty": 3, "unit": "each", "storeId": "s1"},
        ],
    })
    assert [i.name for i in recipe.ingredients] == ["42", "eggs"]
    assert recipe.ingredients[1].store_id == "s1"


def test_parse_recipe_tolerates_non_list_fields():
    recipe = parse_recipe({"_id": "r2", "title": None, "ingredients": "flour", "tags": 7})
    assert recipe.id == "r2"
    assert recipe.title == ""
    assert recipe.ingredients == []
    assert recipe.tags == []


def test_all_skips_unreadable_documents():
    repo = MongoRecipeRepository(FakeCollection([
        {"id": "ok", "title": "Toast", "ingredients": [{"name": "bread", "qty": 2, "unit": "slice"}]},
        {"title": "no id here"},
        "not a document",
    ]))
    assert [r.id for r in repo.all()] == ["ok"]


def test_by_id_returns_none_for_unreadable_document():
    repo = MongoRecipeRepository(FakeCollection([{"id": "", "title": "blank"}]))
    assert repo.by_id("") is None
