import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeHttp
from main import release, wire
from mealcart.api.routes import register_error_handlers, router
from mealcart.core.config import CartSettings
from mealcart.domain.entities import PlannedMeal
from mealcart.infrastructure.memory_repositories import (
    InMemoryCatalogRepository,
    InMemoryMealPlanRepository,
    InMemoryRecipeRepository,
    InMemoryStoreRepository,
)
from mealcart.infrastructure.provider_client import TargetCartClient

MILK_REQUEST = {"storeId": "st_target", "items": [{"name": "Milk", "qty": 1, "unit": "gal"}]}


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def meals():
    return [
        PlannedMeal(date="2026-10-19", slot="dinner", selection="recipe", recipe_id="r_taco", servings_override=6),
        PlannedMeal(date="2026-10-20", slot="dinner", selection="recipe", recipe_id="r_pesto"),
        PlannedMeal(date="2026-10-21", slot="dinner", selection="leftovers"),
        PlannedMeal(date="2026-10-30", slot="dinner", selection="recipe", recipe_id="r_taco"),
    ]


def _client(stores, recipes, meals, http, clock, **settings_kw):
    settings = CartSettings(endpoint="https://provider.local/cart", **settings_kw)
    app = FastAPI()
    app.include_router(router)
    register_error_handlers(app)
    provider = TargetCartClient(settings.endpoint, session=http) if settings.endpoint else None
    wire(
        app,
        recipe_repo=InMemoryRecipeRepository(recipes),
        store_repo=InMemoryStoreRepository(stores),
        catalog_repo=InMemoryCatalogRepository(),
        meal_plan_repo=InMemoryMealPlanRepository(meals),
        settings=settings,
        provider_client=provider,
        pantry=["salt"],
        household_servings=4,
        clock=clock,
    )
    return TestClient(app)


@pytest.fixture
def client(stores, taco_bowls, pesto_salmon, meals, http, clock):
    return _client(stores, [taco_bowls, pesto_salmon], meals, http, clock)


# -------------------------
# /shopping/cart-session
# -------------------------
def test_cart_session_success_then_cache_hit(client, http):
    first = client.post("/shopping/cart-session", json=MILK_REQUEST)
    assert first.status_code == 200
    body = first.json()
    assert body["provider"] == "target"
    assert body["sessionId"] == "sess_1"
    assert body["checkoutUrl"].startswith("https://")
    assert body["unmatchedItems"] == []

    second = client.post("/shopping/cart-session", json=MILK_REQUEST)
    assert second.status_code == 200
    assert second.json()["sessionId"] == "sess_1"
    assert len(http.calls) == 1


def test_disabled_store_is_403(client):
    r = client.post("/shopping/cart-session", json={**MILK_REQUEST, "storeId": "st_off"})
    assert r.status_code == 403
    assert r.json()["code"] == "UNSUPPORTED_STORE"


def test_unknown_store_is_404(client):
    r = client.post("/shopping/cart-session", json={**MILK_REQUEST, "storeId": "nope"})
    assert r.status_code == 404
    assert r.json() == {"error": "Store not found."}


@pytest.mark.parametrize(
    "payload",
    [
        {"storeId": "st_target", "items": []},
        {"storeId": "", "items": [{"name": "Milk", "qty": 1, "unit": "gal"}]},
        {"storeId": "st_target", "items": [{"name": "Milk", "qty": -1, "unit": "gal"}]},
        {"storeId": "st_target", "items": [{"name": "x" * 121, "qty": 1, "unit": "gal"}]},
        {"storeId": "st_target", "items": [{"name": "Milk", "qty": 1}] * 401},
        {"items": [{"name": "Milk", "qty": 1, "unit": "gal"}]},
    ],
)
def test_malformed_payload_is_400(client, http, payload):
    r = client.post("/shopping/cart-session", json=payload)
    assert r.status_code == 400
    assert "error" in r.json()
    assert http.calls == []


def test_non_json_body_is_400(client):
    r = client.post("/shopping/cart-session", content=b"{oops", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_rate_limit_returns_429_with_retry_after(stores, taco_bowls, meals, http, clock):
    client = _client(stores, [taco_bowls], meals, http, clock, rate_limit_max_requests=2, rate_limit_window_ms=10_000)
    assert client.post("/shopping/cart-session", json=MILK_REQUEST).status_code == 200
    assert client.post("/shopping/cart-session", json=MILK_REQUEST).status_code == 200

    clock.advance(2_500)
    r = client.post("/shopping/cart-session", json=MILK_REQUEST)
    assert r.status_code == 429
    assert r.json() == {
        "error": "Too many cart build requests. Please try again shortly.",
        "code": "RATE_LIMITED",
        "retryAfterMs": 7_500,
    }
    assert r.headers["Retry-After"] == "8"

    other = client.post("/shopping/cart-session", json=MILK_REQUEST, headers={"X-Forwarded-For": "10.0.0.9, 10.0.0.1"})
    assert other.status_code == 200

    clock.advance(7_500)
    assert client.post("/shopping/cart-session", json=MILK_REQUEST).status_code == 200


def test_missing_endpoint_is_503(stores, taco_bowls, meals, http, clock):
    client = _client(stores, [taco_bowls], meals, http, clock)
    client.app.state.create_cart_session.builder.client = None
    r = client.post("/shopping/cart-session", json=MILK_REQUEST)
    assert r.status_code == 503
    assert r.json()["code"] == "PROVIDER_NOT_CONFIGURED"


def test_provider_garbage_is_502(stores, taco_bowls, meals, clock):
    client = _client(stores, [taco_bowls], meals, FakeHttp(body="{}"), clock)
    r = client.post("/shopping/cart-session", json=MILK_REQUEST)
    assert r.status_code == 502
    assert r.json()["code"] == "INVALID_PROVIDER_RESPONSE"


# -------------------------
# /grocery-list
# -------------------------
def test_grocery_list_for_range(client):
    r = client.get("/grocery-list", params={"start": "2026-10-19", "end": "2026-10-25"})
    assert r.status_code == 200
    stores = {b["store"]: b for b in r.json()["stores"]}
    assert stores["Farm Stand"]["count"] == 0
    assert stores["Sprouts"]["items"] == [
        {"name": "ground turkey", "unit": "lb", "storeId": "st_sprouts", "store": "Sprouts", "qty": 1.875}
    ]
    parmesan = next(i for i in stores["Target"]["items"] if i["name"] == "parmesan")
    assert parmesan["qty"] is None


def test_grocery_list_bad_date_is_400(client):
    r = client.get("/grocery-list", params={"start": "yesterday", "end": "2026-10-25"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_export_text_and_html(client):
    params = {"start": "2026-10-19", "end": "2026-10-19"}
    text = client.get("/grocery-list/export", params=params).text
    assert text.startswith("Target Cart-Ready List\n\n- 3 cup Jasmine Rice")
    assert "Sprouts Cart-Ready List\n\n- 1.88 lb Ground Turkey" in text
    assert "Salt" not in text

    ordered = client.get("/grocery-list/export", params={**params, "stores": ["Sprouts"]}).text
    assert ordered == "Sprouts Cart-Ready List\n\n- 1.88 lb Ground Turkey"

    html = client.get("/grocery-list/export", params={**params, "format": "html"})
    assert html.headers["content-type"].startswith("text/html")
    assert "<h2>Sprouts</h2>" in html.text


def test_plan_balance(client):
    r = client.get("/plan/balance", params={"start": "2026-10-19", "end": "2026-10-25"})
    assert r.status_code == 200
    balance = r.json()["balance"]
    assert balance["plannedMeals"] == 2
    assert balance["proteinMeals"] == 1
    assert balance["leftoversMeals"] == 1


def test_release_closes_provider_session(stores, taco_bowls, meals, http, clock):
    c = _client(stores, [taco_bowls], meals, http, clock)
    release(c.app)
    assert http.closed
    assert c.app.state.provider_client is None
    release(c.app)
