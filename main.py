from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from mealcart.api.routes import register_error_handlers, router
from mealcart.core.config import (
    CHECKLIST_STORE,
    HOUSEHOLD_SERVINGS,
    MONGO_CATALOG_COL,
    MONGO_DB,
    MONGO_MEAL_PLAN_COL,
    MONGO_RECIPES_COL,
    MONGO_STORES_COL,
    MONGO_URI,
    PANTRY_ITEMS,
    CartSettings,
)

from mealcart.domain.repositories import CatalogReadRepo, MealPlanReadRepo, RecipeReadRepo, StoreReadRepo
from mealcart.infrastructure.mongo_repositories import (
    MongoCatalogRepository,
    MongoMealPlanRepository,
    MongoRecipeRepository,
    MongoStoreRepository,
)
from mealcart.infrastructure.provider_client import TargetCartClient
from mealcart.infrastructure.rate_limiter import FixedWindowRateLimiter
from mealcart.infrastructure.session_cache import CartSessionCache
from mealcart.application.checkout_session import CheckoutSessionBuilder
from mealcart.application.usecases import BuildGroceryList, CreateCartSession, ExportGroceryList, SummarizePlan

log = logging.getLogger("app")
app = FastAPI(title="Meal Cart")
app.include_router(router)
register_error_handlers(app)

_mongo_client: MongoClient | None = None


def wire(
    target: FastAPI,
    recipe_repo: RecipeReadRepo,
    store_repo: StoreReadRepo,
    catalog_repo: CatalogReadRepo,
    meal_plan_repo: MealPlanReadRepo,
    settings: CartSettings,
    provider_client: TargetCartClient | None = None,
    pantry=PANTRY_ITEMS,
    household_servings: int = HOUSEHOLD_SERVINGS,
    clock=None,
) -> None:
    """Build use cases + shared limiter/cache and expose them on app.state."""
    clock_kw = {"clock": clock} if clock is not None else {}

    if provider_client is None and settings.endpoint:
        provider_client = TargetCartClient(settings.endpoint, settings.api_key, settings.timeout_ms)

    rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
        **clock_kw,
    )
    session_cache = CartSessionCache(ttl_ms=settings.cache_ttl_ms, **clock_kw)
    builder = CheckoutSessionBuilder(client=provider_client, cache=session_cache)

    build_list = BuildGroceryList(
        recipe_repo=recipe_repo,
        store_repo=store_repo,
        catalog_repo=catalog_repo,
        meal_plan_repo=meal_plan_repo,
        pantry=tuple(pantry),
        household_servings=household_servings,
    )

    # DI for routes.py
    target.state.provider_client = provider_client
    target.state.rate_limiter = rate_limiter
    target.state.session_cache = session_cache
    target.state.create_cart_session = CreateCartSession(store_repo=store_repo, builder=builder)
    target.state.build_grocery_list = build_list
    target.state.export_grocery_list = ExportGroceryList(build_list=build_list, checklist_store=CHECKLIST_STORE)
    target.state.summarize_plan = SummarizePlan(
        recipe_repo=recipe_repo, meal_plan_repo=meal_plan_repo, household_servings=household_servings
    )


@app.on_event("startup")
def on_startup() -> None:
    global _mongo_client

    settings = CartSettings.from_env()
    if not settings.endpoint:
        log.warning("TARGET_CART_SESSION_ENDPOINT not set; cart sessions will return PROVIDER_NOT_CONFIGURED")

    _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=3000)
    db = _mongo_client[MONGO_DB]
    wire(
        app,
        recipe_repo=MongoRecipeRepository(db[MONGO_RECIPES_COL]),
        store_repo=MongoStoreRepository(db[MONGO_STORES_COL]),
        catalog_repo=MongoCatalogRepository(db[MONGO_CATALOG_COL]),
        meal_plan_repo=MongoMealPlanRepository(db[MONGO_MEAL_PLAN_COL]),
        settings=settings,
    )
    log.info("Startup complete")


def release(target: FastAPI) -> None:
    """Close the provider HTTP session held on app.state, if any."""
    client = getattr(target.state, "provider_client", None)
    if client is not None:
        client.close()
        target.state.provider_client = None


@app.on_event("shutdown")
def on_shutdown() -> None:
    global _mongo_client
    release(app)
    if _mongo_client:
        _mongo_client.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8081, reload=False)
