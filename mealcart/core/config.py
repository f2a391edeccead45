# mealcart/core/config.py
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import List, Optional

# Mongo settings
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "mealcart")
MONGO_RECIPES_COL: str = os.getenv("MONGO_RECIPES_COL", "recipes")
MONGO_STORES_COL: str = os.getenv("MONGO_STORES_COL", "stores")
MONGO_CATALOG_COL: str = os.getenv("MONGO_CATALOG_COL", "ingredient_catalog")
MONGO_MEAL_PLAN_COL: str = os.getenv("MONGO_MEAL_PLAN_COL", "meal_plan")

# Planner defaults
HOUSEHOLD_SERVINGS: int = int(os.getenv("HOUSEHOLD_SERVINGS", "4"))
PANTRY_ITEMS: List[str] = [
    x.strip() for x in os.getenv("PANTRY_ITEMS", "salt,black pepper,olive oil").split(",") if x.strip()
]
CHECKLIST_STORE: str = os.getenv("CHECKLIST_STORE", "Trader Joe's")


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _clamped_int(name: str, default: int, lo: int, hi: int, rounding=math.floor) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    return max(lo, min(hi, int(rounding(value))))


@dataclass(frozen=True)
class CartSettings:
    """Checkout-path settings, read once per process."""

    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    timeout_ms: int = 10_000
    cache_ttl_ms: int = 60_000
    rate_limit_window_ms: int = 60_000
    rate_limit_max_requests: int = 10

    @classmethod
    def from_env(cls) -> "CartSettings":
        return cls(
            endpoint=_env("TARGET_CART_SESSION_ENDPOINT"),
            api_key=_env("TARGET_CART_SESSION_API_KEY"),
            timeout_ms=_clamped_int("TARGET_CART_TIMEOUT_MS", 10_000, 1_000, 30_000, rounding=round),
            cache_ttl_ms=_clamped_int("TARGET_CART_CACHE_TTL_MS", 60_000, 0, 300_000),
            rate_limit_window_ms=_clamped_int("SHOPPING_CART_RATE_LIMIT_WINDOW_MS", 60_000, 1_000, 600_000),
            rate_limit_max_requests=_clamped_int("SHOPPING_CART_RATE_LIMIT_MAX_REQUESTS", 10, 1, 100),
        )


# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
LOGGER = logging.getLogger("mealcart")
