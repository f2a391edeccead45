# mealcart/application/scaling.py
from __future__ import annotations

import math
from typing import Any, Optional

from mealcart.domain.entities import Recipe


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def normalize_servings(value: Any, fallback: int) -> int:
    """Non-finite or < 1 → fallback; otherwise rounded half-up to an int."""
    numeric = _as_float(value)
    if not math.isfinite(numeric) or numeric < 1:
        return fallback
    return int(math.floor(numeric + 0.5))


def recipe_scale(recipe: Recipe, servings_target: Any, household_servings: int = 4) -> float:
    household = normalize_servings(household_servings, 4)
    recipe_servings = normalize_servings(recipe.servings, 4)
    planned = normalize_servings(servings_target, household)
    return planned / recipe_servings


def effective_qty(base_qty: Any, scale_factor: float) -> Optional[float]:
    """
    Scaled ingredient quantity. None stays None (unknown amount);
    any other non-finite/unparsable value counts as 1.
    """
    if base_qty is None:
        return None
    qty = _as_float(base_qty)
    if not math.isfinite(qty):
        qty = 1.0
    return qty * scale_factor
