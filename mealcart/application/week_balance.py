# mealcart/application/week_balance.py
from __future__ import annotations

import re
from typing import Any, Dict, Iterable

from mealcart.application.grocery_aggregator import ordered_meals
from mealcart.application.scaling import normalize_servings
from mealcart.domain.entities import PlannedMeal, Recipe

_RE_QUICK = re.compile(r"\b(15-min|20-min)\b", re.IGNORECASE)
_RE_PROTEIN = re.compile(r"high-protein", re.IGNORECASE)
_RE_LEFTOVERS = re.compile(r"leftovers", re.IGNORECASE)


def _tagged(recipe: Recipe, pattern: re.Pattern) -> bool:
    return any(pattern.search(str(t)) for t in recipe.tags or [])


def build_week_balance(meals: Iterable[PlannedMeal], recipes: Iterable[Recipe], household_servings: int = 4) -> Dict[str, Any]:
    """Plan summary: how many quick / protein / leftovers meals, and how many slots are off-plan."""
    by_id = {r.id: r for r in recipes}
    chosen = []
    leftovers_slots = 0
    off_plan_slots = 0
    planned_days = set()

    for m in ordered_meals(meals):
        if m.selection == "leftovers":
            leftovers_slots += 1
        elif m.selection in ("skip", "eating_out"):
            off_plan_slots += 1
        elif m.selection == "recipe":
            recipe = by_id.get(m.recipe_id or "")
            if recipe is not None:
                chosen.append(recipe)
                planned_days.add(m.date)

    return {
        "plannedMeals": len(chosen),
        "quickMeals": sum(1 for r in chosen if _tagged(r, _RE_QUICK)),
        "proteinMeals": sum(1 for r in chosen if _tagged(r, _RE_PROTEIN)),
        "leftoversMeals": leftovers_slots + sum(1 for r in chosen if _tagged(r, _RE_LEFTOVERS)),
        "offPlanSlots": off_plan_slots,
        "plannedDays": len(planned_days),
        "householdServings": normalize_servings(household_servings, 4),
    }
