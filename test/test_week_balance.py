from mealcart.application.week_balance import build_week_balance
from mealcart.domain.entities import PlannedMeal, Recipe


def test_week_balance_counts(taco_bowls):
    quick = Recipe(id="r_wrap", title="Wraps", servings=4, ingredients=[], tags=["20-min", "high-protein", "leftovers"])
    meals = [
        PlannedMeal(date="2026-10-19", slot="dinner", selection="recipe", recipe_id="r_taco"),
        PlannedMeal(date="2026-10-19", slot="lunch", selection="recipe", recipe_id="r_wrap"),
        PlannedMeal(date="2026-10-20", slot="dinner", selection="leftovers"),
        PlannedMeal(date="2026-10-21", slot="dinner", selection="eating_out"),
        PlannedMeal(date="2026-10-22", slot="dinner", selection="skip"),
        PlannedMeal(date="2026-10-23", slot="dinner", selection="recipe", recipe_id="r_deleted"),
    ]
    balance = build_week_balance(meals, [taco_bowls, quick], household_servings=5)
    assert balance == {
        "plannedMeals": 2,
        "quickMeals": 1,
        "proteinMeals": 2,
        "leftoversMeals": 2,
        "offPlanSlots": 2,
        "plannedDays": 1,
        "householdServings": 5,
    }
