import copy

import pytest
from meal_plan_engine.models import Recipe
from meal_plan_engine.store import MemoryPlanStore
from meal_plan_engine.suggestions import StaticSuggestionSource


def meal(slot, name, cal, p, c, f):
    return {"slot": slot, "recipeName": name,
            "calories": cal, "protein": p, "carbs": c, "fats": f}


def day(n, *meals):
    totals = {
        k: sum(m[k] for m in meals)
        for k in ("calories", "protein", "carbs", "fats")
    }
    return {"day": n, "meals": list(meals), "totals": totals}


@pytest.fixture
def scenario_content() -> dict:
    """One AI day: breakfast 420/28/48/14 and lunch 480/38/22/28."""
    return {
        "days": [
            day(1,
                meal("breakfast", "Egg Scramble", 420, 28, 48, 14),
                meal("lunch", "Chicken Rice Bowl", 480, 38, 22, 28)),
        ],
        "dietType": "standard",
        "dietaryRestrictions": [],
        "nutritionalFocus": [],
        "excludeIngredients": [],
    }


@pytest.fixture
def two_day_content() -> dict:
    """Two full AI days drawn from the built-in alternatives."""
    return {
        "days": [
            day(1,
                meal("breakfast", "Overnight Oats with Banana", 350, 14, 55, 10),
                meal("lunch", "Grilled Chicken Salad", 520, 42, 28, 26),
                meal("dinner", "Baked Salmon with Roasted Vegetables", 580, 45, 32, 28),
                meal("snack", "Greek Yogurt with Honey", 180, 15, 22, 4)),
            day(2,
                meal("breakfast", "Avocado Toast with Poached Eggs", 420, 18, 38, 24),
                meal("lunch", "Quinoa Buddha Bowl", 480, 18, 62, 18),
                meal("dinner", "Chicken Stir-Fry with Brown Rice", 620, 42, 58, 22),
                meal("snack", "Protein Energy Balls", 190, 10, 20, 8)),
        ],
        "dietType": "mediterranean",
        "dietaryRestrictions": ["nut-free"],
        "nutritionalFocus": ["high-fiber"],
        "excludeIngredients": ["cilantro"],
    }


@pytest.fixture
def lasagna() -> Recipe:
    return Recipe(id="r-lasagna", title="Coach's Lasagna",
                  calories=650, protein=40, carbs=60, fats=25,
                  prep_time=20, cook_time=45, category="dinner")


@pytest.fixture
def plan_record(two_day_content) -> dict:
    return {
        "id": "plan-1",
        "coach_id": "coach-1",
        "title": "7-Day Weight Loss Plan",
        "description": "Balanced meal plan for sustainable weight loss",
        "duration": 7,
        "goal_type": "WEIGHT_LOSS",
        "target_calories": 1800,
        "target_protein": 113,
        "target_carbs": 203,
        "target_fats": 60,
        "is_system": False,
        "is_public": False,
        "created_at": "2026-01-05T09:00:00+00:00",
        "updated_at": "2026-01-05T09:00:00+00:00",
        "content": copy.deepcopy(two_day_content),
        "recipes": [],
    }


@pytest.fixture
def store(plan_record) -> MemoryPlanStore:
    return MemoryPlanStore([plan_record])


@pytest.fixture
def suggestions() -> StaticSuggestionSource:
    return StaticSuggestionSource()
