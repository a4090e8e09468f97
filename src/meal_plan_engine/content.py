"""Content blob parsing and serialization.

The plan's AI-authored content is stored as schema-free JSON:

    {
      "days": [
        {"day": 1,
         "meals": [{"slot": "breakfast", "recipeName": "...",
                    "calories": 420, "protein": 28, "carbs": 48, "fats": 14}],
         "totals": {"calories": 420, ...}},
      ],
      "dietType": "standard",
      "dietaryRestrictions": [], "nutritionalFocus": [], "excludeIngredients": []
    }

parse_content() turns that into a PlanContent; dump_content() turns it back.
Day totals are always re-derived from the meals on the way out. Keys the
engine does not interpret, at any level, are written back as they were read.
"""

from __future__ import annotations

import logging

from meal_plan_engine.errors import UnsupportedPlanShape, ValidationFailure
from meal_plan_engine.models import (
    MACRO_FIELDS,
    AiDay,
    AiMeal,
    Macros,
    PlanContent,
    sum_macros,
)
from meal_plan_engine.slots import parse_slot

logger = logging.getLogger(__name__)

TAG_KEYS = {
    "dietType": "diet_type",
    "dietaryRestrictions": "dietary_restrictions",
    "nutritionalFocus": "nutritional_focus",
    "excludeIngredients": "exclude_ingredients",
}

DAY_KEYS = {"day", "meals", "totals"}
MEAL_KEYS = {"slot", "recipeName", *MACRO_FIELDS}


def _string_list(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(v) for v in raw if v is not None]


def parse_meal(raw: object, day: int) -> AiMeal:
    """Parse one meal record, defaulting missing macro fields to 0."""
    if not isinstance(raw, dict):
        raise UnsupportedPlanShape(f"Meal on day {day} is not an object: {raw!r}")

    try:
        slot = parse_slot(raw.get("slot"))
    except ValidationFailure as e:
        raise UnsupportedPlanShape(f"Day {day}: {e}") from e

    known = MEAL_KEYS if raw.get("recipeName") else MEAL_KEYS | {"name"}
    name = raw.get("recipeName") or raw.get("name") or ""
    return AiMeal(
        slot=slot,
        recipe_name=str(name),
        macros=Macros.from_mapping(raw),
        extra={k: v for k, v in raw.items() if k not in known},
    )


def parse_day(raw: object) -> AiDay:
    if not isinstance(raw, dict):
        raise UnsupportedPlanShape(f"Content day is not an object: {raw!r}")

    day = raw.get("day")
    if isinstance(day, bool) or not isinstance(day, int):
        raise UnsupportedPlanShape(f"Content day has no integer 'day' field: {day!r}")

    meals_raw = raw.get("meals") or []
    if not isinstance(meals_raw, list):
        raise UnsupportedPlanShape(f"Day {day} meals is not a list")

    meals = [parse_meal(m, day) for m in meals_raw]
    return AiDay(
        day=day,
        meals=meals,
        totals=sum_macros(m.macros for m in meals),
        extra={k: v for k, v in raw.items() if k not in DAY_KEYS},
    )


def parse_content(raw: dict | list | None) -> PlanContent:
    """Parse a stored content blob into a PlanContent.

    A missing blob, a blob without a "days" list, or the legacy list-shaped
    blob all yield content with days=None.
    """
    if raw is None:
        return PlanContent()

    if isinstance(raw, list):
        logger.warning("Plan content uses the legacy list shape; ignoring its days")
        return PlanContent()

    if not isinstance(raw, dict):
        raise UnsupportedPlanShape(f"Plan content must be an object, got {type(raw).__name__}")

    content = PlanContent()
    days_raw = raw.get("days")
    if isinstance(days_raw, list):
        content.days = [parse_day(d) for d in days_raw]

    diet_type = raw.get("dietType")
    content.diet_type = str(diet_type) if diet_type is not None else None
    content.dietary_restrictions = _string_list(raw.get("dietaryRestrictions"))
    content.nutritional_focus = _string_list(raw.get("nutritionalFocus"))
    content.exclude_ingredients = _string_list(raw.get("excludeIngredients"))

    content.extra = {
        k: v for k, v in raw.items() if k != "days" and k not in TAG_KEYS
    }
    return content


def dump_meal(meal: AiMeal) -> dict:
    return {
        **meal.extra,
        "slot": meal.slot.value,
        "recipeName": meal.recipe_name,
        **meal.macros.to_dict(),
    }


def dump_content(content: PlanContent) -> dict:
    """Serialize a PlanContent back to its stored JSON shape."""
    data = dict(content.extra)
    if content.days is not None:
        data["days"] = [
            {
                **d.extra,
                "day": d.day,
                "meals": [dump_meal(m) for m in d.meals],
                "totals": sum_macros(m.macros for m in d.meals).to_dict(),
            }
            for d in content.days
        ]
    data["dietType"] = content.diet_type
    data["dietaryRestrictions"] = list(content.dietary_restrictions)
    data["nutritionalFocus"] = list(content.nutritional_focus)
    data["excludeIngredients"] = list(content.exclude_ingredients)
    return data


def has_ai_content(content: PlanContent) -> bool:
    return bool(content.days)
