"""Merge database recipe assignments and AI-authored content into one schedule."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from meal_plan_engine.content import has_ai_content
from meal_plan_engine.models import (
    DatabaseRecipeAssignment,
    DbMeal,
    MergedMealEntry,
    PlanContent,
    Slot,
)
from meal_plan_engine.slots import slot_sort_key

logger = logging.getLogger(__name__)


@dataclass
class MergedSchedule:
    by_day: dict[int, dict[Slot, MergedMealEntry]] = field(default_factory=dict)
    has_database_recipes: bool = False
    has_ai_content: bool = False

    def days(self) -> list[int]:
        return sorted(self.by_day)

    def get(self, day: int, slot: Slot) -> MergedMealEntry | None:
        return self.by_day.get(day, {}).get(slot)

    def entries(self) -> Iterator[tuple[int, Slot, MergedMealEntry]]:
        """Iterate every entry in calendar order."""
        for day in self.days():
            cells = self.by_day[day]
            for slot in sorted(cells, key=slot_sort_key):
                yield day, slot, cells[slot]


def db_meal(assignment: DatabaseRecipeAssignment) -> DbMeal:
    recipe = assignment.recipe
    return DbMeal(
        recipe_id=recipe.id,
        recipe_name=recipe.title,
        macros=recipe.macros,
        prep_time=recipe.prep_time,
        cook_time=recipe.cook_time,
    )


def reconcile_sources(
    assignments: Iterable[DatabaseRecipeAssignment] | None,
    content: PlanContent | None,
) -> MergedSchedule:
    """Build the merged schedule.

    Database assignments are written first, so they always own their
    coordinate. AI meals only fill coordinates that are still empty; when the
    content holds two AI meals for one coordinate the first in array order
    is kept.
    """
    schedule = MergedSchedule()

    for a in assignments or []:
        schedule.by_day.setdefault(a.day, {})[a.slot] = db_meal(a)
        schedule.has_database_recipes = True

    if content is not None and has_ai_content(content):
        schedule.has_ai_content = True
        for ai_day in content.days:
            cells = schedule.by_day.setdefault(ai_day.day, {})
            for meal in ai_day.meals:
                existing = cells.get(meal.slot)
                if existing is None:
                    cells[meal.slot] = meal
                elif existing.source == "ai":
                    logger.debug(
                        "Ignoring duplicate AI meal '%s' at day %d %s",
                        meal.recipe_name, ai_day.day, meal.slot.value,
                    )

    return schedule
