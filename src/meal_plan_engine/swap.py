"""Swap an AI-authored meal for an alternative not already in the plan."""

from __future__ import annotations

import logging
from dataclasses import replace

from meal_plan_engine.errors import UnsupportedPlanShape, ValidationFailure
from meal_plan_engine.models import AiMeal, Alternative, PlanContent, Slot, sum_macros
from meal_plan_engine.reconcile import MergedSchedule
from meal_plan_engine.suggestions import RecipeSuggestionSource

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def exclusion_names(schedule: MergedSchedule) -> set[str]:
    """Normalized names of every entry in the plan, across all days."""
    return {normalize_name(entry.recipe_name) for _, _, entry in schedule.entries()}


def _check_swappable(
    content: PlanContent,
    schedule: MergedSchedule,
    day: int,
    slot: Slot,
) -> None:
    if content.days is None:
        raise UnsupportedPlanShape("Plan content has no days; nothing to swap")

    entry = schedule.get(day, slot)
    if entry is None:
        raise ValidationFailure(f"No meal at day {day} {slot.value} to swap")
    if entry.source != "ai":
        raise ValidationFailure(
            f"Day {day} {slot.value} holds database recipe '{entry.recipe_name}'; "
            "remove it from the plan instead of swapping"
        )


def find_candidates(
    schedule: MergedSchedule,
    content: PlanContent,
    day: int,
    slot: Slot,
    source: RecipeSuggestionSource,
) -> list[Alternative]:
    """Alternatives for the slot whose names appear nowhere in the plan.

    An empty list means there is nothing left to offer; it is not an error.
    """
    _check_swappable(content, schedule, day, slot)
    excluded = exclusion_names(schedule)
    return [
        alt for alt in source.get_alternatives(slot)
        if normalize_name(alt.name) not in excluded
    ]


def swap_meal(
    content: PlanContent,
    schedule: MergedSchedule,
    day: int,
    slot: Slot,
    alternative: Alternative,
) -> PlanContent:
    """Return new content with the day's slot meal replaced by alternative.

    Only the target day is rebuilt; its totals are re-derived from its meals.
    """
    _check_swappable(content, schedule, day, slot)

    if normalize_name(alternative.name) in exclusion_names(schedule):
        raise ValidationFailure(
            f"'{alternative.name}' is already in this plan; pick another alternative"
        )

    new_days = []
    replaced = False
    for ai_day in content.days:
        if ai_day.day != day or replaced:
            new_days.append(ai_day)
            continue

        meals = list(ai_day.meals)
        for i, meal in enumerate(meals):
            if meal.slot == slot:
                meals[i] = AiMeal(
                    slot=slot,
                    recipe_name=alternative.name,
                    macros=alternative.macros,
                )
                replaced = True
                break

        if replaced:
            new_days.append(replace(
                ai_day,
                meals=meals,
                totals=sum_macros(m.macros for m in meals),
            ))
        else:
            new_days.append(ai_day)

    if not replaced:
        raise ValidationFailure(f"No AI meal at day {day} {slot.value} to swap")

    logger.info(
        "Swapped day %d %s to '%s'", day, slot.value, alternative.name,
    )
    return replace(content, days=new_days)

