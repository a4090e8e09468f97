"""Day and plan nutrition totals derived from the merged schedule."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from meal_plan_engine.models import (
    MACRO_FIELDS,
    Macros,
    MergedMealEntry,
    PlanContent,
    Slot,
    Targets,
    sum_macros,
)
from meal_plan_engine.reconcile import MergedSchedule


@dataclass
class PlanSummary:
    per_day: dict[int, Macros] = field(default_factory=dict)
    total: Macros = field(default_factory=Macros)
    daily_average: Macros = field(default_factory=Macros)
    # Average minus target per macro; None where the target is unset
    target_gap: dict[str, float | None] = field(default_factory=dict)
    unique_recipes: int = 0


def day_totals(day_entries: dict[Slot, MergedMealEntry]) -> Macros:
    """Sum the macros of every entry present in one day."""
    return sum_macros(entry.macros for entry in day_entries.values())


def schedule_totals(schedule: MergedSchedule) -> dict[int, Macros]:
    return {day: day_totals(schedule.by_day[day]) for day in schedule.days()}


def plan_summary(schedule: MergedSchedule, targets: Targets | None = None) -> PlanSummary:
    """Per-day totals, plan total, daily average and gap to the targets."""
    per_day = schedule_totals(schedule)
    total = sum_macros(per_day.values())

    num_days = len(per_day)
    if num_days:
        average = Macros(
            total.calories / num_days,
            total.protein / num_days,
            total.carbs / num_days,
            total.fats / num_days,
        )
    else:
        average = Macros.zero()

    gap: dict[str, float | None] = {}
    target_values = (targets or Targets()).as_tuple()
    for name, target in zip(MACRO_FIELDS, target_values):
        gap[name] = None if target is None else getattr(average, name) - target

    names = {
        entry.recipe_name.strip().casefold()
        for _, _, entry in schedule.entries()
    }

    return PlanSummary(
        per_day=per_day,
        total=total,
        daily_average=average,
        target_gap=gap,
        unique_recipes=len(names),
    )


def recompute_day_totals(content: PlanContent) -> PlanContent:
    """Return content whose stored day totals equal the sum of their meals."""
    if content.days is None:
        return content
    days = [
        replace(d, totals=sum_macros(m.macros for m in d.meals))
        for d in content.days
    ]
    return replace(content, days=days)
