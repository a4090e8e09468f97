"""Rescale AI-authored meals when a plan's macro targets change."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from meal_plan_engine.content import has_ai_content
from meal_plan_engine.errors import UnsupportedPlanShape, ValidationFailure
from meal_plan_engine.models import PlanContent, Targets
from meal_plan_engine.totals import recompute_day_totals

logger = logging.getLogger(__name__)

# Previous calorie target assumed when the plan never had one
FALLBACK_CALORIES = 1800


@dataclass
class AdaptationResult:
    content: PlanContent | None
    rescaled: bool = False
    scale_factor: float = 1.0


def scale_factor(old_calories: float | None, new_calories: float | None) -> float:
    """Ratio of new to old target calories."""
    if new_calories is None or new_calories <= 0:
        raise ValidationFailure(
            f"A positive calorie target is required to rescale, got {new_calories!r}"
        )
    base = old_calories if old_calories else FALLBACK_CALORIES
    return new_calories / base


def rescale_content(content: PlanContent, factor: float) -> PlanContent:
    """Multiply every AI meal's macros by factor, rounding per meal.

    Day totals are re-derived from the rescaled meals rather than scaled
    themselves, so a total can differ slightly from round(old_total * factor).
    """
    if content.days is None:
        raise UnsupportedPlanShape("Plan content has no days; nothing to rescale")
    if factor <= 0:
        raise ValidationFailure(f"Scale factor must be positive, got {factor}")

    days = [
        replace(d, meals=[replace(m, macros=m.macros.scaled(factor)) for m in d.meals])
        for d in content.days
    ]
    return recompute_day_totals(replace(content, days=days))


def targets_changed(old: Targets, new: Targets) -> bool:
    return old.as_tuple() != new.as_tuple()


def needs_rescale(old_targets: Targets, new_targets: Targets) -> bool:
    """True when the edit sets a calorie target whose ratio to the old one is not 1."""
    if new_targets.calories is None:
        return False
    if not targets_changed(old_targets, new_targets):
        return False
    return scale_factor(old_targets.calories, new_targets.calories) != 1


def adapt_content(
    content: PlanContent,
    old_targets: Targets,
    new_targets: Targets,
) -> AdaptationResult:
    """Adapt AI content to edited targets.

    Content is rescaled only when it has AI days and needs_rescale() holds.
    Otherwise the input comes back untouched with rescaled=False.
    Database recipe assignments are never part of this.
    """
    if not has_ai_content(content) or not needs_rescale(old_targets, new_targets):
        return AdaptationResult(content)

    factor = scale_factor(old_targets.calories, new_targets.calories)
    logger.info(
        "Rescaling AI meals by %.4f (%s -> %s kcal)",
        factor,
        old_targets.calories if old_targets.calories else f"{FALLBACK_CALORIES} (fallback)",
        new_targets.calories,
    )
    return AdaptationResult(
        content=rescale_content(content, factor),
        rescaled=True,
        scale_factor=factor,
    )
