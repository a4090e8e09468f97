"""Plan operations: read the plan, run the engine, persist in one store call."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from meal_plan_engine.adapter import AdaptationResult, adapt_content, needs_rescale
from meal_plan_engine.config import DEFAULTS, deep_merge
from meal_plan_engine.content import dump_content, parse_content
from meal_plan_engine.errors import ValidationFailure
from meal_plan_engine.models import (
    Alternative,
    DatabaseRecipeAssignment,
    GoalType,
    MealPlan,
    Recipe,
    Slot,
    Targets,
)
from meal_plan_engine import swap as swap_resolver
from meal_plan_engine.reconcile import MergedSchedule, reconcile_sources
from meal_plan_engine.slots import parse_slot, validate_day
from meal_plan_engine.store import PlanStore
from meal_plan_engine.suggestions import RecipeSuggestionSource
from meal_plan_engine.swap import find_candidates, normalize_name
from meal_plan_engine.totals import PlanSummary, plan_summary
from meal_plan_engine.variation import GenerationRequest, generate_plan, generate_variation

logger = logging.getLogger(__name__)

TARGET_FIELDS = ("target_calories", "target_protein", "target_carbs", "target_fats")


@dataclass
class PlanView:
    plan: MealPlan
    schedule: MergedSchedule
    summary: PlanSummary


@dataclass
class UpdateOutcome:
    plan: MealPlan
    adaptation: AdaptationResult


def load_schedule(store: PlanStore, plan_id: str) -> PlanView:
    """Read side: merged schedule plus derived totals for one plan."""
    plan = store.get_plan(plan_id)
    schedule = reconcile_sources(plan.assignments, parse_content(plan.content))
    return PlanView(plan, schedule, plan_summary(schedule, plan.targets()))


def validate_patch(patch: dict) -> dict:
    """Check scalar fields of a plan update, returning a normalized copy."""
    clean = dict(patch)

    for name in TARGET_FIELDS:
        if name not in clean:
            continue
        value = clean[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationFailure(f"{name} must be a number, got {value!r}")
        if value < 0:
            raise ValidationFailure(f"{name} cannot be negative, got {value}")
    if "target_calories" in clean and clean["target_calories"] == 0:
        raise ValidationFailure("target_calories must be greater than zero")

    if "duration" in clean:
        duration = clean["duration"]
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
            raise ValidationFailure(f"duration must be a positive integer, got {duration!r}")

    if "title" in clean and not str(clean["title"]).strip():
        raise ValidationFailure("title cannot be empty")

    if clean.get("goal_type") is not None:
        try:
            clean["goal_type"] = GoalType(clean["goal_type"])
        except ValueError:
            valid = ", ".join(g.value for g in GoalType)
            raise ValidationFailure(f"Unknown goal type '{clean['goal_type']}'. Valid: {valid}")

    return clean


def update_plan(store: PlanStore, plan_id: str, patch: dict) -> UpdateOutcome:
    """Apply an edit, rescaling AI meals when the targets changed.

    The scalar fields and any rewritten content go out in a single
    update_plan call. Content supplied in the patch is stored as given
    (with day totals re-derived) and is not rescaled.
    """
    clean = validate_patch(patch)
    plan = store.get_plan(plan_id)

    if "content" in clean:
        supplied = parse_content(clean["content"])
        if supplied.days is not None:
            clean["content"] = dump_content(supplied)
        return UpdateOutcome(store.update_plan(plan_id, clean), AdaptationResult(supplied))

    old_targets = plan.targets()
    new_targets = Targets(*(
        clean.get(name, old) for name, old in zip(TARGET_FIELDS, old_targets.as_tuple())
    ))

    # Scalar-only edits never read the content blob
    if not needs_rescale(old_targets, new_targets):
        return UpdateOutcome(store.update_plan(plan_id, clean), AdaptationResult(None))

    result = adapt_content(parse_content(plan.content), old_targets, new_targets)
    if result.rescaled:
        clean["content"] = dump_content(result.content)

    return UpdateOutcome(store.update_plan(plan_id, clean), result)


def _swap_context(store: PlanStore, plan_id: str, day: int, slot: str | Slot):
    plan = store.get_plan(plan_id)
    # Checked against the content's days, which may outrun a shortened duration
    validate_day(day)
    slot = parse_slot(slot)
    content = parse_content(plan.content)
    schedule = reconcile_sources(plan.assignments, content)
    return slot, content, schedule


def list_swap_candidates(
    store: PlanStore,
    plan_id: str,
    day: int,
    slot: str | Slot,
    source: RecipeSuggestionSource,
) -> list[Alternative]:
    slot, content, schedule = _swap_context(store, plan_id, day, slot)
    return find_candidates(schedule, content, day, slot, source)


def swap_meal(
    store: PlanStore,
    plan_id: str,
    day: int,
    slot: str | Slot,
    recipe_name: str,
    source: RecipeSuggestionSource,
) -> MealPlan:
    """Replace the AI meal at (day, slot) with the named alternative."""
    slot, content, schedule = _swap_context(store, plan_id, day, slot)
    candidates = find_candidates(schedule, content, day, slot, source)

    wanted = normalize_name(recipe_name)
    chosen = next((c for c in candidates if normalize_name(c.name) == wanted), None)
    if chosen is None:
        raise ValidationFailure(
            f"'{recipe_name}' is not an available alternative for {slot.value}"
        )

    new_content = swap_resolver.swap_meal(content, schedule, day, slot, chosen)
    return store.update_plan(plan_id, {"content": dump_content(new_content)})


def add_recipe(
    store: PlanStore,
    plan_id: str,
    recipe: Recipe,
    day: int,
    slot: str | Slot,
) -> MealPlan:
    """Assign a recipe to (day, slot), replacing any recipe already there."""
    plan = store.get_plan(plan_id)
    validate_day(day, plan.duration)
    assignment = DatabaseRecipeAssignment(day=day, slot=parse_slot(slot), recipe=recipe)
    logger.info("Assigning recipe '%s' to day %d %s", recipe.title, day, assignment.slot.value)
    return store.upsert_assignment(plan_id, assignment)


def remove_recipe(store: PlanStore, plan_id: str, day: int, slot: str | Slot) -> MealPlan:
    slot = parse_slot(slot)
    validate_day(day)
    logger.info("Removing recipe at day %d %s from plan %s", day, slot.value, plan_id)
    return store.delete_assignment(plan_id, day, slot)


def duplicate_with_variation(
    store: PlanStore,
    plan_id: str,
    source: RecipeSuggestionSource,
    rng: random.Random | None = None,
    coach_id: str | None = None,
    config: dict | None = None,
) -> MealPlan:
    """Create a new plan with the source plan's targets and fresh recipes."""
    settings = deep_merge(DEFAULTS, config or {})["variation"]
    plan = store.get_plan(plan_id)
    if not plan.content:
        logger.warning("Plan %s has no content; the variation is built from its targets only", plan_id)

    draft = generate_variation(
        plan,
        source,
        rng=rng,
        include_snacks=settings["include_snacks"],
        title_suffix=settings["title_suffix"],
        coach_id=coach_id,
    )
    return store.create_plan(draft.to_record())


def create_generated_plan(
    store: PlanStore,
    request: GenerationRequest,
    source: RecipeSuggestionSource,
    rng: random.Random | None = None,
    coach_id: str | None = None,
) -> MealPlan:
    draft = generate_plan(request, source, rng=rng, coach_id=coach_id)
    return store.create_plan(draft.to_record())
