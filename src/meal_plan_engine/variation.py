"""Generate fresh AI-authored schedules: new plans and plan variations."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from meal_plan_engine.content import dump_content, parse_content
from meal_plan_engine.errors import ValidationFailure
from meal_plan_engine.models import (
    AiDay,
    AiMeal,
    GoalType,
    MealPlan,
    PlanContent,
    Slot,
    Targets,
    round_half_up,
    sum_macros,
)
from meal_plan_engine.slots import SLOT_ORDER
from meal_plan_engine.suggestions import RecipeSuggestionSource

logger = logging.getLogger(__name__)

DEFAULT_CALORIES = 1800
DEFAULT_DURATION = 7
DEFAULT_TITLE_SUFFIX = " (Variation)"

# macro -> (share of calories, kcal per gram)
MACRO_SPLIT = {
    "protein": (0.25, 4),
    "carbs": (0.45, 4),
    "fats": (0.30, 9),
}

GOAL_LABELS = {
    "WEIGHT_LOSS": "Weight Loss",
    "WEIGHT_GAIN": "Weight Gain",
    "MAINTAIN_WEIGHT": "Maintenance",
    "MUSCLE_BUILDING": "Muscle Building",
    "ATHLETIC_PERFORMANCE": "Athletic Performance",
}

# Generation offers more goals than a plan can store; map to the closest
GOAL_STORAGE_MAP = {
    "WEIGHT_LOSS": GoalType.WEIGHT_LOSS,
    "WEIGHT_GAIN": GoalType.WEIGHT_GAIN,
    "MAINTAIN_WEIGHT": GoalType.MAINTAIN_WEIGHT,
    "MUSCLE_BUILDING": GoalType.WEIGHT_GAIN,
    "ATHLETIC_PERFORMANCE": GoalType.MAINTAIN_WEIGHT,
}

DIET_LABELS = {
    "standard": "",
    "vegetarian": "Vegetarian ",
    "vegan": "Vegan ",
    "pescatarian": "Pescatarian ",
    "keto": "Keto ",
    "paleo": "Paleo ",
    "mediterranean": "Mediterranean ",
    "low-carb": "Low-Carb ",
    "high-protein": "High-Protein ",
}


@dataclass
class PlanDraft:
    """A plan ready to be created; never an update of an existing plan."""
    title: str
    targets: Targets
    duration: int
    content: PlanContent
    description: str | None = None
    goal_type: GoalType | None = None
    coach_id: str | None = None
    is_system: bool = False
    is_public: bool = False

    def to_record(self) -> dict:
        return {
            "coach_id": self.coach_id,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "goal_type": self.goal_type.value if self.goal_type else None,
            "target_calories": self.targets.calories,
            "target_protein": self.targets.protein,
            "target_carbs": self.targets.carbs,
            "target_fats": self.targets.fats,
            "is_system": self.is_system,
            "is_public": self.is_public,
            "content": dump_content(self.content),
        }


@dataclass
class GenerationRequest:
    daily_calories: int | None = None
    plan_name: str | None = None
    duration: int = DEFAULT_DURATION
    goal_type: str | None = None
    diet_type: str = "standard"
    dietary_restrictions: list[str] = field(default_factory=list)
    nutritional_focus: list[str] = field(default_factory=list)
    exclude_ingredients: list[str] = field(default_factory=list)
    daily_protein: int | None = None
    daily_carbs: int | None = None
    daily_fats: int | None = None
    include_snacks: bool = True


def split_macro(calories: float, macro: str) -> int:
    share, kcal_per_gram = MACRO_SPLIT[macro]
    return round_half_up(calories * share / kcal_per_gram)


def resolve_targets(targets: Targets) -> Targets:
    """Fill absent targets with the default calories and macro split."""
    calories = targets.calories or DEFAULT_CALORIES
    return Targets(
        calories=calories,
        protein=targets.protein or split_macro(calories, "protein"),
        carbs=targets.carbs or split_macro(calories, "carbs"),
        fats=targets.fats or split_macro(calories, "fats"),
    )


def build_days(
    num_days: int,
    slots: list[Slot],
    source: RecipeSuggestionSource,
    rng: random.Random,
) -> list[AiDay]:
    """Pick one alternative per slot per day, uniformly at random.

    Repeats across days are allowed.
    """
    if num_days < 1:
        raise ValidationFailure(f"Duration must be at least 1 day, got {num_days}")

    pools = {slot: source.get_alternatives(slot) for slot in slots}
    for slot, pool in pools.items():
        if not pool:
            raise ValidationFailure(f"No alternatives available for {slot.value}")

    days = []
    for day in range(1, num_days + 1):
        meals = []
        for slot in slots:
            pick = rng.choice(pools[slot])
            meals.append(AiMeal(slot=slot, recipe_name=pick.name, macros=pick.macros))
        days.append(AiDay(day=day, meals=meals, totals=sum_macros(m.macros for m in meals)))
    return days


def generation_slots(include_snacks: bool) -> list[Slot]:
    if include_snacks:
        return list(SLOT_ORDER)
    return [s for s in SLOT_ORDER if s != Slot.SNACK]


def generate_variation(
    plan: MealPlan,
    source: RecipeSuggestionSource,
    rng: random.Random | None = None,
    include_snacks: bool = True,
    title_suffix: str = DEFAULT_TITLE_SUFFIX,
    coach_id: str | None = None,
) -> PlanDraft:
    """Draft a new plan with the same targets and freshly picked recipes.

    The source plan is only read. Its descriptive tags carry over; its
    database recipe assignments do not.
    """
    rng = rng or random.Random()
    targets = resolve_targets(plan.targets())
    duration = plan.duration or DEFAULT_DURATION

    source_content = parse_content(plan.content)
    content = PlanContent(
        days=build_days(duration, generation_slots(include_snacks), source, rng),
        diet_type=source_content.diet_type,
        dietary_restrictions=list(source_content.dietary_restrictions),
        nutritional_focus=list(source_content.nutritional_focus),
        exclude_ingredients=list(source_content.exclude_ingredients),
    )

    logger.info(
        "Generated %d-day variation of plan %s at %s kcal",
        duration, plan.id, targets.calories,
    )
    return PlanDraft(
        title=f"{plan.title}{title_suffix}",
        description=plan.description,
        duration=duration,
        goal_type=plan.goal_type,
        targets=targets,
        content=content,
        coach_id=coach_id if coach_id is not None else plan.coach_id,
    )


def plan_title(request: GenerationRequest) -> str:
    if request.plan_name:
        return request.plan_name
    diet = DIET_LABELS.get(request.diet_type, "")
    goal = GOAL_LABELS.get(request.goal_type or "", "Balanced")
    return f"{request.duration}-Day {diet}{goal} Plan"


def plan_description(request: GenerationRequest) -> str:
    text = f"A personalized {request.duration}-day meal plan"
    if request.goal_type in GOAL_LABELS:
        text += f" designed for {GOAL_LABELS[request.goal_type].lower()}"
    if request.diet_type != "standard":
        diet = DIET_LABELS.get(request.diet_type, request.diet_type).lower().strip()
        text += f", following a {diet} diet"
    return text + "."


def generate_plan(
    request: GenerationRequest,
    source: RecipeSuggestionSource,
    rng: random.Random | None = None,
    coach_id: str | None = None,
) -> PlanDraft:
    """Draft a brand-new plan from a generation request."""
    if not request.daily_calories or request.daily_calories <= 0:
        raise ValidationFailure("Please specify a daily calorie target")

    if request.goal_type is not None and request.goal_type not in GOAL_STORAGE_MAP:
        valid = ", ".join(GOAL_STORAGE_MAP)
        raise ValidationFailure(f"Unknown goal type '{request.goal_type}'. Valid: {valid}")

    rng = rng or random.Random()
    targets = resolve_targets(Targets(
        request.daily_calories,
        request.daily_protein,
        request.daily_carbs,
        request.daily_fats,
    ))
    content = PlanContent(
        days=build_days(request.duration, generation_slots(request.include_snacks), source, rng),
        diet_type=request.diet_type,
        dietary_restrictions=list(request.dietary_restrictions),
        nutritional_focus=list(request.nutritional_focus),
        exclude_ingredients=list(request.exclude_ingredients),
    )

    return PlanDraft(
        title=plan_title(request),
        description=plan_description(request),
        duration=request.duration,
        goal_type=GOAL_STORAGE_MAP.get(request.goal_type) if request.goal_type else None,
        targets=targets,
        content=content,
        coach_id=coach_id,
    )
