"""Shared data models for the meal plan engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Union

MACRO_FIELDS = ("calories", "protein", "carbs", "fats")


class Slot(Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class GoalType(Enum):
    WEIGHT_LOSS = "WEIGHT_LOSS"
    WEIGHT_GAIN = "WEIGHT_GAIN"
    MAINTAIN_WEIGHT = "MAINTAIN_WEIGHT"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def _number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


@dataclass(frozen=True)
class Macros:
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0

    @classmethod
    def zero(cls) -> Macros:
        return cls()

    @classmethod
    def from_mapping(cls, data: dict | None) -> Macros:
        """Read the four macro keys, treating missing or null values as 0."""
        if not data:
            return cls()
        return cls(*(_number(data.get(name)) for name in MACRO_FIELDS))

    def __add__(self, other: Macros) -> Macros:
        return Macros(
            self.calories + other.calories,
            self.protein + other.protein,
            self.carbs + other.carbs,
            self.fats + other.fats,
        )

    def scaled(self, factor: float) -> Macros:
        """Multiply every field by factor, rounding each one independently."""
        return Macros(
            round_half_up(self.calories * factor),
            round_half_up(self.protein * factor),
            round_half_up(self.carbs * factor),
            round_half_up(self.fats * factor),
        )

    def to_dict(self) -> dict:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


def sum_macros(items) -> Macros:
    total = Macros.zero()
    for m in items:
        total = total + m
    return total


@dataclass(frozen=True)
class Targets:
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None

    def as_tuple(self) -> tuple:
        return (self.calories, self.protein, self.carbs, self.fats)


@dataclass
class Recipe:
    id: str
    title: str
    # Nutrition per serving, nullable on the recipe row
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    category: str | None = None

    @property
    def macros(self) -> Macros:
        return Macros(
            self.calories or 0,
            self.protein or 0,
            self.carbs or 0,
            self.fats or 0,
        )


@dataclass
class DatabaseRecipeAssignment:
    day: int  # 1-indexed day of the plan
    slot: Slot
    recipe: Recipe


@dataclass(frozen=True)
class AiMeal:
    slot: Slot
    recipe_name: str
    macros: Macros
    source: Literal["ai"] = "ai"
    # Stored keys the engine does not interpret, written back untouched
    extra: dict = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class DbMeal:
    recipe_id: str
    recipe_name: str
    macros: Macros
    prep_time: int | None = None
    cook_time: int | None = None
    source: Literal["database"] = "database"


MergedMealEntry = Union[DbMeal, AiMeal]


@dataclass
class AiDay:
    day: int
    meals: list[AiMeal] = field(default_factory=list)
    totals: Macros = field(default_factory=Macros)
    extra: dict = field(default_factory=dict)


@dataclass
class PlanContent:
    """Typed view of a plan's AI-authored content blob."""
    days: list[AiDay] | None = None
    diet_type: str | None = None
    dietary_restrictions: list[str] = field(default_factory=list)
    nutritional_focus: list[str] = field(default_factory=list)
    exclude_ingredients: list[str] = field(default_factory=list)
    # Unknown top-level keys, written back untouched
    extra: dict = field(default_factory=dict)

    def day(self, day: int) -> AiDay | None:
        for d in self.days or []:
            if d.day == day:
                return d
        return None


@dataclass(frozen=True)
class Alternative:
    name: str
    macros: Macros


@dataclass
class MealPlan:
    id: str
    title: str
    coach_id: str | None = None
    description: str | None = None
    duration: int | None = None
    goal_type: GoalType | None = None
    target_calories: float | None = None
    target_protein: float | None = None
    target_carbs: float | None = None
    target_fats: float | None = None
    is_system: bool = False
    is_public: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    content: dict | list | None = None
    assignments: list[DatabaseRecipeAssignment] = field(default_factory=list)

    def targets(self) -> Targets:
        return Targets(
            self.target_calories,
            self.target_protein,
            self.target_carbs,
            self.target_fats,
        )
