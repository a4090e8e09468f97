"""Plan persistence contract and reference stores.

Plans are kept as plain JSON-compatible records:

    {"id": "...", "coach_id": ..., "title": ..., "duration": 7,
     "goal_type": "WEIGHT_LOSS", "target_calories": 1800, ...,
     "is_system": false, "is_public": false,
     "created_at": "2026-01-01T00:00:00+00:00", "updated_at": ...,
     "content": {...},
     "recipes": [{"day": 1, "meal_slot": "dinner", "recipe": {"id": ..., ...}}]}

Every store call applies one whole-record change; there are no partial writes.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from meal_plan_engine.errors import PlanNotFound, ValidationFailure
from meal_plan_engine.models import (
    DatabaseRecipeAssignment,
    GoalType,
    MealPlan,
    Recipe,
    Slot,
)
from meal_plan_engine.slots import parse_slot

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "description",
    "duration",
    "goal_type",
    "target_calories",
    "target_protein",
    "target_carbs",
    "target_fats",
    "is_public",
    "content",
}

RECIPE_FIELDS = (
    "id", "title", "calories", "protein", "carbs", "fats",
    "prep_time", "cook_time", "category",
)


class PlanStore(Protocol):
    def get_plan(self, plan_id: str) -> MealPlan: ...

    def update_plan(self, plan_id: str, patch: dict) -> MealPlan: ...

    def create_plan(self, data: dict) -> MealPlan: ...

    def upsert_assignment(
        self, plan_id: str, assignment: DatabaseRecipeAssignment
    ) -> MealPlan: ...

    def delete_assignment(self, plan_id: str, day: int, slot: Slot) -> MealPlan: ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_time(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def recipe_from_record(raw: dict) -> Recipe:
    return Recipe(**{k: raw.get(k) for k in RECIPE_FIELDS})


def recipe_to_record(recipe: Recipe) -> dict:
    return {k: getattr(recipe, k) for k in RECIPE_FIELDS}


def assignment_to_record(assignment: DatabaseRecipeAssignment) -> dict:
    return {
        "day": assignment.day,
        "meal_slot": assignment.slot.value,
        "recipe": recipe_to_record(assignment.recipe),
    }


def plan_from_record(record: dict) -> MealPlan:
    goal = record.get("goal_type")
    return MealPlan(
        id=record["id"],
        title=record["title"],
        coach_id=record.get("coach_id"),
        description=record.get("description"),
        duration=record.get("duration"),
        goal_type=GoalType(goal) if goal else None,
        target_calories=record.get("target_calories"),
        target_protein=record.get("target_protein"),
        target_carbs=record.get("target_carbs"),
        target_fats=record.get("target_fats"),
        is_system=bool(record.get("is_system", False)),
        is_public=bool(record.get("is_public", False)),
        created_at=_parse_time(record.get("created_at")),
        updated_at=_parse_time(record.get("updated_at")),
        content=copy.deepcopy(record.get("content")),
        assignments=[
            DatabaseRecipeAssignment(
                day=r["day"],
                slot=parse_slot(r["meal_slot"]),
                recipe=recipe_from_record(r["recipe"]),
            )
            for r in record.get("recipes", [])
        ],
    )


def _normalize_patch(patch: dict) -> dict:
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationFailure(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    clean = copy.deepcopy(patch)
    if isinstance(clean.get("goal_type"), GoalType):
        clean["goal_type"] = clean["goal_type"].value
    return clean


class RecordStore:
    """Shared PlanStore behaviour over a record load/save pair."""

    def _load(self, plan_id: str) -> dict:
        raise NotImplementedError

    def _save(self, record: dict) -> None:
        raise NotImplementedError

    def get_plan(self, plan_id: str) -> MealPlan:
        return plan_from_record(self._load(plan_id))

    def get_record(self, plan_id: str) -> dict:
        return copy.deepcopy(self._load(plan_id))

    def update_plan(self, plan_id: str, patch: dict) -> MealPlan:
        record = self._load(plan_id)
        record.update(_normalize_patch(patch))
        record["updated_at"] = _now()
        self._save(record)
        logger.info("Updated plan %s (%s)", plan_id, ", ".join(sorted(patch)))
        return plan_from_record(record)

    def create_plan(self, data: dict) -> MealPlan:
        record = copy.deepcopy(data)
        if isinstance(record.get("goal_type"), GoalType):
            record["goal_type"] = record["goal_type"].value
        record.setdefault("id", uuid.uuid4().hex)
        record.setdefault("recipes", [])
        record["created_at"] = record["updated_at"] = _now()
        if not record.get("title"):
            raise ValidationFailure("A plan needs a title")
        self._save(record)
        logger.info("Created plan %s '%s'", record["id"], record["title"])
        return plan_from_record(record)

    def upsert_assignment(
        self, plan_id: str, assignment: DatabaseRecipeAssignment
    ) -> MealPlan:
        record = self._load(plan_id)
        rows = [
            r for r in record.get("recipes", [])
            if (r["day"], r["meal_slot"]) != (assignment.day, assignment.slot.value)
        ]
        rows.append(assignment_to_record(assignment))
        rows.sort(key=lambda r: (r["day"], r["meal_slot"]))
        record["recipes"] = rows
        record["updated_at"] = _now()
        self._save(record)
        return plan_from_record(record)

    def delete_assignment(self, plan_id: str, day: int, slot: Slot) -> MealPlan:
        record = self._load(plan_id)
        rows = record.get("recipes", [])
        kept = [r for r in rows if (r["day"], r["meal_slot"]) != (day, slot.value)]
        if len(kept) == len(rows):
            raise ValidationFailure(f"No recipe assigned at day {day} {slot.value}")
        record["recipes"] = kept
        record["updated_at"] = _now()
        self._save(record)
        return plan_from_record(record)


class MemoryPlanStore(RecordStore):
    """Keeps records in a dict; every read and write is a deep copy."""

    def __init__(self, records: list[dict] | None = None):
        self._records: dict[str, dict] = {}
        for r in records or []:
            self._records[r["id"]] = copy.deepcopy(r)

    def _load(self, plan_id: str) -> dict:
        if plan_id not in self._records:
            raise PlanNotFound(f"Meal plan not found: {plan_id}")
        return copy.deepcopy(self._records[plan_id])

    def _save(self, record: dict) -> None:
        self._records[record["id"]] = copy.deepcopy(record)


class JsonPlanStore(RecordStore):
    """One JSON document per plan in a directory, replaced atomically."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, plan_id: str) -> Path:
        if not plan_id or "/" in plan_id or "\\" in plan_id or plan_id.startswith("."):
            raise ValidationFailure(f"Invalid plan id: {plan_id!r}")
        return self.directory / f"{plan_id}.json"

    def _load(self, plan_id: str) -> dict:
        path = self.path_for(plan_id)
        if not path.exists():
            raise PlanNotFound(f"Meal plan not found: {plan_id}")
        with open(path) as f:
            return json.load(f)

    def _save(self, record: dict) -> None:
        path = self.path_for(record["id"])
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(record, f, indent=2)
            os.replace(tmp, path)
        except BaseException:
            os.unlink(tmp)
            raise
