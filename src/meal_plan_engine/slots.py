"""Slot calendar: day/slot coordinates, parsing, and validation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from meal_plan_engine.errors import ValidationFailure
from meal_plan_engine.models import Slot

SLOT_ORDER = list(Slot)

# Older content blobs keyed snacks in the plural
SLOT_ALIASES = {
    "snacks": Slot.SNACK,
}


def parse_slot(raw: str | Slot) -> Slot:
    """Parse a slot name, case-insensitive, accepting known aliases."""
    if isinstance(raw, Slot):
        return raw
    if not isinstance(raw, str):
        raise ValidationFailure(f"Meal slot must be a string, got {raw!r}")

    key = raw.strip().lower()
    if key in SLOT_ALIASES:
        return SLOT_ALIASES[key]
    try:
        return Slot(key)
    except ValueError:
        valid = ", ".join(s.value for s in Slot)
        raise ValidationFailure(f"Unknown meal slot '{raw}'. Valid: {valid}")


def slot_sort_key(slot: Slot) -> int:
    return SLOT_ORDER.index(slot)


def validate_day(day: int, duration: int | None = None) -> int:
    """Check a 1-indexed day against the plan duration, returning it."""
    if isinstance(day, bool) or not isinstance(day, int):
        raise ValidationFailure(f"Day must be an integer, got {day!r}")
    if day < 1:
        raise ValidationFailure(f"Day {day} is out of range; days start at 1")
    if duration is not None and day > duration:
        raise ValidationFailure(
            f"Day {day} is out of range for a {duration}-day plan"
        )
    return day


def coordinates(
    num_days: int,
    slots: Iterable[Slot] | None = None,
) -> Iterator[tuple[int, Slot]]:
    """Yield every (day, slot) pair in calendar order."""
    slot_list = sorted(slots, key=slot_sort_key) if slots is not None else SLOT_ORDER
    for day in range(1, num_days + 1):
        for slot in slot_list:
            yield day, slot
