"""Slot-keyed alternative recipes used for swaps and generated plans."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import yaml

from meal_plan_engine.errors import ValidationFailure
from meal_plan_engine.models import Alternative, Macros, Slot
from meal_plan_engine.slots import parse_slot

logger = logging.getLogger(__name__)

# (name, calories, protein, carbs, fats)
DEFAULT_ALTERNATIVES: dict[str, list[tuple[str, int, int, int, int]]] = {
    "breakfast": [
        ("Greek Yogurt Parfait with Berries", 380, 22, 45, 12),
        ("Avocado Toast with Poached Eggs", 420, 18, 38, 24),
        ("Overnight Oats with Banana", 350, 14, 55, 10),
        ("Veggie Omelette with Whole Grain Toast", 400, 26, 32, 18),
        ("Smoothie Bowl with Granola", 390, 16, 52, 14),
        ("Cottage Cheese Pancakes", 360, 28, 36, 12),
        ("Breakfast Burrito Bowl", 450, 24, 42, 20),
    ],
    "lunch": [
        ("Grilled Chicken Salad", 520, 42, 28, 26),
        ("Quinoa Buddha Bowl", 480, 18, 62, 18),
        ("Turkey & Avocado Wrap", 540, 35, 45, 24),
        ("Mediterranean Grain Bowl", 510, 22, 58, 22),
        ("Asian Chicken Lettuce Wraps", 420, 38, 24, 20),
        ("Lentil Soup with Crusty Bread", 460, 24, 56, 14),
        ("Salmon Poke Bowl", 550, 36, 48, 24),
    ],
    "dinner": [
        ("Baked Salmon with Roasted Vegetables", 580, 45, 32, 28),
        ("Chicken Stir-Fry with Brown Rice", 620, 42, 58, 22),
        ("Lean Beef Tacos with Black Beans", 590, 38, 52, 24),
        ("Grilled Shrimp with Quinoa Pilaf", 540, 40, 48, 20),
        ("Turkey Meatballs with Zucchini Noodles", 480, 44, 28, 22),
        ("Herb-Crusted Cod with Sweet Potato", 520, 38, 45, 18),
        ("Chicken Tikka Masala with Cauliflower Rice", 560, 42, 36, 26),
    ],
    "snack": [
        ("Apple with Almond Butter", 220, 6, 28, 12),
        ("Greek Yogurt with Honey", 180, 15, 22, 4),
        ("Mixed Nuts & Dark Chocolate", 250, 8, 18, 18),
        ("Hummus with Veggie Sticks", 200, 8, 24, 10),
        ("Protein Energy Balls", 190, 10, 20, 8),
        ("Cheese & Whole Grain Crackers", 210, 12, 18, 12),
        ("Cottage Cheese with Pineapple", 170, 18, 16, 4),
    ],
}


class RecipeSuggestionSource(Protocol):
    def get_alternatives(self, slot: Slot) -> list[Alternative]: ...


class StaticSuggestionSource:
    """Suggestion source backed by a fixed table keyed by slot."""

    def __init__(self, pool: dict[Slot, list[Alternative]] | None = None):
        self.pool = pool if pool is not None else default_pool()

    def get_alternatives(self, slot: Slot) -> list[Alternative]:
        return list(self.pool.get(slot, []))

    @classmethod
    def from_config(cls, config: dict) -> StaticSuggestionSource:
        """Use the configured pool file if there is one, else the built-in table."""
        pool_file = config.get("suggestions", {}).get("pool_file")
        if pool_file:
            return cls(load_alternatives(Path(pool_file)))
        return cls()


def default_pool() -> dict[Slot, list[Alternative]]:
    return {
        Slot(slot): [
            Alternative(name=name, macros=Macros(cal, p, c, f))
            for name, cal, p, c, f in options
        ]
        for slot, options in DEFAULT_ALTERNATIVES.items()
    }


def parse_alternative(raw: object, slot: Slot) -> Alternative:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ValidationFailure(
            f"Alternative for {slot.value} needs a 'name' field: {raw!r}"
        )
    return Alternative(name=str(raw["name"]).strip(), macros=Macros.from_mapping(raw))


def load_alternatives(path: Path) -> dict[Slot, list[Alternative]]:
    """Load a slot-keyed alternatives pool from YAML.

    Expected layout:
      breakfast:
        - {name: Overnight Oats, calories: 350, protein: 14, carbs: 55, fats: 10}
      lunch: [...]
    Slots missing from the file get an empty pool.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValidationFailure(f"Alternatives file {path} must map slots to lists")

    pool: dict[Slot, list[Alternative]] = {slot: [] for slot in Slot}
    for key, options in data.items():
        slot = parse_slot(key)
        if not isinstance(options, list):
            raise ValidationFailure(f"Alternatives for {slot.value} must be a list")
        pool[slot].extend(parse_alternative(o, slot) for o in options)

    logger.info(
        "Loaded %d alternatives from %s",
        sum(len(v) for v in pool.values()), path,
    )
    return pool
