import pytest
from meal_plan_engine.adapter import (
    FALLBACK_CALORIES,
    adapt_content,
    needs_rescale,
    rescale_content,
    scale_factor,
)
from meal_plan_engine.content import parse_content
from meal_plan_engine.errors import UnsupportedPlanShape, ValidationFailure
from meal_plan_engine.models import Macros, Targets, round_half_up

OLD = Targets(1800, 113, 203, 60)


class TestScaleFactor:
    def test_ratio(self):
        assert scale_factor(1800, 2700) == 1.5

    def test_fallback_when_old_unset(self):
        assert FALLBACK_CALORIES == 1800
        assert scale_factor(None, 900) == 0.5

    def test_new_target_required(self):
        with pytest.raises(ValidationFailure, match="calorie target"):
            scale_factor(1800, None)

    def test_new_target_positive(self):
        with pytest.raises(ValidationFailure):
            scale_factor(1800, 0)


class TestConcreteScenario:
    def test_1800_to_2400(self, scenario_content):
        result = adapt_content(
            parse_content(scenario_content), OLD, Targets(2400, 113, 203, 60),
        )
        assert result.rescaled is True
        assert result.scale_factor == pytest.approx(4 / 3)

        breakfast, lunch = result.content.days[0].meals
        assert breakfast.macros == Macros(560, 37, 64, 19)
        assert lunch.macros == Macros(640, 51, 29, 37)
        assert result.content.days[0].totals == Macros(1200, 88, 93, 56)


class TestLinearity:
    def test_each_value_rounded_per_entry(self, two_day_content):
        content = parse_content(two_day_content)
        k = 2100 / 1800
        rescaled = rescale_content(content, k)
        for old_day, new_day in zip(content.days, rescaled.days):
            for old, new in zip(old_day.meals, new_day.meals):
                assert new.macros == Macros(
                    round_half_up(old.macros.calories * k),
                    round_half_up(old.macros.protein * k),
                    round_half_up(old.macros.carbs * k),
                    round_half_up(old.macros.fats * k),
                )

    def test_day_total_is_sum_of_rounded_entries(self):
        content = parse_content({"days": [{"day": 1, "meals": [
            {"slot": "breakfast", "recipeName": "A", "calories": 100,
             "protein": 1, "carbs": 1, "fats": 1},
            {"slot": "snack", "recipeName": "B", "calories": 100,
             "protein": 1, "carbs": 1, "fats": 1},
        ]}]})
        rescaled = rescale_content(content, 1.5)
        # 1 * 1.5 rounds to 2 per entry; round(2 * 1.5) would be 3
        assert rescaled.days[0].totals == Macros(300, 4, 4, 4)

    def test_input_not_mutated(self, two_day_content):
        content = parse_content(two_day_content)
        rescale_content(content, 2)
        assert content.days[0].meals[0].macros == Macros(350, 14, 55, 10)


class TestNoOp:
    def test_unchanged_targets(self, two_day_content):
        content = parse_content(two_day_content)
        result = adapt_content(content, OLD, OLD)
        assert result.rescaled is False
        assert result.content is content

    def test_same_calories_other_macro_changed(self, two_day_content):
        content = parse_content(two_day_content)
        result = adapt_content(content, OLD, Targets(1800, 150, 203, 60))
        assert result.rescaled is False
        assert result.content is content

    def test_unset_old_equal_to_fallback(self, two_day_content):
        content = parse_content(two_day_content)
        result = adapt_content(content, Targets(), Targets(1800))
        assert result.rescaled is False

    def test_no_new_calorie_target(self, two_day_content):
        content = parse_content(two_day_content)
        result = adapt_content(content, Targets(), Targets(None, 150))
        assert result.rescaled is False

    def test_no_ai_content(self):
        content = parse_content({"dietType": "keto"})
        result = adapt_content(content, OLD, Targets(2400))
        assert result.rescaled is False
        assert result.content is content


class TestFallback:
    def test_unset_old_target_uses_1800(self, scenario_content):
        result = adapt_content(parse_content(scenario_content), Targets(), Targets(2700))
        assert result.rescaled is True
        assert result.scale_factor == 1.5
        assert result.content.days[0].meals[0].macros == Macros(630, 42, 72, 21)


class TestRescaleErrors:
    def test_content_without_days(self):
        with pytest.raises(UnsupportedPlanShape):
            rescale_content(parse_content(None), 1.5)

    def test_non_positive_factor(self, scenario_content):
        with pytest.raises(ValidationFailure, match="positive"):
            rescale_content(parse_content(scenario_content), 0)


class TestNeedsRescale:
    def test_calorie_change(self):
        assert needs_rescale(OLD, Targets(2000, 113, 203, 60)) is True

    def test_macro_only_change(self):
        assert needs_rescale(OLD, Targets(1800, 140, 203, 60)) is False

    def test_fallback_equal(self):
        assert needs_rescale(Targets(), Targets(1800)) is False

    def test_no_calorie_target(self):
        assert needs_rescale(OLD, Targets(None, 140)) is False
