import pytest
from meal_plan_engine.content import dump_content, has_ai_content, parse_content
from meal_plan_engine.errors import UnsupportedPlanShape
from meal_plan_engine.models import Macros, Slot


class TestParseContent:
    def test_none(self):
        content = parse_content(None)
        assert content.days is None
        assert not has_ai_content(content)

    def test_dict_without_days_keeps_tags(self):
        content = parse_content({"dietType": "vegan", "nutritionalFocus": ["high-iron"]})
        assert content.days is None
        assert content.diet_type == "vegan"
        assert content.nutritional_focus == ["high-iron"]

    def test_legacy_list_shape(self):
        legacy = [{"day": 1, "breakfast": "High Protein Breakfast Bowl"}]
        assert parse_content(legacy).days is None

    def test_empty_days_is_not_ai_content(self):
        content = parse_content({"days": []})
        assert content.days == []
        assert not has_ai_content(content)

    def test_meals_parsed(self, two_day_content):
        content = parse_content(two_day_content)
        assert [d.day for d in content.days] == [1, 2]
        first = content.days[0].meals[0]
        assert first.slot == Slot.BREAKFAST
        assert first.recipe_name == "Overnight Oats with Banana"
        assert first.macros == Macros(350, 14, 55, 10)
        assert first.source == "ai"

    def test_missing_macros_default_to_zero(self):
        content = parse_content({"days": [{"day": 1, "meals": [
            {"slot": "snack", "recipeName": "Apple", "calories": 95},
        ]}]})
        assert content.days[0].meals[0].macros == Macros(95, 0, 0, 0)
        assert content.days[0].totals == Macros(95, 0, 0, 0)

    def test_name_fallback(self):
        content = parse_content({"days": [{"day": 1, "meals": [
            {"slot": "lunch", "name": "Soup"},
        ]}]})
        assert content.days[0].meals[0].recipe_name == "Soup"

    def test_unknown_slot(self):
        with pytest.raises(UnsupportedPlanShape, match="Unknown meal slot"):
            parse_content({"days": [{"day": 1, "meals": [{"slot": "brunch"}]}]})

    def test_day_without_number(self):
        with pytest.raises(UnsupportedPlanShape, match="integer 'day'"):
            parse_content({"days": [{"meals": []}]})

    def test_not_an_object(self):
        with pytest.raises(UnsupportedPlanShape):
            parse_content("days")


class TestDumpContent:
    def test_stale_totals_rederived(self, scenario_content):
        scenario_content["days"][0]["totals"] = {"calories": 1, "protein": 1,
                                                 "carbs": 1, "fats": 1}
        data = dump_content(parse_content(scenario_content))
        assert data["days"][0]["totals"] == {
            "calories": 900, "protein": 66, "carbs": 70, "fats": 42,
        }

    def test_unknown_keys_preserved(self, scenario_content):
        scenario_content["generatorVersion"] = "demo-2"
        data = dump_content(parse_content(scenario_content))
        assert data["generatorVersion"] == "demo-2"

    def test_day_and_meal_keys_preserved(self, two_day_content):
        two_day_content["days"][1]["notes"] = "rest day"
        two_day_content["days"][1]["meals"][0]["ingredients"] = ["2 eggs", "1 slice rye"]
        content = parse_content(two_day_content)
        assert content.days[1].extra == {"notes": "rest day"}
        assert content.days[1].meals[0].extra == {"ingredients": ["2 eggs", "1 slice rye"]}
        assert dump_content(content) == two_day_content

    def test_stored_shape(self, two_day_content):
        assert dump_content(parse_content(two_day_content)) == two_day_content

    def test_no_days_key_when_absent(self):
        data = dump_content(parse_content({"dietType": "keto"}))
        assert "days" not in data
        assert data["dietType"] == "keto"
