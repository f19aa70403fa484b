import unittest

from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.DietPlan import DietPlan, day_plan_for, meals_of
from dietplan.domain.MealEntry import MealEntry
from dietplan.utilities.constants import MEAL_CATEGORIES

from dietplan.tests.plan_fixtures import sample_plan_dict


class TestPlanModel(unittest.TestCase):
    def setUp(self):
        self.plan = DietPlan.from_dict(sample_plan_dict())

    def test_day_plan_for_present_and_absent(self):
        monday = day_plan_for(self.plan, "monday")
        self.assertIsInstance(monday, DayPlan)
        self.assertEqual(monday.total_meals(), 3)
        self.assertIsNone(day_plan_for(self.plan, "tuesday"))
        self.assertIsNone(day_plan_for(None, "monday"))

    def test_meals_of_keeps_insertion_order(self):
        monday = day_plan_for(self.plan, "monday")
        self.assertEqual([m.id for m in meals_of(monday, "lunch")], ["B", "C"])
        self.assertEqual(meals_of(monday, "dinner"), [])
        self.assertEqual(meals_of(None, "lunch"), [])
        self.assertEqual(meals_of(monday, "brunch"), [])

    def test_nutrient_aliases(self):
        oats = meals_of(day_plan_for(self.plan, "monday"), "breakfast")[0]
        self.assertEqual(oats.carbs, 58)
        self.assertEqual(oats.fat, 8)

    def test_malformed_input_degrades_to_empty(self):
        raw = sample_plan_dict()
        raw["weekly_plan"]["tuesday"] = {"breakfast": "not a list", "lunch": [42, None]}
        raw["weekly_plan"]["funday"] = {"breakfast": []}
        raw["weekly_plan"]["wednesday"] = "garbage"
        plan = DietPlan.from_dict(raw)

        tuesday = day_plan_for(plan, "tuesday")
        self.assertIsNotNone(tuesday)
        self.assertEqual(tuesday.total_meals(), 0)
        self.assertEqual(set(tuesday.meals), set(MEAL_CATEGORIES))
        self.assertIsNone(day_plan_for(plan, "wednesday"))
        self.assertNotIn("funday", plan.weekly_plan)

    def test_from_dict_tolerates_non_dict(self):
        plan = DietPlan.from_dict(None)
        self.assertEqual(plan.weekly_plan, {})
        self.assertIsNone(day_plan_for(plan, "monday"))

    def test_empty_day_is_distinct_from_absent_day(self):
        raw = sample_plan_dict()
        raw["weekly_plan"]["friday"] = {}
        plan = DietPlan.from_dict(raw)
        self.assertIsNotNone(day_plan_for(plan, "friday"))
        self.assertEqual(day_plan_for(plan, "friday").total_meals(), 0)

    def test_to_dict_round_trip(self):
        again = DietPlan.from_dict(self.plan.to_dict())
        self.assertEqual(again.to_dict(), self.plan.to_dict())
        self.assertEqual(list(again.to_dict()["weekly_plan"]), ["monday"])

    def test_meal_entry_from_dict_rejects_non_dict(self):
        self.assertIsNone(MealEntry.from_dict("Oats"))


if __name__ == '__main__':
    unittest.main()
