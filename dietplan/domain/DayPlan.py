"""DayPlan: the four meal-category lists for one day key of a plan."""
from typing import Dict, List

from dietplan.domain.MealEntry import MealEntry
from dietplan.utilities.constants import MEAL_CATEGORIES


class DayPlan:
    def __init__(self, meals: Dict[str, List[MealEntry]] = None):
        meals = meals or {}
        # Invariant: every category present once the day exists
        self.meals: Dict[str, List[MealEntry]] = {
            category: list(meals.get(category) or []) for category in MEAL_CATEGORIES
        }

    @classmethod
    def empty(cls) -> "DayPlan":
        return cls()

    def total_meals(self) -> int:
        return sum(len(self.meals[category]) for category in MEAL_CATEGORIES)

    def __str__(self) -> str:
        counts = ", ".join(f"{c}: {len(self.meals[c])}" for c in MEAL_CATEGORIES)
        return f"DayPlan({counts})"

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, DayPlan):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def from_dict(data) -> "DayPlan":
        '''Malformed categories or entries degrade to empty lists instead of failing.'''
        d = data if isinstance(data, dict) else {}
        meals = {}
        for category in MEAL_CATEGORIES:
            raw = d.get(category)
            if not isinstance(raw, list):
                meals[category] = []
                continue
            entries = [MealEntry.from_dict(item) for item in raw]
            meals[category] = [e for e in entries if e is not None]
        return DayPlan(meals)

    def to_dict(self) -> dict:
        return {category: [meal.to_dict() for meal in self.meals[category]]
                for category in MEAL_CATEGORIES}
