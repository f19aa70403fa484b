"""DietPlan aggregate root: owner, goal, daily macro targets and the weekly schedule.

The weekly schedule is sparse. A day key missing from weekly_plan means
"no plan for this day", which is not the same as a DayPlan with zero meals.
"""
from typing import Dict, List, Optional, Set

from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.MealEntry import MealEntry
from dietplan.utilities.constants import DAY_KEYS, MEAL_CATEGORIES


def _as_number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class DietPlan:
    def __init__(self, id: str = "", user_id: str = "", name: str = "", goal: str = "maintenance",
                 daily_calories: float = 0, daily_protein: float = 0, daily_carbs: float = 0,
                 daily_fat: float = 0, weekly_plan: Optional[Dict[str, DayPlan]] = None,
                 is_active: bool = False, created_at: Optional[str] = None,
                 updated_at: Optional[str] = None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.goal = goal
        self.daily_calories = daily_calories
        self.daily_protein = daily_protein
        self.daily_carbs = daily_carbs
        self.daily_fat = daily_fat
        self.weekly_plan: Dict[str, DayPlan] = dict(weekly_plan) if weekly_plan else {}
        self.is_active = is_active
        self.created_at = created_at
        self.updated_at = updated_at

    def __str__(self) -> str:
        days = ", ".join(k for k in DAY_KEYS if k in self.weekly_plan) or "no days"
        return f"{self.name} [{self.id}] - goal: {self.goal} - active: {self.is_active} - days: {days}"

    __repr__ = __str__

    def targets(self) -> dict:
        return {
            'calories': self.daily_calories,
            'protein': self.daily_protein,
            'carbs': self.daily_carbs,
            'fat': self.daily_fat,
        }

    def meal_ids(self) -> Set[str]:
        """Ids of every meal in every day and category of the plan."""
        return {meal.id for day in self.weekly_plan.values()
                for category in MEAL_CATEGORIES for meal in day.meals.get(category, [])}

    @staticmethod
    def from_dict(data) -> "DietPlan":
        '''Creates a DietPlan from stored data. Unknown day keys and malformed days are dropped.'''
        d = data if isinstance(data, dict) else {}
        raw_week = d.get('weekly_plan')
        weekly_plan = {}
        if isinstance(raw_week, dict):
            for day_key, raw_day in raw_week.items():
                if day_key in DAY_KEYS and isinstance(raw_day, dict):
                    weekly_plan[day_key] = DayPlan.from_dict(raw_day)
        return DietPlan(
            id=str(d.get('id') or ''),
            user_id=str(d.get('user_id') or ''),
            name=str(d.get('name') or ''),
            goal=str(d.get('goal') or 'maintenance'),
            daily_calories=_as_number(d.get('daily_calories')),
            daily_protein=_as_number(d.get('daily_protein')),
            daily_carbs=_as_number(d.get('daily_carbs')),
            daily_fat=_as_number(d.get('daily_fat')),
            weekly_plan=weekly_plan,
            is_active=bool(d.get('is_active', False)),
            created_at=d.get('created_at'),
            updated_at=d.get('updated_at'),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "goal": self.goal,
            "daily_calories": self.daily_calories,
            "daily_protein": self.daily_protein,
            "daily_carbs": self.daily_carbs,
            "daily_fat": self.daily_fat,
            "weekly_plan": {k: self.weekly_plan[k].to_dict() for k in DAY_KEYS if k in self.weekly_plan},
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def day_plan_for(plan: Optional[DietPlan], day_key: str) -> Optional[DayPlan]:
    """Return the DayPlan for day_key, or None when the plan has no entry for it."""
    if plan is None or not isinstance(getattr(plan, 'weekly_plan', None), dict):
        return None
    day = plan.weekly_plan.get(day_key)
    return day if isinstance(day, DayPlan) else None


def meals_of(day_plan: Optional[DayPlan], category: str) -> List[MealEntry]:
    """Meals of one category; empty for an absent day or an unknown/malformed category."""
    if day_plan is None or category not in MEAL_CATEGORIES:
        return []
    meals = day_plan.meals.get(category) if isinstance(day_plan.meals, dict) else None
    if not isinstance(meals, list):
        return []
    return [m for m in meals if isinstance(m, MealEntry)]


__all__ = ['DietPlan', 'day_plan_for', 'meals_of']
