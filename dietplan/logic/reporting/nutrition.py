"""Nutrition aggregation over a diet plan's days.

Planned totals come from every meal of a day; consumed totals only from the
meals the completion ledger marks done on that date.
"""
from collections import defaultdict
from typing import Dict, Iterable, Optional

from dietplan.domain.CompletionRecord import CompletionRecord
from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.DietPlan import DietPlan, day_plan_for, meals_of
from dietplan.utilities.constants import DAY_KEYS, MEAL_CATEGORIES, NUTRIENT_FIELDS


def _zero_totals() -> Dict[str, float]:
    return {field: 0 for field in NUTRIENT_FIELDS}


def _add_meal(totals: Dict[str, float], meal) -> None:
    for field, value in meal.nutrients().items():
        totals[field] += value or 0


def compute_day_totals(day_plan: Optional[DayPlan]) -> Dict[str, float]:
    totals = _zero_totals()
    for category in MEAL_CATEGORIES:
        for meal in meals_of(day_plan, category):
            _add_meal(totals, meal)
    return totals


def compute_consumed_totals(day_plan: Optional[DayPlan],
                            completions: Iterable[CompletionRecord]) -> Dict[str, float]:
    """Totals of the completed meals still present in the day plan."""
    done = {(r.meal_type, r.meal_id) for r in completions or () if r.is_completed}
    totals = _zero_totals()
    for category in MEAL_CATEGORIES:
        for meal in meals_of(day_plan, category):
            if (category, meal.id) in done:
                _add_meal(totals, meal)
    return totals


def daily_targets(plan: Optional[DietPlan]) -> Dict[str, float]:
    if plan is None:
        return _zero_totals()
    return plan.targets()


def compute_week_nutrition(plan: Optional[DietPlan]) -> dict:
    """Aggregate nutrition for the plan's week.

    Returns structure:
    {
      'days': {
         'monday': {'calories': kcal, 'protein': g, 'carbs': g, 'fat': g,
                    'meals': {'breakfast': [{'id': str, 'name': str, 'calories': kcal, ...}], ...}},
         ...
      },
      'week_totals': {'calories': kcal, 'protein': g, 'carbs': g, 'fat': g},
      'targets': {'calories': kcal, 'protein': g, 'carbs': g, 'fat': g}
    }
    Days the plan does not have are left out of 'days'.
    """
    if plan is None or not getattr(plan, 'weekly_plan', None):
        return {'days': {}, 'week_totals': _zero_totals(), 'targets': daily_targets(plan)}

    days_result = {}
    totals = defaultdict(int)
    for day_key in DAY_KEYS:
        day_plan = day_plan_for(plan, day_key)
        if day_plan is None:
            continue
        day_totals = compute_day_totals(day_plan)
        days_result[day_key] = {
            **day_totals,
            'meals': {
                category: [{'id': m.id, 'name': m.name, **m.nutrients()}
                           for m in meals_of(day_plan, category)]
                for category in MEAL_CATEGORIES
            },
        }
        for field in NUTRIENT_FIELDS:
            totals[field] += day_totals[field]

    return {
        'days': days_result,
        'week_totals': {field: totals[field] for field in NUTRIENT_FIELDS},
        'targets': daily_targets(plan),
    }


__all__ = ["compute_day_totals", "compute_consumed_totals", "daily_targets", "compute_week_nutrition"]
