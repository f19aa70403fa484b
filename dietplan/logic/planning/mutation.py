"""Plan mutation: add or remove meal entries in one day/category slot.

Both operations are copy-on-write. The plan passed in is never modified and
the completion ledger is never touched; persisting the returned plan is the
caller's job.
"""
import copy
import logging
from uuid import uuid4

from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.DietPlan import DietPlan
from dietplan.domain.MealEntry import MealEntry
from dietplan.domain.errors import InvalidInputError
from dietplan.utilities.validators import (
    validate_category, validate_day_key, validate_identifier, validate_meal_entry
)

logger = logging.getLogger(__name__)


def new_meal_id() -> str:
    return uuid4().hex


def add_meal_to_slot(plan: DietPlan, day_key: str, category: str, meal: MealEntry) -> DietPlan:
    """Return a copy of plan with meal appended to weekly_plan[day_key][category].

    A day the plan does not have yet is created with all four categories empty.
    Raises InvalidInputError for an unknown day or category, an invalid meal,
    or a meal id already used anywhere in the plan.
    """
    validate_day_key(day_key)
    validate_category(category)
    if not isinstance(meal, MealEntry):
        raise InvalidInputError(f"Expected a MealEntry, got {type(meal).__name__}")
    validate_meal_entry(meal)
    if meal.id in plan.meal_ids():
        raise InvalidInputError(f"Meal id {meal.id!r} is already used in plan {plan.id}")

    updated = copy.deepcopy(plan)
    day_plan = updated.weekly_plan.get(day_key)
    if day_plan is None:
        logger.debug(f"Plan {plan.id} has no {day_key}; creating an empty day")
        day_plan = DayPlan.empty()
        updated.weekly_plan[day_key] = day_plan
    day_plan.meals[category].append(copy.deepcopy(meal))
    return updated


def remove_meal_from_slot(plan: DietPlan, day_key: str, category: str, meal_id: str) -> DietPlan:
    """Return a copy of plan without the entries of that slot whose id is meal_id.

    An absent day or an unknown id leaves the copy equal to the original.
    """
    validate_day_key(day_key)
    validate_category(category)
    validate_identifier(meal_id, 'meal id')

    updated = copy.deepcopy(plan)
    day_plan = updated.weekly_plan.get(day_key)
    if day_plan is None:
        return updated
    day_plan.meals[category] = [m for m in day_plan.meals[category] if m.id != meal_id]
    return updated


__all__ = ['add_meal_to_slot', 'remove_meal_from_slot', 'new_meal_id']
