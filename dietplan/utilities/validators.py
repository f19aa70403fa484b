"""
Input validation schemas using Pydantic, plus the guards the core runs
before it touches a plan or the completion ledger.
"""
import re
from datetime import date
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from dietplan.domain.errors import InvalidInputError
from dietplan.utilities.constants import (
    DAY_KEYS, MEAL_CATEGORIES, PLAN_GOALS, IDENTIFIER_PATTERN
)

_DAY_PATTERN = r'^(' + '|'.join(DAY_KEYS) + r')$'
_CATEGORY_PATTERN = r'^(' + '|'.join(MEAL_CATEGORIES) + r')$'
_GOAL_PATTERN = r'^(' + '|'.join(PLAN_GOALS) + r')$'
_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


class MealEntryInput(BaseModel):
    """Schema for a meal entry added to a plan slot."""
    id: Optional[str] = Field(None, pattern=IDENTIFIER_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    calories: float = Field(0, ge=0, le=20000)
    protein: float = Field(0, ge=0, le=2000)
    carbs: float = Field(0, ge=0, le=2000)
    fat: float = Field(0, ge=0, le=2000)
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate meal name."""
        if not v.strip():
            raise ValueError('Meal name cannot be empty')
        return v.strip()

    @field_validator('ingredients', 'instructions')
    @classmethod
    def strip_lines(cls, v):
        """Filter out empty lines."""
        return [line.strip() for line in v if line and line.strip()]


class DietPlanInput(BaseModel):
    """Schema for creating or replacing a diet plan."""
    user_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    goal: str = Field('maintenance', pattern=_GOAL_PATTERN)
    daily_calories: float = Field(0, ge=0, le=20000)
    daily_protein: float = Field(0, ge=0, le=2000)
    daily_carbs: float = Field(0, ge=0, le=2000)
    daily_fat: float = Field(0, ge=0, le=2000)
    is_active: bool = True
    weekly_plan: Dict[str, Dict[str, List[MealEntryInput]]] = Field(default_factory=dict)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate plan name."""
        if not v.strip():
            raise ValueError('Plan name cannot be empty')
        return v.strip()

    @field_validator('weekly_plan')
    @classmethod
    def validate_weekly_plan(cls, v):
        """Only canonical day keys and meal categories; meal ids unique across the plan."""
        seen = set()
        for day_key, day in v.items():
            if day_key not in DAY_KEYS:
                raise ValueError(f'Unknown day key: {day_key}')
            for category, meals in day.items():
                if category not in MEAL_CATEGORIES:
                    raise ValueError(f'Unknown meal category: {category}')
                for meal in meals:
                    if meal.id is None:
                        continue
                    if meal.id in seen:
                        raise ValueError(f'Duplicate meal id: {meal.id}')
                    seen.add(meal.id)
        return v


class DietPlanUpdate(BaseModel):
    """Schema for editing a plan's details; omitted fields stay as they are."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    goal: Optional[str] = Field(None, pattern=_GOAL_PATTERN)
    daily_calories: Optional[float] = Field(None, ge=0, le=20000)
    daily_protein: Optional[float] = Field(None, ge=0, le=2000)
    daily_carbs: Optional[float] = Field(None, ge=0, le=2000)
    daily_fat: Optional[float] = Field(None, ge=0, le=2000)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Plan name cannot be empty')
        return v.strip() if v is not None else v


class ToggleInput(BaseModel):
    """Schema for a meal completion toggle."""
    user_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    plan_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    day: str = Field(..., pattern=_DAY_PATTERN)
    category: str = Field(..., pattern=_CATEGORY_PATTERN)
    meal_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    on_date: Optional[date] = None


class GenerateMealInput(BaseModel):
    """Schema for an AI meal request."""
    prompt: str = Field("", max_length=1000)
    strict: bool = False


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get('loc', ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get('msg')))
    return "; ".join(parts)


def validate_identifier(value: Any, field: str = 'id') -> str:
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise InvalidInputError(f"Malformed {field}: {value!r}")
    return value


def validate_day_key(value: Any) -> str:
    if value not in DAY_KEYS:
        raise InvalidInputError(f"Unknown day key: {value!r}")
    return value


def validate_category(value: Any) -> str:
    if value not in MEAL_CATEGORIES:
        raise InvalidInputError(f"Unknown meal category: {value!r}")
    return value


def validate_date(value: Any) -> date:
    if not isinstance(value, date):
        raise InvalidInputError(f"Expected a calendar date, got {value!r}")
    return value


def validate_meal_entry(meal) -> None:
    """Reject a MealEntry with a malformed id, empty name or negative nutrition values."""
    validate_identifier(getattr(meal, 'id', None), 'meal id')
    try:
        MealEntryInput.model_validate(meal.to_dict())
    except ValidationError as e:
        raise InvalidInputError(describe_validation_error(e)) from e
