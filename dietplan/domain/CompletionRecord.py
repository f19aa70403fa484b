"""CompletionRecord: one meal of one plan marked done (or undone) on one real calendar date.

completed_at is None when the meal was explicitly toggled back to incomplete.
A meal that was never toggled has no record at all.
"""
from datetime import date, datetime
from typing import NamedTuple, Optional

from dietplan.utilities.constants import COMPLETION_DATE_FORMAT


class CompletionKey(NamedTuple):
    user_id: str
    plan_id: str
    completion_date: date
    day_of_week: str
    meal_type: str
    meal_id: str

    def storage_key(self) -> str:
        # Identifiers are validated against IDENTIFIER_PATTERN, which excludes '|'
        return "|".join((
            self.user_id, self.plan_id, self.completion_date.strftime(COMPLETION_DATE_FORMAT),
            self.day_of_week, self.meal_type, self.meal_id,
        ))


def parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value[:10], COMPLETION_DATE_FORMAT).date()
        except ValueError:
            return None
    return None


class CompletionRecord:
    def __init__(self, user_id: str, plan_id: str, completion_date: date, day_of_week: str,
                 meal_type: str, meal_id: str, completed_at: Optional[str] = None,
                 id: str = "", created_at: Optional[str] = None):
        self.id = id
        self.user_id = user_id
        self.plan_id = plan_id
        self.completion_date = completion_date
        self.day_of_week = day_of_week
        self.meal_type = meal_type
        self.meal_id = meal_id
        self.completed_at = completed_at
        self.created_at = created_at

    @property
    def key(self) -> CompletionKey:
        return CompletionKey(self.user_id, self.plan_id, self.completion_date,
                             self.day_of_week, self.meal_type, self.meal_id)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __str__(self) -> str:
        state = "completed" if self.is_completed else "incomplete"
        return (f"{self.meal_type}/{self.meal_id} on {self.day_of_week} "
                f"{self.completion_date.strftime(COMPLETION_DATE_FORMAT)} - {state}")

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> Optional["CompletionRecord"]:
        if not isinstance(data, dict):
            return None
        completion_date = parse_date(data.get('completion_date'))
        if completion_date is None:
            return None
        return CompletionRecord(
            user_id=str(data.get('user_id') or ''),
            plan_id=str(data.get('plan_id') or ''),
            completion_date=completion_date,
            day_of_week=str(data.get('day_of_week') or ''),
            meal_type=str(data.get('meal_type') or ''),
            meal_id=str(data.get('meal_id') or ''),
            completed_at=data.get('completed_at'),
            id=str(data.get('id') or ''),
            created_at=data.get('created_at'),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "plan_id": self.plan_id,
            "completion_date": self.completion_date.strftime(COMPLETION_DATE_FORMAT),
            "day_of_week": self.day_of_week,
            "meal_type": self.meal_type,
            "meal_id": self.meal_id,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
        }
