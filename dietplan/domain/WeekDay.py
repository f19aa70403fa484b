"""WeekDay mapping: calendar date -> canonical day key (Monday-first week)."""
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dietplan.domain.errors import InvalidInputError
from dietplan.utilities.constants import DAY_KEYS

DateLike = Union[date, datetime]


def day_key_for(d: DateLike) -> str:
    """Return the day key for a calendar date.

    date.weekday() is already Monday=0 .. Sunday=6, the same order as DAY_KEYS,
    so Sunday lands on index 6 without any special casing.
    """
    return DAY_KEYS[d.weekday()]


def today_key(now: Optional[DateLike] = None) -> str:
    if now is None:
        now = date.today()
    return day_key_for(now)


def day_index(day_key: str) -> int:
    try:
        return DAY_KEYS.index(day_key)
    except ValueError:
        raise InvalidInputError(f"Unknown day key: {day_key!r}") from None


def week_start(d: DateLike) -> date:
    """Monday of the week containing d."""
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.weekday())


def date_for_day(day_key: str, any_date: DateLike) -> date:
    """Calendar date of day_key within the Monday-start week containing any_date."""
    return week_start(any_date) + timedelta(days=day_index(day_key))


__all__ = ['day_key_for', 'today_key', 'day_index', 'week_start', 'date_for_day']
