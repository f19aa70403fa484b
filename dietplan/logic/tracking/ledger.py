"""Completion ledger: idempotent meal toggles scoped to a real calendar date.

Per composite key (user, plan, date, day key, category, meal id) the states are
    untouched (no record) -> completed (completed_at set) <-> incomplete (completed_at None)
and toggling is reversible indefinitely.

Completion is tracked per concrete date, not per recurring weekly slot: the
"monday" slot of a plan reused across weeks has independent records for
2024-01-01 and 2024-01-08.
"""
import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from dietplan.domain.CompletionRecord import CompletionKey, CompletionRecord
from dietplan.events.event_helpers import publish_completion_toggled
from dietplan.infra.Completion_Repository import CompletionRepository
from dietplan.utilities.constants import COMPLETION_DATE_FORMAT, HISTORY_DEFAULT_DAYS
from dietplan.utilities.validators import (
    validate_identifier, validate_day_key, validate_category, validate_date
)

logger = logging.getLogger(__name__)


class CompletionLedger:
    def __init__(self, repository: Optional[CompletionRepository] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 today: Optional[Callable[[], date]] = None):
        self.repo = repository if repository is not None else CompletionRepository()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._today = today or date.today

    def resolve_date(self, on_date: Optional[date]) -> date:
        if on_date is None:
            return self._today()
        if isinstance(on_date, datetime):
            return on_date.date()
        return validate_date(on_date)

    def _key(self, user_id, plan_id, day_key, meal_type, meal_id, on_date) -> CompletionKey:
        return CompletionKey(
            validate_identifier(user_id, 'user id'),
            validate_identifier(plan_id, 'plan id'),
            self.resolve_date(on_date),
            validate_day_key(day_key),
            validate_category(meal_type),
            validate_identifier(meal_id, 'meal id'),
        )

    def toggle(self, user_id: str, plan_id: str, day_key: str, meal_type: str, meal_id: str,
               on_date: Optional[date] = None) -> CompletionRecord:
        """Flip one meal's completion for on_date (default today) and return the stored record.

        Raises InvalidInputError before touching storage, and lets
        CollaboratorUnavailableError through so callers never show an unsaved state.
        """
        key = self._key(user_id, plan_id, day_key, meal_type, meal_id, on_date)
        # Read, decide and write under one lock so two close toggles cannot both see "untouched"
        with self.repo.lock:
            record = self.repo.get_record(key)
            stamp = self._clock().isoformat()
            if record is None:
                record = CompletionRecord(*key, completed_at=stamp)
            else:
                record.completed_at = None if record.is_completed else stamp
            record = self.repo.upsert_record(record)
        logger.info(f"Meal {key.meal_id} ({key.meal_type}, {key.day_of_week} "
                    f"{key.completion_date}) is now {'completed' if record.is_completed else 'incomplete'}")
        publish_completion_toggled(record)
        return record

    def completions_for_day(self, user_id: str, plan_id: str, day_key: str,
                            on_date: Optional[date] = None) -> List[CompletionRecord]:
        """Currently completed records for that exact date (other weeks' same weekday excluded)."""
        validate_identifier(user_id, 'user id')
        validate_identifier(plan_id, 'plan id')
        validate_day_key(day_key)
        return self.repo.query_completions(user_id, plan_id, day_key, self.resolve_date(on_date))

    def is_completed(self, user_id: str, plan_id: str, day_key: str, meal_type: str, meal_id: str,
                     on_date: Optional[date] = None) -> bool:
        key = self._key(user_id, plan_id, day_key, meal_type, meal_id, on_date)
        record = self.repo.get_record(key)
        return record is not None and record.is_completed

    def completion_counts_by_date(self, user_id: str, plan_id: str, end_date: Optional[date] = None,
                                  days: int = HISTORY_DEFAULT_DAYS) -> Dict[str, int]:
        """Completed meals per date over the `days` dates ending at end_date (inclusive).

        Every date of the window is present, with 0 where nothing was completed.
        """
        validate_identifier(user_id, 'user id')
        validate_identifier(plan_id, 'plan id')
        if days < 1:
            return OrderedDict()
        end = self.resolve_date(end_date)
        start = end - timedelta(days=days - 1)
        counts: Dict[str, int] = OrderedDict(
            ((start + timedelta(days=i)).strftime(COMPLETION_DATE_FORMAT), 0) for i in range(days)
        )
        for record in self.repo.query_range(user_id, plan_id, start, end):
            counts[record.completion_date.strftime(COMPLETION_DATE_FORMAT)] += 1
        return counts
