"""Completion ledger persistence (JSON file keyed by the composite completion key).

Using the composite key as the storage key is the uniqueness constraint:
a second insert for the same key overwrites, it can never add a duplicate.
"""
import logging
from datetime import date, datetime, timezone
from typing import Iterator, List, Optional
from uuid import uuid4

from dietplan.domain.CompletionRecord import CompletionKey, CompletionRecord
from dietplan.infra.json_store import JsonFileStore
from dietplan.infra.paths import COMPLETIONS_FILE_NAME, resolve_data_dir

logger = logging.getLogger(__name__)


class CompletionRepository:
    def __init__(self, data_dir=None):
        self.store = JsonFileStore(resolve_data_dir(data_dir) / COMPLETIONS_FILE_NAME)

    @property
    def lock(self):
        return self.store.lock

    def _load(self) -> dict:
        data = self.store.load()
        if not isinstance(data, dict):
            logger.warning("Completion store is not a JSON object; treating it as empty")
            return {}
        return data

    def _iter_records(self) -> Iterator[CompletionRecord]:
        for raw in self._load().values():
            record = CompletionRecord.from_dict(raw)
            if record is not None:
                yield record

    def get_record(self, key: CompletionKey) -> Optional[CompletionRecord]:
        return CompletionRecord.from_dict(self._load().get(key.storage_key()))

    def upsert_record(self, record: CompletionRecord) -> CompletionRecord:
        with self.lock:
            store = self._load()
            if not record.id:
                record.id = str(uuid4())
            if not record.created_at:
                record.created_at = datetime.now(timezone.utc).isoformat()
            store[record.key.storage_key()] = record.to_dict()
            self.store.save(store)
        return record

    def query_completions(self, user_id: str, plan_id: str, day_key: str,
                          on_date: date) -> List[CompletionRecord]:
        """Completed records for one plan, day key and exact calendar date."""
        return [
            r for r in self._iter_records()
            if r.user_id == user_id and r.plan_id == plan_id and r.day_of_week == day_key
            and r.completion_date == on_date and r.is_completed
        ]

    def query_range(self, user_id: str, plan_id: str, start: date, end: date) -> List[CompletionRecord]:
        """Completed records for one plan with start <= completion_date <= end."""
        return [
            r for r in self._iter_records()
            if r.user_id == user_id and r.plan_id == plan_id
            and start <= r.completion_date <= end and r.is_completed
        ]
