"""Web-facing observers for plan and completion events.

Subscribes to the GLOBAL_EVENT_BUS and keeps an in-memory ring buffer of
recent events that clients poll through the API (GET /api/events?since=<id>)
to refresh progress without reloading the whole plan.

  * Each event gets an auto-increment integer id (cursor); clients pass the
    last id they saw and only receive newer events.
  * A Lock guards the buffer since FastAPI runs sync endpoints in a thread pool.
    The buffer is per-process.
  * MAX_EVENTS caps memory use.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from dietplan.utilities.config import EVENT_BUFFER_SIZE
from .Event_Bus import (
    GLOBAL_EVENT_BUS, PLAN_MEAL_ADDED, PLAN_MEAL_REMOVED, MEAL_COMPLETION_TOGGLED
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = EVENT_BUFFER_SIZE
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat()
        }
        if isinstance(payload, dict):
            for k in ('plan_id', 'day', 'category', 'meal_id'):
                if k in payload:
                    evt[k] = payload[k]
            meal = payload.get('meal')
            if meal is not None and hasattr(meal, 'id'):
                evt['meal_id'] = meal.id
                evt['name'] = getattr(meal, 'name', '')
            record = payload.get('record')
            if record is not None and hasattr(record, 'meal_id'):
                evt['plan_id'] = record.plan_id
                evt['day'] = record.day_of_week
                evt['category'] = record.meal_type
                evt['meal_id'] = record.meal_id
                evt['date'] = record.completion_date.isoformat()
                evt['completed'] = record.is_completed
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in (PLAN_MEAL_ADDED, PLAN_MEAL_REMOVED, MEAL_COMPLETION_TOGGLED):
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True
    logger.info("Web observers subscribed to plan and completion events")


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the buffered events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
