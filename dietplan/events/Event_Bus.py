"""Simple Event Bus / Observer implementation for plan and completion changes.

Event names used so far:
  plan.meal_added -> payload {"plan_id": str, "day": str, "category": str, "meal": MealEntry}
  plan.meal_removed -> payload {"plan_id": str, "day": str, "category": str, "meal_id": str}
  meal.completion_toggled -> payload {"record": CompletionRecord}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_MEAL_ADDED = "plan.meal_added"
PLAN_MEAL_REMOVED = "plan.meal_removed"
MEAL_COMPLETION_TOGGLED = "meal.completion_toggled"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except ValueError:
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def publish_event(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus (sugar function)."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'publish_event',
	'PLAN_MEAL_ADDED', 'PLAN_MEAL_REMOVED', 'MEAL_COMPLETION_TOGGLED'
]
