"""Event helper utilities.

Helpers for publishing plan and completion events on the global event bus.

Quick import:
    from dietplan.events.event_helpers import (
        publish_meal_added, publish_meal_removed, publish_completion_toggled
    )

"""
from __future__ import annotations
from typing import Any
from .Event_Bus import (
    publish_event,
    PLAN_MEAL_ADDED, PLAN_MEAL_REMOVED, MEAL_COMPLETION_TOGGLED
)

__all__ = [
    'publish_meal_added', 'publish_meal_removed', 'publish_completion_toggled',
    'PLAN_MEAL_ADDED', 'PLAN_MEAL_REMOVED', 'MEAL_COMPLETION_TOGGLED'
]


def publish_meal_added(plan_id: str, day: str, category: str, meal: Any):
    """Publish a plan.meal_added event."""
    publish_event(PLAN_MEAL_ADDED, {
        'plan_id': plan_id,
        'day': day,
        'category': category,
        'meal': meal
    })


def publish_meal_removed(plan_id: str, day: str, category: str, meal_id: str):
    """Publish a plan.meal_removed event."""
    publish_event(PLAN_MEAL_REMOVED, {
        'plan_id': plan_id,
        'day': day,
        'category': category,
        'meal_id': meal_id
    })


def publish_completion_toggled(record: Any):
    """Publish a meal.completion_toggled event once the ledger write succeeded."""
    publish_event(MEAL_COMPLETION_TOGGLED, {'record': record})
