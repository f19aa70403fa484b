import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from dietplan.domain.DietPlan import DietPlan
from dietplan.infra.json_store import JsonFileStore
from dietplan.infra.paths import PLANS_FILE_NAME, resolve_data_dir

logger = logging.getLogger(__name__)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PlanRepository:
    """Diet plans persisted as a JSON object keyed by plan id.

    Lookups return None (or an empty list) when nothing matches; an unreadable
    or unwritable store raises CollaboratorUnavailableError.
    """

    def __init__(self, data_dir=None):
        self.store = JsonFileStore(resolve_data_dir(data_dir) / PLANS_FILE_NAME)

    def _load(self) -> dict:
        data = self.store.load()
        if not isinstance(data, dict):
            logger.warning("Plan store is not a JSON object; treating it as empty")
            return {}
        return data

    def get_plan(self, plan_id: str) -> Optional[DietPlan]:
        raw = self._load().get(plan_id)
        if not isinstance(raw, dict):
            return None
        return DietPlan.from_dict(raw)

    def update_plan(self, plan_id: str, plan: DietPlan) -> Optional[DietPlan]:
        """Replace the stored plan. Returns None when plan_id is unknown."""
        with self.store.lock:
            store = self._load()
            if plan_id not in store:
                return None
            data = plan.to_dict()
            data['id'] = plan_id
            data['created_at'] = store[plan_id].get('created_at') or data.get('created_at')
            data['updated_at'] = _iso_now()
            store[plan_id] = data
            self.store.save(store)
        return DietPlan.from_dict(data)

    def create_plan(self, plan: DietPlan) -> DietPlan:
        """Store a new plan. An active plan deactivates the owner's other plans first."""
        with self.store.lock:
            store = self._load()
            plan_id = plan.id or str(uuid4())
            now = _iso_now()
            if plan.is_active:
                for other in store.values():
                    if isinstance(other, dict) and other.get('user_id') == plan.user_id:
                        other['is_active'] = False
            data = plan.to_dict()
            data.update({'id': plan_id, 'created_at': now, 'updated_at': now})
            store[plan_id] = data
            self.store.save(store)
        logger.info(f"Created plan {plan_id} for user {plan.user_id}")
        return DietPlan.from_dict(data)

    def list_user_plans(self, user_id: str) -> List[DietPlan]:
        plans = [DietPlan.from_dict(raw) for raw in self._load().values()
                 if isinstance(raw, dict) and raw.get('user_id') == user_id]
        return sorted(plans, key=lambda p: p.created_at or '', reverse=True)

    def get_active_plan(self, user_id: str) -> Optional[DietPlan]:
        for plan in self.list_user_plans(user_id):
            if plan.is_active:
                return plan
        return None

    def activate_plan(self, plan_id: str, user_id: str) -> Optional[DietPlan]:
        """Make plan_id the owner's only active plan. Returns None when it is not theirs."""
        with self.store.lock:
            store = self._load()
            target = store.get(plan_id)
            if not isinstance(target, dict) or target.get('user_id') != user_id:
                return None
            now = _iso_now()
            for pid, raw in store.items():
                if isinstance(raw, dict) and raw.get('user_id') == user_id:
                    active = pid == plan_id
                    if raw.get('is_active') != active:
                        raw['is_active'] = active
                        raw['updated_at'] = now
            self.store.save(store)
        return DietPlan.from_dict(target)

    def delete_plan(self, plan_id: str) -> bool:
        with self.store.lock:
            store = self._load()
            if plan_id not in store:
                return False
            del store[plan_id]
            self.store.save(store)
        logger.info(f"Deleted plan {plan_id}")
        return True
