import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dietplan.api.deps import get_ledger, get_plan_repository
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.logic.progress.aggregator import ProgressAggregator
from dietplan.logic.tracking.ledger import CompletionLedger
from dietplan.utilities.constants import HISTORY_DEFAULT_DAYS
from dietplan.utilities.validators import ToggleInput, validate_day_key

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post('/api/completions/toggle')
def toggle_completion(payload: ToggleInput,
                      repo: PlanRepository = Depends(get_plan_repository),
                      ledger: CompletionLedger = Depends(get_ledger)):
    """Flip one meal's completion and return the stored record with the refreshed day stats."""
    plan = repo.get_plan(payload.plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    record = ledger.toggle(payload.user_id, payload.plan_id, payload.day,
                           payload.category, payload.meal_id, payload.on_date)
    day_stats = ProgressAggregator(ledger).day_report(
        payload.user_id, plan, payload.day, record.completion_date
    )
    return {
        'record': record.to_dict(),
        'completed': record.is_completed,
        'day_stats': day_stats,
    }


@router.get('/api/completions')
def list_completions(user_id: str = Query(...), plan_id: str = Query(...), day: str = Query(...),
                     on_date: Optional[date] = Query(default=None, alias='date'),
                     ledger: CompletionLedger = Depends(get_ledger)):
    validate_day_key(day)
    resolved = ledger.resolve_date(on_date)
    records = ledger.completions_for_day(user_id, plan_id, day, resolved)
    return {
        'date': resolved.isoformat(),
        'day': day,
        'completions': [r.to_dict() for r in records],
        'completed_meal_ids': sorted({r.meal_id for r in records}),
    }


@router.get('/api/completions/history')
def completion_history(user_id: str = Query(...), plan_id: str = Query(...),
                       days: int = Query(default=HISTORY_DEFAULT_DAYS, ge=1, le=366),
                       end: Optional[date] = Query(default=None),
                       ledger: CompletionLedger = Depends(get_ledger)):
    counts = ledger.completion_counts_by_date(user_id, plan_id, end, days)
    return {'days': days, 'counts': counts, 'total': sum(counts.values())}
