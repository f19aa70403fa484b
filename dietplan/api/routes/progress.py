from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dietplan.api.deps import get_aggregator, get_plan_repository
from dietplan.domain.WeekDay import day_key_for
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.logic.progress.aggregator import ProgressAggregator
from dietplan.utilities.validators import validate_day_key, validate_identifier

router = APIRouter()


def _load_plan(repo: PlanRepository, plan_id: str):
    plan = repo.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.get('/api/plans/{plan_id}/progress')
def day_progress(plan_id: str, user_id: str = Query(...),
                 day: Optional[str] = Query(default=None),
                 on_date: Optional[date] = Query(default=None, alias='date'),
                 repo: PlanRepository = Depends(get_plan_repository),
                 aggregator: ProgressAggregator = Depends(get_aggregator)):
    """Progress of one day: totals plus the per-category "{completed}/{total}" labels.

    Without a day the day key of the requested (or today's) date is used.
    """
    validate_identifier(user_id, 'user id')
    resolved = aggregator.ledger.resolve_date(on_date)
    day_key = validate_day_key(day) if day is not None else day_key_for(resolved)
    plan = _load_plan(repo, plan_id)
    return {'plan_id': plan_id, **aggregator.day_report(user_id, plan, day_key, resolved)}


@router.get('/api/plans/{plan_id}/progress/week')
def week_progress(plan_id: str, user_id: str = Query(...),
                  on_date: Optional[date] = Query(default=None, alias='date'),
                  repo: PlanRepository = Depends(get_plan_repository),
                  aggregator: ProgressAggregator = Depends(get_aggregator)):
    validate_identifier(user_id, 'user id')
    plan = _load_plan(repo, plan_id)
    return {'plan_id': plan_id, **aggregator.week_stats(user_id, plan, on_date)}
