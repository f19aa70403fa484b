import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from dietplan.api.deps import get_aggregator, get_plan_repository
from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.DietPlan import DietPlan, day_plan_for
from dietplan.domain.MealEntry import MealEntry
from dietplan.events.event_helpers import publish_meal_added, publish_meal_removed
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.infra.pdf_utils import generate_pdf_for_week
from dietplan.logic.planning.mutation import add_meal_to_slot, new_meal_id, remove_meal_from_slot
from dietplan.logic.progress.aggregator import ProgressAggregator
from dietplan.logic.reporting.nutrition import compute_week_nutrition
from dietplan.utilities.validators import (
    DietPlanInput, DietPlanUpdate, MealEntryInput, validate_day_key, validate_identifier
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _meal_from_input(payload: MealEntryInput) -> MealEntry:
    data = payload.model_dump()
    data['id'] = payload.id or new_meal_id()
    return MealEntry.from_dict(data)


def _plan_from_input(payload: DietPlanInput) -> DietPlan:
    weekly_plan = {
        day_key: DayPlan({category: [_meal_from_input(m) for m in meals]
                          for category, meals in day.items()})
        for day_key, day in payload.weekly_plan.items()
    }
    return DietPlan(
        user_id=payload.user_id, name=payload.name, goal=payload.goal,
        daily_calories=payload.daily_calories, daily_protein=payload.daily_protein,
        daily_carbs=payload.daily_carbs, daily_fat=payload.daily_fat,
        weekly_plan=weekly_plan, is_active=payload.is_active,
    )


def _require_plan(repo: PlanRepository, plan_id: str) -> DietPlan:
    plan = repo.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


# -------------------- Plans --------------------
@router.post('/api/plans')
def create_plan(payload: DietPlanInput, repo: PlanRepository = Depends(get_plan_repository)):
    plan = repo.create_plan(_plan_from_input(payload))
    return plan.to_dict()


@router.get('/api/plans')
def list_plans(user_id: str = Query(...), repo: PlanRepository = Depends(get_plan_repository)):
    validate_identifier(user_id, 'user id')
    return {'plans': [p.to_dict() for p in repo.list_user_plans(user_id)]}


@router.get('/api/plans/active')
def active_plan(user_id: str = Query(...), repo: PlanRepository = Depends(get_plan_repository)):
    validate_identifier(user_id, 'user id')
    plan = repo.get_active_plan(user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="No active plan")
    return plan.to_dict()


@router.get('/api/plans/{plan_id}')
def get_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    return _require_plan(repo, plan_id).to_dict()


@router.patch('/api/plans/{plan_id}')
def edit_plan(plan_id: str, payload: DietPlanUpdate,
              repo: PlanRepository = Depends(get_plan_repository)):
    """Edit name, goal, daily targets or active flag. The weekly schedule is left untouched."""
    plan = _require_plan(repo, plan_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    make_active = changes.pop('is_active', None)
    for field, value in changes.items():
        setattr(plan, field, value)
    if make_active is False:
        plan.is_active = False
    saved = repo.update_plan(plan_id, plan)
    if saved is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    if make_active:
        # deactivates the owner's other plans
        saved = repo.activate_plan(plan_id, saved.user_id)
    logger.info(f"Edited plan {plan_id}: {', '.join(sorted(payload.model_fields_set)) or 'no changes'}")
    return saved.to_dict()


@router.post('/api/plans/{plan_id}/activate')
def activate_plan(plan_id: str, user_id: str = Query(...),
                  repo: PlanRepository = Depends(get_plan_repository)):
    validate_identifier(user_id, 'user id')
    plan = repo.activate_plan(plan_id, user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan.to_dict()


@router.delete('/api/plans/{plan_id}')
def delete_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    if not repo.delete_plan(plan_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    return {'deleted': plan_id}


# -------------------- Day slots --------------------
@router.get('/api/plans/{plan_id}/days/{day}')
def get_day(plan_id: str, day: str, repo: PlanRepository = Depends(get_plan_repository)):
    validate_day_key(day)
    day_plan = day_plan_for(_require_plan(repo, plan_id), day)
    return {'day_key': day, 'day': day_plan.to_dict() if day_plan is not None else None}


@router.post('/api/plans/{plan_id}/days/{day}/{category}')
def add_meal(plan_id: str, day: str, category: str, payload: MealEntryInput,
             repo: PlanRepository = Depends(get_plan_repository)):
    plan = _require_plan(repo, plan_id)
    meal = _meal_from_input(payload)
    saved = repo.update_plan(plan_id, add_meal_to_slot(plan, day, category, meal))
    if saved is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    logger.info(f"Added meal {meal.id} to plan {plan_id} ({day}/{category})")
    publish_meal_added(plan_id, day, category, meal)
    return {'meal': meal.to_dict(), 'plan': saved.to_dict()}


@router.delete('/api/plans/{plan_id}/days/{day}/{category}/{meal_id}')
def remove_meal(plan_id: str, day: str, category: str, meal_id: str,
                repo: PlanRepository = Depends(get_plan_repository)):
    plan = _require_plan(repo, plan_id)
    updated = remove_meal_from_slot(plan, day, category, meal_id)
    if updated.to_dict() == plan.to_dict():
        raise HTTPException(status_code=404, detail="Meal not found")
    saved = repo.update_plan(plan_id, updated)
    if saved is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    logger.info(f"Removed meal {meal_id} from plan {plan_id} ({day}/{category})")
    publish_meal_removed(plan_id, day, category, meal_id)
    return {'removed': meal_id, 'plan': saved.to_dict()}


# -------------------- Nutrition / export --------------------
@router.get('/api/plans/{plan_id}/nutrition')
def plan_nutrition(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    plan = _require_plan(repo, plan_id)
    return {'plan_id': plan_id, **compute_week_nutrition(plan)}


@router.get('/api/plans/{plan_id}/export_pdf')
def export_pdf(plan_id: str, user_id: Optional[str] = Query(default=None),
               on_date: Optional[date] = Query(default=None, alias='date'),
               repo: PlanRepository = Depends(get_plan_repository),
               aggregator: ProgressAggregator = Depends(get_aggregator)):
    plan = _require_plan(repo, plan_id)
    week_stats = None
    if user_id is not None:
        week_stats = aggregator.week_stats(user_id, plan, on_date)
    pdf_bytes = generate_pdf_for_week(plan, week_stats)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=diet_plan_{plan_id}.pdf"
        },
    )
