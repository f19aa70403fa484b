"""Progress aggregation over a plan's days and the completion ledger.

Read path for progress displays: malformed or missing plan data degrades to
zero counts. Completions are matched against the meals currently in the day
plan, so a record left behind by a removed meal is never counted and
completed <= total always holds.
"""
import logging
from datetime import date
from typing import Iterable, Optional, Set, Tuple

from dietplan.domain.CompletionRecord import CompletionRecord
from dietplan.domain.DayPlan import DayPlan
from dietplan.domain.DietPlan import DietPlan, day_plan_for, meals_of
from dietplan.domain.WeekDay import date_for_day, week_start
from dietplan.domain.errors import CollaboratorUnavailableError
from dietplan.logic.tracking.ledger import CompletionLedger
from dietplan.utilities.constants import DAY_KEYS, MEAL_CATEGORIES, COMPLETION_DATE_FORMAT

logger = logging.getLogger(__name__)


class ProgressStats:
    def __init__(self, total: int = 0, completed: int = 0, available: bool = True):
        self.total = total
        self.completed = completed
        # False when the ledger could not be read and completions were assumed zero
        self.available = available

    @property
    def percentage(self) -> int:
        return percentage(self)

    @property
    def label(self) -> str:
        return f"{self.completed}/{self.total}"

    def __add__(self, other: "ProgressStats") -> "ProgressStats":
        return ProgressStats(self.total + other.total, self.completed + other.completed,
                             self.available and other.available)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProgressStats):
            return NotImplemented
        return (self.total, self.completed) == (other.total, other.completed)

    def __str__(self) -> str:
        return f"{self.label} ({self.percentage}%)"

    __repr__ = __str__

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'completed': self.completed,
            'percentage': self.percentage,
            'label': self.label,
        }


def percentage(stats) -> int:
    """Completed share in [0, 100], rounded half up; 0 when there is nothing to complete."""
    if isinstance(stats, dict):
        total, completed = stats.get('total', 0), stats.get('completed', 0)
    else:
        total, completed = getattr(stats, 'total', 0), getattr(stats, 'completed', 0)
    total = int(total or 0)
    if total <= 0:
        return 0
    completed = max(0, min(int(completed or 0), total))
    return (200 * completed + total) // (2 * total)


def _completed_pairs(completions: Iterable[CompletionRecord]) -> Set[Tuple[str, str]]:
    return {(r.meal_type, r.meal_id) for r in completions or () if r.is_completed}


def compute_category_stats(day_plan: Optional[DayPlan], category: str,
                           completions: Iterable[CompletionRecord]) -> ProgressStats:
    meals = meals_of(day_plan, category)
    done = _completed_pairs(completions)
    completed = sum(1 for meal in meals if (category, meal.id) in done)
    return ProgressStats(len(meals), completed)


def compute_daily_stats(day_plan: Optional[DayPlan],
                        completions: Iterable[CompletionRecord]) -> ProgressStats:
    completions = list(completions or ())
    stats = ProgressStats()
    for category in MEAL_CATEGORIES:
        stats = stats + compute_category_stats(day_plan, category, completions)
    return stats


class ProgressAggregator:
    def __init__(self, ledger: Optional[CompletionLedger] = None):
        self.ledger = ledger if ledger is not None else CompletionLedger()

    def _completions(self, user_id: str, plan: DietPlan, day_key: str, on_date: Optional[date],
                     strict: bool) -> Tuple[list, bool]:
        try:
            return self.ledger.completions_for_day(user_id, plan.id, day_key, on_date), True
        except CollaboratorUnavailableError:
            if strict:
                raise
            logger.warning(f"Completions for plan {plan.id} ({day_key}) unavailable; showing as incomplete")
            return [], False

    def daily_stats(self, user_id: str, plan: DietPlan, day_key: str,
                    on_date: Optional[date] = None, strict: bool = False) -> ProgressStats:
        day_plan = day_plan_for(plan, day_key)
        if day_plan is None or day_plan.total_meals() == 0:
            return ProgressStats()
        completions, available = self._completions(user_id, plan, day_key, on_date, strict)
        stats = compute_daily_stats(day_plan, completions)
        stats.available = available
        return stats

    def day_report(self, user_id: str, plan: DietPlan, day_key: str,
                   on_date: Optional[date] = None, strict: bool = False) -> dict:
        """Day totals plus the per-category "{completed}/{total}" breakdown."""
        on_date = self.ledger.resolve_date(on_date)
        day_plan = day_plan_for(plan, day_key)
        completions, available = ([], True)
        if day_plan is not None and day_plan.total_meals() > 0:
            completions, available = self._completions(user_id, plan, day_key, on_date, strict)
        stats = compute_daily_stats(day_plan, completions)
        done = _completed_pairs(completions)
        return {
            'day': day_key,
            'date': on_date.strftime(COMPLETION_DATE_FORMAT),
            'has_plan': day_plan is not None,
            'completions_available': available,
            **stats.to_dict(),
            'categories': {
                category: compute_category_stats(day_plan, category, completions).to_dict()
                for category in MEAL_CATEGORIES
            },
            'completed_meal_ids': sorted(
                meal.id for category in MEAL_CATEGORIES for meal in meals_of(day_plan, category)
                if (category, meal.id) in done
            ),
        }

    def week_stats(self, user_id: str, plan: DietPlan, any_date: Optional[date] = None,
                   strict: bool = False) -> dict:
        """Each day's stats on its real date within the Monday-start week containing any_date."""
        if any_date is None:
            any_date = self.ledger.resolve_date(None)
        days = {}
        week_total = ProgressStats()
        for day_key in DAY_KEYS:
            day_date = date_for_day(day_key, any_date)
            stats = self.daily_stats(user_id, plan, day_key, day_date, strict=strict)
            days[day_key] = {'date': day_date.strftime(COMPLETION_DATE_FORMAT),
                             'has_plan': day_plan_for(plan, day_key) is not None,
                             **stats.to_dict()}
            week_total = week_total + stats
        return {
            'week_start': week_start(any_date).strftime(COMPLETION_DATE_FORMAT),
            'days': days,
            'week_totals': week_total.to_dict(),
            'completions_available': week_total.available,
        }
