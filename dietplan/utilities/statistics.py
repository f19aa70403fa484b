"""
Progress report for a user's active diet plan.
Combines today's completion, the current week, the trailing completion history
and today's consumed nutrition against the plan's daily targets.
"""
from datetime import datetime, date
from typing import Dict, Optional
import json
import sys
from pathlib import Path
import logging

from dietplan.domain.DietPlan import day_plan_for
from dietplan.domain.WeekDay import day_key_for
from dietplan.domain.errors import CollaboratorUnavailableError
from dietplan.infra.Completion_Repository import CompletionRepository
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.logic.progress.aggregator import ProgressAggregator
from dietplan.logic.reporting.nutrition import compute_consumed_totals, compute_day_totals, daily_targets
from dietplan.logic.tracking.ledger import CompletionLedger
from dietplan.utilities.constants import HISTORY_DEFAULT_DAYS, MEAL_CATEGORIES, NUTRIENT_FIELDS

logger = logging.getLogger(__name__)


class PlanProgressStats:
    """Generate a progress report for one user's active plan."""

    def __init__(self, plan_repo: PlanRepository, ledger: CompletionLedger):
        self.plan_repo = plan_repo
        self.ledger = ledger
        self.aggregator = ProgressAggregator(ledger)

    def nutrition_today(self, user_id: str, plan, on_date: date,
                        strict: bool = False) -> Dict[str, Dict[str, float]]:
        """Planned vs. consumed vs. target for each nutrient on on_date.

        When the completion store is unavailable consumed is 0 for every nutrient,
        unless strict is set, in which case CollaboratorUnavailableError propagates.
        """
        day_key = day_key_for(on_date)
        day_plan = day_plan_for(plan, day_key)
        try:
            completions = self.ledger.completions_for_day(user_id, plan.id, day_key, on_date)
        except CollaboratorUnavailableError:
            if strict:
                raise
            logger.warning(f"Completions for plan {plan.id} ({day_key}) unavailable; consumed shown as 0")
            completions = []
        planned = compute_day_totals(day_plan)
        consumed = compute_consumed_totals(day_plan, completions)
        targets = daily_targets(plan)
        return {
            field: {'planned': planned[field], 'consumed': consumed[field], 'target': targets[field]}
            for field in NUTRIENT_FIELDS
        }

    def history(self, user_id: str, plan, on_date: date) -> Optional[Dict[str, int]]:
        """Trailing completion counts, or None when the completion store is unavailable."""
        try:
            return self.ledger.completion_counts_by_date(user_id, plan.id, on_date, HISTORY_DEFAULT_DAYS)
        except CollaboratorUnavailableError:
            logger.warning(f"Completion history for plan {plan.id} unavailable")
            return None

    def generate_report(self, user_id: str, on_date: Optional[date] = None) -> Optional[Dict]:
        """Report for the user's active plan, or None when the user has no active plan."""
        plan = self.plan_repo.get_active_plan(user_id)
        if plan is None:
            logger.info(f"No active plan for user {user_id}")
            return None
        on_date = self.ledger.resolve_date(on_date)
        today_report = self.aggregator.day_report(user_id, plan, day_key_for(on_date), on_date)
        week = self.aggregator.week_stats(user_id, plan, on_date)
        history = self.history(user_id, plan, on_date)
        return {
            'plan': {'id': plan.id, 'name': plan.name, 'goal': plan.goal},
            'date': on_date.isoformat(),
            'today': today_report,
            'week': week,
            'history': history if history is not None else {},
            'nutrition': self.nutrition_today(user_id, plan, on_date),
            'completions_available': (today_report['completions_available']
                                      and week['completions_available'] and history is not None),
            'generated_at': datetime.now().isoformat()
        }

    def print_report(self, user_id: str, on_date: Optional[date] = None):
        """Print a formatted progress report."""
        report = self.generate_report(user_id, on_date)
        if report is None:
            print(f"No active diet plan for user '{user_id}'.")
            return None

        print("\n" + "="*60)
        print(f"DIET PLAN PROGRESS - {report['plan']['name']} ({report['plan']['goal']})")
        print("="*60)
        if not report['completions_available']:
            print("\n(completion data unavailable: meals are shown as not completed)")

        today = report['today']
        print(f"\nTODAY ({today['day']}, {report['date']}): "
              f"{today['label']} meals ({today['percentage']}%)")
        for category in MEAL_CATEGORIES:
            print(f"  {category:10s}: {today['categories'][category]['label']}")

        print(f"\nWEEK OF {report['week']['week_start']}:")
        for day_key, info in report['week']['days'].items():
            bar = "#" * (info['percentage'] // 10)
            print(f"  {day_key:10s}: {bar:10s} {info['label']} ({info['percentage']}%)")

        print(f"\nCOMPLETED MEALS (last {len(report['history'])} days):")
        for day, count in report['history'].items():
            print(f"  {day}: {count}")

        print("\nNUTRITION TODAY (consumed / planned / target):")
        for field, values in report['nutrition'].items():
            print(f"  {field:9s}: {values['consumed']:.0f} / {values['planned']:.0f} / {values['target']:.0f}")

        print("\n" + "="*60)
        print(f"Report generated: {report['generated_at']}")
        print("="*60 + "\n")
        return report


# CLI interface
if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m dietplan.utilities.statistics <user_id>")
        sys.exit(2)

    stats = PlanProgressStats(PlanRepository(), CompletionLedger(CompletionRepository()))
    report = stats.print_report(sys.argv[1])

    if report is not None:
        output_file = Path("diet_plan_progress.json")
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"Detailed report saved to: {output_file}")
