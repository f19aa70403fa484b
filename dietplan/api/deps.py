"""
API dependencies.

Repositories are provided through FastAPI dependencies so the app and its
tests can point them at different data directories
(app.dependency_overrides[get_plan_repository] = ...). The ledger and the
aggregator are built on top of the overridable completion repository.
"""
from fastapi import Depends

from dietplan.infra.Completion_Repository import CompletionRepository
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.logic.progress.aggregator import ProgressAggregator
from dietplan.logic.tracking.ledger import CompletionLedger


def get_plan_repository() -> PlanRepository:
    return PlanRepository()


def get_completion_repository() -> CompletionRepository:
    return CompletionRepository()


def get_ledger(repo: CompletionRepository = Depends(get_completion_repository)) -> CompletionLedger:
    return CompletionLedger(repo)


def get_aggregator(ledger: CompletionLedger = Depends(get_ledger)) -> ProgressAggregator:
    return ProgressAggregator(ledger)
