from datetime import date

import pytest

from dietplan.domain.DietPlan import DietPlan
from dietplan.domain.errors import CollaboratorUnavailableError
from dietplan.infra import json_store
from dietplan.infra.Completion_Repository import CompletionRepository
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.infra.paths import resolve_data_dir
from dietplan.logic.tracking.ledger import CompletionLedger
from dietplan.tests.plan_fixtures import sample_plan_dict
from dietplan.utilities.statistics import PlanProgressStats

MONDAY = date(2024, 1, 1)


@pytest.fixture
def stats(tmp_path):
    plan_repo = PlanRepository(tmp_path)
    ledger = CompletionLedger(CompletionRepository(tmp_path), today=lambda: MONDAY)
    plan = plan_repo.create_plan(DietPlan.from_dict(sample_plan_dict(plan_id="")))
    ledger.toggle("user-1", plan.id, "monday", "lunch", "B")
    return PlanProgressStats(plan_repo, ledger)


def test_report_for_active_plan(stats):
    report = stats.generate_report("user-1")
    assert report['date'] == "2024-01-01"
    assert report['today']['day'] == "monday"
    assert report['today']['label'] == "1/3"
    assert report['today']['categories']['lunch']['label'] == "1/2"
    assert report['week']['week_totals']['completed'] == 1
    assert list(report['history'].values()) == [0, 0, 0, 0, 0, 0, 1]
    assert report['nutrition']['calories'] == {'planned': 1000, 'consumed': 450, 'target': 1800}
    assert report['completions_available'] is True


def test_report_survives_unreadable_completion_store(stats, monkeypatch, capsys):
    def unavailable(*args, **kwargs):
        raise CollaboratorUnavailableError("completion store down")

    monkeypatch.setattr(stats.ledger.repo, "query_completions", unavailable)
    monkeypatch.setattr(stats.ledger.repo, "query_range", unavailable)

    report = stats.generate_report("user-1")
    assert report['completions_available'] is False
    assert report['today']['completed'] == 0
    assert report['history'] == {}
    assert report['nutrition']['calories'] == {'planned': 1000, 'consumed': 0, 'target': 1800}

    plan = stats.plan_repo.get_active_plan("user-1")
    with pytest.raises(CollaboratorUnavailableError):
        stats.nutrition_today("user-1", plan, MONDAY, strict=True)

    assert stats.print_report("user-1") is not None
    assert "completion data unavailable" in capsys.readouterr().out


def test_report_without_active_plan(stats, capsys):
    assert stats.generate_report("someone-else") is None
    assert stats.print_report("someone-else") is None
    assert "No active diet plan" in capsys.readouterr().out


def test_print_report(stats, capsys):
    report = stats.print_report("user-1")
    out = capsys.readouterr().out
    assert report is not None
    assert "TODAY (monday, 2024-01-01): 1/3 meals (33%)" in out
    assert "lunch     : 1/2" in out


def test_resolve_data_dir_creates_directory(tmp_path):
    target = tmp_path / "nested" / "data"
    assert resolve_data_dir(target) == target
    assert target.is_dir()


def test_unwritable_store_is_unavailable(tmp_path, monkeypatch):
    repo = PlanRepository(tmp_path)

    def refuse(*args, **kwargs):
        raise PermissionError("read-only file system")

    monkeypatch.setattr(json_store.tempfile, "mkstemp", refuse)
    with pytest.raises(CollaboratorUnavailableError):
        repo.create_plan(DietPlan.from_dict(sample_plan_dict(plan_id="")))
    assert repo.get_plan("plan-1") is None
