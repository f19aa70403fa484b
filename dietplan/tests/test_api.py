import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from dietplan.api import api_ai
from dietplan.api.api_run import app
from dietplan.api.deps import get_completion_repository, get_plan_repository
from dietplan.domain.errors import CollaboratorUnavailableError
from dietplan.domain.WeekDay import today_key
from dietplan.infra.Completion_Repository import CompletionRepository
from dietplan.infra.Plan_Repository import PlanRepository

MONDAY = date(2024, 1, 1)


def plan_payload(user_id="user-1", name="Cut"):
    return {
        "user_id": user_id,
        "name": name,
        "goal": "weight_loss",
        "daily_calories": 1800,
        "daily_protein": 140,
        "daily_carbs": 150,
        "daily_fat": 60,
        "weekly_plan": {
            "monday": {
                "breakfast": [{"id": "A", "name": "Oats", "calories": 350}],
                "lunch": [{"id": "B", "name": "Salad", "calories": 450},
                          {"id": "C", "name": "Soup", "calories": 200}],
            },
        },
    }


class TestDietPlanAPI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        data_dir = Path(self._tmp.name)
        self.plan_repo = PlanRepository(data_dir)
        self.completion_repo = CompletionRepository(data_dir)
        app.dependency_overrides[get_plan_repository] = lambda: self.plan_repo
        app.dependency_overrides[get_completion_repository] = lambda: self.completion_repo
        self.client = TestClient(app)
        resp = self.client.post('/api/plans', json=plan_payload())
        self.assertEqual(resp.status_code, 200, resp.text)
        self.plan = resp.json()

    def tearDown(self):
        app.dependency_overrides.clear()
        self._tmp.cleanup()

    def toggle(self, meal_id, category="lunch", day="monday", on_date=MONDAY):
        return self.client.post('/api/completions/toggle', json={
            "user_id": "user-1", "plan_id": self.plan['id'], "day": day,
            "category": category, "meal_id": meal_id, "on_date": on_date.isoformat(),
        })

    def test_today(self):
        data = self.client.get('/api/today').json()
        self.assertEqual(data['day_key'], today_key())

    def test_create_and_fetch_plan(self):
        self.assertTrue(self.plan['id'])
        self.assertTrue(self.plan['is_active'])
        # Categories missing from the request are created empty
        self.assertEqual(self.plan['weekly_plan']['monday']['dinner'], [])
        resp = self.client.get(f"/api/plans/{self.plan['id']}")
        self.assertEqual(resp.json()['name'], "Cut")
        active = self.client.get('/api/plans/active', params={"user_id": "user-1"})
        self.assertEqual(active.json()['id'], self.plan['id'])

    def test_invalid_plan_is_rejected(self):
        bad = plan_payload()
        bad['goal'] = 'bulk'
        self.assertEqual(self.client.post('/api/plans', json=bad).status_code, 422)
        bad = plan_payload()
        bad['weekly_plan'] = {"Funday": {}}
        self.assertEqual(self.client.post('/api/plans', json=bad).status_code, 422)

    def test_duplicate_meal_ids_are_rejected(self):
        bad = plan_payload()
        bad['weekly_plan']['monday']['lunch'] = [{"id": "A", "name": "Salad"}, {"id": "A", "name": "Soup"}]
        self.assertEqual(self.client.post('/api/plans', json=bad).status_code, 422)
        bad = plan_payload()
        bad['weekly_plan']['tuesday'] = {"dinner": [{"id": "B", "name": "Salad again"}]}
        self.assertEqual(self.client.post('/api/plans', json=bad).status_code, 422)

        resp = self.client.post(f"/api/plans/{self.plan['id']}/days/monday/dinner",
                                json={"id": "A", "name": "Other oats"})
        self.assertEqual(resp.status_code, 422)
        self.assertIn('error', resp.json())
        monday = self.client.get(f"/api/plans/{self.plan['id']}/days/monday").json()['day']
        self.assertEqual(monday['dinner'], [])

        data = self.toggle("A", category="breakfast").json()
        self.assertEqual(data['day_stats']['label'], "1/3")

    def test_edit_plan_details(self):
        plan_id = self.plan['id']
        resp = self.client.patch(f"/api/plans/{plan_id}", json={
            "name": " Lean ", "goal": "muscle_gain", "daily_calories": 2600, "daily_protein": 180,
        })
        self.assertEqual(resp.status_code, 200, resp.text)
        edited = resp.json()
        self.assertEqual(edited['name'], "Lean")
        self.assertEqual(edited['goal'], "muscle_gain")
        self.assertEqual(edited['daily_calories'], 2600)
        self.assertEqual(edited['daily_protein'], 180)
        # untouched fields and the schedule survive the edit
        self.assertEqual(edited['daily_fat'], 60)
        self.assertEqual(edited['created_at'], self.plan['created_at'])
        self.assertEqual(edited['weekly_plan'], self.plan['weekly_plan'])
        self.assertEqual(self.client.get(f"/api/plans/{plan_id}").json()['name'], "Lean")

    def test_edit_plan_validation_and_missing(self):
        plan_id = self.plan['id']
        self.assertEqual(self.client.patch('/api/plans/unknown', json={"name": "X"}).status_code, 404)
        self.assertEqual(self.client.patch(f"/api/plans/{plan_id}", json={"goal": "bulk"}).status_code, 422)
        self.assertEqual(self.client.patch(f"/api/plans/{plan_id}",
                                           json={"daily_calories": -1}).status_code, 422)
        self.assertEqual(self.client.patch(f"/api/plans/{plan_id}", json={"name": "   "}).status_code, 422)
        self.assertEqual(self.client.get(f"/api/plans/{plan_id}").json()['goal'], "weight_loss")

    def test_edit_plan_active_flag(self):
        second = self.client.post('/api/plans', json=plan_payload(name="Bulk")).json()
        self.assertFalse(self.client.get(f"/api/plans/{self.plan['id']}").json()['is_active'])

        resp = self.client.patch(f"/api/plans/{self.plan['id']}", json={"is_active": True})
        self.assertTrue(resp.json()['is_active'])
        self.assertFalse(self.client.get(f"/api/plans/{second['id']}").json()['is_active'])

        resp = self.client.patch(f"/api/plans/{self.plan['id']}", json={"is_active": False})
        self.assertFalse(resp.json()['is_active'])
        self.assertEqual(self.client.get('/api/plans/active', params={"user_id": "user-1"}).status_code, 404)

    def test_missing_plan_is_404(self):
        self.assertEqual(self.client.get('/api/plans/unknown').status_code, 404)
        self.assertEqual(self.client.get('/api/plans/unknown/progress',
                                         params={"user_id": "user-1"}).status_code, 404)

    def test_day_absent_vs_present(self):
        monday = self.client.get(f"/api/plans/{self.plan['id']}/days/monday").json()
        self.assertEqual(len(monday['day']['lunch']), 2)
        tuesday = self.client.get(f"/api/plans/{self.plan['id']}/days/tuesday").json()
        self.assertIsNone(tuesday['day'])
        resp = self.client.get(f"/api/plans/{self.plan['id']}/days/Tuesday")
        self.assertEqual(resp.status_code, 422)
        self.assertIn('error', resp.json())

    def test_toggle_returns_record_and_stats(self):
        resp = self.toggle("B")
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertTrue(data['completed'])
        self.assertEqual(data['record']['completion_date'], "2024-01-01")
        self.assertEqual(data['day_stats']['label'], "1/3")
        self.assertEqual(data['day_stats']['percentage'], 33)
        self.assertEqual(data['day_stats']['categories']['lunch']['label'], "1/2")

        again = self.toggle("B").json()
        self.assertFalse(again['completed'])
        self.assertEqual(again['day_stats']['completed'], 0)

    def test_toggle_validation(self):
        resp = self.client.post('/api/completions/toggle', json={
            "user_id": "user-1", "plan_id": self.plan['id'], "day": "Monday",
            "category": "lunch", "meal_id": "B",
        })
        self.assertEqual(resp.status_code, 422)

    def test_toggle_storage_failure_is_503(self):
        with mock.patch.object(self.completion_repo, 'get_record',
                               side_effect=CollaboratorUnavailableError("store down")):
            resp = self.toggle("B")
        self.assertEqual(resp.status_code, 503)
        self.assertTrue(resp.json()['retryable'])
        self.assertEqual(self.client.get('/api/completions', params={
            "user_id": "user-1", "plan_id": self.plan['id'], "day": "monday", "date": "2024-01-01",
        }).json()['completions'], [])

    def test_progress_endpoints(self):
        self.toggle("A", category="breakfast")
        day = self.client.get(f"/api/plans/{self.plan['id']}/progress", params={
            "user_id": "user-1", "date": "2024-01-01",
        }).json()
        self.assertEqual(day['day'], "monday")
        self.assertEqual((day['total'], day['completed'], day['percentage']), (3, 1, 33))

        week = self.client.get(f"/api/plans/{self.plan['id']}/progress/week", params={
            "user_id": "user-1", "date": "2024-01-03",
        }).json()
        self.assertEqual(week['week_start'], "2024-01-01")
        self.assertEqual(week['days']['monday']['label'], "1/3")

        history = self.client.get('/api/completions/history', params={
            "user_id": "user-1", "plan_id": self.plan['id'], "end": "2024-01-01", "days": 3,
        }).json()
        self.assertEqual(history['counts'], {"2023-12-30": 0, "2023-12-31": 0, "2024-01-01": 1})

    def test_add_and_remove_meal(self):
        plan_id = self.plan['id']
        resp = self.client.post(f"/api/plans/{plan_id}/days/tuesday/dinner",
                                json={"name": "Eggs", "calories": 300, "protein": 20})
        self.assertEqual(resp.status_code, 200, resp.text)
        meal = resp.json()['meal']
        tuesday = resp.json()['plan']['weekly_plan']['tuesday']
        self.assertEqual([m['id'] for m in tuesday['dinner']], [meal['id']])
        self.assertEqual(tuesday['breakfast'], [])

        bad = self.client.post(f"/api/plans/{plan_id}/days/tuesday/dinner",
                               json={"name": "Bad", "calories": -1})
        self.assertEqual(bad.status_code, 422)

        removed = self.client.delete(f"/api/plans/{plan_id}/days/tuesday/dinner/{meal['id']}")
        self.assertEqual(removed.status_code, 200)
        self.assertEqual(removed.json()['plan']['weekly_plan']['tuesday']['dinner'], [])
        again = self.client.delete(f"/api/plans/{plan_id}/days/tuesday/dinner/{meal['id']}")
        self.assertEqual(again.status_code, 404)

    def test_generate_meal_into_slot_with_fallback(self):
        with mock.patch.object(api_ai, '_get_openai_client', return_value=None):
            resp = self.client.post(f"/api/plans/{self.plan['id']}/days/sunday/snacks/generate",
                                    json={"prompt": "high protein"})
            self.assertEqual(resp.status_code, 200, resp.text)
            self.assertEqual(resp.json()['source'], "fallback")
            snacks = resp.json()['plan']['weekly_plan']['sunday']['snacks']
            self.assertEqual(len(snacks), 1)

            strict = self.client.post(f"/api/plans/{self.plan['id']}/days/sunday/snacks/generate",
                                      json={"strict": True})
            self.assertEqual(strict.status_code, 503)

    def test_nutrition_and_pdf(self):
        nutrition = self.client.get(f"/api/plans/{self.plan['id']}/nutrition").json()
        self.assertEqual(nutrition['week_totals']['calories'], 1000)
        pdf = self.client.get(f"/api/plans/{self.plan['id']}/export_pdf",
                              params={"user_id": "user-1", "date": "2024-01-01"})
        self.assertEqual(pdf.status_code, 200)
        self.assertEqual(pdf.headers['content-type'], "application/pdf")
        self.assertTrue(pdf.content.startswith(b"%PDF"))

    def test_activate_and_delete(self):
        second = self.client.post('/api/plans', json=plan_payload(name="Bulk")).json()
        listed = self.client.get('/api/plans', params={"user_id": "user-1"}).json()['plans']
        self.assertEqual(sorted(p['is_active'] for p in listed), [False, True])

        resp = self.client.post(f"/api/plans/{self.plan['id']}/activate", params={"user_id": "user-1"})
        self.assertTrue(resp.json()['is_active'])
        self.assertFalse(self.client.get(f"/api/plans/{second['id']}").json()['is_active'])

        self.assertEqual(self.client.delete(f"/api/plans/{second['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/plans/{second['id']}").status_code, 404)


if __name__ == '__main__':
    unittest.main()
