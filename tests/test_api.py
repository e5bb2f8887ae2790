import os
import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from backend.main import create_app
from backend.settings import reset_settings

TOKEN = "test-secret"
USER = "user@example.com"
HEADERS = {"X-User-Email": USER, "X-Backend-Token": TOKEN}
DEFAULT_USER_SETTINGS = {"momentum_threshold": 5, "timezone": None}
TEMPLATE_ROW = {
    "id": "t1",
    "user_id": USER,
    "title": "Stretch",
    "category": "Health",
    "task_type": "recurring",
    "difficulty": 2,
    "priority": "none",
    "notes": None,
    "url": None,
    "details": None,
    "due_date": None,
    "due_time": None,
    "list_name": None,
    "recurrence_interval_days": None,
    "is_active": True,
    "archived_at": None,
    "created_at": "2024-03-01T08:00:00+00:00",
    "updated_at": "2024-03-01T08:00:00+00:00",
}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self._env = patch.dict(
            os.environ,
            {
                "DATABASE_URL": "postgresql://localhost/momentum_test",
                "BACKEND_SESSION_SECRET": TOKEN,
                "ALLOWED_EMAILS": "",
            },
        )
        self._env.start()
        reset_settings()
        self.client = TestClient(create_app(run_migrations=False))

    def tearDown(self):
        self._env.stop()
        reset_settings()

    def repo(self, name, **kwargs):
        patcher = patch(f"backend.repositories.{name}", new=AsyncMock(**kwargs))
        mock = patcher.start()
        self.addCleanup(patcher.stop)
        return mock


class TestAuth(ApiTestCase):
    def test_health_is_open(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True})

    def test_missing_token(self):
        response = self.client.get("/v1/settings/momentum-threshold", headers={"X-User-Email": USER})
        self.assertEqual(response.status_code, 401)

    def test_wrong_token(self):
        response = self.client.get(
            "/v1/settings/momentum-threshold",
            headers={"X-User-Email": USER, "X-Backend-Token": "nope"},
        )
        self.assertEqual(response.status_code, 401)

    def test_allow_list(self):
        os.environ["ALLOWED_EMAILS"] = "someone@example.com"
        reset_settings()
        response = self.client.get("/v1/settings/momentum-threshold", headers=HEADERS)
        self.assertEqual(response.status_code, 403)


class TestSettingsRoutes(ApiTestCase):
    def test_get_threshold(self):
        self.repo("get_user_settings", return_value={"momentum_threshold": 8, "timezone": None})
        response = self.client.get("/v1/settings/momentum-threshold", headers=HEADERS)
        self.assertEqual(response.json(), {"momentum_threshold": 8})

    def test_set_threshold(self):
        setter = self.repo("set_momentum_threshold", return_value=20)
        response = self.client.put(
            "/v1/settings/momentum-threshold", json={"momentum_threshold": 99}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"momentum_threshold": 20})
        setter.assert_awaited_once_with(USER, 99.0)

    def test_unknown_timezone(self):
        setter = self.repo("set_timezone")
        response = self.client.put("/v1/settings/timezone", json={"timezone": "Mars/Olympus"}, headers=HEADERS)
        self.assertEqual(response.status_code, 400)
        setter.assert_not_awaited()

    def test_set_timezone(self):
        setter = self.repo("set_timezone", return_value="Europe/Berlin")
        response = self.client.put("/v1/settings/timezone", json={"timezone": "Europe/Berlin"}, headers=HEADERS)
        self.assertEqual(response.json(), {"timezone": "Europe/Berlin"})
        setter.assert_awaited_once_with(USER, "Europe/Berlin")

    def test_export(self):
        self.repo("get_user_settings", return_value=DEFAULT_USER_SETTINGS)
        self.repo("list_templates", return_value=[])
        self.repo("list_all_logs", return_value=[])
        response = self.client.get("/v1/settings/export", headers=HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertIn("checklist-log-export-", response.headers["content-disposition"])
        self.assertTrue(response.text.startswith("record_type,id,title"))

    def test_reset_logs(self):
        self.repo("delete_all_logs", return_value=12)
        with self.assertLogs("backend.routes.settings", level="WARNING") as captured:
            response = self.client.delete("/v1/settings/logs", headers=HEADERS)
        self.assertEqual(response.json(), {"ok": True, "deleted": 12})
        # Logged with an aware UTC timestamp.
        self.assertIn("+00:00", captured.output[0])


class TestTemplateRoutes(ApiTestCase):
    def test_create_validates_difficulty(self):
        response = self.client.post("/v1/templates", json={"title": "Run", "difficulty": 9}, headers=HEADERS)
        self.assertEqual(response.status_code, 422)

    def test_conversion_blocked_with_history(self):
        self.repo("get_template", return_value={"id": "t1", "task_type": "recurring"})
        self.repo("count_completions", return_value=2)
        updater = self.repo("update_template")
        response = self.client.patch("/v1/templates/t1", json={"task_type": "one_off"}, headers=HEADERS)
        self.assertEqual(response.status_code, 400)
        self.assertIn("2 completion log(s)", response.json()["detail"])
        updater.assert_not_awaited()

    def test_completed_one_off_stays_archived(self):
        self.repo("get_template", return_value={"id": "t1", "task_type": "one_off", "archived_at": "2024-03-01"})
        self.repo("count_completions", return_value=1)
        response = self.client.put("/v1/templates/t1/active", json={"is_active": True}, headers=HEADERS)
        self.assertEqual(response.status_code, 400)

    def test_missing_template(self):
        self.repo("get_template", side_effect=LookupError("Template not found"))
        response = self.client.delete("/v1/templates/nope", headers=HEADERS)
        self.assertEqual(response.status_code, 404)

    def test_list_returns_template_fields(self):
        self.repo("list_templates", return_value=[TEMPLATE_ROW])
        response = self.client.get("/v1/templates", headers=HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"items": [TEMPLATE_ROW]})

    def test_patch_drops_null_category(self):
        self.repo("get_template", return_value=TEMPLATE_ROW)
        updater = self.repo("update_template", return_value=dict(TEMPLATE_ROW, title="Stretch more"))
        response = self.client.patch(
            "/v1/templates/t1", json={"title": "Stretch more", "category": None}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["category"], "Health")
        updater.assert_awaited_once_with(USER, "t1", {"title": "Stretch more", "category": None})

    def test_upcoming_covers_the_next_week(self):
        self.repo("get_user_settings", return_value=DEFAULT_USER_SETTINGS)
        due = self.repo(
            "list_due_templates",
            return_value=[dict(TEMPLATE_ROW, task_type="one_off", due_date="2024-03-12", due_time="09:30")],
        )
        with patch("backend.auth.datetime") as clock:
            clock.now.return_value = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
            response = self.client.get("/v1/templates/upcoming", headers=HEADERS)
        self.assertEqual(response.status_code, 200)
        due.assert_awaited_once_with(USER, "2024-03-10", "2024-03-16")
        self.assertEqual(
            response.json(),
            {
                "start": "2024-03-10",
                "end": "2024-03-16",
                "items": [
                    {"id": "t1", "title": "Stretch", "category": "Health", "due_date": "2024-03-12", "due_time": "09:30"}
                ],
            },
        )

    def test_upcoming_days_are_bounded(self):
        response = self.client.get("/v1/templates/upcoming", params={"days": 0}, headers=HEADERS)
        self.assertEqual(response.status_code, 422)


class TestChecklistRoutes(ApiTestCase):
    def test_checklist_splits_open_and_done(self):
        done = dict(TEMPLATE_ROW, id="t2", title="Read")
        self.repo("list_templates", return_value=[TEMPLATE_ROW, done])
        self.repo(
            "list_logs_range",
            return_value=[
                {"task_template_id": "t2", "completed": True, "completed_at": "2024-03-01T09:00:00+00:00"}
            ],
        )
        response = self.client.get("/v1/checklist/2024-03-01", headers=HEADERS)
        payload = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["id"] for item in payload["items"]], ["t1"])
        self.assertEqual(payload["completed"][0]["completed_at"], "2024-03-01T09:00:00+00:00")
        self.assertTrue(payload["completed"][0]["checked"])

    def test_bad_date(self):
        response = self.client.get("/v1/checklist/2024-13-40", headers=HEADERS)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid date format")

    def test_checking_one_off_archives_it(self):
        self.repo("get_template", return_value={"id": "t1", "task_type": "one_off", "archived_at": None})
        self.repo("upsert_task_log", return_value={"id": "l1", "completed": True})
        archiver = self.repo("archive_template")
        response = self.client.put("/v1/checklist/2024-03-01/t1", json={"checked": True}, headers=HEADERS)
        self.assertEqual(response.status_code, 200)
        archiver.assert_awaited_once_with(USER, "t1")

    def test_checking_recurring_does_not_archive(self):
        self.repo("get_template", return_value={"id": "t2", "task_type": "recurring", "archived_at": None})
        self.repo("upsert_task_log", return_value={"id": "l2", "completed": True})
        archiver = self.repo("archive_template")
        self.client.put("/v1/checklist/2024-03-01/t2", json={"checked": True}, headers=HEADERS)
        archiver.assert_not_awaited()


class TestMomentumAndHistoryRoutes(ApiTestCase):
    def test_system_health_with_nothing_done(self):
        self.repo("get_user_settings", return_value=DEFAULT_USER_SETTINGS)
        self.repo(
            "list_scheduling_templates",
            return_value=[
                {
                    "id": "t1",
                    "task_type": "recurring",
                    "difficulty": 3,
                    "is_active": True,
                    "archived_at": None,
                    "created_at": "2020-01-01T00:00:00+00:00",
                }
            ],
        )
        self.repo("list_logs_range", return_value=[])
        response = self.client.get("/v1/momentum/system-health", params={"window": 7}, headers=HEADERS)
        payload = response.json()
        self.assertEqual(payload["percent"], 10)
        self.assertEqual(payload["breakdown"], {"active": 0, "neutral": 0, "inactive": 7})
        self.assertEqual(len(payload["days"]), 7)

    def test_inverted_history_range(self):
        response = self.client.get(
            "/v1/history/daily", params={"start": "2024-03-10", "end": "2024-03-01"}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 400)


class TestErrorHandling(ApiTestCase):
    def test_unexpected_errors_are_hidden(self):
        client = TestClient(create_app(run_migrations=False), raise_server_exceptions=False)
        self.repo("get_user_settings", side_effect=RuntimeError("database is down"))
        response = client.get("/v1/settings/momentum-threshold", headers=HEADERS)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"detail": "Internal error"})


if __name__ == "__main__":
    unittest.main(verbosity=2)
