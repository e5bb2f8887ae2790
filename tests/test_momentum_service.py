import asyncio
import unittest
from datetime import date
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

from backend.momentum import MomentumDay, Task
from backend.services.momentum_service import (
    build_momentum_days,
    completed_difficulties_by_date,
    completed_template_days,
    date_keys,
    describe_day,
    load_system_health,
    scheduled_difficulties_by_date,
)


def _template(template_id, task_type="recurring", difficulty=3, **extra):
    record = {
        "id": template_id,
        "task_type": task_type,
        "difficulty": difficulty,
        "is_active": True,
        "archived_at": None,
        "created_at": "2024-01-01T08:00:00+00:00",
    }
    record.update(extra)
    return record


class TestScheduling(unittest.TestCase):
    def test_date_keys(self):
        self.assertEqual(date_keys(date(2024, 2, 28), date(2024, 3, 1)), ["2024-02-28", "2024-02-29", "2024-03-01"])
        self.assertEqual(date_keys(date(2024, 3, 2), date(2024, 3, 1)), [])

    def test_recurring_is_scheduled_from_creation_day(self):
        templates = [_template("a", difficulty=4, created_at="2024-01-03T12:00:00+00:00")]
        scheduled = scheduled_difficulties_by_date(templates, date(2024, 1, 1), date(2024, 1, 5))
        self.assertEqual(sorted(scheduled), ["2024-01-03", "2024-01-04", "2024-01-05"])
        self.assertEqual(scheduled["2024-01-03"], [4])

    def test_dated_one_off_only_on_due_date(self):
        templates = [_template("b", task_type="one_off", due_date="2024-01-04")]
        scheduled = scheduled_difficulties_by_date(templates, date(2024, 1, 1), date(2024, 1, 5))
        self.assertEqual(scheduled, {"2024-01-04": [3]})

    def test_undated_one_off_every_day(self):
        templates = [_template("c", task_type="one_off", difficulty=5)]
        scheduled = scheduled_difficulties_by_date(templates, date(2024, 1, 1), date(2024, 1, 3))
        self.assertEqual(scheduled, {"2024-01-01": [5], "2024-01-02": [5], "2024-01-03": [5]})

    def test_inactive_is_skipped(self):
        templates = [_template("d", is_active=False)]
        self.assertEqual(scheduled_difficulties_by_date(templates, date(2024, 1, 1), date(2024, 1, 3)), {})

    def test_archived_stays_scheduled_up_to_archive_day(self):
        templates = [_template("e", task_type="one_off", archived_at="2024-01-02T10:00:00+00:00")]
        scheduled = scheduled_difficulties_by_date(templates, date(2024, 1, 1), date(2024, 1, 3))
        self.assertEqual(scheduled, {"2024-01-01": [3], "2024-01-02": [3]})

    def test_completed_day_is_always_scheduled(self):
        # Due on the 5th, finished early on the 3rd and archived then.
        templates = [
            _template("h", task_type="one_off", difficulty=4, due_date="2024-01-05", archived_at="2024-01-03T18:00:00+00:00")
        ]
        scheduled = scheduled_difficulties_by_date(
            templates, date(2024, 1, 1), date(2024, 1, 5), completed_on={"h": {"2024-01-03"}}
        )
        self.assertEqual(scheduled, {"2024-01-03": [4]})

    def test_creation_day_follows_user_timezone(self):
        templates = [_template("f", created_at="2024-01-03T02:00:00+00:00")]
        scheduled = scheduled_difficulties_by_date(
            templates, date(2024, 1, 1), date(2024, 1, 3), tz=ZoneInfo("America/New_York")
        )
        self.assertEqual(sorted(scheduled), ["2024-01-02", "2024-01-03"])

    def test_invalid_difficulty_uses_default(self):
        templates = [_template("g", difficulty=11)]
        scheduled = scheduled_difficulties_by_date(templates, date(2024, 1, 2), date(2024, 1, 2))
        self.assertEqual(scheduled, {"2024-01-02": [3]})


class TestCompletions(unittest.TestCase):
    def test_only_completed_logs_count(self):
        logs = [
            {"log_date": "2024-01-02", "completed": True, "difficulty": 5},
            {"log_date": "2024-01-02", "completed": False, "difficulty": 2},
            {"log_date": "2024-01-03", "completed": True, "difficulty": 1},
        ]
        self.assertEqual(completed_difficulties_by_date(logs), {"2024-01-02": [5], "2024-01-03": [1]})


class TestMomentumDays(unittest.TestCase):
    def test_most_recent_day_first(self):
        days = build_momentum_days({"2024-01-05": [3]}, {"2024-01-05": [3]}, date(2024, 1, 5), window=3)
        self.assertEqual([day.date for day in days], ["2024-01-05", "2024-01-04", "2024-01-03"])
        self.assertEqual(days[0].completed_tasks, [Task(3)])
        self.assertEqual(days[1].scheduled_tasks, [])

    def test_describe_day(self):
        summary = describe_day(MomentumDay("2024-01-05", [Task(3), Task(3)], [Task(3)]))
        self.assertEqual(summary["scheduled_effort"], 6)
        self.assertEqual(summary["completed_effort"], 3)
        self.assertEqual(summary["day_type"], "neutral")
        self.assertEqual(summary["daily_score"], 0.5)


class TestLoadSystemHealth(unittest.TestCase):
    def test_scores_window_from_repositories(self):
        templates = [_template("a", difficulty=5)]
        logs = [{"log_date": "2024-01-10", "completed": True, "difficulty": 5, "task_template_id": "a"}]
        with patch("backend.repositories.list_scheduling_templates", new=AsyncMock(return_value=templates)), patch(
            "backend.repositories.list_logs_range", new=AsyncMock(return_value=logs)
        ) as logs_mock:
            result = asyncio.run(load_system_health("user@example.com", date(2024, 1, 10), window=2))

        logs_mock.assert_awaited_once_with("user@example.com", "2024-01-09", "2024-01-10", completed_only=True)
        # (1.0 + 0.1) / 2
        self.assertEqual(result["percent"], 55)
        self.assertEqual(result["breakdown"], {"active": 1, "neutral": 0, "inactive": 1})
        self.assertEqual(result["window"], 2)
        self.assertEqual([day["date"] for day in result["days"]], ["2024-01-10", "2024-01-09"])

    def test_completing_archived_one_off_earns_credit(self):
        open_one_off = _template("o", task_type="one_off", created_at="2024-03-01T08:00:00+00:00")
        done_one_off = dict(open_one_off, archived_at="2024-03-10T12:00:00+00:00")
        log = {"log_date": "2024-03-10", "completed": True, "difficulty": 3, "task_template_id": "o"}

        def run(templates, logs):
            with patch(
                "backend.repositories.list_scheduling_templates", new=AsyncMock(return_value=templates)
            ), patch("backend.repositories.list_logs_range", new=AsyncMock(return_value=logs)):
                return asyncio.run(load_system_health("user@example.com", date(2024, 3, 10), window=1))

        before = run([open_one_off], [])
        after = run([done_one_off], [log])
        self.assertEqual(before["percent"], 10)
        self.assertEqual(after["percent"], 100)
        self.assertEqual(after["breakdown"], {"active": 1, "neutral": 0, "inactive": 0})

    def test_mixed_day_measures_one_off_against_its_own_effort(self):
        recurring = _template("r", created_at="2024-03-01T08:00:00+00:00")
        one_off = _template(
            "o", task_type="one_off", created_at="2024-03-01T08:00:00+00:00", archived_at="2024-03-10T12:00:00+00:00"
        )
        log = {"log_date": "2024-03-10", "completed": True, "difficulty": 3, "task_template_id": "o"}
        with patch(
            "backend.repositories.list_scheduling_templates", new=AsyncMock(return_value=[recurring, one_off])
        ) as templates_mock, patch("backend.repositories.list_logs_range", new=AsyncMock(return_value=[log])):
            result = asyncio.run(load_system_health("user@example.com", date(2024, 3, 10), window=1))

        templates_mock.assert_awaited_once_with("user@example.com", "2024-03-09")
        self.assertEqual(result["percent"], 20)
        self.assertEqual(result["breakdown"], {"active": 0, "neutral": 1, "inactive": 0})


class TestCompletedTemplateDays(unittest.TestCase):
    def test_groups_completed_logs(self):
        logs = [
            {"task_template_id": "a", "log_date": "2024-03-01", "completed": True},
            {"task_template_id": "a", "log_date": "2024-03-02", "completed": False},
            {"task_template_id": "b", "log_date": "2024-03-02", "completed": True},
        ]
        self.assertEqual(completed_template_days(logs), {"a": {"2024-03-01"}, "b": {"2024-03-02"}})


if __name__ == "__main__":
    unittest.main(verbosity=2)
