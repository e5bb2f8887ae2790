import asyncio
import unittest
from datetime import date
from unittest.mock import AsyncMock, patch

from backend.services.history_service import (
    aggregate_completed_logs,
    group_due_templates,
    load_daily_range,
    validate_range,
)


class TestAggregation(unittest.TestCase):
    def test_counts_and_difficulty_sums(self):
        logs = [
            {"log_date": "2024-03-01", "completed": True, "difficulty": 4, "title": "Run", "category": "Training"},
            {"log_date": "2024-03-01", "completed": True, "difficulty": None, "title": None, "category": None},
            {"log_date": "2024-03-02", "completed": False, "difficulty": 5, "title": "Skip"},
        ]
        payload = aggregate_completed_logs(logs)
        self.assertEqual(payload["completed_count_by_date"], {"2024-03-01": 2})
        self.assertEqual(payload["difficulty_sum_by_date"], {"2024-03-01": 7})
        titles = [task["title"] for task in payload["completed_tasks_by_date"]["2024-03-01"]]
        self.assertEqual(titles, ["Run", "Completed task"])
        self.assertEqual(payload["completed_tasks_by_date"]["2024-03-01"][1]["category"], "General")

    def test_due_templates_grouped_by_day(self):
        grouped = group_due_templates(
            [
                {"title": "Taxes", "category": "General", "due_date": "2024-04-15"},
                {"title": "Daily", "category": "Health", "due_date": None},
            ]
        )
        self.assertEqual(grouped, {"2024-04-15": [{"title": "Taxes", "category": "General"}]})


class TestRangeValidation(unittest.TestCase):
    def test_requires_both_dates(self):
        with self.assertRaisesRegex(ValueError, "Both start and end"):
            validate_range(None, date(2024, 3, 1))

    def test_rejects_inverted_range(self):
        with self.assertRaisesRegex(ValueError, "before or equal"):
            validate_range(date(2024, 3, 2), date(2024, 3, 1))

    def test_single_day_is_fine(self):
        validate_range(date(2024, 3, 1), date(2024, 3, 1))


class TestLoadDailyRange(unittest.TestCase):
    def test_reports_older_history(self):
        logs = [{"log_date": "2024-03-05", "completed": True, "difficulty": 2, "title": "Read"}]
        with patch("backend.repositories.list_logs_range", new=AsyncMock(return_value=logs)), patch(
            "backend.repositories.list_due_templates", new=AsyncMock(return_value=[])
        ), patch("backend.repositories.get_earliest_log_date", new=AsyncMock(return_value="2024-01-10")):
            result = asyncio.run(load_daily_range("user@example.com", date(2024, 3, 1), date(2024, 3, 31)))

        self.assertEqual(result["start"], "2024-03-01")
        self.assertEqual(result["end"], "2024-03-31")
        self.assertTrue(result["has_more_past"])
        self.assertEqual(result["data"]["completed_count_by_date"], {"2024-03-05": 1})
        self.assertEqual(result["data"]["scheduled_tasks_by_date"], {})

    def test_no_logs_means_nothing_older(self):
        with patch("backend.repositories.list_logs_range", new=AsyncMock(return_value=[])), patch(
            "backend.repositories.list_due_templates", new=AsyncMock(return_value=[])
        ), patch("backend.repositories.get_earliest_log_date", new=AsyncMock(return_value=None)):
            result = asyncio.run(load_daily_range("user@example.com", date(2024, 3, 1), date(2024, 3, 31)))
        self.assertFalse(result["has_more_past"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
