import unittest
from datetime import date, timedelta

import pandas as pd

from dashboard.metrics import (
    activity_level,
    compute_key_metrics,
    current_streak,
    month_days_considered,
    percent_change,
    round1,
    week_start,
    week_summary,
    weekly_totals,
)


def _frame(rows):
    return pd.DataFrame(rows, columns=["date", "count", "difficulty_sum"])


class TestHelpers(unittest.TestCase):
    def test_round1_half_up(self):
        self.assertEqual(round1(2.25), 2.3)
        self.assertEqual(round1(1.4), 1.4)

    def test_month_to_date_stops_today(self):
        days = month_days_considered(2024, 3, date(2024, 3, 5), "mtd")
        self.assertEqual(days[0], date(2024, 3, 1))
        self.assertEqual(days[-1], date(2024, 3, 5))

    def test_full_or_past_month_uses_every_day(self):
        self.assertEqual(len(month_days_considered(2024, 3, date(2024, 3, 5), "full")), 31)
        self.assertEqual(len(month_days_considered(2024, 2, date(2024, 3, 5), "mtd")), 29)

    def test_streak_breaks_on_gap(self):
        days = [date(2024, 3, d) for d in range(1, 6)]
        counts = {days[0]: 1, days[2]: 1, days[3]: 2, days[4]: 1}
        self.assertEqual(current_streak(days, counts, 4), 3)
        self.assertEqual(current_streak(days, counts, 1), 0)


class TestKeyMetrics(unittest.TestCase):
    def setUp(self):
        self.data = _frame(
            [
                (date(2024, 3, 1), 1, 3),
                (date(2024, 3, 2), 0, 0),
                (date(2024, 3, 3), 2, 6),
                (date(2024, 3, 4), 1, 3),
                (date(2024, 3, 5), 3, 9),
            ]
        )

    def test_month_to_date(self):
        metrics = compute_key_metrics(self.data, 2024, 3, date(2024, 3, 5), momentum_threshold=5)
        self.assertEqual(metrics["streak_days"], 3)
        self.assertEqual(metrics["consistency_pct"], 80)
        self.assertEqual(metrics["avg_difficulty"], 3.0)
        self.assertEqual(metrics["avg_tasks_per_day"], 1.4)

    def test_without_difficulty_uses_threshold_scale(self):
        metrics = compute_key_metrics(
            self.data, 2024, 3, date(2024, 3, 5), momentum_threshold=5, use_difficulty=False
        )
        # Active days scaled against 5 tasks: 1, 2, 1, 3 -> 1.75
        self.assertEqual(metrics["avg_difficulty"], 1.8)

    def test_full_range_for_past_month(self):
        metrics = compute_key_metrics(self.data, 2024, 3, date(2024, 4, 10), momentum_threshold=5, range_mode="full")
        self.assertEqual(metrics["streak_days"], 0)
        self.assertEqual(metrics["consistency_pct"], 13)

    def test_empty_month(self):
        metrics = compute_key_metrics(_frame([]), 2024, 3, date(2024, 3, 5), momentum_threshold=5)
        self.assertEqual(
            metrics,
            {"streak_days": 0, "consistency_pct": 0, "avg_difficulty": 0, "avg_tasks_per_day": 0.0},
        )


class TestWeeklyTrend(unittest.TestCase):
    def test_week_starts_on_monday(self):
        self.assertEqual(week_start(date(2024, 3, 10)), date(2024, 3, 4))
        self.assertEqual(week_start(date(2024, 3, 4)), date(2024, 3, 4))

    def test_twelve_weeks_ending_this_week(self):
        counts = {"2023-12-20": 9, "2024-02-26": 4, "2024-03-04": 2, "2024-03-10": 1, "2023-12-17": 50}
        series = weekly_totals(counts, date(2024, 3, 10))
        self.assertEqual(len(series), 12)
        self.assertEqual(series[0]["week_start"], date(2023, 12, 18))
        self.assertEqual(series[0]["label"], "Dec")
        self.assertEqual(series[0]["total"], 9)
        self.assertEqual(series[-2]["total"], 4)
        self.assertEqual(series[-1], {"week_start": date(2024, 3, 4), "label": "Mar", "total": 3})
        self.assertEqual(sum(week["total"] for week in series), 16)

    def test_percent_change(self):
        self.assertEqual(percent_change(0, 0), "0%")
        self.assertEqual(percent_change(3, 0), "n/a")
        self.assertEqual(percent_change(3, 2), "+50%")
        self.assertEqual(percent_change(1, 3), "-67%")
        self.assertEqual(percent_change(5, 5), "0%")

    def test_activity_level(self):
        self.assertEqual(activity_level(0, 5), "Low")
        self.assertEqual(activity_level(5, 5), "Peak")
        self.assertEqual(activity_level(4, 6), "High")
        self.assertEqual(activity_level(2, 6), "Medium")
        self.assertEqual(activity_level(1, 6), "Low")
        self.assertEqual(activity_level(3, 0), "Low")


class TestWeekSummary(unittest.TestCase):
    def _counts(self):
        counts = {}
        day = date(2024, 2, 26)
        while day <= date(2024, 3, 10):
            counts[day.isoformat()] = 0
            day += timedelta(days=1)
        counts.update({"2024-02-26": 2, "2024-03-04": 3, "2024-03-05": 1})
        return counts

    def test_days_compare_with_the_week_before(self):
        summary = week_summary(self._counts(), date(2024, 3, 4), today=date(2024, 3, 6))
        self.assertEqual(summary["end"], date(2024, 3, 10))
        self.assertEqual(summary["total"], 4)
        self.assertEqual(summary["change"], "+100%")
        days = summary["days"]
        self.assertEqual([day["weekday"] for day in days][:2], ["Monday", "Tuesday"])
        self.assertEqual([day["change"] for day in days], ["+50%", "n/a", "0%", "", "", "", ""])
        self.assertEqual([day["level"] for day in days][:3], ["Peak", "Medium", "Low"])

    def test_without_previous_week(self):
        counts = {"2024-03-04": 2}
        summary = week_summary(counts, date(2024, 3, 4), today=date(2024, 3, 10))
        self.assertEqual(summary["change"], "n/a")
        self.assertTrue(all(day["change"] == "" for day in summary["days"]))


if __name__ == "__main__":
    unittest.main(verbosity=2)
