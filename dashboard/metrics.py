from __future__ import annotations

import calendar
import math
from datetime import date, timedelta

from dashboard.constants import MONTH_NAMES, WEEKDAY_NAMES


def round1(value):
    return math.floor(value * 10 + 0.5) / 10


def month_days_considered(year, month, today, range_mode="mtd"):
    last_day = calendar.monthrange(year, month)[1]
    is_current_month = today.year == year and today.month == month
    end_day = last_day if range_mode == "full" or not is_current_month else today.day
    return [date(year, month, day) for day in range(1, end_day + 1)]


def _count_map(data):
    if data is None or data.empty:
        return {}, {}
    counts = {row["date"]: int(row.get("count", 0) or 0) for _, row in data.iterrows()}
    difficulty = {row["date"]: int(row.get("difficulty_sum", 0) or 0) for _, row in data.iterrows()}
    return counts, difficulty


def current_streak(days, counts, anchor_index):
    streak = 0
    for index in range(anchor_index, -1, -1):
        if counts.get(days[index], 0) > 0:
            streak += 1
        else:
            break
    return streak


def compute_key_metrics(data, year, month, today, momentum_threshold, range_mode="mtd", use_difficulty=True):
    """Streak, consistency, average difficulty and tasks per day for one month.

    ``data`` is a frame with ``date``, ``count`` and ``difficulty_sum`` columns.
    The streak ends today for the current month, otherwise at the last
    considered day. Average difficulty falls back to completion counts scaled
    against the momentum threshold when difficulty sums are not available.
    """
    counts, difficulty = _count_map(data)
    days = month_days_considered(year, month, today, range_mode)
    if not days:
        return {"streak_days": 0, "consistency_pct": 0, "avg_difficulty": 0, "avg_tasks_per_day": 0}

    is_current_month = today.year == year and today.month == month
    anchor_index = min(len(days) - 1, today.day - 1) if is_current_month else len(days) - 1
    streak = current_streak(days, counts, anchor_index)

    day_counts = [counts.get(day, 0) for day in days]
    active_days = sum(1 for count in day_counts if count > 0)
    consistency = int(math.floor(active_days / len(days) * 100 + 0.5))

    total_tasks = sum(day_counts)
    if use_difficulty and total_tasks > 0:
        total_difficulty = sum(difficulty.get(day, 0) for day in days)
        avg_difficulty = round1(total_difficulty / total_tasks)
    else:
        scale = max(1, momentum_threshold)
        intensities = [min(5, (count / scale) * 5) for count in day_counts if count > 0]
        avg_difficulty = round1(sum(intensities) / len(intensities)) if intensities else 0

    return {
        "streak_days": streak,
        "consistency_pct": consistency,
        "avg_difficulty": avg_difficulty,
        "avg_tasks_per_day": round1(total_tasks / len(days)),
    }


def week_start(day):
    return day - timedelta(days=day.weekday())


def _count_on(counts, day):
    return int(counts.get(day.isoformat(), 0) or 0)


def weekly_totals(counts, today, weeks=12):
    """Completed tasks per Monday-start week, oldest first, ending with the week of ``today``.

    ``counts`` maps ISO dates to completion counts.
    """
    last_start = week_start(today)
    series = []
    for offset in range(weeks - 1, -1, -1):
        start = last_start - timedelta(weeks=offset)
        total = sum(_count_on(counts, start + timedelta(days=index)) for index in range(7))
        series.append({"week_start": start, "label": MONTH_NAMES[start.month - 1][:3], "total": total})
    return series


def percent_change(current, previous):
    if previous == 0:
        return "0%" if current == 0 else "n/a"
    change = int(math.floor((current - previous) / previous * 100 + 0.5))
    if change == 0:
        return "0%"
    return f"{change:+d}%"


def activity_level(count, week_max):
    if week_max <= 0 or count <= 0:
        return "Low"
    if count == week_max:
        return "Peak"
    ratio = count / week_max
    if ratio >= 0.66:
        return "High"
    if ratio >= 0.33:
        return "Medium"
    return "Low"


def week_summary(counts, start, today):
    """Seven day rows for the week starting ``start`` plus the change against the week before.

    A day's change compares it with the same weekday one week earlier and is
    left blank for future days or when that earlier day was never loaded.
    """
    days = [start + timedelta(days=index) for index in range(7)]
    current = [_count_on(counts, day) for day in days]
    previous_keys = [(day - timedelta(days=7)).isoformat() for day in days]
    week_max = max(current)

    rows = []
    for index, day in enumerate(days):
        previous_key = previous_keys[index]
        change = ""
        if day <= today and previous_key in counts:
            change = percent_change(current[index], int(counts[previous_key] or 0))
        rows.append(
            {
                "date": day,
                "weekday": WEEKDAY_NAMES[index],
                "count": current[index],
                "change": change,
                "level": activity_level(current[index], week_max),
            }
        )

    total = sum(current)
    if any(key in counts for key in previous_keys):
        change = percent_change(total, sum(int(counts.get(key, 0) or 0) for key in previous_keys))
    else:
        change = "n/a"
    return {"start": start, "end": days[-1], "total": total, "change": change, "days": rows}
