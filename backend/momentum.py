"""System health scoring.

Measures momentum as consistency times effort, using difficulty-weighted
completion over a recent window of days:

    system_health = (sum(weighted_daily_scores) / days) * 100
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

# Harder tasks count for more effort.
DIFFICULTY_POINTS = {
    1: 1,
    2: 2,
    3: 3,
    4: 5,
    5: 8,
}
DEFAULT_DIFFICULTY_POINTS = 3

MOMENTUM_WEIGHTS = {
    "active": 1.0,
    "neutral": 0.4,
    "inactive": 0.1,
}

ACTIVE_RATIO = 0.6
DEFAULT_WINDOW_SIZE = 7
DAY_TYPES = ("active", "neutral", "inactive")


@dataclass(frozen=True)
class Task:
    difficulty: int


@dataclass
class MomentumDay:
    date: str
    scheduled_tasks: List[Task] = field(default_factory=list)
    completed_tasks: List[Task] = field(default_factory=list)


@dataclass
class SystemHealthResult:
    percent: int
    breakdown: Dict[str, int]

    def as_dict(self) -> dict:
        return {"percent": self.percent, "breakdown": dict(self.breakdown)}


def _empty_breakdown() -> Dict[str, int]:
    return {day_type: 0 for day_type in DAY_TYPES}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_effort(tasks: Sequence[Task]) -> int:
    total = 0
    for task in tasks:
        difficulty = task.difficulty
        assert isinstance(difficulty, (int, float)) and not isinstance(difficulty, bool), (
            f"difficulty must be numeric, got {difficulty!r}"
        )
        total += DIFFICULTY_POINTS.get(difficulty, DEFAULT_DIFFICULTY_POINTS)
    return total


def get_day_type(completed_effort: float, scheduled_effort: float) -> str:
    """Active at >= 60% of scheduled effort, neutral above zero, else inactive."""
    if scheduled_effort == 0:
        return "inactive"

    completion_ratio = completed_effort / scheduled_effort
    if completion_ratio >= ACTIVE_RATIO:
        return "active"
    return "neutral" if completion_ratio > 0 else "inactive"


def calculate_daily_score(completed_effort: float, scheduled_effort: float) -> float:
    if scheduled_effort == 0:
        return 0.0
    # One perfect day never exceeds 1.0.
    return min(1.0, completed_effort / max(scheduled_effort, 1))


def calculate_weighted_daily_score(daily_score: float, day_type: str) -> float:
    if day_type == "inactive":
        return MOMENTUM_WEIGHTS["inactive"]
    weight = MOMENTUM_WEIGHTS["active"] if day_type == "active" else MOMENTUM_WEIGHTS["neutral"]
    return daily_score * weight


def calculate_system_health(
    days: Sequence[MomentumDay],
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> SystemHealthResult:
    """Score the first ``window_size`` entries of ``days``.

    Callers decide the order and pre-slice to the window they mean; only the
    leading entries are read.
    """
    if not days:
        return SystemHealthResult(percent=0, breakdown=_empty_breakdown())

    assert isinstance(window_size, int) and window_size > 0, "window_size must be a positive int"

    breakdown = _empty_breakdown()
    weighted_score_sum = 0.0
    days_to_analyze = min(len(days), window_size)

    for day in days[:days_to_analyze]:
        scheduled_effort = calculate_effort(day.scheduled_tasks)
        completed_effort = calculate_effort(day.completed_tasks)

        daily_score = calculate_daily_score(completed_effort, scheduled_effort)
        day_type = get_day_type(completed_effort, scheduled_effort)

        breakdown[day_type] += 1
        weighted_score_sum += calculate_weighted_daily_score(daily_score, day_type)

    percent = _round_half_up((weighted_score_sum / days_to_analyze) * 100)
    return SystemHealthResult(percent=max(0, min(100, percent)), breakdown=breakdown)
