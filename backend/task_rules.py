from __future__ import annotations

import math

TASK_TYPES = ("recurring", "one_off")
TASK_PRIORITY_LEVELS = ("none", "low", "medium", "high")
TASK_CATEGORIES = (
    "Uncategorized",
    "Training",
    "Creative",
    "Health",
    "General",
)

DEFAULT_DIFFICULTY = 3
DEFAULT_MOMENTUM_THRESHOLD = 5
MIN_MOMENTUM_THRESHOLD = 1
MAX_MOMENTUM_THRESHOLD = 20

REACTIVATION_BLOCKED_MESSAGE = "One-off tasks cannot be reactivated after completion"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_task_type(value) -> str:
    return value if value in TASK_TYPES else "recurring"


def normalize_priority(value) -> str:
    return value if value in TASK_PRIORITY_LEVELS else "none"


def normalize_difficulty(value) -> int:
    if _is_number(value) and 1 <= value <= 5:
        return int(math.floor(value))
    return DEFAULT_DIFFICULTY


def should_appear_in_checklist(template: dict, has_completed_log: bool) -> bool:
    if has_completed_log:
        return False
    if template.get("task_type") == "one_off":
        return not template.get("archived_at")
    return bool(template.get("is_active")) and not template.get("archived_at")


def can_reactivate(template: dict, has_completed_log: bool) -> bool:
    return not (template.get("task_type") == "one_off" and has_completed_log)


def should_auto_archive(task_type: str) -> bool:
    return task_type == "one_off"


def can_convert_to_one_off(task_type: str, completion_count: int) -> bool:
    # Converting would hide the task's history from the checklist.
    return not (task_type == "recurring" and completion_count > 0)


def conversion_error(completion_count: int) -> str:
    return (
        f"Cannot convert: task has {completion_count} completion log(s). "
        "Delete logs first or create a new one-off task."
    )


def clamp_momentum_threshold(value) -> int:
    if not _is_number(value) or not math.isfinite(value):
        return DEFAULT_MOMENTUM_THRESHOLD
    rounded = int(math.floor(value + 0.5))
    return min(MAX_MOMENTUM_THRESHOLD, max(MIN_MOMENTUM_THRESHOLD, rounded))
