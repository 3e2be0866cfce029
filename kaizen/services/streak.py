"""Streak evaluation for a closed day."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from kaizen.core.errors import GameRuleError
from kaizen.models.task import TaskStatus


class DaySummary(NamedTuple):
    completed_tasks: int
    total_tasks: int
    success: bool


def evaluate_day(tasks_for_day: Iterable, min_tasks_for_success: int) -> DaySummary:
    """Summarize one user's day.

    A day succeeds only when it had tasks, every one of them was completed,
    and at least ``min_tasks_for_success`` were completed. Empty days never
    count.
    """
    if min_tasks_for_success < 0:
        raise GameRuleError("min_tasks_for_success must be >= 0")
    statuses = [task.status for task in tasks_for_day]
    total = len(statuses)
    completed = sum(1 for status in statuses if status == TaskStatus.completed)
    success = total > 0 and completed == total and completed >= min_tasks_for_success
    return DaySummary(completed, total, success)


def update_streak(stats, success: bool) -> None:
    if success:
        stats.current_streak += 1
        if stats.current_streak > stats.highest_streak:
            stats.highest_streak = stats.current_streak
    else:
        stats.current_streak = 0
