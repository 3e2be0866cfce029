"""Stats service: guarded stat mutations and read-only projections."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from kaizen.core.config import settings
from kaizen.core.errors import StatsConflictError
from kaizen.core.game_rules import GameRules
from kaizen.models.activity_log import ActivityLog
from kaizen.models.task import Task, TaskType
from kaizen.models.user_stats import UserStats
from kaizen.services.stores import get_or_create_stats, get_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEATMAP_DAYS = 365


def mutate_stats(
    db: Session,
    user_id: int,
    mutate: Callable[[UserStats], T],
    *,
    rules: GameRules,
    retries: int | None = None,
) -> tuple[UserStats, T]:
    """Run a read-modify-write on a user's stats as one critical section.

    ``mutate`` receives freshly loaded stats and may change them (and any
    other rows it loads through ``db``). The commit is guarded by the stats
    version column; if another writer got there first the transaction is
    rolled back and ``mutate`` runs again on the new state.
    """
    attempts = settings.stats_conflict_retries if retries is None else retries
    if attempts < 1:
        raise ValueError(f"retries must be >= 1, got {attempts}")
    for attempt in range(1, attempts + 1):
        stats = get_or_create_stats(db, user_id, rules)
        try:
            result = mutate(stats)
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.warning("stats_conflict user_id=%s attempt=%s/%s", user_id, attempt, attempts)
            continue
        except Exception:
            db.rollback()
            raise
        db.refresh(stats)
        return stats, result
    raise StatsConflictError(user_id, attempts)


def get_or_create_user_stats(db: Session, user_id: int, rules: GameRules) -> UserStats:
    stats = get_or_create_stats(db, user_id, rules)
    db.commit()
    db.refresh(stats)
    return stats


def get_streak(db: Session, user_id: int) -> dict[str, int]:
    stats = get_stats(db, user_id)
    if not stats:
        return {"current_streak": 0, "highest_streak": 0}
    return {"current_streak": stats.current_streak, "highest_streak": stats.highest_streak}


def get_task_counts(db: Session, user_id: int) -> dict[str, int]:
    """Number of tasks per type."""
    rows = db.execute(
        select(Task.type, func.count(Task.id)).where(Task.user_id == user_id).group_by(Task.type)
    ).all()
    counts = {"habits": 0, "todos": 0, "challenges": 0}
    keys = {TaskType.habit: "habits", TaskType.todo: "todos", TaskType.challenge: "challenges"}
    for task_type, count in rows:
        counts[keys[TaskType(task_type)]] = count
    return counts


def get_heatmap(db: Session, user_id: int, today: date) -> list[dict[str, Any]]:
    """Daily completion ratio for the last year, oldest first."""
    since = today - timedelta(days=HEATMAP_DAYS)
    logs = db.execute(
        select(ActivityLog)
        .where(ActivityLog.user_id == user_id, ActivityLog.date >= since)
        .order_by(ActivityLog.date.asc())
    ).scalars().all()
    return [
        {
            "date": log.date,
            "intensity": log.completed_tasks / log.total_tasks if log.total_tasks > 0 else 0.0,
            "completed_tasks": log.completed_tasks,
            "total_tasks": log.total_tasks,
        }
        for log in logs
    ]
