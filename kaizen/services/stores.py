"""Storage collaborators used by the game engine.

Thin SQLAlchemy queries keyed by user, task and activity day. None of these
commit; callers own the transaction.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kaizen.core.errors import DataIntegrityError
from kaizen.core.game_rules import GameRules
from kaizen.models.activity_log import ActivityLog
from kaizen.models.task import Task, TaskStatus
from kaizen.models.user import User
from kaizen.models.user_stats import UserStats
from kaizen.services.progression import initial_stats


def find_tasks_by_user_and_date_range(db: Session, user_id: int, start: date, end: date) -> list[Task]:
    """Tasks assigned to ``user_id`` between ``start`` and ``end`` inclusive."""
    result = db.execute(
        select(Task)
        .where(Task.user_id == user_id, Task.assigned_date >= start, Task.assigned_date <= end)
        .order_by(Task.assigned_date.asc(), Task.id.asc())
    )
    return list(result.scalars().all())


def find_pending_tasks_by_user_and_date_range(
    db: Session, user_id: int, start: date | None, end: date
) -> list[Task]:
    """Pending tasks up to ``end`` inclusive; ``start=None`` leaves the range open below."""
    stmt = select(Task).where(
        Task.user_id == user_id,
        Task.assigned_date <= end,
        Task.status == TaskStatus.pending,
    )
    if start is not None:
        stmt = stmt.where(Task.assigned_date >= start)
    result = db.execute(stmt.order_by(Task.assigned_date.asc(), Task.id.asc()))
    return list(result.scalars().all())


def save_task(db: Session, task: Task) -> Task:
    db.add(task)
    db.flush()
    return task


def get_stats(db: Session, user_id: int) -> UserStats | None:
    return db.execute(select(UserStats).where(UserStats.user_id == user_id)).scalar_one_or_none()


def get_or_create_stats(db: Session, user_id: int, rules: GameRules) -> UserStats:
    stats = get_stats(db, user_id)
    if stats:
        return stats

    stats = UserStats(user_id=user_id, **initial_stats(rules))
    db.add(stats)
    try:
        db.flush()
        return stats
    except IntegrityError:
        # Concurrent request created the row first; load and return it.
        db.rollback()
        existing = get_stats(db, user_id)
        if existing:
            return existing
        raise


def save_stats(db: Session, stats: UserStats) -> UserStats:
    db.add(stats)
    db.flush()
    return stats


def upsert_activity_log(
    db: Session,
    user_id: int,
    day: date,
    *,
    completed_tasks: int,
    total_tasks: int,
    success: bool,
) -> ActivityLog:
    """Write the summary for ``(user_id, day)``, overwriting any earlier one."""
    rows = list(
        db.execute(
            select(ActivityLog).where(ActivityLog.user_id == user_id, ActivityLog.date == day)
        ).scalars().all()
    )
    if len(rows) > 1:
        raise DataIntegrityError(f"Found {len(rows)} activity logs for user {user_id} on {day.isoformat()}")

    log = rows[0] if rows else ActivityLog(user_id=user_id, date=day)
    log.completed_tasks = completed_tasks
    log.total_tasks = total_tasks
    log.success = success
    db.add(log)
    db.flush()
    return log


def list_all_user_ids(db: Session) -> list[int]:
    result = db.execute(select(User.id).where(User.is_active.is_(True)).order_by(User.id.asc()))
    return list(result.scalars().all())
