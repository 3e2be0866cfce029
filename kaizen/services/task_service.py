"""Task service: CRUD plus interactive completion and failure."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from kaizen.core.game_rules import GameRules
from kaizen.models.task import Task, TaskStatus, TaskType
from kaizen.models.user_stats import UserStats
from kaizen.schemas.task import TaskCreate, TaskUpdate
from kaizen.services.progression import apply_penalty_batch, grant_experience
from kaizen.services.stats_service import mutate_stats
from kaizen.services.stores import save_task

logger = logging.getLogger(__name__)


def create_task(db: Session, user_id: int, data: TaskCreate, rules: GameRules) -> Task:
    """Create a task. Rewards default to the configured values.

    ``heart_loss``/``coin_loss`` quote the current penalty; whatever the rules
    say when the task is actually charged is what gets applied.
    """
    task = Task(
        user_id=user_id,
        title=data.title,
        description=data.description,
        type=data.type,
        assigned_date=data.assigned_date,
        repeat_enabled=data.repeat_config.enabled,
        repeat_days=data.repeat_config.days_of_week,
        status=TaskStatus.pending,
        delay_count=0,
        exp_reward=data.exp_reward if data.exp_reward is not None else rules.task_completion_exp,
        coin_reward=data.coin_reward if data.coin_reward is not None else rules.task_completion_coins,
        heart_loss=rules.task_failure_heart_loss,
        coin_loss=rules.task_failure_coin_loss,
    )
    save_task(db, task)
    db.commit()
    db.refresh(task)
    return task


def list_tasks(
    db: Session,
    user_id: int,
    *,
    task_type: TaskType | None = None,
    on_date: date | None = None,
    status: TaskStatus | None = None,
) -> list[Task]:
    stmt = select(Task).where(Task.user_id == user_id)
    if task_type is not None:
        stmt = stmt.where(Task.type == task_type)
    if on_date is not None:
        stmt = stmt.where(Task.assigned_date == on_date)
    if status is not None:
        stmt = stmt.where(Task.status == status)
    stmt = stmt.order_by(Task.assigned_date.asc(), Task.created_at.asc(), Task.id.asc())
    return list(db.execute(stmt).scalars().all())


def get_task(db: Session, user_id: int, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task or task.user_id != user_id:
        raise ValueError("Task not found")
    return task


def update_task(db: Session, user_id: int, task_id: int, data: TaskUpdate) -> Task:
    task = get_task(db, user_id, task_id)
    if data.title is not None:
        task.title = data.title.strip()
    if data.description is not None:
        task.description = data.description
    if data.type is not None:
        task.type = data.type
    if data.assigned_date is not None:
        task.assigned_date = data.assigned_date
    if data.repeat_config is not None:
        task.repeat_enabled = data.repeat_config.enabled
        task.repeat_days = data.repeat_config.days_of_week
    if data.exp_reward is not None:
        task.exp_reward = data.exp_reward
    if data.coin_reward is not None:
        task.coin_reward = data.coin_reward
    if data.status_flags is not None:
        requested = TaskStatus.from_flags(
            completed=data.status_flags.completed,
            failed=data.status_flags.failed,
            pending=data.status_flags.pending,
        )
        if requested != task.status:
            # Rewards and penalties are only settled by complete/fail; the only
            # direct transition allowed is reopening a failed task.
            if requested != TaskStatus.pending or task.status != TaskStatus.failed:
                raise ValueError("Use the complete or fail endpoints to change task status")
            task.status = TaskStatus.pending
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, user_id: int, task_id: int) -> None:
    task = get_task(db, user_id, task_id)
    db.delete(task)
    db.commit()


class CompletionResult(NamedTuple):
    task: Task
    stats: UserStats
    levels_gained: int
    already_completed: bool


def complete_task(db: Session, user_id: int, task_id: int, rules: GameRules) -> CompletionResult:
    """Mark a task completed and pay out its rewards.

    Completing a task twice pays nothing the second time.
    """

    def _complete(stats: UserStats) -> tuple[Task, int | None]:
        task = get_task(db, user_id, task_id)
        if task.status == TaskStatus.completed:
            return task, None
        if task.status == TaskStatus.failed:
            raise ValueError("Task has already failed")

        task.status = TaskStatus.completed
        task.completed_at = datetime.now(timezone.utc)
        levels_gained = grant_experience(stats, task.exp_reward, rules)
        stats.coins += task.coin_reward
        return task, levels_gained

    stats, (task, levels_gained) = mutate_stats(db, user_id, _complete, rules=rules)
    db.refresh(task)
    if levels_gained:
        logger.info("level_up user_id=%s levels=%s level=%s", user_id, levels_gained, stats.level)
    return CompletionResult(task, stats, levels_gained or 0, levels_gained is None)


def fail_task(db: Session, user_id: int, task_id: int, rules: GameRules) -> tuple[Task, UserStats, bool]:
    """Give up on a pending task and take its heart and coin penalty.

    Returns ``(task, stats, heart_zero_penalty_fired)``.
    """

    def _fail(stats: UserStats) -> tuple[Task, bool]:
        task = get_task(db, user_id, task_id)
        if task.status == TaskStatus.failed:
            return task, False
        if task.status == TaskStatus.completed:
            raise ValueError("Task is already completed")

        task.status = TaskStatus.failed
        task.heart_loss = rules.task_failure_heart_loss
        task.coin_loss = rules.task_failure_coin_loss
        fired = apply_penalty_batch(stats, [(task.heart_loss, task.coin_loss)], rules)
        return task, fired

    stats, (task, fired) = mutate_stats(db, user_id, _fail, rules=rules)
    db.refresh(task)
    if fired:
        logger.info("heart_zero_penalty user_id=%s source=task_failed task_id=%s", user_id, task_id)
    return task, stats, fired
