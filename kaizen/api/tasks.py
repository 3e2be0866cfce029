"""Tasks API."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kaizen.core.deps import get_current_user, get_game_rules
from kaizen.core.errors import DataIntegrityError, StatsConflictError
from kaizen.core.game_rules import GameRules
from kaizen.db.session import get_db
from kaizen.models.task import TaskStatus, TaskType
from kaizen.models.user import User
from kaizen.schemas.stats import TaskCompletionResponse, TaskFailureResponse, UserStatsOut
from kaizen.schemas.task import TaskCreate, TaskOut, TaskUpdate
from kaizen.services.task_service import (
    complete_task,
    create_task,
    delete_task,
    fail_task,
    get_task,
    list_tasks,
    update_task,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


def _http_error(e: Exception) -> HTTPException:
    detail = str(e)
    if isinstance(e, StatsConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    if isinstance(e, DataIntegrityError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)
    if "not found" in detail.lower():
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=list[TaskOut])
def list_my_tasks(
    type: TaskType | None = Query(default=None),
    on_date: date | None = Query(default=None, alias="date"),
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List tasks, optionally filtered by type, assigned date and status."""
    return list_tasks(db, current_user.id, task_type=type, on_date=on_date, status=task_status)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rules: GameRules = Depends(get_game_rules),
):
    return create_task(db, current_user.id, data, rules)


@router.get("/{task_id}", response_model=TaskOut)
def get_one(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return get_task(db, current_user.id, task_id)
    except ValueError as e:
        raise _http_error(e)


@router.put("/{task_id}", response_model=TaskOut)
def update(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return update_task(db, current_user.id, task_id, data)
    except (ValueError, DataIntegrityError) as e:
        db.rollback()
        raise _http_error(e)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        delete_task(db, current_user.id, task_id)
    except ValueError as e:
        raise _http_error(e)


@router.post("/{task_id}/complete", response_model=TaskCompletionResponse)
def complete(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rules: GameRules = Depends(get_game_rules),
):
    """Mark a task completed and collect its experience and coins."""
    try:
        result = complete_task(db, current_user.id, task_id, rules)
    except (ValueError, StatsConflictError) as e:
        logger.info("task_complete_rejected user_id=%s task_id=%s reason=%s", current_user.id, task_id, e)
        raise _http_error(e)
    return TaskCompletionResponse(
        task=TaskOut.model_validate(result.task),
        stats=UserStatsOut.model_validate(result.stats),
        levels_gained=result.levels_gained,
        message="Task already completed" if result.already_completed else None,
    )


@router.post("/{task_id}/fail", response_model=TaskFailureResponse)
def fail(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rules: GameRules = Depends(get_game_rules),
):
    """Give up on a task and take its heart and coin penalty."""
    try:
        task, stats, fired = fail_task(db, current_user.id, task_id, rules)
    except (ValueError, StatsConflictError) as e:
        raise _http_error(e)
    return TaskFailureResponse(
        task=TaskOut.model_validate(task),
        stats=UserStatsOut.model_validate(stats),
        heart_zero_penalty=fired,
    )
