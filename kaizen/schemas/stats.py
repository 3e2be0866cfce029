"""Stats schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel

from kaizen.schemas.task import TaskOut


class UserStatsOut(BaseModel):
    level: int
    current_exp: int
    max_exp: int
    hearts: int
    max_hearts: int
    coins: int
    current_streak: int
    highest_streak: int
    last_activity_date: datetime | None

    model_config = {"from_attributes": True}


class StreakOut(BaseModel):
    current_streak: int
    highest_streak: int


class TaskCountsOut(BaseModel):
    habits: int
    todos: int
    challenges: int


class HeatmapDay(BaseModel):
    date: date
    intensity: float
    completed_tasks: int
    total_tasks: int


class TaskCompletionResponse(BaseModel):
    task: TaskOut
    stats: UserStatsOut
    levels_gained: int = 0
    message: str | None = None


class TaskFailureResponse(BaseModel):
    task: TaskOut
    stats: UserStatsOut
    heart_zero_penalty: bool = False


class RolloverReportOut(BaseModel):
    today: date
    users: int
    processed: int
    skipped: int
    failed: int
    days_closed: int
    failed_user_ids: list[int]
