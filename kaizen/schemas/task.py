"""Task schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from kaizen.models.task import TaskStatus, TaskType


class RepeatConfig(BaseModel):
    enabled: bool = False
    days_of_week: list[int] = Field(default_factory=list, description="0=Monday ... 6=Sunday")

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("days_of_week values must be between 0 and 6")
        return sorted(set(v))


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    type: TaskType
    assigned_date: date
    repeat_config: RepeatConfig = Field(default_factory=RepeatConfig)
    exp_reward: int | None = Field(default=None, ge=0)
    coin_reward: int | None = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class TaskStatusFlags(BaseModel):
    """Legacy status shape: three independent booleans."""

    completed: bool = False
    failed: bool = False
    pending: bool = False


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    type: TaskType | None = None
    assigned_date: date | None = None
    repeat_config: RepeatConfig | None = None
    exp_reward: int | None = Field(default=None, ge=0)
    coin_reward: int | None = Field(default=None, ge=0)
    status_flags: TaskStatusFlags | None = None


class TaskOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    type: TaskType
    assigned_date: date
    repeat_config: RepeatConfig
    status: TaskStatus
    status_flags: TaskStatusFlags
    delay_count: int
    exp_reward: int
    coin_reward: int
    heart_loss: int
    coin_loss: int
    created_at: datetime
    completed_at: datetime | None

    @model_validator(mode="before")
    @classmethod
    def hydrate_nested(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value
        status = value.status
        return {
            "id": value.id,
            "user_id": value.user_id,
            "title": value.title,
            "description": value.description,
            "type": value.type,
            "assigned_date": value.assigned_date,
            "repeat_config": {"enabled": value.repeat_enabled, "days_of_week": value.repeat_days or []},
            "status": status,
            "status_flags": TaskStatus(status).as_flags(),
            "delay_count": value.delay_count,
            "exp_reward": value.exp_reward,
            "coin_reward": value.coin_reward,
            "heart_loss": value.heart_loss,
            "coin_loss": value.coin_loss,
            "created_at": value.created_at,
            "completed_at": value.completed_at,
        }

    model_config = {"from_attributes": True}
