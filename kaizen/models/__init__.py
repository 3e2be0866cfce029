"""SQLAlchemy models."""

from __future__ import annotations

from kaizen.models.activity_log import ActivityLog
from kaizen.models.task import Task, TaskStatus, TaskType
from kaizen.models.user import User
from kaizen.models.user_stats import UserStats

__all__ = [
    "User",
    "UserStats",
    "Task",
    "TaskStatus",
    "TaskType",
    "ActivityLog",
]
