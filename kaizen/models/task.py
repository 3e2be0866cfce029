"""Task model."""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from kaizen.core.errors import DataIntegrityError
from kaizen.db.base import Base


class TaskType(str, enum.Enum):
    todo = "todo"
    habit = "habit"
    challenge = "challenge"


class TaskStatus(str, enum.Enum):
    """Lifecycle of a task. Exactly one state is active at a time."""

    pending = "pending"
    completed = "completed"
    failed = "failed"

    @classmethod
    def from_flags(cls, completed: bool = False, failed: bool = False, pending: bool = False) -> "TaskStatus":
        """Convert the legacy three-boolean status shape.

        More than one true flag is ambiguous and is reported, not guessed at.
        A task with no flag set has never been touched and is pending.
        """
        active = [name for name, flag in (("completed", completed), ("failed", failed), ("pending", pending)) if flag]
        if len(active) > 1:
            raise DataIntegrityError(f"Task status has conflicting flags set: {', '.join(active)}")
        if not active:
            return cls.pending
        return cls(active[0])

    def as_flags(self) -> dict[str, bool]:
        return {member.value: member is self for member in TaskStatus}


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_assigned_date", "user_id", "assigned_date"),
        Index("ix_tasks_user_type", "user_id", "type"),
        Index("ix_tasks_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[TaskType] = mapped_column(
        Enum(TaskType, name="task_type", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    assigned_date: Mapped[date] = mapped_column(Date, nullable=False)
    repeat_enabled: Mapped[bool] = mapped_column(nullable=False, default=False)
    repeat_days: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=TaskStatus.pending,
    )
    delay_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exp_reward: Mapped[int] = mapped_column(Integer, nullable=False)
    coin_reward: Mapped[int] = mapped_column(Integer, nullable=False)
    heart_loss: Mapped[int] = mapped_column(Integer, nullable=False)
    coin_loss: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
