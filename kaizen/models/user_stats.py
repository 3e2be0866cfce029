"""Per-user game stats."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from kaizen.db.base import Base


class UserStats(Base):
    """Level, experience, hearts, coins and streak counters for one user.

    ``version_id`` is the optimistic lock: every flush bumps it and an
    UPDATE against a stale version raises ``StaleDataError``.
    """

    __tablename__ = "user_stats"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_user_stats_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    current_exp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_exp: Mapped[int] = mapped_column(Integer, nullable=False)
    hearts: Mapped[int] = mapped_column(Integer, nullable=False)
    max_hearts: Mapped[int] = mapped_column(Integer, nullable=False)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    highest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_closed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_activity_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
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

    __mapper_args__ = {"version_id_col": version_id}
