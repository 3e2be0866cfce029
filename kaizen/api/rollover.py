"""Manual rollover trigger. Only mounted when debug is enabled."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from kaizen.core.deps import get_current_user
from kaizen.models.user import User
from kaizen.schemas.stats import RolloverReportOut
from kaizen.services.rollover_service import run_daily_rollover

router = APIRouter(prefix="/api/rollover", tags=["rollover"])


@router.post("/run", response_model=RolloverReportOut)
def run_rollover(
    today: date | None = Query(default=None),
    current_user: User = Depends(get_current_user),
):
    """Close every outstanding day up to ``today`` for all users."""
    report = run_daily_rollover(today=today)
    return RolloverReportOut(
        today=report.today,
        users=report.users,
        processed=report.processed,
        skipped=report.skipped,
        failed=report.failed,
        days_closed=report.days_closed,
        failed_user_ids=report.failed_user_ids,
    )
