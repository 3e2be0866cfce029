"""Stats API: read-only views of the game state."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kaizen.core.deps import get_current_user, get_game_rules
from kaizen.core.game_rules import GameRules
from kaizen.db.session import get_db
from kaizen.models.user import User
from kaizen.schemas.stats import HeatmapDay, StreakOut, TaskCountsOut, UserStatsOut
from kaizen.services.rollover_service import current_day
from kaizen.services.stats_service import get_heatmap, get_or_create_user_stats, get_streak, get_task_counts

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=UserStatsOut)
def get_my_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rules: GameRules = Depends(get_game_rules),
):
    return get_or_create_user_stats(db, current_user.id, rules)


@router.get("/streak", response_model=StreakOut)
def get_my_streak(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_streak(db, current_user.id)


@router.get("/counts", response_model=TaskCountsOut)
def get_my_task_counts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Task counts by type."""
    return get_task_counts(db, current_user.id)


@router.get("/heatmap", response_model=list[HeatmapDay])
def get_my_heatmap(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Completion ratio per closed day over the last year."""
    return get_heatmap(db, current_user.id, current_day())
