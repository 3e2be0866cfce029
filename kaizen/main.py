"""Kaizen FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from kaizen.api import auth, health, rollover, stats, tasks
from kaizen.core.config import settings
from kaizen.core.game_rules import load_game_rules
from kaizen.services.rollover_service import run_daily_rollover
from kaizen.services.scheduler import RolloverScheduler

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_game_rules()
    scheduler: RolloverScheduler | None = None
    if settings.rollover_enabled:
        scheduler = RolloverScheduler(
            run_daily_rollover,
            cron=settings.rollover_cron,
            tz_name=settings.rollover_timezone,
            run_on_start=settings.rollover_run_on_startup,
        )
        scheduler.start()
    else:
        logger.info("rollover_scheduler_disabled")
    app.state.rollover_scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(stats.router)

# Manual rollover is a debugging aid; production relies on the scheduler.
if settings.debug:
    app.include_router(rollover.router)
