"""Cron-driven trigger for the daily rollover."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from croniter import croniter

logger = logging.getLogger(__name__)


class RolloverScheduler:
    """Runs ``job`` in a worker thread every time ``cron`` fires.

    The job is expected to be idempotent per calendar day, so firing late,
    twice, or once more at startup is harmless.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        *,
        cron: str = "0 0 * * *",
        tz_name: str = "UTC",
        run_on_start: bool = False,
    ) -> None:
        if not croniter.is_valid(cron):
            raise ValueError(f"Invalid cron expression: {cron!r}")
        self.job = job
        self.cron = cron
        self.tz = ZoneInfo(tz_name)
        self.run_on_start = run_on_start
        self._task: asyncio.Task | None = None

    def next_fire_time(self, after: datetime | None = None) -> datetime:
        base = after or datetime.now(self.tz)
        if base.tzinfo is None:
            base = base.replace(tzinfo=self.tz)
        return croniter(self.cron, base.astimezone(self.tz)).get_next(datetime)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="rollover-scheduler")
        logger.info("rollover_scheduler_started cron=%r tz=%s next=%s", self.cron, self.tz.key, self.next_fire_time().isoformat())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("rollover_scheduler_stopped")

    async def run_job(self) -> Any:
        """Run the job once, logging rather than raising on failure."""
        try:
            return await asyncio.to_thread(self.job)
        except Exception:  # noqa: BLE001 - keep the schedule alive
            logger.exception("rollover_job_failed")
            return None

    def _now(self) -> datetime:
        return datetime.now(self.tz)

    async def _sleep_until(self, fire_at: datetime) -> None:
        # asyncio.sleep follows the monotonic clock and may wake early by wall time.
        while True:
            remaining = (fire_at - self._now()).total_seconds()
            if remaining <= 0:
                return
            await asyncio.sleep(remaining)

    async def _loop(self) -> None:
        if self.run_on_start:
            await self.run_job()
        last_fire: datetime | None = None
        while True:
            now = self._now()
            fire_at = self.next_fire_time(max(now, last_fire) if last_fire else now)
            logger.debug(
                "rollover_scheduler_sleep seconds=%.0f fire_at=%s",
                (fire_at - now).total_seconds(),
                fire_at.isoformat(),
            )
            await self._sleep_until(fire_at)
            await self.run_job()
            last_fire = fire_at
