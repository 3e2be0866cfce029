"""Rollover scheduler tests."""

import asyncio
import threading
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from kaizen.services import scheduler as scheduler_module
from kaizen.services.scheduler import RolloverScheduler


def test_next_fire_is_next_midnight():
    scheduler = RolloverScheduler(lambda: None, cron="0 0 * * *", tz_name="UTC")
    after = datetime(2026, 3, 10, 13, 45, tzinfo=timezone.utc)
    assert scheduler.next_fire_time(after) == datetime(2026, 3, 11, 0, 0, tzinfo=timezone.utc)


def test_next_fire_respects_timezone():
    scheduler = RolloverScheduler(lambda: None, cron="0 0 * * *", tz_name="Asia/Tokyo")
    after = datetime(2026, 3, 10, 13, 45, tzinfo=timezone.utc)  # 22:45 in Tokyo
    fire = scheduler.next_fire_time(after)
    assert fire == datetime(2026, 3, 11, 0, 0, tzinfo=ZoneInfo("Asia/Tokyo"))
    assert fire.astimezone(timezone.utc) == datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


def test_invalid_cron_rejected():
    with pytest.raises(ValueError):
        RolloverScheduler(lambda: None, cron="every midnight")


def test_run_job_logs_and_swallows_failures(caplog):
    def broken():
        raise RuntimeError("db down")

    scheduler = RolloverScheduler(broken)
    with caplog.at_level("ERROR"):
        assert asyncio.run(scheduler.run_job()) is None
    assert "rollover_job_failed" in caplog.text


def test_run_job_runs_off_the_event_loop():
    loop_thread = threading.get_ident()
    scheduler = RolloverScheduler(threading.get_ident)
    assert asyncio.run(scheduler.run_job()) != loop_thread


def test_start_runs_once_then_stops():
    ran = threading.Event()
    scheduler = RolloverScheduler(ran.set, cron="0 0 1 1 *", run_on_start=True)

    async def scenario():
        scheduler.start()
        assert scheduler.running
        for _ in range(100):
            if ran.is_set():
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

    asyncio.run(scenario())

    assert ran.is_set()
    assert not scheduler.running


def test_early_wakeup_sleeps_the_remainder(monkeypatch):
    fire_at = datetime(2026, 3, 11, 0, 0, tzinfo=timezone.utc)
    clock = iter(
        [
            fire_at - timedelta(seconds=30),
            fire_at - timedelta(seconds=0.5),
            fire_at + timedelta(milliseconds=1),
        ]
    )
    scheduler = RolloverScheduler(lambda: None)
    monkeypatch.setattr(scheduler, "_now", lambda: next(clock))
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr(scheduler_module.asyncio, "sleep", fake_sleep)

    asyncio.run(scheduler._sleep_until(fire_at))

    # The monotonic sleep came back half a second before midnight; the job waits it out.
    assert sleeps == [30.0, 0.5]
