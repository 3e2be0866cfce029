"""Daily rollover: closes out a calendar day for every user.

For one ``(user_id, closing_date)`` the steps run strictly in this order,
inside a single transaction:

1. collect pending tasks dated on or before the day
2. advance them to the next day and bump ``delay_count``
3. charge each one the current heart/coin penalty, then the heart-zero
   penalty at most once for the whole batch
4. summarize the day and upsert its activity log
5. update the streak
6. refill hearts
7. stamp the stats record
8. commit

Penalty comes before refill. A user knocked to zero hearts gets the reset
floor and the refill on top of it in the same pass.

Users are independent, so the batch fans out over a bounded thread pool.
One user failing is logged and counted; the rest of the batch carries on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from kaizen.core.config import settings
from kaizen.core.errors import StatsConflictError
from kaizen.core.game_rules import GameRules, load_game_rules
from kaizen.db.session import SessionLocal
from kaizen.services.progression import apply_penalty_batch, refill_hearts
from kaizen.services.streak import evaluate_day, update_streak
from kaizen.services.stores import (
    find_pending_tasks_by_user_and_date_range,
    find_tasks_by_user_and_date_range,
    get_or_create_stats,
    list_all_user_ids,
    save_stats,
    save_task,
    upsert_activity_log,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@dataclass
class UserRolloverResult:
    user_id: int
    closing_date: date
    skipped: bool = False
    carried_over: int = 0
    heart_zero_penalty: bool = False
    completed_tasks: int = 0
    total_tasks: int = 0
    success: bool = False


@dataclass
class RolloverReport:
    today: date
    users: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    days_closed: int = 0
    failed_user_ids: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def current_day(tz_name: str | None = None) -> date:
    """Today's date in the rollover timezone."""
    return datetime.now(ZoneInfo(tz_name or settings.rollover_timezone)).date()


def closing_dates(last_closed: date | None, today: date, max_catchup_days: int) -> list[date]:
    """Days that still need closing, oldest first.

    A user who has never been rolled over only closes yesterday. Otherwise
    every day since the last closed one is replayed, but no further back
    than ``max_catchup_days``. Pending tasks from days past that window are
    still carried by the oldest day that is closed.
    """
    yesterday = today - timedelta(days=1)
    if last_closed is None:
        return [yesterday]
    if max_catchup_days < 1:
        raise ValueError(f"max_catchup_days must be >= 1, got {max_catchup_days}")
    earliest = yesterday - timedelta(days=max_catchup_days - 1)
    start = max(last_closed + timedelta(days=1), earliest)
    return [start + timedelta(days=offset) for offset in range((yesterday - start).days + 1)]


def _close_day(
    db: Session,
    user_id: int,
    closing_date: date,
    rules: GameRules,
    now: datetime,
) -> UserRolloverResult:
    stats = get_or_create_stats(db, user_id, rules)
    if stats.last_closed_date is not None and stats.last_closed_date >= closing_date:
        return UserRolloverResult(user_id=user_id, closing_date=closing_date, skipped=True)

    result = UserRolloverResult(user_id=user_id, closing_date=closing_date)
    new_day = closing_date + timedelta(days=1)

    # Snapshot the full day before anything moves off it.
    day_tasks = find_tasks_by_user_and_date_range(db, user_id, closing_date, closing_date)

    # 1. collect. Open below: tasks stranded on days outside the catch-up
    # window, or back-dated after their day closed, are swept up here.
    carried = find_pending_tasks_by_user_and_date_range(db, user_id, None, closing_date)
    result.carried_over = len(carried)
    seen = {task.id for task in day_tasks}
    day_tasks.extend(task for task in carried if task.id not in seen)

    # 2. advance; status stays pending. Penalties are the live rule values.
    for task in carried:
        task.assigned_date = new_day
        task.delay_count += 1
        task.heart_loss = rules.task_failure_heart_loss
        task.coin_loss = rules.task_failure_coin_loss
        save_task(db, task)

    # 3. penalize
    result.heart_zero_penalty = apply_penalty_batch(
        stats, [(task.heart_loss, task.coin_loss) for task in carried], rules
    )

    # 4. summarize
    summary = evaluate_day(day_tasks, rules.min_tasks_for_successful_day)
    result.completed_tasks, result.total_tasks, result.success = summary
    upsert_activity_log(
        db,
        user_id,
        closing_date,
        completed_tasks=summary.completed_tasks,
        total_tasks=summary.total_tasks,
        success=summary.success,
    )

    # 5. streak
    update_streak(stats, summary.success)

    # 6. refill
    refill_hearts(stats, rules)

    # 7. stamp
    stats.last_activity_date = now
    stats.last_closed_date = closing_date

    # 8. persist
    save_stats(db, stats)
    db.commit()
    return result


def rollover_user(
    db: Session,
    user_id: int,
    closing_date: date,
    *,
    rules: GameRules | None = None,
    now: datetime | None = None,
    retries: int | None = None,
) -> UserRolloverResult:
    """Close ``closing_date`` for one user.

    Safe to call again for the same day: a day already closed is skipped.
    A concurrent stats update (or a racing insert of the same activity log)
    rolls the whole day back and replays it on fresh state.
    """
    rules = rules or load_game_rules()
    attempts = settings.stats_conflict_retries if retries is None else retries
    if attempts < 1:
        raise ValueError(f"retries must be >= 1, got {attempts}")
    for attempt in range(1, attempts + 1):
        try:
            result = _close_day(db, user_id, closing_date, rules, now or datetime.now(timezone.utc))
        except (StaleDataError, IntegrityError):
            db.rollback()
            logger.warning(
                "rollover_conflict user_id=%s closing_date=%s attempt=%s/%s",
                user_id,
                closing_date.isoformat(),
                attempt,
                attempts,
            )
            continue
        except Exception:
            db.rollback()
            raise
        if result.heart_zero_penalty:
            logger.info(
                "heart_zero_penalty user_id=%s source=rollover closing_date=%s",
                user_id,
                closing_date.isoformat(),
            )
        logger.debug(
            "rollover_user user_id=%s closing_date=%s skipped=%s carried=%s completed=%s/%s success=%s",
            user_id,
            closing_date.isoformat(),
            result.skipped,
            result.carried_over,
            result.completed_tasks,
            result.total_tasks,
            result.success,
        )
        return result
    raise StatsConflictError(user_id, attempts)


def process_user(
    session_factory: SessionFactory,
    user_id: int,
    today: date,
    *,
    rules: GameRules,
    max_catchup_days: int,
    now: datetime | None = None,
) -> list[UserRolloverResult]:
    """Close every outstanding day for one user in its own session."""
    with session_factory() as db:
        stats = get_or_create_stats(db, user_id, rules)
        db.commit()
        days = closing_dates(stats.last_closed_date, today, max_catchup_days)
        return [rollover_user(db, user_id, day, rules=rules, now=now) for day in days]


def run_daily_rollover(
    session_factory: SessionFactory = SessionLocal,
    *,
    today: date | None = None,
    rules: GameRules | None = None,
    max_workers: int | None = None,
    max_catchup_days: int | None = None,
    now: datetime | None = None,
) -> RolloverReport:
    """Roll every active user over to ``today``."""
    today = today or current_day()
    rules = rules or load_game_rules()
    workers = settings.rollover_max_workers if max_workers is None else max_workers
    if workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {workers}")
    catchup = settings.rollover_max_catchup_days if max_catchup_days is None else max_catchup_days
    if catchup < 1:
        raise ValueError(f"max_catchup_days must be >= 1, got {catchup}")

    with session_factory() as db:
        user_ids = list_all_user_ids(db)

    report = RolloverReport(today=today, users=len(user_ids))
    logger.info("rollover_start today=%s users=%s workers=%s", today.isoformat(), len(user_ids), workers)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rollover") as pool:
        futures = {
            pool.submit(
                process_user,
                session_factory,
                user_id,
                today,
                rules=rules,
                max_catchup_days=catchup,
                now=now,
            ): user_id
            for user_id in user_ids
        }
        for future in as_completed(futures):
            user_id = futures[future]
            try:
                results = future.result()
            except Exception:  # noqa: BLE001 - one user must not abort the batch
                logger.exception("rollover_user_failed user_id=%s today=%s", user_id, today.isoformat())
                report.failed += 1
                report.failed_user_ids.append(user_id)
                continue
            closed = sum(1 for r in results if not r.skipped)
            report.days_closed += closed
            if closed:
                report.processed += 1
            else:
                report.skipped += 1

    report.failed_user_ids.sort()
    log = logger.info if report.ok else logger.warning
    log(
        "rollover_done today=%s users=%s processed=%s skipped=%s failed=%s days_closed=%s",
        today.isoformat(),
        report.users,
        report.processed,
        report.skipped,
        report.failed,
        report.days_closed,
    )
    return report
