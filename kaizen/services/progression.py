"""Progression engine: pure stat mutations for a single user.

Functions here only touch the stat record they are given. They never
commit, log to the database or read the clock, so the interactive task
endpoints and the daily rollover can share them.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from kaizen.core.errors import GameRuleError
from kaizen.core.game_rules import GameRules


def _require_non_negative(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GameRuleError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise GameRuleError(f"{name} must be >= 0, got {value}")
    return value


def initial_stats(rules: GameRules) -> dict[str, Any]:
    """Field values for a freshly created stats record."""
    return {
        "level": rules.initial_level,
        "current_exp": 0,
        "max_exp": rules.initial_max_exp,
        "hearts": rules.initial_hearts,
        "max_hearts": rules.initial_max_hearts,
        "coins": 0,
        "current_streak": 0,
        "highest_streak": 0,
        "last_closed_date": None,
        "last_activity_date": None,
    }


def grant_experience(stats, amount: int, rules: GameRules) -> int:
    """Add experience and apply every level-up it pays for.

    Returns the number of levels gained. A single large reward can cross
    several thresholds, each one raising ``max_exp`` for the next.
    """
    _require_non_negative("amount", amount)
    if stats.max_exp < 1:
        raise GameRuleError(f"max_exp must be >= 1, got {stats.max_exp}")

    stats.current_exp += amount
    levels_gained = 0
    while stats.current_exp >= stats.max_exp:
        stats.current_exp -= stats.max_exp
        stats.level += 1
        stats.max_exp += rules.exp_increase_per_level
        stats.max_hearts += rules.level_up_heart_increase
        stats.hearts += rules.level_up_heart_increase
        stats.coins += rules.level_up_bonus_coins
        levels_gained += 1
    return levels_gained


def apply_task_failure_penalty(stats, heart_loss: int, coin_loss: int) -> None:
    """Subtract hearts and coins, flooring both at zero."""
    _require_non_negative("heart_loss", heart_loss)
    _require_non_negative("coin_loss", coin_loss)
    stats.hearts = max(0, stats.hearts - heart_loss)
    stats.coins = max(0, stats.coins - coin_loss)


def apply_heart_zero_penalty(stats, rules: GameRules) -> None:
    """Punitive reset once hearts are exhausted.

    ``max_exp`` is left alone: dropping a level does not rewind the
    experience curve.
    """
    stats.level = max(1, stats.level - rules.heart_zero_level_penalty)
    stats.coins = max(0, math.floor(stats.coins * (1 - rules.heart_zero_coin_penalty_percent)))
    stats.hearts = math.ceil(stats.max_hearts * rules.heart_zero_heart_reset_percent)


def apply_penalty_batch(stats, penalties: Iterable[tuple[int, int]], rules: GameRules) -> bool:
    """Apply several ``(heart_loss, coin_loss)`` penalties as one batch.

    The heart-zero penalty is a post-condition of the whole batch: it fires
    at most once, and only when the batch took hearts from above zero to
    zero. Returns True when it fired.
    """
    penalties = list(penalties)
    for heart_loss, coin_loss in penalties:
        _require_non_negative("heart_loss", heart_loss)
        _require_non_negative("coin_loss", coin_loss)
    if not penalties:
        return False

    hearts_before = stats.hearts
    for heart_loss, coin_loss in penalties:
        apply_task_failure_penalty(stats, heart_loss, coin_loss)

    if hearts_before > 0 and stats.hearts == 0:
        apply_heart_zero_penalty(stats, rules)
        return True
    return False


def refill_hearts(stats, rules: GameRules) -> None:
    """Daily refill, capped at ``max_hearts``."""
    stats.hearts = min(stats.max_hearts, stats.hearts + rules.daily_heart_refill)
