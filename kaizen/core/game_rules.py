"""Validated game rules built from settings."""

from __future__ import annotations

from dataclasses import dataclass

from kaizen.core.config import Settings, settings
from kaizen.core.constants import (
    DAILY_HEART_REFILL,
    EXP_INCREASE_PER_LEVEL,
    HEART_ZERO_COIN_PENALTY_PERCENT,
    HEART_ZERO_HEART_RESET_PERCENT,
    HEART_ZERO_LEVEL_PENALTY,
    INITIAL_HEARTS,
    INITIAL_LEVEL,
    INITIAL_MAX_EXP,
    INITIAL_MAX_HEARTS,
    LEVEL_UP_BONUS_COINS,
    LEVEL_UP_HEART_INCREASE,
    MIN_TASKS_FOR_SUCCESSFUL_DAY,
    TASK_COMPLETION_COINS,
    TASK_COMPLETION_EXP,
    TASK_FAILURE_COIN_LOSS,
    TASK_FAILURE_HEART_LOSS,
)
from kaizen.core.errors import GameRuleError


@dataclass(frozen=True)
class GameRules:
    task_completion_exp: int = TASK_COMPLETION_EXP
    task_completion_coins: int = TASK_COMPLETION_COINS
    task_failure_heart_loss: int = TASK_FAILURE_HEART_LOSS
    task_failure_coin_loss: int = TASK_FAILURE_COIN_LOSS
    initial_level: int = INITIAL_LEVEL
    initial_max_exp: int = INITIAL_MAX_EXP
    exp_increase_per_level: int = EXP_INCREASE_PER_LEVEL
    level_up_bonus_coins: int = LEVEL_UP_BONUS_COINS
    level_up_heart_increase: int = LEVEL_UP_HEART_INCREASE
    initial_max_hearts: int = INITIAL_MAX_HEARTS
    initial_hearts: int = INITIAL_HEARTS
    daily_heart_refill: int = DAILY_HEART_REFILL
    heart_zero_level_penalty: int = HEART_ZERO_LEVEL_PENALTY
    heart_zero_coin_penalty_percent: float = HEART_ZERO_COIN_PENALTY_PERCENT
    heart_zero_heart_reset_percent: float = HEART_ZERO_HEART_RESET_PERCENT
    min_tasks_for_successful_day: int = MIN_TASKS_FOR_SUCCESSFUL_DAY

    def validate(self) -> "GameRules":
        """Reject tunables that would let a stat record go out of range."""
        for name in (
            "task_completion_exp",
            "task_completion_coins",
            "task_failure_heart_loss",
            "task_failure_coin_loss",
            "exp_increase_per_level",
            "level_up_bonus_coins",
            "level_up_heart_increase",
            "daily_heart_refill",
            "heart_zero_level_penalty",
            "min_tasks_for_successful_day",
        ):
            if getattr(self, name) < 0:
                raise GameRuleError(f"{name} must be >= 0")
        if self.initial_level < 1:
            raise GameRuleError("initial_level must be >= 1")
        if self.initial_max_exp < 1:
            raise GameRuleError("initial_max_exp must be >= 1")
        if self.initial_max_hearts < 1:
            raise GameRuleError("initial_max_hearts must be >= 1")
        if not 0 <= self.initial_hearts <= self.initial_max_hearts:
            raise GameRuleError("initial_hearts must be within [0, initial_max_hearts]")
        for name in ("heart_zero_coin_penalty_percent", "heart_zero_heart_reset_percent"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise GameRuleError(f"{name} must be within [0, 1]")
        return self


def load_game_rules(source: Settings | None = None) -> GameRules:
    """Build validated game rules from settings."""
    cfg = source or settings
    return GameRules(
        task_completion_exp=cfg.game_task_completion_exp,
        task_completion_coins=cfg.game_task_completion_coins,
        task_failure_heart_loss=cfg.game_task_failure_heart_loss,
        task_failure_coin_loss=cfg.game_task_failure_coin_loss,
        initial_level=cfg.game_initial_level,
        initial_max_exp=cfg.game_initial_max_exp,
        exp_increase_per_level=cfg.game_exp_increase_per_level,
        level_up_bonus_coins=cfg.game_level_up_bonus_coins,
        level_up_heart_increase=cfg.game_level_up_heart_increase,
        initial_max_hearts=cfg.game_initial_max_hearts,
        initial_hearts=cfg.game_initial_hearts,
        daily_heart_refill=cfg.game_daily_heart_refill,
        heart_zero_level_penalty=cfg.game_heart_zero_level_penalty,
        heart_zero_coin_penalty_percent=cfg.game_heart_zero_coin_penalty_percent,
        heart_zero_heart_reset_percent=cfg.game_heart_zero_heart_reset_percent,
        min_tasks_for_successful_day=cfg.game_min_tasks_for_successful_day,
    ).validate()
