"""Domain errors raised by the game engine and its services."""

from __future__ import annotations


class GameRuleError(ValueError):
    """Raised when a reward, penalty or tunable value is invalid."""


class StatsConflictError(Exception):
    """Raised when a stats update keeps losing the optimistic version check."""

    def __init__(self, user_id: int, attempts: int) -> None:
        self.user_id = user_id
        self.attempts = attempts
        super().__init__(f"Stats for user {user_id} changed concurrently; gave up after {attempts} attempts")


class DataIntegrityError(Exception):
    """Raised when a stored record violates a structural invariant."""
