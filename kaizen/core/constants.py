"""Game balance defaults.

Every reward and penalty value starts here. Deployments override them
through the ``GAME_*`` environment variables (see config.py).
"""

# Task completion rewards
TASK_COMPLETION_EXP = 10
TASK_COMPLETION_COINS = 5

# Task failure penalties
TASK_FAILURE_HEART_LOSS = 1
TASK_FAILURE_COIN_LOSS = 2

# Level system
INITIAL_LEVEL = 1
INITIAL_MAX_EXP = 100
EXP_INCREASE_PER_LEVEL = 10
LEVEL_UP_BONUS_COINS = 10
LEVEL_UP_HEART_INCREASE = 1

# Hearts
INITIAL_MAX_HEARTS = 10
INITIAL_HEARTS = 10
DAILY_HEART_REFILL = 5

# Penalty applied when hearts reach zero
HEART_ZERO_LEVEL_PENALTY = 1
HEART_ZERO_COIN_PENALTY_PERCENT = 0.1
HEART_ZERO_HEART_RESET_PERCENT = 0.5

# Streaks
MIN_TASKS_FOR_SUCCESSFUL_DAY = 1
