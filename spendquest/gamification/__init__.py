"""Gamification package: streaks, levels and achievements."""

from spendquest.gamification.streaks import (
    BASE_POINTS_PER_EXPENSE,
    StatsUpdate,
    StreakTracker,
)
from spendquest.gamification.achievements import (
    ACHIEVEMENT_RULES,
    RECEIPT_SCANNER_THRESHOLD,
    WIRED_ACHIEVEMENTS,
    AchievementContext,
    AchievementEvaluator,
    badge_board,
    display_badge,
)

__all__ = [
    # Streaks
    "BASE_POINTS_PER_EXPENSE",
    "StatsUpdate",
    "StreakTracker",
    # Achievements
    "ACHIEVEMENT_RULES",
    "RECEIPT_SCANNER_THRESHOLD",
    "WIRED_ACHIEVEMENTS",
    "AchievementContext",
    "AchievementEvaluator",
    "badge_board",
    "display_badge",
]
