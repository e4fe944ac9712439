"""
Streak and Leveling Tracker

Runs once for every expense added to the ledger, after the expense has
been appended and before achievements are evaluated.

IMPORTANT: The "previous expense" is the entry immediately before the new
one in insertion order, not the most recent one by date. Back-dated
entries therefore affect the streak according to when they were logged.
"""

from datetime import datetime, timedelta
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from spendquest.models.gamification import UserProfile
from spendquest.models.ledger import Expense
from spendquest.windows import local_date


BASE_POINTS_PER_EXPENSE = 10


class StatsUpdate(BaseModel):
    """What a single tracker run changed."""
    model_config = ConfigDict(frozen=True)

    points_awarded: int
    streak_before: int
    streak_after: int
    level_before: int
    level_after: int

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before


class StreakTracker:
    """Updates counters, points, streaks and level on the profile."""

    def __init__(self, base_points: int = BASE_POINTS_PER_EXPENSE):
        self._base_points = base_points

    def record_expense(
        self,
        profile: UserProfile,
        expenses: Sequence[Expense],
        now: datetime,
    ) -> StatsUpdate:
        """
        Apply the stats update for the expense just appended.

        Args:
            profile: Profile to update in place
            expenses: Ledger expenses in insertion order, new one last
            now: Current instant; "today" is its local calendar day

        Returns:
            Summary of the changes
        """
        streak_before = profile.current_streak
        level_before = profile.level

        profile.total_expenses_logged += 1
        profile.award_points(self._base_points)

        today = local_date(now)
        streak = 1
        if len(expenses) >= 2:
            previous_day = local_date(expenses[-2].date)
            if previous_day == today - timedelta(days=1):
                streak = streak_before + 1
            elif previous_day == today:
                # Previous entry logged today: streak unchanged
                streak = streak_before
        profile.set_streak(streak)

        return StatsUpdate(
            points_awarded=self._base_points,
            streak_before=streak_before,
            streak_after=profile.current_streak,
            level_before=level_before,
            level_after=profile.level,
        )
