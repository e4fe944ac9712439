"""
Achievement Evaluator

Two tables drive unlocking:
- ACHIEVEMENT_RULES: how to decide whether an achievement is earned
- WIRED_ACHIEVEMENTS: which rules are checked after every added expense

Budget Keeper and Savings Pro are in the catalog but have no rule and are
not wired. They can only be unlocked through an explicit grant, so their
points are never awarded as a side effect of logging expenses.

All predicates of one evaluation see the same pre-unlock state. Newly
earned badges are appended together after every rule has been checked.
"""

from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from spendquest.models.gamification import (
    ACHIEVEMENT_CATALOG,
    Achievement,
    Badge,
    UserProfile,
)
from spendquest.models.ledger import Expense, ExpenseCategory


RECEIPT_SCANNER_THRESHOLD = 10


class AchievementContext(BaseModel):
    """The state an achievement rule is evaluated against."""
    model_config = ConfigDict(frozen=True)

    profile: UserProfile
    expenses: tuple[Expense, ...]

    @property
    def receipts_scanned(self) -> int:
        return sum(1 for e in self.expenses if e.receipt_attached)

    @property
    def categories_used(self) -> int:
        return len({e.category for e in self.expenses})


AchievementRule = Callable[[AchievementContext], bool]


ACHIEVEMENT_RULES: dict[Achievement, AchievementRule] = {
    Achievement.FIRST_EXPENSE: lambda ctx: ctx.profile.total_expenses_logged == 1,
    Achievement.WEEK_STREAK: lambda ctx: ctx.profile.current_streak >= 7,
    Achievement.MONTH_STREAK: lambda ctx: ctx.profile.current_streak >= 30,
    Achievement.RECEIPT_SCANNER: lambda ctx: ctx.receipts_scanned >= RECEIPT_SCANNER_THRESHOLD,
    Achievement.CATEGORY_MASTER: lambda ctx: ctx.categories_used >= len(ExpenseCategory),
}

WIRED_ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement.FIRST_EXPENSE,
    Achievement.WEEK_STREAK,
    Achievement.MONTH_STREAK,
    Achievement.RECEIPT_SCANNER,
    Achievement.CATEGORY_MASTER,
)


class AchievementEvaluator:
    """
    Unlocks badges whose rules are satisfied.

    Unlocking is idempotent: a title already present in the profile is
    never unlocked again and its points are never awarded twice.
    """

    def __init__(
        self,
        wired: Iterable[Achievement] = WIRED_ACHIEVEMENTS,
        rules: Optional[dict[Achievement, AchievementRule]] = None,
    ):
        self._rules = dict(ACHIEVEMENT_RULES if rules is None else rules)
        self._wired = tuple(wired)

        missing = [a.value for a in self._wired if a not in self._rules]
        if missing:
            raise ValueError(f"Wired achievements without a rule: {missing}")

    @property
    def wired(self) -> tuple[Achievement, ...]:
        return self._wired

    def evaluate(
        self,
        profile: UserProfile,
        expenses: Sequence[Expense],
        now: datetime,
    ) -> list[Badge]:
        """
        Check every wired rule and unlock what was earned.

        Args:
            profile: Profile to update in place
            expenses: Current ledger expenses
            now: Unlock timestamp

        Returns:
            Badges unlocked by this call (empty if none)
        """
        context = AchievementContext(profile=profile, expenses=tuple(expenses))

        earned = [
            achievement for achievement in self._wired
            if not profile.has_badge(ACHIEVEMENT_CATALOG[achievement].title)
            and self._rules[achievement](context)
        ]
        return self._unlock(profile, earned, now)

    def grant(
        self,
        profile: UserProfile,
        achievement: Achievement,
        now: datetime,
    ) -> Optional[Badge]:
        """
        Unlock one achievement directly, whether or not it is wired.

        Returns the new badge, or None if it was already unlocked.
        """
        if profile.has_badge(ACHIEVEMENT_CATALOG[achievement].title):
            return None
        return self._unlock(profile, [achievement], now)[0]

    def _unlock(
        self,
        profile: UserProfile,
        achievements: list[Achievement],
        now: datetime,
    ) -> list[Badge]:
        if not achievements:
            return []

        new_badges = []
        for achievement in achievements:
            info = ACHIEVEMENT_CATALOG[achievement]
            new_badges.append(info.badge().unlocked(now))
            profile.award_points(info.points)

        profile.badges = [*profile.badges, *new_badges]
        return new_badges


def display_badge(achievement: Achievement, profile: UserProfile) -> Badge:
    """
    The badge to show for an achievement.

    Returns the profile's stored badge if unlocked, otherwise a locked badge
    synthesized from the catalog. Nothing is written to the profile.
    """
    title = ACHIEVEMENT_CATALOG[achievement].title
    for badge in profile.badges:
        if badge.title == title:
            return badge
    return ACHIEVEMENT_CATALOG[achievement].badge()


def badge_board(profile: UserProfile) -> list[Badge]:
    """Display badges for the whole catalog, in catalog order."""
    return [display_badge(achievement, profile) for achievement in Achievement]
