"""
Gamification Models for SpendQuest

Points, levels, streaks and badges.

DESIGN DECISION: The achievement catalog is data. Each Achievement maps to
an AchievementInfo through a static table; which achievements are checked
automatically is decided elsewhere (see gamification.achievements).
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


POINTS_PER_LEVEL = 1000


def level_for_points(points: int) -> int:
    """The level a point total corresponds to."""
    return points // POINTS_PER_LEVEL + 1


class Badge(BaseModel):
    """
    The unlock state of one achievement.

    Only unlocked badges are stored in the profile. Locked ones are
    synthesized from the catalog when displayed.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1)
    description: str
    icon: str
    unlocked_date: Optional[datetime] = None
    is_unlocked: bool = False

    def unlocked(self, when: datetime) -> "Badge":
        """Copy of this badge marked as unlocked at `when`."""
        return self.model_copy(update={"is_unlocked": True, "unlocked_date": when})


class Achievement(str, Enum):
    """Every milestone a user can reach."""
    FIRST_EXPENSE = "first_expense"
    WEEK_STREAK = "week_streak"
    MONTH_STREAK = "month_streak"
    BUDGET_KEEPER = "budget_keeper"
    RECEIPT_SCANNER = "receipt_scanner"
    CATEGORY_MASTER = "category_master"
    SAVINGS_PRO = "savings_pro"


class AchievementInfo(BaseModel):
    """Catalog entry: how an achievement looks and what it is worth."""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    icon: str
    points: int = Field(..., ge=0)

    def badge(self) -> Badge:
        """A fresh, locked badge for this achievement."""
        return Badge(title=self.title, description=self.description, icon=self.icon)


ACHIEVEMENT_CATALOG: dict[Achievement, AchievementInfo] = {
    Achievement.FIRST_EXPENSE: AchievementInfo(
        title="First Expense",
        description="Logged your first expense",
        icon="star.fill",
        points=50,
    ),
    Achievement.WEEK_STREAK: AchievementInfo(
        title="Week Streak",
        description="Logged expenses 7 days in a row",
        icon="calendar.fill",
        points=100,
    ),
    Achievement.MONTH_STREAK: AchievementInfo(
        title="Month Streak",
        description="Logged expenses 30 days in a row",
        icon="trophy.fill",
        points=300,
    ),
    Achievement.BUDGET_KEEPER: AchievementInfo(
        title="Budget Keeper",
        description="Stayed within budget for a whole month",
        icon="checkmark.shield.fill",
        points=250,
    ),
    Achievement.RECEIPT_SCANNER: AchievementInfo(
        title="Receipt Scanner",
        description="Scanned 10 receipts",
        icon="camera.fill",
        points=150,
    ),
    Achievement.CATEGORY_MASTER: AchievementInfo(
        title="Category Master",
        description="Used every category",
        icon="folder.fill",
        points=200,
    ),
    Achievement.SAVINGS_PRO: AchievementInfo(
        title="Savings Pro",
        description="Saved more than 20% of your budget",
        icon="banknote.fill",
        points=500,
    ),
}


class UserProfile(BaseModel):
    """
    Gamification state for the single user of a ledger.

    Mutated only by the streak tracker and the achievement evaluator,
    always under the Ledger's lock.
    """
    model_config = ConfigDict(validate_assignment=True)

    total_points: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    badges: list[Badge] = Field(default_factory=list)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_expenses_logged: int = Field(default=0, ge=0)
    join_date: datetime = Field(default_factory=datetime.now)

    @model_validator(mode='after')
    def validate_badges_unique(self) -> 'UserProfile':
        """At most one badge per title."""
        titles = [badge.title for badge in self.badges]
        if len(titles) != len(set(titles)):
            raise ValueError("Profile badges must be unique by title")
        return self

    @model_validator(mode='after')
    def validate_progress(self) -> 'UserProfile':
        """Streak within the longest streak, level at least what the points earn."""
        if self.current_streak > self.longest_streak:
            raise ValueError(
                f"current_streak {self.current_streak} exceeds "
                f"longest_streak {self.longest_streak}"
            )
        if self.level < level_for_points(self.total_points):
            raise ValueError(
                f"level {self.level} is below the level earned by "
                f"{self.total_points} points"
            )
        return self

    def award_points(self, points: int) -> None:
        """Add points, raising the level first. Levels never go down."""
        total = self.total_points + points
        self.level = max(self.level, level_for_points(total))
        self.total_points = total

    def set_streak(self, streak: int) -> None:
        """Set the current streak, extending the longest streak if needed."""
        if streak > self.longest_streak:
            self.longest_streak = streak
        self.current_streak = streak

    @property
    def experience_points(self) -> int:
        """Points earned inside the current level."""
        return self.total_points % POINTS_PER_LEVEL

    @property
    def next_level_points(self) -> int:
        return POINTS_PER_LEVEL

    @property
    def level_progress(self) -> float:
        """Fraction of the current level completed (0-1)."""
        return self.experience_points / self.next_level_points

    @property
    def unlocked_badges(self) -> list[Badge]:
        return [badge for badge in self.badges if badge.is_unlocked]

    def has_badge(self, title: str) -> bool:
        return any(badge.title == title for badge in self.badges)
