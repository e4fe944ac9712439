"""
Data Models Package

This package contains all Pydantic models used by SpendQuest.
Everything the Ledger stores or reports conforms to these schemas.
"""

from spendquest.models.ledger import (
    CATEGORY_ATTRIBUTES,
    MAX_DESCRIPTION_LENGTH,
    PERIOD_DAYS,
    Budget,
    BudgetPeriod,
    CategoryAttributes,
    Expense,
    ExpenseCategory,
)
from spendquest.models.gamification import (
    ACHIEVEMENT_CATALOG,
    POINTS_PER_LEVEL,
    Achievement,
    AchievementInfo,
    Badge,
    UserProfile,
    level_for_points,
)
from spendquest.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
)
from spendquest.models.reports import (
    BudgetStatus,
    CategoryShare,
    DailyTotal,
)

__all__ = [
    # Ledger models
    "CATEGORY_ATTRIBUTES",
    "MAX_DESCRIPTION_LENGTH",
    "PERIOD_DAYS",
    "Budget",
    "BudgetPeriod",
    "CategoryAttributes",
    "Expense",
    "ExpenseCategory",
    # Gamification models
    "ACHIEVEMENT_CATALOG",
    "POINTS_PER_LEVEL",
    "Achievement",
    "AchievementInfo",
    "Badge",
    "UserProfile",
    "level_for_points",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventSeverity",
    "LedgerEventType",
    # Report models
    "BudgetStatus",
    "CategoryShare",
    "DailyTotal",
]
