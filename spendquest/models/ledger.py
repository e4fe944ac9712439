"""
Ledger Data Models for SpendQuest

These models define the records owned by the Ledger: expenses and budgets.
They are designed to:
1. Enforce type safety and basic validation at construction
2. Be serializable to JSON for the key-value store (including receipt bytes)
3. Be immutable, so snapshots handed to readers can never be torn

DESIGN DECISION: Records are frozen. An update is a full replace by id,
performed by the Ledger, never an in-place field assignment.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: The set is closed. The Category Master achievement
    compares against the size of this enum, so adding a member changes
    when that achievement unlocks.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTH = "health"
    EDUCATION = "education"
    UTILITIES = "utilities"
    OTHER = "other"


class BudgetPeriod(str, Enum):
    """Budget periods. Windows are resolved by calendar, not by day count."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CategoryAttributes(BaseModel):
    """Presentation attributes for a category."""
    model_config = ConfigDict(frozen=True)

    label: str
    icon: str
    color: str


CATEGORY_ATTRIBUTES: dict[ExpenseCategory, CategoryAttributes] = {
    ExpenseCategory.FOOD: CategoryAttributes(label="Food", icon="fork.knife", color="orange"),
    ExpenseCategory.TRANSPORT: CategoryAttributes(label="Transport", icon="car.fill", color="blue"),
    ExpenseCategory.ENTERTAINMENT: CategoryAttributes(label="Entertainment", icon="tv.fill", color="purple"),
    ExpenseCategory.SHOPPING: CategoryAttributes(label="Shopping", icon="bag.fill", color="pink"),
    ExpenseCategory.HEALTH: CategoryAttributes(label="Health", icon="cross.fill", color="red"),
    ExpenseCategory.EDUCATION: CategoryAttributes(label="Education", icon="book.fill", color="green"),
    ExpenseCategory.UTILITIES: CategoryAttributes(label="Utilities", icon="bolt.fill", color="yellow"),
    ExpenseCategory.OTHER: CategoryAttributes(label="Other", icon="questionmark.circle.fill", color="gray"),
}

# Canonical day counts, only used for averaging
PERIOD_DAYS: dict[BudgetPeriod, int] = {
    BudgetPeriod.DAILY: 1,
    BudgetPeriod.WEEKLY: 7,
    BudgetPeriod.MONTHLY: 30,
    BudgetPeriod.YEARLY: 365,
}


# =============================================================================
# CORE LEDGER RECORDS
# =============================================================================

MAX_DESCRIPTION_LENGTH = 500


class Expense(BaseModel):
    """
    A single logged expense.

    The receipt image is kept as raw bytes and written to JSON as base64.
    Only its presence matters to the engine (see receipt_attached).
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )

    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount spent"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="What the money was spent on"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the expense happened (naive values are host local time)"
    )

    # Receipt capture
    receipt_image: Optional[bytes] = Field(
        default=None,
        description="Attached receipt image, if one was captured"
    )
    receipt_text: Optional[str] = Field(
        default=None,
        description="Text extracted from the receipt, stored as-is"
    )

    is_recurring: bool = False
    tags: list[str] = Field(default_factory=list)

    @property
    def receipt_attached(self) -> bool:
        """True when receipt image bytes are present (even empty ones)."""
        return self.receipt_image is not None


class Budget(BaseModel):
    """
    A spending limit for one category over one period.

    NOTE: start_date records creation time only. Consumption is always
    measured in the period window containing "now", and is_active is
    persisted but not used to filter budgets.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique budget ID"
    )
    category: ExpenseCategory
    limit: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Maximum spend for the period"
    )
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: datetime = Field(
        default_factory=datetime.now,
        description="When the budget was created"
    )
    is_active: bool = True
