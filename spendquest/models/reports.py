"""
Report Models for SpendQuest

Read-only results produced by the aggregation engine.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from spendquest.models.ledger import Budget, ExpenseCategory


class CategoryShare(BaseModel):
    """One category's share of total spending."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount: Decimal
    percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Share of the overall total, 0-100"
    )


class DailyTotal(BaseModel):
    """Total spent on one local calendar day."""
    model_config = ConfigDict(frozen=True)

    day: date
    amount: Decimal


class BudgetStatus(BaseModel):
    """
    How much of a budget has been consumed in its current window.

    `ratio` is capped at 1 even when spending exceeds the limit;
    `is_over_limit` and `remaining` tell the rest.
    """
    model_config = ConfigDict(frozen=True)

    budget: Budget
    spent: Decimal
    ratio: Decimal = Field(..., ge=0, le=1)
    remaining: Decimal

    @property
    def is_over_limit(self) -> bool:
        return self.spent > self.budget.limit
