"""
Aggregation Engine

DESIGN DECISION: Aggregation is a pure read over an immutable snapshot.
The Ledger hands the engine a tuple of expenses and the "now" it resolved
when the snapshot was taken. The engine never mutates anything, so any
number of engines can be used concurrently.

Budget consumption is measured in the calendar window of the budget's
period that contains "now". The budget's start_date is not used as an
anchor.
"""

from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from spendquest.models.ledger import (
    PERIOD_DAYS,
    Budget,
    BudgetPeriod,
    Expense,
    ExpenseCategory,
)
from spendquest.models.reports import BudgetStatus, CategoryShare, DailyTotal
from spendquest.validation import parse_amount
from spendquest.windows import Granularity, granularity_for, in_window, local_date, to_local


ZERO = Decimal("0")
ONE = Decimal("1")


def budget_ratio(consumed: Decimal, limit: Any) -> Decimal:
    """
    Fraction of a limit consumed, capped to [0, 1].

    The limit may be any number or numeric string. A limit that does not
    parse, or is zero or less, has no meaningful ratio and yields 0.
    """
    amount = parse_amount(limit)
    if amount is None or amount <= 0:
        return ZERO
    return min(consumed / amount, ONE)


class AggregationEngine:
    """
    Sums and groupings over a snapshot of expenses.

    GUARANTEES:
    - Empty ledgers produce zero sums, never errors
    - Inputs are never modified
    """

    def __init__(
        self,
        expenses: Iterable[Expense],
        now: datetime,
        first_weekday: Optional[int] = None,
    ):
        self._expenses = tuple(expenses)
        self._now = now
        self._first_weekday = first_weekday

    def _in_window(self, expense: Expense, granularity: Granularity) -> bool:
        return in_window(expense.date, granularity, self._now, self._first_weekday)

    def _windowed(self, granularity: Granularity) -> list[Expense]:
        return [e for e in self._expenses if self._in_window(e, granularity)]

    # -------------------------------------------------------------------------
    # Core aggregates
    # -------------------------------------------------------------------------

    def total_by_category(self) -> dict[ExpenseCategory, Decimal]:
        """Total per category over the whole ledger (categories with expenses only)."""
        totals: dict[ExpenseCategory, Decimal] = defaultdict(lambda: ZERO)
        for expense in self._expenses:
            totals[expense.category] += expense.amount
        return dict(totals)

    def total_in_window(self, granularity: Granularity) -> Decimal:
        """Total spent in the current day/week/month/year."""
        return sum((e.amount for e in self._windowed(granularity)), ZERO)

    def budget_consumed(self, category: ExpenseCategory, period: BudgetPeriod) -> Decimal:
        """Total spent in `category` during the current window of `period`."""
        granularity = granularity_for(period)
        return sum(
            (e.amount for e in self._expenses
             if e.category == category and self._in_window(e, granularity)),
            ZERO,
        )

    def budget_ratio(
        self,
        category: ExpenseCategory,
        period: BudgetPeriod,
        limit: Any,
    ) -> Decimal:
        """Consumed / limit, capped at 1; 0 when the limit is not a positive number."""
        return budget_ratio(self.budget_consumed(category, period), limit)

    def budget_status(self, budget: Budget) -> BudgetStatus:
        """Consumption summary for one budget."""
        spent = self.budget_consumed(budget.category, budget.period)
        return BudgetStatus(
            budget=budget,
            spent=spent,
            ratio=budget_ratio(spent, budget.limit),
            remaining=budget.limit - spent,
        )

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def category_breakdown(self) -> list[CategoryShare]:
        """Per-category totals with percentage of the overall total, largest first."""
        totals = self.total_by_category()
        overall = sum(totals.values(), ZERO)

        shares = [
            CategoryShare(
                category=category,
                amount=amount,
                percentage=float(amount / overall * 100) if overall > 0 else 0.0,
            )
            for category, amount in totals.items()
        ]
        return sorted(shares, key=lambda share: share.amount, reverse=True)

    def daily_trend(self, days: int = 30) -> list[DailyTotal]:
        """Totals per local day for expenses dated within the last `days` days."""
        end = to_local(self._now)
        start = end - timedelta(days=days)

        totals: dict = defaultdict(lambda: ZERO)
        for expense in self._expenses:
            moment = to_local(expense.date)
            if start <= moment <= end:
                totals[local_date(moment)] += expense.amount

        return [DailyTotal(day=day, amount=totals[day]) for day in sorted(totals)]

    def average_daily(self, period: BudgetPeriod) -> Decimal:
        """Current-window total spread over the period's canonical day count."""
        days = PERIOD_DAYS[period]
        total = self.total_in_window(granularity_for(period))
        return total / days if days > 0 else ZERO

    def transaction_count(self, granularity: Granularity) -> int:
        return len(self._windowed(granularity))

    def used_category_count(self, granularity: Granularity) -> int:
        """Distinct categories used in the current window."""
        return len({e.category for e in self._windowed(granularity)})

    def most_used_category(self) -> Optional[ExpenseCategory]:
        """Category with the largest total, or None for an empty ledger."""
        totals = self.total_by_category()
        if not totals:
            return None
        return max(totals, key=totals.__getitem__)

    def filter_expenses(
        self,
        search_text: Optional[str] = None,
        category: Optional[ExpenseCategory] = None,
    ) -> list[Expense]:
        """
        Expenses newest first, optionally narrowed.

        Args:
            search_text: Case-insensitive substring of the description
            category: Only this category
        """
        results = sorted(self._expenses, key=lambda e: to_local(e.date), reverse=True)

        if search_text:
            needle = search_text.casefold()
            results = [e for e in results if needle in e.description.casefold()]

        if category is not None:
            results = [e for e in results if e.category == category]

        return results
