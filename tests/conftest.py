"""Shared fixtures: a controllable clock and an in-memory ledger."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from spendquest.activity import ActivityLogger
from spendquest.models.ledger import Expense, ExpenseCategory
from spendquest.orchestrator import Ledger
from spendquest.services.storage import InMemoryKeyValueStore, PersistenceAdapter


# Wednesday
REFERENCE_NOW = datetime(2024, 3, 13, 12, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = REFERENCE_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_expense(
    amount: str = "10.00",
    category: ExpenseCategory = ExpenseCategory.FOOD,
    date: datetime = REFERENCE_NOW,
    description: str = "Lunch",
    **extra,
) -> Expense:
    return Expense(
        amount=Decimal(amount),
        description=description,
        category=category,
        date=date,
        **extra,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def activity_logger() -> ActivityLogger:
    return ActivityLogger()


@pytest.fixture
def ledger(store, clock, activity_logger) -> Ledger:
    return Ledger(
        persistence=PersistenceAdapter(store, activity_logger),
        clock=clock,
        first_weekday=0,
        activity_logger=activity_logger,
    )
