"""Tests for the Ledger flows."""

import threading

import pytest
from decimal import Decimal
from uuid import uuid4

from spendquest.config import Settings
from spendquest.models.events import LedgerEventType
from spendquest.models.gamification import Achievement
from spendquest.models.ledger import Budget, BudgetPeriod, ExpenseCategory
from spendquest.orchestrator import Ledger, create_ledger
from spendquest.services.storage import (
    EXPENSES_KEY,
    InMemoryKeyValueStore,
    PersistenceAdapter,
    StorageWriteError,
)
from spendquest.validation import ValidationRejectedError
from spendquest.windows import Granularity

from conftest import make_expense


class BrokenStore(InMemoryKeyValueStore):
    def save(self, key: str, data: bytes) -> None:
        raise StorageWriteError("read-only")


class TestAddExpense:
    """Tests for the add-expense flow."""

    def test_first_expense(self, ledger, clock):
        result = ledger.add_expense(make_expense(date=clock()))
        profile = ledger.profile

        assert profile.total_expenses_logged == 1
        assert profile.current_streak == 1
        assert profile.total_points == 60
        assert [b.title for b in result.unlocked_badges] == ["First Expense"]
        assert result.persisted is True

    def test_every_add_increments_counter_and_points(self, ledger, clock):
        for i in range(5):
            before = ledger.profile
            ledger.add_expense(make_expense(date=clock()))
            after = ledger.profile

            assert after.total_expenses_logged == before.total_expenses_logged + 1
            assert after.total_points >= before.total_points + 10
            assert after.current_streak <= after.longest_streak

    def test_week_streak_scenario(self, ledger, clock):
        """One expense a day for 7 consecutive days."""
        for day in range(7):
            result = ledger.add_expense(make_expense(date=clock()))
            if day < 6:
                assert "Week Streak" not in [b.title for b in result.unlocked_badges]
                clock.advance(days=1)

        profile = ledger.profile
        assert profile.current_streak == 7
        assert profile.longest_streak == 7
        assert [b.title for b in result.unlocked_badges] == ["Week Streak"]
        assert [b.title for b in profile.badges].count("Week Streak") == 1
        # 7 x 10 base + 50 first expense + 100 week streak
        assert profile.total_points == 220

        clock.advance(days=1)
        ledger.add_expense(make_expense(date=clock()))
        assert ledger.profile.total_points == 230

    def test_missed_day_resets_streak(self, ledger, clock):
        ledger.add_expense(make_expense(date=clock()))
        clock.advance(days=1)
        ledger.add_expense(make_expense(date=clock()))
        clock.advance(days=2)
        ledger.add_expense(make_expense(date=clock()))

        profile = ledger.profile
        assert profile.current_streak == 1
        assert profile.longest_streak == 2

    def test_category_master_scenario(self, ledger, clock):
        categories = list(ExpenseCategory)
        for category in categories[:-1]:
            result = ledger.add_expense(make_expense(category=category, date=clock()))
            assert "Category Master" not in [b.title for b in result.unlocked_badges]

        result = ledger.add_expense(make_expense(category=categories[-1], date=clock()))
        assert [b.title for b in result.unlocked_badges] == ["Category Master"]
        assert ledger.profile.total_points == 8 * 10 + 50 + 200

    def test_food_budget_scenario(self, ledger, clock):
        ledger.create_budget("food", "100", "monthly")
        ledger.record_expense("12.50", "Groceries", "food")

        assert ledger.budget_consumed(ExpenseCategory.FOOD, BudgetPeriod.MONTHLY) == Decimal("12.50")
        assert ledger.budget_ratio(ExpenseCategory.FOOD, BudgetPeriod.MONTHLY, Decimal("100")) == Decimal("0.125")

        status = ledger.budget_statuses()[0]
        assert status.ratio == Decimal("0.125")
        assert status.remaining == Decimal("87.50")

    def test_duplicate_id_is_rejected(self, ledger):
        expense = make_expense()
        ledger.add_expense(expense)

        with pytest.raises(ValidationRejectedError):
            ledger.add_expense(expense)
        assert len(ledger.expenses) == 1
        assert ledger.profile.total_expenses_logged == 1

    def test_persistence_failure_is_not_fatal(self, clock, activity_logger):
        ledger = Ledger(PersistenceAdapter(BrokenStore(), activity_logger), clock=clock)

        result = ledger.add_expense(make_expense(date=clock()))

        assert result.persisted is False
        assert len(ledger.expenses) == 1
        assert ledger.profile.total_points == 60
        failed = [e for e in activity_logger.history if e.event_type == LedgerEventType.PERSIST_FAILED]
        assert len(failed) == 3


class TestRecordExpense:
    """Tests for validated expense input."""

    def test_record_expense_from_raw_input(self, ledger, clock):
        result = ledger.record_expense(
            "7,25", "  Cinema  ", "entertainment",
            receipt_image=b"\xff\xd8", tags=["friends"],
        )
        expense = result.expense

        assert expense.amount == Decimal("7.25")
        assert expense.description == "Cinema"
        assert expense.category == ExpenseCategory.ENTERTAINMENT
        assert expense.date == clock()
        assert expense.receipt_attached is True
        assert expense.tags == ["friends"]

    @pytest.mark.parametrize("amount,description,category,field", [
        ("abc", "Lunch", "food", "amount"),
        ("-3", "Lunch", "food", "amount"),
        ("1.234", "Lunch", "food", "amount"),
        ("3", "   ", "food", "description"),
        ("3", "Lunch", "pets", "category"),
    ])
    def test_invalid_input_is_rejected_without_mutation(
        self, ledger, store, amount, description, category, field
    ):
        with pytest.raises(ValidationRejectedError) as exc_info:
            ledger.record_expense(amount, description, category)

        assert [i.field for i in exc_info.value.result.issues] == [field]
        assert ledger.expenses == ()
        assert ledger.profile.total_expenses_logged == 0
        assert store.load(EXPENSES_KEY) is None

    def test_overlong_description_is_rejected(self, ledger, activity_logger):
        with pytest.raises(ValidationRejectedError) as exc_info:
            ledger.record_expense("1", "x" * 600, "food")

        assert [i.issue_type for i in exc_info.value.result.issues] == ["too_long"]
        assert ledger.expenses == ()
        assert activity_logger.history[-1].event_type == LedgerEventType.VALIDATION_REJECTED

    def test_model_errors_are_rejected_as_validation(self, ledger, activity_logger):
        """Fields the input checks do not cover still fail as a rejection."""
        with pytest.raises(ValidationRejectedError) as exc_info:
            ledger.record_expense("1", "Lunch", "food", tags=[object()])

        assert [i.field for i in exc_info.value.result.issues] == ["tags.0"]
        assert ledger.expenses == ()
        assert activity_logger.history[-1].event_type == LedgerEventType.VALIDATION_REJECTED

    def test_trailing_zero_decimals_are_accepted(self, ledger):
        result = ledger.record_expense("12.500", "Lunch", "food")
        assert result.expense.amount == Decimal("12.50")

    def test_float_budget_limit_in_ratio(self, ledger):
        ledger.record_expense("12.50", "Lunch", "food")
        assert ledger.budget_ratio(ExpenseCategory.FOOD, BudgetPeriod.MONTHLY, 100.0) == Decimal("0.125")


class TestUpdateAndDelete:
    """Tests for replace and delete operations."""

    def test_update_replaces_by_id(self, ledger):
        original = make_expense("5.00")
        ledger.add_expense(original)
        points = ledger.profile.total_points

        changed = original.model_copy(update={"amount": Decimal("9.00")})
        assert ledger.update_expense(changed) is True

        assert ledger.expenses[0].amount == Decimal("9.00")
        assert ledger.profile.total_points == points

    def test_update_missing_is_noop(self, ledger):
        assert ledger.update_expense(make_expense()) is False
        assert ledger.expenses == ()

    def test_delete(self, ledger):
        expense = make_expense()
        ledger.add_expense(expense)

        assert ledger.delete_expense(expense.id) is True
        assert ledger.expenses == ()
        assert ledger.delete_expense(expense.id) is False
        # Earned points and counters are kept
        assert ledger.profile.total_expenses_logged == 1

    def test_budget_lifecycle(self, ledger):
        budget = ledger.create_budget(ExpenseCategory.HEALTH, Decimal("50"), BudgetPeriod.WEEKLY)
        assert ledger.budgets == (budget,)

        raised = budget.model_copy(update={"limit": Decimal("80")})
        assert ledger.update_budget(raised) is True
        assert ledger.budgets[0].limit == Decimal("80")

        assert ledger.delete_budget(uuid4()) is False
        assert ledger.delete_budget(budget.id) is True
        assert ledger.budgets == ()

    @pytest.mark.parametrize("limit", ["0", "-1", "lots"])
    def test_invalid_budget_limit_is_rejected(self, ledger, limit):
        with pytest.raises(ValidationRejectedError):
            ledger.create_budget("food", limit, "monthly")
        assert ledger.budgets == ()

    def test_duplicate_budget_is_rejected(self, ledger):
        budget = Budget(category=ExpenseCategory.FOOD, limit=Decimal("10"))
        ledger.add_budget(budget)
        with pytest.raises(ValidationRejectedError):
            ledger.add_budget(budget)


class TestLedgerSession:
    """Tests for load/save, reads and concurrency."""

    def test_state_survives_reload(self, ledger, store, clock):
        ledger.record_expense("12.50", "Groceries", "food", receipt_image=b"img")
        ledger.create_budget("food", "100")

        reloaded = Ledger(PersistenceAdapter(store), clock=clock)

        assert reloaded.expenses == ledger.expenses
        assert reloaded.budgets == ledger.budgets
        assert reloaded.profile == ledger.profile

    def test_profile_is_a_copy(self, ledger):
        ledger.add_expense(make_expense())
        snapshot = ledger.profile
        snapshot.total_expenses_logged = 99

        assert ledger.profile.total_expenses_logged == 1

    def test_grant_achievement(self, ledger):
        badge = ledger.grant_achievement(Achievement.SAVINGS_PRO)

        assert badge.title == "Savings Pro"
        assert ledger.grant_achievement(Achievement.SAVINGS_PRO) is None
        assert ledger.profile.total_points == 500
        assert ledger.display_badge(Achievement.SAVINGS_PRO).is_unlocked is True
        assert ledger.display_badge(Achievement.BUDGET_KEEPER).is_unlocked is False
        assert len(ledger.badge_board()) == 7

    def test_report_queries(self, ledger, clock):
        ledger.record_expense("10", "Lunch", "food")
        ledger.record_expense("30", "Shoes", "shopping")

        assert ledger.total_in_window(Granularity.DAY) == Decimal("40")
        assert ledger.total_by_category() == {
            ExpenseCategory.FOOD: Decimal("10"),
            ExpenseCategory.SHOPPING: Decimal("30"),
        }
        assert ledger.reports().most_used_category() == ExpenseCategory.SHOPPING
        assert [t.amount for t in ledger.daily_trend()] == [Decimal("40")]

    def test_concurrent_adds_are_serialized(self, ledger, clock):
        def worker():
            for _ in range(25):
                ledger.add_expense(make_expense(date=clock()))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        profile = ledger.profile
        assert len(ledger.expenses) == 200
        assert profile.total_expenses_logged == 200
        assert profile.total_points == 200 * 10 + 50
        assert profile.current_streak <= profile.longest_streak


def test_create_ledger_with_memory_backend(monkeypatch, clock):
    monkeypatch.setenv("SPENDQUEST_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("SPENDQUEST_CALENDAR_FIRST_WEEKDAY", "6")

    ledger = create_ledger(settings=Settings(), clock=clock)
    ledger.record_expense("1", "Gum", "food")

    assert ledger.profile.total_expenses_logged == 1
    assert ledger.total_in_window(Granularity.WEEK) == Decimal("1")
