"""
Ledger Orchestrator for SpendQuest

This module ties the components together and defines the flows for:
1. Adding an expense (validate → append → streaks → achievements → save)
2. Replacing/deleting expenses and budgets (mutate → save)
3. Read-only queries (snapshot → aggregate)

DESIGN DECISION: The Ledger is an explicitly constructed session object.
There is no global instance; create one with create_ledger() (or the
constructor) and pass it to whatever needs it.

CONCURRENCY: One re-entrant lock guards the expenses, budgets and profile.
Every mutation, including the gamification updates and the save that
follow it, runs as a single critical section. Reads copy a snapshot under
the same lock and aggregate outside it.
"""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError

from spendquest.activity import ActivityLogger, configure_log_level
from spendquest.config import Settings, get_settings
from spendquest.gamification import (
    AchievementEvaluator,
    StatsUpdate,
    StreakTracker,
    badge_board,
    display_badge,
)
from spendquest.models.gamification import (
    ACHIEVEMENT_CATALOG,
    Achievement,
    Badge,
    UserProfile,
)
from spendquest.models.ledger import (
    Budget,
    BudgetPeriod,
    Expense,
    ExpenseCategory,
)
from spendquest.models.reports import BudgetStatus, DailyTotal
from spendquest.queries import AggregationEngine
from spendquest.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LedgerState,
    PersistenceAdapter,
)
from spendquest.validation import (
    RecordValidator,
    ValidationIssue,
    ValidationRejectedError,
    ValidationResult,
    issues_from_error,
    parse_amount,
)
from spendquest.windows import Granularity


Clock = Callable[[], datetime]

_POINTS_BY_TITLE = {info.title: info.points for info in ACHIEVEMENT_CATALOG.values()}


class ExpenseAddResult(BaseModel):
    """Everything that happened as a result of adding one expense."""
    model_config = ConfigDict(frozen=True)

    expense: Expense
    stats: StatsUpdate
    unlocked_badges: list[Badge]
    persisted: bool


class Ledger:
    """
    The single owner of expenses, budgets and the user profile.

    Flow for every added expense:
    1. Reject duplicates (nothing changes)
    2. Append in insertion order
    3. Streak and leveling update
    4. Achievement evaluation
    5. Save (failure is logged; memory stays authoritative)

    Update and delete operations on missing ids are silent no-ops.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        clock: Optional[Clock] = None,
        first_weekday: Optional[int] = None,
        trend_days: int = 30,
        streak_tracker: Optional[StreakTracker] = None,
        achievement_evaluator: Optional[AchievementEvaluator] = None,
        validator: Optional[RecordValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._persistence = persistence
        self._clock = clock or datetime.now
        self._first_weekday = first_weekday
        self._trend_days = trend_days
        self._tracker = streak_tracker or StreakTracker()
        self._evaluator = achievement_evaluator or AchievementEvaluator()
        self._validator = validator or RecordValidator()
        self._activity = activity_logger or ActivityLogger()

        self._lock = threading.RLock()
        self._expenses: list[Expense] = []
        self._budgets: list[Budget] = []
        self._profile = UserProfile()

        self.load()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> None:
        """Replace in-memory state with what the store holds (defaults if absent)."""
        state = self._persistence.load()
        with self._lock:
            self._expenses = list(state.expenses)
            self._budgets = list(state.budgets)
            self._profile = state.profile

    def save(self) -> dict[str, bool]:
        """Save all collections now. Returns {key: saved_successfully}."""
        with self._lock:
            return self._persist()

    def _persist(self) -> dict[str, bool]:
        return self._persistence.save(LedgerState(
            expenses=list(self._expenses),
            budgets=list(self._budgets),
            profile=self._profile,
        ))

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, expense: Expense) -> ExpenseAddResult:
        """
        Add an expense and apply its gamification effects.

        Raises:
            ValidationRejectedError: If an expense with the same id exists
        """
        with self._lock:
            if any(e.id == expense.id for e in self._expenses):
                self._reject("expense", ValidationResult(issues=[ValidationIssue(
                    field="id",
                    issue_type="duplicate",
                    message=f"Expense {expense.id} already exists",
                )]))

            now = self._clock()
            self._expenses.append(expense)

            stats = self._tracker.record_expense(self._profile, self._expenses, now)
            unlocked = self._evaluator.evaluate(self._profile, self._expenses, now)

            self._activity.log_expense_added(
                expense_id=expense.id,
                amount=str(expense.amount),
                category=expense.category.value,
                has_receipt=expense.receipt_attached,
            )
            self._activity.log_streak_updated(
                stats.streak_before, stats.streak_after, self._profile.longest_streak
            )
            for badge in unlocked:
                self._log_badge(badge)
            if self._profile.level > stats.level_before:
                self._activity.log_level_up(
                    stats.level_before, self._profile.level, self._profile.total_points
                )

            saved = self._persist()

            return ExpenseAddResult(
                expense=expense,
                stats=stats,
                unlocked_badges=unlocked,
                persisted=all(saved.values()),
            )

    def record_expense(
        self,
        amount: Any,
        description: Optional[str],
        category: Any,
        date: Optional[datetime] = None,
        receipt_image: Optional[bytes] = None,
        receipt_text: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        is_recurring: bool = False,
    ) -> ExpenseAddResult:
        """
        Validate raw input, build the expense and add it.

        The amount may be a string (e.g. typed, or read from a receipt).

        Raises:
            ValidationRejectedError: If any field is invalid
        """
        result = self._validator.validate_expense_input(amount, description, category)
        if not result.is_valid:
            self._reject("expense", result)

        try:
            expense = Expense(
                amount=parse_amount(amount),
                description=description,
                category=ExpenseCategory(category),
                date=date or self._clock(),
                receipt_image=receipt_image,
                receipt_text=receipt_text,
                tags=list(tags or []),
                is_recurring=is_recurring,
            )
        except ValidationError as e:
            self._reject("expense", ValidationResult(issues=issues_from_error(e)))
        return self.add_expense(expense)

    def update_expense(self, expense: Expense) -> bool:
        """
        Replace the expense with the same id.

        Returns False (and changes nothing) if no such expense exists.
        Stats and achievements are not recomputed.
        """
        with self._lock:
            for index, existing in enumerate(self._expenses):
                if existing.id == expense.id:
                    self._expenses[index] = expense
                    self._activity.log_expense_updated(expense.id)
                    self._persist()
                    return True
            return False

    def delete_expense(self, expense_id: UUID) -> bool:
        """
        Remove an expense by id.

        Returns False if no such expense exists. Points and badges already
        earned are kept.
        """
        with self._lock:
            remaining = [e for e in self._expenses if e.id != expense_id]
            if len(remaining) == len(self._expenses):
                return False
            self._expenses = remaining
            self._activity.log_expense_deleted(expense_id)
            self._persist()
            return True

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def add_budget(self, budget: Budget) -> Budget:
        """
        Add a budget.

        Raises:
            ValidationRejectedError: If a budget with the same id exists
        """
        with self._lock:
            if any(b.id == budget.id for b in self._budgets):
                self._reject("budget", ValidationResult(issues=[ValidationIssue(
                    field="id",
                    issue_type="duplicate",
                    message=f"Budget {budget.id} already exists",
                )]))

            self._budgets.append(budget)
            self._activity.log_budget_added(
                budget_id=budget.id,
                category=budget.category.value,
                limit=str(budget.limit),
                period=budget.period.value,
            )
            self._persist()
            return budget

    def create_budget(
        self,
        category: Any,
        limit: Any,
        period: Any = BudgetPeriod.MONTHLY,
    ) -> Budget:
        """
        Validate raw input and add a new budget starting now.

        Raises:
            ValidationRejectedError: If the limit is not positive or a value is unknown
        """
        result = self._validator.validate_budget_input(category, limit, period)
        if not result.is_valid:
            self._reject("budget", result)

        try:
            budget = Budget(
                category=ExpenseCategory(category),
                limit=parse_amount(limit),
                period=BudgetPeriod(period),
                start_date=self._clock(),
            )
        except ValidationError as e:
            self._reject("budget", ValidationResult(issues=issues_from_error(e)))
        return self.add_budget(budget)

    def update_budget(self, budget: Budget) -> bool:
        """Replace the budget with the same id. Returns False if none exists."""
        with self._lock:
            for index, existing in enumerate(self._budgets):
                if existing.id == budget.id:
                    self._budgets[index] = budget
                    self._activity.log_budget_updated(budget.id)
                    self._persist()
                    return True
            return False

    def delete_budget(self, budget_id: UUID) -> bool:
        """Remove a budget by id. Returns False if none exists."""
        with self._lock:
            remaining = [b for b in self._budgets if b.id != budget_id]
            if len(remaining) == len(self._budgets):
                return False
            self._budgets = remaining
            self._activity.log_budget_deleted(budget_id)
            self._persist()
            return True

    # -------------------------------------------------------------------------
    # Achievements
    # -------------------------------------------------------------------------

    def grant_achievement(self, achievement: Achievement) -> Optional[Badge]:
        """
        Unlock an achievement explicitly (e.g. one with no automatic rule).

        Returns the new badge, or None if it was already unlocked.
        """
        with self._lock:
            level_before = self._profile.level
            badge = self._evaluator.grant(self._profile, achievement, self._clock())
            if badge is None:
                return None

            self._log_badge(badge)
            if self._profile.level > level_before:
                self._activity.log_level_up(
                    level_before, self._profile.level, self._profile.total_points
                )
            self._persist()
            return badge

    def display_badge(self, achievement: Achievement) -> Badge:
        return display_badge(achievement, self.profile)

    def badge_board(self) -> list[Badge]:
        """All catalog badges, unlocked ones from the profile, the rest locked."""
        return badge_board(self.profile)

    def _log_badge(self, badge: Badge) -> None:
        self._activity.log_badge_unlocked(
            badge.id, badge.title, _POINTS_BY_TITLE.get(badge.title, 0)
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Expenses in insertion order."""
        with self._lock:
            return tuple(self._expenses)

    @property
    def budgets(self) -> tuple[Budget, ...]:
        with self._lock:
            return tuple(self._budgets)

    @property
    def profile(self) -> UserProfile:
        """A copy of the profile; changing it does not affect the ledger."""
        with self._lock:
            return self._profile.model_copy(deep=True)

    def reports(self) -> AggregationEngine:
        """
        Aggregation engine over a snapshot taken now.

        Use one engine for several queries that must agree with each other.
        """
        with self._lock:
            expenses = tuple(self._expenses)
        return AggregationEngine(expenses, self._clock(), self._first_weekday)

    def total_by_category(self) -> dict[ExpenseCategory, Decimal]:
        return self.reports().total_by_category()

    def total_in_window(self, granularity: Granularity) -> Decimal:
        return self.reports().total_in_window(granularity)

    def budget_consumed(self, category: ExpenseCategory, period: BudgetPeriod) -> Decimal:
        return self.reports().budget_consumed(category, period)

    def budget_ratio(
        self,
        category: ExpenseCategory,
        period: BudgetPeriod,
        limit: Any,
    ) -> Decimal:
        return self.reports().budget_ratio(category, period, limit)

    def budget_statuses(self) -> list[BudgetStatus]:
        """Consumption of every budget, in the order budgets were added."""
        with self._lock:
            budgets = tuple(self._budgets)
            expenses = tuple(self._expenses)
        engine = AggregationEngine(expenses, self._clock(), self._first_weekday)
        return [engine.budget_status(budget) for budget in budgets]

    def daily_trend(self) -> list[DailyTotal]:
        """Daily totals over the configured trend window."""
        return self.reports().daily_trend(self._trend_days)

    # -------------------------------------------------------------------------

    def _reject(self, entity_type: str, result: ValidationResult) -> None:
        self._activity.log_validation_rejected(entity_type, result.issue_dicts())
        raise ValidationRejectedError(entity_type, result)


def create_store(settings: Settings) -> KeyValueStore:
    """Build the key-value store the settings ask for."""
    storage = settings.storage
    if storage.backend == "memory":
        return InMemoryKeyValueStore()
    return FileKeyValueStore(storage.data_dir)


def create_ledger(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
) -> Ledger:
    """
    Create a Ledger with all components wired up.

    Args:
        settings: Configuration; defaults to get_settings()
        store: Key-value store; defaults to the one configured in settings
        clock: Source of "now"; defaults to datetime.now

    Returns:
        A Ledger loaded from the store
    """
    settings = settings or get_settings()
    configure_log_level(settings.app.log_level)

    activity_logger = ActivityLogger()
    persistence = PersistenceAdapter(store or create_store(settings), activity_logger)
    calendar_settings = settings.calendar

    return Ledger(
        persistence=persistence,
        clock=clock,
        first_weekday=calendar_settings.first_weekday,
        trend_days=calendar_settings.trend_days,
        activity_logger=activity_logger,
    )
