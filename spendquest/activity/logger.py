"""
Activity Logger

Every ledger mutation, gamification change and storage problem is written
to a structured log. This provides:
1. Traceability of how points and badges were earned
2. Visibility of storage failures, which are otherwise non-fatal
3. Debugging capability

The activity logger:
- Is synchronous; it runs inside the Ledger's critical section
- Never raises into the ledger (a failed log line must not undo a mutation)
"""

import logging
from collections import deque
from uuid import UUID

import structlog

from spendquest.models.events import LedgerEvent, LedgerEventBuilder, LedgerEventSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

_SEVERITY_METHODS = {
    LedgerEventSeverity.DEBUG: "debug",
    LedgerEventSeverity.INFO: "info",
    LedgerEventSeverity.WARNING: "warning",
    LedgerEventSeverity.ERROR: "error",
}


def configure_log_level(level: str) -> None:
    """Set the stdlib level that structlog's filter_by_level honours."""
    logging.getLogger("spendquest").setLevel(level.upper())


class ActivityLogger:
    """
    Central activity logging service.

    Keeps the events it emitted in a bounded in-memory history so callers
    (and tests) can inspect what happened during a session.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("spendquest.activity")
        self._history: deque[LedgerEvent] = deque(maxlen=history_size)

    @property
    def history(self) -> list[LedgerEvent]:
        """Events emitted so far, oldest first."""
        return list(self._history)

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event.

        Returns False if the log line could not be written.
        """
        self._history.append(event)

        method = getattr(self._logger, _SEVERITY_METHODS[event.severity])
        try:
            method("ledger_event", **event.to_log_dict())
        except (OSError, ValueError, TypeError):
            # Logging must never break a ledger operation
            return False
        return True

    def log_expense_added(
        self,
        expense_id: UUID,
        amount: str,
        category: str,
        has_receipt: bool,
    ) -> None:
        """Log a new expense."""
        self.log(LedgerEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
            has_receipt=has_receipt,
        ))

    def log_expense_updated(self, expense_id: UUID) -> None:
        self.log(LedgerEventBuilder.expense_updated(expense_id))

    def log_expense_deleted(self, expense_id: UUID) -> None:
        self.log(LedgerEventBuilder.expense_deleted(expense_id))

    def log_budget_added(
        self,
        budget_id: UUID,
        category: str,
        limit: str,
        period: str,
    ) -> None:
        """Log a new budget."""
        self.log(LedgerEventBuilder.budget_added(
            budget_id=budget_id,
            category=category,
            limit=limit,
            period=period,
        ))

    def log_budget_updated(self, budget_id: UUID) -> None:
        self.log(LedgerEventBuilder.budget_updated(budget_id))

    def log_budget_deleted(self, budget_id: UUID) -> None:
        self.log(LedgerEventBuilder.budget_deleted(budget_id))

    def log_streak_updated(self, previous: int, current: int, longest: int) -> None:
        self.log(LedgerEventBuilder.streak_updated(previous, current, longest))

    def log_level_up(self, previous: int, current: int, total_points: int) -> None:
        self.log(LedgerEventBuilder.level_up(previous, current, total_points))

    def log_badge_unlocked(self, badge_id: UUID, title: str, points: int) -> None:
        """Log a badge unlock and the points it awarded."""
        self.log(LedgerEventBuilder.badge_unlocked(badge_id, title, points))

    def log_validation_rejected(self, entity_type: str, issues: list[dict]) -> None:
        self.log(LedgerEventBuilder.validation_rejected(entity_type, issues))

    def log_persist_failed(self, key: str, error_message: str) -> None:
        """Log a failed write. The in-memory ledger stays authoritative."""
        self.log(LedgerEventBuilder.persist_failed(key, error_message))

    def log_load_fallback(self, key: str, reason: str) -> None:
        """Log that a stored collection was absent or unreadable."""
        self.log(LedgerEventBuilder.load_fallback(key, reason))

