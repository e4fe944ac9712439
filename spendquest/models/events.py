"""
Ledger Activity Events for SpendQuest

Every ledger mutation and every gamification change is described by an
event. Events are emitted to the structured log; they are not persisted
with the ledger.

DESIGN DECISION: Events are plain records built by LedgerEventBuilder.
Code that mutates the ledger never formats log lines itself.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger reports."""
    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Budgets
    BUDGET_ADDED = "budget_added"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"

    # Gamification
    STREAK_UPDATED = "streak_updated"
    LEVEL_UP = "level_up"
    BADGE_UNLOCKED = "badge_unlocked"

    # Validation
    VALIDATION_REJECTED = "validation_rejected"

    # Persistence
    PERSIST_FAILED = "persist_failed"
    LOAD_FALLBACK = "load_fallback"


class LedgerEventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)

    event_type: LedgerEventType
    severity: LedgerEventSeverity = LedgerEventSeverity.INFO

    # What record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'expense', 'budget', 'badge')"
    )
    entity_id: Optional[UUID] = None

    description: str
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.expense_added(expense_id, "12.50", "food")
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        amount: str,
        category: str,
        has_receipt: bool = False,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense of {amount} logged in {category}",
            details={"amount": amount, "category": category, "has_receipt": has_receipt},
        )

    @staticmethod
    def expense_updated(expense_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense replaced",
        )

    @staticmethod
    def expense_deleted(expense_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def budget_added(budget_id: UUID, category: str, limit: str, period: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_ADDED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget of {limit} per {period} set for {category}",
            details={"category": category, "limit": limit, "period": period},
        )

    @staticmethod
    def budget_updated(budget_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_UPDATED,
            entity_type="budget",
            entity_id=budget_id,
            description="Budget replaced",
        )

    @staticmethod
    def budget_deleted(budget_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_DELETED,
            entity_type="budget",
            entity_id=budget_id,
            description="Budget deleted",
        )

    @staticmethod
    def streak_updated(previous: int, current: int, longest: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STREAK_UPDATED,
            severity=LedgerEventSeverity.DEBUG,
            entity_type="profile",
            description=f"Streak went from {previous} to {current}",
            details={"previous": previous, "current": current, "longest": longest},
        )

    @staticmethod
    def level_up(previous: int, current: int, total_points: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEVEL_UP,
            entity_type="profile",
            description=f"Reached level {current}",
            details={"previous": previous, "current": current, "total_points": total_points},
        )

    @staticmethod
    def badge_unlocked(badge_id: UUID, title: str, points: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BADGE_UNLOCKED,
            entity_type="badge",
            entity_id=badge_id,
            description=f"Unlocked '{title}'",
            details={"title": title, "points": points},
        )

    @staticmethod
    def validation_rejected(entity_type: str, issues: list[dict]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_REJECTED,
            severity=LedgerEventSeverity.WARNING,
            entity_type=entity_type,
            description=f"Rejected {entity_type} with {len(issues)} issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def persist_failed(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSIST_FAILED,
            severity=LedgerEventSeverity.ERROR,
            description=f"Could not save '{key}'; in-memory state kept",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def load_fallback(key: str, reason: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LOAD_FALLBACK,
            severity=LedgerEventSeverity.WARNING,
            description=f"Using default for '{key}'",
            details={"key": key},
            error_message=reason,
        )
