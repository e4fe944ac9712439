"""
Persistence Adapter

The only component that touches the key-value store. Each of the three
collections lives under its own key and is written and read independently:

- "expenses":    JSON list of expenses, in insertion order
- "budgets":     JSON list of budgets
- "userProfile": JSON profile object

DESIGN DECISION: Persistence failures are never fatal.
- A collection that cannot be saved is logged; the other collections are
  still saved and the in-memory ledger stays authoritative.
- A collection that is absent or unreadable at load time falls back to its
  empty/default value.

There is no schema versioning. Receipt images are encoded as base64.
"""

from typing import Callable, Optional

import structlog
from pydantic import BaseModel, Field, TypeAdapter

from spendquest.activity import ActivityLogger
from spendquest.models.gamification import UserProfile
from spendquest.models.ledger import Budget, Expense
from spendquest.services.storage.interface import KeyValueStore


EXPENSES_KEY = "expenses"
BUDGETS_KEY = "budgets"
PROFILE_KEY = "userProfile"

_EXPENSES = TypeAdapter(list[Expense])
_BUDGETS = TypeAdapter(list[Budget])
_PROFILE = TypeAdapter(UserProfile)


class LedgerState(BaseModel):
    """Everything the ledger persists."""

    expenses: list[Expense] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    profile: UserProfile = Field(default_factory=UserProfile)


class PersistenceAdapter:
    """
    Serializes ledger collections through a KeyValueStore.
    """

    def __init__(
        self,
        store: KeyValueStore,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._activity = activity_logger or ActivityLogger()
        self._logger = structlog.get_logger("spendquest.persistence")

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def save(self, state: LedgerState) -> dict[str, bool]:
        """
        Save all three collections.

        Returns:
            {key: saved_successfully} for each collection
        """
        return {
            EXPENSES_KEY: self._save_one(EXPENSES_KEY, lambda: _EXPENSES.dump_json(state.expenses)),
            BUDGETS_KEY: self._save_one(BUDGETS_KEY, lambda: _BUDGETS.dump_json(state.budgets)),
            PROFILE_KEY: self._save_one(PROFILE_KEY, lambda: _PROFILE.dump_json(state.profile)),
        }

    def load(self) -> LedgerState:
        """
        Load all three collections, using defaults for anything missing or corrupt.
        """
        expenses = self._load_one(EXPENSES_KEY, _EXPENSES.validate_json)
        budgets = self._load_one(BUDGETS_KEY, _BUDGETS.validate_json)
        profile = self._load_one(PROFILE_KEY, _PROFILE.validate_json)

        return LedgerState(
            expenses=expenses if expenses is not None else [],
            budgets=budgets if budgets is not None else [],
            profile=profile if profile is not None else UserProfile(),
        )

    def _save_one(self, key: str, serialize: Callable[[], bytes]) -> bool:
        try:
            data = serialize()
            self._store.save(key, data)
        except Exception as e:
            # Log failure but don't raise; memory stays authoritative
            self._activity.log_persist_failed(key, f"{type(e).__name__}: {e}")
            return False
        return True

    def _load_one(self, key: str, deserialize: Callable[[bytes], object]):
        try:
            data = self._store.load(key)
        except Exception as e:
            self._activity.log_load_fallback(key, f"{type(e).__name__}: {e}")
            return None

        if data is None:
            self._logger.debug("collection_absent", key=key)
            return None

        try:
            return deserialize(data)
        except ValueError as e:
            # pydantic.ValidationError and JSON decode errors are ValueErrors
            self._activity.log_load_fallback(key, f"{type(e).__name__}: {e}")
            return None
