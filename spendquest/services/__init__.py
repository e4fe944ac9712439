"""Services package."""

from spendquest.services.storage import (
    BUDGETS_KEY,
    EXPENSES_KEY,
    PROFILE_KEY,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LedgerState,
    PersistenceAdapter,
    StorageError,
    StorageWriteError,
)

__all__ = [
    "BUDGETS_KEY",
    "EXPENSES_KEY",
    "PROFILE_KEY",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "LedgerState",
    "PersistenceAdapter",
    "StorageError",
    "StorageWriteError",
]
