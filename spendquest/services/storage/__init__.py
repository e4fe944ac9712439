"""
Storage Services Package

Provides the key-value store interface, its implementations, and the
persistence adapter that maps ledger collections onto store keys.
"""

from spendquest.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageWriteError,
)
from spendquest.services.storage.stores import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
)
from spendquest.services.storage.adapter import (
    BUDGETS_KEY,
    EXPENSES_KEY,
    PROFILE_KEY,
    LedgerState,
    PersistenceAdapter,
)

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "StorageError",
    "StorageWriteError",
    # Implementations
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    # Persistence adapter
    "BUDGETS_KEY",
    "EXPENSES_KEY",
    "PROFILE_KEY",
    "LedgerState",
    "PersistenceAdapter",
]
