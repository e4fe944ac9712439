"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists through an opaque key-value store.
This allows us to:
1. Keep the engine ignorant of the storage technology
2. Use in-memory storage for testing
3. Swap the file store for a platform store later

The interface is intentionally minimal: load bytes by key, save bytes by key.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the persistence backend.

    Any backend (files, a preferences store, a database table)
    must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under a key.

        Args:
            key: Record key

        Returns:
            The stored bytes, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, data: bytes) -> None:
        """
        Store bytes under a key, replacing any previous value.

        Args:
            key: Record key
            data: Serialized record

        Raises:
            StorageWriteError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """Could not write a value to the backend."""
    pass
