"""
Abstract Storage Interface

DESIGN DECISION: The expense collection lives in a plain key-value store,
the same shape as browser local storage: string keys, string values.
This allows us to:
1. Keep the data on the user's machine as a single readable JSON file
2. Use in-memory storage for testing
3. Swap the backend without touching the expense store

The interface is intentionally tiny - three operations on opaque strings.
Serialization is the expense store's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value storage.

    Any backend (local files, memory, a browser bridge, ...)
    must implement these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The storage key
            value: The string to store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Args:
            key: The storage key
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceReadError(StorageError):
    """Stored data exists but could not be parsed."""
    pass
