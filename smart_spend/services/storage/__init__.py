"""
Storage Services Package

Provides the key-value storage interface, its local implementations,
and the expense store built on top of them.
"""

from smart_spend.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadError,
    StorageError,
)
from smart_spend.services.storage.local import (
    InMemoryStorage,
    LocalFileStorage,
)
from smart_spend.services.storage.expense_store import (
    DEFAULT_EXPENSES_KEY,
    ExpenseStore,
)

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "PersistenceReadError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "LocalFileStorage",
    # Expense store
    "DEFAULT_EXPENSES_KEY",
    "ExpenseStore",
]
