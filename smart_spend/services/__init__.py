"""Services package."""

from smart_spend.services.storage import (
    DEFAULT_EXPENSES_KEY,
    ExpenseStore,
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
    PersistenceReadError,
    StorageError,
)

__all__ = [
    "DEFAULT_EXPENSES_KEY",
    "ExpenseStore",
    "InMemoryStorage",
    "KeyValueStorageInterface",
    "LocalFileStorage",
    "PersistenceReadError",
    "StorageError",
]
