"""
Expense Record Store

Holds the ordered expense collection (newest first) and mirrors it into
key-value storage under a single key.

DESIGN DECISION: Every mutation rewrites the whole collection.
There is one writer and a few hundred records at most, so a full
rewrite is simpler than any diffing scheme and the stored JSON is
always a complete snapshot.

An unreadable snapshot is never fatal: it is logged and treated as an
empty collection, exactly as if nothing had been stored yet.
"""

from typing import Optional

from pydantic import TypeAdapter, ValidationError

from smart_spend.logs import get_logger
from smart_spend.models.expense import Expense, ExpenseDraft
from smart_spend.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadError,
    StorageError,
)


DEFAULT_EXPENSES_KEY = "gemini-expenses"

_EXPENSE_LIST = TypeAdapter(list[Expense])

logger = get_logger(__name__)


class ExpenseStore:
    """
    The single owner of the expense collection.

    Only append() and remove() change the collection; both persist
    the full collection before returning.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str = DEFAULT_EXPENSES_KEY,
    ):
        self._storage = storage
        self._key = key
        self._expenses: list[Expense] = []

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Read-only snapshot of the collection, newest first."""
        return tuple(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def load(self) -> list[Expense]:
        """
        Replace the in-memory collection with the stored one.

        Returns an empty list if nothing is stored or the stored
        payload cannot be read or parsed.
        """
        try:
            raw = self._storage.get_item(self._key)
            if raw is None:
                self._expenses = []
                return []
            expenses = self._deserialize(raw)
        except StorageError as e:
            logger.warning(
                "expenses_load_failed",
                key=self._key,
                error=str(e),
            )
            expenses = []

        self._expenses = expenses
        logger.info("expenses_loaded", key=self._key, count=len(expenses))
        return list(expenses)

    def append(self, draft: ExpenseDraft) -> Expense:
        """Record a new expense at the head of the collection."""
        expense = Expense.from_draft(draft)
        self._replace([expense, *self._expenses])

        logger.info(
            "expense_added",
            expense_id=expense.id,
            category=expense.category.value,
            amount=str(expense.amount),
        )
        return expense

    def remove(self, expense_id: str) -> None:
        """Remove an expense by id. Unknown ids are ignored."""
        remaining = [e for e in self._expenses if e.id != expense_id]
        removed = len(remaining) != len(self._expenses)
        self._replace(remaining)

        logger.info("expense_removed", expense_id=expense_id, found=removed)

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def _replace(self, expenses: list[Expense]) -> None:
        # Memory only changes once storage has accepted the write
        self._storage.set_item(self._key, self._serialize(expenses))
        self._expenses = expenses

    @staticmethod
    def _serialize(expenses: list[Expense]) -> str:
        return _EXPENSE_LIST.dump_json(expenses, by_alias=True).decode("utf-8")

    @staticmethod
    def _deserialize(raw: str) -> list[Expense]:
        try:
            expenses = _EXPENSE_LIST.validate_json(raw)
        except ValidationError as e:
            raise PersistenceReadError(
                f"Stored expenses are malformed ({e.error_count()} errors)"
            ) from e

        seen: set[str] = set()
        for expense in expenses:
            if expense.id in seen:
                raise PersistenceReadError(f"Duplicate expense id: {expense.id}")
            seen.add(expense.id)
        return expenses
