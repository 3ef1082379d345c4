"""
Data Models Package

This package contains all Pydantic models used in Smart Spend.
All data flowing through the system must conform to these schemas.
"""

from smart_spend.models.expense import (
    CATEGORY_COLORS,
    CategorySummary,
    DailySummary,
    DashboardSummary,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExtractedExpense,
)
from smart_spend.models.task import (
    ExtractionMode,
    ExtractionTask,
    TaskInProgressError,
    TaskStatus,
)

__all__ = [
    # Expense models
    "CATEGORY_COLORS",
    "CategorySummary",
    "DailySummary",
    "DashboardSummary",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExtractedExpense",
    # Task state
    "ExtractionMode",
    "ExtractionTask",
    "TaskInProgressError",
    "TaskStatus",
]
