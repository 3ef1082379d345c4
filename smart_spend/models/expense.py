"""
Core Data Models for Smart Spend

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce the expense invariants at runtime (positive amount, known category)
2. Provide clear validation error messages
3. Serialize to the same JSON shape the browser client stored

DESIGN DECISION: Stored records are frozen. An expense is created once and
only ever removed, never edited in place.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported spending categories.

    DESIGN DECISION: A closed set keeps the category chart readable and
    gives the AI a fixed list to choose from. Anything the AI invents
    is folded into OTHER.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    HOUSING = "Housing"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "ExpenseCategory":
        """Map a raw category name to a category, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.OTHER
        wanted = str(value).strip().lower()
        for category in cls:
            if category.value.lower() == wanted:
                return category
        return cls.OTHER

    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self]


CATEGORY_COLORS: dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: "#10b981",           # Emerald
    ExpenseCategory.TRANSPORT: "#3b82f6",      # Blue
    ExpenseCategory.SHOPPING: "#f59e0b",       # Amber
    ExpenseCategory.UTILITIES: "#6366f1",      # Indigo
    ExpenseCategory.ENTERTAINMENT: "#ec4899",  # Pink
    ExpenseCategory.HEALTH: "#ef4444",         # Red
    ExpenseCategory.HOUSING: "#8b5cf6",        # Violet
    ExpenseCategory.OTHER: "#64748b",          # Slate
}


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    The caller-supplied part of an expense.

    Produced by manual entry validation or by the extraction agent,
    and turned into an Expense by the store.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent, always positive"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Spending category"
    )
    date: dt.date = Field(
        ...,
        description="Transaction date (not the time it was recorded)"
    )


class Expense(ExpenseDraft):
    """
    A recorded expense.

    Serialized with by_alias=True the keys match the stored JSON:
    id, description, amount, category, date, createdAt.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique expense ID"
    )
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc),
        alias="createdAt",
        description="When the expense was recorded; used for ordering only"
    )

    @classmethod
    def from_draft(cls, draft: ExpenseDraft) -> "Expense":
        """Create a new expense with a fresh id and creation time."""
        return cls(**draft.model_dump())


# =============================================================================
# EXTRACTION MODELS
# =============================================================================

class ExtractedExpense(BaseModel):
    """
    Expense details as returned by the extraction agent.

    Only the date may be missing; the caller fills it in with today's
    date when turning this into a draft.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: Optional[dt.date] = None
    description: str = Field(..., min_length=1, max_length=200)

    @field_validator("category", mode="before")
    @classmethod
    def fallback_category(cls, v) -> ExpenseCategory:
        """Unknown categories are coerced, never rejected."""
        return ExpenseCategory.coerce(v)

    def to_draft(self, today: Optional[dt.date] = None) -> ExpenseDraft:
        """Build a draft, substituting today when no date was extracted."""
        return ExpenseDraft(
            description=self.description,
            amount=self.amount,
            category=self.category,
            date=self.date or today or dt.date.today(),
        )


# =============================================================================
# DERIVED VIEWS (never persisted)
# =============================================================================

class CategorySummary(BaseModel):
    """Total spent in one category."""
    model_config = ConfigDict(frozen=True)

    name: ExpenseCategory
    value: Decimal
    color: str


class DailySummary(BaseModel):
    """Total spent on one day of the weekly trend."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    total: Decimal

    @property
    def label(self) -> str:
        """Short weekday name used on the chart axis, e.g. 'Mon'."""
        return self.date.strftime("%a")


class DashboardSummary(BaseModel):
    """Everything the dashboard shows, computed in one pass."""
    model_config = ConfigDict(frozen=True)

    total_spent: Decimal
    transaction_count: int = Field(ge=0)
    average_transaction: Decimal
    categories: list[CategorySummary] = Field(default_factory=list)
    weekly_trend: list[DailySummary] = Field(default_factory=list)
