"""
Tests for Smart Spend data models

Test strategy:
1. Unit tests for individual components (models, aggregations, store)
2. Flow tests for the tracker (with a fake Gemini model)
3. No real API calls in tests
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from smart_spend.models.expense import (
    CATEGORY_COLORS,
    DailySummary,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExtractedExpense,
)


class TestExpenseCategory:
    """Tests for the category enum."""

    def test_all_categories_exist(self):
        """Test that the eight expected categories exist."""
        expected = [
            "Food", "Transport", "Shopping", "Utilities",
            "Entertainment", "Health", "Housing", "Other",
        ]
        assert [c.value for c in ExpenseCategory] == expected

    def test_every_category_has_a_color(self):
        """Test each category maps to a hex color."""
        for category in ExpenseCategory:
            assert CATEGORY_COLORS[category].startswith("#")
        assert ExpenseCategory.FOOD.color == "#10b981"
        assert ExpenseCategory.OTHER.color == "#64748b"

    def test_coerce_exact_and_case_insensitive(self):
        """Test known names are matched regardless of case."""
        assert ExpenseCategory.coerce("Food") == ExpenseCategory.FOOD
        assert ExpenseCategory.coerce("  transport ") == ExpenseCategory.TRANSPORT
        assert ExpenseCategory.coerce(ExpenseCategory.HEALTH) == ExpenseCategory.HEALTH

    @pytest.mark.parametrize("raw", ["Groceries", "", None, "Fuel"])
    def test_coerce_unknown_falls_back_to_other(self, raw):
        """Test unknown or empty names become Other."""
        assert ExpenseCategory.coerce(raw) == ExpenseCategory.OTHER


class TestExpenseModels:
    """Tests for ExpenseDraft and Expense."""

    def test_draft_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        draft = ExpenseDraft(
            description="  Coffee  ",
            amount=Decimal("3.50"),
            category=ExpenseCategory.FOOD,
            date=date(2024, 12, 1),
        )
        assert draft.description == "Coffee"

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_draft_rejects_non_positive_amount(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            ExpenseDraft(
                description="Test",
                amount=Decimal(amount),
                category=ExpenseCategory.OTHER,
                date=date(2024, 12, 1),
            )

    def test_draft_rejects_unknown_category(self):
        """Test drafts only take enumerated categories."""
        with pytest.raises(ValueError):
            ExpenseDraft(
                description="Test",
                amount=Decimal("1"),
                category="Groceries",
                date=date(2024, 12, 1),
            )

    def test_from_draft_assigns_id_and_created_at(self):
        """Test that every expense gets its own id and a creation time."""
        draft = ExpenseDraft(
            description="Taxi",
            amount=Decimal("250"),
            category=ExpenseCategory.TRANSPORT,
            date=date(2024, 12, 1),
        )
        first = Expense.from_draft(draft)
        second = Expense.from_draft(draft)

        assert first.id != second.id
        assert first.description == "Taxi"
        assert first.created_at.tzinfo is not None

    def test_expense_is_immutable(self, make_expense):
        """Test records cannot be changed in place."""
        expense = make_expense()
        with pytest.raises(ValueError):
            expense.amount = Decimal("1")

    def test_serializes_with_stored_key_names(self, make_expense):
        """Test the JSON keys match the stored collection layout."""
        expense = make_expense(amount="12.50", expense_date=date(2024, 12, 3))
        data = json.loads(expense.model_dump_json(by_alias=True))

        assert set(data) == {"id", "description", "amount", "category", "date", "createdAt"}
        assert data["date"] == "2024-12-03"
        assert data["category"] == "Food"

    def test_accepts_browser_style_payload(self):
        """Test numeric amounts and millisecond timestamps are accepted."""
        expense = Expense.model_validate({
            "id": "abc",
            "description": "Lunch at Subway",
            "amount": 500,
            "category": "Food",
            "date": "2024-12-15",
            "createdAt": 1734220800000,
        })
        assert expense.amount == Decimal("500")
        assert expense.created_at == datetime(2024, 12, 15, tzinfo=timezone.utc)


class TestExtractedExpense:
    """Tests for normalized extraction results."""

    def test_unknown_category_becomes_other(self):
        """Test 'Groceries' is coerced rather than rejected."""
        extracted = ExtractedExpense(
            amount=Decimal("45"),
            category="Groceries",
            description="Supermarket",
        )
        assert extracted.category == ExpenseCategory.OTHER

    def test_to_draft_uses_today_when_date_missing(self):
        """Test the caller's today is substituted for a missing date."""
        extracted = ExtractedExpense(
            amount=Decimal("45"),
            category="Food",
            description="Supermarket",
        )
        draft = extracted.to_draft(date(2024, 12, 15))
        assert draft.date == date(2024, 12, 15)
        assert draft.category == ExpenseCategory.FOOD

    def test_to_draft_keeps_extracted_date(self):
        """Test an extracted date wins over today."""
        extracted = ExtractedExpense(
            amount=Decimal("45"),
            category="Food",
            date=date(2024, 12, 10),
            description="Supermarket",
        )
        assert extracted.to_draft(date(2024, 12, 15)).date == date(2024, 12, 10)


class TestDailySummary:
    """Tests for DailySummary."""

    def test_label_is_short_weekday(self):
        """Test the chart label is the abbreviated weekday."""
        summary = DailySummary(date=date(2024, 12, 16), total=Decimal("0"))
        assert summary.label == "Mon"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
