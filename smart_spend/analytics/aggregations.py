"""
Aggregation Engine

DESIGN DECISION: Aggregation is PURE and DETERMINISTIC.
Every function takes the current expense collection and recomputes its
result from scratch. Nothing is cached between calls, so the dashboard
can never show numbers that disagree with the stored records.

The weekly trend only looks at the last 7 days. Older expenses are
still counted in the total and in the category breakdown.
"""

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from smart_spend.models.expense import (
    CATEGORY_COLORS,
    CategorySummary,
    DailySummary,
    DashboardSummary,
    Expense,
    ExpenseCategory,
)


TREND_WINDOW_DAYS = 7

ZERO = Decimal("0")


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    """Sum of every expense amount."""
    return sum((e.amount for e in expenses), ZERO)


def transaction_count(expenses: Sequence[Expense]) -> int:
    return len(expenses)


def average_transaction(expenses: Sequence[Expense]) -> Decimal:
    """Mean amount per expense; 0 for an empty collection."""
    if not expenses:
        return ZERO
    return total_spent(expenses) / len(expenses)


def category_breakdown(expenses: Iterable[Expense]) -> list[CategorySummary]:
    """
    Total per category, largest first.

    Categories with no expenses are left out rather than reported as 0.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount

    summaries = [
        CategorySummary(name=category, value=value, color=CATEGORY_COLORS[category])
        for category, value in totals.items()
    ]
    summaries.sort(key=lambda s: s.value, reverse=True)
    return summaries


def trend_window(today: Optional[date] = None) -> list[date]:
    """The last 7 calendar days ending today, oldest first."""
    today = today or date.today()
    return [
        today - timedelta(days=offset)
        for offset in range(TREND_WINDOW_DAYS - 1, -1, -1)
    ]


def weekly_trend(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> list[DailySummary]:
    """
    Daily totals for the rolling 7-day window.

    Always returns exactly 7 entries, oldest first. Days without
    expenses report 0; expenses outside the window are ignored here.
    """
    slots: dict[date, Decimal] = {day: ZERO for day in trend_window(today)}

    for expense in expenses:
        if expense.date in slots:
            slots[expense.date] += expense.amount

    return [DailySummary(date=day, total=total) for day, total in slots.items()]


def summarize(
    expenses: Sequence[Expense],
    today: Optional[date] = None,
) -> DashboardSummary:
    """Compute every dashboard figure for the given collection."""
    return DashboardSummary(
        total_spent=total_spent(expenses),
        transaction_count=transaction_count(expenses),
        average_transaction=average_transaction(expenses),
        categories=category_breakdown(expenses),
        weekly_trend=weekly_trend(expenses, today),
    )


def format_currency(amount: Decimal | float | int, symbol: str = "₹") -> str:
    """
    Render an amount in the app's single display currency.

    Digits are grouped the Indian way (thousand, then lakh, crore):
    ₹1,234.50, ₹1,00,000.00, ₹12,34,567.89.
    """
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"


def _group_indian(digits: str) -> str:
    # Last three digits together, then groups of two
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    return ",".join([head, *groups, tail])
