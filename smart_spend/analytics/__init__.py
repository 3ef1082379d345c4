"""Spending analytics package."""

from smart_spend.analytics.aggregations import (
    TREND_WINDOW_DAYS,
    average_transaction,
    category_breakdown,
    format_currency,
    summarize,
    total_spent,
    transaction_count,
    trend_window,
    weekly_trend,
)

__all__ = [
    "TREND_WINDOW_DAYS",
    "average_transaction",
    "category_breakdown",
    "format_currency",
    "summarize",
    "total_spent",
    "transaction_count",
    "trend_window",
    "weekly_trend",
]
