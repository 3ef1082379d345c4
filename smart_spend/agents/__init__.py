"""AI Agents package."""

from smart_spend.agents.extraction_agent import (
    EXPENSE_RESPONSE_SCHEMA,
    ExpenseExtractionAgent,
    ExtractionError,
)

__all__ = [
    "EXPENSE_RESPONSE_SCHEMA",
    "ExpenseExtractionAgent",
    "ExtractionError",
]
