"""Structured logging package."""

from smart_spend.logs.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
