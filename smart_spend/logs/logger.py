"""
Structured Logging

Every state change (expense added or removed, extraction started,
succeeded or failed, unreadable storage) is logged as a structured event
so a session can be reconstructed from the log alone.

The logger:
- Renders JSON lines through the standard library logging handlers
- Is configured once at startup via configure_logging()
- Never raises; logging must not break the main flow
"""

import logging
import sys

import structlog


def configure_logging(debug: bool = False) -> None:
    """
    Configure structlog on top of the standard library logger.

    Safe to call more than once (Streamlit re-runs the script on every
    interaction); later calls just reset the level.
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a module logger, e.g. get_logger(__name__)."""
    return structlog.get_logger(name)
