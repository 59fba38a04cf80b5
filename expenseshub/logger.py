"""
Structured Logging

DESIGN DECISION: Every mutation and every failure is logged as a
structured event (event name + key/value fields) rendered as JSON.
This provides:
1. Grep-able, machine readable logs
2. Debugging capability when a request fails
3. A record of what the startup gate did (connect, seed, degrade)

structlog sits on top of the standard library logging module, so
level filtering and handlers stay configurable through `logging`.
"""

import logging
import sys
from typing import Optional

import structlog


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


def configure_logging(level: Optional[str] = None) -> None:
    """
    Attach a stdout handler to the root logger.

    Args:
        level: Log level name. Defaults to the configured LOG_LEVEL.
    """
    if level is None:
        from expenseshub.config import get_settings
        level = get_settings().app.log_level

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to a module name."""
    return structlog.get_logger(name)
