"""
Structured Logging

Every write to the ledger and every storage failure is logged as a
structured event (event name plus key/value context), so a partner asking
"where did that expense go?" can be answered from the logs.

Logging is local only. The ledger keeps no separate audit table; the
record's own created/updated stamps are the persistent trail.
"""

import logging
import sys
from typing import Optional

import structlog


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
        fmt: "json" for machine-readable output, "console" for development
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    logging.getLogger().setLevel(log_level)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Loggers are lazy: module-level loggers pick up whatever configuration
    configure_logging() applies later at startup.
    """
    return structlog.get_logger(name)
