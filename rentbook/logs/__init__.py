"""Logging package."""

from rentbook.logs.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
