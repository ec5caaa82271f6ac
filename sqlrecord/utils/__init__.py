"""
Utilities package for sqlrecord.

Shared helpers for cross-cutting concerns. Keep this package free of
database logic.
"""

from sqlrecord.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
