"""
Infrastructure package for sqlrecord.

Database connectivity: the process pool and statement execution. Keep this
layer focused on I/O and resource management, decoupled from query building
and the record object.
"""

from sqlrecord.infrastructure.executor import (
    QueryExecutor,
    RowSet,
    execute,
    execute_with_retry,
    get_executor,
    set_executor,
    shutdown,
)
from sqlrecord.infrastructure.pool import PoolManager

__all__ = [
    "PoolManager",
    "QueryExecutor",
    "RowSet",
    "execute",
    "execute_with_retry",
    "get_executor",
    "set_executor",
    "shutdown",
]
