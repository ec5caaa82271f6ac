"""
sqlrecord - active-record style access to MySQL tables.

This package provides:

- Schema introspection over INFORMATION_SCHEMA (columns, types, enums,
  foreign keys, views)
- Pure builders for INSERT/SELECT/UPDATE/DELETE statements with bound
  parameters
- A pooled async executor with a fixed-count retry helper
- `SQLObject`, a per-table record object with create/read/update/destroy
  and read_or_create
- `cache_fetch`, an HTTP JSON cache backed by a `cache` table
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlrecord.config import Settings, get_settings
from sqlrecord.domain.models import (
    ColumnAttributes,
    ForeignKey,
    LastOperation,
    OperationResult,
    Outcome,
    Pagination,
    SelectOptions,
    TableInfo,
)
from sqlrecord.errors import ExecutionError, RetryExhausted, SchemaError, SQLRecordError
from sqlrecord.extensions import cache_fetch
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
from sqlrecord.query.builder import (
    Statement,
    build_bulk_insert,
    build_bulk_update,
    build_delete,
    build_insert,
    build_pagination,
    build_select,
    build_update,
    escape_sql,
    escape_value,
)
from sqlrecord.record import SQLObject
from sqlrecord.schema import (
    auto_increment_column,
    base_view_tables,
    column_attributes,
    columns,
    empty_row,
    enum_values,
    filter_row,
    foreign_keys,
    meta_env,
    is_view,
    properties,
    row_count,
    table_exists,
    tables,
)
from sqlrecord.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "SQLRecordError",
    "SchemaError",
    "ExecutionError",
    "RetryExhausted",
    # Domain
    "ColumnAttributes",
    "ForeignKey",
    "LastOperation",
    "OperationResult",
    "Outcome",
    "Pagination",
    "SelectOptions",
    "TableInfo",
    # Execution
    "PoolManager",
    "QueryExecutor",
    "RowSet",
    "execute",
    "execute_with_retry",
    "get_executor",
    "set_executor",
    "shutdown",
    # Query building
    "Statement",
    "build_bulk_insert",
    "build_bulk_update",
    "build_delete",
    "build_insert",
    "build_pagination",
    "build_select",
    "build_update",
    "escape_sql",
    "escape_value",
    # Schema introspection
    "auto_increment_column",
    "base_view_tables",
    "column_attributes",
    "columns",
    "empty_row",
    "enum_values",
    "filter_row",
    "foreign_keys",
    "meta_env",
    "is_view",
    "properties",
    "row_count",
    "table_exists",
    "tables",
    # Record object and extensions
    "SQLObject",
    "cache_fetch",
    # Logging
    "configure_logging",
    "get_logger",
]
