"""
Schema introspection for sqlrecord.

Each function issues one query against MySQL's INFORMATION_SCHEMA, filtered
to the configured schema (`Settings.schema_name`), and returns plain Python
values or domain models. Nothing is cached; every call re-reads metadata.

All functions accept an optional `executor`; the process executor is used
when it is omitted.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional

from sqlrecord.config import get_settings
from sqlrecord.domain.models import ColumnAttributes, ForeignKey, Row, TableInfo, TableSchema
from sqlrecord.errors import ExecutionError, SchemaError
from sqlrecord.infrastructure.executor import QueryExecutor, RowSet, get_executor
from sqlrecord.query.builder import Statement, escape_value, quote_identifier
from sqlrecord.utils.logging import get_logger

log = get_logger(__name__)

META_TABLE = "meta"

_ENUM_RE = re.compile(r"^enum\((.*)\)$", re.IGNORECASE | re.DOTALL)


async def _fetch(sql: str, *params: Any, executor: Optional[QueryExecutor] = None) -> RowSet:
    literals = tuple(f"'{escape_value(value)}'" for value in params)
    statement = Statement(sql=sql, params=params, literals=literals)
    return await (executor or get_executor()).execute(statement)


def _schema() -> str:
    return get_settings().schema_name


async def columns(table: str, executor: Optional[QueryExecutor] = None) -> List[str]:
    """Column names of `table`, in declaration order."""
    rows = await _fetch(
        "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s ORDER BY ORDINAL_POSITION",
        _schema(),
        table,
        executor=executor,
    )
    return [row["COLUMN_NAME"] for row in rows]


async def properties(table: str, executor: Optional[QueryExecutor] = None) -> TableSchema:
    """
    Map each column of `table` to its declared data type.

    Raises
    ------
    SchemaError
        The metadata query failed or the table has no columns.
    """
    try:
        rows = await _fetch(
            "SELECT DATA_TYPE, COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s ORDER BY ORDINAL_POSITION",
            _schema(),
            table,
            executor=executor,
        )
    except ExecutionError as exc:
        log.warning("Error while loading properties from DB for table %s: %s", table, exc)
        raise SchemaError(table, exc) from exc

    if not rows:
        raise SchemaError(table, LookupError(f"table {table!r} not found in {_schema()!r}"))
    return {row["COLUMN_NAME"]: row["DATA_TYPE"] or "undefined" for row in rows}


async def enum_values(
    table: str, column: str, executor: Optional[QueryExecutor] = None
) -> List[str]:
    """
    Values declared by an ``enum('a','b',...)`` column; empty for anything else.
    """
    rows = await _fetch(
        "SELECT COLUMN_TYPE FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND COLUMN_NAME = %s",
        _schema(),
        table,
        column,
        executor=executor,
    )
    if not rows:
        return []
    match = _ENUM_RE.match(rows[0]["COLUMN_TYPE"] or "")
    if not match:
        return []
    return [value.strip().replace("'", "") for value in match.group(1).split(",")]


async def foreign_keys(table: str, executor: Optional[QueryExecutor] = None) -> List[ForeignKey]:
    rows = await _fetch(
        "SELECT CONSTRAINT_NAME, COLUMN_NAME, REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME "
        "FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND REFERENCED_TABLE_NAME IS NOT NULL",
        _schema(),
        table,
        executor=executor,
    )
    return [ForeignKey.model_validate(row) for row in rows]


async def table_exists(table: str, executor: Optional[QueryExecutor] = None) -> bool:
    rows = await _fetch(
        "SELECT COUNT(*) AS count FROM INFORMATION_SCHEMA.TABLES "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s",
        _schema(),
        table,
        executor=executor,
    )
    return bool(rows) and rows[0]["count"] > 0


async def is_view(table: str, executor: Optional[QueryExecutor] = None) -> Optional[bool]:
    """
    True for a view, False for a base table, None when no such table exists.
    """
    rows = await _fetch(
        "SELECT TABLE_NAME, TABLE_TYPE FROM INFORMATION_SCHEMA.TABLES "
        "WHERE TABLE_NAME = %s AND TABLE_SCHEMA = %s",
        table,
        _schema(),
        executor=executor,
    )
    for row in rows:
        if row["TABLE_NAME"] == table:
            return row["TABLE_TYPE"] == "VIEW"
    return None


async def row_count(table: str, executor: Optional[QueryExecutor] = None) -> int:
    rows = await (executor or get_executor()).execute(
        f"SELECT COUNT(*) AS count FROM {quote_identifier(table)}"
    )
    return int(rows[0]["count"])


async def tables(executor: Optional[QueryExecutor] = None) -> List[str]:
    rows = await _fetch(
        "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_SCHEMA = %s",
        _schema(),
        executor=executor,
    )
    return [row["TABLE_NAME"] for row in rows]


async def base_view_tables(executor: Optional[QueryExecutor] = None) -> List[TableInfo]:
    """Base tables and views of the schema, with their TABLE_TYPE."""
    rows = await _fetch(
        "SELECT TABLE_NAME, TABLE_TYPE FROM INFORMATION_SCHEMA.TABLES "
        "WHERE TABLE_SCHEMA = %s AND TABLE_TYPE IN ('BASE TABLE', 'VIEW')",
        _schema(),
        executor=executor,
    )
    return [TableInfo.model_validate(row) for row in rows]


async def column_attributes(
    table: str, column: str, executor: Optional[QueryExecutor] = None
) -> Optional[ColumnAttributes]:
    rows = await _fetch(
        "SELECT COLUMN_NAME, IS_NULLABLE, COLUMN_DEFAULT, DATA_TYPE "
        "FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND COLUMN_NAME = %s",
        _schema(),
        table,
        column,
        executor=executor,
    )
    return ColumnAttributes.model_validate(rows[0]) if rows else None


async def auto_increment_column(
    table: str, executor: Optional[QueryExecutor] = None
) -> Optional[str]:
    """Name of the AUTO_INCREMENT column of `table`, if it has one."""
    rows = await _fetch(
        "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
        "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND EXTRA LIKE '%%auto_increment%%'",
        _schema(),
        table,
        executor=executor,
    )
    return rows[0]["COLUMN_NAME"] if rows else None


async def empty_row(table: str, executor: Optional[QueryExecutor] = None) -> Dict[str, None]:
    """A row of `table` with every column set to None."""
    return {name: None for name in await columns(table, executor=executor)}


async def filter_row(
    row: Mapping[str, Any], table: str, executor: Optional[QueryExecutor] = None
) -> Row:
    """
    Keep the keys of `row` that are columns of `table`; falsy values become "".
    """
    allowed = set(await columns(table, executor=executor))
    return {key: value or "" for key, value in row.items() if key in allowed}


async def meta_env(executor: Optional[QueryExecutor] = None) -> Dict[str, Any]:
    """
    Application settings stored in the `meta` table.

    Each row's `meta_value` is decoded as JSON under its `meta_key`. Entries
    of ``scopes[table][key]`` that name a member of ``scopeTypes`` are
    replaced by that member.

    Raises
    ------
    ExecutionError
        The `meta` table could not be read.
    json.JSONDecodeError
        A `meta_value` is not valid JSON.
    """
    rows = await (executor or get_executor()).execute(f"SELECT * FROM {quote_identifier(META_TABLE)}")
    env = {row["meta_key"]: json.loads(row["meta_value"]) for row in rows}

    scope_types = env.get("scopeTypes") or {}
    for scopes in (env.get("scopes") or {}).values():
        for key, value in scopes.items():
            if isinstance(value, str) and scope_types.get(value):
                scopes[key] = scope_types[value]
    return env


__all__ = [
    "columns",
    "properties",
    "enum_values",
    "foreign_keys",
    "table_exists",
    "is_view",
    "row_count",
    "tables",
    "base_view_tables",
    "column_attributes",
    "auto_increment_column",
    "empty_row",
    "filter_row",
    "meta_env",
]
