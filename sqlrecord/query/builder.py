"""
SQL statement builders for sqlrecord.

Every builder is pure and returns a `Statement`: MySQL text with `%s`
placeholders plus the values to bind. The driver binds the values on
execution; `Statement.text` renders the same statement with the values
escaped and inlined as double-quoted literals, which is what gets logged and
stored as a record's last operation.

Builders that can find nothing to do (no insertable or settable column)
return None instead of raising. Callers check for it before executing.

Escaping (`escape_value`) is only used for that rendered text. It is not a
substitute for parameter binding, and raw `where` fragments passed to
`build_select` are inlined as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlrecord.config import get_settings
from sqlrecord.domain.models import Pagination, Row, SelectOptions, TableSchema

INTERNAL_PREFIX = "_"
DATE_TYPES = ("date", "datetime")

# MySQL has no OFFSET without LIMIT; this is the documented "all rows" bound.
MAX_ROWS = 18446744073709551615

_NULL_STRINGS = ("undefined", "null")


def escape_value(value: Any) -> str:
    """
    Backslash-escape a value for use inside a quoted SQL literal.

    Handles backslash, single quote, double quote and NUL, in that order.
    Not idempotent: a second pass escapes the backslashes added by the first.
    """
    return (
        str(value)
        .replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\0", "\\0")
    )


def escape_sql(value: Any) -> Any:
    """Escape backslashes and quotes in strings; other values pass through."""
    if isinstance(value, str):
        return value.replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')
    return value


def quote_identifier(name: str) -> str:
    return "`" + _raw(name).replace("`", "``") + "`"


def _raw(fragment: Any) -> str:
    # Verbatim SQL must survive the %-interpolation done by the driver.
    return str(fragment).replace("%", "%%")


def _literal(value: Any, safe: bool = True) -> str:
    if value is None:
        return "NULL"
    return '"' + (escape_value(value) if safe else str(value)) + '"'


@dataclass(frozen=True)
class Statement:
    """
    A statement ready for execution.

    Attributes
    ----------
    sql : str
        MySQL text with `%s` placeholders (literal `%` doubled).
    params : tuple
        Values bound to the placeholders, in order.
    literals : tuple of str
        Rendered form of each parameter, used to produce `text`.
    """

    sql: str
    params: Tuple[Any, ...] = ()
    literals: Tuple[str, ...] = ()

    @classmethod
    def raw(cls, text: str) -> "Statement":
        """Wrap hand-written SQL that binds nothing."""
        return cls(sql=_raw(text))

    @property
    def text(self) -> str:
        return self.sql % self.literals

    def __str__(self) -> str:
        return self.text


class _Binder:
    """Collects parameters and their rendered literals while a statement is built."""

    def __init__(self, safe: bool = True) -> None:
        self.safe = safe
        self.params: List[Any] = []
        self.literals: List[str] = []

    def bind(self, value: Any, literal: Optional[str] = None) -> str:
        self.params.append(value)
        self.literals.append(literal if literal is not None else _literal(value, self.safe))
        return "%s"

    def statement(self, sql: str) -> Statement:
        return Statement(sql=sql, params=tuple(self.params), literals=tuple(self.literals))


def build_insert(
    table: str, row: Mapping[str, Any], schema: TableSchema, safe: bool = True
) -> Optional[Statement]:
    """
    Build an INSERT for the schema-known, truthy, non-internal keys of `row`.

    Returns None when no such key remains. With `safe=False` the rendered
    text inlines values unescaped; execution binds them either way.
    """
    elements = [
        key
        for key in row
        if not key.startswith(INTERNAL_PREFIX) and schema.get(key) and row[key]
    ]
    if not elements:
        return None

    binder = _Binder(safe=safe)
    columns = ", ".join(quote_identifier(key) for key in elements)
    values = ", ".join(binder.bind(row[key]) for key in elements)
    return binder.statement(f"INSERT INTO {_raw(table)} ({columns}) VALUES ({values});")


def build_bulk_insert(table: str, rows: Sequence[Mapping[str, Any]]) -> Optional[Statement]:
    """
    Build one multi-row INSERT using the columns of the first row.

    Missing keys in later rows insert NULL. Returns None for no rows.
    """
    if not rows:
        return None

    binder = _Binder()
    columns = list(rows[0].keys())
    tuples = []
    for row in rows:
        placeholders = ", ".join(binder.bind(row.get(column)) for column in columns)
        tuples.append(f"({placeholders})")
    column_list = ", ".join(quote_identifier(column) for column in columns)
    return binder.statement(
        f"INSERT INTO {_raw(table)} ({column_list}) VALUES {', '.join(tuples)};"
    )


def _settable(key: str, value: Any, schema: TableSchema) -> bool:
    return (
        not key.startswith(INTERNAL_PREFIX)
        and value is not None
        and value not in _NULL_STRINGS
        and key in schema
    )


def build_update(
    table: str,
    row: Mapping[str, Any],
    schema: TableSchema,
    id: Any = None,
    key: str = "guid",
    all: bool = False,
) -> Optional[Statement]:
    """
    Build an UPDATE setting every schema-known key of `row` that has a value.

    None values and the strings "undefined"/"null" are skipped. Returns None
    when nothing is left to set. `all` drops the WHERE clause.
    """
    binder = _Binder()
    assignments = [
        f"{quote_identifier(column)} = {binder.bind(value)}"
        for column, value in row.items()
        if _settable(column, value, schema)
    ]
    if not assignments:
        return None

    sql = f"UPDATE {_raw(table)} SET {', '.join(assignments)}"
    if not all:
        sql += f" WHERE {_raw(key)} = {binder.bind(id)}"
    return binder.statement(sql + ";")


def build_bulk_update(
    table: str, key: str, id: Any, updates: Mapping[str, Any]
) -> Optional[Statement]:
    """Build an UPDATE of several columns on the row where `key` equals `id`."""
    if not updates:
        return None

    binder = _Binder()
    assignments = ", ".join(
        f"{quote_identifier(column)} = {binder.bind(value)}" for column, value in updates.items()
    )
    return binder.statement(
        f"UPDATE {_raw(table)} SET {assignments} WHERE {_raw(key)} = {binder.bind(id)};"
    )


def _date_projections(schema: TableSchema, binder: _Binder) -> Iterable[str]:
    settings = get_settings()
    for column, data_type in schema.items():
        if data_type not in DATE_TYPES:
            continue
        pattern = settings.date_format if data_type == "date" else settings.datetime_format
        placeholder = binder.bind(pattern, f"'{escape_value(pattern)}'")
        yield f"DATE_FORMAT({quote_identifier(column)}, {placeholder}) AS {quote_identifier(column)}"


def build_select(
    table: str,
    schema: TableSchema,
    id: Any = None,
    key: str = "guid",
    all: bool = False,
    options: Optional[SelectOptions] = None,
) -> Statement:
    """
    Build a SELECT over `table`.

    Date and datetime columns are re-projected through DATE_FORMAT. The
    filter comes from `options["where"]` / `options["match"]` when given;
    otherwise it is `<key> = <id>`, or nothing at all when `all` is set.

    String values in `where` are SQL fragments and are inlined verbatim.
    """
    options = options or {}
    binder = _Binder()

    projection = ", ".join(["*", *_date_projections(schema, binder)])

    conditions = []
    for column, condition in (options.get("where") or {}).items():
        if isinstance(condition, str):
            conditions.append(f"{_raw(column)} {_raw(condition)}")
        else:
            operator, value = condition
            conditions.append(f"{_raw(column)} {_raw(operator)} {binder.bind(value)}")
    for column, value in (options.get("match") or {}).items():
        conditions.append(f"{quote_identifier(column)} = {binder.bind(value)}")
    if not conditions and not all:
        conditions.append(f"{_raw(key)} = {binder.bind(id)}")

    sql = f"SELECT {projection} FROM {_raw(table)}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    if options.get("group_by"):
        sql += f" GROUP BY {_raw(options['group_by'])}"
    if options.get("order_by"):
        sql += f" ORDER BY {_raw(options['order_by'])}"

    limit = options.get("limit")
    offset = options.get("offset")
    if limit:
        sql += f" LIMIT {int(limit)}"
    elif offset:
        sql += f" LIMIT {MAX_ROWS}"
    if offset:
        sql += f" OFFSET {int(offset)}"
    return binder.statement(sql + ";")


def build_delete(table: str, id: Any, key: str = "guid") -> Statement:
    """Build a DELETE for the row where `key` (the `guid` column by default) equals `id`."""
    binder = _Binder()
    return binder.statement(f"DELETE FROM {_raw(table)} WHERE {_raw(key)} = {binder.bind(id)};")


def build_pagination(page: int = 1, page_size: int = 10) -> Pagination:
    offset = (page - 1) * page_size
    return Pagination(limit=page_size, offset=offset)


def pick_fields(row: Mapping[str, Any], schema: TableSchema) -> Row:
    """Keep the truthy entries of `row` whose key is a schema column."""
    return {key: row[key] for key in schema if row.get(key)}


__all__ = [
    "Statement",
    "escape_value",
    "escape_sql",
    "quote_identifier",
    "build_insert",
    "build_bulk_insert",
    "build_update",
    "build_bulk_update",
    "build_select",
    "build_delete",
    "build_pagination",
    "pick_fields",
]
