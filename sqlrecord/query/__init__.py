"""
Query package for sqlrecord.

Pure statement builders; nothing in here touches the database.
"""

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
    pick_fields,
    quote_identifier,
)

__all__ = [
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
    "pick_fields",
    "quote_identifier",
]
