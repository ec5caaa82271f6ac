"""
Domain package for sqlrecord.

Contains the shapes exchanged between the introspector, the query builder
and the record object.
"""

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

__all__ = [
    "ColumnAttributes",
    "ForeignKey",
    "LastOperation",
    "OperationResult",
    "Outcome",
    "Pagination",
    "SelectOptions",
    "TableInfo",
]
