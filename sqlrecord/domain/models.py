"""
Domain models for sqlrecord.

Pydantic models mirror rows of the INFORMATION_SCHEMA views the introspector
reads (aliases match the upper-case column names MySQL returns). TypedDicts
describe the plain mappings passed into the query builder, and
OperationResult is the tagged outcome returned by SQLObject operations.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypedDict, Union

from pydantic import BaseModel, Field, field_validator

Row = Dict[str, Any]
TableSchema = Dict[str, str]

NO_QUERY = "No query recorded!"


class ForeignKey(BaseModel):
    """
    One foreign-key column of a table (KEY_COLUMN_USAGE).
    """

    constraint_name: str = Field(..., alias="CONSTRAINT_NAME")
    column: str = Field(..., alias="COLUMN_NAME")
    referenced_table: str = Field(..., alias="REFERENCED_TABLE_NAME")
    referenced_column: str = Field(..., alias="REFERENCED_COLUMN_NAME")

    model_config = {"frozen": True, "populate_by_name": True}


class ColumnAttributes(BaseModel):
    """
    Nullability, default and data type of a single column.
    """

    column_name: str = Field(..., alias="COLUMN_NAME")
    is_nullable: bool = Field(..., alias="IS_NULLABLE")
    column_default: Optional[str] = Field(None, alias="COLUMN_DEFAULT")
    data_type: str = Field(..., alias="DATA_TYPE")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("is_nullable", mode="before")
    @classmethod
    def _yes_no(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper() == "YES"
        return value


class TableInfo(BaseModel):
    """
    A base table or view and its TABLE_TYPE.
    """

    name: str = Field(..., alias="TABLE_NAME")
    type: str = Field(..., alias="TABLE_TYPE")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def is_view(self) -> bool:
        return self.type == "VIEW"


class LastOperation(BaseModel):
    """
    The most recent statement a record object ran and what came back.
    """

    query: str = NO_QUERY
    response: Any = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class Pagination(TypedDict):
    limit: int
    offset: int


WhereCondition = Union[str, Tuple[str, Any]]


class SelectOptions(TypedDict, total=False):
    """
    Optional clauses accepted by build_select and SQLObject.read.

    `where` maps a column to either a raw fragment (appended verbatim, so it
    must never carry user input) or an ``(operator, value)`` pair whose value
    is bound. `match` maps columns to values compared with ``=``.
    """

    limit: int
    offset: int
    order_by: str
    group_by: str
    where: Mapping[str, WhereCondition]
    match: Mapping[str, Any]


class Outcome(str, enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    BUILD_EMPTY = "build_empty"
    EXECUTION_FAILED = "execution_failed"
    # the re-read after an insert matched more than one row
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class OperationResult:
    """
    Result of a SQLObject operation.

    Truthy only on success, so ``if await obj.read():`` keeps reading
    naturally while "no rows" and "failed" stay distinguishable through
    `status`.
    """

    status: Outcome
    rows: List[Row] = field(default_factory=list)
    response: Any = None
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.status is Outcome.SUCCESS

    @property
    def ok(self) -> bool:
        return self.status is Outcome.SUCCESS


__all__ = [
    "Row",
    "TableSchema",
    "NO_QUERY",
    "ForeignKey",
    "ColumnAttributes",
    "TableInfo",
    "LastOperation",
    "Pagination",
    "WhereCondition",
    "SelectOptions",
    "Outcome",
    "OperationResult",
]
