"""
Exception hierarchy for sqlrecord.

Only schema and execution failures are exceptions. Builders signal "nothing
to do" by returning None, and record operations report outcomes through
`sqlrecord.domain.models.OperationResult`.
"""

from __future__ import annotations

from typing import Any, Optional


class SQLRecordError(Exception):
    """Base class for every error raised by sqlrecord."""


class SchemaError(SQLRecordError):
    """Metadata lookup for a table failed, or the table does not exist."""

    def __init__(self, table: str, cause: Optional[BaseException] = None) -> None:
        self.table = table
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to load properties from table: {table}{detail}")


class ExecutionError(SQLRecordError):
    """The database rejected a statement."""

    def __init__(self, statement: Any, cause: Optional[BaseException] = None) -> None:
        self.statement = statement
        self.cause = cause
        super().__init__(f"Query failed: {cause} [{statement}]")


class RetryExhausted(ExecutionError):
    """A statement kept failing after every retry attempt."""

    def __init__(
        self, statement: Any, attempts: int, cause: Optional[BaseException] = None
    ) -> None:
        self.attempts = attempts
        super().__init__(statement, cause)
        self.args = (f"Query failed after {attempts} attempts: {cause}",)


__all__ = ["SQLRecordError", "SchemaError", "ExecutionError", "RetryExhausted"]
