"""
Pytest configuration for sqlrecord.

Provides fixtures for:
- A scripted fake executor for unit tests (no database needed)
- An in-memory table that understands the statements SQLObject emits
- Settings and a MySQL connection for integration tests
"""

from __future__ import annotations

import os
import re
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from sqlrecord.config import Settings, get_settings
from sqlrecord.errors import ExecutionError
from sqlrecord.infrastructure.executor import RowSet
from sqlrecord.query.builder import Statement

Responder = Callable[[Statement], Any]


class FakeExecutor:
    """
    Stands in for QueryExecutor.

    Responses queued with `queue()` are returned first, in order; after that
    the responder (if any) is asked. An exception instance as a response is
    raised instead of returned.
    """

    def __init__(self, responder: Optional[Responder] = None) -> None:
        self.statements: List[Statement] = []
        self._responder = responder
        self._queue: List[Any] = []
        self.closed = False

    def queue(self, *responses: Any) -> "FakeExecutor":
        self._queue.extend(responses)
        return self

    @property
    def texts(self) -> List[str]:
        return [statement.text for statement in self.statements]

    async def execute(self, statement: Any) -> RowSet:
        if not isinstance(statement, Statement):
            statement = Statement.raw(statement)
        self.statements.append(statement)
        if self._queue:
            response = self._queue.pop(0)
        elif self._responder is not None:
            response = self._responder(statement)
        else:
            response = []
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, RowSet):
            return response
        return RowSet(response)

    async def close(self) -> None:
        self.closed = True


_ASSIGN_RE = re.compile(r"`?(\w+)`? = %s")


class FakeTable:
    """
    In-memory table answering the statements SQLObject and the introspector send.

    Supports the properties and auto-increment lookups, INSERT, equality-only
    SELECT/UPDATE/DELETE, and nothing else.
    """

    def __init__(
        self,
        name: str,
        schema: Dict[str, str],
        auto_increment: Optional[str] = None,
        default_guid: bool = True,
    ) -> None:
        self.name = name
        self.schema = schema
        self.auto_increment = auto_increment
        self.default_guid = default_guid
        self.rows: List[Dict[str, Any]] = []
        self._next_id = 1
        self.fail_on: Optional[str] = None

    def __call__(self, statement: Statement) -> Any:
        sql = statement.sql
        if self.fail_on and sql.startswith(self.fail_on):
            return ExecutionError(statement.text, RuntimeError("boom"))
        if "INFORMATION_SCHEMA" in sql and "auto_increment" in sql:
            return [{"COLUMN_NAME": self.auto_increment}] if self.auto_increment else []
        if sql.startswith("SELECT DATA_TYPE, COLUMN_NAME"):
            if statement.params[1] != self.name:
                return []
            return [{"COLUMN_NAME": c, "DATA_TYPE": t} for c, t in self.schema.items()]
        if sql.startswith("INSERT INTO"):
            return self._insert(statement)
        if sql.startswith("SELECT"):
            return [dict(row) for row in self._where(statement)]
        if sql.startswith("UPDATE"):
            return self._update(statement)
        if sql.startswith("DELETE"):
            doomed = self._where(statement)
            self.rows = [row for row in self.rows if row not in doomed]
            return RowSet([], rowcount=len(doomed))
        raise AssertionError(f"unexpected statement: {statement.text}")

    def _insert(self, statement: Statement) -> RowSet:
        columns = re.search(r"\(([^)]*)\) VALUES", statement.sql).group(1)
        names = [column.strip(" `") for column in columns.split(",")]
        row = {column: None for column in self.schema}
        row.update(zip(names, statement.params))
        lastrowid = 0
        if self.auto_increment:
            row[self.auto_increment] = lastrowid = self._next_id
            self._next_id += 1
        if self.default_guid and "guid" in self.schema and not row.get("guid"):
            row["guid"] = str(uuid.uuid4())
        self.rows.append(row)
        return RowSet([], rowcount=1, lastrowid=lastrowid)

    def _conditions(self, statement: Statement) -> Dict[str, Any]:
        if " WHERE " not in statement.sql:
            return {}
        clause = statement.sql.split(" WHERE ", 1)[1]
        names = _ASSIGN_RE.findall(clause)
        values = statement.params[len(statement.params) - len(names):]
        return dict(zip(names, values))

    def _where(self, statement: Statement) -> List[Dict[str, Any]]:
        conditions = self._conditions(statement)
        return [
            row
            for row in self.rows
            if all(value is not None and str(row.get(k)) == str(value) for k, value in conditions.items())
        ]

    def _update(self, statement: Statement) -> RowSet:
        set_clause = statement.sql.split(" SET ", 1)[1].split(" WHERE ", 1)[0]
        names = _ASSIGN_RE.findall(set_clause)
        updates = dict(zip(names, statement.params))
        matched = self._where(statement)
        for row in matched:
            row.update(updates)
        return RowSet([], rowcount=len(matched))


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def widgets() -> FakeTable:
    return FakeTable("widgets", {"guid": "char", "name": "varchar"})


@pytest.fixture
def widgets_executor(widgets: FakeTable) -> FakeExecutor:
    return FakeExecutor(widgets)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Clear the cached Settings so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings for integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        DB_HOST=os.getenv("DB_HOST", "localhost"),
        DB_PORT=int(os.getenv("DB_PORT", "3306")),
        DB_USER=os.getenv("DB_USER", "root"),
        DB_PASS=os.getenv("DB_PASS", ""),
        DB_DB=os.getenv("DB_DB", "sqlrecord_test"),
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture(scope="session")
def init_sql() -> str:
    return (Path(__file__).parent.parent / "db" / "init.sql").read_text(encoding="utf-8")
