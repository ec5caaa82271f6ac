"""
Active-record style access to a single MySQL table.

`SQLObject` binds a table to an in-memory current row and exposes
create/read/update/destroy/read_or_create on it. The table schema is loaded
lazily, once per instance, before the first statement runs.

Row state is held in one place (`data`, the current rows). `datum` and `id`
are derived from it:

- `datum` is ``data[0]``, unless a datum was assigned explicitly.
- `id` is ``datum[key]`` when truthy, else the explicitly assigned id.
- Assigning `data` drops any explicit datum.

Instances are not safe for concurrent use; give each task its own object.
"""

from __future__ import annotations

import uuid
from typing import Any, List, Mapping, Optional

from sqlrecord import schema
from sqlrecord.domain.models import (
    LastOperation,
    OperationResult,
    Outcome,
    Row,
    TableSchema,
)
from sqlrecord.errors import ExecutionError
from sqlrecord.infrastructure.executor import QueryExecutor, get_executor
from sqlrecord.query.builder import (
    build_delete,
    build_insert,
    build_select,
    build_update,
    pick_fields,
)
from sqlrecord.utils.logging import get_logger

log = get_logger(__name__)

# Key column types that can hold a client-generated UUID.
KEY_TYPES = ("char", "varchar")


class SQLObject:
    """
    One table, its current row(s), and CRUD operations over them.

    Parameters
    ----------
    table : str
        Table the object reads and writes.
    data : list of dict, optional
        Initial rows.
    datum : dict, optional
        Explicit current row; takes precedence over ``data[0]``.
    key : str
        Identifier column used to scope SELECT, UPDATE and DELETE.
    id : Any, optional
        Identifier used when the current row carries no `key` value.
    all : bool
        Operate on the whole table: no identifier filter on SELECT/UPDATE.
    executor : QueryExecutor, optional
        Defaults to the process executor.
    """

    def __init__(
        self,
        table: Optional[str] = None,
        data: Optional[List[Row]] = None,
        datum: Optional[Row] = None,
        key: str = "guid",
        id: Any = None,
        all: bool = False,
        executor: Optional[QueryExecutor] = None,
    ) -> None:
        self.table = table
        self.key = key
        self.all = all
        self._executor = executor
        self._rows: List[Row] = []
        self._datum: Optional[Row] = None
        self._id = id

        if data is not None:
            self.data = data
        if datum is not None:
            self.datum = datum

        self.properties: TableSchema = {}
        self.auto_increment: Optional[str] = None
        self.initialized = False
        self.is_read = False
        self.last = LastOperation()

    def __repr__(self) -> str:
        return f"SQLObject(table={self.table!r}, key={self.key!r}, id={self.id!r}, datum={self.datum!r})"

    @property
    def executor(self) -> QueryExecutor:
        return self._executor or get_executor()

    @property
    def data(self) -> List[Row]:
        if self._rows:
            return self._rows
        return [self._datum] if self._datum is not None else []

    @data.setter
    def data(self, rows: List[Row]) -> None:
        if not isinstance(rows, list):
            raise TypeError(f"data must be a list of rows, got {type(rows).__name__}")
        self._rows = [dict(row) for row in rows]
        self._datum = None

    @property
    def datum(self) -> Row:
        if self._datum is not None:
            return self._datum
        return self._rows[0] if self._rows else {}

    @datum.setter
    def datum(self, row: Row) -> None:
        self._datum = dict(row)

    @property
    def id(self) -> Any:
        return self.datum.get(self.key) or self._id

    @id.setter
    def id(self, value: Any) -> None:
        self._id = value

    async def initialize(self) -> TableSchema:
        """
        Load the table schema once; later calls return the cached mapping.

        Raises
        ------
        SchemaError
            The table does not exist or its metadata could not be read.
        """
        if self.initialized:
            return self.properties
        self.properties = await schema.properties(self.table, executor=self.executor)
        self.auto_increment = await schema.auto_increment_column(self.table, executor=self.executor)
        self.initialized = True
        return self.properties

    def _key_value(self, created: Row) -> Any:
        # Value to insert for the key column, when the caller left it out.
        if self.key not in self.properties or self.key == self.auto_increment or created.get(self.key):
            return None
        if self.id:
            return self.id
        if self.properties[self.key] in KEY_TYPES:
            return str(uuid.uuid4())
        return None

    async def create(self, fields: Mapping[str, Any], safe: bool = True) -> OperationResult:
        """
        Insert the schema-known, truthy entries of `fields` and re-read the row.

        A key column missing from `fields` is filled with the current id, or
        with a new UUID for text keys, so the row can be re-read by key. When
        the insert produces an AUTO_INCREMENT value the object is re-keyed on
        that column instead. Only when neither applies is the row re-read by
        the inserted values, and then it must match exactly one row.

        Returns
        -------
        OperationResult
            SUCCESS with the re-read row; BUILD_EMPTY or EXECUTION_FAILED when
            nothing was inserted; NOT_FOUND or AMBIGUOUS when the insert ran
            but the new row could not be read back unambiguously.
        """
        log.debug("SQLObject.create() start: %s", self.datum)
        await self.initialize()

        created = pick_fields(fields or {}, self.properties)
        if created:
            key_value = self._key_value(created)
            if key_value is not None:
                created = {self.key: key_value, **created}
        self.data = [created]

        statement = build_insert(self.table, created, self.properties, safe=safe)
        if statement is None:
            log.info("SQLObject.create() failure: no elements to create %s", dict(fields or {}))
            return OperationResult(Outcome.BUILD_EMPTY)

        try:
            response = await self.executor.execute(statement)
        except ExecutionError as exc:
            log.warning("SQLObject.create() failure: %s", statement.text)
            return OperationResult(Outcome.EXECUTION_FAILED, error=exc)

        self.last = LastOperation(query=statement.text, response=response)
        log.info("SQLObject.create() success: %s", statement.text)

        options = {}
        if response.lastrowid and self.auto_increment:
            self.key = self.auto_increment
            self.id = response.lastrowid
        elif not self.id:
            options["match"] = created

        reread = await self.read(**options)
        if not reread:
            log.warning("SQLObject.create() could not re-read the inserted row: %s", statement.text)
            return OperationResult(reread.status, response=response)
        if len(reread.rows) > 1:
            log.warning(
                "SQLObject.create() re-read matched %d rows: %s", len(reread.rows), statement.text
            )
            self.data = [created]
            return OperationResult(Outcome.AMBIGUOUS, response=response)
        return OperationResult(Outcome.SUCCESS, rows=self.data, response=response)

    async def read(self, **options: Any) -> OperationResult:
        """
        Fetch the row(s) for the current id (or the whole table when `all`).

        Keyword options are passed to `build_select`: limit, offset,
        order_by, group_by, where and match. An empty result leaves the
        current rows untouched and returns NOT_FOUND.
        """
        await self.initialize()

        statement = build_select(self.table, self.properties, self.id, self.key, self.all, options)
        rows = await self.executor.execute(statement)
        self.last = LastOperation(query=statement.text, response=rows)

        if not rows:
            log.info("Query returned no results: %s", statement.text)
            return OperationResult(Outcome.NOT_FOUND, response=rows)

        self.data = list(rows)
        self.is_read = True
        log.debug("SQLObject.read(): %s", statement.text)
        return OperationResult(Outcome.SUCCESS, rows=self.data, response=rows)

    async def update(self, fields: Optional[Mapping[str, Any]]) -> OperationResult:
        """
        Write `fields` to the current row.

        The current rows become the truthy entries of `fields`; they are not
        re-read, so columns the database computes may be stale afterwards.
        """
        await self.initialize()
        if not self.is_read:
            await self.read()

        if not fields:
            log.info("Datum required to update object")
            return OperationResult(Outcome.BUILD_EMPTY)

        statement = build_update(self.table, fields, self.properties, self.id, self.key, self.all)
        if statement is None:
            log.info("SQLObject.update(): no values set")
            return OperationResult(Outcome.BUILD_EMPTY)

        try:
            response = await self.executor.execute(statement)
        except ExecutionError as exc:
            log.warning("SQLObject.update() failure: %s", statement.text)
            return OperationResult(Outcome.EXECUTION_FAILED, error=exc)

        self.last = LastOperation(query=statement.text, response=response)
        # keep the identifier once the key column drops out of the current row
        self.id = self.id
        self.data = [{column: value for column, value in fields.items() if value}]
        log.info("SQLObject.update(): %s", statement.text)
        return OperationResult(Outcome.SUCCESS, rows=self.data, response=response)

    async def destroy(self) -> OperationResult:
        await self.initialize()

        statement = build_delete(self.table, self.id, self.key)
        try:
            response = await self.executor.execute(statement)
        except ExecutionError as exc:
            log.warning("SQLObject.destroy() failure: %s", statement.text)
            return OperationResult(Outcome.EXECUTION_FAILED, error=exc)

        self.last = LastOperation(query=statement.text, response=response)
        log.info("SQLObject.destroy(): object deleted")
        return OperationResult(Outcome.SUCCESS, response=response)

    async def read_or_create(self, fields: Mapping[str, Any]) -> OperationResult:
        """
        Read the current row, creating it from `fields` when it is missing.

        Not atomic: two callers can both miss and both insert. Tables that
        must not hold duplicates need a unique constraint.
        """
        result = await self.read()
        if result.status is not Outcome.NOT_FOUND:
            return result
        await self.create(fields)
        return await self.read()


__all__ = ["SQLObject"]
