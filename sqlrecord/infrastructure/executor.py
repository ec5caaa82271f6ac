"""
Statement execution for sqlrecord.

`QueryExecutor` runs one `Statement` on a pooled connection and returns the
rows as a `RowSet`. `execute_with_retry` re-runs a failing statement a fixed
number of times, without backoff, using tenacity.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

import aiomysql
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_none

from sqlrecord.config import get_settings
from sqlrecord.errors import ExecutionError, RetryExhausted
from sqlrecord.infrastructure.pool import PoolManager
from sqlrecord.query.builder import Statement
from sqlrecord.utils.logging import get_logger

log = get_logger(__name__)

StatementLike = Union[Statement, str]


class RowSet(list):
    """
    Rows returned by a statement, in order.

    Also carries the cursor's `rowcount` and `lastrowid` so that INSERT and
    UPDATE callers can read the affected count and generated id.
    """

    def __init__(
        self, rows: Iterable[Any] = (), rowcount: int = -1, lastrowid: Optional[int] = None
    ) -> None:
        super().__init__(rows)
        self.rowcount = rowcount
        self.lastrowid = lastrowid

    def __repr__(self) -> str:
        return f"RowSet({list.__repr__(self)}, rowcount={self.rowcount}, lastrowid={self.lastrowid})"


def _as_statement(statement: StatementLike) -> Statement:
    if isinstance(statement, Statement):
        return statement
    return Statement.raw(statement)


class QueryExecutor:
    """
    Executes statements against the pool held by a PoolManager.
    """

    def __init__(self, pools: Optional[PoolManager] = None) -> None:
        self.pools = pools or PoolManager()

    async def execute(self, statement: StatementLike) -> RowSet:
        """
        Run one statement and return its rows.

        Raises
        ------
        ExecutionError
            The driver rejected the statement, or the pool or connection
            could not be opened.
        """
        statement = _as_statement(statement)
        log.debug("execute: %s", statement.text)
        try:
            pool = await self.pools.get_pool()
            async with pool.acquire() as conn:
                async with conn.cursor(aiomysql.DictCursor) as cur:
                    await cur.execute(statement.sql, statement.params)
                    rows = await cur.fetchall()
                    return RowSet(rows or (), rowcount=cur.rowcount, lastrowid=cur.lastrowid)
        except (aiomysql.MySQLError, OSError) as exc:
            raise ExecutionError(statement.text, exc) from exc

    async def execute_with_retry(self, statement: StatementLike, retries: Optional[int] = None) -> RowSet:
        """
        Run a statement, re-attempting on failure up to `retries` times in total.

        Raises
        ------
        RetryExhausted
            Every attempt failed; carries the attempt count and the last error.
        """
        statement = _as_statement(statement)
        attempts = retries if retries is not None else get_settings().query_retries
        if attempts < 1:
            raise ValueError("retries must be at least 1")

        def _log_failure(retry_state: Any) -> None:
            log.warning(
                "Attempt %d failed: %s",
                retry_state.attempt_number,
                retry_state.outcome.exception(),
            )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_none(),
                retry=retry_if_exception_type(ExecutionError),
                after=_log_failure,
            ):
                with attempt:
                    return await self.execute(statement)
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            raise RetryExhausted(statement.text, attempts, last_error) from last_error
        raise AssertionError("unreachable")  # pragma: no cover

    async def close(self) -> None:
        await self.pools.close()


_executor: Optional[QueryExecutor] = None


def get_executor() -> QueryExecutor:
    """
    Return the process-wide executor, creating it on first use.
    """
    global _executor
    if _executor is None:
        _executor = QueryExecutor()
    return _executor


def set_executor(executor: Optional[QueryExecutor]) -> None:
    """Replace (or with None, forget) the process-wide executor."""
    global _executor
    _executor = executor


async def execute(statement: StatementLike) -> RowSet:
    return await get_executor().execute(statement)


async def execute_with_retry(statement: StatementLike, retries: Optional[int] = None) -> RowSet:
    return await get_executor().execute_with_retry(statement, retries)


async def shutdown() -> None:
    """Close the process-wide pool, if one was opened."""
    global _executor
    if _executor is not None:
        await _executor.close()
        _executor = None


__all__ = [
    "RowSet",
    "QueryExecutor",
    "get_executor",
    "set_executor",
    "execute",
    "execute_with_retry",
    "shutdown",
]
