from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Awaitable, Optional, TypeVar

import httpx
import typer

from sqlrecord import reporter, schema
from sqlrecord.config import get_settings
from sqlrecord.errors import SQLRecordError
from sqlrecord.extensions import cache_fetch
from sqlrecord.infrastructure.executor import shutdown
from sqlrecord.query.builder import build_pagination
from sqlrecord.record import SQLObject
from sqlrecord.utils.logging import configure_logging

app = typer.Typer(help="sqlrecord: inspect and read MySQL tables.")

T = TypeVar("T")


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _run(coro: Awaitable[T]) -> T:
    """Run one command coroutine and close the pool it opened."""

    async def _main() -> T:
        try:
            return await coro
        finally:
            await shutdown()

    try:
        return asyncio.run(_main())
    except (SQLRecordError, httpx.HTTPError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"schema={settings.schema_name} pool={settings.pool_max_size} "
        f"retries={settings.query_retries} env={settings.app_env}"
    )


@app.command()
def tables() -> None:
    """
    List the base tables and views of the configured schema.
    """
    found = _run(schema.base_view_tables())
    reporter.print_table(reporter.tables_table(found))


@app.command()
def describe(table: str = typer.Argument(..., help="Table to describe.")) -> None:
    """
    Show the columns of a table, their types and foreign-key targets.
    """

    async def _describe() -> Any:
        return await schema.properties(table), await schema.foreign_keys(table)

    properties, foreign_keys = _run(_describe())
    reporter.print_table(reporter.schema_table(table, properties, foreign_keys))


@app.command()
def read(
    table: str = typer.Argument(..., help="Table to read from."),
    key: str = typer.Option("guid", "--key", "-k", help="Identifier column."),
    id: Optional[str] = typer.Option(None, "--id", "-i", help="Identifier value."),
    all_rows: bool = typer.Option(False, "--all", "-a", help="Read the whole table."),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number (with --all)."),
    page_size: int = typer.Option(10, "--page-size", "-n", min=1, help="Rows per page."),
) -> None:
    """
    Print the row(s) matching an identifier, or one page of the whole table.
    """
    record = SQLObject(table=table, key=key, id=id, all=all_rows)
    options = build_pagination(page, page_size) if all_rows else {}
    result = _run(record.read(**options))
    if not result:
        typer.echo(f"No rows in {table} for {key}={id}.", err=True)
        raise typer.Exit(code=1)
    reporter.print_table(reporter.rows_table(result.rows, title=table))


@app.command()
def fetch(
    ref: str = typer.Argument(..., help="Cache reference."),
    url: str = typer.Argument(..., help="URL to fetch on a cache miss."),
) -> None:
    """
    Fetch a JSON document through the cache table.
    """
    document = _run(cache_fetch(ref, url))
    typer.echo(json.dumps(document, indent=2, default=str))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
