"""
Console rendering for the sqlrecord CLI.

Turns rows, schemas and table listings into rich tables.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from sqlrecord.domain.models import ForeignKey, TableInfo

NULL_TEXT = "[dim]NULL[/dim]"


def _cell(value: Any) -> str:
    if value is None:
        return NULL_TEXT
    return str(value)


def rows_table(rows: Sequence[Mapping[str, Any]], title: Optional[str] = None) -> Table:
    """
    Build a table with one column per key of the first row.
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(rows)} row(s)")
    if not rows:
        table.add_column("(no rows)", style="dim")
        return table

    columns = list(rows[0].keys())
    for column in columns:
        table.add_column(column, style="cyan" if column in ("id", "guid") else None)
    for row in rows:
        table.add_row(*(_cell(row.get(column)) for column in columns))
    return table


def schema_table(
    table_name: str,
    properties: Mapping[str, str],
    foreign_keys: Sequence[ForeignKey] = (),
) -> Table:
    """
    Build a table listing each column, its type and what it references.
    """
    references = {fk.column: f"{fk.referenced_table}.{fk.referenced_column}" for fk in foreign_keys}
    table = Table(title=table_name, box=box.ROUNDED)
    table.add_column("Column", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("References", style="green")
    for column, data_type in properties.items():
        table.add_row(column, data_type, references.get(column, ""))
    return table


def tables_table(tables: List[TableInfo]) -> Table:
    table = Table(title="Tables", box=box.ROUNDED)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    for info in sorted(tables, key=lambda t: t.name):
        table.add_row(info.name, info.type)
    return table


def print_table(table: Table, console: Optional[Console] = None) -> None:
    (console or Console()).print(table)


__all__ = ["rows_table", "schema_table", "tables_table", "print_table"]
