from __future__ import annotations

import pytest

from sqlrecord import schema
from sqlrecord.domain.models import ColumnAttributes, ForeignKey, TableInfo
from sqlrecord.errors import ExecutionError, SchemaError
from sqlrecord.infrastructure import executor as executor_module

pytestmark = pytest.mark.asyncio


async def test_columns_are_scoped_to_configured_schema(fake_executor, monkeypatch) -> None:
    monkeypatch.setenv("DB_DB", "shop")
    fake_executor.queue([{"COLUMN_NAME": "guid"}, {"COLUMN_NAME": "name"}])

    assert await schema.columns("widgets", executor=fake_executor) == ["guid", "name"]
    statement = fake_executor.statements[0]
    assert statement.params == ("shop", "widgets")
    assert "INFORMATION_SCHEMA.COLUMNS" in statement.sql
    assert "TABLE_SCHEMA = 'shop' AND TABLE_NAME = 'widgets'" in statement.text


async def test_db_schema_overrides_database_name(fake_executor, monkeypatch) -> None:
    monkeypatch.setenv("DB_DB", "shop")
    monkeypatch.setenv("DB_SCHEMA", "catalog")
    fake_executor.queue([])

    await schema.columns("widgets", executor=fake_executor)

    assert fake_executor.statements[0].params[0] == "catalog"


async def test_properties_maps_columns_to_types(fake_executor) -> None:
    fake_executor.queue(
        [
            {"COLUMN_NAME": "guid", "DATA_TYPE": "char"},
            {"COLUMN_NAME": "made_on", "DATA_TYPE": "date"},
            {"COLUMN_NAME": "blob", "DATA_TYPE": None},
        ]
    )

    result = await schema.properties("widgets", executor=fake_executor)

    assert result == {"guid": "char", "made_on": "date", "blob": "undefined"}


async def test_properties_wraps_query_failure(fake_executor) -> None:
    cause = ExecutionError("SELECT ...", RuntimeError("gone away"))
    fake_executor.queue(cause)

    with pytest.raises(SchemaError) as excinfo:
        await schema.properties("widgets", executor=fake_executor)

    assert excinfo.value.table == "widgets"
    assert excinfo.value.cause is cause
    assert "widgets" in str(excinfo.value)


async def test_properties_of_absent_table_raises(fake_executor) -> None:
    fake_executor.queue([])

    with pytest.raises(SchemaError) as excinfo:
        await schema.properties("nope", executor=fake_executor)

    assert excinfo.value.table == "nope"


@pytest.mark.parametrize(
    ("column_type", "expected"),
    [
        ("enum('small','medium','large')", ["small", "medium", "large"]),
        ("ENUM('a')", ["a"]),
        ("varchar(255)", []),
    ],
)
async def test_enum_values(fake_executor, column_type, expected) -> None:
    fake_executor.queue([{"COLUMN_TYPE": column_type}])

    assert await schema.enum_values("widgets", "kind", executor=fake_executor) == expected
    assert fake_executor.statements[0].params[1:] == ("widgets", "kind")


async def test_enum_values_for_unknown_column(fake_executor) -> None:
    fake_executor.queue([])
    assert await schema.enum_values("widgets", "nope", executor=fake_executor) == []


async def test_foreign_keys(fake_executor) -> None:
    fake_executor.queue(
        [
            {
                "CONSTRAINT_NAME": "fk_parts_widget",
                "COLUMN_NAME": "widget_guid",
                "REFERENCED_TABLE_NAME": "widgets",
                "REFERENCED_COLUMN_NAME": "guid",
            }
        ]
    )

    keys = await schema.foreign_keys("parts", executor=fake_executor)

    assert keys == [
        ForeignKey(
            constraint_name="fk_parts_widget",
            column="widget_guid",
            referenced_table="widgets",
            referenced_column="guid",
        )
    ]
    assert "REFERENCED_TABLE_NAME IS NOT NULL" in fake_executor.statements[0].sql


@pytest.mark.parametrize(("count", "expected"), [(1, True), (0, False)])
async def test_table_exists(fake_executor, count, expected) -> None:
    fake_executor.queue([{"count": count}])
    assert await schema.table_exists("widgets", executor=fake_executor) is expected


async def test_is_view_distinguishes_missing_from_base_table(fake_executor) -> None:
    fake_executor.queue(
        [],
        [{"TABLE_NAME": "widgets", "TABLE_TYPE": "BASE TABLE"}],
        [{"TABLE_NAME": "widget_names", "TABLE_TYPE": "VIEW"}],
    )

    assert await schema.is_view("nope", executor=fake_executor) is None
    assert await schema.is_view("widgets", executor=fake_executor) is False
    assert await schema.is_view("widget_names", executor=fake_executor) is True


async def test_row_count_quotes_table(fake_executor) -> None:
    fake_executor.queue([{"count": 12}])

    assert await schema.row_count("widgets", executor=fake_executor) == 12
    assert fake_executor.texts == ["SELECT COUNT(*) AS count FROM `widgets`"]


async def test_tables_and_base_view_tables(fake_executor) -> None:
    fake_executor.queue(
        [{"TABLE_NAME": "widgets"}, {"TABLE_NAME": "parts"}],
        [
            {"TABLE_NAME": "widgets", "TABLE_TYPE": "BASE TABLE"},
            {"TABLE_NAME": "widget_names", "TABLE_TYPE": "VIEW"},
        ],
    )

    assert await schema.tables(executor=fake_executor) == ["widgets", "parts"]
    infos = await schema.base_view_tables(executor=fake_executor)
    assert infos == [
        TableInfo(name="widgets", type="BASE TABLE"),
        TableInfo(name="widget_names", type="VIEW"),
    ]
    assert [info.is_view for info in infos] == [False, True]


async def test_column_attributes(fake_executor) -> None:
    fake_executor.queue(
        [
            {
                "COLUMN_NAME": "size",
                "IS_NULLABLE": "YES",
                "COLUMN_DEFAULT": None,
                "DATA_TYPE": "int",
            }
        ],
        [],
    )

    attributes = await schema.column_attributes("widgets", "size", executor=fake_executor)
    assert attributes == ColumnAttributes(
        column_name="size", is_nullable=True, column_default=None, data_type="int"
    )
    assert await schema.column_attributes("widgets", "nope", executor=fake_executor) is None


async def test_auto_increment_column(fake_executor) -> None:
    fake_executor.queue([{"COLUMN_NAME": "id"}], [])

    assert await schema.auto_increment_column("parts", executor=fake_executor) == "id"
    assert await schema.auto_increment_column("widgets", executor=fake_executor) is None
    assert "LIKE '%auto_increment%'" in fake_executor.texts[0]


async def test_empty_row_and_filter_row(fake_executor) -> None:
    fake_executor.queue(
        [{"COLUMN_NAME": "guid"}, {"COLUMN_NAME": "name"}],
        [{"COLUMN_NAME": "guid"}, {"COLUMN_NAME": "name"}],
    )

    assert await schema.empty_row("widgets", executor=fake_executor) == {"guid": None, "name": None}
    filtered = await schema.filter_row(
        {"guid": None, "name": "a", "color": "red"}, "widgets", executor=fake_executor
    )
    assert filtered == {"guid": "", "name": "a"}


async def test_process_executor_is_the_default(fake_executor) -> None:
    fake_executor.queue([{"count": 3}])
    executor_module.set_executor(fake_executor)
    try:
        assert await schema.row_count("widgets") == 3
    finally:
        executor_module.set_executor(None)


async def test_meta_env_decodes_values_and_resolves_scope_types(fake_executor) -> None:
    fake_executor.queue(
        [
            {"meta_key": "siteName", "meta_value": '"Widget Works"'},
            {"meta_key": "scopeTypes", "meta_value": '{"owner": ["read", "write"]}'},
            {"meta_key": "scopes", "meta_value": '{"widgets": {"admin": "owner", "guest": "none"}}'},
        ]
    )

    env = await schema.meta_env(executor=fake_executor)

    assert env["siteName"] == "Widget Works"
    assert env["scopes"] == {"widgets": {"admin": ["read", "write"], "guest": "none"}}
    assert fake_executor.texts == ["SELECT * FROM `meta`"]


async def test_meta_env_without_scopes(fake_executor) -> None:
    fake_executor.queue([{"meta_key": "limits", "meta_value": "[1, 2]"}])

    assert await schema.meta_env(executor=fake_executor) == {"limits": [1, 2]}
