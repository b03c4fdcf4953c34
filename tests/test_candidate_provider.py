from __future__ import annotations

import pytest

from sqlrepl.completion.constants import DOT_COMMANDS, SQL_FUNCTIONS, SQL_KEYWORDS
from sqlrepl.completion.context import CompletionContext, ContextKind
from sqlrepl.completion.provider import filter_prefix, provide
from sqlrepl.schema import SchemaCache


class _StaticIntrospector:
    def __init__(self, schema: dict[str, list[str]]) -> None:
        self.schema = schema

    def list_tables(self) -> list[str]:
        return list(self.schema)

    def list_columns(self, table_name: str) -> list[str]:
        return list(self.schema[table_name])


class _BrokenIntrospector:
    def list_tables(self) -> list[str]:
        msg = "disk I/O error"
        raise OSError(msg)

    def list_columns(self, table_name: str) -> list[str]:
        return []


def _cache() -> SchemaCache:
    return SchemaCache(
        _StaticIntrospector(
            {
                "users": ["id", "name", "email"],
                "orders": ["id", "user_id", "total"],
                "Products": ["sku", "name"],
            }
        )
    )


def _ctx(kind: ContextKind, prefix: str = "", **kwargs: object) -> CompletionContext:
    return CompletionContext(kind=kind, prefix=prefix, **kwargs)  # type: ignore[arg-type]


def test_filter_prefix_is_case_insensitive_and_deduplicates() -> None:
    assert filter_prefix(["Users", "orders", "users", "Users"], "US") == ["Users", "users"]
    assert filter_prefix(["a", "b"], "") == ["a", "b"]
    assert filter_prefix(["a", "b"], "zz") == []


def test_table_name_scenario() -> None:
    assert provide(_ctx(ContextKind.TABLE_NAME, "u"), _cache()) == ["users"]


def test_table_names_keep_insertion_order_and_case() -> None:
    assert provide(_ctx(ContextKind.TABLE_NAME), _cache()) == ["users", "orders", "Products"]
    assert provide(_ctx(ContextKind.TABLE_NAME, "p"), _cache()) == ["Products"]


def test_keywords_then_functions() -> None:
    out = provide(_ctx(ContextKind.KEYWORD), _cache())
    assert out == list(dict.fromkeys([*SQL_KEYWORDS, *SQL_FUNCTIONS]))

    sel = provide(_ctx(ContextKind.KEYWORD, "sel"), _cache())
    assert sel[0] == "SELECT"


def test_columns_without_refs_are_union_across_tables() -> None:
    out = provide(_ctx(ContextKind.COLUMN_NAME), _cache())
    assert out == ["id", "name", "email", "user_id", "total", "sku"]


def test_columns_restricted_to_referenced_tables() -> None:
    ctx = _ctx(ContextKind.COLUMN_NAME, "", table_refs=("orders",))
    assert provide(ctx, _cache()) == ["id", "user_id", "total"]


def test_unknown_refs_fall_back_to_all_columns() -> None:
    ctx = _ctx(ContextKind.COLUMN_NAME, "s", table_refs=("missing",))
    assert provide(ctx, _cache()) == ["sku"]


def test_qualified_columns_use_only_that_table() -> None:
    ctx = _ctx(ContextKind.COLUMN_NAME, "n", qualifier="u", table_refs=("users",))
    assert provide(ctx, _cache()) == ["name"]

    ctx = _ctx(ContextKind.COLUMN_NAME, "", qualifier="x", table_refs=("x",))
    assert provide(ctx, _cache()) == []


def test_dot_commands_in_fixed_order() -> None:
    assert provide(_ctx(ContextKind.DOT_COMMAND, "."), _cache()) == list(DOT_COMMANDS)
    assert provide(_ctx(ContextKind.DOT_COMMAND, ".ta"), _cache()) == [".tables"]
    assert provide(_ctx(ContextKind.DOT_COMMAND, ".e"), _cache()) == [".exit", ".echo"]


def test_mode_argument_scenario() -> None:
    ctx = _ctx(ContextKind.DOT_ARGUMENT, "", command_name="mode")
    assert provide(ctx, _cache()) == [
        "list",
        "csv",
        "column",
        "json",
        "jsonl",
        "line",
        "table",
        "markdown",
    ]


@pytest.mark.parametrize("command", ["headers", "timer", "echo", "bail"])
def test_boolean_arguments(command: str) -> None:
    ctx = _ctx(ContextKind.DOT_ARGUMENT, "o", command_name=command)
    assert provide(ctx, _cache()) == ["on", "off"]


@pytest.mark.parametrize("command", ["schema", "dump"])
def test_table_arguments(command: str) -> None:
    ctx = _ctx(ContextKind.DOT_ARGUMENT, "or", command_name=command)
    assert provide(ctx, _cache()) == ["orders"]


def test_import_completes_tables_only_after_file_argument() -> None:
    first = _ctx(ContextKind.DOT_ARGUMENT, "u", command_name="import", argument_index=0)
    second = _ctx(ContextKind.DOT_ARGUMENT, "u", command_name="import", argument_index=1)
    assert provide(first, _cache()) == []
    assert provide(second, _cache()) == ["users"]


def test_unknown_dot_argument_context_has_no_candidates() -> None:
    ctx = _ctx(ContextKind.DOT_ARGUMENT, "", command_name="frobnicate")
    assert provide(ctx, _cache()) == []


def test_schema_failure_degrades_to_empty() -> None:
    cache = SchemaCache(_BrokenIntrospector())
    assert provide(_ctx(ContextKind.TABLE_NAME), cache) == []
    assert provide(_ctx(ContextKind.COLUMN_NAME), cache) == []
    assert cache.last_error == "disk I/O error"
    # keyword contexts do not touch the schema
    assert provide(_ctx(ContextKind.KEYWORD, "SELE"), cache)


@pytest.mark.parametrize(
    ("kind", "prefix"),
    [
        (ContextKind.KEYWORD, "c"),
        (ContextKind.TABLE_NAME, "O"),
        (ContextKind.COLUMN_NAME, "I"),
        (ContextKind.DOT_COMMAND, ".S"),
    ],
)
def test_every_candidate_starts_with_prefix(kind: ContextKind, prefix: str) -> None:
    out = provide(_ctx(kind, prefix), _cache())
    assert out
    assert all(c.lower().startswith(prefix.lower()) for c in out)
    assert len(out) == len(set(out))
