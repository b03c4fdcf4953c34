from __future__ import annotations

from pathlib import Path

from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
import sqlalchemy as sa

from sqlrepl.completion import Completer, SqlCompleter
from sqlrepl.schema import SchemaCache, SqlAlchemyIntrospector


def _mk_engine() -> sa.Engine:
    return sa.create_engine("sqlite+pysqlite:///:memory:")


def _setup(conn: sa.Connection) -> None:
    conn.exec_driver_sql("CREATE TABLE users(id INTEGER PRIMARY KEY, name TEXT, email TEXT)")
    conn.exec_driver_sql("CREATE TABLE orders(id INTEGER, user_id INTEGER, total REAL)")


def test_complete_against_real_database() -> None:
    engine = _mk_engine()
    with engine.connect() as conn:
        _setup(conn)
        completer = Completer(SchemaCache(SqlAlchemyIntrospector(conn)))

        assert completer.complete("SELECT * FROM u", 15) == ["users"]
        assert completer.complete("SELECT * FROM orders WHERE to", 29) == ["total"]
        line = "SELECT o. FROM orders o"
        assert completer.complete(line, len("SELECT o.")) == ["id", "user_id", "total"]


def test_invalidate_picks_up_new_tables() -> None:
    engine = _mk_engine()
    with engine.connect() as conn:
        _setup(conn)
        completer = Completer(SchemaCache(SqlAlchemyIntrospector(conn)))
        assert completer.complete("SELECT * FROM p", 15) == []

        conn.exec_driver_sql("CREATE TABLE products(sku TEXT)")
        assert completer.complete("SELECT * FROM p", 15) == []
        completer.invalidate_schema_cache()
        assert completer.complete("SELECT * FROM p", 15) == ["products"]


def test_complete_never_raises_when_schema_is_unavailable() -> None:
    engine = _mk_engine()
    conn = engine.connect()
    completer = Completer(SchemaCache(SqlAlchemyIntrospector(conn)))
    conn.close()
    engine.dispose()

    assert completer.complete("SELECT * FROM u", 15) == []
    assert completer.complete(".ta", 3) == [".tables"]


def test_prompt_toolkit_adapter_replaces_prefix() -> None:
    engine = _mk_engine()
    with engine.connect() as conn:
        _setup(conn)
        adapter = SqlCompleter(Completer(SchemaCache(SqlAlchemyIntrospector(conn))))
        completions = list(
            adapter.get_completions(Document("SELECT * FROM us"), CompleteEvent())
        )
    assert [c.text for c in completions] == ["users"]
    assert completions[0].start_position == -2


def test_prompt_toolkit_adapter_completes_paths_for_read(tmp_path: Path) -> None:
    (tmp_path / "script.sql").write_text("SELECT 1;")
    adapter = SqlCompleter(Completer(SchemaCache(SqlAlchemyIntrospector(_mk_engine()))))
    prefix = str(tmp_path / "scr")
    completions = list(adapter.get_completions(Document(f".read {prefix}"), CompleteEvent()))
    assert [c.text for c in completions] == ["ipt.sql"]
