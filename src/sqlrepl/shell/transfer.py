"""Data transfer commands: SQL dump and CSV import."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import sqlalchemy as sa

from sqlrepl.exceptions import CommandError

_logger = logging.getLogger(__name__)

_TABLE_NAMES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
)
_CREATE_SQL = "SELECT sql FROM sqlite_master WHERE type='table' AND name=?"
_INDEX_SQL = (
    "SELECT sql FROM sqlite_master "
    "WHERE type='index' AND sql IS NOT NULL AND tbl_name=? ORDER BY name"
)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def sql_literal(value: object) -> str:
    """Render a stored value as a SQLite literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, bytes | bytearray | memoryview):
        return "X'" + bytes(value).hex().upper() + "'"
    return "'" + str(value).replace("'", "''") + "'"


def generate_sql_dump(conn: sa.Connection, tables: list[str] | None = None) -> str:
    """Render tables, their rows and their indexes as a replayable SQL script.

    Raises:
        CommandError: If a requested table does not exist.
    """
    if tables is None:
        tables = [row[0] for row in conn.exec_driver_sql(_TABLE_NAMES_SQL)]

    lines = ["PRAGMA foreign_keys=OFF;", "BEGIN TRANSACTION;"]
    index_lines: list[str] = []
    for table in tables:
        create_sql = conn.exec_driver_sql(_CREATE_SQL, (table,)).scalar()
        if create_sql is None:
            msg = f"no such table: {table}"
            raise CommandError(msg)
        lines.append(f"{create_sql};")

        quoted = quote_identifier(table)
        for row in conn.exec_driver_sql(f"SELECT * FROM {quoted}"):  # noqa: S608
            values = ", ".join(sql_literal(v) for v in row)
            lines.append(f"INSERT INTO {quoted} VALUES({values});")

        index_lines.extend(
            f"{sql};" for (sql,) in conn.exec_driver_sql(_INDEX_SQL, (table,))
        )
    lines.extend(index_lines)
    lines.append("COMMIT;")
    return "\n".join(lines)


def import_csv(conn: sa.Connection, path: str | Path, table: str) -> int:
    """Load a CSV file with a header row into `table`.

    The table is created with one TEXT column per header field when it does
    not exist yet. Rows are inserted inside one transaction; any failure
    rolls the whole import back.

    Returns:
        Number of rows inserted.

    Raises:
        CommandError: If the file is unreadable, empty or has ragged rows.
    """
    try:
        with Path(path).expanduser().open(newline="", encoding="utf-8") as handle:
            records = list(csv.reader(handle))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        msg = f"cannot read {path}: {exc}"
        raise CommandError(msg) from exc
    if not records:
        msg = f"{path}: file is empty"
        raise CommandError(msg)

    header, body = records[0], records[1:]
    for line_no, record in enumerate(body, start=2):
        if len(record) != len(header):
            msg = f"{path}:{line_no}: expected {len(header)} columns but found {len(record)}"
            raise CommandError(msg)

    quoted_table = quote_identifier(table)
    columns = ", ".join(quote_identifier(name) for name in header)
    placeholders = ", ".join("?" for _ in header)

    conn.exec_driver_sql("BEGIN")
    try:
        if not sa.inspect(conn).has_table(table):
            column_defs = ", ".join(f"{quote_identifier(name)} TEXT" for name in header)
            conn.exec_driver_sql(f"CREATE TABLE {quoted_table}({column_defs})")
        if body:
            conn.exec_driver_sql(
                f"INSERT INTO {quoted_table} ({columns}) VALUES ({placeholders})",  # noqa: S608
                [tuple(record) for record in body],
            )
    except Exception:
        conn.exec_driver_sql("ROLLBACK")
        raise
    conn.exec_driver_sql("COMMIT")
    _logger.info("Imported %d rows from %s into %s", len(body), path, table)
    return len(body)
