"""Statement execution for the shell.

This module provides the small pieces the REPL needs around SQLAlchemy:
- Splits a script into statements with the sqlglot tokenizer
- Detects whether buffered input forms a complete statement
- Flags statements that change the schema
- Executes one statement and returns a typed `ResultSet`
"""

from __future__ import annotations

import logging
import re
from typing import Final

import sqlalchemy as sa
import sqlglot
from sqlalchemy.exc import SQLAlchemyError
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

from sqlrepl.exceptions import QueryExecutionError
from sqlrepl.models import ResultSet

_logger = logging.getLogger(__name__)

SCHEMA_MUTATING_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"CREATE", "DROP", "ALTER", "ATTACH", "DETACH"}
)
_FIRST_WORD_RE: Final[re.Pattern[str]] = re.compile(r"^\s*([A-Za-z]+)")


def strip_trailing_semicolon(sql: str) -> str:
    s = sql.strip()
    return s.removesuffix(";")


def _tokens(sql: str) -> list[Token]:
    return sqlglot.tokenize(sql, read="sqlite")


def split_statements(sql: str) -> list[str]:
    """Split `sql` at semicolons that are outside literals and comments.

    Statements are returned stripped and without their terminating semicolon.
    Text after the last semicolon is kept only when it holds a token.

    Raises:
        TokenError: If the input cannot be tokenized (e.g. an unterminated
            string literal).
    """
    statements: list[str] = []
    start = 0
    pending = False
    for token in _tokens(sql):
        if token.token_type == TokenType.SEMICOLON:
            piece = sql[start : token.start].strip()
            if piece:
                statements.append(piece)
            start = token.end + 1
            pending = False
        else:
            pending = True
    if pending:
        tail = sql[start:].strip()
        if tail:
            statements.append(tail)
    return statements


def is_complete_statement(buffer: str) -> bool:
    """True when `buffer` ends with a statement-terminating semicolon."""
    if not buffer.strip():
        return False
    try:
        tokens = _tokens(buffer)
    except TokenError:
        # Unterminated literal or block comment: the user is still typing.
        return False
    return bool(tokens) and tokens[-1].token_type == TokenType.SEMICOLON


def first_keyword(sql: str) -> str | None:
    """Uppercased first word of `sql`, skipping leading comments."""
    try:
        tokens = _tokens(sql)
    except TokenError:
        match = _FIRST_WORD_RE.match(sql)
        return match.group(1).upper() if match else None
    if not tokens:
        return None
    return tokens[0].text.split()[0].upper() if tokens[0].text.strip() else None


def is_schema_mutating(sql: str) -> bool:
    return first_keyword(sql) in SCHEMA_MUTATING_KEYWORDS


# ---- error assistance -----------------------------------------------------
def assist_error(error_message: str, sql: str) -> list[str]:
    """Heuristic hints for an execution error reported by SQLite."""
    emsg = error_message.lower()
    hints: list[str] = []

    def add_if(cond: bool, hint: str) -> None:  # noqa: FBT001
        if cond:
            hints.append(hint)

    add_if("syntax error" in emsg, "SQL syntax near the reported token is invalid for SQLite")
    add_if("no such table" in emsg, "Check the table name with .tables")
    add_if("no such column" in emsg, "Check the column names with .schema TABLE")
    add_if("no such function" in emsg, "SQLite does not provide this function")
    add_if("datatype mismatch" in emsg, "Type mismatch in predicate or insert values")
    add_if(
        "unique constraint failed" in emsg,
        "A row with the same key already exists",
    )
    add_if("readonly" in emsg, "The database was opened read-only")
    add_if(
        "top " in sql.lower() and "syntax error" in emsg,
        "SQLite has no TOP clause; use LIMIT n",
    )
    return hints


def _error_message(exc: SQLAlchemyError) -> str:
    # DBAPIError keeps the driver's own message on `orig`.
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


# ---- execution ------------------------------------------------------------
def run_statement(conn: sa.Connection, sql: str) -> ResultSet:
    """Execute a single statement on `conn` and collect its result.

    Raises:
        QueryExecutionError: If the database rejects the statement.
    """
    statement = strip_trailing_semicolon(sql)
    _logger.debug("Executing: %s", statement)
    try:
        result = conn.exec_driver_sql(statement)
        if result.returns_rows:
            headers = list(result.keys())
            rows = [tuple(row) for row in result.fetchall()]
            return ResultSet(headers=headers, rows=rows)
        return ResultSet(rowcount=result.rowcount)
    except SQLAlchemyError as exc:
        message = _error_message(exc)
        _logger.warning("Execution error: %s", message)
        raise QueryExecutionError(
            message, sql=statement, hints=assist_error(message, statement)
        ) from exc
