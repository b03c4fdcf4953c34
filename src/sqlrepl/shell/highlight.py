"""ANSI syntax highlighting for SQL text shown by `.schema`."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers.sql import SqlLexer

_LEXER = SqlLexer()
_FORMATTER = TerminalFormatter()


def highlight_sql(sql: str) -> str:
    # pygments always appends a newline
    return highlight(sql, _LEXER, _FORMATTER).rstrip("\n")
