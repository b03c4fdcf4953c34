"""Static vocabularies for completion.

Order matters: keyword and function candidates are offered in the order
listed here, dot commands in the order of `.help`.
"""

from __future__ import annotations

from typing import Final

from sqlrepl.models import OUTPUT_MODES

SQL_KEYWORDS: Final[tuple[str, ...]] = (
    "SELECT",
    "FROM",
    "WHERE",
    "INSERT",
    "INTO",
    "VALUES",
    "UPDATE",
    "SET",
    "DELETE",
    "CREATE",
    "TABLE",
    "DROP",
    "ALTER",
    "INDEX",
    "ON",
    "PRIMARY",
    "KEY",
    "FOREIGN",
    "REFERENCES",
    "UNIQUE",
    "NOT",
    "NULL",
    "DEFAULT",
    "CHECK",
    "AS",
    "JOIN",
    "INNER",
    "LEFT",
    "RIGHT",
    "OUTER",
    "CROSS",
    "GROUP",
    "BY",
    "HAVING",
    "ORDER",
    "LIMIT",
    "OFFSET",
    "UNION",
    "ALL",
    "DISTINCT",
    "AND",
    "OR",
    "IN",
    "BETWEEN",
    "LIKE",
    "GLOB",
    "CASE",
    "WHEN",
    "THEN",
    "ELSE",
    "END",
    "EXISTS",
    "PRAGMA",
    "BEGIN",
    "COMMIT",
    "ROLLBACK",
    "TRANSACTION",
    "SAVEPOINT",
    "RELEASE",
    "ATTACH",
    "DETACH",
    "DATABASE",
    "TEMPORARY",
    "TEMP",
    "VIEW",
    "TRIGGER",
    "IF",
    "AUTOINCREMENT",
    "EXPLAIN",
    "ASC",
    "DESC",
    "COLLATE",
    "NOCASE",
    "ESCAPE",
    "ISNULL",
    "NOTNULL",
    "TRUE",
    "FALSE",
)

SQL_FUNCTIONS: Final[tuple[str, ...]] = (
    "COUNT",
    "SUM",
    "AVG",
    "MIN",
    "MAX",
    "ABS",
    "COALESCE",
    "IFNULL",
    "NULLIF",
    "LENGTH",
    "SUBSTR",
    "UPPER",
    "LOWER",
    "TRIM",
    "LTRIM",
    "RTRIM",
    "REPLACE",
    "INSTR",
    "PRINTF",
    "TYPEOF",
    "ROUND",
    "RANDOM",
    "DATETIME",
    "DATE",
    "TIME",
    "STRFTIME",
    "JULIANDAY",
    "HEX",
    "QUOTE",
    "CAST",
    "GROUP_CONCAT",
    "TOTAL",
    "JSON",
    "JSON_EXTRACT",
    "JSON_ARRAY",
    "JSON_OBJECT",
)

# Anchor keyword -> context. Anything not listed classifies as a keyword context.
TABLE_ANCHORS: Final[frozenset[str]] = frozenset({"FROM", "JOIN", "UPDATE", "INTO"})
COLUMN_ANCHORS: Final[frozenset[str]] = frozenset({"SELECT", "WHERE", "SET"})

# Words that end a table reference instead of naming its alias.
NON_ALIAS_WORDS: Final[frozenset[str]] = frozenset(
    {
        "WHERE",
        "JOIN",
        "INNER",
        "LEFT",
        "RIGHT",
        "FULL",
        "CROSS",
        "NATURAL",
        "OUTER",
        "ON",
        "USING",
        "ORDER",
        "GROUP",
        "LIMIT",
        "HAVING",
        "SET",
        "VALUES",
        "SELECT",
        "UNION",
        "AND",
        "OR",
    }
)

DOT_COMMANDS: Final[tuple[str, ...]] = (
    ".quit",
    ".exit",
    ".help",
    ".tables",
    ".schema",
    ".mode",
    ".headers",
    ".show",
    ".dump",
    ".output",
    ".read",
    ".databases",
    ".separator",
    ".nullvalue",
    ".import",
    ".timer",
    ".echo",
    ".width",
    ".bail",
    ".open",
)

ON_OFF: Final[tuple[str, ...]] = ("on", "off")

MODE_NAMES: Final[tuple[str, ...]] = tuple(OUTPUT_MODES)

# Dot commands whose arguments are file paths (argument index -> path).
PATH_ARGUMENT_COMMANDS: Final[dict[str, int]] = {
    "read": 0,
    "open": 0,
    "output": 0,
    "import": 0,
}
