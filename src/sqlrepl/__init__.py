"""sqlrepl: an interactive SQLite shell.

Provides context-aware completion of SQL keywords, tables, columns and dot
commands, and adaptive tabular rendering of query results.
"""

__version__ = "0.1.0"

from sqlrepl.exceptions import (  # noqa: E402
    CommandError,
    QueryExecutionError,
    RenderError,
    SchemaFetchError,
    ShellError,
)
from sqlrepl.models import ColumnLayout, OutputMode, RenderConfig, ResultSet  # noqa: E402

__all__ = [  # noqa: RUF022
    "__version__",
    # Models
    "ColumnLayout",
    "OutputMode",
    "RenderConfig",
    "ResultSet",
    # Errors
    "CommandError",
    "QueryExecutionError",
    "RenderError",
    "SchemaFetchError",
    "ShellError",
]
