"""Custom exception hierarchy for sqlrepl.

The shell never lets these escape the REPL loop: completion-path failures
degrade to "no suggestions", and render or execution failures become a single
``Error: ...`` line on stderr.

Exception Categories:
- Schema errors for introspection failures while refreshing the schema cache
- Render errors for result sets that cannot be laid out
- Execution errors for statements rejected by the database
- Command errors for malformed dot-command invocations
"""

from __future__ import annotations


class ShellError(Exception):
    """Base exception for sqlrepl operations."""


class SchemaFetchError(ShellError):
    """Raised when schema introspection fails during a cache refresh.

    The schema cache keeps its last-known-good contents when this is raised,
    so callers may keep serving stale data. Typical causes:
    - Database file unreadable or locked
    - Connection closed underneath the session
    """


class RenderError(ShellError):
    """Raised when a result set is malformed for rendering.

    For example, a row whose arity differs from the number of headers.
    Fatal to the single render call only.
    """


class QueryExecutionError(ShellError):
    """Raised when the database rejects a statement.

    Carries the offending SQL and a list of short, heuristic hints that the
    REPL prints below the error line.
    """

    def __init__(self, message: str, *, sql: str, hints: list[str] | None = None) -> None:
        super().__init__(message)
        self.sql = sql
        self.hints = hints or []


class CommandError(ShellError):
    """Raised for dot-command usage errors (unknown command, bad argument)."""
