"""Interactive shell loop.

`Shell` owns the database connection, the session state and the completer.
Lines are fed through `process_line`, which dispatches dot commands and
buffers SQL until a statement is complete. The same path serves the
interactive prompt, piped stdin, `.read` scripts and `--cmd` startup lines.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.lexers import PygmentsLexer
from pygments.lexers.sql import SqlLexer
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlglot.errors import TokenError

from sqlrepl import __version__
from sqlrepl.completion.completer import Completer, SqlCompleter
from sqlrepl.exceptions import CommandError, QueryExecutionError, ShellError
from sqlrepl.execute.runner import (
    is_complete_statement,
    is_schema_mutating,
    run_statement,
    split_statements,
)
from sqlrepl.render import render_result
from sqlrepl.schema.cache import SchemaCache
from sqlrepl.schema.reflection import SqlAlchemyIntrospector
from sqlrepl.services.config_service import ConfigService
from sqlrepl.services.state import ShellState

from .dot_commands import CommandResult, execute_dot_command

_logger = logging.getLogger(__name__)

PROMPT = "sqlrepl> "
CONTINUATION_PROMPT = "   ...> "


def _connect(path: str, *, readonly: bool) -> tuple[sa.Engine, sa.Connection]:
    engine = ConfigService.create_database_engine(path, readonly=readonly)
    try:
        conn = engine.connect()
    except SQLAlchemyError:
        engine.dispose()
        raise
    # AUTOCOMMIT leaves BEGIN/COMMIT to the user and keeps every statement
    # visible on the single session connection.
    conn = conn.execution_options(isolation_level="AUTOCOMMIT")
    return engine, conn


class Shell:
    """One shell session over a SQLite database."""

    def __init__(self, state: ShellState) -> None:
        self.state = state
        self.engine, self.conn = _connect(state.database_path, readonly=state.readonly)
        self.completer = Completer(SchemaCache(SqlAlchemyIntrospector(self.conn)))
        self.error_count = 0
        self.quit_requested = False
        self._buffer: list[str] = []

    # ---- lifecycle -------------------------------------------------------
    def open_database(self, path: str) -> None:
        """Close the current database and switch to `path`.

        Raises:
            CommandError: If `path` cannot be opened; the current database
                stays open.
        """
        try:
            engine, conn = _connect(path, readonly=self.state.readonly)
        except SQLAlchemyError as exc:
            msg = f"unable to open database {path!r}: {getattr(exc, 'orig', None) or exc}"
            raise CommandError(msg) from exc
        self.close_database()
        self.engine, self.conn = engine, conn
        self.state.database_path = path
        self.completer.cache = SchemaCache(SqlAlchemyIntrospector(conn))
        _logger.info("Opened database %s", path)
        print(f"Connected to {path}", file=self.state.stdout)

    def close_database(self) -> None:
        self.conn.close()
        self.engine.dispose()

    def close(self) -> None:
        self.close_database()
        self.state.close_output()

    @property
    def pending(self) -> bool:
        """True while an incomplete SQL statement is buffered."""
        return bool(self._buffer)

    # ---- errors ----------------------------------------------------------
    def report_error(self, exc: ShellError | SQLAlchemyError) -> None:
        self.error_count += 1
        self.state.write_error(f"Error: {exc}")
        if isinstance(exc, QueryExecutionError):
            for hint in exc.hints:
                self.state.write_error(f"hint: {hint}")

    def _should_stop(self, errors_before: int) -> bool:
        return self.quit_requested or (self.state.bail and self.error_count > errors_before)

    # ---- SQL -------------------------------------------------------------
    def execute_sql(self, sql: str) -> bool:
        """Execute every statement in `sql`, rendering row-returning results.

        Returns:
            False if any statement failed.
        """
        try:
            statements = split_statements(sql)
        except TokenError as exc:
            # Let SQLite report the malformed input with its own message.
            _logger.debug("Tokenizer rejected input: %s", exc)
            statements = [sql.strip()]

        ok = True
        for statement in statements:
            if self.state.echo:
                self.state.write_output(statement)
            start = time.perf_counter()
            try:
                result = run_statement(self.conn, statement)
                if is_schema_mutating(statement):
                    self.completer.invalidate_schema_cache()
                if result.returns_rows:
                    text = render_result(result, self.state.render_config())
                    if text:
                        self.state.write_output(text)
            except ShellError as exc:
                self.report_error(exc)
                ok = False
                if self.state.bail:
                    break
            finally:
                if self.state.timer:
                    elapsed = time.perf_counter() - start
                    self.state.write_error(f"Run Time: real {elapsed:.3f}")
        return ok

    # ---- input -----------------------------------------------------------
    def process_line(self, line: str) -> CommandResult:
        """Feed one input line to the shell."""
        if not self._buffer and line.lstrip().startswith("."):
            if self.state.echo:
                self.state.write_output(line.strip())
            try:
                result = execute_dot_command(self, line)
            except (ShellError, SQLAlchemyError) as exc:
                self.report_error(exc)
                result = CommandResult.CONTINUE
            if result is CommandResult.QUIT:
                self.quit_requested = True
            return CommandResult.QUIT if self.quit_requested else CommandResult.CONTINUE

        if not self._buffer and not line.strip():
            return CommandResult.CONTINUE
        self._buffer.append(line)
        text = "\n".join(self._buffer)
        if is_complete_statement(text):
            self._buffer.clear()
            self.execute_sql(text)
        return CommandResult.QUIT if self.quit_requested else CommandResult.CONTINUE

    def flush(self) -> None:
        """Execute whatever SQL is still buffered, terminated or not."""
        if self._buffer:
            text = "\n".join(self._buffer)
            self._buffer.clear()
            self.execute_sql(text)

    def run_script(self, text: str) -> bool:
        """Run a multi-line script the way interactive input would be run.

        Returns:
            False if any command or statement in the script failed.
        """
        errors_before = self.error_count
        for line in text.splitlines():
            self.process_line(line)
            if self._should_stop(errors_before):
                self._buffer.clear()
                break
        else:
            self.flush()
        return self.error_count == errors_before

    # ---- interactive -----------------------------------------------------
    def banner(self) -> str:
        return (
            f"sqlrepl version {__version__}\n"
            'Enter ".help" for usage hints.\n'
            f"Connected to {self.state.database_path}"
        )

    def interactive(self, history_file: Path | None = None) -> None:
        """Read-eval-print loop on the terminal until `.quit` or EOF."""
        history = FileHistory(str(history_file)) if history_file else None
        session: PromptSession[str] = PromptSession(
            history=history,
            lexer=PygmentsLexer(SqlLexer),
            completer=SqlCompleter(self.completer),
            complete_while_typing=True,
        )
        print(self.banner(), file=self.state.stdout)
        while True:
            prompt = CONTINUATION_PROMPT if self._buffer else PROMPT
            try:
                line = session.prompt(prompt)
            except KeyboardInterrupt:
                # Ctrl-C abandons the statement being typed.
                self._buffer.clear()
                continue
            except EOFError:
                break
            if self.process_line(line) is CommandResult.QUIT:
                break
