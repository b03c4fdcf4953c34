"""Dot-command dispatch.

Each command is a plain function taking the running session and its
already-split arguments. Usage errors raise `CommandError`; the REPL prints
them like any other error.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
import logging
from pathlib import Path
import shlex
from typing import Final, Protocol

import sqlalchemy as sa

from sqlrepl.completion.completer import Completer
from sqlrepl.exceptions import CommandError
from sqlrepl.models import OUTPUT_MODES, parse_output_mode
from sqlrepl.services.state import ShellState, on_off

from .highlight import highlight_sql
from .transfer import generate_sql_dump, import_csv

_logger = logging.getLogger(__name__)

_SCHEMA_ORDER = (
    "ORDER BY CASE type WHEN 'table' THEN 1 WHEN 'view' THEN 2 "
    "WHEN 'index' THEN 3 WHEN 'trigger' THEN 4 END, name"
)
_SCHEMA_ALL_SQL = (
    "SELECT sql FROM sqlite_master WHERE sql IS NOT NULL AND name NOT LIKE 'sqlite_%' "
    + _SCHEMA_ORDER
)
_SCHEMA_TABLE_SQL = (
    "SELECT sql FROM sqlite_master WHERE sql IS NOT NULL AND "
    "((type IN ('table', 'view') AND name = ?1) "
    "OR (type IN ('index', 'trigger') AND tbl_name = ?1)) " + _SCHEMA_ORDER
)

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"on", "1", "yes", "true"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"off", "0", "no", "false"})


class CommandResult(Enum):
    """What the REPL loop should do after a dot command."""

    CONTINUE = auto()
    QUIT = auto()


class ShellSession(Protocol):
    """The parts of the running shell that dot commands act on."""

    state: ShellState
    conn: sa.Connection
    completer: Completer

    def open_database(self, path: str) -> None: ...

    def run_script(self, text: str) -> bool: ...


Handler = Callable[[ShellSession, list[str]], CommandResult | None]


@dataclass(frozen=True, slots=True)
class DotCommand:
    name: str
    usage: str
    summary: str
    handler: Handler
    invalidates_schema: bool = False


def parse_bool_arg(value: str) -> bool | None:
    lowered = value.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    return None


def _require_bool(name: str, value: str) -> bool:
    parsed = parse_bool_arg(value)
    if parsed is None:
        msg = f"Usage: .{name} on|off (got: {value})"
        raise CommandError(msg)
    return parsed


def _unescape(text: str) -> str:
    return text.replace("\\t", "\t").replace("\\n", "\n")


# ---- session -------------------------------------------------------------
def _cmd_quit(_session: ShellSession, _args: list[str]) -> CommandResult:
    return CommandResult.QUIT


def _cmd_help(session: ShellSession, _args: list[str]) -> None:
    session.state.write_output(help_text())


def _cmd_open(session: ShellSession, args: list[str]) -> None:
    if not args:
        msg = "Usage: .open FILE"
        raise CommandError(msg)
    session.open_database(args[0])


def _cmd_read(session: ShellSession, args: list[str]) -> None:
    if not args:
        msg = "Usage: .read FILE"
        raise CommandError(msg)
    path = Path(args[0]).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"cannot open {args[0]}: {exc.strerror or exc}"
        raise CommandError(msg) from exc
    session.run_script(text)


def _cmd_databases(session: ShellSession, _args: list[str]) -> None:
    lines = [
        "seq  name             file",
        "---  ---------------  " + "-" * 56,
    ]
    for seq, name, file in session.conn.exec_driver_sql("PRAGMA database_list"):
        lines.append(f"{seq:<3}  {name:<15}  {file}".rstrip())
    session.state.write_output("\n".join(lines))


# ---- schema --------------------------------------------------------------
def _cmd_tables(session: ShellSession, args: list[str]) -> None:
    cache = session.completer.cache
    tables = cache.get_tables()
    if args:
        pattern = args[0].lower()
        tables = [t for t in tables if pattern in t.lower()]
    if tables:
        session.state.write_output("\n".join(tables))


def _cmd_schema(session: ShellSession, args: list[str]) -> None:
    state = session.state
    if args:
        rows = session.conn.exec_driver_sql(_SCHEMA_TABLE_SQL, (args[0],))
    else:
        rows = session.conn.exec_driver_sql(_SCHEMA_ALL_SQL)
    statements = [f"{sql};" for (sql,) in rows]
    if not statements:
        return
    text = "\n".join(statements)
    if state.color_enabled and state.output_file is None:
        text = highlight_sql(text)
    state.write_output(text)


def _cmd_dump(session: ShellSession, args: list[str]) -> None:
    session.state.write_output(generate_sql_dump(session.conn, args or None))


def _cmd_import(session: ShellSession, args: list[str]) -> None:
    if len(args) != 2:  # noqa: PLR2004
        msg = "Usage: .import FILE TABLE"
        raise CommandError(msg)
    import_csv(session.conn, args[0], args[1])


# ---- display -------------------------------------------------------------
def _cmd_mode(session: ShellSession, args: list[str]) -> None:
    state = session.state
    if not args:
        state.write_output(f"current output mode: {state.mode}")
        return
    mode = parse_output_mode(args[0])
    if mode is None:
        msg = f"mode should be one of: {', '.join(OUTPUT_MODES)}"
        raise CommandError(msg)
    state.mode = mode
    state.saved_mode = None


def _cmd_headers(session: ShellSession, args: list[str]) -> None:
    if not args:
        session.state.write_output(f"headers: {on_off(session.state.show_headers)}")
        return
    session.state.show_headers = _require_bool("headers", args[0])


def _cmd_separator(session: ShellSession, args: list[str]) -> None:
    if not args:
        session.state.write_output(f'current separator: "{session.state.separator}"')
        return
    session.state.separator = _unescape(args[0])


def _cmd_nullvalue(session: ShellSession, args: list[str]) -> None:
    if not args:
        session.state.write_output(f'current nullvalue: "{session.state.null_value}"')
        return
    session.state.null_value = args[0]


def _cmd_width(session: ShellSession, args: list[str]) -> None:
    if not args:
        msg = "Usage: .width NUM1 NUM2 ..."
        raise CommandError(msg)
    try:
        widths = tuple(int(arg) for arg in args)
    except ValueError as exc:
        msg = f"Invalid width: {exc}"
        raise CommandError(msg) from exc
    if any(w < 0 for w in widths):
        msg = "Widths must be zero (auto) or positive"
        raise CommandError(msg)
    session.state.column_widths = widths


def _cmd_show(session: ShellSession, _args: list[str]) -> None:
    session.state.write_output(session.state.settings_text())


def _cmd_output(session: ShellSession, args: list[str]) -> None:
    state = session.state
    if not args or args[0] == "stdout":
        state.reset_output()
        return
    try:
        message = state.redirect_output(args[0])
    except OSError as exc:
        msg = f"cannot open {args[0]}: {exc.strerror or exc}"
        raise CommandError(msg) from exc
    if message:
        print(message, file=state.stdout)


def _toggle(attribute: str) -> Handler:
    def handler(session: ShellSession, args: list[str]) -> None:
        state = session.state
        if not args:
            state.write_output(f"{attribute}: {on_off(getattr(state, attribute))}")
            return
        setattr(state, attribute, _require_bool(attribute, args[0]))

    return handler


COMMANDS: Final[dict[str, DotCommand]] = {
    cmd.name: cmd
    for cmd in (
        DotCommand("quit", ".quit", "Exit this program", _cmd_quit),
        DotCommand("exit", ".exit", "Exit this program", _cmd_quit),
        DotCommand("help", ".help", "Show this message", _cmd_help),
        DotCommand(
            "tables",
            ".tables ?PATTERN?",
            "List names of tables matching PATTERN",
            _cmd_tables,
            invalidates_schema=True,
        ),
        DotCommand(
            "schema",
            ".schema ?TABLE?",
            "Show the CREATE statements",
            _cmd_schema,
            invalidates_schema=True,
        ),
        DotCommand("mode", ".mode MODE", "Set output mode", _cmd_mode),
        DotCommand("headers", ".headers on|off", "Turn display of headers on or off", _cmd_headers),
        DotCommand("show", ".show", "Show the current values for various settings", _cmd_show),
        DotCommand("dump", ".dump ?TABLE?", "Render database content as SQL", _cmd_dump),
        DotCommand(
            "output",
            ".output ?FILE?",
            "Send output to FILE (or stdout if FILE is omitted)",
            _cmd_output,
        ),
        DotCommand(
            "read", ".read FILE", "Read input from FILE", _cmd_read, invalidates_schema=True
        ),
        DotCommand(
            "databases",
            ".databases",
            "List names and files of attached databases",
            _cmd_databases,
        ),
        DotCommand(
            "separator", ".separator SEP", 'Change separator for output mode "list"', _cmd_separator
        ),
        DotCommand(
            "nullvalue", ".nullvalue STRING", "Use STRING in place of NULL values", _cmd_nullvalue
        ),
        DotCommand(
            "import",
            ".import FILE TABLE",
            "Import data from FILE into TABLE",
            _cmd_import,
            invalidates_schema=True,
        ),
        DotCommand("timer", ".timer on|off", "Turn SQL timer on or off", _toggle("timer")),
        DotCommand("echo", ".echo on|off", "Turn command echo on or off", _toggle("echo")),
        DotCommand(
            "width", ".width NUM1 NUM2 ...", 'Set column widths for "column" mode', _cmd_width
        ),
        DotCommand("bail", ".bail on|off", "Stop after hitting an error", _toggle("bail")),
        DotCommand(
            "open",
            ".open FILE",
            "Close existing database and reopen FILE",
            _cmd_open,
            invalidates_schema=True,
        ),
    )
}


def help_text() -> str:
    usage_width = max(len(cmd.usage) for cmd in COMMANDS.values()) + 2
    lines = []
    for name in sorted(COMMANDS):
        cmd = COMMANDS[name]
        lines.append(f"{cmd.usage:<{usage_width}}{cmd.summary}")
        if name == "mode":
            lines.append(f"{'':<{usage_width}}MODE is one of: {', '.join(OUTPUT_MODES)}")
    return "\n".join(lines)


def parse_command(line: str) -> tuple[str, list[str]]:
    """Split a dot-command line into its lowercased name and arguments.

    Raises:
        CommandError: If the line has unbalanced quotes.
    """
    lexer = shlex.shlex(line.strip(), posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    # Backslashes stay literal so `.separator \t` reaches `_unescape`.
    lexer.escape = ""
    try:
        parts = list(lexer)
    except ValueError as exc:
        msg = f"cannot parse command: {exc}"
        raise CommandError(msg) from exc
    if not parts or not parts[0].startswith("."):
        msg = f"not a dot command: {line.strip()}"
        raise CommandError(msg)
    return parts[0][1:].lower(), parts[1:]


def execute_dot_command(session: ShellSession, line: str) -> CommandResult:
    """Run one dot command against `session`.

    Raises:
        CommandError: For unknown commands and usage errors.
    """
    name, args = parse_command(line)
    command = COMMANDS.get(name)
    if command is None:
        msg = f'unknown command: ".{name}". Enter ".help" for help'
        raise CommandError(msg)
    _logger.debug("Dot command .%s %s", name, args)
    if command.invalidates_schema:
        session.completer.invalidate_schema_cache()
    return command.handler(session, args) or CommandResult.CONTINUE
