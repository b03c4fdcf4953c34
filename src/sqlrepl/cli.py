"""Command-line entry point for sqlrepl.

Three ways to run:
- one-shot: ``sqlrepl DB "SELECT ..."`` runs the SQL and exits
- piped: statements are read from stdin when it is not a terminal
- interactive: a prompt_toolkit session with completion and history
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import dotenv
from sqlalchemy.exc import SQLAlchemyError

from sqlrepl import __version__
from sqlrepl.models import OUTPUT_MODES, OutputMode, parse_output_mode
from sqlrepl.services.config_service import ConfigService
from sqlrepl.services.state import ShellState
from sqlrepl.shell.dot_commands import CommandResult
from sqlrepl.shell.repl import Shell

_logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _mode_arg(value: str) -> OutputMode:
    mode = parse_output_mode(value)
    if mode is None:
        msg = f"mode should be one of: {', '.join(OUTPUT_MODES)}"
        raise argparse.ArgumentTypeError(msg)
    return mode


def _width_arg(value: str) -> int:
    try:
        width = int(value)
    except ValueError as exc:
        msg = f"invalid width: {value}"
        raise argparse.ArgumentTypeError(msg) from exc
    if width < 1:
        msg = "width must be positive"
        raise argparse.ArgumentTypeError(msg)
    return width


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlrepl",
        description="Interactive SQLite shell with context-aware completion",
    )
    parser.add_argument("database", nargs="?", help="Database file (default: database.db)")
    parser.add_argument("sql", nargs="?", help="SQL to run before exiting")
    headers = parser.add_mutually_exclusive_group()
    headers.add_argument(
        "-H", "--header", dest="headers", action="store_true", default=None, help="Show headers"
    )
    headers.add_argument(
        "--noheader", dest="headers", action="store_false", help="Hide headers"
    )
    parser.add_argument("-m", "--mode", type=_mode_arg, help="Output mode")
    parser.add_argument("-s", "--separator", help='Separator for "list" mode')
    parser.add_argument("-n", "--nullvalue", help="Text shown for NULL values")
    parser.add_argument("-r", "--readonly", action="store_true", help="Open read-only")
    parser.add_argument("--init", metavar="FILE", help="Run FILE before anything else")
    parser.add_argument(
        "--cmd",
        metavar="COMMAND",
        action="append",
        default=[],
        help="Run COMMAND before reading input (repeatable)",
    )
    parser.add_argument("-e", "--echo", action="store_true", help="Print inputs before running")
    parser.add_argument("-b", "--bail", action="store_true", help="Stop after the first error")
    color = parser.add_mutually_exclusive_group()
    color.add_argument("--color", dest="color", action="store_const", const="on")
    color.add_argument("--no-color", dest="color", action="store_const", const="off")
    parser.add_argument(
        "--max-width", type=_width_arg, metavar="N", help="Maximum rendered column width"
    )
    parser.add_argument("--version", action="version", version=f"sqlrepl {__version__}")
    return parser


def build_state(args: argparse.Namespace) -> ShellState:
    """Initial session settings from parsed arguments and the environment."""
    state = ShellState(
        database_path=args.database or ConfigService.get_database_path(),
        readonly=args.readonly,
        echo=args.echo,
        bail=args.bail,
        max_column_width=args.max_width or ConfigService.max_column_width(),
        color_enabled=ConfigService.resolve_color(
            args.color or ConfigService.color_choice(), sys.stdout
        ),
    )
    if args.headers is not None:
        state.show_headers = args.headers
    if args.mode is not None:
        state.mode = args.mode
    if args.separator is not None:
        state.separator = args.separator
    if args.nullvalue is not None:
        state.null_value = args.nullvalue
    return state


def _run(shell: Shell, args: argparse.Namespace) -> int:
    if args.init:
        try:
            init_text = Path(args.init).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error: cannot read {args.init}: {exc.strerror or exc}", file=sys.stderr)
            return 1
        if not shell.run_script(init_text) and shell.state.bail:
            return 1

    for command in args.cmd:
        if shell.process_line(command) is CommandResult.QUIT:
            return 0
        shell.flush()
    if shell.quit_requested:
        return 0

    if args.sql is not None:
        return 0 if shell.run_script(args.sql) else 1

    if not sys.stdin.isatty():
        ok = shell.run_script(sys.stdin.read())
        return 1 if not ok and shell.state.bail else 0

    shell.interactive(history_file=ConfigService.history_file())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``sqlrepl`` console script."""
    dotenv.load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=ConfigService.log_level(), format=LOG_FORMAT, stream=sys.stderr)

    state = build_state(args)
    try:
        shell = Shell(state)
    except SQLAlchemyError as exc:
        reason = getattr(exc, "orig", None) or exc
        print(f"Error: unable to open database {state.database_path!r}: {reason}", file=sys.stderr)
        return 1

    try:
        return _run(shell, args)
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
        return 130
    except Exception:
        _logger.exception("Unexpected error")
        return 1
    finally:
        shell.close()


if __name__ == "__main__":
    raise SystemExit(main())
