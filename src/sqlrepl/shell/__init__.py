"""Shell glue: dot commands, data transfer and the REPL loop."""

from __future__ import annotations

from .dot_commands import CommandResult, execute_dot_command, parse_bool_arg
from .repl import Shell

__all__ = ["CommandResult", "Shell", "execute_dot_command", "parse_bool_arg"]
