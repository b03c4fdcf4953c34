"""Statement splitting and execution."""

from __future__ import annotations

from .runner import (
    assist_error,
    is_complete_statement,
    is_schema_mutating,
    run_statement,
    split_statements,
    strip_trailing_semicolon,
)

__all__ = [
    "assist_error",
    "is_complete_statement",
    "is_schema_mutating",
    "run_statement",
    "split_statements",
    "strip_trailing_semicolon",
]
