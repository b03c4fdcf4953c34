"""Configuration service for sqlrepl.

This module centralizes environment variable handling and database engine
creation. Values are read on each call so a `.env` file loaded at startup (or
a test's monkeypatched environment) is always honoured.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final, Literal, TextIO

import sqlalchemy as sa

from sqlrepl.models import DEFAULT_MAX_COLUMN_WIDTH

ColorChoice = Literal["auto", "on", "off"]

DEFAULT_DATABASE: Final[str] = "database.db"
MEMORY_DATABASE: Final[str] = ":memory:"
DEFAULT_HISTORY_FILE: Final[str] = "~/.sqlrepl_history"
MIN_COLUMN_WIDTH: Final[int] = 4


class ConfigService:
    """Service for managing configuration and database connections."""

    @staticmethod
    def get_database_path() -> str:
        """Database file used when none is given on the command line."""
        return os.getenv("SQLREPL_DATABASE") or DEFAULT_DATABASE

    @staticmethod
    def create_database_engine(path: str, *, readonly: bool = False) -> sa.Engine:
        """Create a SQLAlchemy engine for a SQLite database file.

        Args:
            path: Database file path, or ``:memory:``
            readonly: Open the file through a ``mode=ro`` SQLite URI

        Returns:
            SQLAlchemy Engine instance
        """
        if path == MEMORY_DATABASE:
            url = sa.URL.create("sqlite+pysqlite", database=MEMORY_DATABASE)
        elif readonly:
            url = sa.URL.create(
                "sqlite+pysqlite",
                database=f"file:{path}",
                query={"mode": "ro", "uri": "true"},
            )
        else:
            url = sa.URL.create("sqlite+pysqlite", database=path)
        return sa.create_engine(url)

    # ---- Display ---------------------------------------------------------
    @staticmethod
    def max_column_width() -> int:
        """Upper bound on rendered column widths."""
        val = os.getenv("SQLREPL_MAX_COLUMN_WIDTH", str(DEFAULT_MAX_COLUMN_WIDTH))
        try:
            n = int(val)
        except ValueError:
            n = DEFAULT_MAX_COLUMN_WIDTH
        return max(MIN_COLUMN_WIDTH, n)

    @staticmethod
    def color_choice() -> ColorChoice:
        val = os.getenv("SQLREPL_COLOR", "auto").strip().lower()
        if val == "on":
            return "on"
        if val == "off":
            return "off"
        return "auto"

    @staticmethod
    def resolve_color(choice: ColorChoice, stream: TextIO) -> bool:
        """Decide whether ANSI styling is emitted on `stream`.

        ``auto`` enables color only for a terminal and only while ``NO_COLOR``
        is unset.
        """
        if choice == "on":
            return True
        if choice == "off":
            return False
        if os.getenv("NO_COLOR"):
            return False
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    # ---- Session ---------------------------------------------------------
    @staticmethod
    def history_file() -> Path:
        """Line-editor history location."""
        val = os.getenv("SQLREPL_HISTORY_FILE") or DEFAULT_HISTORY_FILE
        return Path(val).expanduser()

    @staticmethod
    def log_level() -> int:
        """Logging level for the CLI; unknown names fall back to WARNING."""
        name = os.getenv("SQLREPL_LOG_LEVEL", "WARNING").strip().upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.WARNING
