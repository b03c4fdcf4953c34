"""Typed models shared by the renderer, the runner and the shell.

`RenderConfig` is a frozen pydantic model: it is built fresh for each query
from the mutable session state and never changes while rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

OutputMode = Literal["list", "csv", "column", "json", "jsonl", "line", "table", "markdown"]

# Canonical order, used for `.mode` completion and help text.
OUTPUT_MODES: Final[tuple[OutputMode, ...]] = get_args(OutputMode)

MODE_ALIASES: Final[dict[str, OutputMode]] = {
    "columns": "column",
    "box": "table",
    "md": "markdown",
}

DEFAULT_MAX_COLUMN_WIDTH: Final[int] = 50


def parse_output_mode(name: str) -> OutputMode | None:
    """Resolve a user-supplied mode name (case-insensitive, aliases allowed)."""
    lowered = name.strip().lower()
    if lowered in MODE_ALIASES:
        return MODE_ALIASES[lowered]
    for mode in OUTPUT_MODES:
        if mode == lowered:
            return mode
    return None


class RenderConfig(BaseModel):
    """Display options for a single render call."""

    model_config = ConfigDict(frozen=True)

    show_headers: bool = Field(default=True, description="Emit a header row")
    null_display: str = Field(default="", description="Text shown in place of SQL NULL")
    max_column_width: int = Field(
        default=DEFAULT_MAX_COLUMN_WIDTH, ge=1, description="Upper bound on any column width"
    )
    color_enabled: bool = Field(default=False, description="Emit ANSI styling")
    mode: OutputMode = Field(default="table", description="Output mode")
    separator: str = Field(default="|", description="Column separator for list mode")
    column_widths: tuple[int, ...] = Field(
        default=(), description="Per-column width overrides for column mode (0 = auto)"
    )


@dataclass(frozen=True, slots=True)
class ColumnLayout:
    """Computed display width for one result column."""

    header: str
    display_width: int


@dataclass(slots=True)
class ResultSet:
    """Rows returned by a statement.

    `rows` hold raw driver values; `None` is SQL NULL. Statements that return
    no rows have empty `headers` and report `rowcount` instead.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[tuple[object, ...]] = field(default_factory=list)
    rowcount: int | None = None

    @property
    def returns_rows(self) -> bool:
        return bool(self.headers)
