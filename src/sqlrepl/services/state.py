"""Mutable session state for the shell.

`ShellState` holds every setting a dot command can change plus the current
output destination. Renderers never see it directly: each query snapshots it
into a frozen `RenderConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import Final, TextIO

from sqlrepl.models import DEFAULT_MAX_COLUMN_WIDTH, OutputMode, RenderConfig

from .config_service import DEFAULT_DATABASE

# File extensions that switch the output mode while `.output` is active.
EXTENSION_MODES: Final[dict[str, OutputMode]] = {
    ".csv": "csv",
    ".json": "json",
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
    ".md": "markdown",
    ".markdown": "markdown",
}


def on_off(value: bool) -> str:  # noqa: FBT001
    return "on" if value else "off"


def guess_mode_from_path(path: str | Path) -> OutputMode | None:
    return EXTENSION_MODES.get(Path(path).suffix.lower())


@dataclass(slots=True)
class ShellState:
    """Settings and output routing for one shell session."""

    database_path: str = DEFAULT_DATABASE
    mode: OutputMode = "table"
    show_headers: bool = True
    separator: str = "|"
    null_value: str = ""
    echo: bool = False
    bail: bool = False
    timer: bool = False
    readonly: bool = False
    color_enabled: bool = False
    max_column_width: int = DEFAULT_MAX_COLUMN_WIDTH
    column_widths: tuple[int, ...] = ()
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    output_path: Path | None = None
    output_file: TextIO | None = None
    saved_mode: OutputMode | None = None

    def render_config(self) -> RenderConfig:
        """Snapshot the display settings for one render call."""
        return RenderConfig(
            show_headers=self.show_headers,
            null_display=self.null_value,
            max_column_width=self.max_column_width,
            color_enabled=self.color_enabled and self.output_file is None,
            mode=self.mode,
            separator=self.separator,
            column_widths=self.column_widths,
        )

    # ---- output routing --------------------------------------------------
    def write_output(self, text: str) -> None:
        """Write one block of text plus a newline to the current output."""
        target = self.output_file or self.stdout
        print(text, file=target)
        target.flush()

    def write_error(self, text: str) -> None:
        print(text, file=self.stderr)

    def redirect_output(self, path: str) -> str | None:
        """Send output to `path`, guessing the mode from its extension.

        Returns a status message when the mode was switched.

        Raises:
            OSError: If the file cannot be created.
        """
        handle = Path(path).expanduser().open("w", encoding="utf-8", newline="")
        self.close_output()
        self.output_file = handle
        self.output_path = Path(path)

        new_mode = guess_mode_from_path(path)
        if new_mode is None or new_mode == self.mode:
            return None
        if self.saved_mode is None:
            self.saved_mode = self.mode
        self.mode = new_mode
        return f"Output mode temporarily set to '{new_mode}' based on file extension."

    def reset_output(self) -> None:
        """Return output to stdout and restore a mode saved by `redirect_output`."""
        self.close_output()
        if self.saved_mode is not None:
            self.mode = self.saved_mode
            self.saved_mode = None

    def close_output(self) -> None:
        if self.output_file is not None:
            self.output_file.close()
        self.output_file = None
        self.output_path = None

    # ---- reporting -------------------------------------------------------
    def settings_text(self) -> str:
        """Current settings, one per line, as printed by `.show`."""
        rows = [
            ("echo", on_off(self.echo)),
            ("headers", on_off(self.show_headers)),
            ("mode", self.mode),
            ("nullvalue", f'"{self.null_value}"'),
            ("output", str(self.output_path) if self.output_path else "stdout"),
            ("colseparator", f'"{self.separator}"'),
            ("width", " ".join(str(w) for w in self.column_widths)),
            ("timer", on_off(self.timer)),
            ("bail", on_off(self.bail)),
            ("color", on_off(self.color_enabled)),
            ("maxwidth", str(self.max_column_width)),
            ("filename", self.database_path),
        ]
        name_width = max(len(name) for name, _ in rows)
        return "\n".join(f"{name:>{name_width}}: {value}".rstrip() for name, value in rows)
