"""Column width computation and cell truncation.

Widths are derived per render call from the result set and the
`RenderConfig`; nothing is remembered between queries.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from sqlrepl.exceptions import RenderError
from sqlrepl.models import ColumnLayout, RenderConfig

ELLIPSIS: Final[str] = "..."
BLOB_TEXT: Final[str] = "<BLOB>"

_VISIBLE_CONTROLS: Final[dict[int, str]] = str.maketrans(
    {"\n": "\\n", "\r": "\\r", "\t": " "}
)


def cell_text(value: object, null_display: str) -> str:
    """Display text for one raw cell value."""
    if value is None:
        return null_display
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, bytes | bytearray | memoryview):
        return BLOB_TEXT
    return str(value)


def display_text(value: object, null_display: str) -> str:
    """Single-line cell text for the aligned modes.

    Line breaks are shown as `\\n` and `\\r` and tabs become a space, so one
    result row always occupies one printed line.
    """
    return single_line(cell_text(value, null_display))


def single_line(text: str) -> str:
    return text.translate(_VISIBLE_CONTROLS)


def truncate(text: str, width: int) -> str:
    """Fit `text` into `width` characters.

    Overflowing text keeps `width - 3` characters plus an ellipsis; below a
    width of 4 there is no room for one and the text is simply cut.
    Truncating an already-truncated string at the same width is a no-op.
    """
    if len(text) <= width:
        return text
    if width < len(ELLIPSIS) + 1:
        return text[: max(width, 0)]
    return text[: width - len(ELLIPSIS)] + ELLIPSIS


def check_arity(rows: Sequence[Sequence[object]], headers: Sequence[str]) -> None:
    """Raise `RenderError` when a row does not match the header count."""
    for index, row in enumerate(rows):
        if len(row) != len(headers):
            msg = (
                f"Row {index} has {len(row)} values but the result has "
                f"{len(headers)} columns"
            )
            raise RenderError(msg)


def layout(
    rows: Sequence[Sequence[object]],
    headers: Sequence[str],
    config: RenderConfig,
) -> list[ColumnLayout]:
    """Compute per-column display widths in result-set column order."""
    check_arity(rows, headers)
    layouts: list[ColumnLayout] = []
    for index, header in enumerate(headers):
        natural = len(single_line(header)) if config.show_headers else 0
        for row in rows:
            natural = max(natural, len(display_text(row[index], config.null_display)))
        width = min(config.max_column_width, natural)
        layouts.append(ColumnLayout(header=header, display_width=width))
    return layouts
