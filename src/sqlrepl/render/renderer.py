"""Styled text rendering of result sets.

Every output mode is a pure function of the rows, the headers, the computed
`ColumnLayout`s and the `RenderConfig`; the result is one text blob without a
trailing newline. ANSI styling comes from `rich.style.Style` and is applied
after padding so escape codes never count towards column widths.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import json
from typing import Final

from rich.style import Style

from sqlrepl.exceptions import RenderError
from sqlrepl.models import ColumnLayout, OutputMode, RenderConfig, ResultSet

from .layout import (
    BLOB_TEXT,
    cell_text,
    check_arity,
    display_text,
    layout,
    single_line,
    truncate,
)

HEADER_STYLE: Final[Style] = Style(color="cyan", bold=True)
ALT_ROW_STYLE: Final[Style] = Style(dim=True)
NULL_STYLE: Final[Style] = Style(color="bright_black", italic=True)
FOOTER_STYLE: Final[Style] = Style(color="green", dim=True)

Rows = Sequence[Sequence[object]]


def _paint(text: str, style: Style, enabled: bool) -> str:  # noqa: FBT001
    return style.render(text) if enabled else text


def row_count_footer(count: int) -> str:
    return f"({count} row{'' if count == 1 else 's'})"


# ---- table ----------------------------------------------------------------
def _border(left: str, mid: str, right: str, widths: Sequence[int]) -> str:
    return left + mid.join("─" * (w + 2) for w in widths) + right


def _render_table(
    rows: Rows, headers: Sequence[str], layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    color = config.color_enabled
    widths = [lay.display_width for lay in layouts]
    lines = [_border("┌", "┬", "┐", widths)]

    if config.show_headers:
        cells = [
            _paint(truncate(single_line(h), w).ljust(w), HEADER_STYLE, color)
            for h, w in zip(headers, widths, strict=True)
        ]
        lines.append("│" + "│".join(f" {c} " for c in cells) + "│")
        lines.append(_border("├", "┼", "┤", widths))

    for row_index, row in enumerate(rows):
        cells = []
        for value, w in zip(row, widths, strict=True):
            text = truncate(display_text(value, config.null_display), w).ljust(w)
            if value is None:
                text = _paint(text, NULL_STYLE, color)
            elif row_index % 2 == 0:
                text = _paint(text, ALT_ROW_STYLE, color)
            cells.append(f" {text} ")
        lines.append("│" + "│".join(cells) + "│")

    lines.append(_border("└", "┴", "┘", widths))
    lines.append(_paint(row_count_footer(len(rows)), FOOTER_STYLE, color))
    return "\n".join(lines)


# ---- delimited ------------------------------------------------------------
def escape_csv(field: str) -> str:
    """Quote a CSV field when it holds a separator, a quote or a line break."""
    if any(ch in field for ch in (",", '"', "\n", "\r")):
        return '"' + field.replace('"', '""') + '"'
    return field


def _render_list(
    rows: Rows, headers: Sequence[str], _layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    sep = config.separator
    lines = [sep.join(headers)] if config.show_headers else []
    lines.extend(sep.join(cell_text(v, config.null_display) for v in row) for row in rows)
    return "\n".join(lines)


def _render_csv(
    rows: Rows, headers: Sequence[str], _layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    lines = [",".join(escape_csv(h) for h in headers)] if config.show_headers else []
    lines.extend(
        ",".join(escape_csv(cell_text(v, config.null_display)) for v in row) for row in rows
    )
    return "\n".join(lines)


# ---- aligned --------------------------------------------------------------
def _render_column(
    rows: Rows, headers: Sequence[str], layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    if not rows:
        return ""
    widths = [lay.display_width for lay in layouts]
    for index, override in enumerate(config.column_widths[: len(widths)]):
        if override > 0:
            widths[index] = override

    def line(values: Sequence[str]) -> str:
        return "  ".join(truncate(v, w).ljust(w) for v, w in zip(values, widths, strict=True))

    lines: list[str] = []
    if config.show_headers:
        lines.append(line([single_line(h) for h in headers]))
        lines.append("  ".join("-" * w for w in widths))
    lines.extend(line([display_text(v, config.null_display) for v in row]) for row in rows)
    return "\n".join(text.rstrip() for text in lines)


def _render_markdown(
    rows: Rows, headers: Sequence[str], layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    if not rows:
        return ""
    limits = [lay.display_width for lay in layouts]

    def cells(values: Sequence[str], widths: Sequence[int]) -> list[str]:
        return [
            truncate(v, w).replace("|", "\\|") for v, w in zip(values, widths, strict=True)
        ]

    # The header row is always shown, so it is capped by the width limit only.
    header_limits = [config.max_column_width] * len(headers)
    table = [cells([single_line(h) for h in headers], header_limits)]
    table.extend(
        cells([display_text(v, config.null_display) for v in row], limits) for row in rows
    )
    # Widths are measured after escaping so every line matches the separator.
    widths = [max(3, *(len(r[i]) for r in table)) for i in range(len(headers))]

    def line(values: Sequence[str]) -> str:
        padded = [v.ljust(w) for v, w in zip(values, widths, strict=True)]
        return "| " + " | ".join(padded) + " |"

    lines = [line(table[0]), "| " + " | ".join("-" * w for w in widths) + " |"]
    lines.extend(line(r) for r in table[1:])
    return "\n".join(lines)


def _render_line(
    rows: Rows, headers: Sequence[str], _layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    name_width = max((len(h) for h in headers), default=0)
    blocks = []
    for row in rows:
        blocks.append(
            "\n".join(
                f"{h:>{name_width}} = {cell_text(v, config.null_display)}"
                for h, v in zip(headers, row, strict=True)
            )
        )
    return "\n\n".join(blocks)


# ---- json -----------------------------------------------------------------
def _json_value(value: object, null_display: str) -> object:
    if value is None:
        return null_display or None
    if isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, bytes | bytearray | memoryview):
        return BLOB_TEXT
    return str(value)


def _json_objects(
    rows: Rows, headers: Sequence[str], config: RenderConfig
) -> list[dict[str, object]]:
    return [
        {h: _json_value(v, config.null_display) for h, v in zip(headers, row, strict=True)}
        for row in rows
    ]


def _render_json(
    rows: Rows, headers: Sequence[str], _layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    return json.dumps(_json_objects(rows, headers, config), indent=2, ensure_ascii=False)


def _render_jsonl(
    rows: Rows, headers: Sequence[str], _layouts: Sequence[ColumnLayout], config: RenderConfig
) -> str:
    return "\n".join(
        json.dumps(obj, ensure_ascii=False) for obj in _json_objects(rows, headers, config)
    )


_RENDERERS: Final[
    dict[
        OutputMode,
        Callable[[Rows, Sequence[str], Sequence[ColumnLayout], RenderConfig], str],
    ]
] = {
    "list": _render_list,
    "csv": _render_csv,
    "column": _render_column,
    "json": _render_json,
    "jsonl": _render_jsonl,
    "line": _render_line,
    "table": _render_table,
    "markdown": _render_markdown,
}


def render(
    rows: Rows,
    headers: Sequence[str],
    layouts: Sequence[ColumnLayout],
    config: RenderConfig,
) -> str:
    """Render a result set in `config.mode`.

    Raises:
        RenderError: If a row's arity or the layout count differs from the
            number of headers.
    """
    check_arity(rows, headers)
    if len(layouts) != len(headers):
        msg = f"Got {len(layouts)} column layouts for {len(headers)} columns"
        raise RenderError(msg)
    if not headers:
        return ""
    return _RENDERERS[config.mode](rows, headers, layouts, config)


def render_result(result: ResultSet, config: RenderConfig) -> str:
    """Lay out and render a `ResultSet` in one call."""
    layouts = layout(result.rows, result.headers, config)
    return render(result.rows, result.headers, layouts, config)
