"""Adaptive tabular rendering of query results."""

from __future__ import annotations

from .layout import cell_text, display_text, layout, truncate
from .renderer import escape_csv, render, render_result, row_count_footer

__all__ = [
    "cell_text",
    "display_text",
    "escape_csv",
    "layout",
    "render",
    "render_result",
    "row_count_footer",
    "truncate",
]
