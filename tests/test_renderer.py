from __future__ import annotations

import json
import re

import pytest

from sqlrepl.exceptions import RenderError
from sqlrepl.models import ColumnLayout, RenderConfig, ResultSet
from sqlrepl.render import escape_csv, layout, render, render_result, row_count_footer

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

ROWS = [(1, "Alice", None), (2, "Bob", 28)]
HEADERS = ["id", "name", "age"]


def _render(config: RenderConfig, rows: list[tuple[object, ...]] | None = None) -> str:
    data = ROWS if rows is None else rows
    return render(data, HEADERS, layout(data, HEADERS, config), config)


def test_table_scenario() -> None:
    out = _render(RenderConfig(null_display="NULL", mode="table"))
    assert out == "\n".join(
        [
            "┌────┬───────┬──────┐",
            "│ id │ name  │ age  │",
            "├────┼───────┼──────┤",
            "│ 1  │ Alice │ NULL │",
            "│ 2  │ Bob   │ 28   │",
            "└────┴───────┴──────┘",
            "(2 rows)",
        ]
    )


def test_table_without_headers_has_no_header_row() -> None:
    out = _render(RenderConfig(show_headers=False))
    lines = out.splitlines()
    assert lines[0].startswith("┌")
    assert lines[1] == "│ 1 │ Alice │    │"
    assert not any(line.startswith("├") for line in lines)


@pytest.mark.parametrize(("count", "footer"), [(0, "(0 rows)"), (1, "(1 row)"), (3, "(3 rows)")])
def test_table_footer_counts_rows(count: int, footer: str) -> None:
    rows: list[tuple[object, ...]] = [(i, "x", i) for i in range(count)]
    if rows:
        rows[0] = (0, "line one\nline two\r\n", "a\tb")
    lines = _render(RenderConfig(), rows).splitlines()
    assert lines[-1] == footer
    assert row_count_footer(count) == footer

    body = lines[lines.index(next(x for x in lines if x.startswith("├"))) + 1 : -2]
    assert lines[-2].startswith("└")
    assert len(body) == count
    assert all(x.startswith("│") and x.endswith("│") for x in body)
    assert len({len(x) for x in lines[:-1]}) == 1


def test_table_shows_line_breaks_visibly() -> None:
    rows = [(1, "line one\nline two"), (2, "x")]
    config = RenderConfig()
    out = render(rows, ["id", "note"], layout(rows, ["id", "note"], config), config)
    assert out.splitlines()[3] == "│ 1  │ line one\\nline two │"
    assert out.splitlines()[4] == "│ 2  │ x                  │"


def test_table_truncates_wide_cells() -> None:
    rows = [("a" * 60,)]
    config = RenderConfig(max_column_width=50)
    out = render(rows, ["c"], layout(rows, ["c"], config), config)
    assert "│ " + "a" * 47 + "... │" in out.splitlines()


def test_color_is_applied_after_padding() -> None:
    plain = _render(RenderConfig(null_display="NULL"))
    colored = _render(RenderConfig(null_display="NULL", color_enabled=True))
    assert "\x1b[" in colored
    assert _ANSI_RE.sub("", colored) == plain


def test_null_is_distinguishable_from_empty_string_when_colored() -> None:
    rows = [("x", "y"), (None, "")]
    config = RenderConfig(color_enabled=True)
    out = render(rows, ["a", "b"], layout(rows, ["a", "b"], config), config)
    null_line = out.splitlines()[4]
    cells = null_line.split("│")[1:-1]
    assert _ANSI_RE.sub("", cells[0]) == _ANSI_RE.sub("", cells[1])
    assert cells[0] != cells[1]


def test_no_color_means_no_escape_codes() -> None:
    for mode in ("table", "list", "csv", "column", "json", "jsonl", "line", "markdown"):
        out = _render(RenderConfig(mode=mode))  # type: ignore[arg-type]
        assert "\x1b[" not in out
        assert not out.endswith("\n")


def test_list_mode() -> None:
    out = _render(RenderConfig(mode="list", null_display="NULL"))
    assert out == "id|name|age\n1|Alice|NULL\n2|Bob|28"
    out = _render(RenderConfig(mode="list", separator=",", show_headers=False))
    assert out == "1,Alice,\n2,Bob,28"


def test_csv_mode_quotes_special_fields() -> None:
    rows = [("a,b", 'say "hi"', "line\nbreak")]
    config = RenderConfig(mode="csv")
    out = render(rows, ["x", "y", "z"], layout(rows, ["x", "y", "z"], config), config)
    assert out == 'x,y,z\n"a,b","say ""hi""","line\nbreak"'


@pytest.mark.parametrize(
    ("field", "expected"),
    [("plain", "plain"), ("a,b", '"a,b"'), ('q"', '"q"""'), ("cr\r", '"cr\r"'), ("", "")],
)
def test_escape_csv(field: str, expected: str) -> None:
    assert escape_csv(field) == expected


def test_column_mode() -> None:
    out = _render(RenderConfig(mode="column"))
    assert out == "\n".join(
        [
            "id  name   age",
            "--  -----  ---",
            "1   Alice",
            "2   Bob    28",
        ]
    )


def test_column_mode_width_overrides() -> None:
    out = _render(RenderConfig(mode="column", column_widths=(4, 3)))
    lines = out.splitlines()
    assert lines[0] == "id    nam  age"
    assert lines[2] == "1     Ali"


def test_markdown_mode() -> None:
    out = _render(RenderConfig(mode="markdown", null_display="NULL"))
    assert out == "\n".join(
        [
            "| id  | name  | age  |",
            "| --- | ----- | ---- |",
            "| 1   | Alice | NULL |",
            "| 2   | Bob   | 28   |",
        ]
    )


def test_markdown_escapes_pipes() -> None:
    rows = [("a|b",)]
    config = RenderConfig(mode="markdown")
    out = render(rows, ["c"], layout(rows, ["c"], config), config)
    assert "a\\|b" in out
    assert len({len(line) for line in out.splitlines()}) == 1


def test_markdown_truncates_and_aligns_wide_cells() -> None:
    rows = [("a" * 60, "x|y"), ("b", "multi\nline")]
    config = RenderConfig(mode="markdown", max_column_width=50)
    out = render(rows, ["c", "d"], layout(rows, ["c", "d"], config), config)
    lines = out.splitlines()
    assert len(lines) == 4
    assert len({len(line) for line in lines}) == 1
    assert lines[2].startswith("| " + "a" * 47 + "... | x\\|y")
    assert "multi\\nline" in lines[3]

def test_line_mode() -> None:
    out = _render(RenderConfig(mode="line"))
    assert out == "  id = 1\nname = Alice\n age = \n\n  id = 2\nname = Bob\n age = 28"


def test_json_mode() -> None:
    data = json.loads(_render(RenderConfig(mode="json")))
    assert data == [
        {"id": 1, "name": "Alice", "age": None},
        {"id": 2, "name": "Bob", "age": 28},
    ]


def test_json_uses_null_display_when_set() -> None:
    data = json.loads(_render(RenderConfig(mode="json", null_display="NULL")))
    assert data[0]["age"] == "NULL"


def test_jsonl_mode() -> None:
    lines = _render(RenderConfig(mode="jsonl")).splitlines()
    assert [json.loads(line) for line in lines] == [
        {"id": 1, "name": "Alice", "age": None},
        {"id": 2, "name": "Bob", "age": 28},
    ]


def test_render_does_not_mutate_inputs() -> None:
    rows = [list(r) for r in ROWS]
    config = RenderConfig(null_display="NULL")
    before = config.model_dump()
    render_result(ResultSet(headers=list(HEADERS), rows=[tuple(r) for r in rows]), config)
    assert config.model_dump() == before
    assert rows == [list(r) for r in ROWS]


def test_render_rejects_ragged_rows() -> None:
    layouts = [ColumnLayout("a", 1), ColumnLayout("b", 1)]
    with pytest.raises(RenderError):
        render([(1, 2), (3,)], ["a", "b"], layouts, RenderConfig())


def test_render_rejects_mismatched_layouts() -> None:
    with pytest.raises(RenderError, match="column layouts"):
        render([(1, 2)], ["a", "b"], [ColumnLayout("a", 1)], RenderConfig())


def test_render_result_helper() -> None:
    result = ResultSet(headers=["n"], rows=[(1,)])
    assert render_result(result, RenderConfig(mode="list")) == "n\n1"
    assert render_result(ResultSet(rowcount=3), RenderConfig()) == ""
