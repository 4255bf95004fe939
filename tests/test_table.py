from __future__ import annotations

from ink_layout.models import TableState
from ink_layout.table import calculate_column_widths, render_table, wrap_cell_text
from ink_layout.text import display_width


def test_columns_keep_natural_width_when_they_fit():
    assert calculate_column_widths(["Name"], [["Ada"]], 40) == [10]
    assert calculate_column_widths(["Name", "Description"], [], 80) == [10, 11]


def test_columns_shrink_proportionally():
    widths = calculate_column_widths(["a" * 30, "b" * 30], [], 40)
    assert widths == [16, 16]


def test_columns_never_shrink_below_minimum():
    widths = calculate_column_widths(["a" * 50, "b"], [], 20)
    assert min(widths) >= 10


def test_empty_table_has_no_columns():
    assert calculate_column_widths([], [], 80) == []
    assert render_table(TableState(in_table=True), 80) == []


def test_wrap_cell_text():
    assert wrap_cell_text("alpha beta gamma", 10) == ["alpha beta", "gamma"]
    assert wrap_cell_text("  short  ", 10) == ["short"]
    assert wrap_cell_text("", 10) == [""]


def test_render_table_with_header():
    table = TableState(headers=["Name", "Age"], rows=[["Ada", "36"]])
    rule = "─" * 12

    assert render_table(table, 80) == [
        f"┌{rule}┬{rule}┐",
        f"│ {'Name':<10} │ {'Age':<10} │",
        f"├{rule}┼{rule}┤",
        f"│ {'Ada':<10} │ {'36':<10} │",
        f"└{rule}┴{rule}┘",
    ]


def test_render_table_wraps_cells_and_pads_short_rows():
    table = TableState(rows=[["alpha beta gamma", "x"], ["y"]])
    lines = render_table(table, 30, indent="│   ")

    assert lines[0] == f"│   ┌{'─' * 14}┬{'─' * 12}┐"
    assert lines[1] == f"│   │ {'alpha beta':<12} │ {'x':<10} │"
    assert lines[2] == f"│   │ {'gamma':<12} │ {'':<10} │"
    assert lines[4] == f"│   │ {'y':<12} │ {'':<10} │"
    assert len({display_width(line) for line in lines}) == 1
