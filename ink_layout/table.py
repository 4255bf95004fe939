"""Box-drawn rendering of collected table cells."""

from __future__ import annotations

from .constants import (
    BOX_BOTTOM,
    BOX_HORIZONTAL,
    BOX_MIDDLE,
    BOX_TOP,
    BOX_VERTICAL,
    TABLE_MIN_COLUMN_WIDTH,
)
from .models import TableState
from .text import display_width


def calculate_column_widths(
    headers: list[str], rows: list[list[str]], max_width: int, indent_width: int = 0
) -> list[int]:
    """Compute one width per column so the table fits `max_width` when possible.

    Columns keep their natural width (widest cell, at least 10) when the total
    fits; otherwise widths shrink proportionally, never below 10.

    Args:
        headers: Header cells, possibly empty.
        rows: Body rows.
        max_width: Available display width.
        indent_width: Width taken by the indent prefix.

    Returns:
        list[int]: Column widths; empty when the table has no cells.

    Examples:
        calculate_column_widths(["Name"], [["Ada"]], 40)  # [10]
    """
    num_cols = max([len(headers), *(len(row) for row in rows)], default=0)
    if num_cols == 0:
        return []

    borders_width = 2 + (num_cols - 1)
    padding_width = num_cols * 2
    available = max(
        max_width - indent_width - borders_width - padding_width,
        num_cols * TABLE_MIN_COLUMN_WIDTH,
    )

    natural_widths = []
    for column in range(num_cols):
        cells = [row[column] for row in [headers, *rows] if column < len(row)]
        widest = max((display_width(cell) for cell in cells), default=0)
        natural_widths.append(max(widest, TABLE_MIN_COLUMN_WIDTH))

    total_natural = sum(natural_widths)
    if total_natural <= available:
        return natural_widths

    return [
        max(int(width / total_natural * available), TABLE_MIN_COLUMN_WIDTH)
        for width in natural_widths
    ]


def wrap_cell_text(text: str, width: int) -> list[str]:
    """Wrap cell text into lines no wider than `width` where words allow."""
    text = " ".join(text.split())
    if display_width(text) <= width:
        return [text]

    lines = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if display_width(candidate) <= width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines or [""]


def pad_cell(text: str, width: int) -> str:
    text_width = display_width(text)
    if text_width >= width:
        return text
    return text + " " * (width - text_width)


def render_row(cells: list[str], col_widths: list[int], indent: str) -> list[str]:
    wrapped = [wrap_cell_text(cell, width) for cell, width in zip(cells, col_widths)]
    wrapped.extend([[""]] * (len(col_widths) - len(wrapped)))
    height = max(len(lines) for lines in wrapped)

    rendered = []
    for line_index in range(height):
        parts = [indent, BOX_VERTICAL]
        for cell_lines, width in zip(wrapped, col_widths):
            cell_line = cell_lines[line_index] if line_index < len(cell_lines) else ""
            parts.append(f" {pad_cell(cell_line, width)} {BOX_VERTICAL}")
        rendered.append("".join(parts))
    return rendered


def render_border(col_widths: list[int], indent: str, corners: tuple[str, str, str]) -> str:
    left, middle, right = corners
    segments = [BOX_HORIZONTAL * (width + 2) for width in col_widths]
    return f"{indent}{left}{middle.join(segments)}{right}"


def render_table(table: TableState, max_width: int, indent: str = "") -> list[str]:
    """Render a collected table as box-drawn lines.

    Args:
        table: Table state holding headers and rows.
        max_width: Available display width.
        indent: Prefix for every line (blockquote bars, list indentation).

    Returns:
        list[str]: Table lines, empty when the table has no cells.

    Examples:
        render_table(TableState(headers=["A"], rows=[["1"]]), 40)
    """
    col_widths = calculate_column_widths(
        table.headers, table.rows, max_width, display_width(indent)
    )
    if not col_widths:
        return []

    lines = [render_border(col_widths, indent, BOX_TOP)]
    if table.headers:
        lines.extend(render_row(table.headers, col_widths, indent))
        lines.append(render_border(col_widths, indent, BOX_MIDDLE))

    for row_index, row in enumerate(table.rows):
        lines.extend(render_row(row, col_widths, indent))
        if row_index < len(table.rows) - 1:
            lines.append(render_border(col_widths, indent, BOX_MIDDLE))

    lines.append(render_border(col_widths, indent, BOX_BOTTOM))
    return lines
