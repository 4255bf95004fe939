"""Display surfaces: where a rendered chapter is painted."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Protocol

import click

from .constants import GROUP_NOTE_INDICATOR, NOTE_INDICATOR, USER_HIGHLIGHT_PREFIX
from .highlights import clamp_column
from .models import LayoutResult, ResolvedAnnotation
from .text import center_padding

# click.style keyword arguments per highlight group
GROUP_STYLES: dict[str, dict[str, object]] = {
    "InkH1": {"fg": "magenta", "bold": True},
    "InkH2": {"fg": "blue", "bold": True},
    "InkH3": {"fg": "cyan", "bold": True},
    "InkH4": {"bold": True},
    "InkH5": {"bold": True},
    "InkH6": {"bold": True},
    "InkBold": {"bold": True},
    "InkItalic": {"italic": True},
    "InkUnderlined": {"underline": True},
    "InkStrikethrough": {"strikethrough": True},
    "InkCode": {"fg": "green"},
    "InkHighlight": {"reverse": True},
    "Comment": {"dim": True},
    "InkListItem": {"fg": "cyan"},
    "InkTitle": {"bold": True, "underline": True},
    "InkHorizontalRule": {"dim": True},
    "Special": {"fg": "yellow"},
    GROUP_NOTE_INDICATOR: {"fg": "yellow", "bold": True},
}

ANNOTATION_COLORS = frozenset(
    {"black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"}
)


class DisplaySurface(Protocol):
    """Anything that can show lines and paint ranges on them."""

    def set_lines(self, lines: Sequence[str]) -> None:
        ...

    def add_highlight(self, line: int, start_col: int, end_col: int, group: str) -> None:
        ...

    def add_virtual_text(self, line: int, col: int, text: str, group: str) -> None:
        ...


def style_for_group(group: str) -> dict[str, object]:
    """Return the `click.style` arguments used to paint `group`.

    User annotation groups (``InkUserHighlight_<color>``) use the color as a
    background when it is a terminal color name, and reverse video otherwise.

    Examples:
        style_for_group("InkBold")  # {"bold": True}
        style_for_group("InkUserHighlight_yellow")  # {"bg": "yellow", "fg": "black"}
    """
    if group.startswith(USER_HIGHLIGHT_PREFIX):
        color = group[len(USER_HIGHLIGHT_PREFIX) :]
        if color in ANNOTATION_COLORS:
            return {"bg": color, "fg": "black"}
        return {"reverse": True}
    return GROUP_STYLES.get(group, {})


def draw_layout(
    result: LayoutResult,
    surface: DisplaySurface,
    width: int,
    annotations: Iterable[ResolvedAnnotation] = (),
) -> None:
    """Send a rendered chapter and its decorations to a display surface.

    Centered lines get inline left padding, highlight ranges are clamped
    into their lines (empty ranges are skipped), resolved annotations are
    painted line by line, and annotations that carry a note get an
    indicator after their last character.

    Args:
        result: Rendered chapter.
        surface: Target surface.
        width: Width used to center title lines.
        annotations: Resolved annotations; orphaned ones are skipped.

    Examples:
        surface = TerminalSurface()
        draw_layout(render_chapter(markup), surface, width=80)
        print("\\n".join(surface.render()))
    """
    lines = result.lines
    surface.set_lines(lines)

    for index in sorted(result.centered):
        if 0 <= index < len(lines):
            padding = center_padding(lines[index], width)
            if padding:
                surface.add_virtual_text(index, 0, " " * padding, "Normal")

    for span in result.highlights:
        _paint(surface, lines, span.line, span.start_col, span.end_col, span.group)

    for entry in annotations:
        position = entry.position
        if position is None:
            continue
        group = USER_HIGHLIGHT_PREFIX + entry.annotation.color
        for line in range(position.start_line, position.end_line + 1):
            if not 0 <= line < len(lines):
                continue
            start_col = position.start_col if line == position.start_line else 0
            end_col = position.end_col if line == position.end_line else len(lines[line])
            _paint(surface, lines, line, start_col, end_col, group)

        if entry.annotation.note and 0 <= position.end_line < len(lines):
            col = clamp_column(position.end_col, len(lines[position.end_line]))
            surface.add_virtual_text(position.end_line, col, NOTE_INDICATOR, GROUP_NOTE_INDICATOR)


def _paint(
    surface: DisplaySurface,
    lines: Sequence[str],
    line: int,
    start_col: int,
    end_col: int,
    group: str,
) -> None:
    if not 0 <= line < len(lines):
        return
    length = len(lines[line])
    start_col = clamp_column(start_col, length)
    end_col = clamp_column(end_col, length)
    if start_col < end_col:
        surface.add_highlight(line, start_col, end_col, group)


class TerminalSurface:
    """Collect drawing requests and render them as ANSI-styled text.

    Later highlights win where styles conflict, so user annotations painted
    after the layout's own spans stay visible.

    Examples:
        surface = TerminalSurface()
        surface.set_lines(["Hello world"])
        surface.add_highlight(0, 0, 5, "InkBold")
        surface.render()  # ["\\x1b[1mHello\\x1b[0m world"]
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._highlights: dict[int, list[tuple[int, int, str]]] = defaultdict(list)
        self._virtual: dict[int, list[tuple[int, str, str]]] = defaultdict(list)

    def set_lines(self, lines: Sequence[str]) -> None:
        self.lines = list(lines)
        self._highlights.clear()
        self._virtual.clear()

    def add_highlight(self, line: int, start_col: int, end_col: int, group: str) -> None:
        self._highlights[line].append((start_col, end_col, group))

    def add_virtual_text(self, line: int, col: int, text: str, group: str) -> None:
        self._virtual[line].append((col, text, group))

    def render(self) -> list[str]:
        """Return every line with its styles and virtual text applied."""
        return [self._render_line(index, line) for index, line in enumerate(self.lines)]

    def _render_line(self, index: int, line: str) -> str:
        styles: list[dict[str, object]] = [{} for _ in line]
        for start_col, end_col, group in self._highlights.get(index, []):
            style = style_for_group(group)
            for col in range(max(start_col, 0), min(end_col, len(line))):
                styles[col] = {**styles[col], **style}

        inserts = defaultdict(list)
        for col, text, group in sorted(self._virtual.get(index, []), key=lambda item: item[0]):
            inserts[min(max(col, 0), len(line))].append((text, group))

        pieces = []
        run, run_style = "", {}
        for col in range(len(line) + 1):
            if col in inserts or col == len(line) or styles[col] != run_style:
                pieces.append(_styled(run, run_style))
                run = ""
                for text, group in inserts.get(col, []):
                    pieces.append(_styled(text, style_for_group(group)))
            if col == len(line):
                break
            run_style = styles[col]
            run += line[col]
        return "".join(pieces)


def _styled(text: str, style: dict[str, object]) -> str:
    if not text or not style:
        return text
    return click.style(text, **style)
