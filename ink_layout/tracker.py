"""Inline style and block structure tracking."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .config import Typography
from .constants import BLOCKQUOTE_BAR, BULLET
from .models import (
    BlockContext,
    ListFrame,
    SelfClosing,
    StyleFrame,
    StyleKind,
    TableState,
    TagOpen,
)

logger = logging.getLogger(__name__)

TAG_STYLES: dict[str, StyleKind] = {
    "h1": StyleKind.H1,
    "h2": StyleKind.H2,
    "h3": StyleKind.H3,
    "h4": StyleKind.H4,
    "h5": StyleKind.H5,
    "h6": StyleKind.H6,
    "b": StyleKind.BOLD,
    "strong": StyleKind.BOLD,
    "dt": StyleKind.BOLD,
    "i": StyleKind.ITALIC,
    "em": StyleKind.ITALIC,
    "cite": StyleKind.ITALIC,
    "u": StyleKind.UNDERLINE,
    "ins": StyleKind.UNDERLINE,
    "s": StyleKind.STRIKETHROUGH,
    "strike": StyleKind.STRIKETHROUGH,
    "del": StyleKind.STRIKETHROUGH,
    "code": StyleKind.CODE,
    "kbd": StyleKind.CODE,
    "samp": StyleKind.CODE,
    "tt": StyleKind.CODE,
    "mark": StyleKind.MARK,
    "blockquote": StyleKind.QUOTE,
}


def frames_for_tag(
    token: TagOpen | SelfClosing, serial: int, class_styles: Mapping[str, str]
) -> list[StyleFrame]:
    """Build the style frames an opening tag contributes.

    The tag's own style comes first (a link frame for ``<a>``), followed by one
    class frame per CSS class found in `class_styles`. Unrecognized tags and
    unknown classes contribute nothing.

    Args:
        token: Opening tag.
        serial: Identifier shared by every frame of this tag.
        class_styles: Mapping from CSS class name to highlight group.

    Returns:
        list[StyleFrame]: Frames in push order; possibly empty.

    Examples:
        frames_for_tag(TagOpen("b"), 1, {})  # [StyleFrame("b", StyleKind.BOLD, 1)]
    """
    frames = []
    if token.name == "a":
        frames.append(StyleFrame("a", StyleKind.LINK, serial, href=token.get("href") or None))
    else:
        kind = TAG_STYLES.get(token.name)
        if kind is not None:
            frames.append(StyleFrame(token.name, kind, serial))

    for class_name in (token.get("class") or "").split():
        group = class_styles.get(class_name)
        if group is None:
            logger.debug("No highlight group for class %r, skipping", class_name)
            continue
        frames.append(StyleFrame(token.name, StyleKind.CSS_CLASS, serial, css_group=group))
    return frames


class StyleStack:
    """Stack of open elements and the style frames they pushed.

    Every opening tag is recorded so closing tags find their partner even
    when the tag carries no style. Popping is tolerant: a closing tag with no
    open partner changes nothing.
    """

    def __init__(self) -> None:
        self._open: list[tuple[str, int]] = []
        self._frames: list[StyleFrame] = []
        self._serial = 0

    def push_tag(
        self, token: TagOpen, class_styles: Mapping[str, str]
    ) -> tuple[int, list[StyleFrame]]:
        """Open `token` and push its frames; return its serial and frames."""
        self._serial += 1
        serial = self._serial
        self._open.append((token.name, serial))
        frames = frames_for_tag(token, serial, class_styles)
        self._frames.extend(frames)
        return serial, frames

    def pop_tag(self, name: str) -> int | None:
        """Close the most recent open element called `name`.

        Returns:
            int | None: Serial of the closed element, or None when no element
                with that name is open.
        """
        for index in range(len(self._open) - 1, -1, -1):
            open_name, serial = self._open[index]
            if open_name == name:
                del self._open[index]
                self._frames = [frame for frame in self._frames if frame.serial != serial]
                return serial

        logger.debug("Ignoring unmatched closing tag </%s>", name)
        return None

    def active(self) -> tuple[StyleFrame, ...]:
        return tuple(self._frames)

    @property
    def open_elements(self) -> int:
        return len(self._open)

    def __len__(self) -> int:
        return len(self._frames)


def indent_for(context: BlockContext, typography: Typography) -> str:
    """Return the indentation prefix for a line in `context`.

    Blockquotes render one bar marker per depth level plus a filler pad of
    ``indent_size - 2`` spaces; lists add ``list_indent`` spaces per level and
    definition descriptions add ``indent_size`` spaces.

    Examples:
        indent_for(BlockContext(blockquote_depth=2), Typography())  # "│ │   "
    """
    indent = ""
    if context.blockquote_depth > 0:
        indent += BLOCKQUOTE_BAR * context.blockquote_depth
        indent += " " * (typography.indent_size - 2)
    if context.list_stack:
        indent += " " * (typography.list_indent * len(context.list_stack))
    if context.in_dd:
        indent += " " * typography.indent_size
    return indent


def enter_list(context: BlockContext, ordered: bool) -> None:
    context.list_stack.append(ListFrame(ordered=ordered))


def leave_list(context: BlockContext) -> None:
    if context.list_stack:
        context.list_stack.pop()


def next_list_prefix(context: BlockContext) -> str:
    """Advance the innermost list and return the marker for its next item.

    Returns an empty string for a list item outside of any list.

    Examples:
        ctx = BlockContext(list_stack=[ListFrame(ordered=True)])
        next_list_prefix(ctx)  # "1. "
    """
    if not context.list_stack:
        return ""
    current = context.list_stack[-1]
    if not current.ordered:
        return BULLET
    current.counter += 1
    return f"{current.counter}. "


def enter_blockquote(context: BlockContext) -> None:
    context.blockquote_depth += 1


def leave_blockquote(context: BlockContext) -> None:
    context.blockquote_depth = max(0, context.blockquote_depth - 1)


def start_table(context: BlockContext) -> None:
    context.table = TableState(in_table=True)


def update_table(table: TableState, name: str, closing: bool) -> None:
    """Track rows and cells of the table being collected.

    Handles ``thead``, ``tr``, ``th`` and ``td``; cell text itself is appended
    by the layout engine while a row is open.
    """
    if not table.in_table:
        return

    if name == "thead":
        table.in_thead = not closing
    elif name == "tr":
        if closing:
            if table.in_row and table.current_row:
                if table.in_thead:
                    table.headers = table.current_row
                else:
                    table.rows.append(table.current_row)
            table.current_row = []
            table.in_row = False
        else:
            table.in_row = True
            table.current_row = []
    elif name in ("th", "td"):
        if closing:
            if table.in_row:
                table.current_row.append(" ".join(table.current_cell.split()))
            table.current_cell = ""
        else:
            table.current_cell = ""
