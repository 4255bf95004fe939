"""Data models for ink-layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .justify import ColumnMap


class _TagAttributes:
    attributes: tuple[tuple[str, str], ...]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value of attribute `key`, or `default`."""
        for name, value in self.attributes:
            if name == key:
                return value
        return default


@dataclass(frozen=True)
class TagOpen(_TagAttributes):
    """Opening tag such as ``<p class="x">``."""

    name: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class TagClose:
    """Closing tag such as ``</p>``."""

    name: str


@dataclass(frozen=True)
class SelfClosing(_TagAttributes):
    """Void or self-closed element such as ``<br/>`` or ``<img src="a.png">``."""

    name: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Text:
    """Entity-decoded character data between tags."""

    text: str


Token = TagOpen | TagClose | SelfClosing | Text


class StyleKind(Enum):
    """Closed set of inline styles recognized by the tracker.

    Values double as the default highlight group names. `LINK` and
    `CSS_CLASS` have no fixed group: links emit an underline plus a link
    record and class frames carry their own group.
    """

    H1 = "InkH1"
    H2 = "InkH2"
    H3 = "InkH3"
    H4 = "InkH4"
    H5 = "InkH5"
    H6 = "InkH6"
    BOLD = "InkBold"
    ITALIC = "InkItalic"
    UNDERLINE = "InkUnderlined"
    STRIKETHROUGH = "InkStrikethrough"
    CODE = "InkCode"
    MARK = "InkHighlight"
    QUOTE = "Comment"
    LINK = "link"
    CSS_CLASS = "css_class"

    @property
    def group(self) -> str | None:
        if self in (StyleKind.LINK, StyleKind.CSS_CLASS):
            return None
        return self.value


@dataclass(frozen=True)
class StyleFrame:
    """One active inline style on the style stack.

    Attributes:
        tag: Tag name that opened the frame.
        kind: Style the frame applies.
        serial: Identifier of the opening tag; frames sharing it are popped
            together.
        href: Link target for `StyleKind.LINK` frames.
        css_group: Highlight group for `StyleKind.CSS_CLASS` frames.
    """

    tag: str
    kind: StyleKind
    serial: int
    href: str | None = None
    css_group: str | None = None


@dataclass
class ListFrame:
    ordered: bool
    counter: int = 0


@dataclass
class TableState:
    """Rows and cells collected while inside a ``<table>``."""

    in_table: bool = False
    in_thead: bool = False
    in_row: bool = False
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    current_row: list[str] = field(default_factory=list)
    current_cell: str = ""


@dataclass
class BlockContext:
    """Structural nesting state, kept apart from inline styles.

    Attributes:
        list_stack: One frame per open list, innermost last.
        blockquote_depth: Number of open blockquotes.
        table: Table being collected, if any.
        heading_level: Level of the open heading, or 0.
        heading_text: Text accumulated inside the open heading.
        in_pre: Inside a preformatted block.
        in_title: Inside a title block (centered, highlighted).
        title_serial: Serial of the element that opened a class-based title.
        in_dd: Inside a definition description.
        in_head: Inside the document ``<head>``.
        raw_depth: Open ``script``/``style`` elements whose text is dropped.
    """

    list_stack: list[ListFrame] = field(default_factory=list)
    blockquote_depth: int = 0
    table: TableState = field(default_factory=TableState)
    heading_level: int = 0
    heading_text: str = ""
    in_pre: bool = False
    in_title: bool = False
    title_serial: int | None = None
    in_dd: bool = False
    in_head: bool = False
    raw_depth: int = 0

    @property
    def in_heading(self) -> bool:
        return self.heading_level > 0

    def is_empty(self) -> bool:
        """Return True when no block context is open."""
        return (
            not self.list_stack
            and self.blockquote_depth == 0
            and not self.table.in_table
            and not self.in_heading
            and not self.in_pre
            and not self.in_title
            and not self.in_dd
            and not self.in_head
            and self.raw_depth == 0
        )


@dataclass(frozen=True, order=True)
class HighlightSpan:
    """A half-open column range ``[start_col, end_col)`` on one line."""

    line: int
    start_col: int
    end_col: int
    group: str


@dataclass(frozen=True)
class LinkRecord:
    line: int
    start_col: int
    end_col: int
    href: str


@dataclass(frozen=True)
class ImageRecord:
    line: int
    start_col: int
    end_col: int
    src: str
    alt: str = ""


@dataclass(frozen=True)
class Heading:
    """A heading seen during layout, for tables of contents."""

    level: int
    text: str
    line: int


@dataclass(frozen=True)
class WordInfo:
    """Pre- and post-justification column ranges of one word."""

    word: str
    orig_start: int
    orig_end: int
    new_start: int
    new_end: int


@dataclass(frozen=True)
class Line:
    text: str
    no_justify: bool = False
    centered: bool = False


@dataclass
class LayoutResult:
    """Everything produced by one render pass.

    Attributes:
        lines: Rendered lines, zero-based.
        no_justify: Indices of lines exempt from justification.
        centered: Indices of lines to center on display.
        highlights: Merged highlight spans, sorted.
        links: Link records keyed by line.
        images: Image reference records.
        anchors: Anchor id to the line index where it appears.
        justify_map: Column maps of the lines that were justified.
        headings: Headings in document order.
    """

    lines: list[str] = field(default_factory=list)
    no_justify: set[int] = field(default_factory=set)
    centered: set[int] = field(default_factory=set)
    highlights: list[HighlightSpan] = field(default_factory=list)
    links: list[LinkRecord] = field(default_factory=list)
    images: list[ImageRecord] = field(default_factory=list)
    anchors: dict[str, int] = field(default_factory=dict)
    justify_map: dict[int, ColumnMap] = field(default_factory=dict)
    headings: list[Heading] = field(default_factory=list)

    def rendered_lines(self) -> list[Line]:
        """Return the lines paired with their display flags."""
        return [
            Line(text, index in self.no_justify, index in self.centered)
            for index, text in enumerate(self.lines)
        ]


@dataclass(frozen=True)
class Annotation:
    """A user annotation persisted by an external store.

    Attributes:
        text: Exact quoted text.
        context_before: Short text preceding the quote when captured.
        context_after: Short text following the quote when captured.
        color: Style or color identifier.
        note: Optional free-text note.
        id: Opaque identifier assigned by the store.
    """

    text: str
    context_before: str = ""
    context_after: str = ""
    color: str = "yellow"
    note: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class TextPosition:
    """A range in rendered lines; the end column is exclusive."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def contains(self, line: int, col: int) -> bool:
        """Return True when `(line, col)` falls inside the range."""
        if line < self.start_line or line > self.end_line:
            return False
        if line == self.start_line and col < self.start_col:
            return False
        if line == self.end_line and col >= self.end_col:
            return False
        return True


@dataclass(frozen=True)
class ResolvedAnnotation:
    annotation: Annotation
    position: TextPosition | None

    @property
    def orphaned(self) -> bool:
        return self.position is None
