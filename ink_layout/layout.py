"""Word-wrap layout engine.

`LayoutEngine` consumes the token stream of one chapter and produces wrapped
lines together with their highlight spans and reference records. It owns all
of its state; nothing is shared between engines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from .config import LayoutConfig
from .constants import (
    BLOCK_TAGS,
    GROUP_CODE,
    GROUP_IMAGE,
    GROUP_LIST_ITEM,
    GROUP_RULE,
    GROUP_TITLE,
    HEADING_TAGS,
    IMAGE_LABEL,
    RAW_TEXT_TAGS,
    RULE_CHAR,
    RULE_MAX_WIDTH,
    TABLE_TAGS,
)
from .highlights import emit_word_spans, merge_highlights
from .models import (
    BlockContext,
    Heading,
    HighlightSpan,
    ImageRecord,
    LayoutResult,
    SelfClosing,
    TableState,
    TagClose,
    TagOpen,
    Text,
    Token,
)
from .table import render_table
from .text import display_width
from .tracker import (
    StyleStack,
    enter_blockquote,
    enter_list,
    indent_for,
    leave_blockquote,
    leave_list,
    next_list_prefix,
    start_table,
    update_table,
)

logger = logging.getLogger(__name__)

ASCII_WHITESPACE = " \t\n\r\f\v"
_WHITESPACE_SPLIT = re.compile(r"[ \t\n\r\f\v]+")


class LayoutEngine:
    """Lay out a token stream into fixed-width lines.

    Args:
        config: Validated layout configuration; read but never modified.

    Examples:
        engine = LayoutEngine(LayoutConfig(max_width=40))
        for token in tokenize("<p>Hello</p>"):
            engine.feed(token)
        result = engine.finish()
    """

    def __init__(self, config: LayoutConfig):
        self.config = config
        self.typography = config.typography
        self.result = LayoutResult()
        self.context = BlockContext()
        self.styles = StyleStack()
        self.current_line = ""
        self._spans: list[HighlightSpan] = []
        self._continuation = ""
        self._has_words = False
        self._glue = False
        self._word_start = 0
        self._word_marks = (0, 0)
        self._word_movable = False
        self._pending_prefix = ""
        self._code_depth = 0
        self._pre_line_open = False
        self._pre_fresh = False
        self._heading_line = 0
        self._nested_tables = 0

    @property
    def lines(self) -> list[str]:
        return self.result.lines

    @property
    def line_index(self) -> int:
        """Index the current, uncommitted line will get."""
        return len(self.result.lines)

    # Token dispatch

    def feed(self, token: Token) -> None:
        if isinstance(token, Text):
            self.handle_text(token.text)
        elif isinstance(token, TagOpen):
            self.handle_open(token)
        elif isinstance(token, TagClose):
            self.handle_close(token)
        elif isinstance(token, SelfClosing):
            self.handle_self_closing(token)

    def finish(self) -> LayoutResult:
        """Flush pending state and return the merged layout."""
        if self.context.in_pre and self._pre_line_open:
            self._commit_pre_line()
        if self.context.table.in_table:
            self._flush_table()
        if self.current_line:
            self._commit_line()

        while self.lines and self.lines[-1] == "":
            self.lines.pop()

        last_line = max(len(self.lines) - 1, 0)
        for anchor_id, line in self.result.anchors.items():
            if line > last_line:
                self.result.anchors[anchor_id] = last_line

        open_blocks = not self.context.is_empty()
        if open_blocks or self.styles.open_elements:
            logger.debug(
                "Chapter ended with %d unclosed elements (open blocks: %s)",
                self.styles.open_elements,
                open_blocks,
            )

        self.result.highlights = merge_highlights(self._spans)
        return self.result

    # Text

    def handle_text(self, text: str) -> None:
        context = self.context
        if context.raw_depth or (context.in_head and not context.in_title):
            return

        if context.in_heading:
            context.heading_text += text

        table = context.table
        if table.in_table:
            if table.in_row:
                table.current_cell += text
            return

        if context.in_pre:
            self.add_pre_text(text)
        else:
            self.add_text(text)

    def add_text(self, text: str) -> None:
        """Wrap the words of `text` onto the current line.

        Whitespace is collapsed. A word directly following the previous one
        with no whitespace in between (``un<i>believ</i>able``) is glued to it.
        """
        if not text:
            return

        words = [word for word in _WHITESPACE_SPLIT.split(text) if word]
        if not words:
            self._glue = False
            return

        glue_first = self._glue and text[0] not in ASCII_WHITESPACE
        for index, word in enumerate(words):
            self.add_word(word, glue=index == 0 and glue_first)
        self._glue = text[-1] not in ASCII_WHITESPACE

    def add_word(self, word: str, glue: bool = False) -> None:
        """Append one word, wrapping first when it would overflow the line.

        A wrapped line continues with the block's continuation indent. A word
        wider than the whole line is still placed, alone, on its own line. A
        glued fragment that overflows moves the whole compound word to the
        next line, so lines never break inside a word.
        """
        word = self._pending_prefix + word
        self._pending_prefix = ""
        glue = glue and self._has_words

        if not self._has_words and not self.current_line:
            self.current_line = indent_for(self.context, self.typography)
            self._continuation = self.current_line

        if not glue:
            space = "" if not self.current_line or self.current_line.endswith(" ") else " "
            required = display_width(self.current_line) + len(space) + display_width(word)
            if required > self.config.max_width and self._has_words:
                self._commit_line()
                self.current_line = self._continuation
                space = ""
            self.current_line += space
            self._start_word()

        start_col = len(self.current_line)
        self.current_line += word
        self._has_words = True

        spans, links = emit_word_spans(
            self.styles.active(), self.line_index, start_col, len(self.current_line)
        )
        self._spans.extend(spans)
        self.result.links.extend(links)

        if glue:
            self._fit_current_word()

    def _start_word(self) -> None:
        self._word_start = len(self.current_line)
        self._word_marks = (len(self._spans), len(self.result.links))
        self._word_movable = self._has_words

    def _fit_current_word(self) -> None:
        """Move the word being built to a continuation line if it overflows."""
        if display_width(self.current_line) <= self.config.max_width or not self._word_movable:
            return

        start = self._word_start
        word = self.current_line[start:]
        spans_mark, links_mark = self._word_marks
        moved_spans = self._spans[spans_mark:]
        moved_links = self.result.links[links_mark:]
        del self._spans[spans_mark:]
        del self.result.links[links_mark:]

        self.current_line = self.current_line[:start].rstrip(" ")
        self._commit_line()
        self.current_line = self._continuation
        self._start_word()
        self.current_line += word
        self._has_words = True

        line = self.line_index
        shift = self._word_start - start
        self._spans.extend(
            replace(span, line=line, start_col=span.start_col + shift, end_col=span.end_col + shift)
            for span in moved_spans
        )
        self.result.links.extend(
            replace(link, line=line, start_col=link.start_col + shift, end_col=link.end_col + shift)
            for link in moved_links
        )

    def add_pre_text(self, text: str) -> None:
        """Lay out preformatted text: one output line per source line."""
        if self._pre_fresh and text:
            if text.startswith("\r\n"):
                text = text[2:]
            elif text.startswith("\n"):
                text = text[1:]
            self._pre_fresh = False

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        for index, segment in enumerate(text.split("\n")):
            if index > 0:
                self._commit_pre_line()
            if segment:
                if not self._pre_line_open:
                    self.current_line = indent_for(self.context, self.typography)
                    self._pre_line_open = True
                self.current_line += segment

    # Line management

    def _commit_line(self) -> None:
        context = self.context
        index = self.line_index
        self.lines.append(self.current_line)

        if (
            context.in_heading
            or context.in_pre
            or context.list_stack
            or context.in_dd
            or context.blockquote_depth > 0
            or context.in_title
        ):
            self.result.no_justify.add(index)

        if context.in_title:
            self._spans.append(HighlightSpan(index, 0, len(self.current_line), GROUP_TITLE))
            self.result.centered.add(index)

        self.current_line = ""
        self._has_words = False

    def _commit_pre_line(self) -> None:
        if not self._pre_line_open:
            self.current_line = indent_for(self.context, self.typography)
        if self.current_line:
            self._spans.append(
                HighlightSpan(self.line_index, 0, len(self.current_line), GROUP_CODE)
            )
        self._commit_line()
        self._pre_line_open = False

    def _commit_block_line(self, text: str, group: str) -> int:
        """Commit a standalone, never-justified line highlighted as a whole."""
        self.current_line = text
        index = self.line_index
        indent_length = len(text) - len(text.lstrip(" │"))
        self._spans.append(HighlightSpan(index, indent_length, len(text), group))
        self._commit_line()
        self.result.no_justify.add(index)
        return index

    def new_line(self) -> None:
        """Commit the current line, or add one blank separator line.

        A blank line is only added when the previous line is not already
        blank, and never at the very top of the output.
        """
        if self.current_line:
            self._commit_line()
        elif self.lines and self.lines[-1] != "":
            self.lines.append("")
        self._continuation = ""
        self._glue = False

    def paragraph_break(self) -> None:
        """End a paragraph with ``paragraph_spacing`` blank lines."""
        self.new_line()
        if not self.lines:
            return
        for _ in range(self.typography.paragraph_spacing - self._trailing_blank_lines()):
            self.lines.append("")

    def _trailing_blank_lines(self) -> int:
        count = 0
        for line in reversed(self.lines):
            if line != "":
                break
            count += 1
        return count

    # Tags

    def _record_anchor(self, token: TagOpen | SelfClosing) -> None:
        anchor_id = token.get("id")
        if anchor_id:
            self.result.anchors.setdefault(anchor_id, self.line_index)

    def handle_open(self, token: TagOpen) -> None:
        name = token.name
        context = self.context

        if context.in_head and name not in ("head", "title"):
            return
        if name in RAW_TEXT_TAGS:
            context.raw_depth += 1
            return
        if name in TABLE_TAGS:
            self._open_table_tag(name)
            self._record_anchor(token)
            return

        if name == "head":
            context.in_head = True
        elif name == "title":
            self.new_line()
            self.new_line()
            context.in_title = True
        elif name in ("ul", "ol"):
            self.new_line()
            enter_list(context, ordered=name == "ol")
        elif name == "li":
            self._start_list_item()
        elif name == "blockquote":
            self.new_line()
            enter_blockquote(context)
        elif name == "pre":
            self.new_line()
            context.in_pre = True
            self._pre_fresh = True
            self._pre_line_open = False
        elif name == "code" and not context.in_pre:
            self._code_depth += 1
            self._pending_prefix = "`"
        elif name == "dd":
            self.new_line()
            context.in_dd = True
        elif name in HEADING_TAGS:
            self.new_line()
            context.heading_level = int(name[1])
            context.heading_text = ""
            self._heading_line = self.line_index
        elif name in BLOCK_TAGS:
            self.new_line()

        self._record_anchor(token)
        serial, frames = self.styles.push_tag(token, self.config.class_styles)

        if not context.in_title and any(frame.css_group == GROUP_TITLE for frame in frames):
            self.new_line()
            self.new_line()
            context.in_title = True
            context.title_serial = serial

    def _start_list_item(self) -> None:
        self.new_line()
        indent = indent_for(self.context, self.typography)
        prefix = next_list_prefix(self.context)
        self.current_line = indent + prefix
        self._continuation = indent + " " * display_width(prefix)
        self._has_words = False
        if prefix:
            self._spans.append(
                HighlightSpan(self.line_index, len(indent), len(self.current_line), GROUP_LIST_ITEM)
            )

    def handle_close(self, token: TagClose) -> None:
        name = token.name
        context = self.context

        if context.in_head and name not in ("head", "title"):
            return
        if name in RAW_TEXT_TAGS:
            context.raw_depth = max(0, context.raw_depth - 1)
            return
        if name in TABLE_TAGS:
            self._close_table_tag(name)
            return

        if name == "head":
            context.in_head = False
        elif name == "title":
            if context.in_title:
                self.new_line()
                context.in_title = False
                context.title_serial = None
                self.new_line()
        elif name in ("ul", "ol"):
            self.new_line()
            leave_list(context)
        elif name == "li":
            self.new_line()
        elif name == "blockquote":
            self.new_line()
            leave_blockquote(context)
        elif name == "pre":
            if context.in_pre:
                if self._pre_line_open:
                    self._commit_pre_line()
                context.in_pre = False
                self.new_line()
        elif name == "code" and not context.in_pre:
            self._close_inline_code()
        elif name == "dd":
            self.new_line()
            context.in_dd = False
        elif name in HEADING_TAGS:
            self._close_heading()
        elif name == "p":
            self.paragraph_break()
        elif name in BLOCK_TAGS:
            self.new_line()

        serial = self.styles.pop_tag(name)
        if serial is not None and serial == context.title_serial:
            self.new_line()
            context.in_title = False
            context.title_serial = None
            self.new_line()

    def _close_inline_code(self) -> None:
        if self._code_depth == 0:
            return
        self._code_depth -= 1
        if self._pending_prefix:
            self._pending_prefix = ""
        elif self._has_words:
            start_col = len(self.current_line)
            self.current_line += "`"
            self._spans.append(HighlightSpan(self.line_index, start_col, start_col + 1, GROUP_CODE))
            self._fit_current_word()

    def _close_heading(self) -> None:
        context = self.context
        self.new_line()
        if context.in_heading:
            text = " ".join(context.heading_text.split())
            if text:
                self.result.headings.append(
                    Heading(context.heading_level, text, self._heading_line)
                )
        context.heading_level = 0
        context.heading_text = ""

    def handle_self_closing(self, token: SelfClosing) -> None:
        name = token.name
        context = self.context
        if context.in_head:
            return

        if name == "br":
            if context.table.in_table and context.table.in_row:
                context.table.current_cell += " "
            elif context.in_pre:
                self.add_pre_text("\n")
            else:
                self.new_line()
        elif name == "img":
            self._add_image(token)
        elif name == "hr":
            self._add_rule()
        elif name in BLOCK_TAGS:
            self.new_line()

        self._record_anchor(token)

    def _add_image(self, token: SelfClosing) -> None:
        src = token.get("src")
        if not src:
            return
        self.new_line()
        indent = indent_for(self.context, self.typography)
        alt = " ".join((token.get("alt") or "").split())
        label = f"[image: {alt}]" if alt else IMAGE_LABEL
        index = self._commit_block_line(indent + label, GROUP_IMAGE)
        self.result.images.append(
            ImageRecord(index, len(indent), len(indent) + len(label), src, alt)
        )
        self.new_line()

    def _add_rule(self) -> None:
        self.new_line()
        indent = indent_for(self.context, self.typography)
        width = min(RULE_MAX_WIDTH, self.config.max_width - display_width(indent))
        if width > 0:
            self._commit_block_line(indent + RULE_CHAR * width, GROUP_RULE)
        self.new_line()

    # Tables

    def _open_table_tag(self, name: str) -> None:
        if name == "table":
            if self.context.table.in_table:
                logger.debug("Nested table flattened into the enclosing table")
                self._nested_tables += 1
                return
            self.new_line()
            start_table(self.context)
        elif self._nested_tables:
            self._separate_nested_cell()
        else:
            update_table(self.context.table, name, closing=False)

    def _close_table_tag(self, name: str) -> None:
        if name == "table":
            if self._nested_tables:
                self._nested_tables -= 1
            elif self.context.table.in_table:
                self._flush_table()
        elif self._nested_tables:
            self._separate_nested_cell()
        else:
            update_table(self.context.table, name, closing=True)

    def _separate_nested_cell(self) -> None:
        table = self.context.table
        if table.in_row:
            table.current_cell += " "

    def _flush_table(self) -> None:
        table = self.context.table
        self._nested_tables = 0
        if table.in_row:
            if table.current_cell.strip():
                update_table(table, "td", closing=True)
            update_table(table, "tr", closing=True)

        self.new_line()
        self.context.table = TableState()
        indent = indent_for(self.context, self.typography)
        for line in render_table(table, self.config.max_width, indent):
            self.result.no_justify.add(self.line_index)
            self.lines.append(line)
        self.new_line()
