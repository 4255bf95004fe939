"""Constants used across the ink-layout package."""

from __future__ import annotations

from .config import LayoutConfig

DEFAULT_CONFIG = LayoutConfig()
DEFAULT_MAX_WIDTH = DEFAULT_CONFIG.max_width
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size

MARKUP_EXTENSIONS = (".html", ".htm", ".xhtml", ".xml")

# Highlight groups emitted outside of the inline style table
GROUP_TITLE = "InkTitle"
GROUP_CODE = "InkCode"
GROUP_UNDERLINE = "InkUnderlined"
GROUP_LIST_ITEM = "InkListItem"
GROUP_RULE = "InkHorizontalRule"
GROUP_IMAGE = "Special"
GROUP_NOTE_INDICATOR = "InkNoteIndicator"
USER_HIGHLIGHT_PREFIX = "InkUserHighlight_"

# Tags that break the current line when opened or closed
BLOCK_TAGS = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6",
        "p", "div", "blockquote", "section", "article", "aside",
        "header", "footer", "nav", "figure", "figcaption",
        "ul", "ol", "li", "br", "hr", "pre",
        "table", "tr", "td", "th",
        "dl", "dt", "dd",
    }
)  # fmt: skip

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
TABLE_TAGS = frozenset({"table", "thead", "tbody", "tfoot", "tr", "th", "td"})

# Elements that never have content or a closing tag
VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "hr", "img", "input", "link", "meta", "source", "wbr"}
)

# Elements whose content is raw text and never laid out
RAW_TEXT_TAGS = frozenset({"script", "style"})

BULLET = "• "
BLOCKQUOTE_BAR = "│ "
RULE_CHAR = "─"
RULE_MAX_WIDTH = 60
IMAGE_LABEL = "[image]"
NOTE_INDICATOR = "●"

# Table geometry
TABLE_MIN_COLUMN_WIDTH = 10
BOX_TOP = ("┌", "┬", "┐")
BOX_MIDDLE = ("├", "┼", "┤")
BOX_BOTTOM = ("└", "┴", "┘")
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"
