"""Display-width and whitespace helpers."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RUN = re.compile(r"\s+")
_ZERO_WIDTH_CATEGORIES = frozenset({"Mn", "Me", "Cf", "Cc"})


def char_width(char: str) -> int:
    """Return the number of terminal columns a single character occupies.

    Combining marks, format and control characters take no column; East Asian
    wide and fullwidth characters take two; everything else takes one.

    Examples:
        char_width("a")  # 1
        char_width("漢")  # 2
        char_width("\\u0301")  # 0
    """
    if unicodedata.category(char) in _ZERO_WIDTH_CATEGORIES:
        return 0
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the display width (visual columns) of `text`.

    Examples:
        display_width("abc")  # 3
        display_width("日本")  # 4
    """
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(char_width(char) for char in text)


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace into a single space."""
    return _WHITESPACE_RUN.sub(" ", text)


def center_padding(text: str, width: int) -> int:
    """Return the left padding that centers `text` within `width` columns."""
    text_width = display_width(text.strip())
    if text_width >= width:
        return 0
    return (width - text_width) // 2
