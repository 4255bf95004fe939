"""Line justification and column mapping.

Justifying a line moves its words, so every column recorded before
justification (highlights, links, stored cursor offsets) has to be mapped
into the new line. The mapping is kept per justified line as a sequence of
`WordInfo` entries and can be applied in both directions.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, replace

from .highlights import clamp_column
from .models import LayoutResult, WordInfo
from .text import display_width

_WORD_PATTERN = re.compile(r"[^ ]+")


def forward_map_column(word_info: Sequence[WordInfo] | None, col: int) -> int:
    """Map a pre-justification column to its post-justification column.

    A column inside a word keeps its offset within the word; the column just
    past a word maps just past the word's new position. Columns before the
    first word pass through unchanged, columns in a gap snap to the start of
    the next word, and columns past the last word map to its new end.

    Args:
        word_info: Word ranges of the justified line; None means the line was
            not justified.
        col: Column in the original line.

    Returns:
        int: Column in the justified line.

    Examples:
        words = [WordInfo("ab", 0, 2, 0, 2), WordInfo("cd", 3, 5, 5, 7)]
        forward_map_column(words, 3)  # 5
        forward_map_column(words, 2)  # 2
    """
    if not word_info:
        return col

    for info in word_info:
        if info.orig_start <= col < info.orig_end:
            return info.new_start + (col - info.orig_start)
        if col == info.orig_end:
            return info.new_end

    for index, info in enumerate(word_info):
        if col < info.orig_start:
            return col if index == 0 else info.new_start

    return word_info[-1].new_end


def reverse_map_column(word_info: Sequence[WordInfo] | None, col: int) -> int:
    """Map a post-justification column back to the original line.

    The inverse of `forward_map_column`: columns inside a word keep their
    offset, a word's new end maps to its original end, and columns inside a
    widened gap fall back to the end of the previous word.

    Examples:
        words = [WordInfo("ab", 0, 2, 0, 2), WordInfo("cd", 3, 5, 5, 7)]
        reverse_map_column(words, 4)  # 2
        reverse_map_column(words, 6)  # 4
    """
    if not word_info:
        return col

    for info in word_info:
        if info.new_start <= col < info.new_end:
            return info.orig_start + (col - info.new_start)
        if col == info.new_end:
            return info.orig_end

    for index, info in enumerate(word_info):
        if col < info.new_start:
            return col if index == 0 else word_info[index - 1].orig_end

    return word_info[-1].orig_end


@dataclass(frozen=True)
class ColumnMap:
    """Bidirectional column mapping for one justified line.

    Unlike the module-level functions, both directions clamp their input and
    output into the bounds of the respective line, so any integer is accepted.

    Attributes:
        words: Word ranges in line order.
        orig_length: Length of the line before justification.
        new_length: Length of the line after justification.
    """

    words: tuple[WordInfo, ...]
    orig_length: int
    new_length: int

    def forward(self, col: int) -> int:
        mapped = forward_map_column(self.words, clamp_column(col, self.orig_length))
        return clamp_column(mapped, self.new_length)

    def reverse(self, col: int) -> int:
        mapped = reverse_map_column(self.words, clamp_column(col, self.new_length))
        return clamp_column(mapped, self.orig_length)


def justify_line(line: str, max_width: int) -> tuple[str, ColumnMap] | None:
    """Spread the words of `line` so it is exactly `max_width` columns wide.

    Leading indentation is kept. Extra spaces are shared evenly between the
    gaps, with the remainder going to the leftmost gaps.

    Args:
        line: Line to justify.
        max_width: Target display width.

    Returns:
        tuple[str, ColumnMap] | None: The justified line and its column map,
            or None when the line has fewer than two words or is not narrower
            than `max_width`.

    Examples:
        justify_line("aa bb cc", 10)  # ("aa  bb  cc", ColumnMap(...))
    """
    matches = list(_WORD_PATTERN.finditer(line))
    if len(matches) < 2:
        return None

    spaces_needed = max_width - display_width(line)
    if spaces_needed <= 0:
        return None

    gaps = len(matches) - 1
    extra, remainder = divmod(spaces_needed, gaps)

    parts = [line[: matches[0].start()]]
    position = len(parts[0])
    words = []
    for index, match in enumerate(matches):
        if index > 0:
            gap = match.start() - matches[index - 1].end() + extra
            if index <= remainder:
                gap += 1
            parts.append(" " * gap)
            position += gap
        word = match.group(0)
        words.append(WordInfo(word, match.start(), match.end(), position, position + len(word)))
        parts.append(word)
        position += len(word)

    justified = "".join(parts)
    return justified, ColumnMap(tuple(words), len(line), len(justified))


def is_justifiable(line: str, max_width: int, threshold: float) -> bool:
    """Return True when `line` is long enough to be justified.

    Lines narrower than ``floor(max_width * threshold)`` (such as the last line
    of a paragraph) stay ragged.
    """
    if not line.strip():
        return False
    width = display_width(line)
    return math.floor(max_width * threshold) <= width < max_width


def apply_justification(
    result: LayoutResult, max_width: int, threshold: float = 0.9
) -> dict[int, ColumnMap]:
    """Justify eligible lines of `result` in place and remap their columns.

    Lines flagged ``no_justify`` are never touched. Highlights, links and
    images on justified lines are moved with `ColumnMap.forward`.

    Args:
        result: Layout produced by a render pass.
        max_width: Target display width.
        threshold: Minimum fill ratio for a line to be justified.

    Returns:
        dict[int, ColumnMap]: Column maps keyed by line index, also stored on
            ``result.justify_map``.
    """
    justify_map: dict[int, ColumnMap] = {}

    for index, line in enumerate(result.lines):
        if index in result.no_justify or not is_justifiable(line, max_width, threshold):
            continue
        justified = justify_line(line, max_width)
        if justified is None:
            continue
        result.lines[index], justify_map[index] = justified

    if justify_map:
        result.highlights = [_remap(span, justify_map) for span in result.highlights]
        result.links = [_remap(link, justify_map) for link in result.links]
        result.images = [_remap(image, justify_map) for image in result.images]

    result.justify_map = justify_map
    return justify_map


def _remap(record, justify_map: dict[int, ColumnMap]):
    column_map = justify_map.get(record.line)
    if column_map is None:
        return record
    return replace(
        record,
        start_col=column_map.forward(record.start_col),
        end_col=column_map.forward(record.end_col),
    )
