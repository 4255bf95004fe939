"""Re-anchoring of persisted annotations against freshly rendered lines.

Annotations are stored as quoted text plus a little context on both sides.
After any reflow the quote is searched again in the new lines; every
occurrence is scored by how much of the stored context still surrounds it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from .models import Annotation, ResolvedAnnotation, TextPosition
from .text import normalize_whitespace

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_CHARS = 30

__all__ = [
    "AnnotationStore",
    "annotation_at",
    "capture_annotation",
    "find_text_position",
    "line_col_to_offset",
    "normalize_whitespace",
    "offset_to_line_col",
    "resolve_annotations",
]


class AnnotationStore(Protocol):
    """Read side of an external annotation store."""

    def get_chapter_annotations(self, book_id: str, chapter_index: int) -> Sequence[Annotation]:
        ...


def line_col_to_offset(lines: Sequence[str], line: int, col: int) -> int:
    """Convert a line/column pair into an offset in ``"\\n".join(lines)``."""
    return sum(len(text) + 1 for text in lines[: max(line, 0)]) + col


def offset_to_line_col(lines: Sequence[str], offset: int) -> tuple[int, int]:
    """Convert an offset in ``"\\n".join(lines)`` into a line/column pair.

    Offsets past the end clamp to the end of the last line.
    """
    if not lines:
        return 0, 0

    line_start = 0
    for index, text in enumerate(lines):
        if offset <= line_start + len(text):
            return index, max(offset - line_start, 0)
        line_start += len(text) + 1
    return len(lines) - 1, len(lines[-1])


def _normalize_with_offsets(text: str) -> tuple[str, list[int]]:
    """Collapse whitespace runs and remember where each character came from."""
    chars: list[str] = []
    offsets: list[int] = []
    previous_space = False
    for index, char in enumerate(text):
        if char.isspace():
            if not previous_space:
                chars.append(" ")
                offsets.append(index)
            previous_space = True
        else:
            chars.append(char)
            offsets.append(index)
            previous_space = False
    return "".join(chars), offsets


def _common_suffix(left: str, right: str) -> int:
    length = 0
    for a, b in zip(reversed(left), reversed(right)):
        if a != b:
            break
        length += 1
    return length


def _common_prefix(left: str, right: str) -> int:
    length = 0
    for a, b in zip(left, right):
        if a != b:
            break
        length += 1
    return length


def _occurrences(haystack: str, needle: str):
    start = haystack.find(needle)
    while start != -1:
        yield start
        start = haystack.find(needle, start + 1)


def find_text_position(
    lines: Sequence[str],
    text: str,
    context_before: str = "",
    context_after: str = "",
    strict: bool = False,
) -> TextPosition | None:
    """Locate quoted text inside rendered lines.

    Lines are joined with newlines and whitespace runs are collapsed on both
    sides of the comparison, so reflowed or justified text still matches.
    Every occurrence of the quote is scored by the length of the stored
    context that still matches around it; the highest score wins and ties go
    to the earliest occurrence.

    Args:
        lines: Rendered lines to search.
        text: Quoted text of the annotation.
        context_before: Text that preceded the quote when it was captured.
        context_after: Text that followed the quote when it was captured.
        strict: Only accept an occurrence whose surroundings match both
            context strings completely.

    Returns:
        TextPosition | None: Range of the quote with an exclusive end column,
            or None when it cannot be found.

    Examples:
        lines = ["the cat ran.", "I saw the cat sat down."]
        find_text_position(lines, "the cat", "saw ", " sat")
        # TextPosition(1, 6, 1, 13)
    """
    quote = normalize_whitespace(text).strip()
    if not quote:
        return None

    haystack, offsets = _normalize_with_offsets("\n".join(lines))
    before = normalize_whitespace(context_before)
    after = normalize_whitespace(context_after)

    best_start = None
    best_score = -1
    for start in _occurrences(haystack, quote):
        end = start + len(quote)
        before_score = _common_suffix(haystack[:start], before)
        after_score = _common_prefix(haystack[end:], after)
        if strict and (before_score < len(before) or after_score < len(after)):
            continue
        score = before_score + after_score
        if score > best_score:
            best_start, best_score = start, score

    if best_start is None:
        return None

    start_offset = offsets[best_start]
    last_offset = offsets[best_start + len(quote) - 1]
    start_line, start_col = offset_to_line_col(lines, start_offset)
    end_line, last_col = offset_to_line_col(lines, last_offset)
    return TextPosition(start_line, start_col, end_line, last_col + 1)


def capture_annotation(
    lines: Sequence[str],
    position: TextPosition,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
    color: str = "yellow",
    note: str | None = None,
) -> Annotation:
    """Build an annotation for a selection in rendered lines.

    Whitespace at either end of the selection is dropped so the stored quote
    starts and ends on visible characters.

    Args:
        lines: Rendered lines the selection was made in.
        position: Selected range, end column exclusive.
        context_chars: Characters of context to keep on each side.
        color: Style or color identifier.
        note: Optional free-text note.

    Returns:
        Annotation: Quote with its surrounding context, ready to be stored.

    Examples:
        capture_annotation(["I saw the cat sat."], TextPosition(0, 6, 0, 13))
        # Annotation("the cat", "I saw ", " sat.", "yellow", None, None)
    """
    full_text = "\n".join(lines)
    start = line_col_to_offset(lines, position.start_line, position.start_col)
    end = line_col_to_offset(lines, position.end_line, position.end_col)
    start = min(max(start, 0), len(full_text))
    end = min(max(end, start), len(full_text))

    while start < end and full_text[start].isspace():
        start += 1
    while end > start and full_text[end - 1].isspace():
        end -= 1

    return Annotation(
        text=full_text[start:end],
        context_before=full_text[max(start - context_chars, 0) : start],
        context_after=full_text[end : end + context_chars],
        color=color,
        note=note,
    )


def resolve_annotations(
    store: AnnotationStore,
    book_id: str,
    chapter_index: int,
    lines: Sequence[str],
    strict: bool = False,
) -> list[ResolvedAnnotation]:
    """Resolve every stored annotation of a chapter against rendered lines.

    Misses are returned with no position rather than raised; the stored
    annotation is untouched and may resolve again after another reflow.
    """
    resolved = []
    for annotation in store.get_chapter_annotations(book_id, chapter_index):
        position = find_text_position(
            lines,
            annotation.text,
            annotation.context_before,
            annotation.context_after,
            strict=strict,
        )
        if position is None:
            logger.debug(
                "Annotation %r in %s chapter %d is orphaned", annotation.id, book_id, chapter_index
            )
        resolved.append(ResolvedAnnotation(annotation, position))
    return resolved


def annotation_at(
    resolved: Sequence[ResolvedAnnotation], line: int, col: int
) -> Annotation | None:
    """Return the first resolved annotation covering ``(line, col)``."""
    for entry in resolved:
        if entry.position is not None and entry.position.contains(line, col):
            return entry.annotation
    return None
