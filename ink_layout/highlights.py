"""Highlight span emission, merging and clamping."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import TypeVar

from .constants import GROUP_UNDERLINE
from .models import HighlightSpan, ImageRecord, LinkRecord, StyleFrame, StyleKind

_Positioned = TypeVar("_Positioned", HighlightSpan, LinkRecord, ImageRecord)


def emit_word_spans(
    frames: Iterable[StyleFrame], line: int, start_col: int, end_col: int
) -> tuple[list[HighlightSpan], list[LinkRecord]]:
    """Emit the spans and link records one laid-out word receives.

    Every active frame contributes: class frames their mapped group, link
    frames with a target an underline span plus a link record, and other
    frames their style's group. Links without a target (plain anchors) emit
    nothing.

    Args:
        frames: Active style frames, bottom of the stack first.
        line: Index of the line the word was placed on.
        start_col: Column where the word starts.
        end_col: Column just past the word.

    Returns:
        tuple[list[HighlightSpan], list[LinkRecord]]: Spans and link records.

    Examples:
        emit_word_spans([StyleFrame("b", StyleKind.BOLD, 1)], 0, 4, 9)
        # ([HighlightSpan(0, 4, 9, "InkBold")], [])
    """
    spans: list[HighlightSpan] = []
    links: list[LinkRecord] = []

    for frame in frames:
        if frame.kind is StyleKind.CSS_CLASS:
            if frame.css_group:
                spans.append(HighlightSpan(line, start_col, end_col, frame.css_group))
        elif frame.kind is StyleKind.LINK:
            if frame.href:
                spans.append(HighlightSpan(line, start_col, end_col, GROUP_UNDERLINE))
                links.append(LinkRecord(line, start_col, end_col, frame.href))
        elif frame.kind.group:
            spans.append(HighlightSpan(line, start_col, end_col, frame.kind.group))

    return spans, links


def merge_highlights(spans: Iterable[HighlightSpan]) -> list[HighlightSpan]:
    """Coalesce adjacent and overlapping spans of the same line and group.

    Spans are grouped by line and group and merged with a single sorted scan:
    a span joins the running span when it starts at most one column past its
    end, which also bridges the single space between highlighted words. The
    result is sorted by ``(line, start_col, end_col, group)``, has no two
    overlapping spans of the same group, and merging it again is a no-op.

    Args:
        spans: Spans in any order.

    Returns:
        list[HighlightSpan]: Minimal sorted span list.

    Examples:
        merge_highlights([HighlightSpan(3, 0, 5, "InkBold"), HighlightSpan(3, 3, 8, "InkBold")])
        # [HighlightSpan(3, 0, 8, "InkBold")]
    """
    ordered = sorted(spans, key=lambda span: (span.line, span.group, span.start_col, span.end_col))
    if not ordered:
        return []

    merged: list[HighlightSpan] = []
    current = ordered[0]

    for span in ordered[1:]:
        if (
            span.line == current.line
            and span.group == current.group
            and span.start_col <= current.end_col + 1
        ):
            if span.end_col > current.end_col:
                current = replace(current, end_col=span.end_col)
        else:
            merged.append(current)
            current = span

    merged.append(current)
    merged.sort()
    return merged


def clamp_column(col: int, line_length: int) -> int:
    return min(max(col, 0), line_length)


def clamp_records(records: Iterable[_Positioned], lines: Sequence[str]) -> list[_Positioned]:
    """Clamp record columns into their line and drop records on missing lines.

    Works for highlight spans, link records and image records alike.

    Examples:
        clamp_records([HighlightSpan(0, 2, 99, "InkBold")], ["abcd"])
        # [HighlightSpan(0, 2, 4, "InkBold")]
    """
    clamped = []
    for record in records:
        if not 0 <= record.line < len(lines):
            continue
        length = len(lines[record.line])
        start = clamp_column(record.start_col, length)
        end = clamp_column(record.end_col, length)
        clamped.append(replace(record, start_col=start, end_col=max(start, end)))
    return clamped


def clamp_spans(spans: Iterable[HighlightSpan], lines: Sequence[str]) -> list[HighlightSpan]:
    """Clamp highlight spans into `lines`, dropping empty spans."""
    return [span for span in clamp_records(spans, lines) if span.end_col > span.start_col]
