from __future__ import annotations

from ink_layout.highlights import clamp_records, clamp_spans, emit_word_spans, merge_highlights
from ink_layout.models import HighlightSpan, ImageRecord, LinkRecord, StyleFrame, StyleKind


def test_overlapping_spans_merge():
    spans = [HighlightSpan(3, 0, 5, "InkBold"), HighlightSpan(3, 3, 8, "InkBold")]
    assert merge_highlights(spans) == [HighlightSpan(3, 0, 8, "InkBold")]


def test_spans_one_column_apart_merge():
    spans = [HighlightSpan(0, 4, 7, "InkBold"), HighlightSpan(0, 0, 3, "InkBold")]
    assert merge_highlights(spans) == [HighlightSpan(0, 0, 7, "InkBold")]


def test_spans_further_apart_stay_separate():
    spans = [HighlightSpan(0, 0, 3, "InkBold"), HighlightSpan(0, 5, 7, "InkBold")]
    assert merge_highlights(spans) == spans


def test_contained_span_is_absorbed():
    spans = [HighlightSpan(1, 0, 10, "InkCode"), HighlightSpan(1, 2, 4, "InkCode")]
    assert merge_highlights(spans) == [HighlightSpan(1, 0, 10, "InkCode")]


def test_groups_and_lines_are_merged_independently():
    spans = [
        HighlightSpan(0, 0, 3, "InkBold"),
        HighlightSpan(0, 2, 4, "InkItalic"),
        HighlightSpan(0, 3, 6, "InkBold"),
        HighlightSpan(1, 0, 2, "InkBold"),
    ]

    assert merge_highlights(spans) == [
        HighlightSpan(0, 0, 6, "InkBold"),
        HighlightSpan(0, 2, 4, "InkItalic"),
        HighlightSpan(1, 0, 2, "InkBold"),
    ]


def test_merge_is_idempotent():
    spans = [
        HighlightSpan(2, 5, 9, "InkItalic"),
        HighlightSpan(2, 0, 4, "InkItalic"),
        HighlightSpan(0, 1, 2, "Comment"),
    ]
    merged = merge_highlights(spans)
    assert merge_highlights(merged) == merged


def test_merge_of_nothing():
    assert merge_highlights([]) == []


def test_emit_word_spans_for_each_frame_kind():
    frames = [
        StyleFrame("b", StyleKind.BOLD, 1),
        StyleFrame("a", StyleKind.LINK, 2, href="ch2.xhtml#n1"),
        StyleFrame("a", StyleKind.LINK, 3),
        StyleFrame("span", StyleKind.CSS_CLASS, 4, css_group="Special"),
    ]

    spans, links = emit_word_spans(frames, 5, 2, 7)

    assert spans == [
        HighlightSpan(5, 2, 7, "InkBold"),
        HighlightSpan(5, 2, 7, "InkUnderlined"),
        HighlightSpan(5, 2, 7, "Special"),
    ]
    assert links == [LinkRecord(5, 2, 7, "ch2.xhtml#n1")]


def test_emit_word_spans_without_frames():
    assert emit_word_spans([], 0, 0, 3) == ([], [])


def test_clamp_records_bounds_columns_and_drops_missing_lines():
    records = [
        HighlightSpan(0, 2, 99, "InkBold"),
        HighlightSpan(0, -3, 1, "InkBold"),
        HighlightSpan(4, 0, 1, "InkBold"),
        HighlightSpan(-1, 0, 1, "InkBold"),
    ]

    assert clamp_records(records, ["abcd"]) == [
        HighlightSpan(0, 2, 4, "InkBold"),
        HighlightSpan(0, 0, 1, "InkBold"),
    ]


def test_clamp_records_handles_links_and_images():
    lines = ["ab"]
    assert clamp_records([LinkRecord(0, 1, 5, "x")], lines) == [LinkRecord(0, 1, 2, "x")]
    assert clamp_records([ImageRecord(0, 5, 9, "a.png")], lines) == [ImageRecord(0, 2, 2, "a.png")]


def test_clamp_spans_drops_empty_ranges():
    spans = [HighlightSpan(0, 3, 8, "InkBold"), HighlightSpan(0, 9, 12, "InkBold")]
    assert clamp_spans(spans, ["abcde"]) == [HighlightSpan(0, 3, 5, "InkBold")]
