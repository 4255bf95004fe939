from __future__ import annotations

from ink_layout.config import Typography
from ink_layout.models import BlockContext, ListFrame, StyleFrame, StyleKind, TableState, TagOpen
from ink_layout.tracker import (
    StyleStack,
    enter_blockquote,
    enter_list,
    frames_for_tag,
    indent_for,
    leave_blockquote,
    leave_list,
    next_list_prefix,
    start_table,
    update_table,
)


def test_frames_for_styled_tag():
    assert frames_for_tag(TagOpen("strong"), 1, {}) == [StyleFrame("strong", StyleKind.BOLD, 1)]
    assert frames_for_tag(TagOpen("h3"), 2, {}) == [StyleFrame("h3", StyleKind.H3, 2)]


def test_unrecognized_tag_has_no_frames():
    assert frames_for_tag(TagOpen("span"), 1, {}) == []
    assert frames_for_tag(TagOpen("section"), 1, {}) == []


def test_link_frame_carries_href():
    (frame,) = frames_for_tag(TagOpen("a", (("href", "#n1"),)), 4, {})
    assert frame == StyleFrame("a", StyleKind.LINK, 4, href="#n1")

    (anchor,) = frames_for_tag(TagOpen("a", (("id", "n1"),)), 5, {})
    assert anchor.href is None


def test_class_frames_follow_the_tag_style():
    token = TagOpen("em", (("class", "smallcaps unknown loud"),))
    frames = frames_for_tag(token, 7, {"smallcaps": "InkBold", "loud": "InkH1"})

    assert frames == [
        StyleFrame("em", StyleKind.ITALIC, 7),
        StyleFrame("em", StyleKind.CSS_CLASS, 7, css_group="InkBold"),
        StyleFrame("em", StyleKind.CSS_CLASS, 7, css_group="InkH1"),
    ]


def test_style_stack_pops_most_recent_matching_element():
    stack = StyleStack()
    stack.push_tag(TagOpen("b"), {})
    stack.push_tag(TagOpen("i"), {})
    stack.push_tag(TagOpen("b"), {})

    serial = stack.pop_tag("b")

    assert serial == 3
    assert [frame.kind for frame in stack.active()] == [StyleKind.BOLD, StyleKind.ITALIC]


def test_style_stack_removes_all_frames_of_an_element():
    stack = StyleStack()
    stack.push_tag(TagOpen("span", (("class", "a b"),)), {"a": "InkBold", "b": "InkItalic"})
    assert len(stack) == 2

    stack.pop_tag("span")

    assert len(stack) == 0
    assert stack.open_elements == 0


def test_style_stack_tolerates_unmatched_and_misnested_closes():
    stack = StyleStack()
    assert stack.pop_tag("b") is None

    stack.push_tag(TagOpen("b"), {})
    stack.push_tag(TagOpen("i"), {})
    stack.pop_tag("b")
    assert [frame.tag for frame in stack.active()] == ["i"]

    stack.pop_tag("i")
    assert stack.pop_tag("i") is None
    assert stack.active() == ()


def test_unstyled_elements_still_pair_with_their_close():
    stack = StyleStack()
    stack.push_tag(TagOpen("b"), {})
    stack.push_tag(TagOpen("span"), {})

    stack.pop_tag("span")

    assert stack.open_elements == 1
    assert [frame.tag for frame in stack.active()] == ["b"]


def test_indent_for_blockquotes_lists_and_definitions():
    typography = Typography()

    assert indent_for(BlockContext(), typography) == ""
    assert indent_for(BlockContext(blockquote_depth=1), typography) == "│   "
    assert indent_for(BlockContext(blockquote_depth=2), typography) == "│ │   "
    assert indent_for(BlockContext(blockquote_depth=2), Typography(indent_size=2)) == "│ │ "
    assert indent_for(BlockContext(list_stack=[ListFrame(False), ListFrame(True)]), typography) == (
        "    "
    )
    assert indent_for(BlockContext(in_dd=True), typography) == "    "


def test_list_prefixes():
    context = BlockContext()
    assert next_list_prefix(context) == ""

    enter_list(context, ordered=True)
    assert next_list_prefix(context) == "1. "
    assert next_list_prefix(context) == "2. "

    enter_list(context, ordered=False)
    assert next_list_prefix(context) == "• "

    leave_list(context)
    assert next_list_prefix(context) == "3. "

    leave_list(context)
    leave_list(context)
    assert context.list_stack == []


def test_blockquote_depth_never_underflows():
    context = BlockContext()
    enter_blockquote(context)
    leave_blockquote(context)
    leave_blockquote(context)

    assert context.blockquote_depth == 0
    assert context.is_empty()


def test_update_table_collects_headers_and_rows():
    context = BlockContext()
    start_table(context)
    table = context.table

    update_table(table, "thead", closing=False)
    update_table(table, "tr", closing=False)
    update_table(table, "th", closing=False)
    table.current_cell += "  Name \n"
    update_table(table, "th", closing=True)
    update_table(table, "tr", closing=True)
    update_table(table, "thead", closing=True)

    update_table(table, "tr", closing=False)
    update_table(table, "td", closing=False)
    table.current_cell += "Ada   Lovelace"
    update_table(table, "td", closing=True)
    update_table(table, "tr", closing=True)

    assert table.headers == ["Name"]
    assert table.rows == [["Ada Lovelace"]]
    assert not table.in_row


def test_update_table_ignores_tags_outside_a_table():
    table = TableState()
    update_table(table, "tr", closing=False)
    assert not table.in_row
