from __future__ import annotations

from ink_layout.models import SelfClosing, TagClose, TagOpen, Text
from ink_layout.tokenizer import parse_attributes, tokenize


def test_tokenizes_tags_and_decodes_text():
    assert list(tokenize("<p>Hi &amp; bye</p>")) == [
        TagOpen("p"),
        Text("Hi & bye"),
        TagClose("p"),
    ]


def test_tag_names_and_attribute_names_are_lowercased():
    tokens = list(tokenize('<P><A HREF="#n1" Class=note>x</A></P>'))

    assert tokens == [
        TagOpen("p"),
        TagOpen("a", (("href", "#n1"), ("class", "note"))),
        Text("x"),
        TagClose("a"),
        TagClose("p"),
    ]
    assert tokens[1].get("href") == "#n1"
    assert tokens[1].get("title") is None


def test_attribute_values_in_all_quote_styles():
    assert parse_attributes("""a="1" b='2' c=3 hidden""") == (
        ("a", "1"),
        ("b", "2"),
        ("c", "3"),
        ("hidden", ""),
    )


def test_attribute_values_are_entity_decoded():
    (token,) = list(tokenize('<a href="?a=1&amp;b=2"/>'))
    assert token == SelfClosing("a", (("href", "?a=1&b=2"),))


def test_void_and_self_closed_elements():
    assert list(tokenize("<br><hr/><img src='a.png'><div/>")) == [
        SelfClosing("br"),
        SelfClosing("hr"),
        SelfClosing("img", (("src", "a.png"),)),
        SelfClosing("div"),
    ]


def test_comments_doctype_and_processing_instructions_are_skipped():
    markup = "<?xml version='1.0'?><!DOCTYPE html><p>a<!-- hidden <b> -->b</p>"
    assert list(tokenize(markup)) == [
        TagOpen("p"),
        Text("a"),
        Text("b"),
        TagClose("p"),
    ]


def test_cdata_content_becomes_raw_text():
    assert list(tokenize("<![CDATA[a < b &amp; c]]>")) == [Text("a < b &amp; c")]


def test_lone_angle_brackets_stay_text():
    assert list(tokenize("1 < 2 and a <3 b")) == [Text("1 < 2 and a <3 b")]


def test_unterminated_tag_degrades_to_text():
    assert list(tokenize("text <b class")) == [Text("text <b class")]


def test_unterminated_comment_degrades_to_text():
    assert list(tokenize("a<!-- b")) == [Text("a<!-- b")]


def test_quoted_angle_bracket_does_not_end_tag():
    assert list(tokenize('<a title="x>y">t</a>')) == [
        TagOpen("a", (("title", "x>y"),)),
        Text("t"),
        TagClose("a"),
    ]


def test_unclosed_quote_ends_tag_at_next_bracket():
    tokens = list(tokenize('<a title="oops>text'))

    assert isinstance(tokens[0], TagOpen)
    assert tokens[0].name == "a"
    assert tokens[-1] == Text("text")


def test_script_content_is_not_tokenized():
    assert list(tokenize("<script>if (a < b) { x = '</p>' }</script><p>x</p>")) == [
        TagOpen("script"),
        Text("if (a < b) { x = '</p>' }"),
        TagClose("script"),
        TagOpen("p"),
        Text("x"),
        TagClose("p"),
    ]


def test_unclosed_style_swallows_the_rest():
    assert list(tokenize("<style>p { color: red }")) == [
        TagOpen("style"),
        Text("p { color: red }"),
    ]


def test_ascii_only_is_applied_to_text_and_attributes():
    tokens = list(tokenize('<p title="&#233;t&#233;">caf&#233;</p>', ascii_only=True))
    assert tokens == [TagOpen("p", (("title", "t"),)), Text("caf"), TagClose("p")]
