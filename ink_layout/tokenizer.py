"""Markup tokenizer.

Scans HTML-like chapter markup into a flat stream of tokens. The scanner is
fault tolerant: it never raises, and anything it cannot read as a tag is
passed on as text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from .constants import RAW_TEXT_TAGS, VOID_TAGS
from .entities import decode_entities
from .models import SelfClosing, TagClose, TagOpen, Text, Token

TAG_NAME_PATTERN = re.compile(r"/?\s*([A-Za-z][\w:.-]*)")
ATTRIBUTE_PATTERN = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?"""
)


def _find_tag_end(markup: str, start: int) -> int:
    """Return the index of the ``>`` closing the tag opened at `start`.

    Quotes only count when they open an attribute value (``=`` before them).
    When a quote is never closed the first ``>`` wins. Returns -1 when the
    tag is unterminated.

    Examples:
        _find_tag_end('<a title="x>y">', 0)  # 14
    """
    quote: str | None = None
    i = start + 1
    length = len(markup)
    while i < length:
        char = markup[i]
        if quote is not None:
            if char == quote:
                quote = None
        elif char == ">":
            return i
        elif char in "\"'":
            j = i - 1
            while j > start and markup[j] in " \t\r\n":
                j -= 1
            if markup[j] == "=":
                quote = char
        i += 1

    if quote is not None:
        return markup.find(">", start)
    return -1


def parse_attributes(raw: str, ascii_only: bool = False) -> tuple[tuple[str, str], ...]:
    """Parse the attribute portion of a tag into ``(name, value)`` pairs.

    Names are lowercased and values entity-decoded. Attributes without a
    value map to the empty string.

    Examples:
        parse_attributes('href="#n1" class=note hidden')
        # (("href", "#n1"), ("class", "note"), ("hidden", ""))
    """
    attributes = []
    for match in ATTRIBUTE_PATTERN.finditer(raw):
        name = match.group(1).lower()
        value = next((group for group in match.group(2, 3, 4) if group is not None), "")
        attributes.append((name, decode_entities(value, ascii_only)))
    return tuple(attributes)


def _build_tag(inner: str, ascii_only: bool) -> Token | None:
    name_match = TAG_NAME_PATTERN.match(inner)
    if not name_match:
        return None

    name = name_match.group(1).lower()
    if inner.startswith("/"):
        return TagClose(name)

    rest = inner[name_match.end() :]
    self_closed = rest.rstrip().endswith("/")
    if self_closed:
        rest = rest.rstrip()[:-1]
    attributes = parse_attributes(rest, ascii_only)

    if self_closed or name in VOID_TAGS:
        return SelfClosing(name, attributes)
    return TagOpen(name, attributes)


def _is_tag_start(markup: str, pos: int) -> bool:
    following = markup[pos + 1 : pos + 2]
    if following.isascii() and following.isalpha():
        return True
    if following == "/":
        after_slash = markup[pos + 2 : pos + 3]
        return after_slash.isascii() and after_slash.isalpha()
    return False


def tokenize(markup: str, ascii_only: bool = False) -> Iterator[Token]:
    """Scan markup into tokens in document order.

    Comments, doctype and processing instructions are skipped, CDATA
    sections become text, ``script``/``style`` content is emitted verbatim as
    a single text token, and a ``<`` that does not start a tag is kept as
    text. Unterminated tags degrade to text.

    Args:
        markup: Raw chapter markup.
        ascii_only: Decode numeric references above 127 to the empty string.

    Yields:
        Token: `TagOpen`, `TagClose`, `SelfClosing` or `Text` events.

    Examples:
        list(tokenize("<p>Hi &amp; bye</p>"))
        # [TagOpen("p"), Text("Hi & bye"), TagClose("p")]
    """
    pos = 0
    text_start = 0
    length = len(markup)

    def flush_text(end: int) -> Iterator[Token]:
        if end > text_start:
            yield Text(decode_entities(markup[text_start:end], ascii_only))

    while pos < length:
        lt = markup.find("<", pos)
        if lt == -1:
            break

        if markup.startswith("<!--", lt):
            end = markup.find("-->", lt + 4)
            if end == -1:
                break
            yield from flush_text(lt)
            pos = text_start = end + 3
            continue

        if markup.startswith("<![CDATA[", lt):
            end = markup.find("]]>", lt + 9)
            if end == -1:
                break
            yield from flush_text(lt)
            if end > lt + 9:
                yield Text(markup[lt + 9 : end])
            pos = text_start = end + 3
            continue

        if markup.startswith("<!", lt) or markup.startswith("<?", lt):
            end = markup.find(">", lt)
            if end == -1:
                break
            yield from flush_text(lt)
            pos = text_start = end + 1
            continue

        if not _is_tag_start(markup, lt):
            pos = lt + 1
            continue

        gt = _find_tag_end(markup, lt)
        if gt == -1:
            # Unterminated tag, the rest of the input is text
            break

        token = _build_tag(markup[lt + 1 : gt], ascii_only)
        if token is None:
            pos = lt + 1
            continue

        yield from flush_text(lt)
        yield token
        pos = text_start = gt + 1

        if isinstance(token, TagOpen) and token.name in RAW_TEXT_TAGS:
            close = re.compile(rf"</\s*{token.name}\s*>", re.IGNORECASE).search(markup, pos)
            raw_end = close.start() if close else length
            if raw_end > pos:
                yield Text(markup[pos:raw_end])
            pos = text_start = raw_end

    yield from flush_text(length)
