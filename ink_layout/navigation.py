"""Resolve what a reported cursor position refers to in a rendered chapter."""

from __future__ import annotations

from urllib.parse import unquote, urlsplit

from .models import Heading, ImageRecord, LayoutResult, LinkRecord

FOOTNOTE_PREVIEW_LINES = 15


def link_at(result: LayoutResult, line: int, col: int) -> LinkRecord | None:
    """Return the link covering ``(line, col)``, if any.

    Examples:
        link = link_at(result, 4, 12)
        link.href if link else None
    """
    for link in result.links:
        if link.line == line and link.start_col <= col < link.end_col:
            return link
    return None


def image_at(result: LayoutResult, line: int, col: int | None = None) -> ImageRecord | None:
    """Return the image on `line`; with `col`, only an image covering it."""
    for image in result.images:
        if image.line != line:
            continue
        if col is None or image.start_col <= col < image.end_col:
            return image
    return None


def anchor_id_from_href(href: str) -> str | None:
    """Extract the fragment identifier from a link target.

    Examples:
        anchor_id_from_href("#note-3")  # "note-3"
        anchor_id_from_href("chapter02.xhtml#sec1")  # "sec1"
        anchor_id_from_href("https://example.com")  # None
    """
    fragment = urlsplit(href).fragment
    return unquote(fragment) or None


def resolve_anchor(result: LayoutResult, href: str) -> int | None:
    """Return the line index an in-chapter link points to.

    Only the fragment is used; the caller decides whether the document part
    of `href` names the current chapter.
    """
    anchor_id = anchor_id_from_href(href)
    if anchor_id is None:
        return None
    return result.anchors.get(anchor_id)


def footnote_preview(
    result: LayoutResult, anchor_id: str, max_lines: int = FOOTNOTE_PREVIEW_LINES
) -> list[str]:
    """Return the first paragraph starting at an anchor, stripped.

    Args:
        result: Rendered chapter.
        anchor_id: Anchor identifier, without ``#``.
        max_lines: Number of lines to look at from the anchor onward.

    Returns:
        list[str]: Lines of the footnote; empty when the anchor is unknown or
            no text follows it.
    """
    start = result.anchors.get(anchor_id)
    if start is None:
        return []

    preview = []
    for line in result.lines[start : start + max_lines]:
        if not line.strip():
            if preview:
                break
            continue
        preview.append(line.strip())
    return preview


def heading_for_line(result: LayoutResult, line: int) -> Heading | None:
    """Return the closest heading at or above `line`."""
    current = None
    for heading in result.headings:
        if heading.line > line:
            break
        current = heading
    return current
