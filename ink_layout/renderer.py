"""Render pipeline: markup in, laid-out chapter out."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import LayoutConfig, validate_config
from .filesystem import collect_file_stat, enforce_file_size, get_max_file_size, safe_read
from .exceptions import RenderFileError
from .highlights import clamp_records, clamp_spans
from .justify import apply_justification
from .layout import LayoutEngine
from .models import LayoutResult
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def render_chapter(markup: str, config: LayoutConfig | None = None) -> LayoutResult:
    """Lay out one chapter of markup.

    Runs tokenize, layout, merge, optional justification and a final clamp of
    every span and record into its line. Malformed markup never raises; the
    output degrades instead.

    Args:
        markup: Chapter markup (HTML or XHTML).
        config: Layout configuration; defaults to a new `LayoutConfig`.

    Returns:
        LayoutResult: Lines, highlights, links, images, anchors, headings and
            justification maps of the chapter.

    Raises:
        ConfigError: If `config` holds invalid values.

    Examples:
        result = render_chapter("<p>Hello <b>world</b></p>", LayoutConfig(max_width=40))
        result.lines  # ["Hello world"]
    """
    config = config or LayoutConfig()
    validate_config(config)

    engine = LayoutEngine(config)
    for token in tokenize(markup, ascii_only=config.ascii_entities):
        engine.feed(token)
    result = engine.finish()

    if config.justify:
        apply_justification(result, config.max_width, config.justify_threshold)

    result.highlights = clamp_spans(result.highlights, result.lines)
    result.links = clamp_records(result.links, result.lines)
    result.images = clamp_records(result.images, result.lines)

    logger.info(
        "Rendered %d lines, %d highlights, %d links at width %d",
        len(result.lines),
        len(result.highlights),
        len(result.links),
        config.max_width,
    )
    return result


def render_file(filepath: Path, config: LayoutConfig | None = None) -> LayoutResult:
    """Read a chapter file and lay it out.

    Args:
        filepath: Path to the chapter file.
        config: Layout configuration; its ``max_file_size`` bounds the input
            unless ``INK_LAYOUT_MAX_FILE_SIZE`` overrides it.

    Returns:
        LayoutResult: Rendered chapter.

    Raises:
        RenderFileError: If the size limit is invalid or exceeded, or the file
            cannot be read.
        ConfigError: If `config` holds invalid values.

    Examples:
        result = render_file(Path("OEBPS/chapter01.xhtml"))
    """
    config = config or LayoutConfig()
    validate_config(config)

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise RenderFileError(filepath, str(error)) from error

    try:
        enforce_file_size(collect_file_stat(filepath), max_file_size, filepath)
        with safe_read(filepath) as file:
            markup = file.read()
    except IOError as error:
        raise RenderFileError(filepath, str(error)) from error

    logger.debug("Read %d characters from %s", len(markup), filepath)
    return render_chapter(markup, config)
