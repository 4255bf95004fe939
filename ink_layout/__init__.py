"""
ink-layout: fixed-width text layout for HTML-like chapter markup.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    ink-layout OEBPS/chapter01.xhtml --width 72

Library Usage:
    from ink_layout import LayoutConfig, find_text_position, render_chapter

    result = render_chapter("<p>I saw the cat sat down.</p>", LayoutConfig(max_width=40))
    for line in result.lines:
        print(line)
    position = find_text_position(result.lines, "the cat", "saw ", " sat")
"""

from .config import LayoutConfig, Typography, build_config, validate_config
from .entities import decode_entities
from .exceptions import ConfigError, LayoutError, RenderFileError
from .highlights import merge_highlights
from .justify import ColumnMap, forward_map_column, reverse_map_column
from .layout import LayoutEngine
from .models import (
    Annotation,
    HighlightSpan,
    LayoutResult,
    ResolvedAnnotation,
    TextPosition,
)
from .reanchor import capture_annotation, find_text_position, resolve_annotations
from .renderer import render_chapter, render_file
from .tokenizer import tokenize

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "render_chapter",
    "render_file",
    "tokenize",
    "decode_entities",
    "LayoutEngine",
    # Post passes
    "merge_highlights",
    "forward_map_column",
    "reverse_map_column",
    "ColumnMap",
    # Re-anchoring
    "find_text_position",
    "capture_annotation",
    "resolve_annotations",
    # Data models
    "Annotation",
    "HighlightSpan",
    "LayoutResult",
    "ResolvedAnnotation",
    "TextPosition",
    # Configuration
    "LayoutConfig",
    "Typography",
    "build_config",
    "validate_config",
    # Exceptions
    "ConfigError",
    "LayoutError",
    "RenderFileError",
    # Version
    "__version__",
]
