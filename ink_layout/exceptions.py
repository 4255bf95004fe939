"""Package-specific exception types."""

from __future__ import annotations


class LayoutError(ValueError):
    """Base class for layout-related errors.

    Raised only at the boundary of the pipeline; malformed markup never
    produces one.
    """


class ConfigError(LayoutError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_width` must be a positive integer")
    """


class RenderFileError(LayoutError):
    """Raised when a markup file cannot be read for rendering.

    Args:
        filepath: Path of the offending file.
        reason: Human-readable description of the failure.
    """

    def __init__(self, filepath: object, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"{filepath}: {reason}")
