"""Configuration loading and management."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Typography:
    """Indentation and spacing units used by the layout engine.

    Attributes:
        indent_size: Width of the blockquote filler (bars excluded from the
            first two columns) and of definition description indentation.
        list_indent: Spaces added per level of list nesting.
        paragraph_spacing: Blank lines between paragraphs; ``1`` means a single
            separating blank line.
    """

    indent_size: int = 4
    list_indent: int = 2
    paragraph_spacing: int = 1


@dataclass(frozen=True)
class LayoutConfig:
    """Configuration for laying out one chapter of markup.

    The value is read-only for the duration of a render pass and is passed
    explicitly to every layout call.

    Attributes:
        max_width: Maximum display width of a wrapped line.
        justify: Whether eligible lines are justified to ``max_width``.
        typography: Indentation and paragraph spacing bundle.
        class_styles: Mapping from CSS class name to highlight group.
        justify_threshold: Minimum fill ratio a line needs before it is
            justified; shorter lines (paragraph ends) stay ragged.
        ascii_entities: Decode numeric references above 127 to the empty
            string instead of the real character.
        max_file_size: Maximum input file size in bytes for file rendering.

    Examples:
        LayoutConfig(max_width=60, justify=True, class_styles={"note": "Comment"})
    """

    max_width: int = 80
    justify: bool = False
    typography: Typography = field(default_factory=Typography)
    class_styles: Mapping[str, str] = field(default_factory=dict)
    justify_threshold: float = 0.9
    ascii_entities: bool = False
    max_file_size: int = 10 * 1024 * 1024


_TYPOGRAPHY_KEYS = frozenset(item.name for item in fields(Typography))


def load_config(search_path: Path) -> LayoutConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.ink-layout]`` table from `pyproject.toml` and the
    ``[ink-layout]`` or ``[tool.ink-layout]`` table from `.ink-layout.toml`
    when present. TOML files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        LayoutConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("books"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "ink-layout")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".ink-layout.toml",
            table_paths=[("ink-layout",), ("tool", "ink-layout")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return LayoutConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> LayoutConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError) as error:
        logger.debug("Skipping unreadable config file %s: %s", config_file, error)
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        logger.debug("Loaded configuration from %s", config_file)
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> LayoutConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return LayoutConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    values = dict(raw_config)
    raw_typography = values.pop("typography", None)
    try:
        if raw_typography is not None:
            if not isinstance(raw_typography, dict):
                raise TypeError("typography must be a table")
            values["typography"] = Typography(**raw_typography)
        return LayoutConfig(**values)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: LayoutConfig) -> None:
    """Validate a `LayoutConfig` before it enters the pipeline.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the width, typography units, threshold, limits or the
            class table hold out-of-range or mistyped values.

    Examples:
        validate_config(LayoutConfig(max_width=72))
    """
    typography = config.typography
    if not isinstance(typography, Typography):
        raise ConfigError("`typography` must be a Typography bundle")

    _ensure_integers(
        {
            "max_width": config.max_width,
            "max_file_size": config.max_file_size,
            "indent_size": typography.indent_size,
            "list_indent": typography.list_indent,
            "paragraph_spacing": typography.paragraph_spacing,
        }
    )
    _ensure_positive(
        {
            "max_width": config.max_width,
            "max_file_size": config.max_file_size,
            "paragraph_spacing": typography.paragraph_spacing,
        }
    )

    if typography.indent_size < 2:
        raise ConfigError("`indent_size` must be >= 2")
    if typography.list_indent < 0:
        raise ConfigError("`list_indent` must be >= 0")

    if not isinstance(config.justify, bool):
        raise ConfigError("`justify` must be a boolean")
    if not isinstance(config.ascii_entities, bool):
        raise ConfigError("`ascii_entities` must be a boolean")

    threshold = config.justify_threshold
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ConfigError("`justify_threshold` must be a number")
    if not 0 < threshold <= 1:
        raise ConfigError("`justify_threshold` must be within (0, 1]")

    if not isinstance(config.class_styles, Mapping):
        raise ConfigError("`class_styles` must be a table of class names to groups")
    for class_name, group in config.class_styles.items():
        if not isinstance(class_name, str) or not isinstance(group, str) or not group:
            raise ConfigError(f"Invalid `class_styles` entry for {class_name!r}")


def apply_overrides(config: LayoutConfig, **overrides: object) -> LayoutConfig:
    """Apply override values to a `LayoutConfig`.

    Typography field names (``indent_size``, ``list_indent``,
    ``paragraph_spacing``) are routed into the nested bundle.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by field name; None values are ignored.

    Returns:
        LayoutConfig: New configuration, or the original when nothing changes.

    Raises:
        TypeError: If an override name is not a configuration field.

    Examples:
        updated = apply_overrides(config, max_width=60, list_indent=4)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config

    typography_changes = {
        key: changes.pop(key) for key in list(changes) if key in _TYPOGRAPHY_KEYS
    }
    if typography_changes:
        changes["typography"] = replace(config.typography, **typography_changes)
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> LayoutConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration field; None values
            are ignored.

    Returns:
        LayoutConfig: Validated configuration ready for rendering.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), max_width=72, justify=True)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
