from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from ink_layout.config import (
    ConfigError,
    LayoutConfig,
    Typography,
    apply_overrides,
    build_config,
    load_config,
    validate_config,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".ink-layout.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout]
        max_width = 72
        justify = true
        justify_threshold = 0.8
        ascii_entities = true
        max_file_size = 2048

        [tool.ink-layout.typography]
        indent_size = 6
        list_indent = 3
        paragraph_spacing = 2

        [tool.ink-layout.class_styles]
        smallcaps = "InkBold"
        chapter-title = "InkTitle"
        """,
    )

    config = load_config(tmp_path)

    assert config == LayoutConfig(
        max_width=72,
        justify=True,
        typography=Typography(indent_size=6, list_indent=3, paragraph_spacing=2),
        class_styles={"smallcaps": "InkBold", "chapter-title": "InkTitle"},
        justify_threshold=0.8,
        ascii_entities=True,
        max_file_size=2048,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [ink-layout]
        max_width = 50
        """,
    )
    nested = tmp_path / "OEBPS"
    nested.mkdir()

    config = load_config(nested)

    assert config.max_width == 50


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.ink-layout]
        justify = true
        """,
    )

    assert load_config(tmp_path).justify is True


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout]
        max_width = 64
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    assert load_config(nested).max_width == 64


def test_pyproject_without_table_does_not_stop_search(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout]
        max_width = 64
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.other]
        name = "x"
        """,
    )

    assert load_config(child).max_width == 64


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout]
        max_width = 64
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.ink-layout]
        """,
    )

    assert load_config(child) == LayoutConfig()


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    assert load_config(tmp_path) == LayoutConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout]
        max_width = 33
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()

    assert load_config(nested).max_width == 33


@pytest.mark.parametrize(
    "body",
    [
        """
        [tool.ink-layout]
        max_width = 72
        unexpected = true
        """,
        """
        [tool]
        ink-layout = "wide"
        """,
        """
        [tool.ink-layout]
        typography = 4
        """,
        """
        [tool.ink-layout.typography]
        margins = 2
        """,
    ],
)
def test_load_config_errors_on_invalid_table(tmp_path: Path, body: str):
    _write_pyproject(tmp_path, body)

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_partial_config_merges_with_defaults(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.ink-layout.typography]
        list_indent = 4
        """,
    )

    config = load_config(tmp_path)

    assert config.typography == Typography(list_indent=4)
    assert config.max_width == LayoutConfig().max_width
    assert config.justify is False


def test_apply_overrides_routes_typography_fields():
    base = LayoutConfig(typography=Typography(indent_size=6))

    updated = apply_overrides(base, max_width=60, list_indent=4, justify=None)

    assert updated.max_width == 60
    assert updated.typography == Typography(indent_size=6, list_indent=4)
    assert updated.justify is False


def test_apply_overrides_without_changes_returns_same_config():
    config = LayoutConfig()
    assert apply_overrides(config, max_width=None) is config


def test_build_config_validates_overrides(tmp_path: Path):
    assert build_config(tmp_path, max_width=72).max_width == 72

    with pytest.raises(ConfigError, match="max_width"):
        build_config(tmp_path, max_width=-1)


@pytest.mark.parametrize(
    "config",
    [
        LayoutConfig(max_width=0),
        LayoutConfig(max_file_size=0),
        LayoutConfig(typography=Typography(indent_size=1)),
        LayoutConfig(typography=Typography(list_indent=-1)),
        LayoutConfig(typography=Typography(paragraph_spacing=0)),
        LayoutConfig(justify_threshold=0),
        LayoutConfig(justify_threshold=1.5),
        LayoutConfig(class_styles={"note": ""}),
    ],
)
def test_validate_config_rejects_invalid_values(config: LayoutConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize(
    "config",
    [
        LayoutConfig(max_width="wide"),  # type: ignore[arg-type]
        LayoutConfig(max_width=True),  # type: ignore[arg-type]
        LayoutConfig(max_file_size="big"),  # type: ignore[arg-type]
        LayoutConfig(justify="yes"),  # type: ignore[arg-type]
        LayoutConfig(ascii_entities=1),  # type: ignore[arg-type]
        LayoutConfig(justify_threshold="0.9"),  # type: ignore[arg-type]
        LayoutConfig(typography=Typography(indent_size="4")),  # type: ignore[arg-type]
        LayoutConfig(typography={"indent_size": 4}),  # type: ignore[arg-type]
        LayoutConfig(class_styles=["note"]),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_mistyped_values(config: LayoutConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


def test_validate_config_accepts_defaults():
    validate_config(LayoutConfig())
    validate_config(LayoutConfig(justify_threshold=1))
