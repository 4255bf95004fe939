"""
Lays out an HTML or XHTML chapter as fixed-width text in the terminal.
Highlights are rendered with ANSI styles; link targets can be listed below the text.
"""

from __future__ import annotations

import logging

import click
from .config import build_config
from .exceptions import ConfigError, RenderFileError
from .filesystem import normalize_filepath
from .renderer import render_file
from .surface import TerminalSurface, draw_layout

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option("--width", type=int, help="Maximum line width")
@click.option("--justify/--no-justify", default=None, help="Justify full lines")
@click.option("--indent-size", type=int, help="Blockquote and definition indentation")
@click.option("--list-indent", type=int, help="Indentation per list level")
@click.option("--paragraph-spacing", type=int, help="Blank lines between paragraphs")
@click.option("--color/--no-color", default=None, help="Force or disable ANSI styles")
@click.option("--links", is_flag=True, help="List link targets after the text")
@click.option("-v", "--verbose", is_flag=True, help="Log layout details to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    width: int | None = None,
    justify: bool | None = None,
    indent_size: int | None = None,
    list_indent: int | None = None,
    paragraph_spacing: int | None = None,
    color: bool | None = None,
    links: bool = False,
    verbose: bool = False,
):
    """
    Entry point for rendering a chapter file to the terminal.

    Args:
        filepath: Path to the chapter file to render.
        width: Override for the maximum line width.
        justify: Override for line justification.
        indent_size: Override for blockquote and definition indentation.
        list_indent: Override for the indentation per list level.
        paragraph_spacing: Override for the blank lines between paragraphs.
        color: Force (`True`) or strip (`False`) ANSI styles; auto-detected
            when omitted.
        links: Print the numbered link targets after the text.
        verbose: Enable debug logging on stderr.

    Returns:
        None.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If the file cannot be read within the size limit.

    Examples:
        ink-layout OEBPS/chapter01.xhtml --width 72 --justify --links
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        path = normalize_filepath(filepath)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(
            path.parent,
            max_width=width,
            justify=justify,
            indent_size=indent_size,
            list_indent=list_indent,
            paragraph_spacing=paragraph_spacing,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        result = render_file(path, config)
    except RenderFileError as error:
        raise click.ClickException(str(error)) from error

    surface = TerminalSurface()
    draw_layout(result, surface, config.max_width)
    for line in surface.render():
        click.echo(line, color=color)

    if links and result.links:
        click.echo()
        for number, link in enumerate(result.links, start=1):
            click.echo(f"[{number}] {link.href} (line {link.line + 1})")


if __name__ == "__main__":
    cli()
