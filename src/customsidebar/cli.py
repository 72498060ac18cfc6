"""CLI interface for customsidebar.

Command-line tool for building, inspecting and caching page sidebars.
"""

import asyncio
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from customsidebar.config import Config
from customsidebar.core.navigation import sidebar_to_dict
from customsidebar.core.outline import serialize_outline
from customsidebar.live import CacheInvalidator
from customsidebar.sidebar import SidebarBuilder, create_cache

F = TypeVar("F", bound=Callable[..., Any])


@click.group()
def cli() -> None:
    """customsidebar - Per-page navigation sidebars from wiki outlines."""


@click.group()
def cache() -> None:
    """Sidebar cache commands."""


cli.add_command(cache)


def _config_option(func: F) -> F:
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="Path to configuration file (default: auto-discover customsidebar.toml)",
    )(func)


def _source_dir_option(func: F) -> F:
    return click.option(
        "--source-dir",
        "-s",
        type=click.Path(exists=True, path_type=Path, file_okay=False),
        default=None,
        help="Page source directory (overrides config)",
    )(func)


def _verbose_option(func: F) -> F:
    return click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output (show parser warnings and cache activity)",
    )(func)


@cli.command()
@click.argument("page")
@_config_option
@_source_dir_option
@click.option(
    "--locale",
    "-l",
    default=None,
    help="Display language (default: site content language)",
)
@click.option(
    "--group",
    "-g",
    "groups",
    multiple=True,
    help="User group, repeatable, in membership order",
)
@click.option(
    "--user",
    "-u",
    "user_name",
    default="",
    help="Name of the current user",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the sidebar as JSON instead of HTML",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable caching (overrides config, default: disabled)",
)
@_verbose_option
def render(
    page: str,
    config_path: Path | None,
    source_dir: Path | None,
    locale: str | None,
    groups: tuple[str, ...],
    user_name: str,
    as_json: bool,
    cache: bool | None,
    verbose: bool,
) -> None:
    """Build and print the sidebar for PAGE."""
    _setup_logging(verbose)
    try:
        config = Config.load(config_path).with_overrides(
            source_dir=source_dir,
            cache_enabled=cache,
        )
        builder = SidebarBuilder(config)
        sidebar = builder.build_sidebar(page, locale, groups, user_name=user_name)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(sidebar_to_dict(sidebar), indent=2, ensure_ascii=False))
        return

    if not sidebar:
        click.echo(click.style("Sidebar is empty", fg="yellow"), err=True)
        return

    for heading, fragment in builder.render(sidebar).items():
        click.echo(click.style(heading, bold=True))
        click.echo(fragment)


@cli.command()
@click.argument("source")
@_config_option
@_source_dir_option
@click.option(
    "--page",
    "-p",
    default="Main Page",
    help="Page the outline is shown on (default: Main Page)",
)
@click.option(
    "--locale",
    "-l",
    default=None,
    help="Display language (default: site content language)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the tree as JSON instead of outline text",
)
@_verbose_option
def tree(
    source: str,
    config_path: Path | None,
    source_dir: Path | None,
    page: str,
    locale: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Resolve and parse one outline SOURCE.

    SOURCE is either outline text starting with '*' or the title of a page
    holding it.
    """
    _setup_logging(verbose)
    try:
        config = Config.load(config_path).with_overrides(source_dir=source_dir)
        builder = SidebarBuilder(config)
        context = builder.make_context(page, locale)
        nodes = builder.tree(source.replace("\\n", "\n"), context)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if as_json:
        click.echo(
            json.dumps([node.to_dict() for node in nodes], indent=2, ensure_ascii=False),
        )
        return

    if not nodes:
        click.echo(click.style("Outline is empty", fg="yellow"), err=True)
        return

    click.echo(serialize_outline(nodes))


@cache.command()
@_config_option
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Cache directory (overrides config)",
)
def clear(config_path: Path | None, cache_dir: Path | None) -> None:
    """Remove all cached sidebars."""
    try:
        config = Config.load(config_path).with_overrides(cache_dir=cache_dir)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if config.cache.backend == "memory":
        click.echo("Memory cache is per process; nothing to clear")
        return

    create_cache(config.cache).clear()
    click.echo(click.style(f"Cleared sidebar cache in {config.cache.cache_dir}", fg="green"))


@cli.command()
@_config_option
@_source_dir_option
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Cache directory (overrides config)",
)
@_verbose_option
def watch(
    config_path: Path | None,
    source_dir: Path | None,
    cache_dir: Path | None,
    verbose: bool,
) -> None:
    """Clear cached sidebars whenever a page file changes."""
    _setup_logging(verbose, default_level=logging.INFO)
    try:
        config = Config.load(config_path).with_overrides(
            source_dir=source_dir,
            cache_dir=cache_dir,
        )
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if config.cache.backend == "memory":
        click.echo(
            click.style("Error: watch requires the file cache backend", fg="red"),
            err=True,
        )
        sys.exit(1)

    click.echo(f"Source directory: {config.pages.source_dir}")
    click.echo(f"Cache directory: {config.cache.cache_dir}")

    invalidator = CacheInvalidator(
        config.pages.source_dir,
        create_cache(config.cache),
        extension=config.pages.extension,
    )
    try:
        asyncio.run(invalidator.run())
    except KeyboardInterrupt:
        click.echo("Stopped watching")


def _setup_logging(verbose: bool, default_level: int = logging.WARNING) -> None:
    """Configure root logging for a CLI run.

    Args:
        verbose: Enable debug output
        default_level: Level used without --verbose
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else default_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
