"""Wayto CLI - Main entry point.

Provides commands for validating map data, inspecting edges, and dry-running
transitions against an in-memory session.

Exit codes:
    0: Success
    1: Edge not found or transition execution failed
    2: Configuration error
    3: Runtime error
"""

import asyncio
import sys

import click

from ..cache import MapDBCache, load_mapdb
from ..config import get_settings
from ..exceptions import ConfigurationError, EdgeNotFoundError, WaytoRuntimeException
from ..logging import setup_logging
from ..mock import MockActionContext
from ..table import MapRegistry, load_registry, parse_room_ranges
from .formatters import (
    FORMATS,
    format_issues,
    format_result,
    format_summary,
    format_table,
    format_transition,
)

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3


def _configure_logging(verbose: bool) -> None:
    setup_logging(level="DEBUG" if verbose else "WARNING", structured=False, colorize=False)


def load_map(map_path: str, strict: bool = True, use_cache: bool = False) -> MapRegistry:
    """Load a map file into a registry, exiting with EXIT_CONFIG_ERROR on failure."""
    try:
        cache = MapDBCache() if use_cache else None
        loaded = load_mapdb(map_path, cache=cache)
        if loaded.from_cache:
            click.echo(f"Using cached MapDB ({loaded.age})", err=True)
        return load_registry(loaded.data, strict=strict)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


def _pairs(values: tuple[str, ...], option: str) -> list[tuple[str, str]]:
    pairs = []
    for value in values:
        key, sep, item = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}", param_hint=option)
        pairs.append((key, item))
    return pairs


@click.group()
@click.version_option(prog_name="wayto")
@click.pass_context
def main(ctx: click.Context) -> None:
    """Wayto CLI - Edge transition tables for mapdb wayto data.

    Validate map files, look up edges, and dry-run transition scripts.
    """
    ctx.ensure_object(dict)


@main.command()
@click.argument("map_path", type=click.Path(exists=True))
@click.option("--lenient", is_flag=True, help="Skip unparsable scripts instead of failing")
@click.option("--cache", "use_cache", is_flag=True, help="Read through the mapdb cache")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def validate(map_path: str, lenient: bool, use_cache: bool, verbose: bool) -> None:
    """Validate a map file and report data quality issues.

    MAP_PATH: Path to the map file (JSON, YAML or a .txt fragment)
    """
    _configure_logging(verbose)
    registry = load_map(map_path, strict=not lenient, use_cache=use_cache)

    click.echo(f"Map data is valid: {map_path}")
    click.echo(format_summary(registry))
    if registry.issues:
        click.echo(format_issues(registry.issues))
    sys.exit(EXIT_SUCCESS)


@main.command()
@click.argument("map_path", type=click.Path(exists=True))
@click.argument("origin")
@click.argument("target")
@click.option("--format", "-f", "format_type", type=click.Choice(FORMATS), default="text")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def lookup(map_path: str, origin: str, target: str, format_type: str, verbose: bool) -> None:
    """Show the transition from ORIGIN to TARGET.

    Falls back to the global script pool when ORIGIN has no such edge.
    """
    _configure_logging(verbose)
    registry = load_map(map_path)

    try:
        transition = registry.lookup(origin, target)
    except EdgeNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_EXECUTION_FAILED)

    click.echo(format_transition(target, transition, format_type))
    sys.exit(EXIT_SUCCESS)


@main.command()
@click.argument("map_path", type=click.Path(exists=True))
@click.argument("origin")
@click.option("--format", "-f", "format_type", type=click.Choice(FORMATS), default="text")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def show(map_path: str, origin: str, format_type: str, verbose: bool) -> None:
    """List every edge leaving ORIGIN."""
    _configure_logging(verbose)
    registry = load_map(map_path)

    table = registry.get_table(origin)
    if table is None:
        click.echo(f"Unknown origin: {origin}", err=True)
        sys.exit(EXIT_EXECUTION_FAILED)

    click.echo(format_table(table, format_type))
    sys.exit(EXIT_SUCCESS)


@main.command()
@click.argument("map_path", type=click.Path(exists=True))
@click.option("--location", "-l", help="Only rooms in this location")
@click.option("--range", "-r", "room_range", help='Only these room IDs, e.g. "35593-35601, 35608"')
def rooms(map_path: str, location: str | None, room_range: str | None) -> None:
    """List rooms of a mapdb export, or its locations when no filter is given."""
    _configure_logging(False)
    registry = load_map(map_path)

    if location is None and room_range is None:
        for name in registry.locations():
            click.echo(name)
        sys.exit(EXIT_SUCCESS)

    selected = registry.rooms_by_location(location) if location else registry.rooms()
    if room_range:
        try:
            wanted = {str(room_id) for room_id in parse_room_ranges(room_range)}
        except ConfigurationError as e:
            click.echo(f"Configuration error: {e}", err=True)
            sys.exit(EXIT_CONFIG_ERROR)
        selected = [room for room in selected if room.id in wanted]

    for room in selected:
        click.echo(f"{room.id}\t{room.name}\t{len(room.wayto)} exits")
    sys.exit(EXIT_SUCCESS)


@main.command()
@click.argument("map_path", type=click.Path(exists=True))
@click.argument("origin")
@click.argument("target")
@click.option("--respond", multiple=True, help="CMD=LINE: game output after CMD is sent")
@click.option("--incoming", multiple=True, help="Game output queued before the script starts")
@click.option("--var", "variables", multiple=True, help="KEY=VALUE: initial external variable")
@click.option("--status", "statuses", multiple=True, help="Status the character has (e.g. hidden)")
@click.option("--timeout", default=5.0, show_default=True, help="Bound for waits without one")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def run(
    map_path: str,
    origin: str,
    target: str,
    respond: tuple[str, ...],
    incoming: tuple[str, ...],
    variables: tuple[str, ...],
    statuses: tuple[str, ...],
    timeout: float,
    verbose: bool,
) -> None:
    """Dry-run the transition from ORIGIN to TARGET against a mock session.

    Prints every line the transition sends, then the outcome.
    """
    _configure_logging(verbose)
    registry = load_map(map_path)

    responses: dict[str, list[str]] = {}
    for command, line in _pairs(respond, "--respond"):
        responses.setdefault(command, []).append(line)

    settings = get_settings().model_copy(update={"default_wait_timeout": timeout})
    context = MockActionContext(
        incoming=incoming,
        responses=responses,
        external_vars=dict(_pairs(variables, "--var")),
        statuses=statuses,
    )

    try:
        result = asyncio.run(registry.executor(settings).traverse(origin, target, context))
    except EdgeNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_EXECUTION_FAILED)
    except WaytoRuntimeException as e:
        click.echo(f"Runtime error: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    click.echo(format_result(result, context.sent))
    if context.external_vars and verbose:
        for key, value in sorted(context.external_vars.items()):
            click.echo(f"UserVars.{key} = {value!r}")
    sys.exit(EXIT_SUCCESS if result.success else EXIT_EXECUTION_FAILED)


if __name__ == "__main__":
    main()
