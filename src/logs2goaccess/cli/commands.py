"""
CLI commands using the application layer use case.

This module provides the CLI command implementations that wire up
the infrastructure adapters to the conversion use case.
"""

from datetime import timezone, tzinfo
from typing import IO
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rich.console import Console
from rich.markup import escape

from logs2goaccess import build_use_case
from logs2goaccess.core.exceptions import ConfigurationError, L2GError
from logs2goaccess.core.goaccess import OutputOptions, TimestampLayout
from logs2goaccess.parsers import registry
from logs2goaccess.infrastructure import MultiLineSource, StatsReporter

__all__ = ["convert_command", "detect_command", "resolve_timezone"]

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ConfigurationError: If the name is unknown
    """
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"unknown timezone '{name}'", config_key="timezone") from e


def convert_command(
    log_format: str,
    locations: tuple[str, ...],
    include_vhosts: str | None,
    exclude_urls: str | None,
    exclude_client_ips: str | None,
    date_after: str | None,
    date_before: str | None,
    normalize_urls: tuple[str, ...],
    lenient: bool,
    timestamp_layout: str,
    tz_name: str,
    with_protocol: bool,
    output: IO[str],
    stats: bool,
    stats_interval: float,
    error_console: Console,
) -> int:
    """
    Execute the convert command.

    Returns:
        Exit code (0 = success, 1 = runtime error, 2 = configuration error)
    """
    try:
        options = OutputOptions(
            layout=TimestampLayout(timestamp_layout),
            tz=resolve_timezone(tz_name),
            with_protocol=with_protocol,
        )
        use_case = build_use_case(
            format=log_format,
            locations=locations,
            include_vhosts=include_vhosts,
            exclude_urls=exclude_urls,
            exclude_client_ips=exclude_client_ips,
            date_after=date_after,
            date_before=date_before,
            normalize_urls=normalize_urls,
            lenient=lenient,
            options=options,
            output=output,
        )
    except ConfigurationError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_CONFIG

    reporter = None
    if stats:
        reporter = StatsReporter(interval=stats_interval, console=error_console)
        use_case.stats_reporter = reporter
        reporter.start()

    try:
        result = use_case.execute()
    except L2GError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_FAILURE
    finally:
        if reporter is not None:
            reporter.stop(use_case.stats)

    if result.failed:
        error_console.print(
            f"[yellow]Skipped {result.failed:,} malformed line(s)[/yellow]"
        )
    return EXIT_OK


def detect_command(
    locations: tuple[str, ...],
    sample_size: int,
    show_all: bool,
    console: Console,
    error_console: Console,
) -> int:
    """
    Execute the detect command.

    Returns:
        Exit code (0 = every location sampled, 1 = at least one failed)
    """
    exit_code = EXIT_OK

    for location in locations:
        try:
            sample = read_sample(location, sample_size)
        except L2GError as e:
            error_console.print(f"[red]Error reading {escape(location)}:[/red] {escape(str(e))}")
            exit_code = EXIT_FAILURE
            continue

        ranking = registry.rank(sample)
        if show_all:
            console.print(f"\n[bold]{escape(location)}[/bold]")
            for parser, score in ranking:
                console.print(f"  {parser.name:20} {_confidence_bar(score)} {score:.0%}")
            continue

        if not ranking or ranking[0][1] <= 0:
            console.print(f"{escape(location)}: [yellow]unknown[/yellow]")
            continue
        parser, score = ranking[0]
        console.print(
            f"{escape(location)}: [cyan]{parser.name}[/cyan] {_confidence_bar(score)} {score:.0%}"
        )

    return exit_code


def read_sample(location: str, sample_size: int) -> list[str]:
    """Read up to ``sample_size`` non-blank lines from the start of a location."""
    source = MultiLineSource([location])
    sample: list[str] = []
    while len(sample) < sample_size:
        line = source.next_line()
        if line is None:
            break
        if line.strip():
            sample.append(line)
    return sample


def _confidence_bar(confidence: float, width: int = 10) -> str:
    """Create a visual confidence bar."""
    filled = int(confidence * width)
    empty = width - filled

    if confidence >= 0.8:
        color = "green"
    elif confidence >= 0.5:
        color = "yellow"
    else:
        color = "red"

    return f"[{color}]{'█' * filled}{'░' * empty}[/{color}]"
