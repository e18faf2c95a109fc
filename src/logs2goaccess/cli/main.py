"""
Main CLI entry point for logs2goaccess.

Uses the application layer use case with the infrastructure adapters.
Every option can also be set through an environment variable named
LOGS2GOACCESS_<COMMAND>_<OPTION>, for example LOGS2GOACCESS_CONVERT_LENIENT=1.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from logs2goaccess import __version__

console = Console()
# Error text keeps paths and details on one line
error_console = Console(stderr=True, soft_wrap=True)

LAYOUT_CHOICES = ["split", "combined"]


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="logs2goaccess")
@click.option("--verbose", "-v", is_flag=True, help="Log opened locations, skips and filter decisions")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    logs2goaccess - convert access logs for GoAccess

    Reads Caddy, AWS ALB and AWS CloudFront access logs from files, stdin,
    S3 or CloudWatch Logs and writes tab-separated lines GoAccess can read.

    Examples:

    \b
        logs2goaccess log-format > goaccess.conf
        logs2goaccess convert caddy /var/log/caddy/access.log
        logs2goaccess convert aws:alb 's3:recurse:my-logs/alb/|suffix:.gz' | goaccess -p goaccess.conf -
        logs2goaccess convert aws:cloudfront --include-vhosts www. cf.log.gz
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    ctx.obj["error_console"] = error_console


@cli.command()
@click.argument("log_format", metavar="FORMAT")
@click.argument("locations", nargs=-1)
@click.option(
    "--include-vhosts",
    help="Only keep records whose virtual host starts with one of these prefixes (comma separated)"
)
@click.option(
    "--exclude-urls",
    help="Drop records whose URL starts with one of these prefixes (comma separated)"
)
@click.option(
    "--exclude-client-ips",
    help="Drop records whose client address starts with one of these prefixes (comma separated)"
)
@click.option("--date-after", help="Only keep records strictly after this date/time (UTC if no zone given)")
@click.option("--date-before", help="Only keep records strictly before this date/time (UTC if no zone given)")
@click.option(
    "--normalize-url", "normalize_urls", multiple=True,
    help="Rewrite URLs with <regexp>=><replacement>; repeat to chain rules"
)
@click.option(
    "--lenient/--strict", default=False,
    help="Skip malformed lines instead of aborting (default: strict)"
)
@click.option(
    "--timestamp-layout", type=click.Choice(LAYOUT_CHOICES), default="split",
    help="Separate date and time columns, or one ISO-8601 column (default: split)"
)
@click.option("--timezone", "tz_name", default="UTC", help="Timezone of the output timestamps (default: UTC)")
@click.option("--with-protocol", is_flag=True, help="Add the request protocol column")
@click.option(
    "--output", "-o", type=click.File("w", encoding="utf-8", lazy=True), default="-",
    help="Output file (default: stdout)"
)
@click.option("--stats/--no-stats", default=False, help="Print progress statistics to stderr")
@click.option(
    "--stats-interval", type=click.FloatRange(min=0.1), default=5.0,
    help="Seconds between progress reports (default: 5)"
)
@click.pass_context
def convert(
    ctx: click.Context,
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
    output,
    stats: bool,
    stats_interval: float,
) -> None:
    """
    Convert access logs to GoAccess lines.

    FORMAT is one of the names listed by the formats command. LOCATIONS are
    read in order; with none given, lines are read from stdin.

    \b
    Locations:
        -                              standard input
        PATH, file:PATH                local file, gunzipped if it ends in .gz
        s3:BUCKET/KEY                  single S3 object
        s3:recurse:BUCKET/PREFIX       all objects below PREFIX, optionally
                                       narrowed with |suffix:TEXT or |regexp:RE
        cwlogs:LOG_GROUP               CloudWatch Logs group

    Examples:

    \b
        logs2goaccess convert caddy access.log
        logs2goaccess convert aws:alb --exclude-urls /health,/metrics alb.log.gz
        logs2goaccess convert caddy --normalize-url '^/u/\\d+=>/u/:id' -
        logs2goaccess convert aws:cloudfront --lenient --stats 's3:recurse:cf-logs/E2ABC'
    """
    from logs2goaccess.cli.commands import convert_command

    exit_code = convert_command(
        log_format=log_format,
        locations=locations or ("-",),
        include_vhosts=include_vhosts,
        exclude_urls=exclude_urls,
        exclude_client_ips=exclude_client_ips,
        date_after=date_after,
        date_before=date_before,
        normalize_urls=normalize_urls,
        lenient=lenient,
        timestamp_layout=timestamp_layout,
        tz_name=tz_name,
        with_protocol=with_protocol,
        output=output,
        stats=stats,
        stats_interval=stats_interval,
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


@cli.command("log-format")
@click.option(
    "--timestamp-layout", type=click.Choice(LAYOUT_CHOICES), default="split",
    help="Must match the layout used by convert (default: split)"
)
@click.option("--with-protocol", is_flag=True, help="Include the request protocol column")
@click.option("--columns-only", is_flag=True, help="Print only the log-format value")
@click.pass_context
def log_format_cmd(
    ctx: click.Context,
    timestamp_layout: str,
    with_protocol: bool,
    columns_only: bool,
) -> None:
    """
    Print the GoAccess configuration for the converted output.

    Examples:

    \b
        logs2goaccess log-format > goaccess.conf
        goaccess --log-format="$(logs2goaccess log-format --columns-only)" ...
    """
    from logs2goaccess.core.goaccess import OutputOptions, TimestampLayout, describe_format, log_format

    options = OutputOptions(
        layout=TimestampLayout(timestamp_layout),
        with_protocol=with_protocol,
    )
    # GoAccess configuration goes to stdout verbatim, without rich markup
    click.echo(log_format(options) if columns_only else describe_format(options))


@cli.command()
@click.pass_context
def formats(ctx: click.Context) -> None:
    """
    List all supported log formats.

    Shows all built-in parsers and the format names they accept.
    """
    from rich.table import Table
    from logs2goaccess.parsers import registry

    table = Table(title="Supported Log Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Aliases", style="green")
    table.add_column("Description")

    for parser_name in sorted(registry.list_parsers()):
        parser = registry.get_parser(parser_name)
        if parser:
            aliases = ", ".join(f for f in parser.supported_formats if f != parser_name)
            table.add_row(parser_name, aliases, parser.description)

    ctx.obj["console"].print(table)


@cli.command()
@click.argument("locations", nargs=-1, required=True)
@click.option(
    "--lines", "-n", "sample_size", type=click.IntRange(min=1), default=50,
    help="Number of lines to sample per location (default: 50)"
)
@click.option(
    "--all", "-a", "show_all", is_flag=True,
    help="Show every format with its confidence score"
)
@click.pass_context
def detect(
    ctx: click.Context,
    locations: tuple[str, ...],
    sample_size: int,
    show_all: bool,
) -> None:
    """
    Guess the source format of log locations.

    Samples the first lines of each location and reports the best matching
    format with a confidence score.

    Examples:

    \b
        logs2goaccess detect access.log
        logs2goaccess detect --all s3:my-logs/alb/2024/01/01/part.log.gz
    """
    from logs2goaccess.cli.commands import detect_command

    exit_code = detect_command(
        locations=locations,
        sample_size=sample_size,
        show_all=show_all,
        console=ctx.obj["console"],
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


def main() -> None:
    cli(auto_envvar_prefix="LOGS2GOACCESS")


if __name__ == "__main__":
    main()
