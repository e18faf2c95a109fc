"""
logs2goaccess - Convert web access logs into a GoAccess-readable format.

Reads Caddy JSON, AWS ALB and AWS CloudFront access logs from files, stdin,
S3 or CloudWatch Logs, filters and normalizes the records, and writes one
tab-separated line per request for GoAccess.

Usage:
    from logs2goaccess import convert, describe_format

    # Print the matching GoAccess configuration
    print(describe_format())

    # Convert a set of ALB logs to stdout
    stats = convert(["s3:recurse:my-logs/alb/|suffix:.gz"], format="aws:alb")

    # Keep only one host and rewrite versioned API paths
    convert(
        ["access.log"],
        format="caddy",
        include_vhosts="www.example.com",
        normalize_urls=[r"^/api/v\\d+/=>/api/"],
    )
"""

__version__ = "0.1.0"

import sys
from typing import IO

from logs2goaccess.core.models import AccessRecord, ParseResult, ConversionStats
from logs2goaccess.core.base import BaseParser
from logs2goaccess.core.exceptions import (
    L2GError,
    ParseError,
    ConfigurationError,
    FetchError,
    NormalizationError,
    SinkError,
)
from logs2goaccess.core.goaccess import (
    TimestampLayout,
    OutputOptions,
    log_format,
    describe_format,
    format_record,
)
from logs2goaccess.parsers import ParserRegistry, registry
from logs2goaccess.application import ConvertLogsUseCase, ErrorPolicy
from logs2goaccess.infrastructure import (
    MultiLineSource,
    FilterConfig,
    NormalizationPipeline,
    URLRewriteNormalizer,
    StreamSink,
)
from logs2goaccess.infrastructure.filtering import parse_date_bound, split_prefixes

__all__ = [
    # Version
    "__version__",
    # Core models
    "AccessRecord",
    "ParseResult",
    "ConversionStats",
    "BaseParser",
    # Exceptions
    "L2GError",
    "ParseError",
    "ConfigurationError",
    "FetchError",
    "NormalizationError",
    "SinkError",
    # Output format
    "TimestampLayout",
    "OutputOptions",
    "log_format",
    "describe_format",
    "format_record",
    # Registry
    "ParserRegistry",
    "registry",
    # Use case
    "ConvertLogsUseCase",
    "ErrorPolicy",
    # Convenience functions
    "build_use_case",
    "convert",
    "parse_line",
]


def parse_line(line: str, format: str) -> ParseResult:
    """
    Parse a single raw line with the parser registered for ``format``.

    Raises:
        ConfigurationError: If no parser handles the format
        ParseError: If the line is malformed
    """
    return registry.create(format).parse_line(line)


def build_use_case(
    locations: list[str] | tuple[str, ...],
    format: str,
    output: IO[str] | None = None,
    include_vhosts: str | None = None,
    exclude_urls: str | None = None,
    exclude_client_ips: str | None = None,
    date_after: str | None = None,
    date_before: str | None = None,
    normalize_urls: list[str] | tuple[str, ...] | None = None,
    lenient: bool = False,
    options: OutputOptions | None = None,
) -> ConvertLogsUseCase:
    """
    Assemble the conversion pipeline without running it.

    Every value is validated and every location resolved here, so a
    ConfigurationError is raised before any line is read.

    Raises:
        ConfigurationError: On an unknown format, location or invalid option
    """
    parser = registry.create(format)

    filter_config = FilterConfig(
        include_host_prefixes=split_prefixes(include_vhosts),
        exclude_url_prefixes=split_prefixes(exclude_urls),
        exclude_client_prefixes=split_prefixes(exclude_client_ips),
        date_after=parse_date_bound(date_after, "date_after") if date_after else None,
        date_before=parse_date_bound(date_before, "date_before") if date_before else None,
    )

    normalizer = None
    if normalize_urls:
        normalizer = NormalizationPipeline([URLRewriteNormalizer(list(normalize_urls))])

    source = MultiLineSource(
        list(locations),
        date_after=filter_config.date_after,
        date_before=filter_config.date_before,
    )

    return ConvertLogsUseCase(
        source=source,
        parser=parser,
        sink=StreamSink(output or sys.stdout, options),
        filters=filter_config.build(),
        normalizer=normalizer,
        error_policy=ErrorPolicy.LENIENT if lenient else ErrorPolicy.STRICT,
    )


def convert(
    locations: list[str],
    format: str,
    output: IO[str] | None = None,
    include_vhosts: str | None = None,
    exclude_urls: str | None = None,
    exclude_client_ips: str | None = None,
    date_after: str | None = None,
    date_before: str | None = None,
    normalize_urls: list[str] | None = None,
    lenient: bool = False,
    options: OutputOptions | None = None,
) -> ConversionStats:
    """
    Convert log lines from one or more locations to GoAccess lines.

    Args:
        locations: Location strings (paths, ``-``, ``s3:...``, ``cwlogs:...``)
        format: Source format name or alias
        output: Text stream to write to (default: stdout)
        include_vhosts: Comma-separated virtual host prefixes to keep
        exclude_urls: Comma-separated URL prefixes to drop
        exclude_client_ips: Comma-separated client address prefixes to drop
        date_after: Keep records strictly after this moment
        date_before: Keep records strictly before this moment
        normalize_urls: URL rewrite rules, ``<regexp>=><replacement>``
        lenient: Count malformed lines instead of aborting
        options: Output layout and timezone

    Returns:
        Final counters of the run

    Raises:
        ConfigurationError: On an unknown format, location or invalid option
        L2GError: On fetch, parse, normalization or output failures
    """
    use_case = build_use_case(
        locations,
        format,
        output=output,
        include_vhosts=include_vhosts,
        exclude_urls=exclude_urls,
        exclude_client_ips=exclude_client_ips,
        date_after=date_after,
        date_before=date_before,
        normalize_urls=normalize_urls,
        lenient=lenient,
        options=options,
    )
    return use_case.execute()
