"""
Convert logs use case.

Orchestrates: source -> parser -> filter chain -> normalizer chain -> sink
"""

import logging
from enum import Enum

from logs2goaccess.core.exceptions import ParseError
from logs2goaccess.core.models import ConversionStats
from logs2goaccess.core.security import SecurityValidationError, validate_line_length
from logs2goaccess.application.ports import (
    FilterPort,
    LineSourcePort,
    NormalizerPort,
    ParserPort,
    SinkPort,
    StatsReporterPort,
)

__all__ = ["ConvertLogsUseCase", "ErrorPolicy"]

logger = logging.getLogger(__name__)


class ErrorPolicy(Enum):
    """What to do when a line cannot be parsed at all."""
    STRICT = "strict"    # abort the run on the first parse error
    LENIENT = "lenient"  # count the line as failed and skipped, keep going


class ConvertLogsUseCase:
    """
    Use case: convert raw access log lines into GoAccess records.

    Single pass, one line in flight at a time, no reordering. Each line is
    parsed, filtered, normalized and written before the next one is read.

    Error handling:
        - a soft skip from the parser or a filter rejection counts as skipped
        - a ParseError aborts the run (STRICT) or is counted (LENIENT)
        - fetch, normalization and sink errors always abort the run

    Example:
        use_case = ConvertLogsUseCase(
            source=MultiLineSource(["access.log.gz"]),
            parser=registry.create("aws:alb"),
            sink=StreamSink(sys.stdout),
            filters=FilterConfig(include_host_prefixes=["www."]).build(),
        )
        stats = use_case.execute()
    """

    def __init__(
        self,
        source: LineSourcePort,
        parser: ParserPort,
        sink: SinkPort,
        filters: FilterPort | None = None,
        normalizer: NormalizerPort | None = None,
        error_policy: ErrorPolicy = ErrorPolicy.STRICT,
        stats_reporter: StatsReporterPort | None = None,
    ):
        """
        Initialize the use case.

        Args:
            source: Line source adapter (files, stdin, S3, CloudWatch)
            parser: Parser for the selected source format
            sink: Output sink receiving accepted records
            filters: Optional filter chain
            normalizer: Optional normalization pipeline
            error_policy: Handling of parse errors
            stats_reporter: Optional background reporter for running counters
        """
        self.source = source
        self.parser = parser
        self.sink = sink
        self.filters = filters
        self.normalizer = normalizer
        self.error_policy = error_policy
        self.stats_reporter = stats_reporter
        self.stats = ConversionStats()

    def execute(self) -> ConversionStats:
        """
        Run the conversion until the source is exhausted.

        Returns:
            Final counters of the run

        Raises:
            ParseError: On a malformed line in STRICT mode
            FetchError: If the source cannot be read
            NormalizationError: If a normalizer fails
            SinkError: If writing the output fails
        """
        stats = self.stats
        for raw in self.source.read_lines():
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            stats.lines_read += 1
            self._process(line)
            self._report()

        self.sink.flush()
        return stats

    def _process(self, line: str) -> None:
        stats = self.stats
        try:
            result = self._parse(line)
        except ParseError as e:
            error = self._with_context(e, line)
            if self.error_policy is ErrorPolicy.STRICT:
                raise error
            logger.warning("skipping unparsable line: %s", error)
            stats.failed += 1
            stats.skipped += 1
            return

        if result.skipped:
            logger.debug("skipped line: %s", result.reason)
            stats.skipped += 1
            return

        record = result.record
        if self.filters is not None and not self.filters.accepts(record):
            stats.skipped += 1
            return

        if self.normalizer is not None:
            record = self.normalizer.process_one(record)

        self.sink.write(record)
        stats.included += 1

    def _parse(self, line: str):
        try:
            validate_line_length(line)
        except SecurityValidationError as e:
            raise ParseError(e.message, line=line[:200], parser_name=self.parser.name)
        return self.parser.parse_line(line)

    def _with_context(self, error: ParseError, line: str) -> ParseError:
        meta = self.source.metadata()
        line_number = meta.get("line_number")
        return error.with_context(
            line=line,
            line_number=int(line_number) if line_number else None,
            location=meta.get("path"),
        )

    def _report(self) -> None:
        if self.stats_reporter is not None:
            self.stats_reporter.offer(self.stats.snapshot())
