"""
Port interfaces for the application layer.

These are the interfaces that infrastructure adapters must implement.
They define the contract between the conversion use case and the outside
world.
"""

from typing import Protocol, Iterator, runtime_checkable

from logs2goaccess.core.models import AccessRecord, ConversionStats, ParseResult

__all__ = [
    "LineSourcePort",
    "ParserPort",
    "FilterPort",
    "NormalizerPort",
    "SinkPort",
    "StatsReporterPort",
]


@runtime_checkable
class LineSourcePort(Protocol):
    """
    Port for line sources.

    Implementations provide raw text lines, one per iteration, from files,
    stdin, object storage or log groups. End of iteration is a clean end of
    input; any failure to fetch is raised.
    """

    def read_lines(self) -> Iterator[str]:
        """Read raw lines (without trailing newline) from the source."""
        ...

    def metadata(self) -> dict[str, str]:
        """Get source metadata; ``path`` names the location being read."""
        ...


@runtime_checkable
class ParserPort(Protocol):
    """Port for source format parsers."""

    name: str

    def parse_line(self, line: str) -> ParseResult:
        """Parse a single line; raises ParseError on malformed input."""
        ...


class FilterPort(Protocol):
    """Port for the record filter chain."""

    def accepts(self, record: AccessRecord) -> bool:
        """Return True to keep the record."""
        ...


class NormalizerPort(Protocol):
    """Port for the normalization pipeline."""

    def process_one(self, record: AccessRecord) -> AccessRecord:
        """Normalize a single record; raises NormalizationError on failure."""
        ...


class SinkPort(Protocol):
    """Port for the output sink."""

    def write(self, record: AccessRecord) -> None:
        """Serialize and emit one record; raises SinkError on failure."""
        ...

    def flush(self) -> None:
        ...


class StatsReporterPort(Protocol):
    """Port for the background statistics reporter."""

    def offer(self, stats: ConversionStats) -> None:
        """Hand over the latest counters without blocking."""
        ...
