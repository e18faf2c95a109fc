"""
Base parser class for logs2goaccess parsers.
"""

import math
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from dateutil import parser as dateutil_parser

from logs2goaccess.core.exceptions import ParseError
from logs2goaccess.core.models import ParseResult

__all__ = ["BaseParser"]

INTEGER_PATTERN = re.compile(r"-?[0-9]+")


class BaseParser(ABC):
    """
    Base class for all source format parsers.

    Subclasses must implement:
        - parse_line(line: str) -> ParseResult
        - can_parse(sample: list[str]) -> float

    Parsers are stateless: parse_line never reads further lines and keeps
    nothing between calls, so one instance can serve a whole run.

    Attributes:
        name: Unique identifier for this parser (the canonical format name)
        supported_formats: Aliases this parser is also registered under
        description: One-line summary shown by the CLI
    """

    name: str = "base"
    supported_formats: list[str] = []
    description: str = ""

    @abstractmethod
    def parse_line(self, line: str) -> ParseResult:
        """
        Parse a single raw line.

        Returns a ParseResult carrying the record, or a soft skip for
        lines that are recognized as non-data or carry an unrecoverable
        auxiliary field.

        Raises:
            ParseError: If the line cannot be interpreted in this format
        """
        pass

    @abstractmethod
    def can_parse(self, sample: list[str]) -> float:
        """
        Determine confidence that this parser can handle the given sample.

        Returns:
            Confidence score from 0.0 (cannot parse) to 1.0 (perfect match)
        """
        pass

    def _error(self, message: str, line: str) -> ParseError:
        """Build a ParseError for this parser."""
        return ParseError(message, line=line, parser_name=self.name)

    def _parse_int(self, value: object, field_name: str, line: str) -> int:
        """Parse a required integer field or raise ParseError."""
        if isinstance(value, bool):
            raise self._error(f"{field_name} is not an integer: {value!r}", line)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
            return int(value)
        raise self._error(f"{field_name} is not an integer: {value!r}", line)

    def _parse_float(self, value: object, field_name: str, line: str) -> float:
        """Parse a required float field or raise ParseError."""
        if isinstance(value, bool):
            raise self._error(f"{field_name} is not a number: {value!r}", line)
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            raise self._error(f"{field_name} is not a number: {value!r}", line)
        if not math.isfinite(parsed):
            raise self._error(f"{field_name} is not a finite number: {value!r}", line)
        return parsed

    def _parse_iso_timestamp(self, value: str, line: str) -> datetime:
        """
        Parse an ISO-8601 timestamp, attaching UTC when no offset is given.

        Raises:
            ParseError: If the value is not a valid ISO-8601 timestamp
        """
        try:
            ts = dateutil_parser.isoparse(value)
        except (ValueError, OverflowError):
            raise self._error(f"invalid timestamp: {value!r}", line)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts
