"""
Core data models, output format and base classes for logs2goaccess.
"""

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
from logs2goaccess.core.security import (
    MAX_LINE_LENGTH,
    MAX_JSON_DEPTH,
    LineTooLongError,
    SecurityValidationError,
    validate_line_length,
    validate_json_depth,
    validate_regex_pattern,
)

__all__ = [
    "AccessRecord",
    "ParseResult",
    "ConversionStats",
    "BaseParser",
    "L2GError",
    "ParseError",
    "ConfigurationError",
    "FetchError",
    "NormalizationError",
    "SinkError",
    "TimestampLayout",
    "OutputOptions",
    "log_format",
    "describe_format",
    "format_record",
    "MAX_LINE_LENGTH",
    "MAX_JSON_DEPTH",
    "LineTooLongError",
    "SecurityValidationError",
    "validate_line_length",
    "validate_json_depth",
    "validate_regex_pattern",
]
