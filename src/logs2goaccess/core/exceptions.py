"""
Custom exceptions for logs2goaccess.
"""

__all__ = [
    "L2GError",
    "ParseError",
    "ConfigurationError",
    "FetchError",
    "NormalizationError",
    "SinkError",
]


class L2GError(Exception):
    """Base exception for all logs2goaccess errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ParseError(L2GError):
    """Raised when a line cannot be interpreted in the selected format."""

    def __init__(
        self,
        message: str,
        line: str | None = None,
        line_number: int | None = None,
        parser_name: str | None = None,
        location: str | None = None,
    ):
        details = {}
        if location is not None:
            details["location"] = location
        if line_number is not None:
            details["line_number"] = line_number
        if parser_name is not None:
            details["parser"] = parser_name
        if line is not None:
            details["line"] = line[:200] + "..." if len(line) > 200 else line
        super().__init__(message, details)
        self.line = line
        self.line_number = line_number
        self.parser_name = parser_name
        self.location = location

    def with_context(
        self,
        line: str | None = None,
        line_number: int | None = None,
        location: str | None = None,
    ) -> "ParseError":
        """Return a copy of this error enriched with source context."""
        return ParseError(
            self.message,
            line=line if self.line is None else self.line,
            line_number=line_number if self.line_number is None else self.line_number,
            parser_name=self.parser_name,
            location=location if self.location is None else self.location,
        )


class ConfigurationError(L2GError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {}
        if config_key is not None:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.config_key = config_key


class FetchError(L2GError):
    """Raised when a source location cannot be opened or read."""

    def __init__(self, message: str, location: str | None = None):
        details = {}
        if location is not None:
            details["location"] = location
        super().__init__(message, details)
        self.location = location


class NormalizationError(L2GError):
    """Raised when a normalization step fails on a record."""

    def __init__(self, message: str, step: str | None = None, url: str | None = None):
        details = {}
        if step is not None:
            details["step"] = step
        if url is not None:
            details["url"] = url
        super().__init__(message, details)
        self.step = step


class SinkError(L2GError):
    """Raised when writing a serialized record fails."""
