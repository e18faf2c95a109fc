"""
Input guards for logs2goaccess.

Centralizes the limits applied to untrusted log content and user supplied
patterns so every parser and normalizer enforces them the same way.
"""

import re
from typing import Any

from logs2goaccess.core.exceptions import L2GError

__all__ = [
    "MAX_LINE_LENGTH",
    "MAX_JSON_DEPTH",
    "MAX_PATTERN_LENGTH",
    "LineTooLongError",
    "SecurityValidationError",
    "validate_line_length",
    "validate_json_depth",
    "validate_regex_pattern",
]


# Access log lines are short; anything beyond this is not a log record
MAX_LINE_LENGTH = 1024 * 1024

MAX_JSON_DEPTH = 32

MAX_PATTERN_LENGTH = 1000


class SecurityValidationError(L2GError):
    """Raised when security validation fails."""

    def __init__(self, message: str, validation_type: str, details: dict | None = None):
        super().__init__(message, details)
        self.validation_type = validation_type


class LineTooLongError(SecurityValidationError):
    """Raised when a log line exceeds MAX_LINE_LENGTH."""

    def __init__(self, line_length: int, max_length: int = MAX_LINE_LENGTH):
        message = (
            f"Line length ({line_length:,} bytes) exceeds maximum allowed "
            f"({max_length:,} bytes)"
        )
        super().__init__(
            message,
            validation_type="line_length",
            details={
                "line_length": line_length,
                "max_length": max_length,
            }
        )


def validate_line_length(line: str, max_length: int = MAX_LINE_LENGTH) -> str:
    """
    Validate that a line does not exceed the maximum allowed length.

    Raises:
        LineTooLongError: If line exceeds max_length
    """
    line_length = len(line.encode("utf-8", errors="replace"))
    if line_length > max_length:
        raise LineTooLongError(line_length, max_length)
    return line


def validate_json_depth(data: Any, max_depth: int = MAX_JSON_DEPTH, current_depth: int = 0) -> bool:
    """
    Check that decoded JSON does not nest deeper than max_depth.

    Raises:
        SecurityValidationError: If depth exceeds max_depth
    """
    if current_depth > max_depth:
        raise SecurityValidationError(
            f"JSON nesting depth ({current_depth}) exceeds maximum ({max_depth})",
            validation_type="json_depth",
            details={"depth": current_depth, "max_depth": max_depth},
        )

    if isinstance(data, dict):
        for value in data.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(data, list):
        for item in data:
            validate_json_depth(item, max_depth, current_depth + 1)

    return True


def validate_regex_pattern(
    pattern: str,
    max_length: int = MAX_PATTERN_LENGTH,
    flags: int = 0,
) -> re.Pattern:
    """
    Validate and compile a user supplied regex pattern.

    Checks for:
    - Pattern length limits
    - Valid regex syntax
    - Known problematic patterns (basic ReDoS detection)

    Args:
        pattern: Regex pattern string
        max_length: Maximum pattern length
        flags: Flags passed to re.compile

    Returns:
        Compiled regex pattern

    Raises:
        SecurityValidationError: If pattern is invalid or potentially dangerous
    """
    if len(pattern) > max_length:
        raise SecurityValidationError(
            f"Regex pattern too long ({len(pattern)} > {max_length})",
            validation_type="regex_length",
        )

    # Heuristic only: a quantified group whose whole body is one quantified
    # atom, such as (a+)+, (\w*)* or ([a-z]+){2,}
    dangerous_patterns = [
        r"\((?:\?:)?(?:\\.|\[[^\]]*\]|[^()\\\[\]|])[+*]\)[+*{]",
    ]

    for dangerous in dangerous_patterns:
        if re.search(dangerous, pattern):
            raise SecurityValidationError(
                "Regex pattern contains potentially dangerous nested quantifiers. "
                "Please simplify the pattern.",
                validation_type="regex_redos",
                details={"pattern_preview": pattern[:100]},
            )

    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise SecurityValidationError(
            f"Invalid regex pattern: {e}",
            validation_type="regex_syntax",
            details={"error": str(e)},
        )
