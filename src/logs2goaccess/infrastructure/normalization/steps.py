"""
Normalization step implementations.
"""

import re
from typing import Protocol, runtime_checkable

from logs2goaccess.core.exceptions import ConfigurationError
from logs2goaccess.core.models import AccessRecord
from logs2goaccess.core.security import SecurityValidationError, validate_regex_pattern

__all__ = [
    "NormalizationStep",
    "URLRewriteNormalizer",
    "RULE_SEPARATOR",
]


RULE_SEPARATOR = "=>"


@runtime_checkable
class NormalizationStep(Protocol):
    """
    Protocol for normalization pipeline steps.

    Each step is a deterministic rewrite of a record. Steps may hold state
    prepared at construction, never state carried from one record to the next.
    """

    @property
    def name(self) -> str:
        ...

    def normalize(self, record: AccessRecord) -> AccessRecord:
        ...


class URLRewriteNormalizer:
    """
    Rewrite record URLs with ordered regex substitutions.

    Each rule is ``<pattern>=><replacement>``. Every non-overlapping match of
    a pattern is replaced, and each rule works on the output of the previous
    one. Replacements use ``re.sub`` template syntax (``\\1``, ``\\g<name>``).

    Example:
        normalizer = URLRewriteNormalizer([
            r"^/api/v1/=>/api/",
            r"/users/\\d+=>/users/:id",
        ])
        # "/api/v1/users/42" -> "/api/users/:id"
    """

    def __init__(self, rules: list[str]):
        """
        Compile the rules.

        Raises:
            ConfigurationError: If a rule lacks the separator or its pattern
                is not a valid regex
        """
        self.rules: list[tuple[re.Pattern, str]] = []
        for rule in rules:
            pattern, sep, replacement = rule.partition(RULE_SEPARATOR)
            if not sep:
                raise ConfigurationError(
                    f"'{rule}' does not contain a replacement, "
                    f"url rules must be <regexp>{RULE_SEPARATOR}<replacement>",
                    config_key="normalize_url",
                )
            try:
                compiled = validate_regex_pattern(pattern)
            except SecurityValidationError as e:
                raise ConfigurationError(
                    f"'{pattern}' of '{rule}' is not a valid regexp: {e.message}",
                    config_key="normalize_url",
                )
            self._check_template(compiled, replacement, rule)
            self.rules.append((compiled, replacement))

    @property
    def name(self) -> str:
        return "url_rewrite"

    def normalize(self, record: AccessRecord) -> AccessRecord:
        """Apply every rule to the record URL, in order."""
        url = record.url
        for pattern, replacement in self.rules:
            url = pattern.sub(replacement, url)
        record.url = url
        return record

    @staticmethod
    def _check_template(pattern: re.Pattern, replacement: str, rule: str) -> None:
        # Bad group references only surface on a match, so force an empty one
        try:
            optional = re.compile(f"(?:{pattern.pattern})?", pattern.flags)
        except re.error:
            return
        try:
            optional.sub(replacement, "", count=1)
        except (re.error, IndexError) as e:
            raise ConfigurationError(
                f"invalid replacement in '{rule}': {e}",
                config_key="normalize_url",
            )
