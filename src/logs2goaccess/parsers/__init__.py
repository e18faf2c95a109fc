"""
Parser registry and built-in source format parsers.
"""

from typing import Type

from logs2goaccess.core.base import BaseParser
from logs2goaccess.core.exceptions import ConfigurationError

__all__ = [
    "ParserRegistry",
    "registry",
    "BaseParser",
]


class ParserRegistry:
    """
    Central registry for all available parsers.

    Maps canonical format names and their aliases to parser classes.
    Adding a format means registering another parser; the conversion
    pipeline never changes.

    Usage:
        from logs2goaccess.parsers import registry

        parser = registry.create("aws:alb")
        result = parser.parse_line(line)
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._parsers: dict[str, Type[BaseParser]] = {}
        self._format_to_parser: dict[str, str] = {}

    def register(self, parser_class: Type[BaseParser]) -> None:
        """Register a parser class under its name and all its aliases."""
        name = parser_class.name
        self._parsers[name] = parser_class
        for fmt in parser_class.supported_formats:
            self._format_to_parser[fmt] = name

    def get_parser(self, format_name: str) -> BaseParser | None:
        """
        Get a parser instance for the given format name or alias.

        Returns:
            Parser instance or None if not found
        """
        parser_name = self._format_to_parser.get(format_name, format_name)
        parser_class = self._parsers.get(parser_name)
        if parser_class is None:
            return None
        return parser_class()

    def create(self, format_name: str) -> BaseParser:
        """
        Get a parser instance, failing loudly for unknown formats.

        Raises:
            ConfigurationError: If no parser handles format_name
        """
        parser = self.get_parser(format_name)
        if parser is None:
            known = ", ".join(sorted(self.list_parsers()))
            raise ConfigurationError(
                f"no parser for format '{format_name}' found. Known formats: {known}",
                config_key="format",
            )
        return parser

    def get_best_parser(self, sample: list[str]) -> tuple[BaseParser | None, float]:
        """
        Find the best parser for the given sample.

        Returns:
            Tuple of (parser_instance, confidence)
        """
        ranked = self.rank(sample)
        if not ranked or ranked[0][1] <= 0.0:
            return (None, 0.0)
        return ranked[0]

    def rank(self, sample: list[str]) -> list[tuple[BaseParser, float]]:
        """Return every parser with its confidence for sample, best first."""
        scored = []
        for parser_class in self._parsers.values():
            parser = parser_class()
            scored.append((parser, parser.can_parse(sample)))
        return sorted(scored, key=lambda item: item[1], reverse=True)

    def list_parsers(self) -> list[str]:
        """List all registered parser names."""
        return list(self._parsers.keys())

    def list_formats(self) -> list[str]:
        """List all supported format names, aliases included."""
        return list(self._format_to_parser.keys())


# Global registry instance
registry = ParserRegistry()


def _register_builtin_parsers() -> None:
    """Register all built-in parsers."""
    # Import here to avoid circular imports
    from logs2goaccess.parsers.caddy import CaddyParser
    from logs2goaccess.parsers.alb import ALBParser
    from logs2goaccess.parsers.cloudfront import CloudFrontParser

    registry.register(CaddyParser)
    registry.register(ALBParser)
    registry.register(CloudFrontParser)


_register_builtin_parsers()
