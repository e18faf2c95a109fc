"""
Local file source for logs2goaccess.

Streams lines from plain or gzip-compressed files.
"""

import gzip
import logging
import zlib
from pathlib import Path
from typing import IO, Iterator

from logs2goaccess.core.exceptions import FetchError

__all__ = ["FileLineSource", "is_gzip_name"]

logger = logging.getLogger(__name__)


def is_gzip_name(name: str) -> bool:
    """Return True when a location name marks gzip-compressed content."""
    return name.lower().endswith(".gz")


class FileLineSource:
    """
    Memory-efficient file streaming adapter.

    Reads files line-by-line without loading the entire file into memory.
    Files whose name ends in ``.gz`` are decompressed on the fly.

    Example:
        source = FileLineSource("/var/log/caddy/access.log.gz")
        for line in source.read_lines():
            print(line)
    """

    def __init__(
        self,
        path: str | Path,
        encoding: str = "utf-8",
        errors: str = "replace"
    ):
        """
        Initialize file source.

        Args:
            path: Path to log file
            encoding: File encoding (default: utf-8)
            errors: How to handle encoding errors (default: replace)
        """
        self.path = Path(path)
        self.encoding = encoding
        self.errors = errors
        self._line_count = 0

    def _open(self) -> IO[str]:
        if is_gzip_name(self.path.name):
            return gzip.open(self.path, "rt", encoding=self.encoding, errors=self.errors)
        return open(self.path, "r", encoding=self.encoding, errors=self.errors)

    def read_lines(self) -> Iterator[str]:
        """
        Read lines from file, yielding one at a time.

        Yields:
            Log lines (without trailing newline)

        Raises:
            FetchError: If the file cannot be opened, read or decompressed
        """
        logger.info("opening %s", self.path)
        try:
            with self._open() as f:
                for line in f:
                    self._line_count += 1
                    yield line.rstrip("\n\r")
        except (OSError, EOFError, zlib.error) as e:
            raise FetchError(f"cannot read {self.path}: {e}", location=str(self.path)) from e

    def metadata(self) -> dict[str, str]:
        """Get source metadata."""
        return {
            "source_type": "file",
            "path": str(self.path),
            "name": self.path.name,
            "compressed": str(is_gzip_name(self.path.name)),
            "lines_read": str(self._line_count),
        }
