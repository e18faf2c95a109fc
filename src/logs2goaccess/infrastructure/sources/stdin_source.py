"""
Stdin source for logs2goaccess.

Provides streaming input from standard input for piped data.
"""

import sys
from typing import IO, Iterator

__all__ = ["StdinLineSource"]


class StdinLineSource:
    """
    Streaming source adapter for stdin.

    Reads piped input line-by-line without buffering the entire input.

    Example:
        # zcat access.log.gz | logs2goaccess convert caddy -
        source = StdinLineSource()
        for line in source.read_lines():
            process(line)
    """

    def __init__(self, stream: IO[str] | None = None):
        """
        Initialize stdin source.

        Args:
            stream: Text stream to read instead of sys.stdin (for tests)
        """
        self._stream = stream
        self._line_count = 0

    def read_lines(self) -> Iterator[str]:
        """
        Read lines from stdin, yielding one at a time.

        Yields:
            Input lines (without trailing newline)
        """
        stream = self._stream if self._stream is not None else sys.stdin
        for line in stream:
            self._line_count += 1
            yield line.rstrip("\n\r")

    def metadata(self) -> dict[str, str]:
        """
        Get source metadata.

        Note: Size is not known until reading completes.
        """
        return {
            "source_type": "stdin",
            "path": "<stdin>",
            "name": "stdin",
            "lines_read": str(self._line_count),
        }
