"""
Text stream sink.

Writes GoAccess lines to any text stream: stdout, an opened file or an
in-memory buffer.
"""

from typing import IO

from logs2goaccess.core.exceptions import SinkError
from logs2goaccess.core.goaccess import OutputOptions, format_record
from logs2goaccess.core.models import AccessRecord

__all__ = ["StreamSink"]


class StreamSink:
    """
    Sink writing one GoAccess line per record.

    The stream is not closed by the sink; its owner closes it.
    """

    def __init__(self, stream: IO[str], options: OutputOptions | None = None):
        self.stream = stream
        self.options = options or OutputOptions()
        self.records_written = 0

    def write(self, record: AccessRecord) -> None:
        try:
            self.stream.write(format_record(record, self.options) + "\n")
        except OSError as e:
            raise SinkError(f"failed to write output: {e}") from e
        self.records_written += 1

    def flush(self) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"failed to flush output: {e}") from e
