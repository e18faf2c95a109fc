"""
Output sinks for logs2goaccess.
"""

from logs2goaccess.infrastructure.sinks.stream_sink import StreamSink

__all__ = ["StreamSink"]
