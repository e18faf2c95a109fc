"""
GoAccess output format.

Serializes AccessRecord objects into tab-separated lines and describes the
matching GoAccess ``log-format`` configuration.

Format specifiers used (see the GoAccess manual):
    %d  date field matching the date-format variable
    %t  time field matching the time-format variable
    %x  date and time field matching the datetime-format variable
    %v  server name (virtual host)
    %e  authenticated user id
    %h  client IP address (IPv4 or IPv6)
    %m  request method
    %U  URL path, including the query string
    %H  request protocol
    %s  status code
    %b  size of the object returned to the client
    %R  Referer header
    %u  User-Agent header
    %K  TLS protocol
    %k  TLS cipher
    %M  MIME type of the response
    %L  time taken to serve the request, in milliseconds
"""

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from enum import Enum

from logs2goaccess.core.models import AccessRecord

__all__ = [
    "TimestampLayout",
    "OutputOptions",
    "DATE_FORMAT",
    "TIME_FORMAT",
    "DATETIME_FORMAT",
    "log_format",
    "describe_format",
    "format_record",
]


DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_ESCAPES = str.maketrans({"\t": "\\t", "\r": "\\r", "\n": "\\n"})


class TimestampLayout(Enum):
    """How the timestamp is laid out in the output columns."""
    SPLIT = "split"        # %d and %t columns
    COMBINED = "combined"  # a single %x column


@dataclass
class OutputOptions:
    """Output settings shared by the serializer and the schema description."""
    layout: TimestampLayout = TimestampLayout.SPLIT
    tz: tzinfo = field(default=timezone.utc)
    with_protocol: bool = False


def _columns(options: OutputOptions) -> list[str]:
    columns = ["%d", "%t"] if options.layout is TimestampLayout.SPLIT else ["%x"]
    columns += ["%v", "%e", "%h", "%m", "%U"]
    if options.with_protocol:
        columns.append("%H")
    columns += ["%s", "%b", "%R", "%u", "%K", "%k", "%M", "%L"]
    return columns


def log_format(options: OutputOptions | None = None) -> str:
    """
    Return the GoAccess log-format string for the given options.

    Tabs are written as the two characters ``\\t`` as GoAccess expects them
    in its configuration.
    """
    return "\\t".join(_columns(options or OutputOptions()))


def describe_format(options: OutputOptions | None = None) -> str:
    """Return a GoAccess configuration snippet matching format_record output."""
    options = options or OutputOptions()
    lines = [f"log-format {log_format(options)}"]
    if options.layout is TimestampLayout.SPLIT:
        lines.append(f"date-format {DATE_FORMAT}")
        lines.append(f"time-format {TIME_FORMAT}")
    else:
        lines.append(f"datetime-format {DATETIME_FORMAT}")
    return "\n".join(lines)


def _clean(value: str) -> str:
    return value.translate(_ESCAPES)


def format_record(record: AccessRecord, options: OutputOptions | None = None) -> str:
    """
    Serialize a record into a single tab-separated line (no newline).

    Tabs and line breaks inside string fields are escaped so every record
    has the same number of columns.
    """
    options = options or OutputOptions()
    ts = record.timestamp.astimezone(options.tz)

    if options.layout is TimestampLayout.SPLIT:
        fields = [ts.strftime(DATE_FORMAT), ts.strftime(TIME_FORMAT)]
    else:
        fields = [ts.strftime(DATETIME_FORMAT)]

    fields += [
        _clean(record.vhost),
        _clean(record.username),
        _clean(record.client_ip),
        _clean(record.method),
        _clean(record.url),
    ]
    if options.with_protocol:
        fields.append(_clean(record.protocol))
    fields += [
        str(record.status),
        str(record.size),
        _clean(record.referer),
        _clean(record.user_agent),
        _clean(record.tls_protocol),
        _clean(record.tls_cipher),
        _clean(record.content_type),
        str(record.duration_ms),
    ]
    return "\t".join(fields)
