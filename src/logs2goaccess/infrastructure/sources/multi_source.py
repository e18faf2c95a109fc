"""
Multi-location line source for logs2goaccess.

Resolves location strings to concrete sources and reads them back to back
as one continuous stream of lines.

Location syntax:
    -                                 standard input
    path/to/file[.gz]                 local file
    file:path/to/file[.gz]            local file
    s3:bucket/key  s3://bucket/key    one S3 object
    s3:recurse:bucket/prefix[|m]      every non-empty object under prefix,
                                      m is suffix:<text> or regexp:<pattern>
    cwlogs:log-group                  CloudWatch Logs group
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator

import boto3

from logs2goaccess.core.exceptions import ConfigurationError
from logs2goaccess.application.ports import LineSourcePort
from logs2goaccess.infrastructure.sources.cloudwatch_source import CloudWatchLogsSource
from logs2goaccess.infrastructure.sources.file_source import FileLineSource
from logs2goaccess.infrastructure.sources.s3_source import (
    S3ObjectSource,
    S3Prefix,
    key_matcher,
    list_s3_objects,
)
from logs2goaccess.infrastructure.sources.stdin_source import StdinLineSource

__all__ = ["Location", "parse_location", "MultiLineSource"]

logger = logging.getLogger(__name__)

_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):")


@dataclass
class Location:
    """A parsed location string."""
    kind: str  # stdin, file, s3, s3_recurse, cwlogs
    target: str
    matcher: str | None = None

    def bucket_and_key(self) -> tuple[str, str]:
        bucket, _, key = self.target.partition("/")
        return bucket, key


def parse_location(location: str) -> Location:
    """
    Parse a location string.

    Raises:
        ConfigurationError: For an empty location, an unknown scheme or an
            S3 location without a bucket
    """
    if not location:
        raise ConfigurationError("empty location", config_key="location")
    if location == "-":
        return Location("stdin", "-")

    if location.startswith("s3:"):
        rest = location[len("s3:"):]
        if rest.startswith("recurse:"):
            rest = rest[len("recurse:"):].removeprefix("//")
            target, _, matcher = rest.partition("|")
            key_matcher(matcher or None)
            parsed = Location("s3_recurse", target, matcher or None)
        else:
            parsed = Location("s3", rest.removeprefix("//"))
        bucket, key = parsed.bucket_and_key()
        if not bucket:
            raise ConfigurationError(f"no bucket in location '{location}'", config_key="location")
        if parsed.kind == "s3" and not key:
            raise ConfigurationError(
                f"no object key in location '{location}', use s3:recurse: for prefixes",
                config_key="location",
            )
        return parsed

    if location.startswith("cwlogs:"):
        group = location[len("cwlogs:"):]
        if not group:
            raise ConfigurationError(f"no log group in location '{location}'", config_key="location")
        return Location("cwlogs", group)

    if location.startswith("file:"):
        return Location("file", location[len("file:"):])

    scheme = _SCHEME.match(location)
    # a single letter is a Windows drive, and existing paths win over schemes
    if scheme and len(scheme.group(1)) > 1 and not os.path.exists(location):
        raise ConfigurationError(
            f"no source for '{location}' found, supported prefixes are "
            "file:, s3:, s3:recurse:, cwlogs: and - for stdin",
            config_key="location",
        )
    return Location("file", location)


class MultiLineSource(LineSourcePort):
    """
    Concatenates several locations into one line stream.

    Locations are validated up front; each one is opened only when the
    previous one is exhausted. The date window, when given, is passed to
    CloudWatch Logs so only matching events are fetched.

    Example:
        source = MultiLineSource(["access.log.1.gz", "access.log"])
        while (line := source.next_line()) is not None:
            process(line)
    """

    def __init__(
        self,
        locations: list[str],
        date_after: datetime | None = None,
        date_before: datetime | None = None,
        s3_client: Any = None,
        logs_client: Any = None,
        stdin: Any = None,
    ):
        """
        Initialize the source.

        Args:
            locations: Location strings, read in order
            date_after: Lower time bound for CloudWatch Logs queries
            date_before: Upper time bound for CloudWatch Logs queries
            s3_client: boto3 S3 client (created on first use if None)
            logs_client: boto3 CloudWatch Logs client (created on first use if None)
            stdin: Text stream used for ``-`` instead of sys.stdin

        Raises:
            ConfigurationError: If a location string is invalid
        """
        if not locations:
            raise ConfigurationError("at least one location is required", config_key="location")
        self.locations = [parse_location(loc) for loc in locations]
        self.date_after = date_after
        self.date_before = date_before
        self._s3_client = s3_client
        self._logs_client = logs_client
        self._stdin = stdin
        self._current: LineSourcePort | None = None
        self._line_number = 0
        self._iterator: Iterator[str] | None = None

    def read_lines(self) -> Iterator[str]:
        """
        Read every location in order.

        Raises:
            FetchError: If a location cannot be listed, opened or read
        """
        for location in self.locations:
            for source in self._expand(location):
                self._current = source
                self._line_number = 0
                for line in source.read_lines():
                    self._line_number += 1
                    yield line

    def next_line(self) -> str | None:
        """
        Pull the next line, or None at the end of the last location.

        Raises:
            FetchError: If a location cannot be opened or read
        """
        if self._iterator is None:
            self._iterator = self.read_lines()
        return next(self._iterator, None)

    def metadata(self) -> dict[str, str]:
        """Get metadata of the location currently being read."""
        meta = {
            "source_type": "multi",
            "locations": str(len(self.locations)),
            "path": "<none>",
            "line_number": str(self._line_number),
        }
        if self._current is not None:
            meta["path"] = self._current.metadata().get("path", "<unknown>")
        return meta

    def _expand(self, location: Location) -> Iterator[LineSourcePort]:
        if location.kind == "stdin":
            yield StdinLineSource(self._stdin)
        elif location.kind == "file":
            yield FileLineSource(location.target)
        elif location.kind == "s3":
            bucket, key = location.bucket_and_key()
            yield S3ObjectSource(bucket, key, client=self._s3())
        elif location.kind == "s3_recurse":
            bucket, prefix = location.bucket_and_key()
            keys = list_s3_objects(self._s3(), S3Prefix(bucket, prefix, location.matcher))
            logger.info("found %d object(s) under s3:%s", len(keys), location.target)
            for key in keys:
                yield S3ObjectSource(bucket, key, client=self._s3())
        elif location.kind == "cwlogs":
            yield CloudWatchLogsSource(
                location.target,
                start=self.date_after,
                end=self.date_before,
                client=self._logs(),
            )

    def _s3(self) -> Any:
        if self._s3_client is None:
            self._s3_client = boto3.client("s3")
        return self._s3_client

    def _logs(self) -> Any:
        if self._logs_client is None:
            self._logs_client = boto3.client("logs")
        return self._logs_client
