"""
CloudWatch Logs source for logs2goaccess.

Streams the messages of a log group, one line per message line.
"""

import logging
from datetime import datetime
from typing import Any, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from logs2goaccess.core.exceptions import FetchError

__all__ = ["CloudWatchLogsSource"]

logger = logging.getLogger(__name__)


def _epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _message_lines(message: str) -> list[str]:
    """Split an event message on LF only; other line breaks belong to the record."""
    lines = message.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class CloudWatchLogsSource:
    """
    Streaming source for the events of a CloudWatch Logs group.

    The time window is pushed down to the service, so only events between
    start and end are fetched.

    Example:
        source = CloudWatchLogsSource("/ecs/caddy", start=yesterday)
        for line in source.read_lines():
            process(line)
    """

    def __init__(
        self,
        log_group: str,
        start: datetime | None = None,
        end: datetime | None = None,
        client: Any = None,
    ):
        self.log_group = log_group
        self.start = start
        self.end = end
        self._client = client
        self._line_count = 0

    @property
    def location(self) -> str:
        return f"cwlogs:{self.log_group}"

    def read_lines(self) -> Iterator[str]:
        """
        Read event messages page by page.

        Raises:
            FetchError: If the log group cannot be queried
        """
        logger.info("opening %s", self.location)
        client = self._client or boto3.client("logs")
        request: dict[str, Any] = {"logGroupName": self.log_group}
        if self.start is not None:
            request["startTime"] = _epoch_millis(self.start)
        if self.end is not None:
            request["endTime"] = _epoch_millis(self.end)

        try:
            paginator = client.get_paginator("filter_log_events")
            for page in paginator.paginate(**request):
                for event in page.get("events", []):
                    for line in _message_lines(event.get("message", "")):
                        self._line_count += 1
                        yield line
        except (BotoCoreError, ClientError) as e:
            raise FetchError(f"cannot read {self.location}: {e}", location=self.location) from e

    def metadata(self) -> dict[str, str]:
        """Get source metadata."""
        return {
            "source_type": "cloudwatch_logs",
            "path": self.location,
            "name": self.log_group,
            "lines_read": str(self._line_count),
        }
