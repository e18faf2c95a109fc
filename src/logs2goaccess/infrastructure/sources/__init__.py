"""
Source adapters for logs2goaccess.

These implement the LineSourcePort interface for files, stdin, S3 and
CloudWatch Logs.
"""

from logs2goaccess.infrastructure.sources.file_source import FileLineSource, is_gzip_name
from logs2goaccess.infrastructure.sources.stdin_source import StdinLineSource
from logs2goaccess.infrastructure.sources.s3_source import S3ObjectSource, S3Prefix, list_s3_objects
from logs2goaccess.infrastructure.sources.cloudwatch_source import CloudWatchLogsSource
from logs2goaccess.infrastructure.sources.multi_source import (
    Location,
    MultiLineSource,
    parse_location,
)

__all__ = [
    "FileLineSource",
    "is_gzip_name",
    "StdinLineSource",
    "S3ObjectSource",
    "S3Prefix",
    "list_s3_objects",
    "CloudWatchLogsSource",
    "Location",
    "MultiLineSource",
    "parse_location",
]
