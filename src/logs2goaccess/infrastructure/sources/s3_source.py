"""
S3 object source for logs2goaccess.

Streams lines from objects in S3, decompressing ``.gz`` keys on the fly.
Clients come from boto3's default session; credentials and retries are
left to boto3's own configuration.
"""

import gzip
import logging
import zlib
from dataclasses import dataclass
from typing import Any, Callable, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from logs2goaccess.core.exceptions import ConfigurationError, FetchError
from logs2goaccess.core.security import SecurityValidationError, validate_regex_pattern
from logs2goaccess.infrastructure.sources.file_source import is_gzip_name

__all__ = ["S3ObjectSource", "S3Prefix", "list_s3_objects", "key_matcher"]

logger = logging.getLogger(__name__)


def key_matcher(expression: str | None) -> Callable[[str], bool]:
    """
    Build a key predicate from a ``suffix:<text>`` or ``regexp:<pattern>``
    expression. None matches every key.

    Raises:
        ConfigurationError: For an unknown matcher kind or a bad pattern
    """
    if not expression:
        return lambda key: True
    kind, _, value = expression.partition(":")
    if kind == "suffix":
        return lambda key: key.endswith(value)
    if kind == "regexp":
        try:
            pattern = validate_regex_pattern(value)
        except SecurityValidationError as e:
            raise ConfigurationError(
                f"invalid key pattern '{value}': {e.message}", config_key="location"
            )
        return lambda key: pattern.search(key) is not None
    raise ConfigurationError(
        f"unknown key matcher '{kind}', expected suffix:<text> or regexp:<pattern>",
        config_key="location",
    )


@dataclass
class S3Prefix:
    """A bucket plus key prefix to expand into objects."""
    bucket: str
    prefix: str = ""
    matcher: str | None = None


def list_s3_objects(client: Any, target: S3Prefix) -> list[str]:
    """
    List the non-empty object keys under a prefix that pass the matcher.

    Raises:
        FetchError: If listing fails
    """
    matches = key_matcher(target.matcher)
    keys = []
    try:
        paginator = client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=target.bucket, Prefix=target.prefix):
            for obj in page.get("Contents", []):
                if obj.get("Size", 0) == 0:
                    continue
                if matches(obj["Key"]):
                    keys.append(obj["Key"])
    except (BotoCoreError, ClientError) as e:
        raise FetchError(
            f"cannot list s3://{target.bucket}/{target.prefix}: {e}",
            location=f"s3:{target.bucket}/{target.prefix}",
        ) from e
    return keys


class S3ObjectSource:
    """
    Streaming source for a single S3 object.

    Example:
        source = S3ObjectSource("my-logs", "alb/2024/03/01/file.log.gz")
        for line in source.read_lines():
            process(line)
    """

    def __init__(
        self,
        bucket: str,
        key: str,
        client: Any = None,
        encoding: str = "utf-8",
        errors: str = "replace",
    ):
        self.bucket = bucket
        self.key = key
        self.encoding = encoding
        self.errors = errors
        self._client = client
        self._line_count = 0

    @property
    def location(self) -> str:
        return f"s3:{self.bucket}/{self.key}"

    def read_lines(self) -> Iterator[str]:
        """
        Read lines from the object, yielding one at a time.

        Raises:
            FetchError: If the object cannot be fetched or decompressed
        """
        logger.info("opening %s", self.location)
        client = self._client or boto3.client("s3")
        try:
            response = client.get_object(Bucket=self.bucket, Key=self.key)
            body = response["Body"]
            if is_gzip_name(self.key):
                raw_lines = gzip.GzipFile(fileobj=body)
            else:
                raw_lines = body.iter_lines()
            for raw in raw_lines:
                self._line_count += 1
                yield raw.decode(self.encoding, errors=self.errors).rstrip("\n\r")
        except (BotoCoreError, ClientError, OSError, EOFError, zlib.error) as e:
            raise FetchError(f"cannot read {self.location}: {e}", location=self.location) from e

    def metadata(self) -> dict[str, str]:
        """Get source metadata."""
        return {
            "source_type": "s3",
            "path": self.location,
            "name": self.key.rsplit("/", 1)[-1],
            "compressed": str(is_gzip_name(self.key)),
            "lines_read": str(self._line_count),
        }
