"""
AWS CloudFront standard (tab-separated) access log parser.
"""

import re
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

from logs2goaccess.core.base import BaseParser
from logs2goaccess.core.models import AccessRecord, ParseResult
from logs2goaccess.parsers.utils import dash_to_empty, media_type

__all__ = ["CloudFrontParser", "strict_unquote"]


_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def strict_unquote(value: str) -> str:
    """
    Percent-decode a value, failing on malformed escapes.

    Line breaks in the decoded text are replaced with a literal ``\\n`` so
    the value stays on one output line.

    Raises:
        ValueError: If an escape is malformed or the bytes are not UTF-8
    """
    if _BAD_PERCENT.search(value):
        raise ValueError(f"invalid percent escape in {value!r}")
    decoded = unquote(value, encoding="utf-8", errors="strict")
    return decoded.replace("\n", "\\n")


class CloudFrontParser(BaseParser):
    """
    Parse AWS CloudFront standard access logs.

    Tab-separated fields:
        0 date, 1 time, 2 x-edge-location, 3 sc-bytes, 4 c-ip, 5 cs-method,
        6 cs(Host), 7 cs-uri-stem, 8 sc-status, 9 cs(Referer),
        10 cs(User-Agent), 11 cs-uri-query, 12 cs(Cookie),
        13 x-edge-result-type, 14 x-edge-request-id, 15 x-host-header,
        16 cs-protocol, 17 cs-bytes, 18 time-taken, 19 x-forwarded-for,
        20 ssl-protocol, 21 ssl-cipher, 22 x-edge-response-result-type,
        23 cs-protocol-version, 24 fle-status, 25 fle-encrypted-fields,
        26 c-port, 27 time-to-first-byte, 28 x-edge-detailed-result-type,
        29 sc-content-type, 30 sc-content-len, 31 sc-range-start,
        32 sc-range-end

    Lines starting with ``#`` (``#Version``, ``#Fields``) are skipped.
    CloudFront writes date and time in UTC.
    """

    name = "aws:cloudfront"
    supported_formats = ["aws:cloudfront", "tab-separated", "tsv", "cloudfront", "aws-cloudfront"]
    description = "AWS CloudFront standard access log"

    MIN_FIELDS = 19
    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

    def parse_line(self, line: str) -> ParseResult:
        """Parse a single CloudFront access log line."""
        if line.startswith("#"):
            return ParseResult.skip("comment line")

        fields = line.split("\t")
        if len(fields) < self.MIN_FIELDS:
            raise self._error(
                f"expected at least {self.MIN_FIELDS} fields, got {len(fields)}", line
            )

        try:
            timestamp = datetime.strptime(
                f"{fields[0]} {fields[1]}", self.TIMESTAMP_FORMAT
            ).replace(tzinfo=timezone.utc)
        except ValueError:
            raise self._error(f"invalid timestamp: {fields[0]} {fields[1]}", line)

        size = self._parse_int(fields[3], "sc-bytes", line)
        status = self._parse_int(fields[8], "sc-status", line)
        time_taken = self._parse_float(fields[18], "time-taken", line)

        url = fields[7]
        query = fields[11]
        if query not in ("-", ""):
            url = f"{url}?{query}"

        try:
            user_agent = strict_unquote(dash_to_empty(fields[10]))
            content_type = strict_unquote(dash_to_empty(self._field(fields, 29)))
        except ValueError as e:
            return ParseResult.skip(f"undecodable field: {e}")

        record = AccessRecord(
            timestamp=timestamp,
            vhost=dash_to_empty(fields[15]),
            client_ip=fields[4],
            method=fields[5],
            url=url,
            protocol=dash_to_empty(self._field(fields, 23)),
            status=status,
            size=size,
            referer=dash_to_empty(fields[9]),
            user_agent=user_agent,
            tls_protocol=dash_to_empty(self._field(fields, 20)),
            tls_cipher=dash_to_empty(self._field(fields, 21)),
            content_type=media_type(content_type) if content_type else "",
            duration=timedelta(seconds=time_taken),
        )
        return ParseResult.ok(record)

    def can_parse(self, sample: list[str]) -> float:
        """Determine confidence for parsing CloudFront access logs."""
        lines = [line.rstrip("\r\n") for line in sample if line.strip()]
        if not lines:
            return 0.0

        matches = 0
        for line in lines:
            if line.startswith("#Version") or line.startswith("#Fields"):
                matches += 1
                continue
            fields = line.split("\t")
            if len(fields) >= self.MIN_FIELDS and fields[8].isdigit():
                matches += 1
        return matches / len(lines)

    @staticmethod
    def _field(fields: list[str], index: int) -> str:
        return fields[index] if index < len(fields) else ""
