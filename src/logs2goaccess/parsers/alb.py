"""
AWS Application Load Balancer access log parser.
"""

import re
from datetime import timedelta
from urllib.parse import quote, urlsplit

from logs2goaccess.core.base import BaseParser
from logs2goaccess.core.models import AccessRecord, ParseResult
from logs2goaccess.parsers.utils import dash_to_empty, strip_port

__all__ = ["ALBParser", "split_words_with_quotes"]


# Characters kept verbatim when re-escaping a URL path
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"

_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def split_words_with_quotes(text: str) -> list[str]:
    """
    Split a line on spaces, keeping double-quoted runs together.

    A token that starts with a double quote ends at the next double quote;
    the quotes are dropped and embedded spaces preserved. There is no escape
    handling. An unterminated quoted token runs to the end of the line.

        >>> split_words_with_quotes('a "b c" d')
        ['a', 'b c', 'd']
    """
    tokens: list[str] = []
    i = 0
    n = len(text)
    while True:
        while i < n and text[i] == " ":
            i += 1
        if i >= n:
            break
        if text[i] == '"':
            end = text.find('"', i + 1)
            if end < 0:
                tokens.append(text[i + 1:])
                break
            tokens.append(text[i + 1:end])
        else:
            end = text.find(" ", i)
            if end < 0:
                tokens.append(text[i:])
                break
            tokens.append(text[i:end])
        i = end + 1
    return tokens


def escaped_path_and_query(raw_url: str) -> str:
    """
    Return the escaped path of a URL, with ``?query`` appended when present.

    Raises:
        ValueError: If the URL is malformed
    """
    if _CONTROL_CHARS.search(raw_url):
        raise ValueError("invalid control character in URL")
    parts = urlsplit(raw_url)
    # accessing .port validates it
    parts.port
    if _BAD_PERCENT.search(parts.path) or _BAD_PERCENT.search(parts.query):
        raise ValueError(f"invalid percent escape in URL {raw_url!r}")

    path = quote(parts.path, safe=_PATH_SAFE) or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path


class ALBParser(BaseParser):
    """
    Parse AWS Application Load Balancer access logs.

    Positional fields (space separated, some quoted):
        0 type, 1 time, 2 elb, 3 client:port, 4 target:port,
        5 request_processing_time, 6 target_processing_time,
        7 response_processing_time, 8 elb_status_code, 9 target_status_code,
        10 received_bytes, 11 sent_bytes, 12 "request", 13 "user_agent",
        14 ssl_cipher, 15 ssl_protocol, 16 target_group_arn, 17 "trace_id",
        18 "domain_name", ...

    Example:
        https 2024-03-01T12:00:00.123456Z app/my-lb/50dc6c495c0c9188
        10.0.0.1:2817 10.0.0.2:80 0.000 0.001 0.000 200 200 34 366
        "GET https://example.com:443/path?x=1 HTTP/1.1" "curl/8.0"
        ECDHE-RSA-AES128-GCM-SHA256 TLSv1.2 arn:aws:... "Root=1-..."
        "example.com" ...
    """

    name = "aws:alb"
    supported_formats = ["aws:alb", "delimited", "alb", "aws-alb", "aws:elb"]
    description = "AWS Application Load Balancer access log"

    MIN_FIELDS = 19

    def parse_line(self, line: str) -> ParseResult:
        """Parse a single ALB access log line."""
        fields = split_words_with_quotes(line)
        if len(fields) < self.MIN_FIELDS:
            raise self._error(
                f"expected at least {self.MIN_FIELDS} fields, got {len(fields)}", line
            )

        timestamp = self._parse_iso_timestamp(fields[1], line)

        try:
            client_ip = strip_port(fields[3])
        except ValueError as e:
            raise self._error(f"invalid client address: {e}", line)

        request_parts = fields[12].split(" ")
        if len(request_parts) < 2:
            return ParseResult.skip(f"malformed request line: {fields[12]!r}")
        try:
            url = escaped_path_and_query(request_parts[1])
        except ValueError as e:
            return ParseResult.skip(f"unparsable request URL: {e}")

        status = self._parse_int(fields[8], "elb_status_code", line)
        size = self._parse_int(fields[11], "sent_bytes", line)
        duration = self._sum_times(fields[5:8], line)

        record = AccessRecord(
            timestamp=timestamp,
            vhost=dash_to_empty(fields[18]),
            client_ip=client_ip,
            method=request_parts[0],
            url=url,
            protocol=request_parts[2] if len(request_parts) > 2 else "",
            status=status,
            size=size,
            user_agent=dash_to_empty(fields[13]),
            tls_protocol=dash_to_empty(fields[15]),
            tls_cipher=dash_to_empty(fields[14]),
            duration=duration,
        )
        return ParseResult.ok(record)

    def can_parse(self, sample: list[str]) -> float:
        """Determine confidence for parsing ALB access logs."""
        lines = [line.strip() for line in sample if line.strip()]
        if not lines:
            return 0.0

        matches = 0
        for line in lines:
            fields = split_words_with_quotes(line)
            if (
                len(fields) >= self.MIN_FIELDS
                and fields[0] in ("http", "https", "h2", "grpcs", "ws", "wss")
                and fields[8].isdigit()
            ):
                matches += 1
        return matches / len(lines)

    def _sum_times(self, values: list[str], line: str) -> timedelta:
        """
        Sum the three processing times reported in seconds.

        ALB writes -1 for a component when the request never reached a
        target; such components count as zero.
        """
        seconds = 0.0
        for value in values:
            parsed = self._parse_float(value, "processing_time", line)
            if parsed > 0:
                seconds += parsed
        return timedelta(seconds=seconds)
