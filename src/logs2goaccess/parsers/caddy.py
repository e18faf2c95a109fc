"""
Caddy structured (JSON) access log parser.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from logs2goaccess.core.base import BaseParser
from logs2goaccess.core.models import AccessRecord, ParseResult
from logs2goaccess.core.security import validate_json_depth, SecurityValidationError
from logs2goaccess.parsers.utils import Headers, media_type, strip_port

__all__ = ["CaddyParser"]


TLS_VERSIONS = {
    0x0300: "SSLv3",
    0x0301: "TLSv1",
    0x0302: "TLSv1.1",
    0x0303: "TLSv1.2",
    0x0304: "TLSv1.3",
}

CIPHER_SUITES = {
    0x0005: "TLS_RSA_WITH_RC4_128_SHA",
    0x000A: "TLS_RSA_WITH_3DES_EDE_CBC_SHA",
    0x002F: "TLS_RSA_WITH_AES_128_CBC_SHA",
    0x0035: "TLS_RSA_WITH_AES_256_CBC_SHA",
    0x003C: "TLS_RSA_WITH_AES_128_CBC_SHA256",
    0x009C: "TLS_RSA_WITH_AES_128_GCM_SHA256",
    0x009D: "TLS_RSA_WITH_AES_256_GCM_SHA384",
    0xC009: "TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA",
    0xC00A: "TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA",
    0xC013: "TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA",
    0xC014: "TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA",
    0xC023: "TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA256",
    0xC027: "TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA256",
    0xC02B: "TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256",
    0xC02C: "TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384",
    0xC02F: "TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256",
    0xC030: "TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384",
    0xCCA8: "TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305_SHA256",
    0xCCA9: "TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305_SHA256",
    0x1301: "TLS_AES_128_GCM_SHA256",
    0x1302: "TLS_AES_256_GCM_SHA384",
    0x1303: "TLS_CHACHA20_POLY1305_SHA256",
}


def _tls_name(table: dict[int, str], value: Any) -> str:
    if not isinstance(value, int) or isinstance(value, bool) or value == 0:
        return ""
    return table.get(value, f"0x{value:04X}")


def _text(value: Any) -> str:
    """Return a JSON string field, with null and non-string values as empty."""
    return value if isinstance(value, str) else ""


class CaddyParser(BaseParser):
    """
    Parse Caddy v2 JSON access logs.

    Example:
        {"ts": 1700000000.123, "request": {"remote_addr": "10.0.0.1:5123",
         "proto": "HTTP/2.0", "method": "GET", "host": "example.com",
         "uri": "/index.html", "headers": {"User-Agent": ["curl/8.0"]}},
         "duration": 0.0042, "size": 612, "status": 200,
         "resp_headers": {"Content-Type": ["text/html; charset=utf-8"]}}

    Required fields are ``ts``, ``status``, ``size`` and ``request``. The
    client address is taken from the connection, then overridden by the last
    X-Forwarded-For entry when that header is present.
    """

    name = "caddy"
    supported_formats = ["caddy", "structured", "json"]
    description = "Caddy JSON access log"

    REQUIRED_FIELDS = ("ts", "status", "size", "request")

    def parse_line(self, line: str) -> ParseResult:
        """Parse a single Caddy access log line."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise self._error(f"JSON decode error: {e}", line)
        except RecursionError:
            raise self._error("JSON nesting too deep to decode", line)

        if not isinstance(data, dict):
            raise self._error("JSON is not an object", line)

        try:
            validate_json_depth(data)
        except SecurityValidationError as e:
            raise self._error(f"JSON security validation failed: {e.message}", line)

        missing = [f for f in self.REQUIRED_FIELDS if f not in data]
        if missing:
            raise self._error(f"missing required field(s): {', '.join(missing)}", line)

        request = data["request"]
        if not isinstance(request, dict):
            raise self._error("request is not an object", line)

        ts = self._parse_float(data["ts"], "ts", line)
        try:
            timestamp = datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise self._error(f"ts out of range: {ts!r}", line)

        status = self._parse_int(data["status"], "status", line)
        size = self._parse_int(data["size"], "size", line)
        duration = self._parse_float(data.get("duration", 0), "duration", line)

        try:
            req_headers = Headers(request.get("headers"))
            resp_headers = Headers(data.get("resp_headers"))
        except ValueError as e:
            raise self._error(str(e), line)

        tls = request.get("tls") or {}
        if not isinstance(tls, dict):
            tls = {}

        record = AccessRecord(
            timestamp=timestamp,
            vhost=_text(request.get("host")),
            username=_text(data.get("user_id")),
            client_ip=self._client_ip(request, req_headers),
            method=_text(request.get("method")),
            url=_text(request.get("uri")),
            protocol=_text(request.get("proto")),
            status=status,
            size=size,
            referer=req_headers.get("referer"),
            user_agent=req_headers.get("user-agent"),
            tls_protocol=_tls_name(TLS_VERSIONS, tls.get("version")),
            tls_cipher=_tls_name(CIPHER_SUITES, tls.get("cipher_suite")),
            content_type=media_type(resp_headers.get("content-type")),
            duration=timedelta(seconds=duration),
        )
        return ParseResult.ok(record)

    def can_parse(self, sample: list[str]) -> float:
        """Determine confidence for parsing Caddy access logs."""
        lines = [line.strip() for line in sample if line.strip()]
        if not lines:
            return 0.0

        matches = 0
        for line in lines:
            try:
                data = json.loads(line)
            except (json.JSONDecodeError, RecursionError):
                continue
            if isinstance(data, dict) and isinstance(data.get("request"), dict):
                matches += 1 if all(f in data for f in self.REQUIRED_FIELDS) else 0.5

        return matches / len(lines)

    def _client_ip(self, request: dict[str, Any], headers: Headers) -> str:
        """Resolve the client address, preferring the newest forwarded entry."""
        forwarded = [p.strip() for p in headers.joined("x-forwarded-for").split(",")]
        forwarded = [p for p in forwarded if p]
        if forwarded:
            return forwarded[-1]

        remote_ip = _text(request.get("remote_ip"))
        if remote_ip:
            return remote_ip

        remote_addr = _text(request.get("remote_addr"))
        try:
            return strip_port(remote_addr)
        except ValueError:
            return remote_addr
