"""
Pytest fixtures for logs2goaccess tests.
"""

import io
import json
from datetime import datetime, timedelta, timezone

import pytest

from logs2goaccess.core.models import AccessRecord


# Sample log lines for each format

@pytest.fixture
def caddy_line() -> str:
    """A Caddy JSON access log line behind two proxies."""
    return json.dumps({
        "level": "info",
        "ts": 1709294400.5,
        "logger": "http.log.access",
        "msg": "handled request",
        "request": {
            "remote_ip": "10.0.0.1",
            "remote_port": "5123",
            "proto": "HTTP/2.0",
            "method": "GET",
            "host": "www.example.com",
            "uri": "/index.html?a=1",
            "headers": {
                "User-Agent": ["curl/8.0"],
                "Referer": ["https://ref.example/"],
                "X-Forwarded-For": ["203.0.113.1, 198.51.100.2"],
            },
            "tls": {"version": 772, "cipher_suite": 4865},
        },
        "user_id": "alice",
        "duration": 0.0125,
        "size": 612,
        "status": 200,
        "resp_headers": {"Content-Type": ["text/html; charset=utf-8"]},
    })


@pytest.fixture
def alb_line() -> str:
    """An AWS ALB access log line."""
    return (
        'https 2024-03-01T12:00:00.123456Z app/my-lb/50dc6c495c0c9188 '
        '203.0.113.7:2817 10.0.0.2:80 0.001 0.002 0.003 200 200 34 366 '
        '"GET https://www.example.com:443/path?x=1 HTTP/1.1" "curl/8.0" '
        'ECDHE-RSA-AES128-GCM-SHA256 TLSv1.2 '
        'arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/tg/73e2d6bc24d8a067 '
        '"Root=1-58337262-36d228ad5d99923122bbe354" "www.example.com" '
        '"arn:aws:acm:us-east-1:123456789012:certificate/12345678" 0 '
        '2024-03-01T11:59:59.999000Z "forward" "-" "-" "10.0.0.2:80" "200" "-" "-"'
    )


def cloudfront_fields(**overrides: str) -> list[str]:
    """Fields of a CloudFront standard log line, by index."""
    fields = [
        "2024-03-01",                     # 0 date
        "12:00:00",                       # 1 time
        "FRA2-C1",                        # 2 x-edge-location
        "5120",                           # 3 sc-bytes
        "198.51.100.4",                   # 4 c-ip
        "GET",                            # 5 cs-method
        "d111111abcdef8.cloudfront.net",  # 6 cs(Host)
        "/index.html",                    # 7 cs-uri-stem
        "200",                            # 8 sc-status
        "https://www.example.com/",       # 9 cs(Referer)
        "Mozilla/5.0%20(X11;%20Linux%20x86_64)",  # 10 cs(User-Agent)
        "lang=en",                        # 11 cs-uri-query
        "-",                              # 12 cs(Cookie)
        "Hit",                            # 13 x-edge-result-type
        "SOX4xwn4XV6Q4rgb7XiVGOHms_BGlTAC4KyHmureZmBNrjGdRLiNIQ==",  # 14
        "www.example.com",                # 15 x-host-header
        "https",                          # 16 cs-protocol
        "180",                            # 17 cs-bytes
        "0.042",                          # 18 time-taken
        "-",                              # 19 x-forwarded-for
        "TLSv1.3",                        # 20 ssl-protocol
        "TLS_AES_128_GCM_SHA256",         # 21 ssl-cipher
        "Hit",                            # 22 x-edge-response-result-type
        "HTTP/2.0",                       # 23 cs-protocol-version
        "-",                              # 24 fle-status
        "-",                              # 25 fle-encrypted-fields
        "11040",                          # 26 c-port
        "0.042",                          # 27 time-to-first-byte
        "Hit",                            # 28 x-edge-detailed-result-type
        "text/html",                      # 29 sc-content-type
        "5120",                           # 30 sc-content-len
        "-",                              # 31 sc-range-start
        "-",                              # 32 sc-range-end
    ]
    for key, value in overrides.items():
        fields[int(key.lstrip("f"))] = value
    return fields


@pytest.fixture
def cloudfront_line() -> str:
    """A CloudFront standard log line."""
    return "\t".join(cloudfront_fields())


@pytest.fixture
def cloudfront_header() -> list[str]:
    """Header lines CloudFront writes at the top of every log file."""
    return [
        "#Version: 1.0",
        "#Fields: date time x-edge-location sc-bytes c-ip cs-method cs(Host) cs-uri-stem sc-status",
    ]


@pytest.fixture
def sample_record() -> AccessRecord:
    """A fully populated access record."""
    return AccessRecord(
        timestamp=datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc),
        vhost="www.example.com",
        username="alice",
        client_ip="198.51.100.2",
        method="GET",
        url="/index.html?a=1",
        protocol="HTTP/2.0",
        status=200,
        size=612,
        referer="https://ref.example/",
        user_agent="curl/8.0",
        tls_protocol="TLSv1.3",
        tls_cipher="TLS_AES_128_GCM_SHA256",
        content_type="text/html",
        duration=timedelta(milliseconds=12, microseconds=500),
    )


# Test doubles

class ListSource:
    """In-memory line source."""

    def __init__(self, lines: list[str], path: str = "memory"):
        self.lines = lines
        self.path = path
        self.line_number = 0

    def read_lines(self):
        for line in self.lines:
            self.line_number += 1
            yield line

    def metadata(self) -> dict[str, str]:
        return {"path": self.path, "line_number": str(self.line_number)}


class ListSink:
    """Sink collecting records in a list."""

    def __init__(self):
        self.records: list[AccessRecord] = []
        self.flushed = False

    def write(self, record: AccessRecord) -> None:
        self.records.append(record)

    def flush(self) -> None:
        self.flushed = True


class FakeBody(io.BytesIO):
    """Stand-in for botocore's StreamingBody."""

    def iter_lines(self):
        for line in self.getvalue().splitlines():
            yield line


class FakePaginator:
    def __init__(self, pages: list[dict], calls: list[dict]):
        self.pages = pages
        self.calls = calls

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        yield from self.pages


class FakeS3Client:
    """S3 client serving objects from a dict of key -> bytes."""

    def __init__(self, bucket: str, objects: dict[str, bytes]):
        self.bucket = bucket
        self.objects = objects
        self.list_calls: list[dict] = []
        self.fetched: list[str] = []

    def get_paginator(self, operation: str) -> FakePaginator:
        assert operation == "list_objects_v2"
        contents = [
            {"Key": key, "Size": len(data)} for key, data in sorted(self.objects.items())
        ]
        return FakePaginator([{"Contents": contents}], self.list_calls)

    def get_object(self, Bucket: str, Key: str) -> dict:
        assert Bucket == self.bucket
        self.fetched.append(Key)
        return {"Body": FakeBody(self.objects[Key])}


class FakeLogsClient:
    """CloudWatch Logs client serving a fixed list of event messages."""

    def __init__(self, messages: list[str], page_size: int = 2):
        self.messages = messages
        self.page_size = page_size
        self.calls: list[dict] = []

    def get_paginator(self, operation: str) -> FakePaginator:
        assert operation == "filter_log_events"
        pages = [
            {"events": [{"message": m} for m in self.messages[i:i + self.page_size]]}
            for i in range(0, len(self.messages), self.page_size)
        ]
        return FakePaginator(pages, self.calls)
