"""
Core data models for logs2goaccess.

These dataclasses define the normalized access record and the outcome types
shared by parsers and the conversion pipeline. All parsers convert their
format-specific data into these common models.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

__all__ = [
    "AccessRecord",
    "ParseResult",
    "ConversionStats",
]


@dataclass
class AccessRecord:
    """
    One normalized access log entry, ready for GoAccess.

    Timestamps are always timezone-aware; parsers resolve the zone of their
    source format before constructing a record.
    """
    timestamp: datetime
    vhost: str = ""
    username: str = ""
    client_ip: str = ""
    method: str = ""
    url: str = ""
    protocol: str = ""
    status: int = 0
    size: int = 0
    referer: str = ""
    user_agent: str = ""
    tls_protocol: str = ""
    tls_cipher: str = ""
    content_type: str = ""
    duration: timedelta = field(default_factory=timedelta)

    def __post_init__(self):
        if self.timestamp.tzinfo is None:
            raise ValueError("AccessRecord.timestamp must be timezone-aware")

    @property
    def duration_ms(self) -> int:
        """Request duration in whole milliseconds (truncated)."""
        return self.duration // timedelta(milliseconds=1)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON export."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "vhost": self.vhost,
            "username": self.username,
            "client_ip": self.client_ip,
            "method": self.method,
            "url": self.url,
            "protocol": self.protocol,
            "status": self.status,
            "size": self.size,
            "referer": self.referer,
            "user_agent": self.user_agent,
            "tls_protocol": self.tls_protocol,
            "tls_cipher": self.tls_cipher,
            "content_type": self.content_type,
            "duration_ms": self.duration_ms,
        }


@dataclass
class ParseResult:
    """
    Outcome of parsing a single raw line.

    Either carries a record, or is a soft skip with a reason. Hard errors
    are raised as ParseError instead of being returned.
    """
    record: AccessRecord | None = None
    skipped: bool = False
    reason: str = ""

    @classmethod
    def ok(cls, record: AccessRecord) -> "ParseResult":
        return cls(record=record)

    @classmethod
    def skip(cls, reason: str) -> "ParseResult":
        return cls(skipped=True, reason=reason)


@dataclass
class ConversionStats:
    """Running counters of a conversion run."""
    lines_read: int = 0
    included: int = 0
    skipped: int = 0
    failed: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def lines_per_second(self) -> float:
        elapsed = self.elapsed
        return self.lines_read / elapsed if elapsed > 0 else 0.0

    def snapshot(self) -> "ConversionStats":
        """Return a detached copy for handing to another thread."""
        return ConversionStats(
            lines_read=self.lines_read,
            included=self.included,
            skipped=self.skipped,
            failed=self.failed,
            started_at=self.started_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "lines_read": self.lines_read,
            "included": self.included,
            "skipped": self.skipped,
            "failed": self.failed,
            "elapsed_seconds": round(self.elapsed, 2),
            "lines_per_second": round(self.lines_per_second, 2),
        }
