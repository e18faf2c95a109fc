"""
Record filter implementations.

Each filter answers one question about a record; True means keep.
"""

from datetime import datetime, timezone

from logs2goaccess.core.models import AccessRecord

__all__ = [
    "RecordFilter",
    "IncludeHostPrefixFilter",
    "ExcludeURLPrefixFilter",
    "ExcludeClientPrefixFilter",
    "DateAfterFilter",
    "DateBeforeFilter",
]


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class RecordFilter:
    """Base class for filters; subclasses implement accepts()."""

    name: str = "filter"

    def accepts(self, record: AccessRecord) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _PrefixFilter(RecordFilter):
    def __init__(self, prefixes: list[str]):
        if not prefixes:
            raise ValueError(f"{type(self).__name__} requires at least one prefix")
        self.prefixes = tuple(prefixes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.prefixes)!r})"


class IncludeHostPrefixFilter(_PrefixFilter):
    """Keep records whose virtual host starts with any of the prefixes."""

    name = "include_host_prefix"

    def accepts(self, record: AccessRecord) -> bool:
        return record.vhost.startswith(self.prefixes)


class ExcludeURLPrefixFilter(_PrefixFilter):
    """Drop records whose URL starts with any of the prefixes."""

    name = "exclude_url_prefix"

    def accepts(self, record: AccessRecord) -> bool:
        return not record.url.startswith(self.prefixes)


class ExcludeClientPrefixFilter(_PrefixFilter):
    """Drop records whose client address starts with any of the prefixes."""

    name = "exclude_client_prefix"

    def accepts(self, record: AccessRecord) -> bool:
        return not record.client_ip.startswith(self.prefixes)


class DateAfterFilter(RecordFilter):
    """Keep records strictly after a point in time."""

    name = "date_after"

    def __init__(self, after: datetime):
        self.after = _aware(after)

    def accepts(self, record: AccessRecord) -> bool:
        return record.timestamp > self.after

    def __repr__(self) -> str:
        return f"DateAfterFilter({self.after.isoformat()})"


class DateBeforeFilter(RecordFilter):
    """Keep records strictly before a point in time."""

    name = "date_before"

    def __init__(self, before: datetime):
        self.before = _aware(before)

    def accepts(self, record: AccessRecord) -> bool:
        return record.timestamp < self.before

    def __repr__(self) -> str:
        return f"DateBeforeFilter({self.before.isoformat()})"
