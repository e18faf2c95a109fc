"""
Filter chain construction.

Filters are combined with logical AND, evaluated left to right in a fixed
order: include-host, exclude-url, exclude-client-ip, date-after,
date-before. A filter only joins the chain when its configuration is set.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from dateutil import parser as dateutil_parser

from logs2goaccess.core.exceptions import ConfigurationError
from logs2goaccess.core.models import AccessRecord
from logs2goaccess.infrastructure.filtering.steps import (
    DateAfterFilter,
    DateBeforeFilter,
    ExcludeClientPrefixFilter,
    ExcludeURLPrefixFilter,
    IncludeHostPrefixFilter,
    RecordFilter,
)

__all__ = ["FilterChain", "FilterConfig", "split_prefixes", "parse_date_bound"]

logger = logging.getLogger(__name__)


def split_prefixes(value: str | None) -> list[str]:
    """Split a comma separated option value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_date_bound(value: str, config_key: str) -> datetime:
    """
    Parse a user supplied date bound; naive values are taken as UTC.

    Raises:
        ConfigurationError: If the value is not a date
    """
    try:
        bound = dateutil_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise ConfigurationError(f"invalid date '{value}': {e}", config_key=config_key)
    if bound.tzinfo is None:
        bound = bound.replace(tzinfo=timezone.utc)
    return bound


class FilterChain:
    """
    Ordered AND-combination of record filters.

    An empty chain accepts every record.
    """

    def __init__(self, filters: list[RecordFilter] | None = None):
        self.filters = list(filters or [])

    def accepts(self, record: AccessRecord) -> bool:
        """Return True if every filter keeps the record."""
        rejected = self.rejected_by(record)
        if rejected is not None:
            logger.debug("record %s %s rejected by %s", record.vhost, record.url, rejected.name)
            return False
        return True

    def rejected_by(self, record: AccessRecord) -> RecordFilter | None:
        """Return the first filter rejecting the record, or None."""
        for f in self.filters:
            if not f.accepts(record):
                return f
        return None

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"FilterChain({self.filters!r})"


@dataclass
class FilterConfig:
    """User facing filter settings."""
    include_host_prefixes: list[str] = field(default_factory=list)
    exclude_url_prefixes: list[str] = field(default_factory=list)
    exclude_client_prefixes: list[str] = field(default_factory=list)
    date_after: datetime | None = None
    date_before: datetime | None = None

    def build(self) -> FilterChain:
        """Build the filter chain in its fixed evaluation order."""
        filters: list[RecordFilter] = []
        if self.include_host_prefixes:
            filters.append(IncludeHostPrefixFilter(self.include_host_prefixes))
        if self.exclude_url_prefixes:
            filters.append(ExcludeURLPrefixFilter(self.exclude_url_prefixes))
        if self.exclude_client_prefixes:
            filters.append(ExcludeClientPrefixFilter(self.exclude_client_prefixes))
        if self.date_after is not None:
            filters.append(DateAfterFilter(self.date_after))
        if self.date_before is not None:
            filters.append(DateBeforeFilter(self.date_before))
        return FilterChain(filters)
