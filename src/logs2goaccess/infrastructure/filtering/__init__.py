"""
Record filtering for logs2goaccess.
"""

from logs2goaccess.infrastructure.filtering.chain import (
    FilterChain,
    FilterConfig,
    split_prefixes,
    parse_date_bound,
)
from logs2goaccess.infrastructure.filtering.steps import (
    RecordFilter,
    IncludeHostPrefixFilter,
    ExcludeURLPrefixFilter,
    ExcludeClientPrefixFilter,
    DateAfterFilter,
    DateBeforeFilter,
)

__all__ = [
    "FilterChain",
    "FilterConfig",
    "split_prefixes",
    "parse_date_bound",
    "RecordFilter",
    "IncludeHostPrefixFilter",
    "ExcludeURLPrefixFilter",
    "ExcludeClientPrefixFilter",
    "DateAfterFilter",
    "DateBeforeFilter",
]
