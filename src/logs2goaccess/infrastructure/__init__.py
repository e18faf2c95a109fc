"""
Infrastructure layer for logs2goaccess.

Contains adapters that implement the ports defined in the application layer.
These connect the conversion pipeline to files, cloud services and output
streams.
"""

from logs2goaccess.infrastructure.sources import (
    FileLineSource,
    StdinLineSource,
    S3ObjectSource,
    CloudWatchLogsSource,
    MultiLineSource,
    parse_location,
)
from logs2goaccess.infrastructure.filtering import FilterChain, FilterConfig
from logs2goaccess.infrastructure.normalization import (
    NormalizationPipeline,
    URLRewriteNormalizer,
)
from logs2goaccess.infrastructure.sinks import StreamSink
from logs2goaccess.infrastructure.stats import StatsReporter

__all__ = [
    # Sources
    "FileLineSource",
    "StdinLineSource",
    "S3ObjectSource",
    "CloudWatchLogsSource",
    "MultiLineSource",
    "parse_location",
    # Filtering
    "FilterChain",
    "FilterConfig",
    # Normalization
    "NormalizationPipeline",
    "URLRewriteNormalizer",
    # Output
    "StreamSink",
    "StatsReporter",
]
