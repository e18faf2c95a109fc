"""
Progress statistics for logs2goaccess.
"""

from logs2goaccess.infrastructure.stats.reporter import StatsReporter, format_stats

__all__ = ["StatsReporter", "format_stats"]
