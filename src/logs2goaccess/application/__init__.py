"""
Application layer for logs2goaccess.

Contains the conversion use case and the ports it is wired through.
This layer coordinates the flow but contains no parsing logic.
"""

from logs2goaccess.application.convert_logs import ConvertLogsUseCase, ErrorPolicy
from logs2goaccess.application.ports import (
    LineSourcePort,
    ParserPort,
    FilterPort,
    NormalizerPort,
    SinkPort,
    StatsReporterPort,
)

__all__ = [
    "ConvertLogsUseCase",
    "ErrorPolicy",
    "LineSourcePort",
    "ParserPort",
    "FilterPort",
    "NormalizerPort",
    "SinkPort",
    "StatsReporterPort",
]
