"""
Normalization pipeline for logs2goaccess.

Each step rewrites records in sequence before they are written out.
"""

from logs2goaccess.infrastructure.normalization.pipeline import NormalizationPipeline
from logs2goaccess.infrastructure.normalization.steps import (
    NormalizationStep,
    URLRewriteNormalizer,
    RULE_SEPARATOR,
)

__all__ = [
    "NormalizationPipeline",
    "NormalizationStep",
    "URLRewriteNormalizer",
    "RULE_SEPARATOR",
]
