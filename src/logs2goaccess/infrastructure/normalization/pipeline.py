"""
Normalization pipeline implementation.

Applies normalization steps to each record in sequence.
"""

from logs2goaccess.core.exceptions import L2GError, NormalizationError
from logs2goaccess.core.models import AccessRecord
from logs2goaccess.application.ports import NormalizerPort
from logs2goaccess.infrastructure.normalization.steps import NormalizationStep

__all__ = ["NormalizationPipeline"]


class NormalizationPipeline(NormalizerPort):
    """
    Ordered chain of normalization steps.

    Each step receives the output of the previous one. A failing step
    aborts processing of the record with a NormalizationError; the
    conversion run treats that as fatal.

    Example:
        pipeline = NormalizationPipeline([
            URLRewriteNormalizer([r"^/api/v1/=>/api/"]),
        ])
        record = pipeline.process_one(record)
    """

    def __init__(self, steps: list[NormalizationStep] | None = None):
        self.steps = list(steps or [])
        self._processed_count = 0

    def add_step(self, step: NormalizationStep) -> "NormalizationPipeline":
        """
        Add a step to the pipeline.

        Returns self for chaining.
        """
        self.steps.append(step)
        return self

    def process_one(self, record: AccessRecord) -> AccessRecord:
        """
        Run a single record through every step.

        Raises:
            NormalizationError: If a step fails
        """
        result = record
        for step in self.steps:
            try:
                result = step.normalize(result)
            except L2GError:
                raise
            except Exception as e:
                raise NormalizationError(
                    f"normalization step failed: {e}",
                    step=step.name,
                    url=result.url,
                ) from e
        self._processed_count += 1
        return result

    @property
    def stats(self) -> dict[str, int]:
        """Get processing statistics."""
        return {
            "processed": self._processed_count,
            "steps": len(self.steps),
        }

    def __len__(self) -> int:
        return len(self.steps)
