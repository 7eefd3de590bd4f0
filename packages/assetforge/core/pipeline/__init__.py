"""Generation result types."""

from assetforge.core.pipeline.result import (
    GenerationResult,
    failure_result,
    success_result,
)

__all__ = [
    "GenerationResult",
    "success_result",
    "failure_result",
]
