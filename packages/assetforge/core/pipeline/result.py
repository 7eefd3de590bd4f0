"""Result types for generation requests.

Immutable result type with success/failure semantics. Failures are carried
in the result rather than raised.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

TOutput = TypeVar("TOutput")


class GenerationResult(BaseModel, Generic[TOutput]):
    """Result of one generation request.

    Attributes:
        success: Whether the request reached READY
        output: Request output (if success=True)
        error: User-facing failure notice (if success=False)
        duration_ms: Wall-clock time spent resolving
        metadata: Optional metadata (segment count, texture flag, ...)

    Example:
        >>> result = await session.generate(request)
        >>> if not result.success:
        ...     print(f"Error: {result.error}")
    """

    success: bool = Field(description="Whether the request reached READY")
    output: TOutput | None = Field(default=None, description="Output (if success)")
    error: str | None = Field(default=None, description="Failure notice (if failure)")
    duration_ms: float = Field(default=0.0, ge=0.0, description="Request duration (ms)")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Optional metadata")

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)


# Helper functions to create results (avoids Pydantic classmethod issues)


def success_result(
    output: TOutput,
    duration_ms: float = 0.0,
    metadata: dict[str, Any] | None = None,
) -> GenerationResult[TOutput]:
    """Create success result."""
    return GenerationResult(
        success=True,
        output=output,
        duration_ms=duration_ms,
        metadata=metadata or {},
    )


def failure_result(
    error: str,
    duration_ms: float = 0.0,
    metadata: dict[str, Any] | None = None,
) -> GenerationResult[Any]:
    """Create failure result."""
    return GenerationResult(
        success=False,
        error=error,
        duration_ms=duration_ms,
        metadata=metadata or {},
    )
