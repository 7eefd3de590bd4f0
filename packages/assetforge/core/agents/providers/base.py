"""Base types and protocol for LLM providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class ProviderType(str, Enum):
    """Supported provider types."""

    OPENAI = "openai"


@dataclass(frozen=True)
class TokenUsage:
    """Standardized token usage."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class ResponseMetadata:
    """Standardized response metadata."""

    response_id: str | None = None
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    model: str | None = None


@dataclass(frozen=True)
class LLMResponse:
    """Standardized LLM response."""

    content: Any  # Parsed JSON dict
    metadata: ResponseMetadata


class LLMProvider(Protocol):
    """Generic protocol for structured-inference providers.

    Implementations make exactly one request per call. Retrying is the
    caller's decision; the asset pipeline never retries.
    """

    @property
    def provider_type(self) -> ProviderType:
        """Provider type identifier."""
        ...

    async def generate_json(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float | None = None,
        response_schema: dict[str, Any] | None = None,
        schema_name: str = "response",
    ) -> LLMResponse:
        """Generate a JSON response from messages.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier
            temperature: Sampling temperature
            response_schema: Optional JSON schema the server must enforce
            schema_name: Name attached to the schema in the request

        Returns:
            LLMResponse with parsed JSON content and metadata

        Raises:
            LLMProviderError: On any request, transport or parsing error
        """
        ...

    def get_token_usage(self) -> TokenUsage:
        """Get cumulative token usage across all calls."""
        ...
