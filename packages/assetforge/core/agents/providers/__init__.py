"""LLM provider abstraction for agents."""

from assetforge.core.agents.providers.base import (
    LLMProvider,
    LLMResponse,
    ProviderType,
    ResponseMetadata,
    TokenUsage,
)
from assetforge.core.agents.providers.errors import LLMProviderError
from assetforge.core.agents.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "ResponseMetadata",
    "TokenUsage",
    "LLMProviderError",
    "OpenAIProvider",
]
