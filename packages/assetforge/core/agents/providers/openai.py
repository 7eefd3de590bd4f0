"""OpenAI provider implementation."""

from __future__ import annotations

import json
import logging
import re
import threading
from typing import Any

from openai import AsyncOpenAI

from assetforge.core.agents.providers.base import (
    LLMResponse,
    ProviderType,
    ResponseMetadata,
    TokenUsage,
)
from assetforge.core.agents.providers.errors import LLMProviderError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")

# o-series and gpt-5 reasoning models reject temperature
_REASONING_MODEL = re.compile(r"^(o\d|gpt-5)")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapped around a JSON payload.

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    return _CODE_FENCE.sub("", text).strip()


def is_reasoning_model(model: str) -> bool:
    """True for model families that do not accept ``temperature``.

    Example:
        >>> is_reasoning_model("o4-mini"), is_reasoning_model("gpt-4.1-mini")
        (True, False)
    """
    return bool(_REASONING_MODEL.match(model.lower()))


class OpenAIProvider:
    """OpenAI provider on top of the Responses API.

    Responsibilities:
    - Single async call per request (no retries)
    - Structured output via ``json_schema`` when a schema is supplied
    - JSON parsing into plain dicts
    - Thread-safe token tracking
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (uses env var if not provided)
            timeout: Request timeout in seconds
            client: Pre-built async client (tests inject a mock here)
        """
        # max_retries=0: one attempt, the caller owns the fallback
        self._async_client = client or AsyncOpenAI(
            api_key=api_key, timeout=timeout, max_retries=0
        )

        self._token_lock = threading.Lock()
        self._total_tokens = TokenUsage()

    @property
    def provider_type(self) -> ProviderType:
        """Provider type identifier."""
        return ProviderType.OPENAI

    def get_token_usage(self) -> TokenUsage:
        """Get cumulative token usage (thread-safe)."""
        with self._token_lock:
            return self._total_tokens

    def reset_token_tracking(self) -> None:
        """Reset token tracking (thread-safe)."""
        with self._token_lock:
            self._total_tokens = TokenUsage()

    def _update_token_usage(self, usage: TokenUsage) -> None:
        with self._token_lock:
            self._total_tokens = self._total_tokens + usage

    @staticmethod
    def _build_text_format(
        response_schema: dict[str, Any] | None, schema_name: str
    ) -> dict[str, Any]:
        if response_schema is None:
            return {"format": {"type": "json_object"}}
        return {
            "format": {
                "type": "json_schema",
                "name": schema_name,
                "schema": response_schema,
                "strict": True,
            }
        }

    async def generate_json(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float | None = None,
        response_schema: dict[str, Any] | None = None,
        schema_name: str = "response",
    ) -> LLMResponse:
        """Generate JSON response asynchronously.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier
            temperature: Sampling temperature
            response_schema: Optional JSON schema enforced server-side
            schema_name: Name attached to the schema in the request

        Returns:
            LLMResponse with parsed JSON content and metadata

        Raises:
            LLMProviderError: On unrecoverable errors
        """
        try:
            request_params: dict[str, Any] = {
                "model": model,
                "input": messages,
                "text": self._build_text_format(response_schema, schema_name),
            }

            if temperature is not None and not is_reasoning_model(model):
                request_params["temperature"] = temperature

            response = await self._async_client.responses.create(**request_params)

            content = response.output_text
            if not content:
                raise LLMProviderError("Empty response from OpenAI API")

            try:
                response_data = json.loads(strip_code_fences(content))
            except json.JSONDecodeError as e:
                logger.error("Failed to parse JSON response: %s", e)
                raise LLMProviderError(f"Failed to parse JSON response: {e}") from e

            token_usage = TokenUsage()
            usage = getattr(response, "usage", None)
            if usage:
                token_usage = TokenUsage(
                    prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
                    completion_tokens=getattr(usage, "output_tokens", 0) or 0,
                    total_tokens=getattr(usage, "total_tokens", 0) or 0,
                )
                self._update_token_usage(token_usage)

            return LLMResponse(
                content=response_data,
                metadata=ResponseMetadata(
                    response_id=getattr(response, "id", None),
                    token_usage=token_usage,
                    model=model,
                ),
            )

        except LLMProviderError:
            raise
        except Exception as e:
            logger.error("OpenAI provider error: %s", e)
            raise LLMProviderError(f"Provider error: {e}") from e
