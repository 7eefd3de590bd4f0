"""Shared pytest fixtures for AssetForge tests."""

from __future__ import annotations

from io import BytesIO
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from PIL import Image
import pytest

from assetforge.core.agents.assets.image_client import ImagePart
from assetforge.core.agents.assets.models import AccountState, AccountTier
from assetforge.core.agents.providers.base import (
    LLMResponse,
    ProviderType,
    ResponseMetadata,
    TokenUsage,
)

# ============================================================================
# Helpers
# ============================================================================


def make_png_bytes(width: int = 8, height: int = 8) -> bytes:
    """Create a small valid PNG image."""
    img = Image.new("RGB", (width, height), (139, 69, 19))
    buf = BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()


def make_llm_provider(
    content: Any = None,
    side_effect: Exception | None = None,
) -> MagicMock:
    """Build a mock LLMProvider whose generate_json is an AsyncMock."""
    provider = MagicMock()
    provider.provider_type = ProviderType.OPENAI
    provider.get_token_usage.return_value = TokenUsage()
    provider.generate_json = AsyncMock()
    if side_effect is not None:
        provider.generate_json.side_effect = side_effect
    else:
        provider.generate_json.return_value = LLMResponse(
            content=content,
            metadata=ResponseMetadata(model="test-model"),
        )
    return provider


def make_image_provider(
    parts: list[ImagePart] | None = None,
    side_effect: Exception | None = None,
) -> MagicMock:
    """Build a mock ImageProvider whose generate_parts is an AsyncMock."""
    provider = MagicMock()
    provider.generate_parts = AsyncMock()
    if side_effect is not None:
        provider.generate_parts.side_effect = side_effect
    else:
        provider.generate_parts.return_value = (
            parts if parts is not None else [ImagePart("image/png", make_png_bytes())]
        )
    return provider


# ============================================================================
# Payload Fixtures
# ============================================================================


@pytest.fixture
def crate_payload() -> dict[str, Any]:
    """A well-formed inference reply for "a rusty wooden crate"."""
    return {
        "shape": "box",
        "color": "#8B4513",
        "roughness": 0.9,
        "metalness": 0.1,
        "scale": [1, 1, 1],
        "name": "Wooden Crate",
    }


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


# ============================================================================
# Account Fixtures
# ============================================================================


@pytest.fixture
def free_account() -> AccountState:
    return AccountState(tier=AccountTier.FREE, credits=5)


@pytest.fixture
def pro_account() -> AccountState:
    return AccountState(tier=AccountTier.PRO, credits=5)


@pytest.fixture
def empty_account() -> AccountState:
    return AccountState(tier=AccountTier.FREE, credits=0)


# ============================================================================
# Fake Provider Factories
# ============================================================================


@pytest.fixture
def llm_provider_factory():
    """Factory for mock LLM providers (see make_llm_provider)."""
    return make_llm_provider


@pytest.fixture
def image_provider_factory():
    """Factory for mock image providers (see make_image_provider)."""
    return make_image_provider
