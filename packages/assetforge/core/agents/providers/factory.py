"""Provider factories for the generation pipeline."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from assetforge.core.agents.assets.image_client import ImageProvider, OpenAIImageClient
from assetforge.core.agents.providers.base import LLMProvider
from assetforge.core.agents.providers.openai import OpenAIProvider
from assetforge.core.config.models import AppConfig

logger = logging.getLogger(__name__)


def create_llm_provider(app_config: AppConfig) -> LLMProvider | None:
    """Create the structured-inference provider, or None without credentials."""
    if not app_config.llm.api_key:
        logger.warning("No API key configured for prompt resolution")
        return None

    return OpenAIProvider(
        api_key=app_config.llm.api_key,
        timeout=app_config.llm.timeout_seconds,
    )


def create_image_provider(app_config: AppConfig) -> ImageProvider | None:
    """Create the image-generation provider, or None without credentials."""
    image_config = app_config.image
    if not image_config.api_key:
        logger.warning("No API key configured for texture synthesis")
        return None

    client = AsyncOpenAI(
        api_key=image_config.api_key,
        timeout=image_config.timeout_seconds,
        max_retries=0,
    )
    return OpenAIImageClient(
        client,
        model=image_config.model,
        size=image_config.size,
        output_format=image_config.output_format,
    )
