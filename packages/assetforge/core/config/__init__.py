"""Configuration management for AssetForge."""

from assetforge.core.config.loader import (
    detect_format,
    get_openai_api_key,
    load_app_config,
    load_config,
)
from assetforge.core.config.models import (
    AppConfig,
    ImageConfig,
    LLMConfig,
    LoggingConfig,
    SessionConfig,
)

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_app_config",
    "get_openai_api_key",
    # Models
    "AppConfig",
    "LLMConfig",
    "ImageConfig",
    "SessionConfig",
    "LoggingConfig",
]
