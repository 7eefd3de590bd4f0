"""Configuration models for AssetForge."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from assetforge.core.agents.assets.models import AccountTier


class LLMConfig(BaseModel):
    """Structured-inference (prompt resolution) configuration."""

    model: str = Field(default="gpt-4.1-mini", description="LLM model name")

    temperature: float = Field(
        default=0.4, ge=0.0, le=2.0, description="LLM temperature (0=deterministic, 2=creative)"
    )

    timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for one LLM call")

    api_key: str | None = Field(
        default=None, repr=False, description="API key (falls back to OPENAI_API_KEY)"
    )


class ImageConfig(BaseModel):
    """Texture (image generation) configuration."""

    enabled: bool = Field(default=True, description="Allow texture synthesis at all")

    model: str = Field(default="gpt-image-1", description="Image generation model name")

    size: str = Field(
        default="1024x1024",
        pattern="^(1024x1024|1024x1536|1536x1024|auto)$",
        description="Requested image size",
    )

    output_format: str = Field(
        default="png", pattern="^(png|jpeg|webp)$", description="Requested encoding"
    )

    timeout_seconds: float = Field(default=120.0, gt=0, description="Timeout for one image call")

    api_key: str | None = Field(
        default=None, repr=False, description="API key (falls back to OPENAI_API_KEY)"
    )


class SessionConfig(BaseModel):
    """Account and session policy.

    Example:
        >>> cfg = SessionConfig()
        >>> cfg.initial_credits
        5
    """

    model_config = ConfigDict(extra="forbid")

    initial_tier: AccountTier = Field(default=AccountTier.FREE, description="Starting tier")

    initial_credits: int = Field(default=5, ge=0, description="Starting credit balance")

    enforce_credits: bool = Field(
        default=True, description="Refuse new generations when the balance is zero"
    )

    generation_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Deadline for one generation request (resolution + texture)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False
    filename: str | None = None


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    output_dir: str = "artifacts"
    llm: LLMConfig = Field(default_factory=LLMConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("config.json")
