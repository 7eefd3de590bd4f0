"""Prompt resolution: free text → validated asset parameters.

Sends the prompt to the structured-inference provider with a strict JSON
schema, validates the reply locally, and post-processes it. Every failure
(missing provider, provider error, non-JSON, schema mismatch) is absorbed
here and answered with FALLBACK_PARAMETERS. One attempt, no retry.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from assetforge.core.agents.assets.models import (
    AssetParameters,
    ShapeType,
    normalize_hex_color,
)
from assetforge.core.agents.providers.base import LLMProvider
from assetforge.core.agents.providers.errors import LLMProviderError

logger = logging.getLogger(__name__)

DEFAULT_SCALE: tuple[float, float, float] = (1.0, 1.0, 1.0)

FALLBACK_PARAMETERS = AssetParameters(
    shape=ShapeType.SPHERE,
    color="#cccccc",
    roughness=0.5,
    metalness=0.5,
    scale=DEFAULT_SCALE,
    name="Unknown Object",
)

SYSTEM_INSTRUCTION = """\
You are a 3D procedural engine configuration assistant.
Your job is to translate a user's creative text description into specific 3D parameters \
for a real-time scene.
Analyze the prompt and determine the most appropriate geometric primitive and material \
properties.

Supported Shapes: box, sphere, cylinder, torus, cone, capsule, dodecahedron.
Default to 'box' if unsure.
Scale should be a vector [x, y, z], typically around [1, 1, 1].
Roughness and Metalness are 0.0 to 1.0.
Color should be a hex string.
"""

ASSET_PARAMETERS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "shape": {"type": "string", "enum": [s.value for s in ShapeType]},
        "color": {"type": "string", "description": "Hex color code, e.g. #ff0000"},
        "roughness": {"type": "number"},
        "metalness": {"type": "number"},
        "scale": {
            "type": "array",
            "items": {"type": "number"},
            "description": "Array of 3 numbers for X, Y, Z scale",
        },
        "name": {"type": "string", "description": "A short display name for the asset"},
    },
    "required": ["shape", "color", "roughness", "metalness", "scale", "name"],
    "additionalProperties": False,
}


def _require_number(v: Any) -> Any:
    # bool is an int subclass; JSON true/false is not a number here
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"Expected a number, got {type(v).__name__}")
    return v


class InferencePayload(BaseModel):
    """Client-side mirror of ASSET_PARAMETERS_SCHEMA.

    Any deviation raises ValidationError, which the resolver treats as a
    total failure.
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    shape: ShapeType
    color: str
    roughness: float
    metalness: float
    scale: list[float]
    name: str

    @field_validator("roughness", "metalness", mode="before")
    @classmethod
    def _validate_number(cls, v: Any) -> Any:
        return _require_number(v)

    @field_validator("scale", mode="before")
    @classmethod
    def _validate_scale(cls, v: Any) -> Any:
        if not isinstance(v, list):
            raise ValueError(f"Expected an array, got {type(v).__name__}")
        return [_require_number(item) for item in v]

    @field_validator("color")
    @classmethod
    def _validate_color(cls, v: str) -> str:
        # Empty is left for the assembly default
        return normalize_hex_color(v) if v.strip() else ""


def _clamp_unit(value: float, field_name: str) -> float:
    clamped = min(1.0, max(0.0, value))
    if clamped != value:
        logger.debug("Clamped %s from %s to %s", field_name, value, clamped)
    return clamped


def _normalize_scale(scale: list[float]) -> tuple[float, float, float]:
    if len(scale) != 3 or any(component <= 0 for component in scale):
        logger.debug("Replacing invalid scale %s with %s", scale, DEFAULT_SCALE)
        return DEFAULT_SCALE
    return (float(scale[0]), float(scale[1]), float(scale[2]))


def to_asset_parameters(payload: InferencePayload) -> AssetParameters:
    """Post-process a validated payload into AssetParameters.

    - scale not of length 3 (or not all positive) → [1, 1, 1]
    - roughness / metalness clamped into [0, 1]
    """
    return AssetParameters(
        shape=payload.shape,
        color=payload.color,
        roughness=_clamp_unit(payload.roughness, "roughness"),
        metalness=_clamp_unit(payload.metalness, "metalness"),
        scale=_normalize_scale(payload.scale),
        name=payload.name,
    )


class PromptResolver:
    """Resolve a free-text prompt into AssetParameters.

    Args:
        provider: Structured-inference provider. None means no credentials
            are configured; every call then returns the fallback.
        model: Model identifier passed to the provider.
        temperature: Sampling temperature.
    """

    def __init__(
        self,
        provider: LLMProvider | None,
        *,
        model: str = "gpt-4.1-mini",
        temperature: float | None = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._temperature = temperature

    def build_messages(self, prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "developer", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": f'Analyze this request: "{prompt}"'},
        ]

    async def resolve(self, prompt: str) -> AssetParameters:
        """Resolve a prompt. Never raises for provider or payload problems.

        Args:
            prompt: Non-empty free-text description.

        Returns:
            Resolved AssetParameters, or FALLBACK_PARAMETERS on any failure.

        Raises:
            ValueError: If prompt is blank (caller contract).
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be blank")

        if self._provider is None:
            logger.warning("No inference provider configured, using fallback parameters")
            return FALLBACK_PARAMETERS

        try:
            response = await self._provider.generate_json(
                messages=self.build_messages(prompt),
                model=self._model,
                temperature=self._temperature,
                response_schema=ASSET_PARAMETERS_SCHEMA,
                schema_name="asset_parameters",
            )
            if not isinstance(response.content, dict):
                raise LLMProviderError(
                    f"Expected a JSON object, got {type(response.content).__name__}"
                )
            payload = InferencePayload.model_validate(response.content)
            params = to_asset_parameters(payload)
        except (LLMProviderError, ValidationError) as e:
            logger.warning("Prompt resolution failed, using fallback parameters: %s", e)
            return FALLBACK_PARAMETERS
        except Exception as e:
            logger.warning(
                "Unexpected prompt resolution error, using fallback parameters: %s",
                e,
                exc_info=True,
            )
            return FALLBACK_PARAMETERS

        logger.info("Resolved prompt to %s '%s'", params.shape.value, params.name)
        return params
