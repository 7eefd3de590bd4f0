"""Asset generation pipeline models.

Defines the core data models for the generation pipeline:
- ShapeType / DetailLevel / ExportFormat / AccountTier: closed enumerations
- AssetParameters: structured parameters produced by the prompt resolver
- EncodedImage: inline texture payload produced by the texture synthesizer
- AssetDescriptor: the immutable, renderable result of one generation
- GenerationRequest: input to one generation cycle
- AccountState: tier and credit balance
"""

from __future__ import annotations

import base64
import re
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class ShapeType(str, Enum):
    """Primitive shape families the renderer can tessellate."""

    BOX = "box"
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    TORUS = "torus"
    CONE = "cone"
    CAPSULE = "capsule"
    DODECAHEDRON = "dodecahedron"


class DetailLevel(str, Enum):
    """User-facing mesh density selector."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ExportFormat(str, Enum):
    """Export encodings. GLB is the free baseline; OBJ and FBX are Pro."""

    GLB = "glb"
    OBJ = "obj"
    FBX = "fbx"


class AccountTier(str, Enum):
    FREE = "free"
    PRO = "pro"


def normalize_hex_color(value: str) -> str:
    """Normalize a hex color to lower-case ``#rrggbb``.

    Args:
        value: ``#rgb``, ``#rrggbb`` or the same without the leading ``#``.

    Returns:
        Normalized color string.

    Raises:
        ValueError: If value is not a hex color.

    Examples:
        >>> normalize_hex_color("#8B4513")
        '#8b4513'
        >>> normalize_hex_color("ccc")
        '#cccccc'
    """
    match = _HEX_COLOR.match(value.strip())
    if not match:
        raise ValueError(f"Not a hex color: {value!r}")
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


class AssetParameters(BaseModel):
    """Structured asset parameters returned by the prompt resolver.

    Fields are as returned by the inference service after local
    post-processing. Empty ``color``/``name`` are left for the session to
    replace with assembly defaults.

    Attributes:
        shape: Primitive shape family.
        color: Hex color string.
        roughness: Material roughness, clamped to [0, 1].
        metalness: Material metalness, clamped to [0, 1].
        scale: Per-axis scale (x, y, z).
        name: Short display label.
    """

    model_config = ConfigDict(frozen=True)

    shape: ShapeType
    color: str
    roughness: float
    metalness: float
    scale: tuple[float, float, float]
    name: str


class EncodedImage(BaseModel):
    """Inline image payload with its declared MIME type.

    Attributes:
        mime_type: Declared MIME type (e.g. ``image/png``).
        data: Raw encoded image bytes.
        width: Decoded width in pixels.
        height: Decoded height in pixels.
        content_hash: SHA-256 of ``data``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mime_type: str = Field(pattern=r"^image/[a-z0-9.+-]+$")
    data: bytes = Field(min_length=1, repr=False)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    content_hash: str = Field(min_length=64, max_length=64)

    def to_data_uri(self) -> str:
        """Return the payload as a ``data:`` URI for inline consumption."""
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    @property
    def extension(self) -> str:
        """File extension matching the MIME subtype (``jpeg`` → ``jpg``)."""
        subtype = self.mime_type.split("/", 1)[1]
        return "jpg" if subtype == "jpeg" else subtype


class AssetDescriptor(BaseModel):
    """Fully resolved, immutable description of one generated asset.

    Only built after resolution has finished (inference result or fallback).
    A new generation produces a new descriptor with a new ``id``.

    Attributes:
        id: Locally generated unique identifier.
        shape: Primitive shape family.
        color: Normalized ``#rrggbb`` color.
        roughness: Material roughness in [0, 1].
        metalness: Material metalness in [0, 1].
        scale: Three positive scale components.
        name: Non-empty display label.
        description: Verbatim original prompt.
        texture: Optional surface texture; None means flat material.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    id: str = Field(default_factory=lambda: str(uuid4()), min_length=1)
    shape: ShapeType
    color: str
    roughness: float = Field(ge=0.0, le=1.0)
    metalness: float = Field(ge=0.0, le=1.0)
    scale: tuple[float, float, float]
    name: str = Field(min_length=1)
    description: str
    texture: EncodedImage | None = None

    @field_validator("color")
    @classmethod
    def _validate_color(cls, v: str) -> str:
        return normalize_hex_color(v)

    @field_validator("scale")
    @classmethod
    def _validate_scale(cls, v: tuple[float, float, float]) -> tuple[float, float, float]:
        if any(component <= 0 for component in v):
            raise ValueError(f"Scale components must be positive, got {v}")
        return v

    @property
    def has_texture(self) -> bool:
        return self.texture is not None


class GenerationRequest(BaseModel):
    """Input to one generation cycle.

    Attributes:
        prompt: Free-text description (non-blank).
        detail_level: Requested tessellation density.
        include_texture: Whether to synthesize a surface texture.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str = Field(min_length=1)
    detail_level: DetailLevel = DetailLevel.MEDIUM
    include_texture: bool = False

    @field_validator("prompt")
    @classmethod
    def _validate_prompt(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Prompt must not be blank")
        return v


class AccountState(BaseModel):
    """Account tier and credit balance.

    Immutable: every mutation (spend, upgrade) returns a new instance.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tier: AccountTier = AccountTier.FREE
    credits: int = Field(default=5, ge=0)

    @property
    def is_pro(self) -> bool:
        return self.tier == AccountTier.PRO
