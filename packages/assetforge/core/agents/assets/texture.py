"""Texture synthesis: free text → optional inline surface texture.

Best-effort and purely additive. Missing credentials, provider errors,
undecodable payloads and responses without an image part all yield None;
nothing is raised to the session.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from io import BytesIO

from PIL import Image

from assetforge.core.agents.assets.image_client import ImagePart, ImageProvider
from assetforge.core.agents.assets.models import EncodedImage

logger = logging.getLogger(__name__)

TEXTURE_PROMPT_TEMPLATE = (
    "Create a seamless texture map for: {prompt}. "
    "Top down view, flat lighting, high resolution texture."
)


def build_texture_prompt(prompt: str) -> str:
    return TEXTURE_PROMPT_TEMPLATE.format(prompt=prompt.strip())


def first_image_part(parts: list[ImagePart]) -> ImagePart | None:
    """Return the first part carrying inline image data, if any."""
    for part in parts:
        if part.has_image:
            return part
    return None


def _encode_part(part: ImagePart) -> EncodedImage:
    """Decode an image part with PIL and wrap it as EncodedImage.

    Pure CPU work, run in a thread by the synthesizer.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a decodable image.
    """
    if part.data is None:
        raise ValueError("Image part carries no data")
    with Image.open(BytesIO(part.data)) as img:
        img.load()
        width, height = img.size

    return EncodedImage(
        mime_type=part.mime_type,
        data=part.data,
        width=width,
        height=height,
        content_hash=hashlib.sha256(part.data).hexdigest(),
    )


class TextureSynthesizer:
    """Synthesize a surface texture for a prompt.

    Args:
        provider: Image-generation provider; None when no credentials are set.
        enabled: Config switch; when False every call returns None.
    """

    def __init__(self, provider: ImageProvider | None, *, enabled: bool = True) -> None:
        self._provider = provider
        self._enabled = enabled

    async def synthesize(self, prompt: str) -> EncodedImage | None:
        """Generate a texture for a prompt.

        Args:
            prompt: The user's free-text description.

        Returns:
            EncodedImage on success, None otherwise.
        """
        if not self._enabled:
            logger.debug("Texture synthesis disabled by config")
            return None
        if self._provider is None:
            logger.warning("No image provider configured, skipping texture")
            return None

        try:
            parts = await self._provider.generate_parts(build_texture_prompt(prompt))
            part = first_image_part(parts)
            if part is None:
                logger.warning("Image response contained no image part, skipping texture")
                return None
            image = await asyncio.to_thread(_encode_part, part)
        except Exception as e:
            logger.warning("Texture synthesis failed, continuing without texture: %s", e)
            return None

        logger.info(
            "Synthesized %dx%d %s texture (%d bytes)",
            image.width,
            image.height,
            image.mime_type,
            len(image.data),
        )
        return image
