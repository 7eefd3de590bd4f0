"""OpenAI Images API client.

Wraps ``client.images.generate()`` and returns the response as a list of
inline image parts. A single request per call: texture synthesis is
best-effort and the caller never retries.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Protocol

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

# gpt-image-* supported sizes
_SUPPORTED_SIZES = {"1024x1024", "1024x1536", "1536x1024", "auto"}

_MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
}


@dataclass(frozen=True)
class ImagePart:
    """One part of an image-generation response.

    Attributes:
        mime_type: Declared MIME type of the inline data.
        data: Decoded inline bytes, or None when the part carries no image.
    """

    mime_type: str
    data: bytes | None = field(default=None, repr=False)

    @property
    def has_image(self) -> bool:
        return bool(self.data)


class ImageProvider(Protocol):
    """Image-generation collaborator."""

    async def generate_parts(self, prompt: str) -> list[ImagePart]:
        """Generate images for a prompt and return the response parts."""
        ...


def mime_type_for(output_format: str) -> str:
    """Map an output format to its MIME type.

    Raises:
        ValueError: If the format is not supported.
    """
    try:
        return _MIME_TYPES[output_format.lower()]
    except KeyError:
        raise ValueError(f"Unsupported output format: {output_format}") from None


class OpenAIImageClient:
    """Async client for generating images via the OpenAI Images API.

    Args:
        client: AsyncOpenAI client instance.
        model: Image generation model name.
        size: Requested API size.
        output_format: Encoding requested from the API (png, jpeg, webp).
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = "gpt-image-1",
        size: str = "1024x1024",
        output_format: str = "png",
    ) -> None:
        if size not in _SUPPORTED_SIZES:
            raise ValueError(
                f"Unsupported size {size!r}; expected one of {sorted(_SUPPORTED_SIZES)}"
            )
        self._client = client
        self._model = model
        self._size = size
        self._output_format = output_format
        self._mime_type = mime_type_for(output_format)

    @property
    def model(self) -> str:
        return self._model

    async def generate_parts(self, prompt: str) -> list[ImagePart]:
        """Request one image and return the response data as parts.

        Args:
            prompt: Image generation prompt.

        Returns:
            One ImagePart per returned data item, in response order. Items
            without usable base64 payloads become parts with ``data=None``.

        Raises:
            openai.OpenAIError: On API or transport errors.
        """
        response = await self._client.images.generate(
            model=self._model,
            prompt=prompt,
            n=1,
            size=self._size,  # type: ignore[arg-type]
            output_format=self._output_format,  # type: ignore[arg-type]
        )

        parts: list[ImagePart] = []
        for item in response.data or []:
            b64_data = getattr(item, "b64_json", None)
            if not b64_data:
                parts.append(ImagePart(mime_type=self._mime_type))
                continue
            try:
                raw = base64.b64decode(b64_data, validate=True)
            except (binascii.Error, ValueError) as e:
                logger.debug("Skipping undecodable image part: %s", e)
                parts.append(ImagePart(mime_type=self._mime_type))
                continue
            parts.append(ImagePart(mime_type=self._mime_type, data=raw))

        logger.debug(
            "Image response: %d parts (%d with data)",
            len(parts),
            sum(p.has_image for p in parts),
        )
        return parts
