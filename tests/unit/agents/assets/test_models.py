"""Tests for asset pipeline models."""

from __future__ import annotations

import base64
import hashlib

from pydantic import ValidationError
import pytest

from assetforge.core.agents.assets.models import (
    AccountState,
    AccountTier,
    AssetDescriptor,
    DetailLevel,
    EncodedImage,
    GenerationRequest,
    ShapeType,
    normalize_hex_color,
)


def _descriptor(**overrides) -> AssetDescriptor:
    fields = {
        "shape": ShapeType.BOX,
        "color": "#8b4513",
        "roughness": 0.9,
        "metalness": 0.1,
        "scale": (1.0, 1.0, 1.0),
        "name": "Wooden Crate",
        "description": "a rusty wooden crate",
    }
    fields.update(overrides)
    return AssetDescriptor(**fields)


class TestNormalizeHexColor:
    def test_lowercases(self) -> None:
        assert normalize_hex_color("#8B4513") == "#8b4513"

    def test_expands_short_form(self) -> None:
        assert normalize_hex_color("#ccc") == "#cccccc"

    def test_adds_hash(self) -> None:
        assert normalize_hex_color("ff0000") == "#ff0000"

    @pytest.mark.parametrize("value", ["red", "#12345", "#gggggg", ""])
    def test_rejects_non_hex(self, value: str) -> None:
        with pytest.raises(ValueError):
            normalize_hex_color(value)


class TestAssetDescriptor:
    def test_ids_are_unique(self) -> None:
        assert _descriptor().id != _descriptor().id

    def test_color_normalized(self) -> None:
        assert _descriptor(color="#ABC").color == "#aabbcc"

    def test_frozen(self) -> None:
        descriptor = _descriptor()
        with pytest.raises(ValidationError):
            descriptor.name = "Other"  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["roughness", "metalness"])
    def test_material_out_of_range_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            _descriptor(**{field: 1.5})

    def test_non_positive_scale_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _descriptor(scale=(1.0, 0.0, 1.0))

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _descriptor(name="")

    def test_no_texture_by_default(self) -> None:
        assert _descriptor().has_texture is False


class TestEncodedImage:
    def _image(self, mime_type: str = "image/png") -> EncodedImage:
        data = b"\x89PNG fake"
        return EncodedImage(
            mime_type=mime_type,
            data=data,
            width=4,
            height=4,
            content_hash=hashlib.sha256(data).hexdigest(),
        )

    def test_data_uri(self) -> None:
        image = self._image()
        expected = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
        assert image.to_data_uri() == expected

    def test_extension_maps_jpeg(self) -> None:
        assert self._image("image/jpeg").extension == "jpg"
        assert self._image("image/webp").extension == "webp"

    def test_rejects_bad_mime(self) -> None:
        with pytest.raises(ValidationError):
            self._image("text/plain")


class TestGenerationRequest:
    def test_defaults(self) -> None:
        request = GenerationRequest(prompt="a teapot")
        assert request.detail_level == DetailLevel.MEDIUM
        assert request.include_texture is False

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_blank_prompt_rejected(self, prompt: str) -> None:
        with pytest.raises(ValidationError):
            GenerationRequest(prompt=prompt)

    def test_detail_level_from_string(self) -> None:
        assert GenerationRequest(prompt="x", detail_level="High").detail_level == DetailLevel.HIGH


class TestAccountState:
    def test_initial_state(self) -> None:
        account = AccountState()
        assert account.tier == AccountTier.FREE
        assert account.credits == 5
        assert not account.is_pro

    def test_negative_credits_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AccountState(credits=-1)


class TestDescriptorNonFinite:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"roughness": float("nan")},
            {"scale": (float("nan"), 1.0, 1.0)},
            {"scale": (1.0, float("inf"), 1.0)},
        ],
    )
    def test_non_finite_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            _descriptor(**overrides)
