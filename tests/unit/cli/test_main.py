"""Unit tests for CLI helpers."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from assetforge.cli.main import (
    apply_overrides,
    build_arg_parser,
    build_manifest,
    main,
    run_generate_async,
    write_outputs,
)
from assetforge.core.agents.assets.geometry import recipe_for
from assetforge.core.agents.assets.models import (
    AccountTier,
    AssetDescriptor,
    DetailLevel,
    EncodedImage,
    GenerationRequest,
    ShapeType,
)
from assetforge.core.config.models import AppConfig
from assetforge.core.session import RenderableAsset


def _renderable(
    texture: EncodedImage | None = None, name: str = "Red Ring"
) -> RenderableAsset:
    descriptor = AssetDescriptor(
        shape=ShapeType.TORUS,
        color="#ff0000",
        roughness=0.3,
        metalness=0.8,
        scale=(1.0, 0.5, 1.0),
        name=name,
        description="a shiny red ring",
        texture=texture,
    )
    return RenderableAsset(
        descriptor=descriptor,
        detail_level=DetailLevel.LOW,
        recipe=recipe_for(descriptor.shape, DetailLevel.LOW),
    )


def _texture(png_bytes: bytes) -> EncodedImage:
    return EncodedImage(
        mime_type="image/png",
        data=png_bytes,
        width=8,
        height=8,
        content_hash=hashlib.sha256(png_bytes).hexdigest(),
    )


def test_arg_parser_defaults() -> None:
    """Generate subcommand defaults to Medium detail and no texture."""
    args = build_arg_parser().parse_args(["generate", "a teapot"])
    assert args.prompt == "a teapot"
    assert args.detail == "Medium"
    assert args.texture is False
    assert args.export is None


def test_arg_parser_rejects_unknown_detail() -> None:
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args(["generate", "a teapot", "--detail", "Ultra"])


def test_arg_parser_log_level_case_insensitive() -> None:
    args = build_arg_parser().parse_args(["generate", "a teapot", "--log-level", "debug"])
    assert args.log_level == "DEBUG"


def test_arg_parser_rejects_unknown_log_level() -> None:
    with pytest.raises(SystemExit) as exc_info:
        build_arg_parser().parse_args(["generate", "a teapot", "--log-level", "bogus"])
    assert exc_info.value.code == 2


def test_apply_overrides() -> None:
    config = apply_overrides(AppConfig(), pro=True, credits=9, output_dir="out")
    assert config.session.initial_tier == AccountTier.PRO
    assert config.session.initial_credits == 9
    assert config.output_dir == "out"


def test_apply_overrides_noop() -> None:
    config = AppConfig()
    assert apply_overrides(config) is config


def test_build_manifest_without_texture() -> None:
    manifest = build_manifest(_renderable())

    assert manifest["shape"] == "torus"
    assert manifest["scale"] == [1.0, 0.5, 1.0]
    assert manifest["detail_level"] == "Low"
    assert manifest["recipe"]["segment_count"] == 12
    assert manifest["texture"] is None


def test_write_outputs_with_texture(tmp_path: Path, png_bytes: bytes) -> None:
    written = write_outputs(_renderable(_texture(png_bytes)), tmp_path / "out")

    assert [p.name for p in written] == ["red_ring.asset.json", "red_ring.texture.png"]
    assert written[1].read_bytes() == png_bytes

    manifest = json.loads(written[0].read_text())
    assert manifest["texture"]["file"] == "red_ring.texture.png"
    assert manifest["texture"]["content_hash"] == hashlib.sha256(png_bytes).hexdigest()
    assert "data" not in manifest["texture"]


@pytest.mark.parametrize(
    ("name", "stem"), [("../../escaped", "escaped"), ("AC/DC Amp", "ac_dc_amp")]
)
def test_write_outputs_stays_in_output_dir(
    tmp_path: Path, png_bytes: bytes, name: str, stem: str
) -> None:
    out = tmp_path / "a" / "b" / "out"

    written = write_outputs(_renderable(_texture(png_bytes), name=name), out)

    assert [p.name for p in written] == [f"{stem}.asset.json", f"{stem}.texture.png"]
    assert all(p.parent == out and p.exists() for p in written)
    assert sorted(p.name for p in out.iterdir()) == sorted(p.name for p in written)


@pytest.mark.asyncio
async def test_run_generate_async_without_key_uses_fallback(tmp_path: Path) -> None:
    """Without credentials the CLI still produces the placeholder asset."""
    config = AppConfig(output_dir=str(tmp_path))

    exit_code = await run_generate_async(GenerationRequest(prompt="a teapot"), config)

    assert exit_code == 0
    manifest = json.loads((tmp_path / "unknown_object.asset.json").read_text())
    assert manifest["shape"] == "sphere"
    assert manifest["description"] == "a teapot"


@pytest.mark.asyncio
async def test_run_generate_async_no_credits(tmp_path: Path) -> None:
    config = apply_overrides(AppConfig(), credits=0, output_dir=str(tmp_path))

    exit_code = await run_generate_async(GenerationRequest(prompt="a teapot"), config)

    assert exit_code == 1
    assert list(tmp_path.iterdir()) == []


def test_main_runs_generate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)

    with (
        patch("assetforge.cli.main.configure_logging"),
        pytest.raises(SystemExit) as exc_info,
    ):
        main(["generate", "a teapot", "--output-dir", str(tmp_path / "out"), "--log-level", "INFO"])

    assert exc_info.value.code == 0
    assert (tmp_path / "out" / "unknown_object.asset.json").exists()


def test_main_missing_config(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["generate", "a teapot", "--config", str(tmp_path / "missing.json")])
    assert exc_info.value.code == 1
