"""Command-line interface for AssetForge.

Runs one generation request through an AssetSession and writes the
resulting descriptor (and texture, if any) to the output directory.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from assetforge.core.agents.assets.entitlement import asset_stem
from assetforge.core.agents.assets.models import (
    AccountTier,
    DetailLevel,
    ExportFormat,
    GenerationRequest,
)
from assetforge.core.config.loader import load_app_config
from assetforge.core.config.models import AppConfig, SessionConfig
from assetforge.core.session import AssetSession, InsufficientCreditsError, RenderableAsset
from assetforge.core.utils.logging import configure_logging, configure_logging_from_config

console = Console()
logger = logging.getLogger(__name__)


def build_manifest(renderable: RenderableAsset, texture_file: str | None = None) -> dict[str, Any]:
    """Build the JSON manifest for a generated asset.

    Texture bytes are not inlined; the manifest points at the texture file.

    Args:
        renderable: Generated asset with its recipe
        texture_file: Name of the written texture file, if any

    Returns:
        JSON-serializable dict
    """
    descriptor = renderable.descriptor
    manifest = descriptor.model_dump(mode="json", exclude={"texture"})
    manifest["detail_level"] = renderable.detail_level.value
    manifest["recipe"] = renderable.recipe.to_dict()

    texture = descriptor.texture
    manifest["texture"] = (
        {
            "file": texture_file,
            "mime_type": texture.mime_type,
            "width": texture.width,
            "height": texture.height,
            "content_hash": texture.content_hash,
        }
        if texture is not None
        else None
    )
    return manifest


def write_outputs(renderable: RenderableAsset, output_dir: Path) -> list[Path]:
    """Write the manifest and texture for a generated asset.

    Files are named after the export filename stem, e.g.
    ``wooden_crate.asset.json`` and ``wooden_crate.texture.png``.

    Returns:
        Paths written, manifest first.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    descriptor = renderable.descriptor
    stem = asset_stem(descriptor.name)

    written: list[Path] = []
    texture_file: str | None = None
    if descriptor.texture is not None:
        texture_path = output_dir / f"{stem}.texture.{descriptor.texture.extension}"
        texture_path.write_bytes(descriptor.texture.data)
        texture_file = texture_path.name
        written.append(texture_path)

    manifest_path = output_dir / f"{stem}.asset.json"
    manifest_path.write_text(
        json.dumps(build_manifest(renderable, texture_file), indent=2),
        encoding="utf-8",
    )
    written.insert(0, manifest_path)
    return written


def _print_summary(renderable: RenderableAsset) -> None:
    descriptor = renderable.descriptor

    table = Table(title=descriptor.name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Shape", descriptor.shape.value)
    table.add_row("Color", descriptor.color)
    table.add_row("Roughness", f"{descriptor.roughness:.2f}")
    table.add_row("Metalness", f"{descriptor.metalness:.2f}")
    table.add_row("Scale", ", ".join(f"{s:g}" for s in descriptor.scale))
    detail = f"{renderable.detail_level.value} ({renderable.segment_count} segments)"
    table.add_row("Detail", detail)
    table.add_row("Texture", "yes" if descriptor.has_texture else "no")
    for key, value in renderable.recipe.params.items():
        table.add_row(f"  {key}", f"{value:g}")
    console.print(table)


def apply_overrides(
    app_config: AppConfig,
    *,
    pro: bool = False,
    credits: int | None = None,
    output_dir: str | None = None,
) -> AppConfig:
    """Return a copy of app_config with CLI overrides applied."""
    session_updates: dict[str, Any] = {}
    if pro:
        session_updates["initial_tier"] = AccountTier.PRO
    if credits is not None:
        session_updates["initial_credits"] = credits

    updates: dict[str, Any] = {}
    if session_updates:
        updates["session"] = SessionConfig.model_validate(
            {**app_config.session.model_dump(), **session_updates}
        )
    if output_dir is not None:
        updates["output_dir"] = output_dir
    return app_config.model_copy(update=updates) if updates else app_config


async def run_generate_async(
    request: GenerationRequest,
    app_config: AppConfig,
    export_format: ExportFormat | None = None,
) -> int:
    """Generate one asset and write its outputs.

    Args:
        request: Generation request
        app_config: Application config (with CLI overrides applied)
        export_format: Optional export format to authorize

    Returns:
        Process exit code
    """
    session = AssetSession.from_config(app_config)

    if app_config.llm.api_key is None:
        console.print(
            "[yellow]⚠️  OPENAI_API_KEY not set; using placeholder parameters[/yellow]"
        )

    console.print(f"[bold]🛠️  Generating:[/bold] {request.prompt}")
    try:
        result = await session.generate(request)
    except InsufficientCreditsError as e:
        console.print(f"[red]ERROR: {e}. Upgrade to Pro or add credits.[/red]")
        return 1

    if not result.success or result.output is None:
        console.print(f"[red]❌ {result.error}[/red]")
        return 1

    renderable = result.output
    _print_summary(renderable)

    written = write_outputs(renderable, Path(app_config.output_dir).resolve())
    for path in written:
        console.print(f"[green]📁 Wrote[/green] {path}")
    console.print(f"Credits remaining: {session.account.credits}")

    if export_format is not None:
        export = session.export(export_format)
        if export.upgrade_required:
            console.print(
                f"[yellow]🔒 {export.format.value.upper()} export requires Pro. "
                f"Re-run with --pro to unlock.[/yellow]"
            )
        else:
            console.print(
                f"[green]✅ {export.format.value.upper()} export authorized:[/green] "
                f"{export.filename}"
            )

    return 0


def run_generate(args: argparse.Namespace) -> None:
    """Run one generation from parsed CLI arguments."""
    config_path = Path(args.config).resolve() if args.config else None
    if config_path is not None and not config_path.exists():
        console.print(f"[red]ERROR: Config not found: {config_path}[/red]")
        sys.exit(1)

    try:
        app_config = apply_overrides(
            load_app_config(config_path),
            pro=args.pro,
            credits=args.credits,
            output_dir=args.output_dir,
        )
    except ValueError as e:
        console.print(f"[red]ERROR: Invalid configuration: {e}[/red]")
        sys.exit(1)

    if args.log_level:
        configure_logging(level=args.log_level)
    else:
        configure_logging_from_config(app_config.logging)

    try:
        request = GenerationRequest(
            prompt=args.prompt,
            detail_level=DetailLevel(args.detail),
            include_texture=args.texture,
        )
    except ValueError as e:
        console.print(f"[red]ERROR: Invalid request: {e}[/red]")
        sys.exit(1)

    export_format = ExportFormat(args.export) if args.export else None
    exit_code = asyncio.run(run_generate_async(request, app_config, export_format))
    sys.exit(exit_code)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="assetforge",
        description="AssetForge - text-to-3D asset generation",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate an asset from a text prompt")
    gen.add_argument("prompt", help="Free-text description of the asset")
    gen.add_argument(
        "--detail",
        choices=[level.value for level in DetailLevel],
        default=DetailLevel.MEDIUM.value,
        help="Mesh detail level (default: Medium)",
    )
    gen.add_argument("--texture", action="store_true", help="Synthesize a surface texture")
    gen.add_argument(
        "--export",
        choices=[fmt.value for fmt in ExportFormat],
        default=None,
        help="Authorize an export in this format",
    )
    gen.add_argument("--pro", action="store_true", help="Start on the Pro tier")
    gen.add_argument("--credits", type=int, default=None, help="Starting credit balance")
    gen.add_argument(
        "--config",
        default=None,
        help="Path to app config JSON/YAML (default: config.json if present)",
    )
    gen.add_argument("--output-dir", default=None, help="Output directory for artifacts")
    gen.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Override logging level",
    )

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    if args.cmd == "generate":
        run_generate(args)


if __name__ == "__main__":
    main()
