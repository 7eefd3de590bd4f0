"""AssetForge session - orchestrates one user's generation requests.

The session owns the only mutable state in the pipeline: the current
account state, the current asset descriptor and the state machine. Each
component it drives (resolver, texture synthesizer, entitlement gate) is
stateless or returns new values instead of mutating.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from assetforge.core.agents.assets.entitlement import can_generate, spend, upgrade
from assetforge.core.agents.assets.export import AssetEncoder, ExportResult, export_asset
from assetforge.core.agents.assets.geometry import GeometryRecipe, build_recipe, parameterize
from assetforge.core.agents.assets.models import (
    AccountState,
    AssetDescriptor,
    AssetParameters,
    DetailLevel,
    EncodedImage,
    ExportFormat,
    GenerationRequest,
    ShapeType,
)
from assetforge.core.agents.assets.resolver import DEFAULT_SCALE, PromptResolver
from assetforge.core.agents.assets.texture import TextureSynthesizer
from assetforge.core.agents.providers.factory import create_image_provider, create_llm_provider
from assetforge.core.agents.state_machine import (
    SessionState,
    SessionStateMachine,
    StateTransition,
)
from assetforge.core.config.loader import load_app_config
from assetforge.core.config.models import AppConfig
from assetforge.core.pipeline.result import GenerationResult, failure_result, success_result

logger = logging.getLogger(__name__)

DEFAULT_SHAPE = ShapeType.BOX
DEFAULT_COLOR = "#ffffff"
DEFAULT_MATERIAL_VALUE = 0.5
DEFAULT_NAME = "Generated Asset"

FAILURE_NOTICE = "Failed to generate asset. Please check your API key and try again."


class InsufficientCreditsError(Exception):
    """Raised when a generation is requested with no credits left."""

    pass


class NoAssetError(Exception):
    """Raised when an export is requested before any asset is ready."""

    pass


@dataclass(frozen=True)
class RenderableAsset:
    """What the renderer consumes: a descriptor plus its tessellation recipe.

    The renderer re-renders whenever ``render_key`` changes, i.e. on a new
    descriptor id or a new detail level.
    """

    descriptor: AssetDescriptor
    detail_level: DetailLevel
    recipe: GeometryRecipe

    @property
    def segment_count(self) -> int:
        return self.recipe.segment_count

    @property
    def render_key(self) -> tuple[str, DetailLevel]:
        return (self.descriptor.id, self.detail_level)


def _renderable(descriptor: AssetDescriptor, detail_level: DetailLevel) -> RenderableAsset:
    return RenderableAsset(
        descriptor=descriptor,
        detail_level=detail_level,
        recipe=build_recipe(descriptor.shape, parameterize(detail_level)),
    )


def assemble_descriptor(
    params: AssetParameters,
    description: str,
    texture: EncodedImage | None = None,
) -> AssetDescriptor:
    """Build the immutable descriptor from resolved parameters.

    Empty fields are replaced with the assembly defaults.

    Raises:
        pydantic.ValidationError: If the result violates the descriptor contract.
    """
    return AssetDescriptor(
        shape=params.shape or DEFAULT_SHAPE,
        color=params.color or DEFAULT_COLOR,
        roughness=(
            params.roughness if params.roughness is not None else DEFAULT_MATERIAL_VALUE
        ),
        metalness=(
            params.metalness if params.metalness is not None else DEFAULT_MATERIAL_VALUE
        ),
        scale=params.scale or DEFAULT_SCALE,
        name=params.name.strip() or DEFAULT_NAME,
        description=description,
        texture=texture,
    )


class AssetSession:
    """Session coordinator for text-to-asset generation.

    Only one request is in flight at a time; a second ``generate`` while
    RESOLVING raises InvalidTransitionError.

    Args:
        resolver: Prompt resolver.
        texture_synthesizer: Texture synthesizer.
        account: Starting account state.
        enforce_credits: Refuse generations at zero credits.
        generation_timeout_seconds: Deadline for one request (None = no deadline).
        session_id: Optional session ID. If None, generates a new UUID.
    """

    def __init__(
        self,
        *,
        resolver: PromptResolver,
        texture_synthesizer: TextureSynthesizer,
        account: AccountState | None = None,
        enforce_credits: bool = True,
        generation_timeout_seconds: float | None = None,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or str(uuid4())
        self._resolver = resolver
        self._texture_synthesizer = texture_synthesizer
        self._account = account if account is not None else AccountState()
        self._enforce_credits = enforce_credits
        self._timeout = generation_timeout_seconds

        self._state_machine = SessionStateMachine()
        self._descriptor: AssetDescriptor | None = None
        self._detail_level = DetailLevel.MEDIUM

        logger.debug(
            "Session initialized: id=%s, tier=%s, credits=%d",
            self.session_id,
            self._account.tier.value,
            self._account.credits,
        )

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig | Path | str | None = None,
        *,
        session_id: str | None = None,
    ) -> AssetSession:
        """Create a session with OpenAI-backed providers from app config.

        Args:
            app_config: AppConfig instance, path, or None (default path)
            session_id: Optional session ID

        Raises:
            TypeError: If app_config is of the wrong type
        """
        if app_config is None or isinstance(app_config, (Path, str)):
            config = load_app_config(app_config)
        elif isinstance(app_config, AppConfig):
            config = app_config
        else:
            raise TypeError(
                f"Expected AppConfig, Path, str, or None; got {type(app_config).__name__}"
            )

        resolver = PromptResolver(
            create_llm_provider(config),
            model=config.llm.model,
            temperature=config.llm.temperature,
        )
        synthesizer = TextureSynthesizer(
            create_image_provider(config) if config.image.enabled else None,
            enabled=config.image.enabled,
        )
        return cls(
            resolver=resolver,
            texture_synthesizer=synthesizer,
            account=AccountState(
                tier=config.session.initial_tier,
                credits=config.session.initial_credits,
            ),
            enforce_credits=config.session.enforce_credits,
            generation_timeout_seconds=config.session.generation_timeout_seconds,
            session_id=session_id,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state_machine.current_state

    @property
    def account(self) -> AccountState:
        return self._account

    @property
    def current_descriptor(self) -> AssetDescriptor | None:
        return self._descriptor

    @property
    def detail_level(self) -> DetailLevel:
        return self._detail_level

    @property
    def renderable(self) -> RenderableAsset | None:
        """Current descriptor with its recipe, or None before the first success."""
        if self._descriptor is None:
            return None
        return _renderable(self._descriptor, self._detail_level)

    @property
    def history(self) -> list[StateTransition]:
        return self._state_machine.get_transition_history()

    # =========================================================================
    # Operations
    # =========================================================================

    async def generate(self, request: GenerationRequest) -> GenerationResult[RenderableAsset]:
        """Run one generation request.

        Resolution and texture synthesis run sequentially. On success the
        new descriptor supersedes the previous one and one credit is debited.
        On failure (assembly error or deadline) the previous descriptor stays
        current and no credit is debited.

        Args:
            request: Validated generation request.

        Returns:
            GenerationResult with the RenderableAsset, or a failure notice.

        Raises:
            InsufficientCreditsError: If credits are enforced and exhausted.
            InvalidTransitionError: If a request is already in flight.
            asyncio.CancelledError: If the caller cancels the request. The
                session moves to FAILED first and can be resubmitted.
        """
        if self._enforce_credits and not can_generate(self._account):
            raise InsufficientCreditsError(
                f"No credits left on {self._account.tier.value} account"
            )

        self._state_machine.transition(
            SessionState.RESOLVING,
            context={
                "detail_level": request.detail_level.value,
                "include_texture": request.include_texture,
            },
            reason="generation requested",
        )
        start = time.perf_counter()

        try:
            async with asyncio.timeout(self._timeout):
                descriptor = await self._build_descriptor(request)
        except TimeoutError:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error("Generation timed out after %.0f ms", duration_ms)
            self._state_machine.transition(SessionState.FAILED, reason="timeout")
            return failure_result(
                f"Generation timed out after {self._timeout:g}s. Please try again.",
                duration_ms=duration_ms,
                metadata={"reason": "timeout"},
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception("Generation failed: %s", e)
            self._state_machine.transition(SessionState.FAILED, reason=str(e))
            return failure_result(
                FAILURE_NOTICE,
                duration_ms=duration_ms,
                metadata={"reason": "assembly", "error_type": type(e).__name__},
            )
        except BaseException:
            # Cancellation or interpreter exit: leave the session resubmittable
            if self._state_machine.current_state == SessionState.RESOLVING:
                logger.warning("Generation cancelled; marking session failed")
                self._state_machine.transition(SessionState.FAILED, reason="cancelled")
            raise

        self._descriptor = descriptor
        self._detail_level = request.detail_level
        self._account = spend(self._account)
        self._state_machine.transition(
            SessionState.READY,
            context={"descriptor_id": descriptor.id},
            reason="descriptor assembled",
        )

        renderable = _renderable(descriptor, self._detail_level)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Generated '%s' (%s, %d segments, textured=%s) in %.0f ms; %d credits left",
            descriptor.name,
            descriptor.shape.value,
            renderable.segment_count,
            descriptor.has_texture,
            duration_ms,
            self._account.credits,
        )
        return success_result(
            renderable,
            duration_ms=duration_ms,
            metadata={
                "segment_count": renderable.segment_count,
                "textured": descriptor.has_texture,
                "credits_remaining": self._account.credits,
            },
        )

    async def _build_descriptor(self, request: GenerationRequest) -> AssetDescriptor:
        params = await self._resolver.resolve(request.prompt)

        texture: EncodedImage | None = None
        if request.include_texture:
            texture = await self._texture_synthesizer.synthesize(request.prompt)

        return assemble_descriptor(params, request.prompt, texture)

    def export(
        self,
        format: ExportFormat | str,
        encoder: AssetEncoder | None = None,
    ) -> ExportResult:
        """Authorize (and optionally encode) an export of the current asset.

        Never changes the account; a denial asks for an upgrade.

        Raises:
            NoAssetError: If no asset has been generated yet.
        """
        renderable = self.renderable
        if renderable is None:
            raise NoAssetError("No asset to export; generate one first")
        return export_asset(
            renderable.descriptor,
            renderable.recipe,
            format,
            self._account,
            encoder=encoder,
        )

    def upgrade(self) -> AccountState:
        """Upgrade the account to Pro and return the new state."""
        self._account = upgrade(self._account)
        logger.info("Account upgraded to %s", self._account.tier.value)
        return self._account
