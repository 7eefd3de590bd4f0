"""Entitlement-gated export.

The pipeline's job ends at an Allowed/Denied decision plus the descriptor.
File encoding belongs to an external AssetEncoder, which is only invoked
after authorization succeeds.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from assetforge.core.agents.assets.entitlement import (
    AuthorizationDecision,
    authorize,
    export_filename,
)
from assetforge.core.agents.assets.geometry import GeometryRecipe
from assetforge.core.agents.assets.models import (
    AccountState,
    AssetDescriptor,
    ExportFormat,
)

logger = logging.getLogger(__name__)


class AssetEncoder(Protocol):
    """Encoder collaborator for one export format (GLB/OBJ/FBX bitstreams)."""

    def encode(self, descriptor: AssetDescriptor, recipe: GeometryRecipe) -> bytes:
        """Encode the asset into file bytes."""
        ...


class ExportResult(BaseModel):
    """Outcome of an export request.

    Attributes:
        format: Requested format.
        decision: Authorization outcome.
        filename: Suggested download filename.
        payload: Encoded bytes when an encoder ran, else None.
        upgrade_required: True when the caller should present the upgrade path.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: ExportFormat
    decision: AuthorizationDecision
    filename: str = Field(min_length=1)
    payload: bytes | None = Field(default=None, repr=False)

    @property
    def upgrade_required(self) -> bool:
        return self.decision is AuthorizationDecision.DENIED


def export_asset(
    descriptor: AssetDescriptor,
    recipe: GeometryRecipe,
    format: ExportFormat | str,
    account: AccountState,
    encoder: AssetEncoder | None = None,
) -> ExportResult:
    """Authorize and (optionally) encode an export.

    Args:
        descriptor: Asset to export.
        recipe: Tessellation recipe the encoder should mesh with.
        format: Requested export format.
        account: Account requesting the export. Never modified.
        encoder: Encoder for the format. Not invoked on DENIED.

    Returns:
        ExportResult. A denial is a result, not an exception.
    """
    fmt = ExportFormat(format)
    decision = authorize(fmt, account)
    filename = export_filename(descriptor.name, fmt)

    if not decision.allowed:
        logger.info(
            "Export of %s as %s denied for %s tier",
            descriptor.id,
            fmt.value,
            account.tier.value,
        )
        return ExportResult(format=fmt, decision=decision, filename=filename)

    payload = encoder.encode(descriptor, recipe) if encoder is not None else None
    logger.info("Export of %s as %s allowed (%s)", descriptor.id, fmt.value, filename)
    return ExportResult(format=fmt, decision=decision, filename=filename, payload=payload)
