"""Entitlement gate: export authorization and credit accounting.

All functions are pure. Account mutations return a new AccountState.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from assetforge.core.agents.assets.models import AccountState, AccountTier, ExportFormat

logger = logging.getLogger(__name__)

# Formats every tier may export
FREE_FORMATS: frozenset[ExportFormat] = frozenset({ExportFormat.GLB})

_UNSAFE_STEM_CHARS = re.compile(r"[^a-z0-9_-]+")


class AuthorizationDecision(str, Enum):
    """Outcome of an export authorization.

    DENIED is a normal outcome that calls for an upgrade prompt, not an error.
    """

    ALLOWED = "allowed"
    DENIED = "denied"

    @property
    def allowed(self) -> bool:
        return self is AuthorizationDecision.ALLOWED


def authorize(format: ExportFormat | str, account: AccountState) -> AuthorizationDecision:
    """Decide whether an account may export in a format.

    Args:
        format: Requested export format.
        account: Current account state.

    Returns:
        ALLOWED for GLB on any tier and for every format on Pro, else DENIED.

    Raises:
        ValueError: If format is not a known ExportFormat.
    """
    fmt = ExportFormat(format)
    if fmt in FREE_FORMATS or account.tier == AccountTier.PRO:
        return AuthorizationDecision.ALLOWED
    return AuthorizationDecision.DENIED


def can_generate(account: AccountState) -> bool:
    """Whether the account has a credit left for a generation."""
    return account.credits > 0


def spend(account: AccountState) -> AccountState:
    """Debit one credit for a successful generation.

    The balance never goes below zero: spending at zero leaves it at zero.

    Args:
        account: Current account state.

    Returns:
        New AccountState.
    """
    if account.credits <= 0:
        logger.warning("Credit debit requested at zero balance; balance stays at 0")
        return account.model_copy()
    return account.model_copy(update={"credits": account.credits - 1})


def upgrade(account: AccountState) -> AccountState:
    """Move the account to the Pro tier, keeping its credits."""
    return account.model_copy(update={"tier": AccountTier.PRO})


def asset_stem(name: str) -> str:
    """Reduce an asset name to a filesystem-safe stem.

    Lower-cases the name and collapses every run of characters outside
    ``[a-z0-9_-]`` (whitespace, path separators, dots) into ``_``.

    Examples:
        >>> asset_stem("Rusty  Barrel")
        'rusty_barrel'
        >>> asset_stem("../../escaped")
        'escaped'
    """
    return _UNSAFE_STEM_CHARS.sub("_", name.strip().lower()).strip("_") or "asset"


def export_filename(name: str, format: ExportFormat | str) -> str:
    """Build the download filename for an asset.

    Examples:
        >>> export_filename("Rusty  Barrel", ExportFormat.GLB)
        'rusty_barrel.glb'
    """
    fmt = ExportFormat(format)
    return f"{asset_stem(name)}.{fmt.value}"
