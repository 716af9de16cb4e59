"""Unified configuration schema for gdoc_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for Google credentials and sync options, plus the
adapter that turns them into the runtime ``Settings``.

Usage:
    from gdoc_sync.config_schema import build_config, to_settings

    raw = load_hierarchical_config()
    unified = build_config(raw)
    settings = to_settings(unified, cli_overrides={"vault_root": "~/notes"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class GoogleConfig(BaseModel):
    """Google OAuth credentials.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    client_id: str | None = Field(default=None, description="OAuth client id")
    client_secret: str | None = Field(
        default=None, description="OAuth client secret"
    )
    refresh_token: str | None = Field(
        default=None, description="OAuth refresh token"
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    vault_root: str | None = Field(
        default=None, description="Folder searched for linked folders"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration; ``UnifiedConfig()`` is always valid."""

    google: GoogleConfig = Field(default_factory=GoogleConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()
    return UnifiedConfig(**raw_data)


def yaml_fallbacks(unified: UnifiedConfig) -> dict:
    """Flatten the YAML sections into the fallback dict ``load_settings`` takes."""
    return {
        "client_id": unified.google.client_id,
        "client_secret": unified.google.client_secret,
        "refresh_token": unified.google.refresh_token,
        "vault_root": unified.sync.vault_root,
        "debug": unified.sync.debug,
    }


def to_settings(
    unified: UnifiedConfig,
    cli_overrides: dict | None = None,
) -> Settings:
    """Convert a ``UnifiedConfig`` into ``Settings``, applying CLI overrides.

    The precedence applied here is:
        CLI override > unified config value > default

    Environment variables are not consulted; use ``load_settings`` for
    the full precedence chain.
    """
    # Import here to avoid circular imports
    from .config import Settings

    overrides = cli_overrides or {}
    return Settings(
        client_id=overrides.get("client_id") or unified.google.client_id or "",
        client_secret=overrides.get("client_secret")
        or unified.google.client_secret
        or "",
        refresh_token=overrides.get("refresh_token")
        or unified.google.refresh_token
        or "",
        vault_root=overrides.get("vault_root") or unified.sync.vault_root,
        debug=overrides.get("debug", False) or unified.sync.debug,
    )
