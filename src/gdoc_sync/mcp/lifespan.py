"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from ..config import resolve_settings, validate_settings
from ..core.async_utils import run_sync
from ..core.client import GoogleDocsClient
from ..core.oauth import OAuthTokenProvider
from ..sync.engine import SyncEngine

logger = logging.getLogger(__name__)

_CREDENTIAL_HINT = (
    "Ensure GDOC_SYNC_CLIENT_ID, GDOC_SYNC_CLIENT_SECRET and "
    "GDOC_SYNC_REFRESH_TOKEN are set."
)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


def build_engine(settings) -> SyncEngine:
    """Wire a production engine around *settings*."""
    return SyncEngine(
        store=GoogleDocsClient(),
        token_provider=OAuthTokenProvider.from_settings(settings),
        settings=settings,
    )


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown lifecycle.

    On startup:
    - Resolve settings: CLI > env vars > .env > YAML > defaults
    - Build the sync engine and validate the Google credentials
    - Fail fast if credentials are missing or refused

    Args:
        config_overrides: Optional dict with values from CLI (client_id,
            client_secret, refresh_token, vault_root).

    Yields:
        Dict with 'engine' key containing the initialized SyncEngine

    Raises:
        RuntimeError: If configuration is invalid or credentials are refused.
    """
    logger.info("MCP server starting...")
    _stderr_print("gdoc-sync MCP server starting...")

    try:
        settings = resolve_settings(config_overrides)
        validate_settings(settings)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        raise RuntimeError(
            f"Configuration error: {e}. {_CREDENTIAL_HINT}"
        ) from e

    if settings.vault_root:
        _stderr_print(f"  Vault root: {settings.vault_root}")

    engine = build_engine(settings)
    _stderr_print("  Validating Google credentials...")
    valid = await run_sync(engine.validate_credentials)
    if not valid:
        logger.error("Google credentials were refused")
        _stderr_print("ERROR: Google credentials were refused.")
        raise RuntimeError(f"Google authentication failed. {_CREDENTIAL_HINT}")
    _stderr_print("Server ready. Waiting for MCP client connection...")

    yield {"engine": engine, "settings": settings}

    logger.info("MCP server shutting down")
    _stderr_print("gdoc-sync MCP server shutting down.")
