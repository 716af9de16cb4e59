"""Configuration for the sync engine, MCP server and CLI.

Reads Google credentials and the vault root from CLI args, environment
variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    GDOC_SYNC_CLIENT_ID: OAuth client id
    GDOC_SYNC_CLIENT_SECRET: OAuth client secret
    GDOC_SYNC_REFRESH_TOKEN: OAuth refresh token
    GDOC_SYNC_VAULT_ROOT: Folder searched by "sync all" (optional)
    GDOC_SYNC_DEBUG: Enable debug logging (optional, default: false)

Settings are immutable: a change of settings means building a new
``Settings`` value and a new engine around it.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    vault_root: str | None = None
    debug: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)


def validate_settings(
    settings: Settings, require_credentials: bool = True
) -> None:
    """Validate settings and raise ValueError if invalid.

    Args:
        settings: Settings instance to validate.
        require_credentials: Whether missing Google credentials are an error.

    Raises:
        ValueError: If credentials are missing or the vault root is not a
            directory.
    """
    if require_credentials:
        missing = [
            env
            for env, value in (
                ("GDOC_SYNC_CLIENT_ID", settings.client_id),
                ("GDOC_SYNC_CLIENT_SECRET", settings.client_secret),
                ("GDOC_SYNC_REFRESH_TOKEN", settings.refresh_token),
            )
            if not value.strip()
        ]
        if missing:
            raise ValueError(
                "Google credentials not found. Set "
                + ", ".join(missing)
                + " or add them to the 'google' section of config.yml."
            )

    if settings.vault_root is not None:
        root = Path(settings.vault_root).expanduser()
        if not root.is_dir():
            raise ValueError(
                f"Invalid vault root '{settings.vault_root}': not a directory"
            )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_settings(
    client_id: str | None = None,
    client_secret: str | None = None,
    refresh_token: str | None = None,
    vault_root: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Settings:
    """Load settings with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        client_id: Override OAuth client id.
        client_secret: Override OAuth client secret.
        refresh_token: Override OAuth refresh token.
        vault_root: Override the folder searched by "sync all".
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config
            (``client_id``, ``client_secret``, ``refresh_token``,
            ``vault_root``, ``debug``).

    Returns:
        Settings instance (credentials are not required here; see
        ``validate_settings``).
    """
    fb = yaml_fallbacks or {}

    def pick(cli_value: str | None, env_key: str, fb_key: str) -> str | None:
        value = cli_value or os.getenv(env_key) or fb.get(fb_key)
        return value.strip() if isinstance(value, str) else value

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("GDOC_SYNC_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    settings = Settings(
        client_id=pick(client_id, "GDOC_SYNC_CLIENT_ID", "client_id") or "",
        client_secret=pick(
            client_secret, "GDOC_SYNC_CLIENT_SECRET", "client_secret"
        )
        or "",
        refresh_token=pick(
            refresh_token, "GDOC_SYNC_REFRESH_TOKEN", "refresh_token"
        )
        or "",
        vault_root=pick(vault_root, "GDOC_SYNC_VAULT_ROOT", "vault_root"),
        debug=final_debug,
    )
    if not settings.has_credentials:
        logger.debug("Google credentials incomplete; remote sync disabled")
    return settings


def resolve_settings(overrides: dict | None = None) -> Settings:
    """Load settings from every source: CLI overrides, env, .env and YAML.

    Loads ``.env`` first so its values are visible both to env lookups and
    to ``${VAR}`` interpolation in YAML files.

    Args:
        overrides: CLI values keyed like ``load_settings`` parameters.
    """
    from dotenv import load_dotenv

    from .config_loader import load_hierarchical_config
    from .config_schema import build_config, yaml_fallbacks

    load_dotenv()
    unified = build_config(load_hierarchical_config())
    fallbacks = {
        k: v for k, v in yaml_fallbacks(unified).items() if v is not None
    }
    overrides = overrides or {}
    return load_settings(
        client_id=overrides.get("client_id"),
        client_secret=overrides.get("client_secret"),
        refresh_token=overrides.get("refresh_token"),
        vault_root=overrides.get("vault_root"),
        debug=overrides.get("debug", False),
        yaml_fallbacks=fallbacks,
    )
