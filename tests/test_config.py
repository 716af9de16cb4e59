"""Tests for settings precedence and validation."""

import pytest

from gdoc_sync.config import Settings, load_settings, resolve_settings, validate_settings
from gdoc_sync.config_loader import CONFIG_ENV_VAR
from gdoc_sync.config_schema import (
    UnifiedConfig,
    build_config,
    to_settings,
    yaml_fallbacks,
)

_ENV_KEYS = (
    "GDOC_SYNC_CLIENT_ID",
    "GDOC_SYNC_CLIENT_SECRET",
    "GDOC_SYNC_REFRESH_TOKEN",
    "GDOC_SYNC_VAULT_ROOT",
    "GDOC_SYNC_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.has_credentials is False

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("GDOC_SYNC_CLIENT_ID", "env-id")
        monkeypatch.setenv("GDOC_SYNC_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("GDOC_SYNC_REFRESH_TOKEN", " env-token ")
        monkeypatch.setenv("GDOC_SYNC_DEBUG", "yes")

        settings = load_settings()

        assert settings.client_id == "env-id"
        assert settings.refresh_token == "env-token"
        assert settings.debug is True
        assert settings.has_credentials is True

    def test_cli_beats_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("GDOC_SYNC_CLIENT_ID", "env-id")
        monkeypatch.setenv("GDOC_SYNC_CLIENT_SECRET", "env-secret")
        fallbacks = {
            "client_id": "yaml-id",
            "client_secret": "yaml-secret",
            "refresh_token": "yaml-token",
            "vault_root": "/yaml",
        }

        settings = load_settings(client_id="cli-id", yaml_fallbacks=fallbacks)

        assert settings.client_id == "cli-id"
        assert settings.client_secret == "env-secret"
        assert settings.refresh_token == "yaml-token"
        assert settings.vault_root == "/yaml"

    def test_env_debug_false_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("GDOC_SYNC_DEBUG", "0")
        assert load_settings(yaml_fallbacks={"debug": True}).debug is False

    def test_settings_are_immutable(self):
        with pytest.raises(AttributeError):
            load_settings().client_id = "x"


# ---------------------------------------------------------------------------
# validate_settings
# ---------------------------------------------------------------------------


class TestValidateSettings:
    def test_missing_credentials_listed(self):
        with pytest.raises(ValueError) as exc:
            validate_settings(Settings(client_id="id"))
        message = str(exc.value)
        assert "GDOC_SYNC_CLIENT_SECRET" in message
        assert "GDOC_SYNC_REFRESH_TOKEN" in message
        assert "GDOC_SYNC_CLIENT_ID" not in message

    def test_credentials_optional(self):
        validate_settings(Settings(), require_credentials=False)

    def test_bad_vault_root(self, tmp_path):
        with pytest.raises(ValueError, match="not a directory"):
            validate_settings(
                Settings(vault_root=str(tmp_path / "missing")),
                require_credentials=False,
            )

    def test_valid(self, tmp_path):
        validate_settings(
            Settings(
                client_id="id",
                client_secret="secret",
                refresh_token="token",
                vault_root=str(tmp_path),
            )
        )


# ---------------------------------------------------------------------------
# Schema and full resolution
# ---------------------------------------------------------------------------


class TestSchema:
    def test_empty_config(self):
        assert build_config({}) == UnifiedConfig()

    def test_fallbacks_flattened(self):
        unified = build_config(
            {"google": {"client_id": "id"}, "sync": {"vault_root": "/v", "debug": True}}
        )
        assert yaml_fallbacks(unified) == {
            "client_id": "id",
            "client_secret": None,
            "refresh_token": None,
            "vault_root": "/v",
            "debug": True,
        }

    def test_to_settings_overrides(self):
        unified = build_config({"google": {"client_id": "yaml-id"}})
        settings = to_settings(unified, {"client_id": "cli-id", "vault_root": "/v"})
        assert settings.client_id == "cli-id"
        assert settings.vault_root == "/v"


def test_resolve_settings_reads_yaml(tmp_path, monkeypatch):
    config = tmp_path / "config.yml"
    config.write_text(
        "google:\n"
        "  client_id: yaml-id\n"
        "  client_secret: yaml-secret\n"
        "  refresh_token: yaml-token\n"
        f"sync:\n  vault_root: {tmp_path}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **kw: False)

    settings = resolve_settings({"refresh_token": "cli-token"})

    assert settings.client_id == "yaml-id"
    assert settings.refresh_token == "cli-token"
    assert settings.vault_root == str(tmp_path)
