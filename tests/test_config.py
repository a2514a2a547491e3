"""Tests for authflow.config: paths, settings resolution, and strategy configs."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from authflow.config import (
    _atomic_write,
    get_cache_dir,
    get_config_dir,
    load_settings,
    load_strategy_config,
    parse_strategy_config,
    resolve_settings,
    save_settings,
    state_cache_dir,
)
from authflow.exceptions import ConfigurationError
from authflow.models import (
    GrantType,
    LocalConfig,
    OAuth2Config,
    OidcConfig,
    Settings,
    SocialConfig,
)


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


class TestDirectories:
    def test_config_dir_uses_xdg(self, isolated_config: Path) -> None:
        path = get_config_dir()
        assert path == isolated_config / "config" / "authflow"
        assert path.is_dir()

    def test_cache_dir_uses_xdg(self, isolated_config: Path) -> None:
        assert get_cache_dir() == isolated_config / "cache" / "authflow"

    def test_fallback_on_non_xdg_platform(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("authflow.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".authflow"
        assert get_cache_dir() == tmp_path / ".authflow" / "cache"

    def test_state_cache_dir_default(self, isolated_config: Path) -> None:
        assert state_cache_dir(Settings()) == isolated_config / "cache" / "authflow" / "state"

    def test_state_cache_dir_override(self, tmp_path: Path) -> None:
        settings = Settings(cache_dir=str(tmp_path / "custom"))
        assert state_cache_dir(settings) == tmp_path / "custom"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_file_with_private_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out.json"
        _atomic_write(target, "{}")

        assert target.read_text() == "{}"
        assert oct(os.stat(target).st_mode & 0o777) == oct(0o600)
        assert [p.name for p in target.parent.iterdir()] == ["out.json"]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        settings = load_settings()
        assert settings == Settings()
        assert settings.state_ttl_seconds == 300

    def test_save_and_load(self, isolated_config: Path) -> None:
        save_settings(Settings(session_user_key="user", state_ttl_seconds=60))
        loaded = load_settings()

        assert loaded.session_user_key == "user"
        assert loaded.state_ttl_seconds == 60

    def test_invalid_json(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings()

    def test_invalid_field(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text(
            json.dumps({"state_ttl_seconds": "soon"})
        )
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_env_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_settings(Settings(state_ttl_seconds=60, http_timeout=10.0))
        monkeypatch.setenv("AUTHFLOW_STATE_TTL", "120")
        monkeypatch.setenv("AUTHFLOW_SESSION_KEY", "env-user")
        monkeypatch.setenv("AUTHFLOW_CACHE_DIR", "/tmp/authflow-test")

        settings = resolve_settings()

        assert settings.state_ttl_seconds == 120
        assert settings.session_user_key == "env-user"
        assert settings.cache_dir == "/tmp/authflow-test"
        assert settings.http_timeout == 10.0

    def test_env_timeout(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTHFLOW_HTTP_TIMEOUT", "2.5")
        assert resolve_settings().http_timeout == 2.5

    @pytest.mark.parametrize(
        "var, value",
        [("AUTHFLOW_STATE_TTL", "five"), ("AUTHFLOW_HTTP_TIMEOUT", "slow")],
    )
    def test_invalid_env_value(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, var: str, value: str
    ) -> None:
        monkeypatch.setenv(var, value)
        with pytest.raises(ConfigurationError, match=var):
            resolve_settings()


# ---------------------------------------------------------------------------
# Strategy configs
# ---------------------------------------------------------------------------


class TestStrategyConfigs:
    @pytest.mark.parametrize(
        "data, expected_type",
        [
            ({"kind": "oauth2", "client_id": "c1"}, OAuth2Config),
            ({"kind": "oidc", "client_id": "c1", "issuer": "https://idp"}, OidcConfig),
            ({"kind": "social", "client_id": "c1", "platform": "github"}, SocialConfig),
            ({"kind": "local"}, LocalConfig),
        ],
    )
    def test_kind_selects_variant(self, data: dict, expected_type: type) -> None:
        assert type(parse_strategy_config(data)) is expected_type

    def test_enum_fields_parsed(self) -> None:
        config = parse_strategy_config(
            {"kind": "oauth2", "client_id": "c1", "grant_type": "password"}
        )
        assert config.grant_type is GrantType.PASSWORD

    def test_social_platform_upper_cased(self) -> None:
        config = parse_strategy_config(
            {"kind": "social", "client_id": "c1", "platform": " alipay "}
        )
        assert config.platform == "ALIPAY"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid strategy config"):
            parse_strategy_config({"kind": "saml", "client_id": "c1"})

    def test_missing_required_field(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_strategy_config({"kind": "oauth2"})

    def test_configs_are_frozen(self) -> None:
        config = parse_strategy_config({"kind": "oauth2", "client_id": "c1"})
        with pytest.raises(Exception):
            config.client_id = "c2"

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "github.json"
        path.write_text(json.dumps({"kind": "social", "platform": "github", "client_id": "c1"}))

        config = load_strategy_config(path)

        assert isinstance(config, SocialConfig)
        assert config.platform == "GITHUB"

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_strategy_config(tmp_path / "nope.json")

    def test_load_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_strategy_config(path)
