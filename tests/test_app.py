"""Tests for the authflow developer CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

from typer.testing import CliRunner

from authflow import __version__
from authflow.app import app
from authflow.cache import StateCache, state_key
from authflow.config import get_cache_dir, load_settings, save_settings
from authflow.models import Settings

runner = CliRunner()


def _write_config(directory: Path, name: str, data: dict) -> Path:
    path = directory / name
    path.write_text(json.dumps(data))
    return path


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"authflow {__version__}" in result.output


class TestPlatforms:
    def test_lists_callback_fields(self) -> None:
        result = runner.invoke(app, ["platforms"])
        assert result.exit_code == 0
        assert "ALIPAY" in result.output
        assert "auth_code" in result.output
        assert "HUAWEI" in result.output
        assert "TWITTER" in result.output


class TestAuthorizeUrl:
    def test_oauth2_config(self, isolated_config: Path) -> None:
        path = _write_config(
            isolated_config,
            "oauth2.json",
            {
                "kind": "oauth2",
                "client_id": "c1",
                "authorization_url": "https://idp.example.com/authorize",
                "response_type": "code",
            },
        )

        result = runner.invoke(app, ["authorize-url", str(path)])

        assert result.exit_code == 0, result.output
        url = result.output.strip()
        assert url.startswith("https://idp.example.com/authorize?")
        state = parse_qs(urlparse(url).query)["state"][0]

        cache = StateCache(get_cache_dir() / "state")
        try:
            assert cache.get(state_key("c1")) == state
        finally:
            cache.close()

    def test_social_config(self, isolated_config: Path) -> None:
        path = _write_config(
            isolated_config,
            "gitea.json",
            {
                "kind": "social",
                "platform": "gitea",
                "client_id": "c1",
                "state": "fixed",
                "authorization_url": "https://gitea.example.com/login/oauth/authorize",
                "token_url": "https://gitea.example.com/login/oauth/access_token",
            },
        )

        result = runner.invoke(app, ["authorize-url", str(path)])

        assert result.exit_code == 0, result.output
        assert "state=fixed" in result.output

    def test_local_config_has_no_url(self, isolated_config: Path) -> None:
        path = _write_config(isolated_config, "local.json", {"kind": "local"})

        result = runner.invoke(app, ["authorize-url", str(path)])

        assert result.exit_code == 1
        assert "Error (1001)" in result.output

    def test_missing_file(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["authorize-url", str(isolated_config / "nope.json")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestToken:
    def test_password_grant(self, isolated_config: Path, http_response) -> None:
        path = _write_config(
            isolated_config,
            "password.json",
            {
                "kind": "oauth2",
                "client_id": "c1",
                "client_secret": "s1",
                "token_url": "https://idp.example.com/token",
                "grant_type": "password",
                "username": "u",
                "password": "p",
            },
        )
        resp = http_response({"access_token": "tok1", "expires_in": "7200"})

        with patch("authflow.oauth2.token.httpx.post", return_value=resp):
            result = runner.invoke(app, ["token", str(path)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["access_token"] == "tok1"
        assert json.loads(result.output)["expires_in"] == 7200

    def test_provider_rejection(self, isolated_config: Path, http_response) -> None:
        path = _write_config(
            isolated_config,
            "password.json",
            {
                "kind": "oauth2",
                "client_id": "c1",
                "token_url": "https://idp.example.com/token",
                "grant_type": "password",
                "username": "u",
                "password": "wrong",
            },
        )
        resp = http_response({"error": "invalid_grant"}, status_code=400)

        with patch("authflow.oauth2.token.httpx.post", return_value=resp):
            result = runner.invoke(app, ["token", str(path)])

        assert result.exit_code == 1
        assert "Error (1005)" in result.output

    def test_requires_oauth2_config(self, isolated_config: Path) -> None:
        path = _write_config(
            isolated_config, "social.json", {"kind": "social", "platform": "x", "client_id": "c"}
        )
        result = runner.invoke(app, ["token", str(path)])
        assert result.exit_code == 1
        assert "oauth2" in result.output


class TestConfigCommands:
    def test_show_prints_settings(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert '"state_ttl_seconds": 300' in result.output

    def test_set_persists_value(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "state_ttl_seconds", "600"])

        assert result.exit_code == 0, result.output
        assert "Set state_ttl_seconds = 600" in result.output
        assert load_settings().state_ttl_seconds == 600

    def test_set_keeps_other_fields(self, isolated_config: Path) -> None:
        save_settings(Settings(http_timeout=5.0))

        runner.invoke(app, ["config", "set", "session_user_key", "me"])

        settings = load_settings()
        assert settings.session_user_key == "me"
        assert settings.http_timeout == 5.0

    def test_set_unknown_key(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "no_such_key", "1"])

        assert result.exit_code == 2
        assert "Unknown settings key" in result.output

    def test_set_invalid_value_writes_nothing(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "state_ttl_seconds", "soon"])

        assert result.exit_code == 2
        assert "Validation error" in result.output
        assert load_settings().state_ttl_seconds == 300

    def test_reset_force(self, isolated_config: Path) -> None:
        save_settings(Settings(state_ttl_seconds=42))

        result = runner.invoke(app, ["config", "reset", "--force"])

        assert result.exit_code == 0
        assert load_settings() == Settings()

    def test_reset_cancelled(self, isolated_config: Path) -> None:
        save_settings(Settings(state_ttl_seconds=42))

        result = runner.invoke(app, ["config", "reset"], input="n\n")

        assert "Cancelled" in result.output
        assert load_settings().state_ttl_seconds == 42
