"""Shared test fixtures for authflow.

Provides an isolated config environment, a disposable state cache, a fake
user service, and a factory for mocked ``httpx`` responses. These fixtures
are discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from authflow.auth.user_service import UserService
from authflow.cache import StateCache
from authflow.models import AccessToken, Settings, SocialUser


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeUserService(UserService):
    """In-memory user service recording every user it creates."""

    def __init__(self) -> None:
        self.local_users: dict[str, dict[str, Any]] = {}
        self.passwords: dict[str, str] = {}
        self.social_users: dict[tuple[str, str], dict[str, Any]] = {}
        self.created: list[dict[str, Any]] = []
        self.fail_create = False

    def add_local_user(self, username: str, password: str) -> dict[str, Any]:
        user = {"id": f"local:{username}", "username": username}
        self.local_users[username] = user
        self.passwords[username] = password
        return user

    def get_by_name(self, username: str) -> Optional[dict[str, Any]]:
        return self.local_users.get(username)

    def validate_password(self, password: str, user: Any) -> bool:
        return self.passwords.get(user["username"]) == password

    def get_by_platform_and_uid(self, platform: str, uid: str) -> Optional[dict[str, Any]]:
        return self.social_users.get((platform, uid))

    def create_and_get_social_user(self, social_user: SocialUser) -> Optional[dict[str, Any]]:
        if self.fail_create:
            return None
        user = {
            "id": f"{social_user.platform}:{social_user.uuid}",
            "username": social_user.username,
        }
        self.social_users[(social_user.platform, social_user.uuid)] = user
        self.created.append(user)
        return user

    def create_and_get_oauth2_user(
        self, platform: str, userinfo: dict[str, Any], token: AccessToken
    ) -> Optional[dict[str, Any]]:
        if self.fail_create:
            return None
        uid = userinfo.get("sub") or userinfo.get("id")
        user = {"id": f"{platform}:{uid}", "access_token": token.access_token}
        self.created.append(user)
        return user


@pytest.fixture
def user_service() -> FakeUserService:
    return FakeUserService()


# ---------------------------------------------------------------------------
# Settings and caches
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(state_ttl_seconds=300, http_timeout=5.0)


@pytest.fixture
def state_cache(tmp_path: Path) -> StateCache:
    """A StateCache backed by a disposable directory."""
    cache = StateCache(tmp_path / "state", default_ttl=300)
    yield cache
    cache.close()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_CACHE_HOME to subdirectories of tmp_path so
    that tests never touch real user config, and clears all AUTHFLOW_*
    environment variables.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setattr("authflow.config._is_xdg_platform", lambda: True)

    for var in [
        "AUTHFLOW_SESSION_KEY",
        "AUTHFLOW_STATE_TTL",
        "AUTHFLOW_HTTP_TIMEOUT",
        "AUTHFLOW_CACHE_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# HTTP mocks
# ---------------------------------------------------------------------------


def _mock_response(
    json_body: Any = None,
    status_code: int = 200,
    text: Optional[str] = None,
) -> MagicMock:
    """Create a mock httpx.Response with the given JSON body and status."""
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.is_error = status_code >= 400
    mock_response.json.return_value = json_body
    mock_response.text = text if text is not None else str(json_body)

    if status_code >= 400:
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            message=f"HTTP {status_code}",
            request=MagicMock(),
            response=mock_response,
        )
    else:
        mock_response.raise_for_status.return_value = None

    return mock_response


@pytest.fixture
def http_response() -> Callable[..., MagicMock]:
    """Factory fixture: ``http_response(json_body, status_code=200, text=None)``."""
    return _mock_response
