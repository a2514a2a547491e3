"""Per-platform protocol adapters for social login.

A :class:`SocialAdapter` knows how to talk to one third-party platform:
build its authorization URL, log in from its callback, and optionally
refresh or revoke tokens. Adapters report application-level failures as a
not-ok :class:`~authflow.models.ProviderResponse` rather than raising, so
the :class:`~authflow.social.driver.SocialLoginDriver` can check every
result the same way.

Fetching user info is an optional capability: adapters that support it also
implement :class:`UserInfoCapability`, and the driver checks for that
interface instead of probing for a method at runtime.

:class:`OAuth2SocialAdapter` covers any platform that follows plain OAuth2
with a JSON user-info endpoint; :class:`AdapterRegistry` falls back to it
for platforms with no dedicated adapter.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional
from urllib.parse import urlencode

import httpx

from authflow.exceptions import MissingAuthConfigError, ProtocolViolationError
from authflow.models import (
    PROVIDER_NOT_IMPLEMENTED,
    SCOPE_SEPARATOR,
    AccessToken,
    CallbackParameters,
    GrantType,
    ProviderResponse,
    SocialConfig,
    SocialUser,
)
from authflow.oauth2.token import request_token
from authflow.oauth2.userinfo import fetch_userinfo
from authflow.social.callback import code_field

logger = logging.getLogger(__name__)


class SocialAdapter(ABC):
    """Protocol adapter for one third-party platform.

    Args:
        config: The social login settings for the platform.
        timeout: Timeout in seconds for provider HTTP calls.
    """

    def __init__(self, config: SocialConfig, timeout: float = 30.0) -> None:
        self.config = config
        self.timeout = timeout

    @property
    def platform(self) -> str:
        return self.config.platform

    @abstractmethod
    def authorize(self, state: str) -> str:
        """Return the URL that starts the platform's authorization flow."""
        ...

    @abstractmethod
    def login(self, params: CallbackParameters) -> ProviderResponse:
        """Complete the login from the callback; ``data`` is a :class:`SocialUser`."""
        ...

    def refresh(self, token: AccessToken) -> ProviderResponse:
        """Refresh *token*; ``data`` is the new :class:`AccessToken`."""
        return ProviderResponse.failure(
            f"Token refresh is not supported by `{self.platform}`",
            code=PROVIDER_NOT_IMPLEMENTED,
        )

    def revoke(self, token: AccessToken) -> ProviderResponse:
        """Revoke *token*."""
        return ProviderResponse.failure(
            f"Token revocation is not supported by `{self.platform}`",
            code=PROVIDER_NOT_IMPLEMENTED,
        )


class UserInfoCapability(ABC):
    """Optional adapter capability: fetch the user behind an access token."""

    @abstractmethod
    def get_user_info(self, token: AccessToken) -> Optional[SocialUser]:
        ...


def _first(info: dict, *names: str) -> Optional[str]:
    for name in names:
        value = info.get(name)
        if value:
            return str(value)
    return None


class OAuth2SocialAdapter(SocialAdapter, UserInfoCapability):
    """Adapter for platforms that speak plain OAuth2 with a JSON user-info endpoint.

    Driven entirely by the endpoint fields of
    :class:`~authflow.models.SocialConfig`.
    """

    def authorize(self, state: str) -> str:
        if not self.config.authorization_url:
            raise MissingAuthConfigError(
                f"'authorization_url' is required for platform `{self.platform}`"
            )
        params: dict[str, str] = {
            "response_type": "code",
            "client_id": self.config.client_id,
        }
        if self.config.callback_url:
            params["redirect_uri"] = self.config.callback_url
        if self.config.scopes:
            params["scope"] = SCOPE_SEPARATOR.join(self.config.scopes)
        params["state"] = state
        separator = "&" if "?" in self.config.authorization_url else "?"
        return f"{self.config.authorization_url}{separator}{urlencode(params)}"

    def login(self, params: CallbackParameters) -> ProviderResponse:
        if params.error or params.error_description:
            return ProviderResponse.failure(
                f"{params.error or ''} {params.error_description or ''}".strip()
            )
        code = getattr(params, code_field(self.platform), None)
        if not code:
            return ProviderResponse.failure("Callback carries no authorization code")

        data = self._client_fields()
        data.update({"grant_type": GrantType.AUTHORIZATION_CODE.value, "code": code})
        if self.config.callback_url:
            data["redirect_uri"] = self.config.callback_url
        token = request_token(self.config.token_url, data, self.timeout)
        return ProviderResponse(data=self.get_user_info(token))

    def refresh(self, token: AccessToken) -> ProviderResponse:
        if not token.refresh_token:
            return ProviderResponse.failure("No refresh token available")
        data = self._client_fields()
        data.update(
            {
                "grant_type": GrantType.REFRESH_TOKEN.value,
                "refresh_token": token.refresh_token,
            }
        )
        return ProviderResponse(data=request_token(self.config.token_url, data, self.timeout))

    def revoke(self, token: AccessToken) -> ProviderResponse:
        if not self.config.revoke_url:
            return super().revoke(token)
        data = self._client_fields()
        data["token"] = token.access_token
        response = httpx.post(
            self.config.revoke_url,
            data=data,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        if response.is_error:
            return ProviderResponse.failure(
                f"Revocation failed with status {response.status_code}: {response.text}"
            )
        return ProviderResponse(data=True)

    def get_user_info(self, token: AccessToken) -> Optional[SocialUser]:
        info = fetch_userinfo(self.config.userinfo_url, token.access_token, self.timeout)
        uid = info.get(self.config.uid_field)
        if uid is None or uid == "":
            raise ProtocolViolationError(
                f"User info of `{self.platform}` has no '{self.config.uid_field}' field"
            )
        return SocialUser(
            uuid=str(uid),
            platform=self.platform,
            username=_first(info, "login", "username", "preferred_username"),
            nickname=_first(info, "name", "nickname"),
            avatar=_first(info, "avatar_url", "picture", "avatar"),
            email=_first(info, "email"),
            token=token,
            raw=info,
        )

    def _client_fields(self) -> dict[str, str]:
        fields = {"client_id": self.config.client_id}
        if self.config.client_secret:
            fields["client_secret"] = self.config.client_secret
        return fields


AdapterFactory = Callable[[SocialConfig], SocialAdapter]


class AdapterRegistry:
    """Maps platform identifiers to adapter factories.

    Example::

        registry = AdapterRegistry()
        registry.register("GITHUB", lambda config: GitHubAdapter(config))
        adapter = registry.resolve(social_config)
    """

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, platform: str, factory: AdapterFactory) -> None:
        """Register *factory* for *platform*, replacing any previous one."""
        self._factories[platform.upper()] = factory

    def platforms(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, config: SocialConfig, timeout: float = 30.0) -> SocialAdapter:
        """Return the adapter for ``config.platform``.

        Falls back to :class:`OAuth2SocialAdapter` when the platform has no
        registered factory but its endpoints are configured.

        Raises:
            MissingAuthConfigError: If neither is available.
        """
        factory = self._factories.get(config.platform)
        if factory is not None:
            return factory(config)
        if config.authorization_url and config.token_url:
            logger.debug("Using generic OAuth2 adapter for %s", config.platform)
            return OAuth2SocialAdapter(config, timeout)
        raise MissingAuthConfigError(
            f"No adapter registered and no endpoints configured for platform "
            f"`{config.platform}`"
        )
