"""Social login strategy.

:class:`SocialStrategy`, registered as ``social``, completes third-party
login in four steps:

1. A request that is not a platform callback gets a redirect result with the
   platform's authorization URL; the state sent along is cached under the
   client id and platform.
2. A callback has its state verified and is handed to the platform adapter
   through :class:`~authflow.social.driver.SocialLoginDriver`, which returns
   the platform user.
3. The platform user is mapped onto an application user with
   :meth:`~authflow.auth.user_service.UserService.get_by_platform_and_uid`,
   creating one with
   :meth:`~authflow.auth.user_service.UserService.create_and_get_social_user`
   on first login.
4. The user is stored in the session and returned.

Token refresh, revocation, and user-info lookups for an existing login are
exposed as :meth:`SocialStrategy.refresh_token`,
:meth:`SocialStrategy.revoke_token`, and :meth:`SocialStrategy.get_user_info`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from authflow.auth.base import AuthResult, AuthStrategy
from authflow.auth.user_service import UserService
from authflow.cache import StateCache, state_key
from authflow.exceptions import AuthflowError, UserResolutionError
from authflow.models import AccessToken, SocialConfig, SocialUser, Settings
from authflow.oauth2.pkce import generate_state
from authflow.oauth2.token import verify_state
from authflow.request import InboundRequest
from authflow.social.adapter import AdapterRegistry
from authflow.social.callback import TWITTER, is_callback, parse_callback
from authflow.social.driver import SocialLoginDriver

logger = logging.getLogger(__name__)


class SocialStrategy(AuthStrategy):
    """Authenticate through a third-party social platform.

    Args:
        user_service: The application's user lookup collaborator.
        settings: Package settings.
        state_cache: Cache for the state values.
        adapters: Registry of platform adapters; an empty registry (generic
            OAuth2 adapter only) when omitted.
    """

    name = "social"
    config_type = SocialConfig

    def __init__(
        self,
        user_service: UserService,
        settings: Optional[Settings] = None,
        state_cache: Optional[StateCache] = None,
        adapters: Optional[AdapterRegistry] = None,
    ) -> None:
        super().__init__(user_service, settings, state_cache)
        self.adapters = adapters or AdapterRegistry()

    def driver_for(self, config: SocialConfig) -> SocialLoginDriver:
        """Return a driver around the adapter resolved for ``config.platform``."""
        return SocialLoginDriver(self.adapters.resolve(config, self.settings.http_timeout))

    def do_authenticate(self, config: SocialConfig, request: InboundRequest) -> AuthResult:
        driver = self.driver_for(config)
        platform = config.platform
        params = parse_callback(request)

        if not is_callback(platform, params):
            state = config.state or generate_state()
            self.state_cache.put(
                state_key(config.client_id, platform),
                state,
                self.settings.state_ttl_seconds,
            )
            logger.debug("%s: redirecting to %s authorization", self.name, platform)
            return AuthResult.redirect(driver.authorize(state))

        # OAuth1 style Twitter callbacks carry oauth_token/oauth_verifier, no state
        twitter_oauth1 = platform == TWITTER and params.oauth_token is not None
        if config.verify_state and not twitter_oauth1:
            verify_state(params.state, config.client_id, self.state_cache, platform)

        social_user = driver.login(params)
        user = self._resolve_user(platform, social_user)
        return self.login_success(user, request)

    def refresh_token(self, config: SocialConfig, token: AccessToken) -> AuthResult:
        """Refresh *token*; on success ``data`` is the new access token."""
        try:
            checked = self.check_config(config)
            response = self.driver_for(checked).refresh(token)
        except AuthflowError as exc:
            return self._error_result(exc)
        return AuthResult.success(response.data)

    def revoke_token(self, config: SocialConfig, token: AccessToken) -> AuthResult:
        """Revoke *token* at the platform."""
        try:
            checked = self.check_config(config)
            self.driver_for(checked).revoke(token)
        except AuthflowError as exc:
            return self._error_result(exc)
        return AuthResult.success()

    def get_user_info(self, config: SocialConfig, token: AccessToken) -> AuthResult:
        """Fetch the platform user behind *token*."""
        try:
            checked = self.check_config(config)
            social_user = self.driver_for(checked).user_info(token)
        except AuthflowError as exc:
            return self._error_result(exc)
        return AuthResult.success(social_user)

    def _resolve_user(self, platform: str, social_user: SocialUser) -> Any:
        try:
            user = self.user_service.get_by_platform_and_uid(platform, social_user.uuid)
            if user is not None:
                return user
            user = self.user_service.create_and_get_social_user(social_user)
        except AuthflowError:
            raise
        except Exception as exc:
            raise UserResolutionError(
                f"Unable to resolve user information of {platform}: {exc}"
            ) from exc
        if user is None:
            raise UserResolutionError(f"Unable to save user information of {platform}")
        return user
