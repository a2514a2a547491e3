"""OAuth2 authentication strategy.

This module provides :class:`OAuth2Strategy`, registered as ``oauth2``. For
the redirect flows (``response_type`` ``code`` or ``token``) a request that
is not a provider callback gets a redirect result carrying the authorization
URL. A callback, or any request under the password grant, goes through
:func:`~authflow.oauth2.token.get_access_token`; the resulting token is used
to fetch the user-info document, and the application's
:class:`~authflow.auth.user_service.UserService` turns that into the
session user.

See Also:
    :mod:`authflow.oidc.strategy` for discovery + delegation to this strategy.
"""

from __future__ import annotations

import logging
from typing import Any

from authflow.auth.base import AuthResult, AuthStrategy
from authflow.exceptions import AuthflowError, UserResolutionError
from authflow.models import AccessToken, OAuth2Config, ResponseType
from authflow.oauth2.authorize import build_authorize_url
from authflow.oauth2.token import get_access_token, refresh_access_token
from authflow.oauth2.userinfo import fetch_userinfo
from authflow.request import InboundRequest

logger = logging.getLogger(__name__)

_CALLBACK_PARAMS = {
    ResponseType.CODE: ("code", "error", "error_description"),
    ResponseType.TOKEN: ("access_token", "error", "error_description"),
}


def is_oauth2_callback(request: InboundRequest, config: OAuth2Config) -> bool:
    """Return ``True`` if *request* should go to the token acquirer.

    For the redirect flows that means the provider sent back a code, a
    token, or an error. Flows without a redirect (password, client
    credentials) always go straight to the token acquirer.
    """
    names = _CALLBACK_PARAMS.get(config.response_type)
    if names is None:
        return True
    return any(request.get_param(name) for name in names)


class OAuth2Strategy(AuthStrategy):
    """Authenticate through an OAuth2 provider.

    Requires an :class:`~authflow.models.OAuth2Config`; any other config
    variant fails with a configuration error.
    """

    name = "oauth2"
    config_type = OAuth2Config

    def do_authenticate(self, config: OAuth2Config, request: InboundRequest) -> AuthResult:
        if not is_oauth2_callback(request, config):
            url = build_authorize_url(
                config, self.state_cache, self.settings.state_ttl_seconds
            )
            logger.debug("%s: redirecting client %s to authorize", self.name, config.client_id)
            return AuthResult.redirect(url)

        token = get_access_token(
            request, config, self.state_cache, self.settings.http_timeout
        )
        user = self._resolve_user(config, token)
        return self.login_success(user, request)

    def refresh_token(self, config: OAuth2Config, refresh_token: str) -> AuthResult:
        """Exchange *refresh_token* for a new token.

        Returns:
            A success result whose ``data`` is the new
            :class:`~authflow.models.AccessToken`, or an error result.
        """
        try:
            checked = self.check_config(config)
            token = refresh_access_token(checked, refresh_token, self.settings.http_timeout)
        except AuthflowError as exc:
            return self._error_result(exc)
        return AuthResult.success(token)

    def _resolve_user(self, config: OAuth2Config, token: AccessToken) -> Any:
        userinfo = fetch_userinfo(
            config.userinfo_url, token.access_token, self.settings.http_timeout
        )
        try:
            user = self.user_service.create_and_get_oauth2_user(
                config.platform, userinfo, token
            )
        except AuthflowError:
            raise
        except Exception as exc:
            raise UserResolutionError(
                f"Unable to save user information of {config.platform}: {exc}"
            ) from exc
        if user is None:
            raise UserResolutionError(
                f"Unable to save user information of {config.platform}"
            )
        return user
