"""Authorization URL construction for the OAuth2 redirect flows.

Building the URL is the first of the two moments the state cache is used:
the state (and, with PKCE, the code verifier) generated here is what
:func:`~authflow.oauth2.token.get_access_token` verifies on the callback.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from authflow.cache import StateCache, pkce_key, state_key
from authflow.exceptions import ConfigurationError
from authflow.models import SCOPE_SEPARATOR, OAuth2Config, ResponseType
from authflow.oauth2.pkce import generate_pkce_pair, generate_state

logger = logging.getLogger(__name__)


def build_authorize_url(
    config: OAuth2Config, state_cache: StateCache, ttl: Optional[int] = None
) -> str:
    """Return the provider authorization URL for *config*.

    The state is the configured one or a fresh random value; it is stored
    under :func:`~authflow.cache.state_key` for the client. When PKCE is
    enabled on the code flow, a verifier is stored under
    :func:`~authflow.cache.pkce_key` and its challenge added to the URL.

    Args:
        config: OAuth2 settings with ``authorization_url`` and a
            ``response_type``.
        state_cache: Cache receiving the state and verifier.
        ttl: Entry lifetime in seconds; the cache default when omitted.

    Raises:
        ConfigurationError: If ``authorization_url`` or ``response_type`` is
            missing.
    """
    if not config.authorization_url:
        raise ConfigurationError("'authorization_url' is required for the redirect flow")
    if config.response_type is None:
        raise ConfigurationError("'response_type' is required for the redirect flow")

    state = config.state or generate_state()
    state_cache.put(state_key(config.client_id), state, ttl)

    params: dict[str, str] = {
        "response_type": ResponseType(config.response_type).value,
        "client_id": config.client_id,
    }
    if config.callback_url:
        params["redirect_uri"] = config.callback_url
    if config.scopes:
        params["scope"] = SCOPE_SEPARATOR.join(config.scopes)
    params["state"] = state

    # PKCE only applies to the authorization code flow
    if config.enable_pkce and config.response_type == ResponseType.CODE:
        code_verifier, code_challenge = generate_pkce_pair(config.code_challenge_method)
        state_cache.put(pkce_key(config.client_id), code_verifier, ttl)
        params["code_challenge"] = code_challenge
        params["code_challenge_method"] = config.code_challenge_method.value

    logger.debug("Built authorization URL for client %s", config.client_id)
    separator = "&" if "?" in config.authorization_url else "?"
    return f"{config.authorization_url}{separator}{urlencode(params)}"
