"""OAuth2 token engine and strategy.

Exports:
    :class:`OAuth2Strategy` -- the ``oauth2`` authentication strategy.
    :func:`get_access_token` -- grant-type dispatch for token acquisition.
    :func:`refresh_access_token` -- refresh token grant.
    :func:`map_to_access_token` -- token endpoint body normaliser.
    :func:`build_authorize_url` -- authorization URL with state and PKCE.
    :func:`generate_pkce_pair` -- PKCE ``code_verifier`` / ``code_challenge``.
"""

from authflow.oauth2.authorize import build_authorize_url
from authflow.oauth2.pkce import generate_pkce_pair, generate_state
from authflow.oauth2.strategy import OAuth2Strategy
from authflow.oauth2.token import (
    get_access_token,
    map_to_access_token,
    refresh_access_token,
)

__all__ = [
    "OAuth2Strategy",
    "build_authorize_url",
    "generate_pkce_pair",
    "generate_state",
    "get_access_token",
    "map_to_access_token",
    "refresh_access_token",
]
