"""Social (third-party platform) login.

Exports:
    :class:`SocialStrategy` -- the ``social`` authentication strategy.
    :class:`SocialLoginDriver` -- uniform wrapper around platform adapters.
    :class:`SocialAdapter`, :class:`UserInfoCapability`,
    :class:`OAuth2SocialAdapter`, :class:`AdapterRegistry` -- the adapter
    contract, the generic OAuth2 adapter, and the platform registry.
    :func:`is_callback` -- start-versus-callback classification.
"""

from authflow.social.adapter import (
    AdapterRegistry,
    OAuth2SocialAdapter,
    SocialAdapter,
    UserInfoCapability,
)
from authflow.social.callback import CALLBACK_CODE_FIELDS, is_callback, parse_callback
from authflow.social.driver import SocialLoginDriver
from authflow.social.strategy import SocialStrategy

__all__ = [
    "AdapterRegistry",
    "CALLBACK_CODE_FIELDS",
    "OAuth2SocialAdapter",
    "SocialAdapter",
    "SocialLoginDriver",
    "SocialStrategy",
    "UserInfoCapability",
    "is_callback",
    "parse_callback",
]
