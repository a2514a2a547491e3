"""Start-versus-callback classification for social login requests.

Most platforms redirect back with a ``code`` parameter, but a few use a
different name. Those are listed in :data:`CALLBACK_CODE_FIELDS`, a small,
fixed table of exceptions keyed by platform identifier. It is not derived
from any rule; add an entry only when a platform is known to differ.

Twitter is OAuth1 flavoured and is recognised by ``oauth_token`` instead.
"""

from __future__ import annotations

from authflow.models import CallbackParameters
from authflow.request import InboundRequest

TWITTER = "TWITTER"

DEFAULT_CODE_FIELD = "code"

CALLBACK_CODE_FIELDS: dict[str, str] = {
    "ALIPAY": "auth_code",
    "HUAWEI": "authorization_code",
}
"""Platforms whose callback carries the authorization code under another name."""


def code_field(platform: str) -> str:
    """Return the name of the parameter holding the code for *platform*."""
    return CALLBACK_CODE_FIELDS.get(platform, DEFAULT_CODE_FIELD)


def parse_callback(request: InboundRequest) -> CallbackParameters:
    """Extract the callback parameters from *request*."""
    return CallbackParameters.from_params(request.params)


def is_callback(platform: str, params: CallbackParameters) -> bool:
    """Return ``True`` if *params* belong to a provider callback.

    Rules, in order:

    1. On Twitter, the presence of ``oauth_token`` marks a callback.
    2. Otherwise the platform's code field (see :func:`code_field`) must be
       non-empty.
    """
    if platform == TWITTER and params.oauth_token is not None:
        return True
    return bool(getattr(params, code_field(platform), None))
