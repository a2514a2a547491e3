"""OAuth2 access token acquisition.

:func:`get_access_token` is the single entry point for obtaining an
:class:`~authflow.models.AccessToken` from an OAuth2 callback or config. It
dispatches on the config's ``response_type`` and ``grant_type`` in a fixed
order, first match wins:

1. ``response_type=code`` -- Authorization Code Grant (:rfc:`6749` section 4.1),
   with state verification and optional PKCE (:rfc:`7636`).
2. ``response_type=token`` -- Implicit Grant (section 4.2); the token is read
   from the callback request, no server round trip.
3. ``grant_type=password`` -- Resource Owner Password Credentials Grant
   (section 4.3).
4. ``grant_type=client_credentials`` -- always rejected with
   :class:`~authflow.exceptions.UnsupportedOperationError`.

A config matching none of these fails with a configuration error.

Token endpoint responses are validated before they are mapped: transport
errors, non-2xx statuses, and ``error``/``error_description`` bodies raise
:class:`~authflow.exceptions.ProviderRejectionError` with the raw body
attached; a body without ``access_token`` raises
:class:`~authflow.exceptions.ProtocolViolationError`. Only a validated body
reaches :func:`map_to_access_token`. Failed exchanges are never retried,
since authorization codes are single use.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from authflow.cache import StateCache, pkce_key, state_key
from authflow.exceptions import (
    ConfigurationError,
    ProtocolViolationError,
    ProviderRejectionError,
    StateVerificationError,
    UnsupportedOperationError,
)
from authflow.models import (
    SCOPE_SEPARATOR,
    AccessToken,
    GrantType,
    OAuth2Config,
    ResponseType,
)
from authflow.request import InboundRequest

logger = logging.getLogger(__name__)

_FAILURE_PREFIX = "Failed to get OAuth2 access token."


def _to_int(value: Any) -> Optional[int]:
    """Coerce ``expires_in`` to an int; ``None`` when absent or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def map_to_access_token(token_info: Mapping[str, Any]) -> AccessToken:
    """Normalise a validated token endpoint body into an :class:`AccessToken`.

    String fields are kept verbatim; ``expires_in`` is coerced to ``int``
    (``"3600"`` -> ``3600``) and left ``None`` when it cannot be parsed.
    """
    return AccessToken(
        access_token=_to_str(token_info["access_token"]),
        refresh_token=_to_str(token_info.get("refresh_token")),
        id_token=_to_str(token_info.get("id_token")),
        token_type=_to_str(token_info.get("token_type")),
        scope=_to_str(token_info.get("scope")),
        expires_in=_to_int(token_info.get("expires_in")),
    )


def check_callback_error(
    error: Optional[str], error_description: Optional[str], message: str = _FAILURE_PREFIX
) -> None:
    """Raise if the provider redirected back with an ``error`` pair.

    Raises:
        ProviderRejectionError: If either value is non-empty.
    """
    if error or error_description:
        detail = f"{error or ''} {error_description or ''}".strip()
        raise ProviderRejectionError(f"{message} {detail}")


def check_token_response(token_info: Mapping[str, Any], raw: str, message: str) -> None:
    """Validate a parsed token endpoint body.

    Raises:
        ProviderRejectionError: If the body carries ``error`` or
            ``error_description``.
        ProtocolViolationError: If ``access_token`` is absent.
    """
    if token_info.get("error") or token_info.get("error_description"):
        detail = f"{token_info.get('error') or ''} {token_info.get('error_description') or ''}"
        raise ProviderRejectionError(f"{message} {detail.strip()}", body=raw)
    if not token_info.get("access_token"):
        raise ProtocolViolationError(
            f"{message} Token response missing 'access_token' field: {raw}"
        )


def request_token(
    token_url: Optional[str], data: dict[str, str], timeout: float = 30.0
) -> AccessToken:
    """POST a form body to the token endpoint and return the validated token.

    Args:
        token_url: The provider's token endpoint.
        data: Form fields; ``grant_type`` selects the grant.
        timeout: Request timeout in seconds.

    Raises:
        ConfigurationError: If *token_url* is not configured.
        ProviderRejectionError: On transport errors, non-2xx statuses, or an
            ``error`` body.
        ProtocolViolationError: If the body is not a JSON object or has no
            ``access_token``.
    """
    if not token_url:
        raise ConfigurationError(f"{_FAILURE_PREFIX} 'token_url' is required")

    logger.debug("Requesting %s token from %s", data.get("grant_type"), token_url)
    try:
        response = httpx.post(
            token_url,
            data=data,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        response.raise_for_status()
        token_info = response.json()
    except httpx.HTTPStatusError as exc:
        raise ProviderRejectionError(
            f"{_FAILURE_PREFIX} Token endpoint returned status "
            f"{exc.response.status_code}: {exc.response.text}",
            body=exc.response.text,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderRejectionError(f"{_FAILURE_PREFIX} {exc}") from exc
    except ValueError as exc:
        raise ProtocolViolationError(
            f"{_FAILURE_PREFIX} Token endpoint did not return JSON: {response.text}"
        ) from exc

    if not isinstance(token_info, dict):
        raise ProtocolViolationError(
            f"{_FAILURE_PREFIX} Token endpoint did not return a JSON object: {response.text}"
        )

    check_token_response(token_info, response.text, _FAILURE_PREFIX)
    return map_to_access_token(token_info)


def verify_state(
    state: Optional[str], client_id: str, state_cache: StateCache, platform: Optional[str] = None
) -> None:
    """Check the callback *state* against the cached value and consume it.

    Raises:
        StateVerificationError: If no state was presented, none is cached
            for the client, or the two differ.
    """
    if not state_cache.consume(state, state_key(client_id, platform)):
        logger.warning("State verification failed for client %s", client_id)
        raise StateVerificationError(
            "Illegal state: the callback state is missing, expired, or does not "
            "match the cached value"
        )


def _client_fields(config: OAuth2Config) -> dict[str, str]:
    fields = {"client_id": config.client_id}
    if config.client_secret:
        fields["client_secret"] = config.client_secret
    return fields


def _authorization_code_token(
    request: InboundRequest, config: OAuth2Config, state_cache: StateCache, timeout: float
) -> AccessToken:
    if config.verify_state:
        verify_state(request.get_param("state"), config.client_id, state_cache)

    check_callback_error(request.get_param("error"), request.get_param("error_description"))

    code = request.get_param("code")
    if not code:
        raise ProtocolViolationError(f"{_FAILURE_PREFIX} Callback request missing 'code'")

    data: dict[str, str] = {
        "grant_type": GrantType.AUTHORIZATION_CODE.value,
        "code": code,
        **_client_fields(config),
    }
    if config.callback_url:
        data["redirect_uri"] = config.callback_url
    if config.enable_pkce:
        code_verifier = state_cache.pop(pkce_key(config.client_id))
        if not code_verifier:
            raise StateVerificationError(
                "PKCE code verifier is missing or expired for this client"
            )
        data["code_verifier"] = code_verifier

    return request_token(config.token_url, data, timeout)


def _implicit_token(request: InboundRequest) -> AccessToken:
    check_callback_error(request.get_param("error"), request.get_param("error_description"))

    access_token = request.get_param("access_token")
    if not access_token:
        raise ProtocolViolationError(
            f"{_FAILURE_PREFIX} Callback request missing 'access_token'"
        )

    return AccessToken(
        access_token=access_token,
        refresh_token=request.get_param("refresh_token"),
        id_token=request.get_param("id_token"),
        token_type=request.get_param("token_type"),
        scope=request.get_param("scope"),
        expires_in=_to_int(request.get_param("expires_in")),
    )


def _password_token(config: OAuth2Config, timeout: float) -> AccessToken:
    if not config.username or not config.password:
        raise ConfigurationError(
            f"{_FAILURE_PREFIX} The password grant requires 'username' and 'password'"
        )

    data: dict[str, str] = {
        "grant_type": GrantType.PASSWORD.value,
        "username": config.username,
        "password": config.password,
        **_client_fields(config),
    }
    if config.scopes:
        data["scope"] = SCOPE_SEPARATOR.join(config.scopes)

    return request_token(config.token_url, data, timeout)


def get_access_token(
    request: InboundRequest,
    config: OAuth2Config,
    state_cache: StateCache,
    timeout: float = 30.0,
) -> AccessToken:
    """Obtain an access token for *config*, using *request* when the grant needs it.

    Args:
        request: The current callback request.
        config: OAuth2 settings; ``response_type`` and ``grant_type`` select
            the flow.
        state_cache: Cache holding the state and PKCE verifier for the client.
        timeout: Token endpoint timeout in seconds.

    Returns:
        The validated :class:`~authflow.models.AccessToken`.

    Raises:
        ConfigurationError: If *config* is missing or matches no flow.
        StateVerificationError: On a state or PKCE verifier mismatch.
        ProviderRejectionError: If the provider reported an error.
        ProtocolViolationError: If a required field is missing.
        UnsupportedOperationError: For the client credentials grant.
    """
    if config is None:
        raise ConfigurationError(f"{_FAILURE_PREFIX} OAuth2 config cannot be empty")

    if config.response_type == ResponseType.CODE:
        return _authorization_code_token(request, config, state_cache, timeout)
    if config.response_type == ResponseType.TOKEN:
        return _implicit_token(request)
    if config.grant_type == GrantType.PASSWORD:
        return _password_token(config, timeout)
    if config.grant_type == GrantType.CLIENT_CREDENTIALS:
        raise UnsupportedOperationError(
            f"{_FAILURE_PREFIX} Grant type of client_credentials type is not supported"
        )
    raise ConfigurationError(f"{_FAILURE_PREFIX} Missing required parameters")


def refresh_access_token(
    config: OAuth2Config, refresh_token: str, timeout: float = 30.0
) -> AccessToken:
    """Exchange *refresh_token* for a new access token (:rfc:`6749` section 6).

    Raises:
        ConfigurationError: If *refresh_token* is empty or ``token_url`` unset.
        ProviderRejectionError: If the provider rejected the refresh.
        ProtocolViolationError: If the response has no ``access_token``.
    """
    if not refresh_token:
        raise ConfigurationError(f"{_FAILURE_PREFIX} A refresh token is required")

    data: dict[str, str] = {
        "grant_type": GrantType.REFRESH_TOKEN.value,
        "refresh_token": refresh_token,
        **_client_fields(config),
    }
    if config.scopes:
        data["scope"] = SCOPE_SEPARATOR.join(config.scopes)
    return request_token(config.token_url, data, timeout)
