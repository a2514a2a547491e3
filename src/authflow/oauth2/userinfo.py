"""User-info endpoint lookup shared by the OAuth2 strategy and social adapters."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from authflow.exceptions import ConfigurationError, ProtocolViolationError, ProviderRejectionError

logger = logging.getLogger(__name__)


def fetch_userinfo(
    userinfo_url: Optional[str], access_token: str, timeout: float = 30.0
) -> dict[str, Any]:
    """GET the user-info document with a bearer token.

    Args:
        userinfo_url: The provider's user-info endpoint.
        access_token: A valid access token.
        timeout: Request timeout in seconds.

    Returns:
        The parsed JSON object.

    Raises:
        ConfigurationError: If *userinfo_url* is not configured.
        ProviderRejectionError: On transport errors or non-2xx statuses.
        ProtocolViolationError: If the body is not a JSON object.
    """
    if not userinfo_url:
        raise ConfigurationError("'userinfo_url' is required to resolve the user")

    logger.debug("Fetching user info from %s", userinfo_url)
    try:
        response = httpx.get(
            userinfo_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
        )
        response.raise_for_status()
        userinfo = response.json()
    except httpx.HTTPStatusError as exc:
        raise ProviderRejectionError(
            f"User info request failed with status {exc.response.status_code}: "
            f"{exc.response.text}",
            body=exc.response.text,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderRejectionError(f"User info request failed: {exc}") from exc
    except ValueError as exc:
        raise ProtocolViolationError(
            f"User info endpoint did not return JSON: {response.text}"
        ) from exc

    if not isinstance(userinfo, dict):
        raise ProtocolViolationError("User info endpoint did not return a JSON object")
    return userinfo
