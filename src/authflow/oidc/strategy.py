"""OpenID Connect strategy -- discovers endpoints and delegates to OAuth2.

This module provides :class:`OidcStrategy`, registered as ``oidc``. It
fetches the issuer's discovery document
(``<issuer>/.well-known/openid-configuration``), fills in any endpoint the
:class:`~authflow.models.OidcConfig` leaves unset, and runs the resulting
:class:`~authflow.models.OAuth2Config` through the OAuth2 flow.

Discovery documents are cached per issuer for the lifetime of the strategy
instance to avoid redundant HTTP requests.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

from authflow.auth.base import AuthResult
from authflow.exceptions import AuthflowError, ProtocolViolationError, ProviderRejectionError
from authflow.models import OAuth2Config, OidcConfig
from authflow.oauth2.strategy import OAuth2Strategy
from authflow.oauth2.token import refresh_access_token
from authflow.request import InboundRequest

logger = logging.getLogger(__name__)

DISCOVERY_PATH = "/.well-known/openid-configuration"


def discovery_url(issuer: str) -> str:
    """Return the discovery document URL for *issuer*."""
    if issuer.endswith(DISCOVERY_PATH):
        return issuer
    return issuer.rstrip("/") + DISCOVERY_PATH


class OidcStrategy(OAuth2Strategy):
    """Authenticate via OpenID Connect.

    Only accepts :class:`~authflow.models.OidcConfig`.
    """

    name = "oidc"
    config_type = OidcConfig

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._discovery: dict[str, dict[str, Any]] = {}
        self._discovery_lock = threading.Lock()

    def do_authenticate(self, config: OidcConfig, request: InboundRequest) -> AuthResult:
        return super().do_authenticate(self.resolve_config(config), request)

    def refresh_token(self, config: OidcConfig, refresh_token: str) -> AuthResult:
        try:
            checked = self.check_config(config)
            resolved = self.resolve_config(checked)
            token = refresh_access_token(resolved, refresh_token, self.settings.http_timeout)
        except AuthflowError as exc:
            return self._error_result(exc)
        return AuthResult.success(token)

    def discover(self, issuer: str) -> dict[str, Any]:
        """Fetch (or return the cached) discovery document for *issuer*.

        Raises:
            ProviderRejectionError: If the document cannot be fetched.
            ProtocolViolationError: If it is not JSON or lacks
                ``authorization_endpoint`` / ``token_endpoint``.
        """
        with self._discovery_lock:
            cached = self._discovery.get(issuer)
        if cached is not None:
            return cached

        url = discovery_url(issuer)
        logger.debug("Fetching OpenID discovery document from %s", url)
        try:
            response = httpx.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.settings.http_timeout,
            )
            response.raise_for_status()
            doc = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderRejectionError(
                f"OpenID discovery failed with status {exc.response.status_code}: "
                f"{exc.response.text}",
                body=exc.response.text,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderRejectionError(f"OpenID discovery failed: {exc}") from exc
        except ValueError as exc:
            raise ProtocolViolationError(
                f"OpenID discovery document is not JSON: {response.text}"
            ) from exc

        if not isinstance(doc, dict):
            raise ProtocolViolationError("OpenID discovery document is not a JSON object")
        for field in ("authorization_endpoint", "token_endpoint"):
            if field not in doc:
                raise ProtocolViolationError(f"OpenID discovery document missing '{field}'")

        with self._discovery_lock:
            self._discovery[issuer] = doc
        return doc

    def resolve_config(self, config: OidcConfig) -> OAuth2Config:
        """Build the OAuth2 config for *config*, discovering missing endpoints.

        Discovery is skipped when every endpoint is already configured.
        """
        if config.authorization_url and config.token_url and config.userinfo_url:
            return config.to_oauth2_config({})
        return config.to_oauth2_config(self.discover(config.issuer))
