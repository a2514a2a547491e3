"""Social login driver -- one contract over any :class:`SocialAdapter`.

The driver is the only code that calls adapters. It normalises their two
failure styles into exceptions: an adapter that raises has the error wrapped
into :class:`~authflow.exceptions.ProviderRejectionError`, and an adapter
that returns a not-ok :class:`~authflow.models.ProviderResponse` or a
``None`` payload is treated as failed even if the HTTP exchange itself
succeeded.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from authflow.exceptions import (
    AuthflowError,
    ProviderRejectionError,
    UnsupportedOperationError,
)
from authflow.models import AccessToken, CallbackParameters, ProviderResponse, SocialUser
from authflow.social.adapter import SocialAdapter, UserInfoCapability

logger = logging.getLogger(__name__)


class SocialLoginDriver:
    """Drive a platform adapter through authorize, login, refresh, and revoke.

    Args:
        adapter: The resolved adapter for the platform.
    """

    def __init__(self, adapter: SocialAdapter) -> None:
        self.adapter = adapter

    @property
    def platform(self) -> str:
        return self.adapter.platform

    def authorize(self, state: str) -> str:
        """Return the authorization URL for the start path."""
        try:
            return self.adapter.authorize(state)
        except AuthflowError:
            raise
        except Exception as exc:
            raise ProviderRejectionError(
                f"Third party authorize of `{self.platform}` failed. {exc}"
            ) from exc

    def login(self, params: CallbackParameters) -> SocialUser:
        """Log in from the callback and return the platform user.

        Raises:
            ProviderRejectionError: If the adapter failed or returned no user.
        """
        response = self._call("login", self.adapter.login, params)
        return response.data

    def refresh(self, token: AccessToken) -> ProviderResponse:
        """Refresh *token*; the response ``data`` holds the new token."""
        return self._call("refresh access token", self.adapter.refresh, token)

    def revoke(self, token: AccessToken) -> ProviderResponse:
        """Revoke *token* at the platform."""
        return self._call("revoke access token", self.adapter.revoke, token)

    def user_info(self, token: AccessToken) -> SocialUser:
        """Fetch the user behind *token*.

        Raises:
            UnsupportedOperationError: If the adapter lacks
                :class:`~authflow.social.adapter.UserInfoCapability`.
            ProviderRejectionError: If the adapter failed or returned nothing.
        """
        adapter = self.adapter
        if not isinstance(adapter, UserInfoCapability):
            raise UnsupportedOperationError(
                f"Third party platform `{self.platform}` does not support user info"
            )
        try:
            user = adapter.get_user_info(token)
        except AuthflowError:
            raise
        except Exception as exc:
            raise ProviderRejectionError(
                f"Failed to obtain user information on the third-party platform "
                f"`{self.platform}`. {exc}"
            ) from exc
        if user is None:
            raise ProviderRejectionError(
                f"Failed to obtain user information on the third-party platform "
                f"`{self.platform}`"
            )
        return user

    def _call(
        self, action: str, func: Callable[[Any], ProviderResponse], arg: Any
    ) -> ProviderResponse:
        try:
            response = func(arg)
        except AuthflowError:
            raise
        except Exception as exc:
            raise ProviderRejectionError(
                f"Third party {action} of `{self.platform}` failed. {exc}"
            ) from exc

        if response is None or not response.ok() or response.data is None:
            msg = response.msg if response is not None else None
            logger.warning("Third party %s of %s failed: %s", action, self.platform, msg)
            raise ProviderRejectionError(
                f"Third party {action} of `{self.platform}` failed. {msg or ''}".strip(),
                body=msg,
            )
        return response
