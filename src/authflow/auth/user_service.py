"""User resolution collaborator.

Strategies never persist users themselves. They ask a :class:`UserService`
supplied by the application to look up or create the internal user that
corresponds to an external identity. Subclass it and override the methods
your strategies need; the defaults raise
:class:`~authflow.exceptions.UnsupportedOperationError` so a missing
override surfaces as a clear error result instead of a crash.

A ``None`` return from any ``create_and_get_*`` method is treated as a hard
failure by the calling strategy.
"""

from __future__ import annotations

from typing import Any, Optional

from authflow.exceptions import UnsupportedOperationError
from authflow.models import AccessToken, SocialUser


class UserService:
    """Base class for application user lookups used by the strategies."""

    def get_by_name(self, username: str) -> Optional[Any]:
        """Return the local user named *username*, or ``None``."""
        raise UnsupportedOperationError("UserService.get_by_name is not implemented")

    def validate_password(self, password: str, user: Any) -> bool:
        """Return ``True`` if *password* is valid for *user*."""
        raise UnsupportedOperationError(
            "UserService.validate_password is not implemented"
        )

    def get_by_platform_and_uid(self, platform: str, uid: str) -> Optional[Any]:
        """Return the user bound to *uid* on the third-party *platform*, or ``None``."""
        raise UnsupportedOperationError(
            "UserService.get_by_platform_and_uid is not implemented"
        )

    def create_and_get_social_user(self, social_user: SocialUser) -> Optional[Any]:
        """Persist a user for a first-time social login and return it."""
        raise UnsupportedOperationError(
            "UserService.create_and_get_social_user is not implemented"
        )

    def create_and_get_oauth2_user(
        self, platform: str, userinfo: dict[str, Any], token: AccessToken
    ) -> Optional[Any]:
        """Create or update the user behind an OAuth2/OIDC login and return it."""
        raise UnsupportedOperationError(
            "UserService.create_and_get_oauth2_user is not implemented"
        )
