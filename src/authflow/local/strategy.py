"""Local username/password strategy, registered as ``local``."""

from __future__ import annotations

from authflow.auth.base import AuthResult, AuthStrategy
from authflow.exceptions import AuthflowError, InvalidCredentialsError, UserResolutionError
from authflow.models import LocalConfig
from authflow.request import InboundRequest


class LocalStrategy(AuthStrategy):
    """Authenticate against the application's own user records.

    Reads the username and password from the request parameters named in
    :class:`~authflow.models.LocalConfig` and checks them with the
    :class:`~authflow.auth.user_service.UserService`.
    """

    name = "local"
    config_type = LocalConfig

    def do_authenticate(self, config: LocalConfig, request: InboundRequest) -> AuthResult:
        username = request.get_param(config.username_field)
        password = request.get_param(config.password_field)
        if not username or not password:
            raise InvalidCredentialsError("Username and password are required")

        try:
            user = self.user_service.get_by_name(username)
            valid = user is not None and self.user_service.validate_password(password, user)
        except AuthflowError:
            raise
        except Exception as exc:
            raise UserResolutionError(f"Unable to look up local user: {exc}") from exc
        # Unknown user and wrong password share one message
        if not valid:
            raise InvalidCredentialsError("The account does not exist")

        return self.login_success(user, request)
