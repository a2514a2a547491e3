"""Abstract base class for authentication strategies.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- the uniform success/error envelope every public
  strategy call returns.
- :class:`AuthStrategy` -- the abstract base class that every
  authentication strategy must extend.

To implement a new strategy, subclass :class:`AuthStrategy`, set the
:attr:`~AuthStrategy.name` and :attr:`~AuthStrategy.config_type`
attributes, and implement :meth:`~AuthStrategy.do_authenticate`. The base
class handles the session short-circuit, the config variant check, the
``login_success`` bookkeeping, and the conversion of
:class:`~authflow.exceptions.AuthflowError` into error results.

See Also:
    :mod:`authflow.auth.manager` for strategy registration and dispatch.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from authflow.cache import StateCache
from authflow.config import state_cache_dir
from authflow.error_codes import SUCCESS
from authflow.exceptions import AuthflowError, ConfigurationError
from authflow.models import Settings

if TYPE_CHECKING:
    from authflow.auth.user_service import UserService
    from authflow.request import InboundRequest

logger = logging.getLogger(__name__)


class AuthResult:
    """Tagged success/error envelope returned by strategies.

    A success carries a payload in :attr:`data` (the resolved user, a token,
    or the authorization URL for a redirect). An error carries a stable
    numeric :attr:`code` from :mod:`authflow.error_codes` and a message.
    There is no partial-success state.

    Args:
        code: ``0`` for success, an error code otherwise.
        message: Human-readable outcome.
        data: Success payload.
        redirect_url: Set when the caller must redirect the client to start
            an authorization flow.

    Example::

        result = AuthResult.redirect("https://idp.example.com/authorize?...")
        assert result.ok and result.redirect_url
    """

    def __init__(
        self,
        code: int = SUCCESS,
        message: str = "success",
        data: Any = None,
        redirect_url: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.data = data
        self.redirect_url = redirect_url

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS

    @property
    def is_redirect(self) -> bool:
        return self.ok and self.redirect_url is not None

    @classmethod
    def success(cls, data: Any = None) -> AuthResult:
        return cls(data=data)

    @classmethod
    def redirect(cls, url: str) -> AuthResult:
        return cls(data=url, redirect_url=url)

    @classmethod
    def error(cls, code: int, message: str) -> AuthResult:
        return cls(code=code, message=message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthResult):
            return NotImplemented
        return (
            self.code == other.code
            and self.message == other.message
            and self.data == other.data
            and self.redirect_url == other.redirect_url
        )

    def __repr__(self) -> str:
        if self.ok:
            return f"AuthResult(ok, data={self.data!r}, redirect_url={self.redirect_url!r})"
        return f"AuthResult(error {self.code}: {self.message})"


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies.

    Every concrete strategy (local, OAuth2, OIDC, social) subclasses this and
    provides:

    1. A :attr:`name` class attribute (e.g. ``"oauth2"``), used as the
       registry key by :class:`~authflow.auth.manager.AuthManager`.
    2. A :attr:`config_type` class attribute naming the config variant the
       strategy accepts.
    3. A :meth:`do_authenticate` implementation.

    Args:
        user_service: The application's user lookup collaborator.
        settings: Package settings; defaults to :class:`~authflow.models.Settings`.
        state_cache: Cache for state and PKCE verifiers; created on first use
            under the configured cache directory when omitted.
    """

    name: ClassVar[str]
    config_type: ClassVar[type]

    def __init__(
        self,
        user_service: UserService,
        settings: Optional[Settings] = None,
        state_cache: Optional[StateCache] = None,
    ) -> None:
        self.user_service = user_service
        self.settings = settings or Settings()
        self._state_cache = state_cache

    @property
    def state_cache(self) -> StateCache:
        if self._state_cache is None:
            self._state_cache = StateCache(
                state_cache_dir(self.settings),
                default_ttl=self.settings.state_ttl_seconds,
            )
        return self._state_cache

    def authenticate(self, config: Any, request: InboundRequest) -> AuthResult:
        """Authenticate *request* with *config*.

        Returns the session user straight away when one is present. Otherwise
        validates the config variant and runs :meth:`do_authenticate`. Any
        :class:`~authflow.exceptions.AuthflowError` is converted into an
        error :class:`AuthResult`.

        Args:
            config: A variant of :data:`~authflow.models.AuthenticateConfig`.
            request: The inbound request.

        Returns:
            A success result (user or redirect URL) or an error result.
        """
        session_user = self.check_session(request)
        if session_user is not None:
            logger.debug("%s: session hit, skipping authentication", self.name)
            return AuthResult.success(session_user)

        try:
            checked = self.check_config(config)
            return self.do_authenticate(checked, request)
        except AuthflowError as exc:
            return self._error_result(exc)

    @abstractmethod
    def do_authenticate(self, config: Any, request: InboundRequest) -> AuthResult:
        """Run the strategy-specific protocol for a request with no session user.

        Implementations raise :class:`~authflow.exceptions.AuthflowError`
        subclasses on failure and finish with :meth:`login_success` or a
        redirect result.
        """
        ...

    def check_session(self, request: InboundRequest) -> Optional[Any]:
        """Return the user stored in the request's session, if any."""
        return request.session.get(self.settings.session_user_key)

    def login_success(self, user: Any, request: InboundRequest) -> AuthResult:
        """Store *user* in the session and return a success result."""
        request.session.put(self.settings.session_user_key, user)
        logger.info("%s: login succeeded", self.name)
        return AuthResult.success(user)

    def check_config(self, config: Any) -> Any:
        """Ensure *config* is the variant this strategy expects.

        Raises:
            ConfigurationError: If *config* is missing or another variant.
        """
        match config:
            case None:
                raise ConfigurationError(
                    f"{type(self).__name__} requires a {self.config_type.__name__}"
                )
            case self.config_type():
                return config
            case _:
                raise ConfigurationError(
                    f"{type(self).__name__} requires a {self.config_type.__name__}, "
                    f"got {type(config).__name__}"
                )

    def _error_result(self, exc: AuthflowError) -> AuthResult:
        logger.warning(
            "%s: authentication failed (%d): %s", self.name, exc.error_code, exc.message
        )
        return AuthResult.error(exc.error_code, exc.message)
