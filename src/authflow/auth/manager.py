"""Auth manager -- registry and dispatcher for authentication strategies.

The :class:`AuthManager` maps strategy names (``"local"``, ``"oauth2"``,
``"oidc"``, ``"social"``) to concrete
:class:`~authflow.auth.base.AuthStrategy` instances and exposes a single
:meth:`~AuthManager.authenticate` method for the caller's request pipeline.

For most use cases, call :func:`create_default_manager` to get a manager
pre-loaded with every built-in strategy sharing one state cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from authflow.auth.base import AuthResult, AuthStrategy
from authflow.cache import StateCache
from authflow.error_codes import ERROR_CONFIGURATION
from authflow.models import Settings

if TYPE_CHECKING:
    from authflow.auth.user_service import UserService
    from authflow.request import InboundRequest
    from authflow.social.adapter import AdapterRegistry


class AuthManager:
    """Registry and dispatcher for authentication strategies.

    Example::

        manager = AuthManager()
        manager.register(OAuth2Strategy(user_service))
        result = manager.authenticate("oauth2", config, request)
    """

    def __init__(self) -> None:
        self._strategies: dict[str, AuthStrategy] = {}

    def register(self, strategy: AuthStrategy) -> None:
        """Register *strategy* under its :attr:`~AuthStrategy.name`, replacing any previous one."""
        self._strategies[strategy.name] = strategy

    def get_strategy(self, name: str) -> Optional[AuthStrategy]:
        return self._strategies.get(name)

    def authenticate(self, name: str, config: Any, request: InboundRequest) -> AuthResult:
        """Authenticate *request* with the strategy registered as *name*.

        Returns:
            The strategy's result, or a configuration error result when no
            strategy is registered under *name*.
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            available = ", ".join(sorted(self._strategies)) or "(none)"
            return AuthResult.error(
                ERROR_CONFIGURATION,
                f"No strategy registered for '{name}'. Available strategies: {available}",
            )
        return strategy.authenticate(config, request)

    def list_strategies(self) -> list[str]:
        return sorted(self._strategies)


def create_default_manager(
    user_service: UserService,
    settings: Optional[Settings] = None,
    state_cache: Optional[StateCache] = None,
    adapters: Optional[AdapterRegistry] = None,
) -> AuthManager:
    """Create an :class:`AuthManager` with all built-in strategies.

    The following strategies are registered:

    - ``local`` -- username/password against the application's users.
    - ``oauth2`` -- OAuth2 code, implicit, and password grants.
    - ``oidc`` -- OpenID Connect discovery + the OAuth2 flow.
    - ``social`` -- third-party platform login.

    Args:
        user_service: The application's user lookup collaborator.
        settings: Package settings shared by every strategy.
        state_cache: State/PKCE cache shared by every strategy.
        adapters: Social platform adapters.
    """
    from authflow.local import LocalStrategy
    from authflow.oauth2 import OAuth2Strategy
    from authflow.oidc import OidcStrategy
    from authflow.social import SocialStrategy

    settings = settings or Settings()
    manager = AuthManager()
    manager.register(LocalStrategy(user_service, settings, state_cache))
    manager.register(OAuth2Strategy(user_service, settings, state_cache))
    manager.register(OidcStrategy(user_service, settings, state_cache))
    manager.register(SocialStrategy(user_service, settings, state_cache, adapters))
    return manager
