"""Strategy-based authentication core for authflow.

The main entry points are:

- :class:`AuthStrategy` -- abstract base class for implementing new strategies.
- :class:`AuthResult` -- the success/error envelope every strategy returns.
- :class:`AuthManager` -- registry that maps strategy names to instances.
- :func:`create_default_manager` -- factory pre-loaded with all built-in
  strategies.
- :class:`UserService` -- base class for the application's user lookups.
- :class:`MemorySessionStore` -- in-memory session store.

Typical usage::

    from authflow.auth import create_default_manager

    manager = create_default_manager(my_user_service)
    result = manager.authenticate("social", social_config, request)
    if result.is_redirect:
        ...  # send the client to result.redirect_url
"""

from authflow.auth.base import AuthResult, AuthStrategy
from authflow.auth.manager import AuthManager, create_default_manager
from authflow.auth.session import MemorySessionStore, SessionStore
from authflow.auth.user_service import UserService

__all__ = [
    "AuthManager",
    "AuthResult",
    "AuthStrategy",
    "MemorySessionStore",
    "SessionStore",
    "UserService",
    "create_default_manager",
]
