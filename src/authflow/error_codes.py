"""Stable numeric error codes carried by :class:`~authflow.auth.base.AuthResult`.

Each constant maps to a specific failure category and is referenced by the
corresponding :class:`~authflow.exceptions.AuthflowError` subclass.
Callers branch on these codes (redirect to a login error page, offer a
retry, ...) without parsing the human-readable message.

Example::

    result = strategy.authenticate(config, request)
    if result.code == ERROR_STATE_VERIFICATION:
        ...  # restart the authorization flow
"""

SUCCESS = 0
"""The authentication attempt completed successfully."""

ERROR_GENERIC = 1000
"""An unclassified error occurred."""

ERROR_CONFIGURATION = 1001
"""The supplied config is missing, incomplete, or the wrong variant for the strategy."""

ERROR_MISSING_AUTH_CONFIG = 1002
"""No provider adapter or endpoint configuration is available for the platform."""

ERROR_STATE_VERIFICATION = 1003
"""The anti-forgery ``state`` (or PKCE verifier) did not match the cached value."""

ERROR_PROTOCOL_VIOLATION = 1004
"""A provider response was well formed but lacked a required field."""

ERROR_PROVIDER_REJECTION = 1005
"""The provider answered with an ``error`` payload or a non-success status."""

ERROR_UNSUPPORTED_OPERATION = 1006
"""The requested grant type or provider capability is not supported."""

ERROR_USER_RESOLUTION = 1007
"""The external identity could not be mapped to an internal user."""

ERROR_INVALID_CREDENTIALS = 1008
"""Local username/password authentication failed."""
