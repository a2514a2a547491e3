"""Exception hierarchy for authflow.

All exceptions inherit from :class:`AuthflowError`, which carries an
``error_code`` attribute mapped to a constant from :mod:`authflow.error_codes`.
Strategies catch ``AuthflowError`` at their public boundary and convert it
into an :class:`~authflow.auth.base.AuthResult` error envelope, so none of
these ever reach the caller as a raw exception from ``authenticate``.

Subclass hierarchy::

    AuthflowError                    (1000)
    +-- ConfigurationError           (1001)
    |   +-- MissingAuthConfigError   (1002)
    +-- StateVerificationError       (1003)
    +-- ProtocolViolationError       (1004)
    +-- ProviderRejectionError       (1005)
    +-- UnsupportedOperationError    (1006)
    +-- UserResolutionError          (1007)
        +-- InvalidCredentialsError  (1008)
"""

from authflow.error_codes import (
    ERROR_CONFIGURATION,
    ERROR_GENERIC,
    ERROR_INVALID_CREDENTIALS,
    ERROR_MISSING_AUTH_CONFIG,
    ERROR_PROTOCOL_VIOLATION,
    ERROR_PROVIDER_REJECTION,
    ERROR_STATE_VERIFICATION,
    ERROR_UNSUPPORTED_OPERATION,
    ERROR_USER_RESOLUTION,
)


class AuthflowError(Exception):
    """Base exception for all authflow errors.

    Every subclass sets a class-level ``error_code`` corresponding to one of
    the constants in :mod:`authflow.error_codes`.

    Args:
        message: Human-readable error description.
        error_code: Optional override for the class-level error code.
    """

    error_code: int = ERROR_GENERIC

    def __init__(self, message: str, error_code: int | None = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ConfigurationError(AuthflowError):
    """Raised for missing or mismatched strategy configuration."""

    error_code = ERROR_CONFIGURATION


class MissingAuthConfigError(ConfigurationError):
    """Raised when no provider adapter or endpoint settings exist for a platform."""

    error_code = ERROR_MISSING_AUTH_CONFIG


class StateVerificationError(AuthflowError):
    """Raised when the callback ``state`` is missing or does not match the cache."""

    error_code = ERROR_STATE_VERIFICATION


class ProtocolViolationError(AuthflowError):
    """Raised when a provider response lacks a field the protocol requires."""

    error_code = ERROR_PROTOCOL_VIOLATION


class ProviderRejectionError(AuthflowError):
    """Raised when the provider reports an error or answers with a non-success status.

    Args:
        message: Human-readable error description.
        body: The raw provider response body, kept for diagnostics.
    """

    error_code = ERROR_PROVIDER_REJECTION

    def __init__(self, message: str, body: str | None = None):
        super().__init__(message)
        self.body = body


class UnsupportedOperationError(AuthflowError):
    """Raised for grant types or provider capabilities that are not supported."""

    error_code = ERROR_UNSUPPORTED_OPERATION


class UserResolutionError(AuthflowError):
    """Raised when the internal user cannot be looked up or created."""

    error_code = ERROR_USER_RESOLUTION


class InvalidCredentialsError(UserResolutionError):
    """Raised when a local username/password pair is rejected."""

    error_code = ERROR_INVALID_CREDENTIALS
