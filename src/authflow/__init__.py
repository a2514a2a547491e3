"""authflow -- pluggable authentication strategies for web applications.

Given an inbound request, a strategy decides whether it starts an
authorization flow or completes one, drives the protocol handshake (local
credentials, OAuth2 grant types, OpenID Connect, or social login), and
returns one uniform :class:`~authflow.auth.base.AuthResult` together with
the resolved user.

Typical usage::

    from authflow.auth import create_default_manager
    from authflow.request import InboundRequest

    manager = create_default_manager(my_user_service)
    request = InboundRequest.from_url(callback_url, session=my_session)
    result = manager.authenticate("oauth2", oauth2_config, request)

Modules:
    app: Typer developer CLI.
    models: Pydantic models shared across the entire package.
    config: XDG-aware settings and strategy config loading.
    exceptions: Exception hierarchy with error-code mapping.
    error_codes: Stable numeric error codes.
    request: Inbound request model.
"""

__version__ = "0.1.0"
