"""OpenID Connect strategy: endpoint discovery on top of the OAuth2 flow."""

from authflow.oidc.strategy import OidcStrategy, discovery_url

__all__ = ["OidcStrategy", "discovery_url"]
