"""Canonical Pydantic models shared across all authflow modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Strategy configuration** -- the :data:`AuthenticateConfig` tagged union:
    :class:`OAuth2Config`, :class:`OidcConfig`, :class:`SocialConfig`, and
    :class:`LocalConfig`. Each variant carries a literal ``kind`` field so a
    JSON document can be validated straight into the right class, and
    strategies select their branch by pattern matching on the variant.

**Protocol values** -- produced while a flow runs:
    :class:`AccessToken`, :class:`CallbackParameters`,
    :class:`ProviderResponse`, and :class:`SocialUser`.

**Package settings** -- :class:`Settings`, loaded by :mod:`authflow.config`.

All strategy configs are frozen: once a request begins processing, the
config it was given cannot change under it.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


SCOPE_SEPARATOR = " "
"""Separator used when joining scopes into a single ``scope`` parameter."""


class GrantType(str, enum.Enum):
    """OAuth2 grant types (:rfc:`6749` section 4)."""

    AUTHORIZATION_CODE = "authorization_code"
    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    REFRESH_TOKEN = "refresh_token"


class ResponseType(str, enum.Enum):
    """OAuth2 ``response_type`` values for the authorization endpoint."""

    CODE = "code"
    TOKEN = "token"


class CodeChallengeMethod(str, enum.Enum):
    """PKCE code challenge methods (:rfc:`7636` section 4.2)."""

    S256 = "S256"
    PLAIN = "plain"


# --- Strategy configs ---


class _OAuth2Fields(BaseModel):
    """Settings shared by the OAuth2 and OpenID Connect variants."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    platform: str = Field(
        default="oauth2", description="Identifier of the OAuth2 provider"
    )
    client_id: str = Field(description="Client identifier issued by the provider")
    client_secret: Optional[str] = None
    token_url: Optional[str] = None
    authorization_url: Optional[str] = None
    userinfo_url: Optional[str] = None
    callback_url: Optional[str] = Field(
        default=None, description="redirect_uri registered with the provider"
    )
    scopes: list[str] = Field(default_factory=list)
    grant_type: GrantType = GrantType.AUTHORIZATION_CODE
    response_type: Optional[ResponseType] = None
    verify_state: bool = Field(
        default=True, description="Verify the callback state against the cache"
    )
    enable_pkce: bool = Field(
        default=False, description="Use PKCE for the authorization code flow"
    )
    code_challenge_method: CodeChallengeMethod = CodeChallengeMethod.S256
    state: Optional[str] = Field(
        default=None,
        description="Fixed state value; a random one is generated when unset",
    )
    # Resource owner password credentials grant
    username: Optional[str] = None
    password: Optional[str] = None


class OAuth2Config(_OAuth2Fields):
    """Configuration for :class:`~authflow.oauth2.strategy.OAuth2Strategy`.

    Example::

        OAuth2Config(
            client_id="c1",
            client_secret="s1",
            authorization_url="https://idp.example.com/authorize",
            token_url="https://idp.example.com/token",
            userinfo_url="https://idp.example.com/userinfo",
            response_type="code",
            enable_pkce=True,
        )
    """

    kind: Literal["oauth2"] = "oauth2"


class OidcConfig(_OAuth2Fields):
    """Configuration for :class:`~authflow.oidc.strategy.OidcStrategy`.

    Endpoints that are not set explicitly are taken from the issuer's
    ``/.well-known/openid-configuration`` document.
    """

    kind: Literal["oidc"] = "oidc"
    platform: str = "oidc"
    issuer: str = Field(description="Issuer URL used for endpoint discovery")
    response_type: Optional[ResponseType] = ResponseType.CODE
    scopes: list[str] = Field(default_factory=lambda: ["openid"])

    def to_oauth2_config(self, discovery: Mapping[str, Any]) -> OAuth2Config:
        """Merge a discovery document into a plain :class:`OAuth2Config`.

        Explicitly configured endpoints take precedence over discovered ones.
        """
        data = self.model_dump(exclude={"kind", "issuer"})
        data["authorization_url"] = (
            self.authorization_url or discovery.get("authorization_endpoint")
        )
        data["token_url"] = self.token_url or discovery.get("token_endpoint")
        data["userinfo_url"] = self.userinfo_url or discovery.get("userinfo_endpoint")
        return OAuth2Config(**data)


class SocialConfig(BaseModel):
    """Configuration for :class:`~authflow.social.strategy.SocialStrategy`.

    ``platform`` is normalised to upper case (``"github"`` -> ``"GITHUB"``)
    so it can be compared against the callback field table in
    :mod:`authflow.social.callback`.

    The endpoint fields are only needed for platforms that have no adapter
    registered; they drive the generic
    :class:`~authflow.social.adapter.OAuth2SocialAdapter`.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["social"] = "social"
    platform: str = Field(description="Third-party platform identifier, e.g. GITHUB")
    client_id: str
    client_secret: Optional[str] = None
    callback_url: Optional[str] = None
    scopes: list[str] = Field(default_factory=list)
    state: Optional[str] = None
    verify_state: bool = True
    # Generic OAuth2 provider endpoints
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    userinfo_url: Optional[str] = None
    revoke_url: Optional[str] = None
    uid_field: str = Field(
        default="id", description="Field of the user-info document holding the uid"
    )

    @field_validator("platform")
    @classmethod
    def _upper_platform(cls, value: str) -> str:
        return value.strip().upper()


class LocalConfig(BaseModel):
    """Configuration for :class:`~authflow.local.strategy.LocalStrategy`."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    username_field: str = "username"
    password_field: str = "password"


AuthenticateConfig = Annotated[
    Union[OAuth2Config, OidcConfig, SocialConfig, LocalConfig],
    Field(discriminator="kind"),
]
"""Tagged union over every strategy config variant, discriminated by ``kind``."""


# --- Protocol values ---


class AccessToken(BaseModel):
    """Normalised token endpoint (or implicit callback) result.

    ``expires_in`` is ``None`` when the provider omitted it or sent a value
    that is not an integer; it is never silently turned into ``0``.
    """

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[int] = None


class CallbackParameters(BaseModel):
    """Parameters of an inbound request that may be a provider callback.

    Platform specific aliases (``auth_code``, ``authorization_code``,
    ``oauth_token``) are kept side by side; the classifier in
    :mod:`authflow.social.callback` decides which one applies. Unknown
    parameters are preserved in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    code: Optional[str] = None
    auth_code: Optional[str] = None
    authorization_code: Optional[str] = None
    oauth_token: Optional[str] = None
    oauth_verifier: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> CallbackParameters:
        """Build from a request parameter mapping, dropping ``None`` values."""
        return cls.model_validate(
            {key: value for key, value in params.items() if value is not None}
        )


PROVIDER_OK = 2000
PROVIDER_FAILURE = 5000
PROVIDER_NOT_IMPLEMENTED = 5003


class ProviderResponse(BaseModel):
    """Result of a social adapter call.

    Adapters report application-level failures through ``code``/``msg``
    rather than raising, so a transport success can still be a failure.
    """

    code: int = PROVIDER_OK
    msg: Optional[str] = None
    data: Any = None

    def ok(self) -> bool:
        return self.code == PROVIDER_OK

    @classmethod
    def failure(cls, msg: str, code: int = PROVIDER_FAILURE) -> ProviderResponse:
        return cls(code=code, msg=msg)


class SocialUser(BaseModel):
    """Identity returned by a third-party platform after login."""

    uuid: str = Field(description="User id on the third-party platform")
    platform: str
    username: Optional[str] = None
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    email: Optional[str] = None
    token: Optional[AccessToken] = None
    raw: dict[str, Any] = Field(default_factory=dict)


# --- Settings ---


class Settings(BaseModel):
    """Package-wide settings persisted at ``~/.config/authflow/config.json``.

    Loaded by :func:`~authflow.config.load_settings`; environment variables
    override the file, see :func:`~authflow.config.resolve_settings`.
    """

    session_user_key: str = Field(
        default="_authflow:session:user",
        description="Session key under which the authenticated user is stored",
    )
    state_ttl_seconds: int = Field(
        default=300, description="Lifetime of cached state and PKCE verifiers"
    )
    http_timeout: float = Field(
        default=30.0, description="Timeout in seconds for provider HTTP calls"
    )
    cache_dir: Optional[str] = Field(
        default=None, description="Directory of the state cache (default: XDG cache)"
    )
