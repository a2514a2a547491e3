"""Inbound request model handed to strategies.

Strategies only need two things from the web layer: parameter lookup by name
and the client's session. :class:`InboundRequest` carries exactly that and
is built by the caller from whatever framework request it has.

For the implicit grant the provider delivers ``access_token`` and friends in
the redirect itself, so the request passed to the strategy must be the one
created from that redirect. :meth:`InboundRequest.from_url` merges query and
fragment parameters for this reason.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional
from urllib.parse import parse_qs, urlparse

from authflow.auth.session import MemorySessionStore, SessionStore


def _first_values(query: str) -> dict[str, str]:
    """Parse a query string keeping the first value of repeated parameters."""
    return {key: values[0] for key, values in parse_qs(query).items() if values}


class InboundRequest:
    """Parameters and session of one inbound web request.

    Args:
        params: Query/form parameters, one value per name.
        session: The client's session; a fresh in-memory one when omitted.

    Example::

        request = InboundRequest.from_url(
            "https://app.example.com/callback?code=abc&state=xyz",
            session=framework_session_adapter,
        )
        request.get_param("code")  # "abc"
    """

    def __init__(
        self,
        params: Optional[Mapping[str, str]] = None,
        session: Optional[SessionStore] = None,
    ) -> None:
        self._params: dict[str, str] = dict(params or {})
        self.session: SessionStore = session if session is not None else MemorySessionStore()

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    def get_param(self, name: str) -> Optional[str]:
        return self._params.get(name)

    @classmethod
    def from_query(
        cls, query: str, session: Optional[SessionStore] = None
    ) -> InboundRequest:
        """Build a request from a raw ``a=1&b=2`` query string."""
        return cls(_first_values(query), session=session)

    @classmethod
    def from_url(cls, url: str, session: Optional[SessionStore] = None) -> InboundRequest:
        """Build a request from a full URL, merging query and fragment parameters.

        Query parameters win when a name appears in both.
        """
        parsed = urlparse(url)
        params = _first_values(parsed.fragment)
        params.update(_first_values(parsed.query))
        return cls(params, session=session)

    def __repr__(self) -> str:
        return f"InboundRequest(params={sorted(self._params)})"
