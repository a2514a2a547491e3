"""State and PKCE verifier caching for authflow.

This package provides :class:`StateCache`, a TTL-bound key/value store on
top of :mod:`diskcache`, and the :func:`state_key` / :func:`pkce_key` helpers
that namespace entries by client id.
"""

from authflow.cache.cache import StateCache, pkce_key, state_key

__all__ = ["StateCache", "pkce_key", "state_key"]
