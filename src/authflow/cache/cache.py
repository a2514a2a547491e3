"""Disk-based state and PKCE verifier cache.

Uses :mod:`diskcache` to bind a generated anti-forgery ``state`` (and, for
PKCE, a ``code_verifier``) to a client identifier for a limited time. The
authorize-URL builder writes an entry; the callback handler consumes it with
:meth:`StateCache.consume`, which compares and deletes in one transaction.

diskcache stores every entry in SQLite with per-key transactions, so a
``put`` racing a ``get``/``verify`` on the same key from another thread or
process always observes either the old or the new value, never a torn one.

Keys are namespaced by client id (and platform for social flows) through
:func:`state_key` and :func:`pkce_key`, so two tenants never collide.

See Also:
    :class:`~authflow.models.Settings` -- ``state_ttl_seconds`` controls the
    default lifetime of entries.
"""

from __future__ import annotations

import hmac
from pathlib import Path
from typing import Optional

import diskcache


def state_key(client_id: str, platform: str | None = None) -> str:
    """Return the cache key of the state bound to *client_id* (and *platform*)."""
    if platform:
        return f"state:{client_id}:{platform}"
    return f"state:{client_id}"


def pkce_key(client_id: str) -> str:
    """Return the cache key of the PKCE code verifier bound to *client_id*."""
    return f"pkce:{client_id}"


class StateCache:
    """Disk-backed key/value store with per-entry expiry.

    Args:
        cache_dir: Directory of the underlying :class:`diskcache.Cache`.
        default_ttl: Lifetime in seconds used when :meth:`put` gets no TTL.

    Example::

        cache = StateCache("/tmp/authflow-state", default_ttl=300)
        cache.put(state_key("c1"), "xyz")
        assert cache.verify("xyz", state_key("c1"))
    """

    def __init__(self, cache_dir: str | Path, default_ttl: int = 300) -> None:
        self._cache_dir = Path(cache_dir)
        self._default_ttl = default_ttl
        self._cache = diskcache.Cache(str(self._cache_dir))

    @property
    def directory(self) -> Path:
        return self._cache_dir

    def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store *value* under *key*, replacing any previous entry.

        Args:
            key: Namespaced cache key (see :func:`state_key`).
            value: The state or verifier string.
            ttl: Lifetime in seconds; defaults to the cache's ``default_ttl``.
        """
        expire = self._default_ttl if ttl is None else ttl
        self._cache.set(key, value, expire=expire)

    def get(self, key: str) -> Optional[str]:
        """Return the live value stored under *key*, or ``None``."""
        return self._cache.get(key)

    def verify(self, presented: Optional[str], key: str) -> bool:
        """Compare *presented* with the cached value in constant time.

        A cache miss, an expired entry, or an empty *presented* value all
        return ``False``; this method never raises for those cases.
        """
        if not presented:
            return False
        cached = self._cache.get(key)
        if not cached:
            return False
        return hmac.compare_digest(presented.encode("utf-8"), cached.encode("utf-8"))

    def consume(self, presented: Optional[str], key: str) -> bool:
        """Verify *presented* and remove the entry in one transaction.

        Returns ``True`` at most once per stored value, however many
        callers race on the same key. On a mismatch the entry is left in
        place with its original expiry.
        """
        if not presented:
            return False
        with self._cache.transact():
            cached = self._cache.get(key)
            if not cached or not hmac.compare_digest(
                presented.encode("utf-8"), cached.encode("utf-8")
            ):
                return False
            self._cache.delete(key)
        return True

    def pop(self, key: str) -> Optional[str]:
        """Atomically read and remove the value stored under *key*."""
        return self._cache.pop(key, default=None)

    def delete(self, key: str) -> None:
        self._cache.delete(key)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()
