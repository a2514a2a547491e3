"""Session store contract and an in-memory implementation.

Strategies keep the authenticated user in the caller's session under one
fixed, process-wide key (:attr:`~authflow.models.Settings.session_user_key`).
Any object with ``get``/``put``/``remove`` satisfies :class:`SessionStore`;
web frameworks usually adapt their own session object to it.
"""

from __future__ import annotations

import threading
from typing import Any, Optional, Protocol


class SessionStore(Protocol):
    """Port for the per-client session the caller owns."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemorySessionStore:
    """Thread-safe dict-backed :class:`SessionStore`.

    Useful for tests and single-process deployments.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data
