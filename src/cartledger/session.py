"""Session store interface used to hold live ledger content.

Defines the SessionStore Protocol the ledger depends on. Web frameworks
adapt their own session object to it; MemorySession is the in-process
implementation used by tests and scripts.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Key-value session storage.

    Ledgers only put JSON-friendly values (lists of item records), so
    cookie-backed sessions can hold them as well as server-side ones.
    """

    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any) -> None: ...

    def has(self, key: str) -> bool: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemorySession:
    """Dict-backed SessionStore."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
