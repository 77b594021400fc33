"""Ledger notifications: a fire-and-forget event sink.

Listener failures are logged and never reach the ledger operation that
dispatched the event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

WILDCARD = "*"

Listener = Callable[[str, Any], None]


@runtime_checkable
class EventSink(Protocol):
    def dispatch(self, event: str, payload: Any = None) -> None: ...


class NullEventSink:
    """Discards every event."""

    def dispatch(self, event: str, payload: Any = None) -> None:
        return None


class EventDispatcher:
    """In-memory listener registry.

    - ``listen(event, handler)`` registers ``handler(event, payload)``.
    - ``"*"`` receives every event, after the specific listeners.
    - Handlers run in registration order; a failing handler is logged
      and the rest still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def listen(self, event: str, handler: Listener) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def forget(self, event: str) -> None:
        self._listeners.pop(event, None)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event) or self._listeners.get(WILDCARD))

    def dispatch(self, event: str, payload: Any = None) -> None:
        handlers = self._listeners.get(event, []) + self._listeners.get(WILDCARD, [])
        for handler in handlers:
            try:
                handler(event, payload)
            except Exception:
                logger.error(
                    "Listener %r failed for %s.",
                    getattr(handler, "__qualname__", handler), event,
                    exc_info=True,
                )
