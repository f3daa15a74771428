"""Native event sources bridged into a registry.

A native target is anything exposing ``subscribe(event_name, callback)`` and
``unsubscribe(event_name, callback)``. The registry never looks further
into a target than that.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
import logging
from typing import Any, Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class NativeTarget(Protocol):
    def subscribe(self, event_name: str, callback: Callable[..., Any]) -> None: ...

    def unsubscribe(self, event_name: str, callback: Callable[..., Any]) -> None: ...


class NativeEventTarget:
    """Very small in-process native event source.

    Stands in for the platform event root: listeners subscribe per event
    name and ``dispatch`` calls them in subscription order.
    """

    def __init__(self, name: str = "root") -> None:
        self.name = name
        self._listeners: defaultdict[str, list[Callable[..., Any]]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Callable[..., Any]) -> None:
        self._listeners[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Callable[..., Any]) -> None:
        """Remove a listener. Raises ``KeyError`` if it is not subscribed."""
        listeners = self._listeners.get(event_name, [])
        try:
            listeners.remove(callback)
        except ValueError:
            raise KeyError(event_name) from None

    def listeners(self, event_name: str) -> list[Callable[..., Any]]:
        return list(self._listeners.get(event_name, []))

    def dispatch(self, event_name: str, *args: Any) -> int:
        """Deliver a native event to every listener and return how many ran."""
        delivered = 0
        for callback in list(self._listeners.get(event_name, [])):
            try:
                callback(*args)
            except Exception:
                LOGGER.exception(
                    "native.listener.failed",
                    extra={
                        "event": "native.listener.failed",
                        "event_name": event_name,
                        "target": self.name,
                    },
                )
                continue
            delivered += 1
        return delivered

    def __repr__(self) -> str:
        return f"<NativeEventTarget {self.name!r}>"


# Default target used when ``native`` is called without one
platform_root = NativeEventTarget("platform")
