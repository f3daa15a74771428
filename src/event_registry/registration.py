"""Handles returned by registry registrations."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import uuid4


class Registration:
    """Disposable handle for a single handler registration.

    Calling the handle (or its ``unregister`` method) removes exactly the
    registration it was created for. Only the first call has an effect.
    """

    def __init__(
        self,
        event: str,
        handler: Callable[..., Any],
        dispose: Callable[[Registration], bool],
        is_native: bool = False,
    ) -> None:
        self.id = uuid4().hex
        self.event = event
        self.handler = handler
        self.is_native = is_native
        self._dispose = dispose
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unregister(self) -> bool:
        """Remove the registration, returning ``True`` if it was still active."""
        if not self._active:
            return False
        self._active = False
        return self._dispose(self)

    __call__ = unregister

    def __repr__(self) -> str:
        state = "active" if self._active else "disposed"
        native = " native" if self.is_native else ""
        return f"<Registration{native} {self.event!r} {self.id[:8]} {state}>"
