"""Single-resolution cell backing ``EventRegistry.wait``."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from .config import WaitOptions
from .exceptions import WaitTimeoutError
from .registration import Registration

LOGGER = logging.getLogger(__name__)


def collapse_args(args: tuple[Any, ...]) -> Any:
    """Map emitted arguments to the value a wait future resolves with."""
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return args


class PendingWait:
    """Race an event delivery against an optional timer.

    Both triggers feed ``_settle``; whichever claims the cell first
    deactivates the other, so the future is settled exactly once.
    """

    def __init__(
        self,
        event_name: str,
        options: WaitOptions,
        loop: asyncio.AbstractEventLoop,
        debug: bool = False,
    ) -> None:
        self.event_name = event_name
        self.options = options
        self.future: asyncio.Future[Any] = loop.create_future()
        self._loop = loop
        self._debug = debug
        self._settled = False
        self._registration: Registration | None = None
        self._timer: asyncio.TimerHandle | None = None
        self.future.add_done_callback(self._on_future_done)

    @property
    def settled(self) -> bool:
        return self._settled

    def start(self, register: Callable[[str, Callable[..., Any]], Any]) -> asyncio.Future[Any]:
        """Subscribe through ``register`` and arm the timer if one is configured."""
        result = register(self.event_name, self.on_event)
        if isinstance(result, Registration):
            self._registration = result
        if self._settled:
            # Latched unique event delivered synchronously inside ``register``.
            self._release_registration()
            return self.future
        if self._registration is None:
            # Rejected input: nothing to race against, the wait never settles.
            if self._debug:
                LOGGER.info(
                    "[Event Registry] Cannot wait for invalid event %r",
                    self.event_name,
                    extra={"event": "registry.wait.invalid", "event_name": self.event_name},
                )
            return self.future

        delay = self.options.timeout_seconds
        if delay is not None:
            self._timer = self._loop.call_later(delay, self.on_timeout)
        return self.future

    def on_event(self, *args: Any) -> None:
        if not self._claim():
            return
        self._cancel_timer()
        self._release_registration()
        self.future.set_result(collapse_args(args))

    def on_timeout(self) -> None:
        self._timer = None
        if not self._claim():
            return
        self._release_registration()
        error = WaitTimeoutError(self.event_name)
        if self.options.resolve_on_timeout:
            if self._debug:
                LOGGER.info(
                    str(error),
                    extra={"event": "registry.wait.timeout", "event_name": self.event_name},
                )
            self.future.set_result(None)
        else:
            self.future.set_exception(error)

    def _claim(self) -> bool:
        if self._settled or self.future.done():
            return False
        self._settled = True
        return True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _release_registration(self) -> None:
        if self._registration is not None:
            self._registration.unregister()
            self._registration = None

    def _on_future_done(self, future: asyncio.Future[Any]) -> None:
        if not future.cancelled():
            return
        # Caller abandoned the wait.
        self._settled = True
        self._cancel_timer()
        self._release_registration()
