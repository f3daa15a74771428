"""In-process event registry.

Usage:
    registry = create_registry()

    registration = registry.on("saved", lambda path: print(path))
    registry.emit("saved", "/tmp/file")   # -> [None]
    registration.unregister()

    # Unique events latch their first emission
    ready = create_registry(unique_events=True)
    ready.emit("ready", 42)
    ready.on("ready", print)              # prints 42 immediately

    # Await an event from a coroutine
    value = await registry.wait("saved", timeout=500)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from typing import Any
import weakref

from .config import RegistryConfig, WaitOptions
from .native import NativeTarget, platform_root
from .records import Action, Record
from .registration import Registration
from .waiting import PendingWait

LOGGER = logging.getLogger(__name__)


def _target_ref(target: NativeTarget) -> Callable[[], NativeTarget | None]:
    """Reference a native target weakly when it supports it."""
    try:
        return weakref.ref(target)
    except TypeError:
        return lambda: target


@dataclass
class _Subscription:
    handler: Callable[..., Any]
    registration: Registration


class EventRegistry:
    """Handler registry with emission history and optional latching.

    All state lives on the instance; several registries can coexist and a
    single one can be shared by any number of owners.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self.config = config or RegistryConfig()
        self._handlers: dict[str, list[_Subscription]] = {}
        self._history: list[Record] = []

    @property
    def unique_events(self) -> bool:
        return self.config.unique_events

    @property
    def debug(self) -> bool:
        return self.config.debug

    def _log(self, message: str, *args: Any, event: str, event_name: Any = None) -> None:
        if self.config.debug:
            LOGGER.info(
                "[Event Registry] " + message,
                *args,
                extra={"event": event, "event_name": event_name},
            )

    def _event_handlers(self, event_name: str) -> list[_Subscription]:
        """Return the handler sequence for an event, creating it if needed."""
        return self._handlers.setdefault(event_name, [])

    def _emitted(self, event_name: str, is_native: bool = False) -> list[Record]:
        return [r for r in self._history if r.is_emit_of(event_name, is_native)]

    def _was_emitted(self, event_name: str, is_native: bool = False) -> bool:
        return any(r.is_emit_of(event_name, is_native) for r in self._history)

    def _push_history(
        self,
        action: Action,
        event_name: str | None,
        handler: Callable[..., Any] | None = None,
        args: tuple[Any, ...] = (),
        is_native: bool = False,
    ) -> None:
        self._history.append(
            Record(
                action=action,
                event=event_name,
                handler=handler,
                args=tuple(args),
                is_native=is_native,
            )
        )

    def _validate(self, event_name: Any, handler: Any) -> bool:
        if not isinstance(event_name, str):
            self._log(
                "Registered event is not a string! %r",
                event_name,
                event="registry.invalid_event",
            )
            return False
        if not event_name:
            self._log(
                "Registered event is empty!",
                event="registry.invalid_event",
                event_name=event_name,
            )
            return False
        if not callable(handler):
            self._log(
                "Registered handler is not callable! %r",
                handler,
                event="registry.invalid_handler",
                event_name=event_name,
            )
            return False
        return True

    def _replay(self, event_name: str, handler: Callable[..., Any], is_native: bool) -> Any:
        """Invoke ``handler`` with the latest latched emission, if there is one.

        Returns a one-element tuple holding the handler result, or ``None``
        when the event has not been emitted on that channel yet.
        """
        emitted = self._emitted(event_name, is_native)
        if not emitted:
            return None
        return (handler(*emitted[-1].args),)

    def on(self, event_name: str, handler: Callable[..., Any]) -> Registration | Any:
        """Register ``handler`` for ``event_name``.

        Returns a ``Registration`` handle. For a unique event that was
        already emitted the handler is called right away with the latched
        arguments and its return value is returned instead.
        """
        if not self._validate(event_name, handler):
            return None

        if self.config.unique_events:
            replayed = self._replay(event_name, handler, is_native=False)
            if replayed is not None:
                return replayed[0]

        registration = Registration(event_name, handler, self._remove_subscription)
        self._event_handlers(event_name).append(_Subscription(handler, registration))
        self._push_history(Action.ON, event_name, handler)
        return registration

    def _remove_subscription(self, registration: Registration) -> bool:
        handlers = self._handlers.get(registration.event, [])
        for index, subscription in enumerate(handlers):
            if subscription.registration is registration:
                del handlers[index]
                self._push_history(Action.UNREGISTER, registration.event, registration.handler)
                return True
        return False

    def unregister(self, registration: Registration) -> bool:
        """Dispose a handle returned by ``on`` or ``native``."""
        return registration.unregister()

    def native(
        self,
        event_name: str,
        handler: Callable[..., Any],
        target: NativeTarget | None = None,
    ) -> Registration | Any:
        """Bridge a native event from ``target`` to ``handler``.

        ``target`` defaults to ``platform_root``.
        """
        if not self._validate(event_name, handler):
            return None
        if target is None:
            target = platform_root

        if self.config.unique_events:
            replayed = self._replay(event_name, handler, is_native=True)
            if replayed is not None:
                return replayed[0]

        def adapter(*args: Any) -> Any:
            if self.config.unique_events and self._was_emitted(event_name, True):
                self._log(
                    "Unique native event '%s' was already emitted!",
                    event_name,
                    event="registry.native.latched",
                    event_name=event_name,
                )
                return None
            self._push_history(Action.EMIT, event_name, adapter, args, is_native=True)
            return handler(*args)

        target_ref = _target_ref(target)

        def dispose(registration: Registration) -> bool:
            current = target_ref()
            if current is None:
                self._log(
                    "Native target does not exist anymore for '%s'",
                    event_name,
                    event="registry.native.target_missing",
                    event_name=event_name,
                )
            else:
                try:
                    current.unsubscribe(event_name, adapter)
                except (KeyError, ValueError):
                    self._log(
                        "Native subscription for '%s' is already gone",
                        event_name,
                        event="registry.native.unsubscribed",
                        event_name=event_name,
                    )
            self._push_history(Action.UNREGISTER, event_name, adapter, is_native=True)
            return True

        target.subscribe(event_name, adapter)
        self._push_history(Action.ON, event_name, adapter, is_native=True)
        return Registration(event_name, adapter, dispose, is_native=True)

    def emit(self, event_name: str, *args: Any) -> list[Any]:
        """Call every handler of ``event_name`` and return their results."""
        if self.config.unique_events and self._was_emitted(event_name):
            self._log(
                "Unique event '%s' was already emitted!",
                event_name,
                event="registry.emit.latched",
                event_name=event_name,
            )
            return []

        handlers = list(self._event_handlers(event_name))
        self._push_history(Action.EMIT, event_name, None, args)
        if not handlers:
            self._log(
                "No event handlers registered for '%s'!",
                event_name,
                event="registry.emit.no_handlers",
                event_name=event_name,
            )
            return []
        return [subscription.handler(*args) for subscription in handlers]

    def wait(
        self,
        event_name: str,
        options: WaitOptions | Mapping[str, Any] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        **overrides: Any,
    ) -> asyncio.Future[Any]:
        """Return a future settled by the next (or latched) ``event_name``.

        ``options`` / keyword overrides: ``timeout`` in milliseconds or
        ``False``, and ``resolve_on_timeout``. On timeout the future resolves
        with ``None`` or fails with ``WaitTimeoutError``.
        """
        if isinstance(options, WaitOptions):
            raw = options.model_dump()
        else:
            raw = dict(options or {})
        raw.update(overrides)
        wait_options = WaitOptions.model_validate(raw)
        requested = raw.get("timeout")
        if (
            isinstance(requested, (int, float))
            and not isinstance(requested, bool)
            and requested < 0
        ):
            self._log(
                "Negative timeout %r for '%s' treated as 0",
                requested,
                event_name,
                event="registry.wait.negative_timeout",
                event_name=event_name,
            )

        pending = PendingWait(
            event_name,
            wait_options,
            loop or asyncio.get_running_loop(),
            debug=self.config.debug,
        )
        return pending.start(self.on)

    def clear(self, event_name: str | None = None) -> None:
        """Drop the handlers of one event, or of every event."""
        if event_name:
            self._handlers.pop(event_name, None)
            self._push_history(Action.CLEAR, event_name)
        else:
            self._handlers.clear()
            self._push_history(Action.CLEAR, None)

    def history(self) -> list[Record]:
        """Return a snapshot of every recorded action in order."""
        return list(self._history)

    def handlers(self, event_name: str) -> list[Callable[..., Any]]:
        """Return the handlers currently registered for ``event_name``."""
        return [s.handler for s in self._handlers.get(event_name, [])]

    def __repr__(self) -> str:
        mode = "unique" if self.config.unique_events else "standard"
        return f"<EventRegistry {mode} events={len(self._handlers)} history={len(self._history)}>"


def create_registry(
    config: RegistryConfig | Mapping[str, Any] | None = None, **overrides: Any
) -> EventRegistry:
    """Create an independent registry.

    Accepts a ``RegistryConfig``, a mapping (``unique_events`` or
    ``uniqueEvents``, ``debug``) and/or keyword overrides.
    """
    if isinstance(config, RegistryConfig) and not overrides:
        return EventRegistry(config)
    if isinstance(config, RegistryConfig):
        raw = config.model_dump()
    else:
        raw = dict(config or {})
    raw.update(overrides)
    return EventRegistry(RegistryConfig.model_validate(raw))
