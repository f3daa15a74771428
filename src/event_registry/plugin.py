"""Host integration for event registries.

Usage:
    class Component:
        ...

    EventRegistryPlugin().install(Component, {"unique_name": "ready_events"})

    a, b = Component(), Component()
    a.events.on("saved", handler)
    b.events.emit("saved")          # a's handler runs, the registry is shared
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
import logging
from typing import Any

from .config import PluginOptions
from .registry import EventRegistry, create_registry

LOGGER = logging.getLogger(__name__)


class Plugin(ABC):
    """Base class for host plugins."""

    name: str = "unknown"
    version: str = "0.0.0"
    description: str = ""

    @abstractmethod
    def initialize(self, context: dict[str, Any]) -> None:
        """Initialize the plugin.

        Args:
            context: Host context (``host`` object, ``options`` mapping)
        """

    def shutdown(self) -> None:
        """Clean up plugin resources."""


class EventRegistryPlugin(Plugin):
    """Attach a standard and a unique registry to a host.

    Attributes set on a class are shared by every instance the host
    creates afterwards.
    """

    name = "event_registry"
    version = "1.0.0"
    description = "Shared event registries on host instances"

    def __init__(self) -> None:
        self.installed: dict[str, EventRegistry] = {}

    def install(
        self, host: Any, options: PluginOptions | Mapping[str, Any] | None = None
    ) -> dict[str, EventRegistry]:
        """Attach registries to ``host`` and return them keyed by attribute name."""
        if not isinstance(options, PluginOptions):
            options = PluginOptions.model_validate(dict(options or {}))

        attached: dict[str, EventRegistry] = {}
        name = options.resolved_name()
        if name is not None:
            attached[name] = create_registry()
        unique_name = options.resolved_unique_name()
        if unique_name is not None:
            attached[unique_name] = create_registry(unique_events=True)

        for attribute, registry in attached.items():
            setattr(host, attribute, registry)
            LOGGER.debug(
                "plugin.registry.attached",
                extra={
                    "event": "plugin.registry.attached",
                    "attribute": attribute,
                    "unique": registry.unique_events,
                },
            )

        self.installed.update(attached)
        return attached

    def initialize(self, context: dict[str, Any]) -> None:
        self.install(context["host"], context.get("options"))

    def shutdown(self) -> None:
        for registry in self.installed.values():
            registry.clear()
        self.installed.clear()
