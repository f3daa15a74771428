"""Top-level package for event-registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import RegistryConfig, WaitOptions, load_config
    from .exceptions import (
        ConfigValidationError,
        EventRegistryError,
        WaitTimeoutError,
    )
    from .native import NativeEventTarget, platform_root
    from .plugin import EventRegistryPlugin
    from .records import Action, Record
    from .registration import Registration
    from .registry import EventRegistry, create_registry

__all__ = [
    "Action",
    "ConfigValidationError",
    "EventRegistry",
    "EventRegistryError",
    "EventRegistryPlugin",
    "NativeEventTarget",
    "Record",
    "Registration",
    "RegistryConfig",
    "WaitOptions",
    "WaitTimeoutError",
    "create_registry",
    "load_config",
    "platform_root",
]


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the package imports cheaply."""
    if name in {"EventRegistry", "create_registry"}:
        from .registry import EventRegistry, create_registry

        return {"EventRegistry": EventRegistry, "create_registry": create_registry}[name]
    if name in {"RegistryConfig", "WaitOptions", "load_config"}:
        from .config import RegistryConfig, WaitOptions, load_config

        return {
            "RegistryConfig": RegistryConfig,
            "WaitOptions": WaitOptions,
            "load_config": load_config,
        }[name]
    if name in {"ConfigValidationError", "EventRegistryError", "WaitTimeoutError"}:
        from .exceptions import (
            ConfigValidationError,
            EventRegistryError,
            WaitTimeoutError,
        )

        return {
            "ConfigValidationError": ConfigValidationError,
            "EventRegistryError": EventRegistryError,
            "WaitTimeoutError": WaitTimeoutError,
        }[name]
    if name in {"NativeEventTarget", "platform_root"}:
        from .native import NativeEventTarget, platform_root

        return {"NativeEventTarget": NativeEventTarget, "platform_root": platform_root}[name]
    if name in {"Action", "Record"}:
        from .records import Action, Record

        return {"Action": Action, "Record": Record}[name]
    if name == "Registration":
        from .registration import Registration

        return Registration
    if name == "EventRegistryPlugin":
        from .plugin import EventRegistryPlugin

        return EventRegistryPlugin
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
