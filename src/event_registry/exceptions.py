"""Domain exception hierarchy for the event registry."""

from __future__ import annotations


class EventRegistryError(RuntimeError):
    """Base class for all event registry errors."""


class WaitTimeoutError(EventRegistryError):
    """Raised through a wait future when its timeout elapses first."""

    def __init__(self, event_name: str) -> None:
        self.event_name = event_name
        super().__init__(f'Timeout while waiting for event "{event_name}"!')


class ConfigValidationError(EventRegistryError):
    """Raised when configuration cannot be validated safely."""
