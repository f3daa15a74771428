"""Tests for latched (unique) events."""

from __future__ import annotations

import unittest
from unittest.mock import Mock

from event_registry.records import Action
from event_registry.registration import Registration
from event_registry.registry import create_registry


class UniqueEventTests(unittest.TestCase):
    """Validate first-emission latching and replay to late handlers."""

    def setUp(self) -> None:
        self.registry = create_registry(unique_events=True)
        self.handler = Mock(return_value="seen")

    def test_accepts_camel_case_config(self) -> None:
        registry = create_registry({"uniqueEvents": True})
        self.assertTrue(registry.unique_events)

    def test_register_then_emit(self) -> None:
        self.registry.on("event", self.handler)
        self.assertEqual(self.registry.emit("event", 1, 2), ["seen"])
        self.handler.assert_called_once_with(1, 2)

    def test_emits_only_once(self) -> None:
        self.registry.on("event", self.handler)
        self.registry.emit("event", 42)
        self.assertEqual(self.registry.emit("event", 42), [])
        self.handler.assert_called_once_with(42)

    def test_emit_then_register_invokes_immediately(self) -> None:
        self.registry.emit("event", 1, 2)
        result = self.registry.on("event", self.handler)
        self.handler.assert_called_once_with(1, 2)
        self.assertEqual(result, "seen")

    def test_late_handler_is_not_registered(self) -> None:
        self.registry.emit("event")
        self.assertNotIsInstance(self.registry.on("event", self.handler), Registration)
        self.assertEqual(self.registry.handlers("event"), [])
        ons = [r for r in self.registry.history() if r.action is Action.ON]
        self.assertEqual(ons, [])

    def test_late_handlers_observe_first_emission(self) -> None:
        self.registry.emit("event", "first")
        self.registry.emit("event", "second")
        self.registry.on("event", self.handler)
        self.handler.assert_called_once_with("first")
        emits = [r for r in self.registry.history() if r.action is Action.EMIT]
        self.assertEqual(len(emits), 1)

    def test_latch_survives_clear(self) -> None:
        self.registry.emit("event", 7)
        self.registry.clear("event")
        self.registry.clear()
        self.registry.on("event", self.handler)
        self.handler.assert_called_once_with(7)

    def test_events_latch_independently(self) -> None:
        other = Mock()
        self.registry.emit("a", 1)
        self.registry.on("b", other)
        other.assert_not_called()
        self.registry.emit("b", 2)
        other.assert_called_once_with(2)

    def test_native_emission_does_not_latch_registry_channel(self) -> None:
        self.registry.native("ready", Mock())
        from event_registry.native import platform_root

        try:
            platform_root.dispatch("ready", "native")
            self.registry.on("ready", self.handler)
            self.handler.assert_not_called()
            self.registry.emit("ready", "direct")
            self.handler.assert_called_once_with("direct")
        finally:
            for listener in platform_root.listeners("ready"):
                platform_root.unsubscribe("ready", listener)

    def test_latched_emit_is_debug_logged(self) -> None:
        registry = create_registry(unique_events=True, debug=True)
        registry.emit("event")
        with self.assertLogs("event_registry.registry", level="INFO") as logs:
            registry.emit("event")
        self.assertIn("Unique event 'event' was already emitted!", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
