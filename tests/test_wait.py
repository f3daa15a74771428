"""Tests for awaiting events with optional timeouts."""

from __future__ import annotations

import asyncio
import unittest

from event_registry.config import WaitOptions
from event_registry.exceptions import WaitTimeoutError
from event_registry.records import Action
from event_registry.registry import create_registry
from event_registry.waiting import collapse_args


class WaitTests(unittest.IsolatedAsyncioTestCase):
    """Validate that each wait settles exactly once."""

    async def asyncSetUp(self) -> None:
        self.registry = create_registry()

    async def test_resolves_with_emitted_value(self) -> None:
        future = self.registry.wait("event")
        self.registry.emit("event", 42)
        self.assertEqual(await future, 42)

    async def test_resolves_with_tuple_for_several_args(self) -> None:
        future = self.registry.wait("event")
        self.registry.emit("event", 1, 2)
        self.assertEqual(await future, (1, 2))

    async def test_handler_removed_after_resolution(self) -> None:
        future = self.registry.wait("event")
        self.registry.emit("event", "once")
        await future
        self.assertEqual(self.registry.handlers("event"), [])
        self.assertEqual(self.registry.emit("event", "again"), [])

    async def test_unique_event_already_emitted_resolves(self) -> None:
        registry = create_registry(unique_events=True)
        registry.emit("event", 42)
        future = registry.wait("event", {"timeout": 10_000})
        self.assertTrue(future.done())
        self.assertEqual(await future, 42)
        self.assertEqual(registry.handlers("event"), [])

    async def test_timeout_resolves_with_none(self) -> None:
        future = self.registry.wait("event", timeout=10, resolve_on_timeout=True)
        self.assertIsNone(await asyncio.wait_for(future, 1))
        self.assertEqual(self.registry.handlers("event"), [])

    async def test_timeout_rejects_with_message(self) -> None:
        future = self.registry.wait(
            "event", {"timeout": 10, "resolveOnTimeout": False}
        )
        with self.assertRaises(WaitTimeoutError) as ctx:
            await asyncio.wait_for(future, 1)
        self.assertEqual(str(ctx.exception), 'Timeout while waiting for event "event"!')
        self.assertEqual(ctx.exception.event_name, "event")

    async def test_emission_after_timeout_is_ignored(self) -> None:
        future = self.registry.wait("event", timeout=5)
        self.assertIsNone(await asyncio.wait_for(future, 1))
        self.assertEqual(self.registry.emit("event", "late"), [])
        self.assertIsNone(future.result())

    async def test_emission_before_timeout_cancels_timer(self) -> None:
        future = self.registry.wait(
            "event", WaitOptions(timeout=30, resolve_on_timeout=False)
        )
        self.registry.emit("event", "fast")
        self.assertEqual(await future, "fast")
        await asyncio.sleep(0.06)
        self.assertEqual(future.result(), "fast")

    async def test_zero_timeout_settles(self) -> None:
        future = self.registry.wait("event", timeout=0)
        self.assertIsNone(await asyncio.wait_for(future, 1))

    async def test_no_timeout_stays_pending(self) -> None:
        future = self.registry.wait("event")
        await asyncio.sleep(0.02)
        self.assertFalse(future.done())
        future.cancel()

    async def test_cancelled_wait_tears_down_handler(self) -> None:
        future = self.registry.wait("event", timeout=10_000)
        future.cancel()
        await asyncio.sleep(0)
        self.assertEqual(self.registry.handlers("event"), [])
        self.assertEqual(self.registry.history()[-1].action, Action.UNREGISTER)

    async def test_reentrant_emit_settles_once(self) -> None:
        results: list[object] = []
        future = self.registry.wait("event")
        self.registry.on("event", lambda value: results.append(value) or (
            self.registry.emit("event", "nested") if value == "outer" else None
        ))
        self.registry.emit("event", "outer")
        self.assertEqual(await future, "outer")
        self.assertEqual(results, ["outer", "nested"])

    async def test_negative_timeout_settles_next_tick(self) -> None:
        future = self.registry.wait("event", timeout=-5, resolve_on_timeout=False)
        self.assertFalse(future.done())
        with self.assertRaises(WaitTimeoutError):
            await asyncio.wait_for(future, 1)

    async def test_negative_timeout_is_debug_logged(self) -> None:
        registry = create_registry(debug=True)
        with self.assertLogs("event_registry.registry", level="INFO") as logs:
            future = registry.wait("event", timeout=-1)
        self.assertIn("treated as 0", "\n".join(logs.output))
        self.assertIsNone(await asyncio.wait_for(future, 1))

    async def test_invalid_event_name_never_settles(self) -> None:
        future = self.registry.wait("", timeout=5, resolve_on_timeout=False)
        other = self.registry.wait(42, timeout=5)  # type: ignore[arg-type]
        await asyncio.sleep(0.05)
        self.assertFalse(future.done())
        self.assertFalse(other.done())
        self.assertEqual(self.registry.history(), [])
        future.cancel()
        other.cancel()

    async def test_invalid_event_name_is_debug_logged(self) -> None:
        registry = create_registry(debug=True)
        with self.assertLogs("event_registry.waiting", level="INFO") as logs:
            future = registry.wait("", timeout=5)
        self.assertIn("Cannot wait for invalid event", "\n".join(logs.output))
        future.cancel()

    async def test_unique_wait_before_emit_sees_first_emission(self) -> None:
        registry = create_registry(unique_events=True)
        future = registry.wait("event", timeout=10_000)
        registry.emit("event", "first")
        self.assertEqual(registry.emit("event", "second"), [])
        self.assertEqual(await future, "first")
        self.assertEqual(registry.handlers("event"), [])
        late = registry.wait("event")
        self.assertEqual(await late, "first")


class CollapseArgsTests(unittest.TestCase):
    """Validate mapping of emitted args onto a single result."""

    def test_collapse(self) -> None:
        self.assertIsNone(collapse_args(()))
        self.assertEqual(collapse_args(("x",)), "x")
        self.assertEqual(collapse_args((1, 2)), (1, 2))


if __name__ == "__main__":
    unittest.main()
