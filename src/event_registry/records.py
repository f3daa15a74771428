from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Action(str, Enum):
    """Registry actions written to the history log."""

    ON = "on"
    UNREGISTER = "unregister"
    EMIT = "emit"
    CLEAR = "clear"


@dataclass(frozen=True)
class Record:
    """One entry of the registry history."""

    action: Action
    event: str | None
    handler: Callable[..., Any] | None = None
    args: tuple[Any, ...] = ()
    is_native: bool = False
    recorded_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def is_emit_of(self, event: str, is_native: bool = False) -> bool:
        return (
            self.action is Action.EMIT
            and self.is_native is is_native
            and self.event == event
        )
