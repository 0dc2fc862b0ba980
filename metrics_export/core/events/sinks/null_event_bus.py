from __future__ import annotations

from typing import Any

from metrics_export.core.events.event_bus import EventBus


class NullEventBus(EventBus):
    """EventBus that discards all events (used for tests and quiet runs)."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def emit(self, event: Any) -> None:
        return
