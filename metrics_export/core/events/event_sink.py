"""
Event sink interface.

Sinks consume progress events emitted during an export.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume an export event."""
