"""
Synchronous event bus for export progress.
"""
from __future__ import annotations

from typing import Any, Iterable

from metrics_export.core.events.event_sink import EventSink


class EventBus:
    """
    Fans export events out to sinks, in registration order.

    The bus owns its sinks: leaving the ``with`` block (or calling close())
    closes every sink that has a close() method, exactly once.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    def __enter__(self) -> EventBus:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def sink_count(self) -> int:
        return len(self._sinks)

    def register(self, sink: EventSink) -> None:
        if self._closed:
            raise RuntimeError("Cannot register a sink on a closed EventBus")
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()
