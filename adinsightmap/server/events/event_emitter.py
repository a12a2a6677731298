"""
Fan-out of store change events to registered listeners.

GraphStore and LayerRegistry report every mutation through their
``on_change`` hook; wiring both hooks to ``EventEmitter.fire`` gives one
stream that the Socket.IO layer (or a test) can subscribe to.
"""
from __future__ import annotations

import time
from logging import getLogger
from typing import Callable, List

from .event_types import StoreEvent

logger = getLogger(__name__)

Listener = Callable[[StoreEvent], None]


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def on_event(self, callback: Listener) -> None:
        """Register a callback that receives every emitted event."""
        self._listeners.append(callback)

    def off_event(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def fire(self, payload: StoreEvent) -> None:
        """Stamp the payload with a millisecond timestamp and broadcast it."""
        if "ts" not in payload:
            payload["ts"] = _now_ms()
        for cb in list(self._listeners):
            try:
                cb(payload)
            except Exception:
                # A broken listener must not abort the store mutation that fired.
                logger.exception(f"Event listener failed on {payload.get('type')}")


def _now_ms() -> int:
    return int(time.time() * 1000)
