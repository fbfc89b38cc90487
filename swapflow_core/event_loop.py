"""
Event loop: single-threaded, deterministic event dispatch.

Dispatches lifecycle events to registered handlers in registration order and
keeps the emitted sequence for reporting. No async.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from swapflow_core.events import Event, EventKind

logger = logging.getLogger(__name__)


class EventLoop:
    """
    Deterministic event loop. Handlers are called in registration order
    for each event; the loop remembers every event it dispatched.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable[[Event], None]] = []
        self._history: list[Event] = []

    def subscribe(self, handler: Callable[[Event], None]) -> None:
        """Register a handler to be called for every event."""
        self._handlers.append(handler)

    def dispatch(self, event: Event) -> None:
        """Record one event and pass it through all handlers in order."""
        self._history.append(event)
        for h in self._handlers:
            h(event)

    def emit(self, kind: EventKind, **payload: Any) -> Event:
        """Build an event of the given kind and dispatch it."""
        event = Event(kind=kind, payload=payload)
        self.dispatch(event)
        return event

    @property
    def history(self) -> list[Event]:
        """Events dispatched so far, oldest first."""
        return list(self._history)


def log_event(event: Event) -> None:
    """Handler: write each event to the module logger."""
    if event.kind in (EventKind.STAGE_FAILED, EventKind.MONITOR_ERROR):
        logger.warning("%s %s", event.kind.value, event.payload)
    else:
        logger.info("%s %s", event.kind.value, event.payload)
