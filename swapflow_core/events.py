"""
Lifecycle events emitted by the swap pipeline.

Events are immutable data carriers. Subscribers (loggers, reports, UIs) react
to them; they carry no business logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventKind(Enum):
    QUOTE_RECEIVED = "quote_received"
    ALLOWANCE_DECISION = "allowance_decision"
    ORDER_SIGNED = "order_signed"
    ORDER_SUBMITTED = "order_submitted"
    STATUS_UPDATE = "status_update"
    MONITOR_TERMINAL = "monitor_terminal"
    MONITOR_TIMEOUT = "monitor_timeout"
    MONITOR_ERROR = "monitor_error"
    MONITOR_ABORTED = "monitor_aborted"
    STAGE_FAILED = "stage_failed"


@dataclass(frozen=True)
class Event:
    """One lifecycle event. payload is a flat dict of wire-friendly values."""

    kind: EventKind
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            object.__setattr__(self, "timestamp", datetime.fromisoformat(str(self.timestamp)))
