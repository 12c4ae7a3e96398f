"""Domain events for coordinator state transitions.

Events are immutable value objects representing state changes of the
coordinator. They follow the frozen dataclass pattern used throughout the
domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CoordinatorEventType(Enum):
    """Types of coordinator events that can be emitted.

    Attributes:
        TARGET_CHANGED: The monitored upstream target changed; counter reset.
        CONNECTED: Standby saw its upstream alive, or master saw a sync standby.
        FAILURE_COUNTED: A probe failed and the failure counter advanced.
        PROMOTION_STARTED: Failure threshold reached; promotion invoked.
        PROMOTED: Local server confirmed promotion; coordinator is now master.
        PROMOTION_FAILED: Promotion was not confirmed; operator attention required.
        DEGRADED_TO_ASYNC: Master has no reachable synchronous standby.
    """

    TARGET_CHANGED = "target_changed"
    CONNECTED = "connected"
    FAILURE_COUNTED = "failure_counted"
    PROMOTION_STARTED = "promotion_started"
    PROMOTED = "promoted"
    PROMOTION_FAILED = "promotion_failed"
    DEGRADED_TO_ASYNC = "degraded_to_async"


@dataclass(frozen=True)
class CoordinatorEvent:
    """Immutable event representing a coordinator state transition.

    Attributes:
        event_type: The type of event that occurred.
        reason: Optional human-readable reason for the event.
    """

    event_type: CoordinatorEventType
    reason: str | None = None
