"""Coordinator status domain objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CoordinatorRole(Enum):
    """Role the coordinator is currently playing.

    Attributes:
        MASTER: The local server is the primary; track replication health.
        STANDBY: The local server replicates; monitor the upstream primary.
    """

    MASTER = "master"
    STANDBY = "standby"


class Substate(Enum):
    """Substate within a coordinator role.

    Attributes:
        READY: Initial substate of either role.
        CONNECTED: Standby: upstream seen alive. Master: a sync standby is alive.
        ALONE: Standby only: failure threshold reached, promotion in flight or failed.
        ASYNC: Master only: no reachable synchronous standby (degraded durability).
    """

    READY = "ready"
    CONNECTED = "connected"
    ALONE = "alone"
    ASYNC = "async"


class ProbeOutcome(Enum):
    """Classification of a single heartbeat probe.

    Attributes:
        ALIVE: Session established and liveness query succeeded.
        UNREACHABLE: Session could not be established.
        QUERY_FAILED: Session established but the liveness query failed.
    """

    ALIVE = "alive"
    UNREACHABLE = "unreachable"
    QUERY_FAILED = "query_failed"

    @property
    def is_failure(self) -> bool:
        """Return True for both failure classes."""
        return self is not ProbeOutcome.ALIVE


@dataclass
class CoordinatorStatus:
    """In-memory status of one coordinator process.

    Created at process start, mutated only by the coordinator loop through
    the state machine, and discarded at exit. Never persisted.

    Attributes:
        role: Current coordinator role.
        substate: Current substate within the role.
        consecutive_failures: Failed probes since the last success or target change.
        target: Connection target currently being monitored (standby role).
        promotion_attempted: Latched when promotion is invoked for this episode.
    """

    role: CoordinatorRole
    substate: Substate = Substate.READY
    consecutive_failures: int = 0
    target: str | None = None
    promotion_attempted: bool = False

    def reset_failures(self) -> None:
        """Reset the failure counter."""
        self.consecutive_failures = 0
