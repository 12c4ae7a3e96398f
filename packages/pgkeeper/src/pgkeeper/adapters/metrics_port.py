"""Port interface and no-op implementation for metrics collection.

Metrics ports follow fire-and-forget semantics: implementations may
buffer, sample, or drop metrics as needed. No exceptions should propagate.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsPort(Protocol):
    """Port interface for metrics collection.

    Implementations handle metrics recording to various backends
    (Prometheus, StatsD, etc.). Abstracts the metrics mechanism from
    use cases that need to emit metrics.

    Contract:
        - All methods are fire-and-forget (no return value, no exceptions)
        - set_* methods update gauges to specific values
        - record_* methods increment counters
        - Implementations may no-op if metrics are disabled
    """

    def set_coordinator_role(self, is_master: bool) -> None:
        """Set the coordinator role gauge.

        Args:
            is_master: True if the coordinator is MASTER (gauge 1),
                       False if STANDBY (gauge 0).
        """
        ...

    def set_substate(self, substate: str) -> None:
        """Set the current substate.

        Args:
            substate: One of "ready", "connected", "alone", "async".
        """
        ...

    def set_consecutive_failures(self, count: int) -> None:
        """Set the consecutive probe failure gauge.

        Args:
            count: Current value of the failure counter.
        """
        ...

    def record_probe(self, outcome: str) -> None:
        """Count one heartbeat probe.

        Args:
            outcome: One of "alive", "unreachable", "query_failed".
        """
        ...

    def record_promotion(self, success: bool) -> None:
        """Count one promotion attempt.

        Args:
            success: True if the server confirmed the promotion.
        """
        ...


class NoOpMetricsAdapter:
    """No-operation metrics adapter for when metrics are disabled.

    All methods are no-ops. This allows use cases to unconditionally
    call metrics methods without checking if metrics are enabled.

    Example:
        >>> adapter = NoOpMetricsAdapter()
        >>> adapter.set_coordinator_role(True)  # Does nothing
        >>> adapter.record_probe("alive")  # Does nothing
    """

    def set_coordinator_role(self, is_master: bool) -> None:
        """No-op."""
        pass

    def set_substate(self, substate: str) -> None:
        """No-op."""
        pass

    def set_consecutive_failures(self, count: int) -> None:
        """No-op."""
        pass

    def record_probe(self, outcome: str) -> None:
        """No-op."""
        pass

    def record_promotion(self, success: bool) -> None:
        """No-op."""
        pass
