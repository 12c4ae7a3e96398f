"""Prometheus metrics adapter for pgkeeper.

Implements MetricsPort using prometheus-client library.
Gracefully handles missing prometheus-client (raises ImportError at init).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import Counter, Enum, Gauge

SUBSTATES = ("ready", "connected", "alone", "async")


class PrometheusMetricsAdapter:
    """Prometheus implementation of MetricsPort.

    Creates and manages Prometheus metrics for coordinator state.
    All metrics use a configurable prefix (default 'pgkeeper_') for namespace clarity.

    This adapter requires prometheus-client to be installed:
        pip install pgkeeper-py[metrics]

    Example:
        >>> adapter = PrometheusMetricsAdapter(prefix="myapp_keeper")
        >>> adapter.set_coordinator_role(True)  # Sets myapp_keeper_coordinator_role to 1
        >>> adapter.record_probe("unreachable")

    Raises:
        ImportError: If prometheus-client is not installed.
    """

    def __init__(self, prefix: str = "pgkeeper") -> None:
        """Initialize Prometheus metrics.

        Args:
            prefix: Metric name prefix. Defaults to "pgkeeper".

        Raises:
            ImportError: If prometheus-client is not installed.
        """
        # Import here to make prometheus-client optional
        from prometheus_client import Counter, Enum, Gauge

        self._role: Gauge = Gauge(
            f"{prefix}_coordinator_role",
            "Coordinator role: 1=MASTER, 0=STANDBY",
        )
        self._substate: Enum = Enum(
            f"{prefix}_substate",
            "Coordinator substate within its role",
            states=list(SUBSTATES),
        )
        self._consecutive_failures: Gauge = Gauge(
            f"{prefix}_consecutive_failures",
            "Consecutive failed heartbeat probes against the current target",
        )
        self._probes: Counter = Counter(
            f"{prefix}_probes",
            "Heartbeat probes by outcome",
            ["outcome"],
        )
        self._promotions: Counter = Counter(
            f"{prefix}_promotions",
            "Promotion attempts by result",
            ["result"],
        )

    def set_coordinator_role(self, is_master: bool) -> None:
        """Set role gauge.

        Args:
            is_master: True for MASTER (1), False for STANDBY (0).
        """
        self._role.set(1 if is_master else 0)

    def set_substate(self, substate: str) -> None:
        """Set substate enum. Unknown values are ignored."""
        if substate in SUBSTATES:
            self._substate.state(substate)

    def set_consecutive_failures(self, count: int) -> None:
        """Set consecutive failures gauge."""
        self._consecutive_failures.set(count)

    def record_probe(self, outcome: str) -> None:
        """Increment the probe counter for ``outcome``."""
        self._probes.labels(outcome=outcome).inc()

    def record_promotion(self, success: bool) -> None:
        """Increment the promotion counter."""
        self._promotions.labels(result="success" if success else "failure").inc()
