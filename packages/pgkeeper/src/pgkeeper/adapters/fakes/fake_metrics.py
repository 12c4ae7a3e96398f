"""Fake metrics adapter for testing.

Provides a test double for MetricsPort that records all metric updates
for assertion in tests.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MetricCall:
    """Record of a single metric update.

    Attributes:
        metric_name: Name of the metric that was updated.
        value: Value that was set or recorded.
    """

    metric_name: str
    value: float | int | bool | str


class FakeMetricsAdapter:
    """Fake implementation of MetricsPort for testing.

    Example:
        >>> fake = FakeMetricsAdapter()
        >>> fake.record_probe("alive")
        >>> fake.probe_outcomes
        ['alive']
    """

    def __init__(self) -> None:
        """Initialize with no recorded state."""
        self.is_master: bool | None = None
        self.substate: str | None = None
        self.consecutive_failures: int | None = None
        self.probe_outcomes: list[str] = []
        self.promotions: list[bool] = []
        self._calls: list[MetricCall] = []

    @property
    def calls(self) -> list[MetricCall]:
        """Return a copy of all metric calls in invocation order."""
        return list(self._calls)

    def set_coordinator_role(self, is_master: bool) -> None:
        self.is_master = is_master
        self._calls.append(MetricCall("coordinator_role", is_master))

    def set_substate(self, substate: str) -> None:
        self.substate = substate
        self._calls.append(MetricCall("substate", substate))

    def set_consecutive_failures(self, count: int) -> None:
        self.consecutive_failures = count
        self._calls.append(MetricCall("consecutive_failures", count))

    def record_probe(self, outcome: str) -> None:
        self.probe_outcomes.append(outcome)
        self._calls.append(MetricCall("probe", outcome))

    def record_promotion(self, success: bool) -> None:
        self.promotions.append(success)
        self._calls.append(MetricCall("promotion", success))
