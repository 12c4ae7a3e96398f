"""Unit tests for PrometheusMetricsAdapter.

Each test uses its own prefix because the default registry rejects
duplicate metric names.
"""

import itertools

import pytest
from prometheus_client import REGISTRY

from pgkeeper.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pgkeeper.adapters.prometheus_metrics import PrometheusMetricsAdapter

_counter = itertools.count()


@pytest.fixture
def prefix():
    return f"pgkeeper_test_{next(_counter)}"


@pytest.fixture
def adapter(prefix):
    return PrometheusMetricsAdapter(prefix=prefix)


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.PrometheusMetrics")
class TestPrometheusMetricsAdapter:
    def test_implements_port(self, adapter):
        assert isinstance(adapter, MetricsPort)

    def test_role_gauge(self, adapter, prefix):
        adapter.set_coordinator_role(True)
        assert REGISTRY.get_sample_value(f"{prefix}_coordinator_role") == 1.0
        adapter.set_coordinator_role(False)
        assert REGISTRY.get_sample_value(f"{prefix}_coordinator_role") == 0.0

    def test_substate_enum(self, adapter, prefix):
        adapter.set_substate("alone")

        name = f"{prefix}_substate"
        assert REGISTRY.get_sample_value(name, {name: "alone"}) == 1.0
        assert REGISTRY.get_sample_value(name, {name: "ready"}) == 0.0

    def test_unknown_substate_ignored(self, adapter, prefix):
        adapter.set_substate("bogus")
        name = f"{prefix}_substate"
        assert REGISTRY.get_sample_value(name, {name: "bogus"}) is None

    def test_failure_gauge(self, adapter, prefix):
        adapter.set_consecutive_failures(4)
        assert REGISTRY.get_sample_value(f"{prefix}_consecutive_failures") == 4.0

    def test_probe_counter(self, adapter, prefix):
        adapter.record_probe("alive")
        adapter.record_probe("alive")
        adapter.record_probe("unreachable")

        name = f"{prefix}_probes_total"
        assert REGISTRY.get_sample_value(name, {"outcome": "alive"}) == 2.0
        assert REGISTRY.get_sample_value(name, {"outcome": "unreachable"}) == 1.0

    def test_promotion_counter(self, adapter, prefix):
        adapter.record_promotion(True)
        adapter.record_promotion(False)

        name = f"{prefix}_promotions_total"
        assert REGISTRY.get_sample_value(name, {"result": "success"}) == 1.0
        assert REGISTRY.get_sample_value(name, {"result": "failure"}) == 1.0


@pytest.mark.tier(1)
@pytest.mark.tra("Port.MetricsPort")
class TestNoOpMetricsAdapter:
    def test_implements_port_and_accepts_everything(self):
        adapter = NoOpMetricsAdapter()
        assert isinstance(adapter, MetricsPort)
        adapter.set_coordinator_role(True)
        adapter.set_substate("async")
        adapter.set_consecutive_failures(2)
        adapter.record_probe("alive")
        adapter.record_promotion(False)
