"""Fake adapters for testing.

This module provides test doubles for port interfaces, enabling
deterministic testing without real databases, processes or clocks.
"""

from pgkeeper.adapters.fakes.fake_database import (
    FakeDatabaseConnector,
    FakeDatabaseSession,
)
from pgkeeper.adapters.fakes.fake_metrics import FakeMetricsAdapter, MetricCall
from pgkeeper.adapters.fakes.fake_registry_store import FakeRegistryStore
from pgkeeper.adapters.fakes.fake_server import (
    FakeCommandRunner,
    FakeCoordinatorNotifier,
    FakeCoordinatorRegistration,
    FakeReplicationConfigReader,
    FakeServerControl,
)
from pgkeeper.adapters.fakes.fake_time import FakeTimeProvider

__all__ = [
    "FakeDatabaseConnector",
    "FakeDatabaseSession",
    "FakeMetricsAdapter",
    "MetricCall",
    "FakeRegistryStore",
    "FakeCommandRunner",
    "FakeCoordinatorNotifier",
    "FakeCoordinatorRegistration",
    "FakeReplicationConfigReader",
    "FakeServerControl",
    "FakeTimeProvider",
]
