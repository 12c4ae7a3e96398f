"""Fixtures for FastAPI adapter unit tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pgkeeper.adapters.fakes import (
    FakeCoordinatorNotifier,
    FakeDatabaseConnector,
    FakeRegistryStore,
    FakeReplicationConfigReader,
)
from pgkeeper.domain.node import ReplicationConfig
from pgkeeper.usecases.cluster_admin import ClusterAdmin
from pgkeeper.usecases.heartbeat_prober import HeartbeatProber
from pgkeeper.usecases.topology_registry import TopologyRegistry
from pgkeeper_fastapi.app import create_admin_app


@pytest.fixture
def pydantic_settings_dict() -> dict[str, str | int | bool | None]:
    """Example Pydantic settings dict (snake_case keys)."""
    return {
        "node_name": "nodeB",
        "primary_connection_target": "host=db1 dbname=postgres",
        "heartbeat_interval_seconds": 5,
        "failure_threshold": 3,
        "post_promotion_command": None,
        "metrics_enabled": False,
    }


@pytest.fixture
def connector() -> FakeDatabaseConnector:
    return FakeDatabaseConnector()


@pytest.fixture
def notifier() -> FakeCoordinatorNotifier:
    return FakeCoordinatorNotifier()


@pytest.fixture
def admin(connector: FakeDatabaseConnector, notifier: FakeCoordinatorNotifier) -> ClusterAdmin:
    """ClusterAdmin over in-memory fakes, with "nodeB" listed as synchronous."""
    prober = HeartbeatProber(connector)
    registry = TopologyRegistry(
        store=FakeRegistryStore(),
        prober=prober,
        replication_config_reader=FakeReplicationConfigReader(
            ReplicationConfig.parse("nodeB")
        ),
        notifier=notifier,
        node_name="nodeA",
    )
    return ClusterAdmin(registry, prober, notifier)


@pytest.fixture
def test_app(admin: ClusterAdmin) -> FastAPI:
    return create_admin_app(admin=admin)


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)
