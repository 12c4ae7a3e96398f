"""Step definitions for the topology registry feature."""

from typing import Any

import pytest
from pytest_bdd import given, parsers, scenario, then, when

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

Context = dict[str, Any]


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.TopologyRegistry")
@scenario("../../features/core/topology_registry.feature", "First node becomes the primary")
def test_first_node_is_primary() -> None:
    pass


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.TopologyRegistry")
@scenario(
    "../../features/core/topology_registry.feature",
    "Standby listed as synchronous is inserted as sync",
)
def test_listed_standby_is_sync() -> None:
    pass


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.TopologyRegistry")
@scenario("../../features/core/topology_registry.feature", "Unreachable node is refused")
def test_unreachable_node_refused() -> None:
    pass


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.TopologyRegistry")
@scenario(
    "../../features/core/topology_registry.feature",
    "Removing by sequence number reconciles the remaining rows",
)
def test_remove_by_sequence_reconciles() -> None:
    pass


def _node(context: Context, name: str):
    return next(n for n in context["admin"].list_nodes() if n.name == name)


@given("an empty registry")
def given_empty_registry(context: Context) -> None:
    connector = FakeDatabaseConnector()
    config_reader = FakeReplicationConfigReader()
    prober = HeartbeatProber(connector)
    notifier = FakeCoordinatorNotifier()
    registry = TopologyRegistry(
        store=FakeRegistryStore(),
        prober=prober,
        replication_config_reader=config_reader,
        notifier=notifier,
    )
    context.update(
        connector=connector,
        config_reader=config_reader,
        admin=ClusterAdmin(registry, prober, notifier),
    )


@given(parsers.parse('the primary\'s synchronous standby list is "{names}"'))
def given_sync_list(context: Context, names: str) -> None:
    context["config_reader"].set_config(ReplicationConfig.parse(names))


@given(parsers.parse('"{target}" is unreachable'))
def given_unreachable(context: Context, target: str) -> None:
    context["connector"].set_unreachable(target)


@given(parsers.parse('node "{name}" was added at "{target}"'))
def given_node_added(context: Context, name: str, target: str) -> None:
    assert context["admin"].add_node(name, target) is True


@when(parsers.parse('node "{name}" is added at "{target}"'))
def when_node_added(context: Context, name: str, target: str) -> None:
    context["result"] = context["admin"].add_node(name, target)


@when(parsers.parse("the node with sequence number {seq:d} is removed"))
def when_removed_by_sequence(context: Context, seq: int) -> None:
    context["result"] = context["admin"].remove_node_by_sequence(seq)


@then(parsers.parse("the add result is {expected}"))
def then_add_result(context: Context, expected: str) -> None:
    assert context["result"] is (expected == "true")


@then(parsers.parse("the registry has {count:d} row"))
@then(parsers.parse("the registry has {count:d} rows"))
def then_row_count(context: Context, count: int) -> None:
    assert len(context["admin"].list_nodes()) == count


@then(parsers.parse('node "{name}" has role "{role}" and sequence number {seq:d}'))
def then_role_and_sequence(context: Context, name: str, role: str, seq: int) -> None:
    node = _node(context, name)
    assert node.role.value == role
    assert node.sequence_number == seq


@then(parsers.parse('node "{name}" has sync state "{state}"'))
def then_sync_state(context: Context, name: str, state: str) -> None:
    assert _node(context, name).sync_state.value == state


@then(parsers.parse("the registry has no row with sequence number {seq:d}"))
def then_no_row(context: Context, seq: int) -> None:
    assert context["result"] is True
    assert seq not in [n.sequence_number for n in context["admin"].list_nodes()]
