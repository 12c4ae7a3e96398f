"""TopologyRegistry use case: membership, roles and sync-state reconciliation."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from pgkeeper.domain.exceptions import (
    DatabaseError,
    PgKeeperConfigError,
    RegistryConflictError,
)
from pgkeeper.domain.node import Node, NodeRole, ReplicationConfig, SyncState
from pgkeeper.domain.status import ProbeOutcome

if TYPE_CHECKING:
    from pgkeeper.adapters.ports import (
        CoordinatorNotifierPort,
        LoggingPort,
        RegistryStorePort,
        ReplicationConfigReaderPort,
    )
    from pgkeeper.usecases.heartbeat_prober import HeartbeatProber


class TopologyRegistry:
    """Single source of truth for cluster membership and roles.

    Wraps the persisted registry table with the rules that keep it consistent
    with the primary's real replication topology:

    - unreachable nodes are never accepted
    - the first node added to an empty registry is the primary
    - every standby row's sync_state mirrors the primary's synchronous list,
      re-derived after every structural mutation
    - every structural mutation notifies the running coordinator

    Dependencies:
        - RegistryStorePort: persisted rows
        - HeartbeatProber: admission probe for new nodes
        - ReplicationConfigReaderPort: the primary's synchronous standby list
        - CoordinatorNotifierPort (optional): wakes the coordinator after mutations
    """

    def __init__(
        self,
        store: RegistryStorePort,
        prober: HeartbeatProber,
        replication_config_reader: ReplicationConfigReaderPort,
        notifier: CoordinatorNotifierPort | None = None,
        node_name: str | None = None,
        probe_timeout: float = 3.0,
        logger: LoggingPort | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Port implementation holding the registry rows.
            prober: Prober used to admit new nodes.
            replication_config_reader: Source of the synchronous standby list.
            notifier: Optional port used to wake the coordinator.
            node_name: Name of this coordinator's own node, used for is_self.
            probe_timeout: Bound in seconds for the admission probe.
            logger: Optional port for diagnostics.
        """
        self._store = store
        self._prober = prober
        self._replication_config_reader = replication_config_reader
        self._notifier = notifier
        self.node_name = node_name
        self.probe_timeout = probe_timeout
        self._logger = logger

    def add(self, name: str, connection_target: str) -> bool:
        """Register a node.

        The duplicate check here is advisory: the store rejects a taken
        name or a second primary atomically, and that rejection is reported
        the same way.

        Args:
            name: Unique node name.
            connection_target: Connection string of the node.

        Returns:
            False if the node is not reachable, the name is taken, or a
            concurrent add already registered a primary.
        """
        outcome = self._prober.probe(connection_target, self.probe_timeout)
        if outcome is not ProbeOutcome.ALIVE:
            self._warn(f"Refusing to register {name!r}: probe result {outcome.value}")
            return False

        existing = self._store.list_nodes()
        if any(node.name == name for node in existing):
            self._warn(f"Refusing to register {name!r}: name already registered")
            return False

        if not existing:
            role, sync_state = NodeRole.PRIMARY, SyncState.UNCONFIGURED
        else:
            config = self._read_replication_config()
            role = NodeRole.STANDBY
            sync_state = _classify(name, config or ReplicationConfig())

        try:
            node = self._store.insert_node(name, connection_target, role, sync_state)
        except RegistryConflictError as e:
            self._warn(f"Refusing to register {name!r}: {e}")
            return False
        self._info(
            f"Registered {node.name!r} as {node.role.value} "
            f"(sequence {node.sequence_number}, {node.sync_state.value})"
        )
        self._after_mutation()
        return True

    def remove(self, name: str) -> bool:
        """Delete the row named ``name``. Returns False if absent."""
        if not self._store.delete_by_name(name):
            return False
        self._info(f"Removed node {name!r}")
        self._after_mutation()
        return True

    def remove_by_sequence(self, sequence_number: int) -> bool:
        """Delete the row with ``sequence_number``. Returns False if absent."""
        if not self._store.delete_by_sequence(sequence_number):
            return False
        self._info(f"Removed node with sequence {sequence_number}")
        self._after_mutation()
        return True

    def list(self) -> tuple[Node, ...]:
        """Return a snapshot ordered by sequence_number, with is_self resolved."""
        nodes = sorted(self._store.list_nodes(), key=lambda n: n.sequence_number)
        return tuple(
            dataclasses.replace(node, is_self=node.name == self.node_name)
            for node in nodes
        )

    def primary(self) -> Node | None:
        """Return the primary row, or None if the registry is empty."""
        return next((node for node in self.list() if node.is_primary), None)

    def reconcile(self) -> dict[str, SyncState]:
        """Re-derive every standby row's sync_state from the primary.

        Primary rows keep their state. Only rows whose state changes are
        written. When the synchronous standby list cannot be read the
        registry is left untouched.

        Returns:
            Mapping of node name to new sync_state for the rows rewritten.
        """
        config = self._read_replication_config()
        if config is None:
            return {}

        changes = {
            node.name: expected
            for node in self._store.list_nodes()
            if not node.is_primary
            and (expected := _classify(node.name, config)) != node.sync_state
        }
        if changes:
            self._store.update_sync_states(changes)
            summary = ", ".join(f"{n}={s.value}" for n, s in sorted(changes.items()))
            self._info(f"Reconciled sync states: {summary}")
        return changes

    def record_promotion(self, name: str) -> bool:
        """Make ``name`` the primary row after a promotion.

        The synchronous list is now read from the new primary, so every
        standby row is reconciled against it. The coordinator is not
        notified: the caller is the coordinator itself.

        Returns:
            False if no row is named ``name``.
        """
        if not self._store.set_primary(name):
            self._warn(f"Cannot record promotion: {name!r} is not registered")
            return False
        self._info(f"Recorded {name!r} as primary")
        self.reconcile()
        return True

    def _after_mutation(self) -> None:
        self.reconcile()
        if self._notifier is not None and not self._notifier.notify_registry_changed():
            self._info("No running coordinator was notified of the registry change")

    def _read_replication_config(self) -> ReplicationConfig | None:
        try:
            return self._replication_config_reader.read_replication_config()
        except (DatabaseError, PgKeeperConfigError) as e:
            self._warn(f"Cannot read synchronous standby list: {e}")
            return None

    def _info(self, message: str) -> None:
        if self._logger is not None:
            self._logger.info(message)

    def _warn(self, message: str) -> None:
        if self._logger is not None:
            self._logger.warning(message)


def _classify(name: str, config: ReplicationConfig) -> SyncState:
    return SyncState.SYNC if config.is_synchronous(name) else SyncState.ASYNC
