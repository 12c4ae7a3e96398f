"""ClusterAdmin use case: administrative operations on the cluster."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pgkeeper.domain.exceptions import UnknownSignalError
from pgkeeper.domain.status import ProbeOutcome

if TYPE_CHECKING:
    from pgkeeper.adapters.ports import CoordinatorNotifierPort
    from pgkeeper.domain.node import Node
    from pgkeeper.usecases.heartbeat_prober import HeartbeatProber
    from pgkeeper.usecases.topology_registry import TopologyRegistry

RELOAD_REGISTRY_SIGNAL = "reload_registry"
RECOGNIZED_SIGNALS = frozenset({RELOAD_REGISTRY_SIGNAL})


class ClusterAdmin:
    """Administrative entry points for an already-authenticated caller.

    Registry mutations go through TopologyRegistry, which reconciles sync
    states and wakes the running coordinator after each change.
    """

    def __init__(
        self,
        registry: TopologyRegistry,
        prober: HeartbeatProber,
        notifier: CoordinatorNotifierPort,
        probe_timeout: float = 3.0,
    ) -> None:
        self._registry = registry
        self._prober = prober
        self._notifier = notifier
        self.probe_timeout = probe_timeout

    def add_node(self, name: str, target: str) -> bool:
        """Register a reachable node. False if unreachable or already present."""
        return self._registry.add(name, target)

    def remove_node(self, name: str) -> bool:
        """Remove a node by name. False if absent."""
        return self._registry.remove(name)

    def remove_node_by_sequence(self, sequence_number: int) -> bool:
        """Remove a node by sequence number. False if absent."""
        return self._registry.remove_by_sequence(sequence_number)

    def list_nodes(self) -> tuple[Node, ...]:
        """Return the registry ordered by sequence number."""
        return self._registry.list()

    def probe_node(self, target: str) -> bool:
        """Probe ``target`` directly, bypassing the registry."""
        return self._prober.probe(target, self.probe_timeout) is ProbeOutcome.ALIVE

    def notify_coordinator(self, signal_name: str) -> bool:
        """Deliver a named notification to the running coordinator.

        Args:
            signal_name: Must be "reload_registry".

        Returns:
            False if no coordinator is registered or it is not running.

        Raises:
            UnknownSignalError: For any other signal name.
        """
        if signal_name not in RECOGNIZED_SIGNALS:
            raise UnknownSignalError(signal_name)
        return self._notifier.notify_registry_changed()
