"""Fake registry store for testing.

Provides an in-memory test double for RegistryStorePort with the same
sequence-number semantics as the SQL table.
"""

from __future__ import annotations

import dataclasses

from pgkeeper.domain.exceptions import RegistryConflictError
from pgkeeper.domain.node import Node, NodeRole, SyncState


class FakeRegistryStore:
    """Fake implementation of RegistryStorePort for testing.

    Rows live in a dict keyed by name. Sequence numbers come from a counter
    that never goes backwards, so deleted numbers are never reused.

    Example:
        >>> store = FakeRegistryStore()
        >>> node = store.insert_node("a", "host=a", NodeRole.PRIMARY,
        ...                          SyncState.UNCONFIGURED)
        >>> node.sequence_number
        1
    """

    def __init__(self, nodes: list[Node] | None = None) -> None:
        """Initialize with optional existing rows."""
        self._rows: dict[str, Node] = {}
        self._last_sequence = 0
        self.sync_state_updates: list[dict[str, SyncState]] = []
        self.fail_with: BaseException | None = None
        for node in nodes or []:
            self._rows[node.name] = dataclasses.replace(node, is_self=False)
            self._last_sequence = max(self._last_sequence, node.sequence_number)

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def list_nodes(self) -> list[Node]:
        """Return rows ordered by sequence number."""
        self._check_failure()
        return sorted(self._rows.values(), key=lambda n: n.sequence_number)

    def insert_node(
        self,
        name: str,
        connection_target: str,
        role: NodeRole,
        sync_state: SyncState,
    ) -> Node:
        """Insert a row with the next sequence number."""
        self._check_failure()
        if name in self._rows:
            raise RegistryConflictError(f"node {name!r} is already registered", name)
        if role == NodeRole.PRIMARY and any(n.is_primary for n in self._rows.values()):
            raise RegistryConflictError("a primary is already registered", name)
        node = Node(
            name=name,
            connection_target=connection_target,
            role=role,
            sync_state=sync_state,
            sequence_number=self._last_sequence + 1,
        )
        self._last_sequence = node.sequence_number
        self._rows[name] = node
        return node

    def delete_by_name(self, name: str) -> bool:
        """Delete a row by name."""
        self._check_failure()
        return self._rows.pop(name, None) is not None

    def delete_by_sequence(self, sequence_number: int) -> bool:
        """Delete a row by sequence number."""
        self._check_failure()
        for name, node in self._rows.items():
            if node.sequence_number == sequence_number:
                del self._rows[name]
                return True
        return False

    def update_sync_states(self, changes: dict[str, SyncState]) -> None:
        """Rewrite sync_state of the named rows."""
        self._check_failure()
        self.sync_state_updates.append(dict(changes))
        for name, state in changes.items():
            if name in self._rows:
                self._rows[name] = dataclasses.replace(
                    self._rows[name], sync_state=state
                )

    def set_primary(self, name: str) -> bool:
        """Make ``name`` the only primary row."""
        self._check_failure()
        if name not in self._rows:
            return False
        for row_name, node in list(self._rows.items()):
            if row_name == name:
                self._rows[row_name] = dataclasses.replace(
                    node, role=NodeRole.PRIMARY, sync_state=SyncState.UNCONFIGURED
                )
            elif node.role == NodeRole.PRIMARY:
                self._rows[row_name] = dataclasses.replace(
                    node, role=NodeRole.STANDBY, sync_state=SyncState.UNCONFIGURED
                )
        return True
