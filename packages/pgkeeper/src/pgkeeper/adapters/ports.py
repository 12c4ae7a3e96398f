"""Port interfaces for the pgkeeper core package.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from pgkeeper.domain.events import CoordinatorEvent
    from pgkeeper.domain.node import Node, NodeRole, ReplicationConfig, SyncState


@runtime_checkable
class DatabaseSession(Protocol):
    """An open session against one database node.

    Contract:
        - execute() runs one statement and returns all result rows
        - execute() raises QueryFailedError on any statement failure
        - close() is idempotent and never raises
    """

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[tuple[Any, ...]]:
        """Execute a statement and return its rows.

        Args:
            sql: Statement text with %s placeholders.
            params: Positional parameters.

        Returns:
            All result rows (empty for statements without results).

        Raises:
            QueryFailedError: If the statement fails.
        """
        ...

    def close(self) -> None:
        """Close the session."""
        ...


@runtime_checkable
class DatabaseConnectorPort(Protocol):
    """Port interface for the SQL execution transport used to reach a node.

    Contract:
        - connect() never blocks longer than ``timeout`` seconds
        - connect() raises NodeUnreachableError if no session can be opened
        - Statements on the returned session are bounded by the same timeout
    """

    def connect(self, target: str, timeout: float) -> DatabaseSession:
        """Open a session to ``target``.

        Args:
            target: Opaque connection string.
            timeout: Upper bound in seconds for connecting and for statements.

        Returns:
            An open DatabaseSession.

        Raises:
            NodeUnreachableError: If the session cannot be established.
        """
        ...


@runtime_checkable
class RegistryStorePort(Protocol):
    """Port interface for the persisted topology registry table.

    Implementations own the storage of registry rows. Each method is atomic;
    sequence numbers are assigned by the store, strictly increasing and never
    reused. Returned nodes always have ``is_self=False``; identity is resolved
    by the TopologyRegistry use case.

    Contract:
        - list_nodes() returns rows ordered by sequence_number
        - insert_node() returns the stored row with its sequence number
        - delete_* return False when no row matches
        - update_sync_states() only touches the named rows
        - set_primary() makes exactly one row primary
        - at most one row is primary at any time
    """

    def list_nodes(self) -> list[Node]:
        """Return all rows ordered by sequence_number."""
        ...

    def insert_node(
        self,
        name: str,
        connection_target: str,
        role: NodeRole,
        sync_state: SyncState,
    ) -> Node:
        """Insert a row and return it.

        Raises:
            RegistryConflictError: If a row with the same name exists, or
                ``role`` is primary and a primary row exists.
        """
        ...

    def delete_by_name(self, name: str) -> bool:
        """Delete the row with ``name``. Returns False if absent."""
        ...

    def delete_by_sequence(self, sequence_number: int) -> bool:
        """Delete the row with ``sequence_number``. Returns False if absent."""
        ...

    def update_sync_states(self, changes: dict[str, SyncState]) -> None:
        """Rewrite the sync_state of the named rows."""
        ...

    def set_primary(self, name: str) -> bool:
        """Make ``name`` the only primary, demoting any previous primary.

        Returns:
            False if no row has ``name``.
        """
        ...


@runtime_checkable
class ReplicationConfigReaderPort(Protocol):
    """Port interface for reading the primary's synchronous-standby list.

    Contract:
        - read_replication_config() returns the current ReplicationConfig
        - May raise DatabaseError if the primary cannot be reached
    """

    def read_replication_config(self) -> ReplicationConfig:
        """Read and parse the primary's synchronous standby names."""
        ...


@runtime_checkable
class ServerControlPort(Protocol):
    """Port interface for controlling the local database server.

    Wraps the database's own promotion primitive, which is out of scope.

    Contract:
        - promote() requests promotion and returns without waiting
        - is_in_recovery() reports whether the server is still a replica
        - Both may raise DatabaseError
    """

    def promote(self) -> None:
        """Ask the local server to leave recovery."""
        ...

    def is_in_recovery(self) -> bool:
        """Return True while the local server is a replica."""
        ...


@runtime_checkable
class CommandRunnerPort(Protocol):
    """Port interface for running external shell commands.

    Contract:
        - run() blocks until the command finishes and returns its exit status
        - run() raises OSError if the command cannot be launched
    """

    def run(self, command: str) -> int:
        """Run ``command`` through the shell and return its exit status."""
        ...


@runtime_checkable
class CoordinatorRegistrationPort(Protocol):
    """Port interface for publishing the coordinator's process identity.

    The record is written once at startup, read by the notification path,
    and withdrawn at exit. It is not used for any other coordination.
    """

    def publish(self, pid: int) -> None:
        """Record ``pid`` as the running coordinator."""
        ...

    def read_pid(self) -> int | None:
        """Return the published pid, or None if nothing is published."""
        ...

    def withdraw(self) -> None:
        """Remove the record. Idempotent."""
        ...


@runtime_checkable
class CoordinatorNotifierPort(Protocol):
    """Port interface for waking a running coordinator from another process.

    Contract:
        - notify_registry_changed() returns True if the coordinator was signaled
        - Returns False if no coordinator is registered or it is gone
    """

    def notify_registry_changed(self) -> bool:
        """Ask the coordinator to reload its registry cache."""
        ...


@runtime_checkable
class EventEmitterPort(Protocol):
    """Port interface for emitting coordinator events.

    Contract:
        - emit(event) delivers the event to all registered observers
        - emit() is fire-and-forget (no return value, no exceptions propagated)
    """

    def emit(self, event: CoordinatorEvent) -> None:
        """Emit a coordinator event to observers.

        Args:
            event: The CoordinatorEvent to emit.
        """
        ...


@runtime_checkable
class LoggingPort(Protocol):
    """Port interface for structured logging.

    Abstracts the logging mechanism from use cases that report transient
    failures, degraded states and promotion outcomes.

    Contract:
        - Every method is fire-and-forget (no return value, no exceptions propagated)
        - Implementations may format, filter, or route messages as needed
    """

    def info(self, message: str) -> None:
        """Log an informational message."""
        ...

    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    def error(self, message: str) -> None:
        """Log an error message."""
        ...


@runtime_checkable
class TimeProvider(Protocol):
    """Port interface for time operations.

    Enables deterministic testing of heartbeat deadlines and promotion
    timeouts through fake implementations.

    Contract:
        - get_time_seconds() returns a monotonic timestamp as float
        - sleep() blocks for the given number of seconds
    """

    def get_time_seconds(self) -> float:
        """Return a monotonic timestamp in seconds."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block for ``seconds``."""
        ...


class RealTimeProvider:
    """Default implementation: provides real monotonic time.

    Uses time.monotonic() so deadlines are immune to wall-clock changes.
    """

    def get_time_seconds(self) -> float:
        """Return the current monotonic clock reading."""
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Sleep using time.sleep()."""
        time.sleep(seconds)


class EnvironmentNodeNameResolver:
    """Resolve the coordinator's node name from PGKEEPER_NODE_NAME.

    Used as a fallback when the configuration file does not set node_name,
    which is the usual way to inject identity in containerized deployments.
    """

    ENV_VAR = "PGKEEPER_NODE_NAME"

    def resolve_node_name(self) -> str | None:
        """Resolve node name from the environment.

        Returns:
            The stripped value, or None if unset or whitespace-only.
        """
        value = os.environ.get(self.ENV_VAR, "").strip()
        return value or None
