"""SQL adapters for the local server and the primary's replication settings.

Both adapters issue single statements over the DatabaseConnectorPort:
``pg_promote`` / ``pg_is_in_recovery`` against the local server, and
``SHOW synchronous_standby_names`` against the primary.
"""

from __future__ import annotations

from pgkeeper.adapters.ports import (
    DatabaseConnectorPort,
    ReplicationConfigReaderPort,
    ServerControlPort,
)
from pgkeeper.domain.exceptions import QueryFailedError
from pgkeeper.domain.node import ReplicationConfig


class SQLServerControl:
    """Controls the local server through SQL.

    Promotion is requested with ``wait => false`` so the call returns
    immediately; confirmation is polled through is_in_recovery().
    """

    def __init__(
        self, connector: DatabaseConnectorPort, target: str, *, timeout: float = 5.0
    ) -> None:
        """Initialize the adapter.

        Args:
            connector: Transport used to reach the local server.
            target: Connection string of the local server.
            timeout: Bound in seconds for each statement.
        """
        self._connector = connector
        self._target = target
        self._timeout = timeout

    def _scalar(self, sql: str) -> object:
        session = self._connector.connect(self._target, self._timeout)
        try:
            rows = session.execute(sql)
        finally:
            session.close()
        if not rows:
            raise QueryFailedError(f"no result from {sql!r}", target=self._target)
        return rows[0][0]

    def promote(self) -> None:
        """Request promotion of the local server."""
        self._scalar("SELECT pg_promote(false)")

    def is_in_recovery(self) -> bool:
        """Return True while the local server is still a standby."""
        return bool(self._scalar("SELECT pg_is_in_recovery()"))


class SQLReplicationConfigReader:
    """Reads ``synchronous_standby_names`` from the primary."""

    def __init__(
        self, connector: DatabaseConnectorPort, target: str, *, timeout: float = 5.0
    ) -> None:
        """Initialize the reader.

        Args:
            connector: Transport used to reach the primary.
            target: Connection string of the primary.
            timeout: Bound in seconds for the statement.
        """
        self._connector = connector
        self._target = target
        self._timeout = timeout

    def read_replication_config(self) -> ReplicationConfig:
        """Read and parse the synchronous standby list."""
        session = self._connector.connect(self._target, self._timeout)
        try:
            rows = session.execute("SHOW synchronous_standby_names")
        finally:
            session.close()
        value = rows[0][0] if rows else ""
        return ReplicationConfig.parse(value)


# Runtime protocol checks
assert isinstance(
    SQLServerControl.__new__(SQLServerControl), ServerControlPort
), "SQLServerControl must implement ServerControlPort"
assert isinstance(
    SQLReplicationConfigReader.__new__(SQLReplicationConfigReader),
    ReplicationConfigReaderPort,
), "SQLReplicationConfigReader must implement ReplicationConfigReaderPort"
