"""SQL implementation of the RegistryStorePort.

Stores the topology registry in a table on the primary, where ordinary
replication makes it visible to every standby. Every method runs as a single
autocommit statement, so each mutation is atomic on its own.
"""

from __future__ import annotations

from typing import Any

from pgkeeper.adapters.ports import DatabaseConnectorPort, RegistryStorePort
from pgkeeper.domain.exceptions import (
    PgKeeperConfigError,
    QueryFailedError,
    RegistryConflictError,
)
from pgkeeper.domain.node import Node, NodeRole, SyncState

_SCHEMA_DDL = (
    "CREATE SCHEMA IF NOT EXISTS {schema}",
    """
    CREATE TABLE IF NOT EXISTS {schema}.node_info (
        seqno      bigserial PRIMARY KEY,
        name       text NOT NULL UNIQUE,
        conninfo   text NOT NULL,
        role       text NOT NULL CHECK (role IN ('primary', 'standby')),
        sync_state text NOT NULL CHECK (sync_state IN ('sync', 'async', 'unconfigured')),
        -- true on the primary row, NULL elsewhere; unique, so one primary at most
        primary_slot boolean GENERATED ALWAYS AS
            (CASE WHEN role = 'primary' THEN true END) STORED,
        CONSTRAINT node_info_single_primary UNIQUE (primary_slot)
            DEFERRABLE INITIALLY IMMEDIATE
    )
    """,
)

_UNIQUE_VIOLATION = "23505"


class SQLRegistryStore:
    """Registry store backed by the ``node_info`` table.

    Attributes:
        target: Connection string of the server holding the table.
        schema: Schema containing the table. Defaults to "pgkeeper".
    """

    def __init__(
        self,
        connector: DatabaseConnectorPort,
        target: str,
        *,
        timeout: float = 5.0,
        schema: str = "pgkeeper",
    ) -> None:
        """Initialize the store.

        Args:
            connector: Transport used to reach the server.
            target: Connection string of the server holding the table.
            timeout: Bound in seconds for each operation.
            schema: Schema containing the table. Must be a plain identifier.
        """
        if not schema.isidentifier():
            raise PgKeeperConfigError(f"invalid registry schema name: {schema!r}")
        self._connector = connector
        self.target = target
        self.schema = schema
        self._timeout = timeout
        self._table = f"{schema}.node_info"

    def _run(self, sql: str, params: tuple[Any, ...] = ()) -> list[tuple[Any, ...]]:
        session = self._connector.connect(self.target, self._timeout)
        try:
            return session.execute(sql, params)
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create the schema and table if they do not exist."""
        for statement in _SCHEMA_DDL:
            self._run(statement.format(schema=self.schema))

    def list_nodes(self) -> list[Node]:
        """Return all rows ordered by sequence number."""
        rows = self._run(
            f"SELECT seqno, name, conninfo, role, sync_state "
            f"FROM {self._table} ORDER BY seqno"
        )
        return [_row_to_node(row) for row in rows]

    def insert_node(
        self,
        name: str,
        connection_target: str,
        role: NodeRole,
        sync_state: SyncState,
    ) -> Node:
        """Insert a row, letting the server assign the sequence number.

        Raises:
            RegistryConflictError: If the name is taken or a second primary
                would be created.
        """
        try:
            rows = self._run(
                f"INSERT INTO {self._table} (name, conninfo, role, sync_state) "
                f"VALUES (%s, %s, %s, %s) ON CONFLICT (name) DO NOTHING "
                f"RETURNING seqno, name, conninfo, role, sync_state",
                (name, connection_target, role.value, sync_state.value),
            )
        except QueryFailedError as e:
            if getattr(e.original_error, "sqlstate", None) != _UNIQUE_VIOLATION:
                raise
            raise RegistryConflictError(
                f"cannot register {name!r}: a primary is already registered", name
            ) from e
        if not rows:
            raise RegistryConflictError(f"node {name!r} is already registered", name)
        return _row_to_node(rows[0])

    def delete_by_name(self, name: str) -> bool:
        """Delete the row named ``name``."""
        rows = self._run(
            f"DELETE FROM {self._table} WHERE name = %s RETURNING seqno", (name,)
        )
        return bool(rows)

    def delete_by_sequence(self, sequence_number: int) -> bool:
        """Delete the row with ``sequence_number``."""
        rows = self._run(
            f"DELETE FROM {self._table} WHERE seqno = %s RETURNING seqno",
            (sequence_number,),
        )
        return bool(rows)

    def update_sync_states(self, changes: dict[str, SyncState]) -> None:
        """Rewrite sync_state for the named rows in one statement."""
        if not changes:
            return
        names = list(changes)
        states = [changes[name].value for name in names]
        self._run(
            f"UPDATE {self._table} AS n SET sync_state = c.sync_state "
            f"FROM unnest(%s::text[], %s::text[]) AS c(name, sync_state) "
            f"WHERE n.name = c.name",
            (names, states),
        )

    def set_primary(self, name: str) -> bool:
        """Make ``name`` the only primary in one statement.

        node_info_single_primary is deferrable, so it is checked once the
        whole swap is done rather than row by row.
        """
        rows = self._run(
            f"UPDATE {self._table} "
            f"SET role = CASE WHEN name = %s THEN 'primary' ELSE 'standby' END, "
            f"sync_state = 'unconfigured' "
            f"WHERE (name = %s OR role = 'primary') "
            f"AND EXISTS (SELECT 1 FROM {self._table} WHERE name = %s) "
            f"RETURNING name",
            (name, name, name),
        )
        return any(row[0] == name for row in rows)


def _row_to_node(row: tuple[Any, ...]) -> Node:
    seqno, name, conninfo, role, sync_state = row
    return Node(
        name=name,
        connection_target=conninfo,
        role=NodeRole(role),
        sync_state=SyncState(sync_state),
        sequence_number=int(seqno),
    )


# Runtime protocol check
assert isinstance(
    SQLRegistryStore.__new__(SQLRegistryStore), RegistryStorePort
), "SQLRegistryStore must implement RegistryStorePort"
