"""psycopg-based implementation of the DatabaseConnectorPort.

This adapter opens short-lived autocommit sessions against PostgreSQL nodes.
The caller's timeout is one budget shared by connection establishment and
each statement, so a probe can never hang the coordinator loop for longer
than that timeout.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Sequence

import psycopg

from pgkeeper.adapters.ports import DatabaseConnectorPort
from pgkeeper.domain.exceptions import NodeUnreachableError, QueryFailedError
from pgkeeper.domain.settings import MIN_PROBE_TIMEOUT_SECONDS

if TYPE_CHECKING:
    from psycopg import Connection

# libpq and psycopg wait at least 2 seconds for a connection attempt
_MIN_CONNECT_TIMEOUT = 2


def split_timeout(timeout: float) -> tuple[int, int]:
    """Split ``timeout`` into a connect timeout and a statement timeout.

    The connect timeout is whole seconds (libpq's unit) and takes about two
    thirds of the budget; the statement gets the rest in milliseconds. The
    two always add up to at most ``timeout``.

    Args:
        timeout: Total budget in seconds. Must be >= MIN_PROBE_TIMEOUT_SECONDS.

    Returns:
        (connect_timeout_seconds, statement_timeout_ms)

    Raises:
        ValueError: If ``timeout`` is too small to hold both phases.
    """
    if timeout < MIN_PROBE_TIMEOUT_SECONDS:
        raise ValueError(
            f"timeout must be at least {MIN_PROBE_TIMEOUT_SECONDS} seconds, "
            f"got: {timeout}"
        )
    connect_timeout = max(_MIN_CONNECT_TIMEOUT, math.floor(timeout * 2 / 3))
    statement_timeout_ms = int((timeout - connect_timeout) * 1000)
    return connect_timeout, statement_timeout_ms


class PsycopgSession:
    """An autocommit psycopg connection implementing DatabaseSession."""

    def __init__(self, connection: Connection[Any], target: str) -> None:
        self._connection = connection
        self._target = target

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[tuple[Any, ...]]:
        """Execute a statement and return all rows.

        Raises:
            QueryFailedError: On any driver error.
        """
        try:
            with self._connection.cursor() as cur:
                cur.execute(sql, params or None)
                if cur.description is None:
                    return []
                return list(cur.fetchall())
        except psycopg.Error as e:
            raise QueryFailedError(
                f"statement failed: {e}", target=self._target, original_error=e
            ) from e

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()

    def __enter__(self) -> PsycopgSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PsycopgConnector:
    """psycopg adapter for reaching database nodes.

    Sessions run in autocommit mode. The timeout passed to connect() is
    divided by split_timeout(): ``connect_timeout`` bounds establishing the
    connection and ``statement_timeout`` bounds each statement on the
    server. A peer that stops answering is dropped on the client side by
    ``tcp_user_timeout`` and TCP keepalives set to the statement budget.

    A multi-host target gets ``connect_timeout`` per host, so such targets
    can exceed the budget by one connect timeout for every extra host.

    Example:
        >>> connector = PsycopgConnector()
        >>> session = connector.connect("host=db1 dbname=postgres", timeout=3.0)
        >>> session.execute("SELECT 1")
        [(1,)]
    """

    def __init__(self, application_name: str = "pgkeeper") -> None:
        """Initialize the connector.

        Args:
            application_name: Reported to the server for each session.
        """
        self._application_name = application_name

    def connect(self, target: str, timeout: float) -> PsycopgSession:
        """Open an autocommit session to ``target``.

        Args:
            target: libpq connection string or URI.
            timeout: Budget in seconds for connecting plus one statement.

        Returns:
            An open PsycopgSession.

        Raises:
            NodeUnreachableError: If the connection cannot be established.
            ValueError: If ``timeout`` is below MIN_PROBE_TIMEOUT_SECONDS.
        """
        connect_timeout, statement_timeout_ms = split_timeout(timeout)
        try:
            connection = psycopg.connect(
                target,
                autocommit=True,
                connect_timeout=connect_timeout,
                application_name=self._application_name,
                options=f"-c statement_timeout={statement_timeout_ms}",
                tcp_user_timeout=statement_timeout_ms,
                keepalives=1,
                keepalives_idle=1,
                keepalives_interval=1,
                keepalives_count=max(1, statement_timeout_ms // 1000),
            )
        except psycopg.Error as e:
            raise NodeUnreachableError(
                f"could not connect: {e}", target=target, original_error=e
            ) from e
        return PsycopgSession(connection, target)


# Runtime protocol check
assert isinstance(
    PsycopgConnector.__new__(PsycopgConnector), DatabaseConnectorPort
), "PsycopgConnector must implement DatabaseConnectorPort"
