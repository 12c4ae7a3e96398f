"""Fake database connector for testing.

Provides test doubles for DatabaseConnectorPort and DatabaseSession that
answer statements from per-target scripts without a real server.
"""

from __future__ import annotations

from typing import Any, Sequence

from pgkeeper.domain.exceptions import NodeUnreachableError, QueryFailedError


class FakeDatabaseSession:
    """Fake implementation of DatabaseSession.

    Returns the rows configured on the owning connector for the session's
    target, or raises the configured query failure.
    """

    def __init__(self, connector: FakeDatabaseConnector, target: str) -> None:
        self._connector = connector
        self.target = target
        self.closed = False
        self.statements: list[tuple[str, tuple[Any, ...]]] = []

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[tuple[Any, ...]]:
        """Record the statement and return the scripted rows."""
        self.statements.append((sql, tuple(params)))
        self._connector.executed.append((self.target, sql))
        if self.target in self._connector.query_failures:
            raise QueryFailedError(
                "scripted query failure", target=self.target
            )
        return list(self._connector.rows.get(self.target, [(1,)]))

    def close(self) -> None:
        """Mark the session closed."""
        self.closed = True


class FakeDatabaseConnector:
    """Fake implementation of DatabaseConnectorPort for testing.

    By default every target is reachable and every statement returns
    ``[(1,)]``. Tests mark targets unreachable or failing, or script rows.

    Example:
        >>> connector = FakeDatabaseConnector()
        >>> connector.set_unreachable("host=b")
        >>> connector.connect("host=a", timeout=1.0).execute("SELECT 1")
        [(1,)]
    """

    def __init__(self) -> None:
        """Initialize with every target healthy."""
        self.unreachable: set[str] = set()
        self.query_failures: set[str] = set()
        self.rows: dict[str, list[tuple[Any, ...]]] = {}
        self.sessions: list[FakeDatabaseSession] = []
        self.connect_calls: list[tuple[str, float]] = []
        self.executed: list[tuple[str, str]] = []

    def set_unreachable(self, target: str, unreachable: bool = True) -> None:
        """Make connect() to ``target`` fail (or succeed again)."""
        if unreachable:
            self.unreachable.add(target)
        else:
            self.unreachable.discard(target)

    def set_query_failure(self, target: str, failing: bool = True) -> None:
        """Make statements on ``target`` fail (or succeed again)."""
        if failing:
            self.query_failures.add(target)
        else:
            self.query_failures.discard(target)

    def set_rows(self, target: str, rows: list[tuple[Any, ...]]) -> None:
        """Script the rows every statement on ``target`` returns."""
        self.rows[target] = rows

    def set_healthy(self, target: str) -> None:
        """Clear every scripted failure for ``target``."""
        self.unreachable.discard(target)
        self.query_failures.discard(target)
        self.rows.pop(target, None)

    def connect(self, target: str, timeout: float) -> FakeDatabaseSession:
        """Open a fake session or raise NodeUnreachableError."""
        self.connect_calls.append((target, timeout))
        if target in self.unreachable:
            raise NodeUnreachableError("scripted connection failure", target=target)
        session = FakeDatabaseSession(self, target)
        self.sessions.append(session)
        return session
