"""Domain value objects for cluster topology.

This module defines the registry row (Node) and the synchronous-standby
configuration derived from the primary (ReplicationConfig). Both are frozen
dataclasses with zero external dependencies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pgkeeper.domain.exceptions import PgKeeperConfigError

# FIRST 2 (a, b) / ANY 1 (a, b) / 2 (a, b)
_SYNC_NAMES_WITH_COUNT = re.compile(
    r"^(?:(?P<method>FIRST|ANY)\s+)?(?P<num>\d+)\s*\((?P<names>.*)\)$",
    re.IGNORECASE | re.DOTALL,
)


class NodeRole(Enum):
    """Role of a node as recorded in the topology registry.

    Attributes:
        PRIMARY: The single node accepting writes.
        STANDBY: A node replicating from the primary.
    """

    PRIMARY = "primary"
    STANDBY = "standby"


class SyncState(Enum):
    """Replication mode of a standby as seen by the primary.

    Attributes:
        SYNC: Listed in the primary's synchronous standby names.
        ASYNC: Not listed; replicates asynchronously.
        UNCONFIGURED: Not classified (always the case for the primary row).
    """

    SYNC = "sync"
    ASYNC = "async"
    UNCONFIGURED = "unconfigured"


@dataclass(frozen=True)
class Node:
    """A row of the topology registry.

    Value object describing one cluster member. Instances are immutable;
    registry mutations produce new instances.

    Attributes:
        name: Unique identifier of the node. Must be non-empty.
        connection_target: Opaque connection string used to reach the node.
        role: PRIMARY or STANDBY.
        sync_state: SYNC, ASYNC or UNCONFIGURED.
        sequence_number: Monotonic insertion order, never reused.
        is_self: True for the row representing this coordinator's own server.
    """

    name: str
    connection_target: str
    role: NodeRole
    sync_state: SyncState
    sequence_number: int
    is_self: bool = False

    def __post_init__(self) -> None:
        """Validate node after initialization."""
        self._validate_name()
        self._validate_connection_target()
        self._validate_sequence_number()

    def _validate_name(self) -> None:
        """Validate name is non-empty and non-whitespace."""
        if not self.name or not self.name.strip():
            raise PgKeeperConfigError("node name cannot be empty or whitespace-only")

    def _validate_connection_target(self) -> None:
        """Validate connection_target is non-empty."""
        if not self.connection_target or not self.connection_target.strip():
            raise PgKeeperConfigError(
                f"connection_target of node {self.name!r} cannot be empty"
            )

    def _validate_sequence_number(self) -> None:
        """Validate sequence_number is positive."""
        if self.sequence_number < 1:
            raise PgKeeperConfigError(
                f"sequence_number must be >= 1, got: {self.sequence_number}"
            )

    @property
    def is_primary(self) -> bool:
        """Return True if this row holds the primary role."""
        return self.role == NodeRole.PRIMARY


@dataclass(frozen=True)
class ReplicationConfig:
    """Synchronous-standby configuration read from the primary.

    Derived from the primary's ``synchronous_standby_names`` setting and
    never stored. Standby names are matched case-insensitively, as the
    server itself does.

    Attributes:
        members: Ordered standby names the primary treats as synchronous.
        num_sync: Number of synchronous standbys the primary waits for.
        method: "priority" (FIRST or legacy list) or "quorum" (ANY).
        wildcard: True if an unquoted ``*`` was listed. A quoted ``"*"`` is
            an ordinary standby name.
    """

    members: tuple[str, ...] = ()
    num_sync: int = 0
    method: Literal["priority", "quorum"] = "priority"
    wildcard: bool = False

    @property
    def is_wildcard(self) -> bool:
        """Return True if every standby name is considered synchronous."""
        return self.wildcard

    def is_synchronous(self, name: str) -> bool:
        """Check if a standby name is configured as synchronous.

        Args:
            name: Registry name of the standby.

        Returns:
            True if the name is listed (or the list is the wildcard).
        """
        if self.is_wildcard:
            return True
        folded = name.casefold()
        return any(member.casefold() == folded for member in self.members)

    @classmethod
    def parse(cls, value: str | None) -> ReplicationConfig:
        """Parse a ``synchronous_standby_names`` value.

        Accepts the empty string, a plain comma-separated list, and the
        ``N (...)``, ``FIRST N (...)`` and ``ANY N (...)`` forms.

        Args:
            value: Raw setting value as reported by the server.

        Returns:
            ReplicationConfig with the ordered member names.

        Raises:
            PgKeeperConfigError: If the value cannot be parsed.
        """
        if value is None or not value.strip():
            return cls()

        text = value.strip()
        match = _SYNC_NAMES_WITH_COUNT.match(text)
        if match:
            num_sync = int(match.group("num"))
            method_word = (match.group("method") or "FIRST").upper()
            names, wildcard = _split_names(match.group("names"))
            method: Literal["priority", "quorum"] = (
                "quorum" if method_word == "ANY" else "priority"
            )
            return cls(
                members=names, num_sync=num_sync, method=method, wildcard=wildcard
            )

        if "(" in text or ")" in text:
            raise PgKeeperConfigError(
                f"cannot parse synchronous_standby_names: {value!r}"
            )

        names, wildcard = _split_names(text)
        return cls(members=names, num_sync=1 if names else 0, wildcard=wildcard)


def _split_names(text: str) -> tuple[tuple[str, ...], bool]:
    """Split a comma-separated standby list, unquoting double-quoted names.

    Returns:
        The names in order, and whether an unquoted ``*`` was among them.
    """
    names: list[str] = []
    wildcard = False
    for raw in text.split(","):
        name = raw.strip()
        if not name:
            raise PgKeeperConfigError(
                f"empty standby name in synchronous_standby_names: {text!r}"
            )
        if len(name) >= 2 and name[0] == name[-1] == '"':
            name = name[1:-1].replace('""', '"')
        elif name == "*":
            wildcard = True
        names.append(name)
    return tuple(names), wildcard
