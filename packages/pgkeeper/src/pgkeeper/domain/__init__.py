"""Domain layer: Entities with zero external dependencies."""

from pgkeeper.domain.settings import KeeperSettings
from pgkeeper.domain.exceptions import PgKeeperConfigError, PgKeeperError
from pgkeeper.domain.node import Node, NodeRole, ReplicationConfig, SyncState
from pgkeeper.domain.status import (
    CoordinatorRole,
    CoordinatorStatus,
    ProbeOutcome,
    Substate,
)

__all__ = [
    "KeeperSettings",
    "PgKeeperConfigError",
    "PgKeeperError",
    "Node",
    "NodeRole",
    "ReplicationConfig",
    "SyncState",
    "CoordinatorRole",
    "CoordinatorStatus",
    "ProbeOutcome",
    "Substate",
]
