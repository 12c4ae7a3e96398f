"""Keeper settings domain entity."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from pgkeeper.domain.exceptions import PgKeeperConfigError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# libpq waits at least 2 seconds for a connection; one more is left for the
# liveness statement.
MIN_PROBE_TIMEOUT_SECONDS = 3

# Tunables that a configuration reload may change on a running coordinator.
# Identity, connection targets and process-level resources are fixed at startup.
HOT_RELOADABLE_FIELDS = (
    "heartbeat_interval_seconds",
    "failure_threshold",
    "probe_timeout_seconds",
    "promotion_timeout_seconds",
    "post_promotion_command",
    "log_level",
)


@dataclass(frozen=True)
class KeeperSettings:
    """pgkeeper coordinator configuration.

    Domain entity with zero external dependencies. Validated on construction;
    any violation raises PgKeeperConfigError.

    Attributes:
        node_name: This coordinator's identity in the topology registry. Mandatory.
        primary_connection_target: Initial upstream target for standby-mode
            coordinators. Required when the local server is in recovery.
        local_connection_target: Connection string of the local server.
        heartbeat_interval_seconds: Seconds between probes. Must be >= 1.
        failure_threshold: Consecutive failures before promotion. Must be >= 1.
        probe_timeout_seconds: Upper bound on a single probe. Must be >= 3.
        promotion_timeout_seconds: Upper bound on promotion confirmation. Must be > 0.
        post_promotion_command: Shell command run after a confirmed promotion.
        pidfile_path: Where the coordinator publishes its process id.
        log_level: Logging level name.
        metrics_enabled: Whether Prometheus metrics are collected.
        metrics_prefix: Prefix for metric names.
        metrics_port: Port for the Prometheus exporter, or None for no exporter.
    """

    node_name: str
    primary_connection_target: str | None = None
    local_connection_target: str = "dbname=postgres"
    heartbeat_interval_seconds: int = 5
    failure_threshold: int = 1
    probe_timeout_seconds: float = 3.0
    promotion_timeout_seconds: float = 60.0
    post_promotion_command: str | None = None
    pidfile_path: str = "/tmp/pgkeeper.pid"
    log_level: str = "INFO"
    metrics_enabled: bool = False
    metrics_prefix: str = "pgkeeper"
    metrics_port: int | None = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        self._validate_node_name()
        self._validate_positive_int("heartbeat_interval_seconds")
        self._validate_positive_int("failure_threshold")
        self._validate_positive_float("probe_timeout_seconds")
        self._validate_probe_timeout()
        self._validate_positive_float("promotion_timeout_seconds")
        self._validate_log_level()
        self._validate_metrics_port()

    def _validate_node_name(self) -> None:
        """Validate that node_name is present and not whitespace-only."""
        if not self.node_name or not str(self.node_name).strip():
            raise PgKeeperConfigError("node_name is mandatory and cannot be empty")

    def _validate_positive_int(self, field_name: str) -> None:
        """Validate an integer tunable is >= 1."""
        value = getattr(self, field_name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise PgKeeperConfigError(
                f"{field_name} must be an integer, got: {value!r}"
            )
        if value < 1:
            raise PgKeeperConfigError(f"{field_name} must be >= 1, got: {value}")

    def _validate_positive_float(self, field_name: str) -> None:
        """Validate a duration tunable is a positive number."""
        value = getattr(self, field_name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PgKeeperConfigError(
                f"{field_name} must be a number, got: {value!r}"
            )
        if value <= 0:
            raise PgKeeperConfigError(f"{field_name} must be positive, got: {value}")

    def _validate_probe_timeout(self) -> None:
        """Validate probe_timeout_seconds leaves room to connect and query."""
        if self.probe_timeout_seconds < MIN_PROBE_TIMEOUT_SECONDS:
            raise PgKeeperConfigError(
                f"probe_timeout_seconds must be >= {MIN_PROBE_TIMEOUT_SECONDS}, "
                f"got: {self.probe_timeout_seconds}"
            )

    def _validate_log_level(self) -> None:
        """Validate log_level is a known level name."""
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise PgKeeperConfigError(
                f"log_level must be one of {_LOG_LEVELS}, got: {self.log_level!r}"
            )

    def _validate_metrics_port(self) -> None:
        """Validate metrics_port is a TCP port when set."""
        if self.metrics_port is None:
            return
        if isinstance(self.metrics_port, bool) or not isinstance(
            self.metrics_port, int
        ):
            raise PgKeeperConfigError(
                f"metrics_port must be an integer, got: {self.metrics_port!r}"
            )
        if not 1 <= self.metrics_port <= 65535:
            raise PgKeeperConfigError(
                f"metrics_port must be between 1 and 65535, got: {self.metrics_port}"
            )

    def require_primary_target(self) -> str:
        """Return primary_connection_target, which standby mode requires.

        Raises:
            PgKeeperConfigError: If no primary target is configured.
        """
        if not self.primary_connection_target:
            raise PgKeeperConfigError(
                "primary_connection_target is required when the local server "
                "is a standby"
            )
        return self.primary_connection_target

    def with_reloaded(self, reloaded: KeeperSettings) -> KeeperSettings:
        """Apply the hot-reloadable fields of freshly loaded settings.

        Args:
            reloaded: Settings parsed from the configuration source again.

        Returns:
            A copy of these settings with only HOT_RELOADABLE_FIELDS replaced.
        """
        changes = {name: getattr(reloaded, name) for name in HOT_RELOADABLE_FIELDS}
        return dataclasses.replace(self, **changes)

    def fixed_field_changes(self, reloaded: KeeperSettings) -> list[str]:
        """List non-reloadable fields whose value differs in ``reloaded``."""
        return [
            f.name
            for f in dataclasses.fields(self)
            if f.name not in HOT_RELOADABLE_FIELDS
            and getattr(self, f.name) != getattr(reloaded, f.name)
        ]
