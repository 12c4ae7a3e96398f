"""Factory functions wiring pgkeeper use cases to their production adapters.

Handles optional dependency imports gracefully.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from pgkeeper.adapters.logging_adapter import StdlibLoggingAdapter
from pgkeeper.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pgkeeper.adapters.pidfile import PidfileCoordinatorNotifier, PidfileRegistration
from pgkeeper.adapters.sql_registry_store import SQLRegistryStore
from pgkeeper.adapters.sql_server_control import (
    SQLReplicationConfigReader,
    SQLServerControl,
)
from pgkeeper.adapters.subprocess_command_runner import SubprocessCommandRunner
from pgkeeper.usecases.cluster_admin import ClusterAdmin
from pgkeeper.usecases.coordinator import KeeperCoordinator
from pgkeeper.usecases.heartbeat_prober import HeartbeatProber
from pgkeeper.usecases.promotion_controller import PromotionController
from pgkeeper.usecases.signal_relay import SignalRelay
from pgkeeper.usecases.state_machine import (
    CoordinatorStateMachine,
    determine_initial_status,
)
from pgkeeper.usecases.topology_registry import TopologyRegistry

if TYPE_CHECKING:
    from pgkeeper.adapters.ports import DatabaseConnectorPort, EventEmitterPort
    from pgkeeper.domain.settings import KeeperSettings


class PsycopgNotInstalledError(ImportError):
    """Raised when psycopg is required but not installed.

    Install with: pip install 'psycopg[binary]'
    """

    def __init__(self) -> None:
        super().__init__(
            "psycopg is not installed. Install with: pip install 'psycopg[binary]'"
        )


class PrometheusNotInstalledError(ImportError):
    """Raised when metrics are enabled but prometheus-client is not installed.

    Install with: pip install pgkeeper-py[metrics]
    """

    def __init__(self) -> None:
        super().__init__(
            "prometheus-client is not installed. "
            "Install with: pip install pgkeeper-py[metrics]"
        )


def create_connector() -> DatabaseConnectorPort:
    """Create the psycopg-backed DatabaseConnectorPort.

    Raises:
        PsycopgNotInstalledError: If psycopg is not installed.
    """
    try:
        from pgkeeper.adapters.psycopg_connector import PsycopgConnector
    except ImportError as exc:
        raise PsycopgNotInstalledError() from exc
    return PsycopgConnector()


def create_metrics(settings: KeeperSettings) -> MetricsPort:
    """Create the MetricsPort selected by ``settings``.

    Raises:
        PrometheusNotInstalledError: If metrics are enabled but
            prometheus-client is not installed.
    """
    if not settings.metrics_enabled:
        return NoOpMetricsAdapter()
    try:
        from pgkeeper.adapters.prometheus_metrics import PrometheusMetricsAdapter

        return PrometheusMetricsAdapter(prefix=settings.metrics_prefix)
    except ImportError as exc:
        raise PrometheusNotInstalledError() from exc


def create_registry(
    settings: KeeperSettings,
    connector: DatabaseConnectorPort,
    registry_target: str,
    prober: HeartbeatProber | None = None,
    with_notifier: bool = True,
    ensure_schema: bool = False,
) -> TopologyRegistry:
    """Create a TopologyRegistry stored on ``registry_target``.

    The registry table and the synchronous standby list are both read from
    ``registry_target``, which must be the primary for mutations to succeed.

    Args:
        settings: Settings providing node_name, timeouts and the pidfile.
        connector: Transport for the store and config reader.
        registry_target: Connection string of the server holding the table.
        prober: Prober used for admission checks. Created if omitted.
        with_notifier: Wake the coordinator named in the pidfile after mutations.
        ensure_schema: Create the registry table if it does not exist.
    """
    logger = StdlibLoggingAdapter("pgkeeper.registry")
    timeout = settings.probe_timeout_seconds
    notifier = (
        PidfileCoordinatorNotifier(PidfileRegistration(settings.pidfile_path))
        if with_notifier
        else None
    )
    store = SQLRegistryStore(connector, registry_target, timeout=timeout)
    if ensure_schema:
        store.ensure_schema()
    return TopologyRegistry(
        store=store,
        prober=prober or HeartbeatProber(connector, logger=logger),
        replication_config_reader=SQLReplicationConfigReader(
            connector, registry_target, timeout=timeout
        ),
        notifier=notifier,
        node_name=settings.node_name,
        probe_timeout=timeout,
        logger=logger,
    )


def create_coordinator(
    settings: KeeperSettings,
    relay: SignalRelay | None = None,
    settings_loader: Callable[[], KeeperSettings] | None = None,
    event_emitter: EventEmitterPort | None = None,
    on_settings_reloaded: Callable[[KeeperSettings], None] | None = None,
) -> KeeperCoordinator:
    """Create a fully wired KeeperCoordinator for ``settings``.

    The starting role comes from the local server's recovery state. The
    registry is read from the local server in both roles: a standby sees the
    replicated table, and after a promotion the same server accepts writes.

    Raises:
        PsycopgNotInstalledError: If psycopg is not installed.
        PgKeeperConfigError: If the local server is a standby and no
            primary_connection_target is configured.
        DatabaseError: If the local server cannot be reached.
    """
    connector = create_connector()
    metrics = create_metrics(settings)
    logger = StdlibLoggingAdapter("pgkeeper.coordinator")
    relay = relay or SignalRelay()
    timeout = settings.probe_timeout_seconds

    server_control = SQLServerControl(
        connector, settings.local_connection_target, timeout=timeout
    )
    status = determine_initial_status(server_control, settings)

    prober = HeartbeatProber(connector, logger=logger, metrics=metrics)
    registry = create_registry(
        settings,
        connector,
        settings.local_connection_target,
        prober=prober,
        with_notifier=False,
    )
    promotion_controller = PromotionController(
        server_control=server_control,
        command_runner=SubprocessCommandRunner(),
        registry=registry,
        node_name=settings.node_name,
        timeout=settings.promotion_timeout_seconds,
        post_promotion_command=settings.post_promotion_command,
        logger=logger,
        metrics=metrics,
    )
    state_machine = CoordinatorStateMachine(
        status=status,
        settings=settings,
        prober=prober,
        promotion_controller=promotion_controller,
        logger=logger,
        metrics=metrics,
        event_emitter=event_emitter,
        stop_requested=lambda: relay.terminate_requested,
    )
    return KeeperCoordinator(
        settings=settings,
        state_machine=state_machine,
        registry=registry,
        relay=relay,
        registration=PidfileRegistration(settings.pidfile_path),
        settings_loader=settings_loader,
        logger=logger,
        on_settings_reloaded=on_settings_reloaded,
    )


def create_cluster_admin(
    settings: KeeperSettings, registry_target: str | None = None
) -> ClusterAdmin:
    """Create a ClusterAdmin whose registry lives on ``registry_target``.

    Args:
        settings: Settings providing identity, timeouts and the pidfile.
        registry_target: Server holding the registry. Defaults to the
            local server. The registry table is created there if missing.

    Raises:
        PsycopgNotInstalledError: If psycopg is not installed.
    """
    connector = create_connector()
    logger = StdlibLoggingAdapter("pgkeeper.admin")
    prober = HeartbeatProber(connector, logger=logger)
    registry = create_registry(
        settings,
        connector,
        registry_target or settings.local_connection_target,
        prober=prober,
        ensure_schema=True,
    )
    return ClusterAdmin(
        registry=registry,
        prober=prober,
        notifier=PidfileCoordinatorNotifier(PidfileRegistration(settings.pidfile_path)),
        probe_timeout=settings.probe_timeout_seconds,
    )
