"""KeeperCoordinator use case: the single cooperative main loop."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Callable

from pgkeeper.adapters.ports import RealTimeProvider
from pgkeeper.domain.exceptions import DatabaseError, PgKeeperConfigError
from pgkeeper.usecases.signal_relay import RelayFlag

if TYPE_CHECKING:
    from pgkeeper.adapters.ports import (
        CoordinatorRegistrationPort,
        LoggingPort,
        TimeProvider,
    )
    from pgkeeper.domain.settings import KeeperSettings
    from pgkeeper.usecases.signal_relay import SignalRelay
    from pgkeeper.usecases.state_machine import CoordinatorStateMachine
    from pgkeeper.usecases.topology_registry import TopologyRegistry


class KeeperCoordinator:
    """Drives the state machine from relay flags and the heartbeat clock.

    One iteration of run_once():
        a. terminate requested: stop
        b. config reload requested: apply hot-reloadable tunables
        c. registry reload requested: rebuild the target cache
        d. heartbeat deadline passed: probe and feed the state machine;
           a role change on this tick schedules a registry reload
        e. block on the relay until the next deadline or a notification

    Flags are drained in that fixed priority order. Probes are bounded by
    their own timeout, so a stop request waits at most one probe.

    The same process keeps running across a promotion; only the state
    machine's role changes.
    """

    def __init__(
        self,
        settings: KeeperSettings,
        state_machine: CoordinatorStateMachine,
        registry: TopologyRegistry,
        relay: SignalRelay,
        registration: CoordinatorRegistrationPort,
        settings_loader: Callable[[], KeeperSettings] | None = None,
        time_provider: TimeProvider | None = None,
        logger: LoggingPort | None = None,
        on_settings_reloaded: Callable[[KeeperSettings], None] | None = None,
        wait_for_wakeup: Callable[[float], bool] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            settings: Settings in force at startup.
            state_machine: State machine holding the coordinator status.
            registry: Registry read on reload requests.
            relay: Relay carrying flags from signal handlers.
            registration: Where this process publishes its pid.
            settings_loader: Re-reads settings on a config reload request.
            time_provider: Clock for heartbeat deadlines.
            logger: Optional port for diagnostics.
            on_settings_reloaded: Called with the new settings after a reload,
                e.g. to re-apply the log level.
            wait_for_wakeup: Blocks for up to the given seconds or until a
                flag is raised. Defaults to the relay's own wait().
        """
        self._settings = settings
        self._state_machine = state_machine
        self._registry = registry
        self._relay = relay
        self._registration = registration
        self._settings_loader = settings_loader
        self._time = time_provider or RealTimeProvider()
        self._logger = logger
        self._on_settings_reloaded = on_settings_reloaded
        self._wait = wait_for_wakeup or relay.wait
        self._next_heartbeat: float | None = None
        self._started = False

    @property
    def settings(self) -> KeeperSettings:
        """Return the settings currently in force."""
        return self._settings

    def start(self) -> None:
        """Publish this process and schedule the initial registry load."""
        self._registration.publish(os.getpid())
        self._relay.request_registry_reload()
        self._started = True
        self._log("info", f"Coordinator {self._settings.node_name!r} started")

    def shutdown(self) -> None:
        """Withdraw the registration record."""
        self._registration.withdraw()
        self._started = False
        self._log("info", "Coordinator stopped")

    def run(self) -> None:
        """Run iterations until termination is requested.

        Raises:
            CoordinatorInvariantError: If the status reaches an unknown value.
        """
        if not self._started:
            self.start()
        try:
            while self.run_once():
                pass
        finally:
            self.shutdown()

    def run_once(self) -> bool:
        """Run one loop iteration.

        Returns:
            False once termination was requested, True otherwise.
        """
        relay = self._relay
        if relay.terminate_requested:
            return False

        if relay.take(RelayFlag.RELOAD_CONFIG):
            self._reload_config()

        if relay.take(RelayFlag.RELOAD_REGISTRY):
            self._reload_registry()

        if relay.terminate_requested:
            return False

        now = self._time.get_time_seconds()
        if self._next_heartbeat is None or now >= self._next_heartbeat:
            role = self._state_machine.status.role
            self._state_machine.heartbeat()
            if self._state_machine.status.role != role:
                # A new role watches different targets.
                relay.request_registry_reload()
            now = self._time.get_time_seconds()
            self._next_heartbeat = now + self._settings.heartbeat_interval_seconds

        self._wait(self._next_heartbeat - now)
        return not relay.terminate_requested

    def _reload_config(self) -> None:
        if self._settings_loader is None:
            return
        try:
            reloaded = self._settings_loader()
        except PgKeeperConfigError as e:
            self._log("error", f"Configuration reload rejected, keeping previous settings: {e}")
            return

        ignored = self._settings.fixed_field_changes(reloaded)
        if ignored:
            self._log(
                "warning",
                f"Ignoring changes to settings fixed at startup: {', '.join(ignored)}",
            )
        previous_interval = self._settings.heartbeat_interval_seconds
        self._settings = self._settings.with_reloaded(reloaded)
        self._state_machine.apply_settings(self._settings)
        if (
            self._settings.heartbeat_interval_seconds != previous_interval
            and self._next_heartbeat is not None
        ):
            self._next_heartbeat += (
                self._settings.heartbeat_interval_seconds - previous_interval
            )
        if self._on_settings_reloaded is not None:
            self._on_settings_reloaded(self._settings)
        self._log("info", "Configuration reloaded")

    def _reload_registry(self) -> None:
        try:
            nodes = self._registry.list()
        except DatabaseError as e:
            self._log("warning", f"Cannot reload registry: {e}")
            return
        self._state_machine.reload_registry(nodes)

    def _log(self, level: str, message: str) -> None:
        if self._logger is not None:
            getattr(self._logger, level)(message)
