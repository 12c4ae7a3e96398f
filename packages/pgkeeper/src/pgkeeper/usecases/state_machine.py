"""CoordinatorStateMachine use case: role and substate transitions.

Standby branch:
    READY --alive--> CONNECTED
    READY/CONNECTED --failure--> counter += 1
    counter reaches failure_threshold --> ALONE, promotion invoked once
    ALONE --promotion confirmed--> MASTER/READY (same process)

Master branch:
    any --a synchronous standby alive--> CONNECTED
    any --no synchronous standby alive--> ASYNC
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable

from pgkeeper.domain.events import CoordinatorEvent, CoordinatorEventType
from pgkeeper.domain.exceptions import CoordinatorInvariantError
from pgkeeper.domain.node import SyncState
from pgkeeper.domain.status import (
    CoordinatorRole,
    CoordinatorStatus,
    ProbeOutcome,
    Substate,
)

if TYPE_CHECKING:
    from pgkeeper.adapters.metrics_port import MetricsPort
    from pgkeeper.adapters.ports import (
        EventEmitterPort,
        LoggingPort,
        ServerControlPort,
    )
    from pgkeeper.domain.node import Node
    from pgkeeper.domain.settings import KeeperSettings
    from pgkeeper.usecases.heartbeat_prober import HeartbeatProber
    from pgkeeper.usecases.promotion_controller import PromotionController

STANDBY_STATES = frozenset(
    (CoordinatorRole.STANDBY, substate)
    for substate in (Substate.READY, Substate.CONNECTED, Substate.ALONE)
)
MASTER_STATES = frozenset(
    (CoordinatorRole.MASTER, substate)
    for substate in (Substate.READY, Substate.CONNECTED, Substate.ASYNC)
)


def determine_initial_status(
    server_control: ServerControlPort, settings: KeeperSettings
) -> CoordinatorStatus:
    """Build the starting status from the local server's recovery state.

    Raises:
        PgKeeperConfigError: If the server is a standby and no
            primary_connection_target is configured.
        DatabaseError: If the local server cannot be reached.
    """
    if server_control.is_in_recovery():
        return CoordinatorStatus(
            role=CoordinatorRole.STANDBY, target=settings.require_primary_target()
        )
    return CoordinatorStatus(role=CoordinatorRole.MASTER)


class CoordinatorStateMachine:
    """Holds CoordinatorStatus and decides every transition.

    Inputs are heartbeat ticks, individual probe results and registry
    reloads. Each input is dispatched on the (role, substate) pair; a pair
    outside the known table raises CoordinatorInvariantError.

    Dependencies:
        - HeartbeatProber: liveness of the upstream or of sync standbys
        - PromotionController: invoked once per failure episode
        - LoggingPort, MetricsPort, EventEmitterPort (optional)

    Thread safety:
        Not thread-safe. Driven only by the coordinator loop.
    """

    def __init__(
        self,
        status: CoordinatorStatus,
        settings: KeeperSettings,
        prober: HeartbeatProber,
        promotion_controller: PromotionController,
        logger: LoggingPort | None = None,
        metrics: MetricsPort | None = None,
        event_emitter: EventEmitterPort | None = None,
        stop_requested: Callable[[], bool] | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            status: Starting status, usually from determine_initial_status().
            settings: Current tunables (threshold, probe timeout).
            prober: Prober used on heartbeat ticks.
            promotion_controller: Controller invoked when the threshold is reached.
            logger: Optional port for diagnostics.
            metrics: Optional port for role/substate/counter gauges.
            event_emitter: Optional port receiving CoordinatorEvents.
            stop_requested: Checked between synchronous standby probes so a
                stop request waits for at most one probe.
        """
        self._status = status
        self._settings = settings
        self._prober = prober
        self._promotion_controller = promotion_controller
        self._logger = logger
        self._metrics = metrics
        self._event_emitter = event_emitter
        self._stop_requested = stop_requested
        self._sync_standby_targets: tuple[str, ...] = ()
        self._publish()

    @property
    def status(self) -> CoordinatorStatus:
        """Return the live status object."""
        return self._status

    @property
    def settings(self) -> KeeperSettings:
        """Return the settings currently in force."""
        return self._settings

    @property
    def sync_standby_targets(self) -> tuple[str, ...]:
        """Return the synchronous standby targets a master watches."""
        return self._sync_standby_targets

    def apply_settings(self, settings: KeeperSettings) -> None:
        """Adopt reloaded tunables, including the promotion controller's."""
        self._settings = settings
        self._promotion_controller.timeout = settings.promotion_timeout_seconds
        self._promotion_controller.post_promotion_command = (
            settings.post_promotion_command
        )

    # -- inputs ---------------------------------------------------------

    def heartbeat(self) -> None:
        """Run one heartbeat tick for the current role."""
        key = self._key()
        if key in MASTER_STATES:
            self._master_heartbeat()
        elif key == (CoordinatorRole.STANDBY, Substate.ALONE):
            return
        elif key in STANDBY_STATES:
            if self._status.target is None:
                self._log("warning", "No upstream target known; skipping heartbeat")
                return
            outcome = self._prober.probe(
                self._status.target, self._settings.probe_timeout_seconds
            )
            self.on_probe_result(outcome)
        else:
            self._invariant_violation()

    def on_probe_result(self, outcome: ProbeOutcome) -> None:
        """Feed one upstream probe result to the standby branch."""
        handlers: dict[tuple[CoordinatorRole, Substate], Callable[[ProbeOutcome], None]] = {
            (CoordinatorRole.STANDBY, Substate.READY): self._standby_probe,
            (CoordinatorRole.STANDBY, Substate.CONNECTED): self._standby_probe,
            (CoordinatorRole.STANDBY, Substate.ALONE): self._alone_probe,
        }
        key = self._key()
        if key in MASTER_STATES:
            self._log("warning", "Ignoring upstream probe result while master")
            return
        handler = handlers.get(key)
        if handler is None:
            self._invariant_violation()
        handler(outcome)

    def reload_registry(self, nodes: Iterable[Node]) -> None:
        """Rebuild the target cache from a registry snapshot.

        Standby: watch the primary row's target (unless it is this node).
        Master: watch the synchronous standby rows and re-evaluate health.
        """
        nodes = tuple(nodes)
        self._sync_standby_targets = tuple(
            node.connection_target
            for node in nodes
            if node.sync_state == SyncState.SYNC
            and not node.is_primary
            and not node.is_self
        )
        key = self._key()
        if key in MASTER_STATES:
            self._master_heartbeat()
        elif key == (CoordinatorRole.STANDBY, Substate.ALONE):
            self._log("info", "Registry reloaded while promotion is pending; keeping target")
        elif key in STANDBY_STATES:
            primary = next((node for node in nodes if node.is_primary), None)
            if primary is not None and not primary.is_self:
                self._retarget(primary.connection_target)
        else:
            self._invariant_violation()

    def on_sync_standby_health(self, any_alive: bool) -> None:
        """Classify the master's replication health."""
        key = self._key()
        if key not in MASTER_STATES:
            self._invariant_violation()
        if any_alive:
            if self._status.substate != Substate.CONNECTED:
                self._log("info", "Synchronous standby reachable")
                self._emit(CoordinatorEventType.CONNECTED)
            self._status.substate = Substate.CONNECTED
        else:
            if self._status.substate != Substate.ASYNC:
                self._log(
                    "warning",
                    "No synchronous standby reachable; running with degraded durability",
                )
                self._emit(CoordinatorEventType.DEGRADED_TO_ASYNC)
            self._status.substate = Substate.ASYNC
        self._publish()

    # -- standby branch -------------------------------------------------

    def _standby_probe(self, outcome: ProbeOutcome) -> None:
        status = self._status
        if not outcome.is_failure:
            if status.substate != Substate.CONNECTED:
                self._log("info", "Upstream primary is alive")
                self._emit(CoordinatorEventType.CONNECTED)
            status.substate = Substate.CONNECTED
            status.reset_failures()
            self._publish()
            return

        status.consecutive_failures += 1
        threshold = self._settings.failure_threshold
        self._log(
            "warning",
            f"Upstream probe failed ({outcome.value}): "
            f"{status.consecutive_failures}/{threshold}",
        )
        self._emit(CoordinatorEventType.FAILURE_COUNTED, outcome.value)
        self._publish()
        if status.consecutive_failures >= threshold:
            self._begin_promotion()

    def _alone_probe(self, outcome: ProbeOutcome) -> None:
        # Promotion was already attempted for this episode.
        return

    def _retarget(self, target: str) -> None:
        status = self._status
        if target == status.target:
            return
        self._log("info", "Upstream target changed; failure counter reset")
        status.target = target
        status.reset_failures()
        status.substate = Substate.READY
        self._emit(CoordinatorEventType.TARGET_CHANGED)
        self._publish()

    def _begin_promotion(self) -> None:
        status = self._status
        status.substate = Substate.ALONE
        if status.promotion_attempted:
            return
        status.promotion_attempted = True
        self._log("warning", "Failure threshold reached; promoting local server")
        self._emit(CoordinatorEventType.PROMOTION_STARTED)
        self._publish()

        result = self._promotion_controller.promote()
        if not result.success:
            self._emit(CoordinatorEventType.PROMOTION_FAILED, result.error)
            return

        status.role = CoordinatorRole.MASTER
        status.substate = Substate.READY
        status.target = None
        status.reset_failures()
        self._log("info", "Promotion complete; now acting as master")
        self._emit(CoordinatorEventType.PROMOTED)
        self._publish()

    # -- master branch --------------------------------------------------

    def _master_heartbeat(self) -> None:
        timeout = self._settings.probe_timeout_seconds
        any_alive = False
        for target in self._sync_standby_targets:
            if self._stop_requested is not None and self._stop_requested():
                # Health is left unclassified for this tick.
                self._log("info", "Stop requested; synchronous standby sweep cut short")
                return
            if self._prober.probe(target, timeout) is ProbeOutcome.ALIVE:
                any_alive = True
                break
        self.on_sync_standby_health(any_alive)

    # -- helpers --------------------------------------------------------

    def _key(self) -> tuple[CoordinatorRole, Substate]:
        return (self._status.role, self._status.substate)

    def _invariant_violation(self) -> None:
        raise CoordinatorInvariantError(
            f"unrecognized coordinator status: role={self._status.role!r}, "
            f"substate={self._status.substate!r}"
        )

    def _publish(self) -> None:
        if self._metrics is None:
            return
        self._metrics.set_coordinator_role(self._status.role == CoordinatorRole.MASTER)
        self._metrics.set_substate(self._status.substate.value)
        self._metrics.set_consecutive_failures(self._status.consecutive_failures)

    def _emit(self, event_type: CoordinatorEventType, reason: str | None = None) -> None:
        if self._event_emitter is not None:
            self._event_emitter.emit(CoordinatorEvent(event_type=event_type, reason=reason))

    def _log(self, level: str, message: str) -> None:
        if self._logger is not None:
            getattr(self._logger, level)(message)
