"""PromotionController use case: promote the local server and confirm it."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pgkeeper.adapters.ports import RealTimeProvider
from pgkeeper.domain.exceptions import DatabaseError, PromotionTimeoutError

if TYPE_CHECKING:
    from pgkeeper.adapters.metrics_port import MetricsPort
    from pgkeeper.adapters.ports import (
        CommandRunnerPort,
        LoggingPort,
        ServerControlPort,
        TimeProvider,
    )
    from pgkeeper.usecases.topology_registry import TopologyRegistry


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of one promotion attempt.

    Attributes:
        success: True if the local server confirmed it left recovery.
        error: Why the attempt failed, when it did.
    """

    success: bool
    error: str | None = None


class PromotionController:
    """Executes the promote-and-confirm sequence for the local server.

    Sequence:
        1. Ask the local server to promote.
        2. Poll until it leaves recovery, bounded by ``timeout`` seconds.
        3. On confirmation run the post-promotion command, best effort.
        4. Record the new primary in the registry, best effort.

    A failed or unconfirmed promotion is reported, never retried: a partially
    promoted server is not safe to promote again. Callers are responsible
    for invoking promote() at most once per failure episode.
    """

    def __init__(
        self,
        server_control: ServerControlPort,
        command_runner: CommandRunnerPort,
        registry: TopologyRegistry | None = None,
        node_name: str | None = None,
        timeout: float = 60.0,
        post_promotion_command: str | None = None,
        time_provider: TimeProvider | None = None,
        logger: LoggingPort | None = None,
        metrics: MetricsPort | None = None,
        poll_interval: float = 1.0,
    ) -> None:
        """Initialize the controller.

        Args:
            server_control: Port controlling the local server.
            command_runner: Port running the post-promotion command.
            registry: Optional registry updated after a confirmed promotion.
            node_name: Registry name of the local server.
            timeout: Bound in seconds on promotion confirmation.
            post_promotion_command: Shell command run after confirmation.
            time_provider: Clock used for the confirmation deadline.
            logger: Optional port for diagnostics.
            metrics: Optional port counting promotion attempts.
            poll_interval: Seconds between recovery checks.
        """
        self._server_control = server_control
        self._command_runner = command_runner
        self._registry = registry
        self.node_name = node_name
        self.timeout = timeout
        self.post_promotion_command = post_promotion_command
        self._time = time_provider or RealTimeProvider()
        self._logger = logger
        self._metrics = metrics
        self.poll_interval = poll_interval

    def promote(self) -> PromotionResult:
        """Promote the local server and wait for confirmation.

        Returns:
            PromotionResult with success=True once the server left recovery.
        """
        self._log("info", "Promoting local server")
        try:
            self._server_control.promote()
            self._await_confirmation()
        except (DatabaseError, PromotionTimeoutError) as e:
            self._log(
                "error",
                f"Promotion failed: {e}. Operator attention required; "
                "promotion will not be retried",
            )
            self._record(False)
            return PromotionResult(success=False, error=str(e))

        self._log("info", "Local server confirmed promotion")
        self._record(True)
        self._run_post_promotion_command()
        self._record_in_registry()
        return PromotionResult(success=True)

    def _await_confirmation(self) -> None:
        deadline = self._time.get_time_seconds() + self.timeout
        while True:
            try:
                if not self._server_control.is_in_recovery():
                    return
            except DatabaseError as e:
                # The server briefly refuses sessions while it switches over.
                self._log("warning", f"Cannot check recovery state: {e}")
            remaining = deadline - self._time.get_time_seconds()
            if remaining <= 0:
                raise PromotionTimeoutError(self.timeout)
            self._time.sleep(min(self.poll_interval, remaining))

    def _run_post_promotion_command(self) -> None:
        command = self.post_promotion_command
        if not command:
            return
        try:
            exit_code = self._command_runner.run(command)
        except (OSError, subprocess.SubprocessError) as e:
            self._log("error", f"Post-promotion command {command!r} failed to run: {e}")
            return
        if exit_code != 0:
            self._log(
                "error",
                f"Post-promotion command {command!r} exited with status {exit_code}",
            )

    def _record_in_registry(self) -> None:
        if self._registry is None or not self.node_name:
            return
        try:
            self._registry.record_promotion(self.node_name)
        except DatabaseError as e:
            self._log("warning", f"Cannot record promotion in registry: {e}")

    def _record(self, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_promotion(success)

    def _log(self, level: str, message: str) -> None:
        if self._logger is not None:
            getattr(self._logger, level)(message)
