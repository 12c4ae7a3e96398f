"""Fakes for server-side ports: replication config, server control,
command runner, registration and notification."""

from __future__ import annotations

from pgkeeper.domain.node import ReplicationConfig


class FakeReplicationConfigReader:
    """Fake implementation of ReplicationConfigReaderPort."""

    def __init__(self, config: ReplicationConfig | None = None) -> None:
        self.config = config or ReplicationConfig()
        self.exception: BaseException | None = None
        self.read_count = 0

    def set_config(self, config: ReplicationConfig) -> None:
        """Configure the ReplicationConfig returned by subsequent reads."""
        self.config = config

    def read_replication_config(self) -> ReplicationConfig:
        """Return the configured ReplicationConfig or raise."""
        self.read_count += 1
        if self.exception is not None:
            raise self.exception
        return self.config


class FakeServerControl:
    """Fake implementation of ServerControlPort for testing.

    Starts in recovery. promote() leaves recovery after
    ``recovery_checks_before_promoted`` polls, or never when
    ``confirm_promotion`` is False.
    """

    def __init__(
        self,
        in_recovery: bool = True,
        confirm_promotion: bool = True,
        recovery_checks_before_promoted: int = 0,
    ) -> None:
        self.in_recovery = in_recovery
        self.confirm_promotion = confirm_promotion
        self.recovery_checks_before_promoted = recovery_checks_before_promoted
        self.promote_calls = 0
        self.recovery_checks = 0
        self.promote_exception: BaseException | None = None
        self.recovery_exception: BaseException | None = None
        self._checks_after_promote = 0

    def promote(self) -> None:
        """Record the promotion request."""
        self.promote_calls += 1
        if self.promote_exception is not None:
            raise self.promote_exception

    def is_in_recovery(self) -> bool:
        """Report recovery, flipping once promotion is confirmed."""
        self.recovery_checks += 1
        if self.recovery_exception is not None:
            raise self.recovery_exception
        if self.promote_calls and self.confirm_promotion:
            if self._checks_after_promote >= self.recovery_checks_before_promoted:
                self.in_recovery = False
            self._checks_after_promote += 1
        return self.in_recovery


class FakeCommandRunner:
    """Fake implementation of CommandRunnerPort recording every command."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.exception: BaseException | None = None
        self.commands: list[str] = []

    def run(self, command: str) -> int:
        """Record ``command`` and return the configured exit code."""
        self.commands.append(command)
        if self.exception is not None:
            raise self.exception
        return self.exit_code


class FakeCoordinatorRegistration:
    """Fake implementation of CoordinatorRegistrationPort."""

    def __init__(self, pid: int | None = None) -> None:
        self.pid = pid
        self.withdrawn = False

    def publish(self, pid: int) -> None:
        """Record ``pid``."""
        self.pid = pid
        self.withdrawn = False

    def read_pid(self) -> int | None:
        """Return the recorded pid."""
        return self.pid

    def withdraw(self) -> None:
        """Forget the pid."""
        self.pid = None
        self.withdrawn = True


class FakeCoordinatorNotifier:
    """Fake implementation of CoordinatorNotifierPort.

    Optionally forwards to a callback (such as a SignalRelay method) so
    tests can observe the cross-process path in a single process.
    """

    def __init__(self, delivered: bool = True, on_notify=None) -> None:
        self.delivered = delivered
        self.on_notify = on_notify
        self.notifications = 0

    def notify_registry_changed(self) -> bool:
        """Count the notification and report the configured delivery result."""
        self.notifications += 1
        if self.delivered and self.on_notify is not None:
            self.on_notify()
        return self.delivered
