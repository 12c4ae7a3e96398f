"""Pidfile-based coordinator registration and notification.

The coordinator publishes its process id once at startup. Administrative
callers in other processes read it back and deliver SIGUSR1, which the
coordinator's signal handlers turn into a registry-reload request.
"""

from __future__ import annotations

import logging
import os
import signal
from pathlib import Path

from pgkeeper.adapters.ports import (
    CoordinatorNotifierPort,
    CoordinatorRegistrationPort,
)

logger = logging.getLogger(__name__)

REGISTRY_RELOAD_SIGNAL = signal.SIGUSR1


class PidfileRegistration:
    """Coordinator registration record stored in a pidfile.

    Written atomically (temporary file plus rename) so readers never see a
    partially written pid.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the registration.

        Args:
            path: Location of the pidfile.
        """
        self.path = Path(path)

    def publish(self, pid: int) -> None:
        """Write ``pid`` to the pidfile."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f".{self.path.name}.{pid}.tmp")
        tmp_path.write_text(f"{pid}\n")
        os.replace(tmp_path, self.path)

    def read_pid(self) -> int | None:
        """Return the published pid, or None if missing or unreadable."""
        try:
            content = self.path.read_text().strip()
        except FileNotFoundError:
            return None
        try:
            pid = int(content)
        except ValueError:
            logger.warning(f"Ignoring malformed pidfile {self.path}: {content!r}")
            return None
        return pid if pid > 0 else None

    def withdraw(self) -> None:
        """Remove the pidfile if it still names this process."""
        if self.read_pid() == os.getpid():
            self.path.unlink(missing_ok=True)


class PidfileCoordinatorNotifier:
    """Wakes the registered coordinator by signaling its process."""

    def __init__(
        self,
        registration: CoordinatorRegistrationPort,
        signal_number: int = REGISTRY_RELOAD_SIGNAL,
    ) -> None:
        """Initialize the notifier.

        Args:
            registration: Where the coordinator published its pid.
            signal_number: Signal delivered to request a registry reload.
        """
        self._registration = registration
        self._signal_number = signal_number

    def notify_registry_changed(self) -> bool:
        """Signal the coordinator. Returns False if none is running."""
        pid = self._registration.read_pid()
        if pid is None:
            logger.info("No coordinator registered; registry change not signaled")
            return False
        try:
            os.kill(pid, self._signal_number)
        except ProcessLookupError:
            logger.warning(f"Registered coordinator pid {pid} is not running")
            return False
        except PermissionError:
            logger.error(f"Not permitted to signal coordinator pid {pid}")
            return False
        return True


# Runtime protocol checks
assert isinstance(
    PidfileRegistration.__new__(PidfileRegistration), CoordinatorRegistrationPort
), "PidfileRegistration must implement CoordinatorRegistrationPort"
assert isinstance(
    PidfileCoordinatorNotifier.__new__(PidfileCoordinatorNotifier),
    CoordinatorNotifierPort,
), "PidfileCoordinatorNotifier must implement CoordinatorNotifierPort"
