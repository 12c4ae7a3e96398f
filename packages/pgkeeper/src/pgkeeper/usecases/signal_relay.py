"""SignalRelay use case: observable flags plus a single wake primitive.

Signal handlers and other notifiers raise flags; the coordinator loop drains
them once per iteration in a fixed priority order and blocks on the relay
between iterations instead of busy-polling.
"""

from __future__ import annotations

import queue
from enum import Enum


class RelayFlag(Enum):
    """Flags a relay can carry, declared in drain priority order.

    Attributes:
        TERMINATE: Stop the loop and release resources. Never cleared.
        RELOAD_CONFIG: Re-read hot-reloadable tunables.
        RELOAD_REGISTRY: Rebuild the in-memory registry cache.
    """

    TERMINATE = "terminate"
    RELOAD_CONFIG = "reload_config"
    RELOAD_REGISTRY = "reload_registry"


PRIORITY_ORDER: tuple[RelayFlag, ...] = tuple(RelayFlag)


class SignalRelay:
    """In-process notification channel for the coordinator loop.

    Raising a flag only assigns a boolean and puts a token on a
    ``queue.SimpleQueue``. Both operations are safe to perform from a signal
    handler running on the loop's own thread: ``SimpleQueue.put`` is
    reentrant, unlike lock-based primitives such as ``threading.Event``.

    Thread safety:
        Flags may be raised from any thread or signal handler. Draining
        (take/wait) is meant for the single coordinator loop.
    """

    def __init__(self) -> None:
        """Initialize with no pending flags."""
        self._pending: dict[RelayFlag, bool] = {flag: False for flag in RelayFlag}
        self._wakeups: queue.SimpleQueue[RelayFlag] = queue.SimpleQueue()

    def raise_flag(self, flag: RelayFlag) -> None:
        """Raise ``flag`` and wake the loop."""
        self._pending[flag] = True
        self._wakeups.put(flag)

    def request_terminate(self) -> None:
        """Ask the loop to stop."""
        self.raise_flag(RelayFlag.TERMINATE)

    def request_config_reload(self) -> None:
        """Ask the loop to re-read its configuration."""
        self.raise_flag(RelayFlag.RELOAD_CONFIG)

    def request_registry_reload(self) -> None:
        """Ask the loop to rebuild its registry cache."""
        self.raise_flag(RelayFlag.RELOAD_REGISTRY)

    @property
    def terminate_requested(self) -> bool:
        """Return True once termination has been requested."""
        return self._pending[RelayFlag.TERMINATE]

    def is_raised(self, flag: RelayFlag) -> bool:
        """Return True if ``flag`` is pending, without clearing it."""
        return self._pending[flag]

    def take(self, flag: RelayFlag) -> bool:
        """Clear ``flag`` and return whether it was pending.

        TERMINATE is sticky: taking it reports its state but never clears it.
        """
        was_raised = self._pending[flag]
        if flag is not RelayFlag.TERMINATE:
            self._pending[flag] = False
        return was_raised

    def pending(self) -> list[RelayFlag]:
        """Return pending flags in drain priority order."""
        return [flag for flag in PRIORITY_ORDER if self._pending[flag]]

    def wait(self, timeout: float) -> bool:
        """Block until a flag is raised or ``timeout`` elapses.

        Wake tokens that accumulated meanwhile are discarded; the flags
        themselves carry the state.

        Args:
            timeout: Maximum seconds to block. Non-positive values do not block.

        Returns:
            True if woken by a raised flag, False on timeout.
        """
        try:
            if timeout > 0:
                self._wakeups.get(timeout=timeout)
            else:
                self._wakeups.get_nowait()
        except queue.Empty:
            return False
        while True:
            try:
                self._wakeups.get_nowait()
            except queue.Empty:
                return True
