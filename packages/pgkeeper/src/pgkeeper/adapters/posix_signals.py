"""POSIX signal wiring for the coordinator process.

Handlers only raise SignalRelay flags; all work happens in the loop.

- SIGTERM, SIGINT: terminate
- SIGHUP: reload configuration
- SIGUSR1: reload registry (sent by administrative callers)
"""

from __future__ import annotations

import signal
from types import FrameType
from typing import Any, Callable

from pgkeeper.adapters.pidfile import REGISTRY_RELOAD_SIGNAL
from pgkeeper.usecases.signal_relay import SignalRelay

Handler = Callable[[int, "FrameType | None"], Any]


def install_signal_handlers(relay: SignalRelay) -> dict[int, Any]:
    """Route process signals to ``relay``.

    Must be called from the main thread.

    Args:
        relay: Relay that receives the flags.

    Returns:
        Mapping of signal number to the previously installed handler, for
        restore_signal_handlers().
    """

    def on_terminate(_signum: int, _frame: FrameType | None) -> None:
        relay.request_terminate()

    def on_reload_config(_signum: int, _frame: FrameType | None) -> None:
        relay.request_config_reload()

    def on_reload_registry(_signum: int, _frame: FrameType | None) -> None:
        relay.request_registry_reload()

    handlers: dict[int, Handler] = {
        signal.SIGTERM: on_terminate,
        signal.SIGINT: on_terminate,
        signal.SIGHUP: on_reload_config,
        REGISTRY_RELOAD_SIGNAL: on_reload_registry,
    }
    previous: dict[int, Any] = {}
    for signum, handler in handlers.items():
        previous[signum] = signal.signal(signum, handler)
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    """Reinstall handlers returned by install_signal_handlers()."""
    for signum, handler in previous.items():
        signal.signal(signum, handler)
