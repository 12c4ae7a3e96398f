"""Standard library implementation of the LoggingPort."""

from __future__ import annotations

import logging

from pgkeeper.adapters.ports import LoggingPort


class StdlibLoggingAdapter:
    """Routes LoggingPort messages to a ``logging`` logger."""

    def __init__(self, name: str = "pgkeeper") -> None:
        """Initialize the adapter.

        Args:
            name: Name of the underlying logger.
        """
        self._logger = logging.getLogger(name)

    def info(self, message: str) -> None:
        """Log at INFO."""
        self._logger.info(message)

    def warning(self, message: str) -> None:
        """Log at WARNING."""
        self._logger.warning(message)

    def error(self, message: str) -> None:
        """Log at ERROR."""
        self._logger.error(message)


# Runtime protocol check
assert isinstance(
    StdlibLoggingAdapter("pgkeeper"), LoggingPort
), "StdlibLoggingAdapter must implement LoggingPort"
