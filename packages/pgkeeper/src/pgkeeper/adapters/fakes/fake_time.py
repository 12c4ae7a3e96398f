"""Fake time provider for testing."""

from __future__ import annotations


class FakeTimeProvider:
    """Fake implementation of TimeProvider with a manually advanced clock.

    sleep() advances the clock instantly and records the duration.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def get_time_seconds(self) -> float:
        """Return the fake clock reading."""
        return self.now

    def sleep(self, seconds: float) -> None:
        """Advance the clock by ``seconds``."""
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        """Advance the clock without recording a sleep."""
        self.now += seconds
