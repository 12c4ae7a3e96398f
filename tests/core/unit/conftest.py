"""Pytest configuration for pgkeeper core unit tests."""

from typing import Any


def pytest_configure(config: Any) -> None:
    """Register custom markers for unit tests."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )
