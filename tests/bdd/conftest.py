"""Shared fixtures for BDD tests."""

from typing import Any

import pytest

Context = dict[str, Any]


@pytest.fixture
def context() -> Context:
    """Shared context for passing state between steps."""
    return {}
