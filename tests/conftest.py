"""
Root conftest.py for the pgkeeper-py test suite.

Pytest plugin for TRA (Test Responsibility Architecture) and Tier markers:
- every test declares one responsibility with @pytest.mark.tra(...)
- every test declares a speed tier with @pytest.mark.tier(N)
- tier timeouts are applied through pytest-timeout when it is installed

Usage:
    @pytest.mark.tier(1)
    @pytest.mark.tra("UseCase.StateMachine")
    def test_something():
        ...

Configuration:
    TRA_ENFORCE=1 / TIER_ENFORCE=1 fail collection on violations
    TRA_ENFORCE=0 / TIER_ENFORCE=0 disable the checks
    Default is "warn": violations are printed, collection continues
    TIER_TIMEOUT_MULTIPLIER scales tier timeouts (e.g. on slow CI)
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


VALID_TRA_PREFIXES = (
    "Domain.Invariant",
    "Domain.Policy",
    "UseCase.",
    "Port.",
    "Adapter.",
    "Contract.",
)

# Seconds per tier; 0 means no limit
TIER_TIMEOUTS: dict[int, float] = {
    0: 0.1,
    1: 2.0,
    2: 30.0,
    3: 300.0,
    4: 0,
}


def pytest_configure(config: Config) -> None:
    """Register TRA, tier and helper markers."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): responsibility this test protects, starting with one of "
        + ", ".join(p.rstrip(".") for p in VALID_TRA_PREFIXES),
    )
    config.addinivalue_line(
        "markers",
        "tier(level): 0=instant, 1=fast, 2=standard, 3=slow, 4=manual",
    )
    config.addinivalue_line(
        "markers", "unit: in-memory tests, no PostgreSQL server required"
    )
    config.addinivalue_line("markers", "property: property-based tests using Hypothesis")


def _tier_of(item: Item) -> int | None:
    markers = list(item.iter_markers(name="tier"))
    if len(markers) != 1 or not markers[0].args:
        return None
    tier = markers[0].args[0]
    return tier if isinstance(tier, int) and tier in TIER_TIMEOUTS else None


def _tra_problem(item: Item) -> str | None:
    markers = list(item.iter_markers(name="tra"))
    if not markers:
        return "missing @pytest.mark.tra"
    if len(markers) > 1:
        return "more than one @pytest.mark.tra"
    anchor = markers[0].args[0] if markers[0].args else None
    if not isinstance(anchor, str) or not anchor.startswith(VALID_TRA_PREFIXES):
        return f"invalid TRA anchor {anchor!r}"
    return None


def _collect_violations(items: list[Item]) -> list[str]:
    violations: list[str] = []
    check_tra = os.environ.get("TRA_ENFORCE", "warn") != "0"
    check_tier = os.environ.get("TIER_ENFORCE", "warn") != "0"
    for item in items:
        if check_tra and (problem := _tra_problem(item)):
            violations.append(f"{item.nodeid}: {problem}")
        if check_tier and _tier_of(item) is None:
            violations.append(f"{item.nodeid}: missing or invalid @pytest.mark.tier")
    return violations


def _apply_tier_timeouts(items: list[Item]) -> None:
    try:
        import pytest_timeout as _  # type: ignore[import-untyped]  # noqa: F401
    except ImportError:
        return

    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))
    for item in items:
        tier = _tier_of(item)
        if tier is None or any(item.iter_markers(name="timeout")):
            continue
        if TIER_TIMEOUTS[tier] > 0:
            item.add_marker(pytest.mark.timeout(TIER_TIMEOUTS[tier] * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Check markers, then attach tier timeouts."""
    violations = _collect_violations(items)
    if violations:
        strict = "1" in (
            os.environ.get("TRA_ENFORCE", "warn"),
            os.environ.get("TIER_ENFORCE", "warn"),
        )
        if strict:
            pytest.fail(
                "TRA/Tier violations:\n" + "\n".join(f"  - {v}" for v in violations),
                pytrace=False,
            )
        print("\nTRA/Tier warnings:")
        for violation in violations[:20]:
            print(f"  {violation}")

    _apply_tier_timeouts(items)


def pytest_report_header(config: Config) -> str:
    """Show enforcement modes in the pytest header."""
    tra = os.environ.get("TRA_ENFORCE", "warn")
    tier = os.environ.get("TIER_ENFORCE", "warn")
    return f"TRA enforcement: {tra} | Tier enforcement: {tier}"
