"""
Root conftest.py for the leasekeeper test suite.

Pytest plugin that checks TRA (Test Responsibility Anchor) and tier markers
and turns tiers into timeouts.

Usage:
    @pytest.mark.tier(1)
    @pytest.mark.tra("UseCase.Elector.Renew")
    def test_something():
        ...

Configuration:
    TRA_ENFORCE=1   fail collection on missing/invalid markers (default: warn)
    TRA_ENFORCE=0   skip marker checks entirely
    TIER_TIMEOUT_MULTIPLIER=2.0   stretch tier timeouts on slow machines
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


VALID_TRA_PREFIXES = frozenset(
    [
        "Domain.Invariant.",
        "Domain.Policy.",
        "UseCase.",
        "Port.",
        "Adapter.",
        "Contract.",
    ]
)

# Seconds; 0 means no limit.
TIER_TIMEOUTS: dict[int, float] = {
    0: 0.1,
    1: 2.0,
    2: 30.0,
    3: 300.0,
    4: 0,
}


def pytest_configure(config: Config) -> None:
    """Register TRA and tier markers."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): Test Responsibility Anchor - the single responsibility this test "
        "protects. Must start with one of: Domain.Invariant, Domain.Policy, UseCase, "
        "Port, Adapter, Contract",
    )
    config.addinivalue_line(
        "markers",
        "tier(level): Test tier (0=instant, 1=fast, 2=standard, 3=slow, 4=manual). "
        "Determines the timeout applied to the test.",
    )


def _get_tier(item: Item) -> int | None:
    """Extract tier level from item's markers."""
    for marker in item.iter_markers(name="tier"):
        if marker.args:
            tier = marker.args[0]
            if isinstance(tier, int) and tier in TIER_TIMEOUTS:
                return tier
    return None


def _check_markers(items: list[Item]) -> list[str]:
    """Return one message per test with a missing or malformed marker."""
    errors: list[str] = []

    for item in items:
        tra_markers = list(item.iter_markers(name="tra"))
        if len(tra_markers) != 1 or not tra_markers[0].args:
            errors.append(f"{item.nodeid}: expected exactly one @pytest.mark.tra('...')")
        else:
            anchor = tra_markers[0].args[0]
            if not isinstance(anchor, str) or not any(
                anchor.startswith(prefix) for prefix in VALID_TRA_PREFIXES
            ):
                errors.append(f"{item.nodeid}: invalid TRA anchor {anchor!r}")

        if _get_tier(item) is None:
            errors.append(f"{item.nodeid}: missing or invalid @pytest.mark.tier()")

    return errors


def _apply_tier_timeouts(items: list[Item]) -> None:
    """Add a timeout marker per tier unless the test sets its own."""
    try:
        import pytest_timeout as _  # type: ignore[import-untyped]  # noqa: F401
    except ImportError:
        return

    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))

    for item in items:
        tier = _get_tier(item)
        if tier is None or any(item.iter_markers(name="timeout")):
            continue

        timeout = TIER_TIMEOUTS[tier]
        if timeout > 0:
            item.add_marker(pytest.mark.timeout(timeout * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Check TRA and tier markers, then apply tier timeouts."""
    enforce_mode = os.environ.get("TRA_ENFORCE", "warn")

    if enforce_mode != "0":
        errors = _check_markers(items)
        if errors and enforce_mode == "warn":
            print("\nTRA/Tier marker warnings:")
            for error in errors[:20]:
                print(f"  {error}")
            if len(errors) > 20:
                print(f"  ... and {len(errors) - 20} more")
        elif errors:
            pytest.fail(
                "TRA/Tier marker errors:\n" + "\n".join(f"  - {e}" for e in errors),
                pytrace=False,
            )

    _apply_tier_timeouts(items)
