"""Shared fixtures for BDD tests."""

from __future__ import annotations

import pytest

from leasekeeper.domain.lease import Lease
from tests.core.unit.fakes import FakeClock, RecordingEventEmitter


@pytest.fixture
def clock() -> FakeClock:
    """Clock shared by every candidate in a scenario."""
    return FakeClock()


@pytest.fixture
def events() -> RecordingEventEmitter:
    """Events from every candidate in a scenario, in emission order."""
    return RecordingEventEmitter()


@pytest.fixture
def records() -> dict[str, Lease]:
    """Backing dict standing in for the database all candidates talk to."""
    return {}
