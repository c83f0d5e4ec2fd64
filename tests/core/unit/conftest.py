"""Pytest configuration for leasekeeper core unit tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from leasekeeper.adapters.memory_lease_store import InMemoryLeaseStore
from leasekeeper.adapters.ports import LeaseStorePort
from leasekeeper.domain.lease import Lease
from leasekeeper.domain.settings import ElectorSettings
from leasekeeper.usecases.elector import Elector
from tests.core.unit.fakes import FakeClock, FakeMetricsAdapter, RecordingEventEmitter

LEASE_KEY = "scheduler"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def records() -> dict[str, Lease]:
    """Backing dict shared by every store handed out by `store_factory`."""
    return {}


@pytest.fixture
def store_factory(records: dict[str, Lease]) -> Callable[[], InMemoryLeaseStore]:
    """Build stores that behave like separate processes on one database."""

    def factory() -> InMemoryLeaseStore:
        return InMemoryLeaseStore(LEASE_KEY, records=records)

    return factory


@pytest.fixture
def store(store_factory: Callable[[], InMemoryLeaseStore]) -> InMemoryLeaseStore:
    return store_factory()


@pytest.fixture
def events() -> RecordingEventEmitter:
    return RecordingEventEmitter()


@pytest.fixture
def metrics() -> FakeMetricsAdapter:
    return FakeMetricsAdapter()


@pytest.fixture
def make_elector(
    store_factory: Callable[[], InMemoryLeaseStore],
    clock: FakeClock,
    events: RecordingEventEmitter,
) -> Callable[..., Elector]:
    """Build an Elector on the shared store and fake clock.

    Example:
        def test_something(make_elector):
            a = make_elector("a")
            b = make_elector("b", release_on_cancel=False)
    """

    def factory(
        candidate_id: str,
        *,
        store: LeaseStorePort | None = None,
        lease_duration: float = 10.0,
        retry_period: float = 2.0,
        release_on_cancel: bool = True,
        **kwargs: Any,
    ) -> Elector:
        settings = ElectorSettings(
            candidate_id=candidate_id,
            lease_duration=lease_duration,
            retry_period=retry_period,
            release_on_cancel=release_on_cancel,
        )
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("event_emitter", events)
        return Elector(settings, store if store is not None else store_factory(), **kwargs)

    return factory
