"""Unit tests for InMemoryLeaseStore."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from leasekeeper.adapters.memory_lease_store import InMemoryLeaseStore
from leasekeeper.adapters.ports import LeaseStorePort
from leasekeeper.domain.exceptions import (
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseNotFoundError,
)
from leasekeeper.domain.lease import Lease

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.InMemoryLeaseStore")
class TestInMemoryLeaseStore:
    def test_implements_port(self) -> None:
        assert isinstance(InMemoryLeaseStore("scheduler"), LeaseStorePort)

    @pytest.mark.parametrize("key", ["", "  "])
    def test_empty_key_rejected(self, key: str) -> None:
        with pytest.raises(LeaseConfigError):
            InMemoryLeaseStore(key)

    def test_get_absent_raises_not_found(self) -> None:
        with pytest.raises(LeaseNotFoundError) as exc_info:
            InMemoryLeaseStore("scheduler").get_lease()
        assert exc_info.value.lease_key == "scheduler"

    def test_create_then_get(self) -> None:
        store = InMemoryLeaseStore("scheduler")
        lease = Lease.initial("node-1", T0, 10.0)
        store.create_lease(lease)
        assert store.get_lease() == lease

    def test_create_existing_raises(self) -> None:
        store = InMemoryLeaseStore("scheduler")
        store.create_lease(Lease.initial("node-1", T0, 10.0))
        with pytest.raises(LeaseAlreadyExistsError):
            store.create_lease(Lease.initial("node-2", T0, 10.0))
        assert store.get_lease().holder_identity == "node-1"

    def test_update_absent_raises_not_found(self) -> None:
        with pytest.raises(LeaseNotFoundError):
            InMemoryLeaseStore("scheduler").update_lease(Lease.initial("node-1", T0, 10.0))

    def test_unconditional_update_overwrites(self) -> None:
        store = InMemoryLeaseStore("scheduler")
        store.create_lease(Lease.initial("node-1", T0, 10.0))
        replacement = Lease.initial("node-2", at(1), 10.0)
        store.update_lease(replacement)
        assert store.get_lease() == replacement

    def test_conditional_update_succeeds_when_unchanged(self) -> None:
        store = InMemoryLeaseStore("scheduler")
        lease = Lease.initial("node-1", T0, 10.0)
        store.create_lease(lease)
        store.update_lease(lease.renewed(at(2)), expected=lease)
        assert store.get_lease().renew_time == at(2)

    def test_conditional_update_fails_when_changed(self) -> None:
        store = InMemoryLeaseStore("scheduler")
        lease = Lease.initial("node-1", T0, 10.0)
        store.create_lease(lease)
        store.update_lease(lease.renewed(at(2)), expected=lease)

        with pytest.raises(LeaseNotFoundError, match="changed since it was read"):
            store.update_lease(lease.acquired_by("node-2", at(3), 10.0), expected=lease)
        assert store.get_lease().holder_identity == "node-1"

    def test_stores_sharing_records_see_each_other(self) -> None:
        records: dict[str, Lease] = {}
        store_a = InMemoryLeaseStore("scheduler", records=records)
        store_b = InMemoryLeaseStore("scheduler", records=records)
        store_a.create_lease(Lease.initial("node-1", T0, 10.0))
        assert store_b.get_lease().holder_identity == "node-1"

    def test_keys_are_independent(self) -> None:
        records: dict[str, Lease] = {}
        InMemoryLeaseStore("a", records=records).create_lease(Lease.initial("x", T0, 10.0))
        with pytest.raises(LeaseNotFoundError):
            InMemoryLeaseStore("b", records=records).get_lease()


@pytest.mark.unit
@pytest.mark.concurrency
@pytest.mark.tier(2)
@pytest.mark.tra("Adapter.InMemoryLeaseStore.Atomicity")
class TestInMemoryLeaseStoreConcurrency:
    """Exactly one of many racing writers wins."""

    def _race(self, attempt: object, n: int = 16) -> list[str]:
        barrier = threading.Barrier(n)
        winners: list[str] = []
        lock = threading.Lock()

        def worker(i: int) -> None:
            barrier.wait()
            try:
                attempt(f"node-{i}")  # type: ignore[operator]
            except (LeaseAlreadyExistsError, LeaseNotFoundError):
                return
            with lock:
                winners.append(f"node-{i}")

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        return winners

    def test_single_creator_wins(self) -> None:
        records: dict[str, Lease] = {}

        def create(holder: str) -> None:
            InMemoryLeaseStore("k", records=records).create_lease(
                Lease.initial(holder, T0, 10.0)
            )

        winners = self._race(create)
        assert len(winners) == 1
        assert records["k"].holder_identity == winners[0]

    def test_single_claimer_wins(self) -> None:
        records: dict[str, Lease] = {}
        expired = Lease.initial("old", T0, 1.0)
        InMemoryLeaseStore("k", records=records).create_lease(expired)

        def claim(holder: str) -> None:
            InMemoryLeaseStore("k", records=records).update_lease(
                expired.acquired_by(holder, at(5), 10.0), expected=expired
            )

        winners = self._race(claim)
        assert len(winners) == 1
        assert records["k"].holder_identity == winners[0]
        assert records["k"].leader_transitions == 2
