"""In-memory lease store.

Implements LeaseStorePort over a plain dict guarded by a lock. Several store
instances may share one backing dict to stand in for several processes
talking to the same database.
"""

from __future__ import annotations

import threading

from leasekeeper.domain.exceptions import (
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseNotFoundError,
)
from leasekeeper.domain.lease import Lease


class InMemoryLeaseStore:
    """Thread-safe, linearizable lease store kept in process memory.

    Every operation runs under a single lock, so create-if-absent and
    update-if-matches are atomic with respect to each other.

    Example:
        >>> records: dict[str, Lease] = {}
        >>> store_a = InMemoryLeaseStore("scheduler", records=records)
        >>> store_b = InMemoryLeaseStore("scheduler", records=records)
    """

    _shared_lock = threading.Lock()

    def __init__(
        self,
        lease_key: str,
        *,
        records: dict[str, Lease] | None = None,
        lock: threading.Lock | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            lease_key: Key of the lease record this store manages.
            records: Backing dict. Share it between stores to share records.
            lock: Lock guarding records. Stores sharing records must share
                 the lock too; defaults to a process-wide lock when records
                 are shared and a private lock otherwise.

        Raises:
            LeaseConfigError: If lease_key is empty.
        """
        if not lease_key or not lease_key.strip():
            raise LeaseConfigError("lease_key cannot be empty")

        self._lease_key = lease_key
        self._records: dict[str, Lease] = records if records is not None else {}
        if lock is not None:
            self._lock = lock
        elif records is not None:
            self._lock = self._shared_lock
        else:
            self._lock = threading.Lock()

    @property
    def lease_key(self) -> str:
        """Key of the lease record this store manages."""
        return self._lease_key

    def get_lease(self) -> Lease:
        """Return the current lease record."""
        with self._lock:
            lease = self._records.get(self._lease_key)
        if lease is None:
            raise LeaseNotFoundError(self._lease_key)
        return lease

    def create_lease(self, lease: Lease) -> None:
        """Create the lease record if none exists."""
        with self._lock:
            if self._lease_key in self._records:
                raise LeaseAlreadyExistsError(self._lease_key)
            self._records[self._lease_key] = lease

    def update_lease(self, lease: Lease, expected: Lease | None = None) -> None:
        """Replace the lease record, optionally only if it still equals expected."""
        with self._lock:
            current = self._records.get(self._lease_key)
            if current is None:
                raise LeaseNotFoundError(self._lease_key)
            if expected is not None and not _matches(current, expected):
                raise LeaseNotFoundError(
                    self._lease_key,
                    f"lease {self._lease_key!r} changed since it was read",
                )
            self._records[self._lease_key] = lease


def _matches(current: Lease, expected: Lease) -> bool:
    """Compare the fields a conditional update is keyed on."""
    return (
        current.holder_identity == expected.holder_identity
        and current.renew_time == expected.renew_time
        and current.leader_transitions == expected.leader_transitions
    )
