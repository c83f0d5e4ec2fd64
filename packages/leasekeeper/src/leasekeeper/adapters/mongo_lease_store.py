"""MongoDB lease store.

Implements LeaseStorePort on a single MongoDB document whose _id is the
lease key. Creation relies on the unique _id index to reject duplicates;
updates match on _id (plus the previously read fields for conditional
updates) so a lost race matches zero documents.

Document layout (compatible with records written by other leasekeeper
implementations using the same collection):

    {
        "_id": <lease_key>,
        "holder_identity": str,
        "acquire_time": datetime,
        "renew_time": datetime,
        "lease_duration": int,       # nanoseconds
        "leader_transitions": int,
    }
"""

from __future__ import annotations

import contextlib
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterator

import pymongo
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    PyMongoError,
)

from leasekeeper.domain.exceptions import (
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseNotFoundError,
    LeaseStoreError,
)
from leasekeeper.domain.lease import Lease

if TYPE_CHECKING:
    from pymongo.collection import Collection

_NANOS_PER_SECOND = 1_000_000_000


class MongoLeaseStore:
    """LeaseStorePort backed by one MongoDB document.

    Driver exceptions are wrapped in LeaseStoreError. Connection failures and
    timeouts are flagged transient so the elector reports them as such.

    Example:
        >>> client = pymongo.MongoClient("mongodb://localhost:27017", tz_aware=True)
        >>> store = MongoLeaseStore(client["app"]["leases"], lease_key="scheduler")
        >>> store.get_lease()
    """

    def __init__(
        self,
        collection: Collection[Any],
        lease_key: str,
        *,
        operation_timeout: float | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            collection: Collection holding lease documents.
            lease_key: _id of the lease document.
            operation_timeout: Optional timeout in seconds bounding every
                              call, so a stuck network call cannot wedge the
                              election loop.

        Raises:
            LeaseConfigError: If collection is missing, lease_key is empty or
                             operation_timeout is not positive.
        """
        if collection is None:
            raise LeaseConfigError("collection is required")

        if not lease_key or not lease_key.strip():
            raise LeaseConfigError("lease_key cannot be empty")

        if operation_timeout is not None and operation_timeout <= 0:
            raise LeaseConfigError(
                f"operation_timeout must be positive, got: {operation_timeout}"
            )

        self._collection = collection
        self._lease_key = lease_key
        self._operation_timeout = operation_timeout

    @property
    def lease_key(self) -> str:
        """_id of the lease document."""
        return self._lease_key

    def get_lease(self) -> Lease:
        """Return the current lease record.

        Raises:
            LeaseNotFoundError: If no document exists for the key.
            LeaseStoreError: If the driver fails.
        """
        with self._driver_call("get"):
            document = self._collection.find_one({"_id": self._lease_key})

        if document is None:
            raise LeaseNotFoundError(self._lease_key)

        return _to_lease(document)

    def create_lease(self, lease: Lease) -> None:
        """Insert the lease document.

        Raises:
            LeaseAlreadyExistsError: If a document with the key already exists.
            LeaseStoreError: If the driver fails.
        """
        document = {"_id": self._lease_key, **_to_fields(lease)}
        try:
            with self._driver_call("create"):
                self._collection.insert_one(document)
        except LeaseStoreError as e:
            if isinstance(e.original_error, DuplicateKeyError):
                raise LeaseAlreadyExistsError(self._lease_key) from e.original_error
            raise

    def update_lease(self, lease: Lease, expected: Lease | None = None) -> None:
        """Overwrite the lease document.

        Matches on _id, and on the expected record's holder_identity,
        renew_time and leader_transitions when expected is given.

        Raises:
            LeaseNotFoundError: If no document matched.
            LeaseStoreError: If the driver fails.
        """
        query: dict[str, Any] = {"_id": self._lease_key}
        if expected is not None:
            query.update(
                {
                    "holder_identity": expected.holder_identity,
                    "renew_time": expected.renew_time,
                    "leader_transitions": expected.leader_transitions,
                }
            )

        with self._driver_call("update"):
            result = self._collection.update_one(query, {"$set": _to_fields(lease)})

        if result.matched_count == 0:
            if expected is None:
                raise LeaseNotFoundError(self._lease_key)
            raise LeaseNotFoundError(
                self._lease_key,
                f"lease {self._lease_key!r} not found or changed since it was read",
            )

    @contextlib.contextmanager
    def _driver_call(self, operation: str) -> Iterator[None]:
        """Bound a driver call by the operation timeout and wrap its errors."""
        timeout = (
            pymongo.timeout(self._operation_timeout)
            if self._operation_timeout is not None
            else contextlib.nullcontext()
        )
        try:
            with timeout:
                yield
        except PyMongoError as e:
            raise LeaseStoreError(
                f"MongoDB {operation} of lease {self._lease_key!r} failed: {e}",
                operation=operation,
                transient=_is_transient(e),
                original_error=e,
            ) from e


def _is_transient(error: PyMongoError) -> bool:
    """Connection loss and timeouts are expected to clear on their own."""
    if isinstance(error, (ConnectionFailure, ExecutionTimeout)):
        return True
    return bool(getattr(error, "timeout", False))


def _to_fields(lease: Lease) -> dict[str, Any]:
    """Serialize a Lease to document fields (without _id)."""
    return {
        "holder_identity": lease.holder_identity,
        "acquire_time": lease.acquire_time,
        "renew_time": lease.renew_time,
        "lease_duration": round(lease.lease_duration * _NANOS_PER_SECOND),
        "leader_transitions": lease.leader_transitions,
    }


def _to_lease(document: dict[str, Any]) -> Lease:
    """Deserialize a lease document."""
    return Lease(
        holder_identity=document.get("holder_identity", ""),
        acquire_time=_as_utc(document["acquire_time"]),
        renew_time=_as_utc(document["renew_time"]),
        lease_duration=document["lease_duration"] / _NANOS_PER_SECOND,
        leader_transitions=int(document.get("leader_transitions", 0)),
    )


def _as_utc(value: datetime) -> datetime:
    """BSON datetimes are UTC; clients without tz_aware return them naive."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
