"""Port interfaces for the leasekeeper core package.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from leasekeeper.domain.events import ElectionEvent
    from leasekeeper.domain.lease import Lease
    from leasekeeper.domain.split_brain import ClusterView


@runtime_checkable
class LeaseStorePort(Protocol):
    """Port interface for persisting the lease record of one lease key.

    The store holds at most one record per key and never decides who leads.
    All election logic lives in the Elector; the store only provides
    create-if-absent and update-if-matches on a single record.

    Contract:
        - get_lease() returns the current record or raises LeaseNotFoundError
        - create_lease() succeeds only if no record exists, otherwise raises
          LeaseAlreadyExistsError; safe to call concurrently
        - update_lease() overwrites an existing record, raising
          LeaseNotFoundError if there is none. With expected, the write
          applies only if the stored holder_identity, renew_time and
          leader_transitions still equal expected's; a mismatch raises
          LeaseNotFoundError. Zero matched records is never a success.
        - Backend/transport failures raise LeaseStoreError
    """

    def get_lease(self) -> Lease:
        """Return the current lease record.

        Raises:
            LeaseNotFoundError: If the record has never been created.
            LeaseStoreError: If the backend fails.
        """
        ...

    def create_lease(self, lease: Lease) -> None:
        """Create the lease record if none exists.

        Args:
            lease: Full initial record.

        Raises:
            LeaseAlreadyExistsError: If a record already exists for the key.
            LeaseStoreError: If the backend fails.
        """
        ...

    def update_lease(self, lease: Lease, expected: Lease | None = None) -> None:
        """Replace the existing lease record.

        Args:
            lease: Full replacement record.
            expected: Record previously read by the caller. When given, the
                     replacement applies only if the stored record still
                     matches it.

        Raises:
            LeaseNotFoundError: If no record exists or expected no longer matches.
            LeaseStoreError: If the backend fails.
        """
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Port interface for wall-clock time.

    Lease timestamps are compared across processes, so implementations must
    return timezone-aware wall-clock time.

    Contract:
        - now() returns a timezone-aware datetime
        - Successive calls should return non-decreasing values
    """

    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...


class SystemClock:
    """Default implementation: provides real UTC time."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(timezone.utc)


@runtime_checkable
class EventEmitterPort(Protocol):
    """Port interface for emitting election events.

    Implementations handle event delivery to observers (logging, metrics, callbacks).

    Contract:
        - emit(event) delivers the event to all registered observers
        - emit() is fire-and-forget (no return value, no exceptions propagated)
        - Thread safety is implementation-defined
    """

    def emit(self, event: ElectionEvent) -> None:
        """Emit an election event to observers.

        Args:
            event: The ElectionEvent to emit.
        """
        ...


@runtime_checkable
class LoggingPort(Protocol):
    """Port interface for structured logging.

    Abstracts the logging mechanism from use cases that need to emit
    warnings (e.g., when a split-brain is detected).

    Contract:
        - warning(message) logs a warning-level message
        - warning() is fire-and-forget (no return value, no exceptions propagated)
    """

    def warning(self, message: str) -> None:
        """Log a warning message.

        Args:
            message: The warning message to log.
        """
        ...


@runtime_checkable
class LeadershipViewPort(Protocol):
    """Port interface for observing what each candidate believes.

    Contract:
        - get_cluster_view() returns a ClusterView with one entry per candidate
        - May raise if the view cannot be assembled
    """

    def get_cluster_view(self) -> ClusterView:
        """Return the current leadership view of all candidates."""
        ...


@runtime_checkable
class CandidateIDResolverPort(Protocol):
    """Port interface for resolving this candidate's identity.

    Contract:
        - resolve_candidate_id() returns a non-empty string
        - The returned string should be consistent across multiple calls
        - May raise KeyError if required configuration is missing
        - May raise ValueError if the resolved ID is empty after stripping
    """

    def resolve_candidate_id(self) -> str:
        """Resolve this candidate's identity."""
        ...


class EnvironmentCandidateIDResolver:
    """Default implementation: resolve identity from LEASEKEEPER_CANDIDATE_ID.

    Reads the environment variable and returns it after stripping whitespace.
    This is the standard way to configure candidate identity in containerized
    deployments, where the pod or container name is unique.
    """

    ENV_VAR = "LEASEKEEPER_CANDIDATE_ID"

    def resolve_candidate_id(self) -> str:
        """Resolve candidate identity from LEASEKEEPER_CANDIDATE_ID.

        Returns:
            The value of LEASEKEEPER_CANDIDATE_ID after stripping whitespace.

        Raises:
            KeyError: If LEASEKEEPER_CANDIDATE_ID is not set.
            ValueError: If it is empty or whitespace-only after stripping.
        """
        candidate_id = os.environ[self.ENV_VAR].strip()

        if not candidate_id:
            raise ValueError("candidate ID cannot be empty or whitespace-only")

        return candidate_id
