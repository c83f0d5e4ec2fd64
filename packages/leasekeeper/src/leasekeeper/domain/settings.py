"""Leasekeeper settings domain entities."""

from __future__ import annotations

from dataclasses import dataclass

from leasekeeper.domain.exceptions import LeaseConfigError

# Seconds; bounds each MongoDB call unless configured otherwise.
DEFAULT_OPERATION_TIMEOUT = 5.0


def _validate_identifier(name: str, value: str) -> None:
    """Validate a non-empty identifier without control characters or padding."""
    if not value:
        raise LeaseConfigError(f"{name} cannot be empty")

    if any(ord(c) < 32 or c == "\x7f" for c in value):
        raise LeaseConfigError(f"{name} contains control characters, got: {value!r}")

    if not value.strip():
        raise LeaseConfigError(f"{name} cannot be whitespace-only")

    if value != value.strip():
        raise LeaseConfigError(
            f"{name} cannot have leading/trailing whitespace, got: {value!r}"
        )


@dataclass(frozen=True)
class ElectorSettings:
    """Candidate-facing election configuration.

    Value object consumed by the Elector. Durations are in seconds.

    Attributes:
        candidate_id: Unique identity of this candidate. Recorded as the
                     lease holder while this candidate leads.
        lease_duration: Seconds a lease stays valid without renewal.
                       Must be positive.
        retry_period: Seconds between polls of the lease store.
                     Must be positive and shorter than lease_duration.
        release_on_cancel: If True, a leader clears the holder on
                          cancellation so another candidate can take over
                          without waiting for expiry.

    Invariants:
        - 0 < retry_period < lease_duration
    """

    candidate_id: str
    lease_duration: float = 15.0
    retry_period: float = 2.0
    release_on_cancel: bool = True

    def __post_init__(self) -> None:
        """Validate elector settings."""
        _validate_identifier("candidate_id", self.candidate_id)
        self._validate_lease_duration()
        self._validate_retry_period()
        self._validate_period_relationship()

    def _validate_lease_duration(self) -> None:
        """Validate lease_duration is positive."""
        if self.lease_duration <= 0:
            raise LeaseConfigError(
                f"lease_duration must be positive, got: {self.lease_duration}"
            )

    def _validate_retry_period(self) -> None:
        """Validate retry_period is positive."""
        if self.retry_period <= 0:
            raise LeaseConfigError(
                f"retry_period must be positive, got: {self.retry_period}"
            )

    def _validate_period_relationship(self) -> None:
        """Validate retry_period < lease_duration.

        A leader renews once per retry period, so the period must fit inside
        the lease duration or the lease expires between renewals.
        """
        if self.retry_period >= self.lease_duration:
            raise LeaseConfigError(
                f"retry_period must be less than lease_duration, "
                f"got: {self.retry_period}s vs {self.lease_duration}s"
            )


@dataclass(frozen=True)
class MongoStoreSettings:
    """MongoDB lease store configuration.

    Attributes:
        uri: MongoDB connection string (e.g., 'mongodb://localhost:27017').
        database: Database holding the lease collection.
        collection: Collection holding lease documents.
        lease_key: Document _id of the lease record.
        operation_timeout: Per-call timeout in seconds applied to every store
                          operation, so a stalled server cannot wedge the
                          election loop or its shutdown. None disables it
                          and leaves blocking calls unbounded.
        server_selection_timeout_ms: How long the driver waits for a
                                    reachable server before failing a call.
    """

    uri: str
    database: str
    collection: str
    lease_key: str
    operation_timeout: float | None = DEFAULT_OPERATION_TIMEOUT
    server_selection_timeout_ms: int = 5000

    def __post_init__(self) -> None:
        """Validate store settings."""
        self._validate_uri()
        _validate_identifier("database", self.database)
        _validate_identifier("collection", self.collection)
        _validate_identifier("lease_key", self.lease_key)
        self._validate_timeouts()

    def _validate_uri(self) -> None:
        """Validate uri uses a MongoDB scheme."""
        if not self.uri or not self.uri.strip():
            raise LeaseConfigError("uri cannot be empty")

        if not self.uri.startswith(("mongodb://", "mongodb+srv://")):
            raise LeaseConfigError(
                f"uri must start with mongodb:// or mongodb+srv://, got: {self.uri!r}"
            )

    def _validate_timeouts(self) -> None:
        """Validate timeouts are positive."""
        if self.operation_timeout is not None and self.operation_timeout <= 0:
            raise LeaseConfigError(
                f"operation_timeout must be positive, got: {self.operation_timeout}"
            )

        if self.server_selection_timeout_ms <= 0:
            raise LeaseConfigError(
                "server_selection_timeout_ms must be positive, "
                f"got: {self.server_selection_timeout_ms}"
            )


@dataclass(frozen=True)
class LeaseKeeperSettings:
    """Top-level configuration: election settings plus an optional store.

    Attributes:
        elector: Election settings for this candidate.
        store: MongoDB store settings, or None when the caller supplies its
              own LeaseStorePort implementation.
    """

    elector: ElectorSettings
    store: MongoStoreSettings | None = None
