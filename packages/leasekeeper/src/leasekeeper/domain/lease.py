"""Lease domain entity.

The lease is the single shared record that names the current leader for a
lease key. Every state change produces a new immutable instance; stores only
ever persist whole records.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from leasekeeper.domain.exceptions import InvalidLeaseError

# Holder identity of a lease that was explicitly released.
UNHELD = ""


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision, the resolution BSON dates keep."""
    return moment.replace(microsecond=moment.microsecond - moment.microsecond % 1000)


@dataclass(frozen=True)
class Lease:
    """Ownership record for a single lease key.

    Value object describing who holds the elected role, since when, and for
    how long the claim is valid without renewal.

    Attributes:
        holder_identity: Candidate currently (or most recently) holding the
                        lease. Empty string means unheld.
        acquire_time: When the current holder last acquired the lease
                     (as opposed to renewed it). Timezone-aware.
        renew_time: Most recent successful renewal. Timezone-aware.
        lease_duration: Seconds after renew_time at which the lease expires.
        leader_transitions: Number of times a different candidate acquired
                           the lease. Observability only.

    Invariants:
        - renew_time >= acquire_time
        - lease_duration > 0
        - leader_transitions >= 0
    """

    holder_identity: str
    acquire_time: datetime
    renew_time: datetime
    lease_duration: float
    leader_transitions: int = 0

    def __post_init__(self) -> None:
        """Validate lease invariants."""
        self._validate_timestamps()
        self._validate_lease_duration()
        self._validate_leader_transitions()

    def _validate_timestamps(self) -> None:
        """Validate timestamps are timezone-aware and ordered."""
        if self.acquire_time.tzinfo is None or self.renew_time.tzinfo is None:
            raise InvalidLeaseError("lease timestamps must be timezone-aware")

        if self.renew_time < self.acquire_time:
            raise InvalidLeaseError(
                f"renew_time must not precede acquire_time, got: "
                f"{self.renew_time.isoformat()} < {self.acquire_time.isoformat()}"
            )

    def _validate_lease_duration(self) -> None:
        """Validate lease_duration is positive."""
        if self.lease_duration <= 0:
            raise InvalidLeaseError(
                f"lease_duration must be positive, got: {self.lease_duration}"
            )

    def _validate_leader_transitions(self) -> None:
        """Validate leader_transitions is non-negative."""
        if self.leader_transitions < 0:
            raise InvalidLeaseError(
                f"leader_transitions cannot be negative, got: {self.leader_transitions}"
            )

    @classmethod
    def initial(cls, holder_identity: str, now: datetime, lease_duration: float) -> Lease:
        """Build the first record for a key, held by holder_identity.

        The first acquisition counts as a transition from "no holder".
        """
        return cls(
            holder_identity=holder_identity,
            acquire_time=now,
            renew_time=now,
            lease_duration=lease_duration,
            leader_transitions=1,
        )

    @property
    def expires_at(self) -> datetime:
        """Instant after which the lease is expired without renewal."""
        return self.renew_time + timedelta(seconds=self.lease_duration)

    def is_held(self) -> bool:
        """Check if any candidate holds the lease."""
        return self.holder_identity != UNHELD

    def is_held_by(self, identity: str) -> bool:
        """Check if identity is the recorded holder."""
        return self.is_held() and self.holder_identity == identity

    def is_expired(self, now: datetime) -> bool:
        """Check if now - renew_time > lease_duration."""
        return now > self.expires_at

    def renewed(self, now: datetime, lease_duration: float | None = None) -> Lease:
        """Return a renewal of this lease by its current holder.

        acquire_time and leader_transitions are kept. When lease_duration is
        given it replaces the stored one, so a holder restarted with a new
        duration writes it on its next renewal.
        renew_time never moves before acquire_time, even if the local clock
        is behind the clock that wrote the record.
        """
        if lease_duration is None:
            lease_duration = self.lease_duration
        return replace(
            self, renew_time=max(now, self.acquire_time), lease_duration=lease_duration
        )

    def acquired_by(
        self, holder_identity: str, now: datetime, lease_duration: float
    ) -> Lease:
        """Return this lease claimed by holder_identity.

        leader_transitions increases by one when the holder changes (including
        a claim of a released lease) and is unchanged when the recorded holder
        re-acquires its own lease.
        """
        transitions = self.leader_transitions
        if holder_identity != self.holder_identity:
            transitions += 1

        return Lease(
            holder_identity=holder_identity,
            acquire_time=now,
            renew_time=now,
            lease_duration=lease_duration,
            leader_transitions=transitions,
        )

    def released(self, now: datetime) -> Lease:
        """Return this lease with its holder cleared.

        A released lease is immediately acquirable. leader_transitions is left
        untouched; the next acquirer increments it.
        """
        return replace(self, holder_identity=UNHELD, renew_time=max(now, self.acquire_time))
