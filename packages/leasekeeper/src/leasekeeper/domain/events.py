"""Domain events for leader election state transitions.

Events are immutable value objects emitted by the Elector. They follow the
frozen dataclass pattern used throughout the domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ElectionEventType(Enum):
    """Types of election events that can be emitted.

    Attributes:
        STARTED_LEADING: This candidate acquired the lease.
        STOPPED_LEADING: This candidate no longer acts as leader.
        NEW_LEADER_OBSERVED: A different holder was observed in the record.
        LEASE_RELEASED: This candidate cleared the holder on shutdown.
        RENEWAL_FAILED: A renewal could not be confirmed.
    """

    STARTED_LEADING = "started_leading"
    STOPPED_LEADING = "stopped_leading"
    NEW_LEADER_OBSERVED = "new_leader_observed"
    LEASE_RELEASED = "lease_released"
    RENEWAL_FAILED = "renewal_failed"


@dataclass(frozen=True)
class ElectionEvent:
    """Immutable event representing an election state transition.

    Attributes:
        event_type: The type of election event that occurred.
        candidate_id: Candidate that emitted the event.
        holder_identity: Lease holder as observed when the event fired.
                        Empty when the lease is unheld or unknown.
        reason: Optional human-readable reason for the event.
    """

    event_type: ElectionEventType
    candidate_id: str
    holder_identity: str = ""
    reason: str | None = None
