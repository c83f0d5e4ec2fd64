"""Domain value objects for split-brain detection.

A split-brain is the condition where more than one candidate believes it is
the leader at the same instant. These value objects describe a snapshot of
what each candidate believes so the SplitBrainDetector can judge it.
"""

from __future__ import annotations

from dataclasses import dataclass

from leasekeeper.domain.exceptions import LeaseConfigError


@dataclass(frozen=True)
class CandidateView:
    """What a single candidate believes about its own leadership.

    Attributes:
        candidate_id: Identity of the candidate. Must be non-empty.
        is_leader: True if the candidate currently acts as leader.
    """

    candidate_id: str
    is_leader: bool

    def __post_init__(self) -> None:
        """Validate candidate view."""
        if not self.candidate_id or not self.candidate_id.strip():
            raise LeaseConfigError("candidate_id cannot be empty")


@dataclass(frozen=True)
class ClusterView:
    """Snapshot of every candidate's view of leadership.

    Attributes:
        candidates: Non-empty tuple of CandidateView objects.

    Invariants:
        - candidates is never empty
        - a healthy cluster has at most one leader
    """

    candidates: tuple[CandidateView, ...]

    def __post_init__(self) -> None:
        """Validate cluster view."""
        if not self.candidates:
            raise LeaseConfigError("candidates cannot be empty")

    def count_leaders(self) -> int:
        """Count candidates that believe they are the leader."""
        return sum(1 for candidate in self.candidates if candidate.is_leader)

    def get_leaders(self) -> list[CandidateView]:
        """Return all candidates that believe they are the leader."""
        return [candidate for candidate in self.candidates if candidate.is_leader]
