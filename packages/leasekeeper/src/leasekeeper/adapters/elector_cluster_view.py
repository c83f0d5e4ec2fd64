"""LeadershipViewPort over a group of in-process electors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from leasekeeper.domain.split_brain import CandidateView, ClusterView

if TYPE_CHECKING:
    from collections.abc import Iterable


class _LeadershipReporter(Protocol):
    @property
    def candidate_id(self) -> str: ...

    def is_leader(self) -> bool: ...


class ElectorClusterView:
    """Snapshot the leadership belief of each elector in a group.

    Useful when several candidates share one process (tests, local
    development); each elector is asked is_leader() at snapshot time.
    """

    def __init__(self, electors: Iterable[_LeadershipReporter]) -> None:
        self._electors = list(electors)

    def get_cluster_view(self) -> ClusterView:
        """Return what every elector currently believes."""
        return ClusterView(
            candidates=tuple(
                CandidateView(candidate_id=e.candidate_id, is_leader=e.is_leader())
                for e in self._electors
            )
        )
