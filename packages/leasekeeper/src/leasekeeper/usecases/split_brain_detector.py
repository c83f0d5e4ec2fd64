"""SplitBrainDetector use case for detecting split-brain scenarios.

A split-brain occurs when more than one candidate believes it is the leader
at the same instant, for example because a store accepted two conflicting
writes or a leader kept acting after its lease expired. This use case
detects such scenarios from a snapshot of every candidate's belief.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from leasekeeper.domain.split_brain import CandidateView

if TYPE_CHECKING:
    from leasekeeper.adapters.metrics_port import MetricsPort
    from leasekeeper.adapters.ports import LeadershipViewPort, LoggingPort


@dataclass(frozen=True)
class SplitBrainStatus:
    """Result of split-brain detection.

    Attributes:
        is_split_brain: True if 2+ candidates believe they lead.
        leaders: Every candidate that believes it leads. Empty during a
                handover, one entry when healthy.
    """

    is_split_brain: bool
    leaders: tuple[CandidateView, ...]

    @property
    def leader_ids(self) -> list[str]:
        """Identities of all self-believed leaders."""
        return [leader.candidate_id for leader in self.leaders]


class SplitBrainDetector:
    """Detects split-brain scenarios among election candidates.

    A healthy cluster has at most one leader. Zero leaders is a normal,
    transient state between a release or expiry and the next acquisition.

    Dependencies:
        - LeadershipViewPort: Provides each candidate's leadership belief
        - MetricsPort (optional): Receives the split-brain gauge
        - LoggingPort (optional): Receives a warning when split-brain is found
    """

    def __init__(
        self,
        port: LeadershipViewPort,
        metrics: MetricsPort | None = None,
        logger: LoggingPort | None = None,
    ) -> None:
        """Initialize the split-brain detector.

        Args:
            port: Source of the cluster leadership view.
            metrics: Optional port for emitting split-brain detection metrics.
            logger: Optional port for split-brain warnings.
        """
        self.port = port
        self._metrics = metrics
        self._logger = logger

    def detect_split_brain(self) -> SplitBrainStatus:
        """Detect if a split-brain condition exists.

        Returns:
            SplitBrainStatus with the detection result and all leaders.

        Raises:
            May propagate exceptions from port if the view cannot be assembled.
        """
        view = self.port.get_cluster_view()
        leaders = tuple(view.get_leaders())
        is_split_brain = len(leaders) > 1

        if self._metrics is not None:
            self._metrics.set_split_brain_detected(is_split_brain)

        if is_split_brain and self._logger is not None:
            ids = ", ".join(leader.candidate_id for leader in leaders)
            self._logger.warning(
                f"Split-brain detected: {len(leaders)} candidates believe they lead ({ids})"
            )

        return SplitBrainStatus(is_split_brain=is_split_brain, leaders=leaders)
