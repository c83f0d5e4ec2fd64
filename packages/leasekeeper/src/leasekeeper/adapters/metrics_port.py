"""Port interface and no-op implementation for metrics collection.

Metrics ports follow fire-and-forget semantics: implementations may
buffer, sample, or drop metrics as needed. No exceptions should propagate.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsPort(Protocol):
    """Port interface for election metrics.

    Contract:
        - All methods are fire-and-forget (no return value, no exceptions)
        - set_* methods update gauges to specific values
        - record_* methods increment counters
        - Implementations may no-op if metrics are disabled
    """

    def set_leader(self, is_leader: bool) -> None:
        """Set the leadership gauge.

        Args:
            is_leader: True if this candidate leads (1), False otherwise (0).
        """
        ...

    def set_leader_transitions(self, transitions: int) -> None:
        """Set the gauge mirroring the lease's leader_transitions field.

        Args:
            transitions: Value last observed in the lease record.
        """
        ...

    def set_split_brain_detected(self, detected: bool) -> None:
        """Set the split-brain detection gauge.

        Args:
            detected: True if split-brain detected (1), False otherwise (0).
        """
        ...

    def record_store_error(self, operation: str) -> None:
        """Count a failed store call.

        Args:
            operation: Store operation that failed ("get", "create", "update").
        """
        ...


class NoOpMetricsAdapter:
    """No-operation metrics adapter for when metrics are disabled.

    All methods are no-ops. This allows use cases to unconditionally
    call metrics methods without checking if metrics are enabled.
    """

    def set_leader(self, is_leader: bool) -> None:
        """No-op."""
        pass

    def set_leader_transitions(self, transitions: int) -> None:
        """No-op."""
        pass

    def set_split_brain_detected(self, detected: bool) -> None:
        """No-op."""
        pass

    def record_store_error(self, operation: str) -> None:
        """No-op."""
        pass
