"""Prometheus metrics adapter for leasekeeper.

Implements MetricsPort using prometheus-client library.
Gracefully handles missing prometheus-client (raises ImportError at init).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry, Counter, Gauge


class PrometheusMetricsAdapter:
    """Prometheus implementation of MetricsPort.

    All metrics use a configurable prefix (default 'leasekeeper_') and carry
    a candidate label so several electors can share one registry.

    This adapter requires prometheus-client to be installed:
        pip install leasekeeper-py[metrics]

    Example:
        >>> adapter = PrometheusMetricsAdapter(candidate_id="node-1")
        >>> adapter.set_leader(True)  # leasekeeper_is_leader{candidate="node-1"} 1

    Raises:
        ImportError: If prometheus-client is not installed.
    """

    def __init__(
        self,
        candidate_id: str,
        prefix: str = "leasekeeper",
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize Prometheus metrics.

        Args:
            candidate_id: Value of the candidate label.
            prefix: Metric name prefix. Defaults to "leasekeeper".
            registry: Registry to register with. Defaults to the global registry.

        Raises:
            ImportError: If prometheus-client is not installed.
        """
        # Import here to make prometheus-client optional
        from prometheus_client import REGISTRY, Counter, Gauge

        registry = registry if registry is not None else REGISTRY
        self._candidate_id = candidate_id

        self._is_leader: Gauge = Gauge(
            f"{prefix}_is_leader",
            "Leadership status: 1=leader, 0=not leader",
            ["candidate"],
            registry=registry,
        )
        self._leader_transitions: Gauge = Gauge(
            f"{prefix}_leader_transitions",
            "leader_transitions value last observed in the lease record",
            ["candidate"],
            registry=registry,
        )
        self._split_brain_detected: Gauge = Gauge(
            f"{prefix}_split_brain_detected",
            "Split-brain detected: 1=yes, 0=no",
            ["candidate"],
            registry=registry,
        )
        self._store_errors: Counter = Counter(
            f"{prefix}_store_errors",
            "Failed lease store calls by operation",
            ["candidate", "operation"],
            registry=registry,
        )

    def set_leader(self, is_leader: bool) -> None:
        """Set leadership gauge (1 leader, 0 otherwise)."""
        self._is_leader.labels(candidate=self._candidate_id).set(1 if is_leader else 0)

    def set_leader_transitions(self, transitions: int) -> None:
        """Set leader transitions gauge."""
        self._leader_transitions.labels(candidate=self._candidate_id).set(transitions)

    def set_split_brain_detected(self, detected: bool) -> None:
        """Set split-brain detection gauge (1 detected, 0 otherwise)."""
        self._split_brain_detected.labels(candidate=self._candidate_id).set(
            1 if detected else 0
        )

    def record_store_error(self, operation: str) -> None:
        """Increment the store error counter for operation."""
        self._store_errors.labels(
            candidate=self._candidate_id, operation=operation
        ).inc()
