"""Interface adapters: lease store backends, event emitters and metrics."""

from leasekeeper.adapters.ports import (
    CandidateIDResolverPort,
    ClockPort,
    EnvironmentCandidateIDResolver,
    EventEmitterPort,
    LeadershipViewPort,
    LeaseStorePort,
    LoggingPort,
    SystemClock,
)
from leasekeeper.adapters.elector_cluster_view import ElectorClusterView
from leasekeeper.adapters.logging_event_emitter import (
    CallbackEventEmitter,
    LoggingEventEmitter,
)
from leasekeeper.adapters.memory_lease_store import InMemoryLeaseStore
from leasekeeper.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from leasekeeper.adapters.mongo_lease_store import MongoLeaseStore

__all__ = [
    "LeaseStorePort",
    "ClockPort",
    "SystemClock",
    "EventEmitterPort",
    "LoggingPort",
    "LeadershipViewPort",
    "CandidateIDResolverPort",
    "EnvironmentCandidateIDResolver",
    "ElectorClusterView",
    "LoggingEventEmitter",
    "CallbackEventEmitter",
    "InMemoryLeaseStore",
    "MongoLeaseStore",
    "MetricsPort",
    "NoOpMetricsAdapter",
]
