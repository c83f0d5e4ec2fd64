"""Domain layer: Entities with zero external dependencies."""

from leasekeeper.domain.events import ElectionEvent, ElectionEventType
from leasekeeper.domain.exceptions import (
    ElectorStateError,
    InvalidLeaseError,
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseKeeperError,
    LeaseNotFoundError,
    LeaseStoreError,
)
from leasekeeper.domain.lease import UNHELD, Lease
from leasekeeper.domain.retry import RetryPolicy
from leasekeeper.domain.settings import (
    ElectorSettings,
    LeaseKeeperSettings,
    MongoStoreSettings,
)
from leasekeeper.domain.split_brain import CandidateView, ClusterView

__all__ = [
    "Lease",
    "UNHELD",
    "ElectorSettings",
    "MongoStoreSettings",
    "LeaseKeeperSettings",
    "RetryPolicy",
    "ElectionEvent",
    "ElectionEventType",
    "CandidateView",
    "ClusterView",
    "LeaseKeeperError",
    "LeaseConfigError",
    "InvalidLeaseError",
    "ElectorStateError",
    "LeaseNotFoundError",
    "LeaseAlreadyExistsError",
    "LeaseStoreError",
]
