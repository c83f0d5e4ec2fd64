"""leasekeeper-py: Lease-based leader election over a pluggable lease store."""

__version__ = "0.1.0"

from leasekeeper.domain.exceptions import (
    LeaseAlreadyExistsError,
    LeaseConfigError,
    LeaseKeeperError,
    LeaseNotFoundError,
    LeaseStoreError,
)
from leasekeeper.domain.lease import Lease
from leasekeeper.domain.settings import ElectorSettings, MongoStoreSettings
from leasekeeper.usecases.elector import Elector, ElectorState

__all__ = [
    "Lease",
    "ElectorSettings",
    "MongoStoreSettings",
    "Elector",
    "ElectorState",
    "LeaseKeeperError",
    "LeaseConfigError",
    "LeaseNotFoundError",
    "LeaseAlreadyExistsError",
    "LeaseStoreError",
]
