"""Factory functions for creating lease stores and electors.

Provides factory methods to instantiate the MongoDB lease store and wire
electors from settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from leasekeeper.adapters.mongo_lease_store import MongoLeaseStore
from leasekeeper.domain.exceptions import LeaseConfigError
from leasekeeper.usecases.elector import Elector

if TYPE_CHECKING:
    from pymongo import MongoClient

    from leasekeeper.adapters.metrics_port import MetricsPort
    from leasekeeper.adapters.ports import EventEmitterPort, LeaseStorePort
    from leasekeeper.domain.settings import LeaseKeeperSettings, MongoStoreSettings


def create_mongo_client(settings: MongoStoreSettings) -> MongoClient[Any]:
    """Create a timezone-aware MongoClient for settings.uri.

    The client connects lazily; no network I/O happens here.
    """
    from pymongo import MongoClient

    return MongoClient(
        settings.uri,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )


def create_mongo_lease_store(
    settings: MongoStoreSettings,
    client: MongoClient[Any] | None = None,
) -> MongoLeaseStore:
    """Create a MongoLeaseStore from MongoStoreSettings.

    Args:
        settings: Store settings.
        client: Existing client to reuse. A new one is created if omitted.

    Returns:
        A MongoLeaseStore bound to settings.database / settings.collection.

    Example:
        >>> settings = MongoStoreSettings(
        ...     uri="mongodb://localhost:27017",
        ...     database="app",
        ...     collection="leases",
        ...     lease_key="scheduler",
        ... )
        >>> store = create_mongo_lease_store(settings)
    """
    if client is None:
        client = create_mongo_client(settings)

    collection = client[settings.database][settings.collection]
    return MongoLeaseStore(
        collection,
        settings.lease_key,
        operation_timeout=settings.operation_timeout,
    )


def create_elector(
    settings: LeaseKeeperSettings,
    store: LeaseStorePort | None = None,
    *,
    event_emitter: EventEmitterPort | None = None,
    metrics: MetricsPort | None = None,
) -> Elector:
    """Create an Elector from LeaseKeeperSettings.

    Args:
        settings: Top-level settings. settings.store is used to build a
                 MongoLeaseStore when store is not given.
        store: Lease store to use instead of the configured one.
        event_emitter: Optional observer of election events.
        metrics: Optional metrics port.

    Raises:
        LeaseConfigError: If neither store nor settings.store is provided.
    """
    if store is None:
        if settings.store is None:
            raise LeaseConfigError(
                "a lease store is required: pass store= or configure settings.store"
            )
        store = create_mongo_lease_store(settings.store)

    return Elector(
        settings.elector,
        store,
        event_emitter=event_emitter,
        metrics=metrics,
    )
