"""Unit tests for factory functions."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from leasekeeper.adapters.memory_lease_store import InMemoryLeaseStore
from leasekeeper.adapters.mongo_lease_store import MongoLeaseStore
from leasekeeper.domain.exceptions import LeaseConfigError
from leasekeeper.domain.settings import (
    ElectorSettings,
    LeaseKeeperSettings,
    MongoStoreSettings,
)
from leasekeeper.factories import (
    create_elector,
    create_mongo_client,
    create_mongo_lease_store,
)
from leasekeeper.usecases.elector import Elector
from tests.core.unit.fakes import FakeMetricsAdapter, RecordingEventEmitter

STORE_SETTINGS = MongoStoreSettings(
    uri="mongodb://localhost:27017",
    database="app",
    collection="leases",
    lease_key="scheduler",
    operation_timeout=1.5,
    server_selection_timeout_ms=2000,
)


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.Factories.MongoLeaseStore")
class TestCreateMongoLeaseStore:
    def test_uses_given_client(self) -> None:
        client = MagicMock(name="client")

        store = create_mongo_lease_store(STORE_SETTINGS, client=client)

        assert isinstance(store, MongoLeaseStore)
        assert store.lease_key == "scheduler"
        client.__getitem__.assert_called_once_with("app")
        client.__getitem__.return_value.__getitem__.assert_called_once_with("leases")

    def test_creates_client_when_missing(self) -> None:
        with patch("pymongo.MongoClient") as mongo_client:
            store = create_mongo_lease_store(STORE_SETTINGS)

        mongo_client.assert_called_once_with(
            "mongodb://localhost:27017", tz_aware=True, serverSelectionTimeoutMS=2000
        )
        assert isinstance(store, MongoLeaseStore)

    def test_client_is_tz_aware_and_lazy(self) -> None:
        client = create_mongo_client(STORE_SETTINGS)
        try:
            assert client.codec_options.tz_aware is True
        finally:
            client.close()


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.Factories.Elector")
class TestCreateElector:
    def test_with_explicit_store(self) -> None:
        settings = LeaseKeeperSettings(elector=ElectorSettings("node-1"))
        events = RecordingEventEmitter()
        metrics = FakeMetricsAdapter()

        elector = create_elector(
            settings, InMemoryLeaseStore("scheduler"), event_emitter=events, metrics=metrics
        )
        elector.tick()

        assert isinstance(elector, Elector)
        assert elector.candidate_id == "node-1"
        assert elector.is_leader()
        assert len(events.events) == 1
        assert metrics.is_leader is True

    def test_with_configured_store(self) -> None:
        settings = LeaseKeeperSettings(ElectorSettings("node-1"), STORE_SETTINGS)

        with patch("pymongo.MongoClient"):
            elector = create_elector(settings)

        assert elector.candidate_id == "node-1"

    def test_store_required(self) -> None:
        settings = LeaseKeeperSettings(elector=ElectorSettings("node-1"))
        with pytest.raises(LeaseConfigError, match="lease store is required"):
            create_elector(settings)
