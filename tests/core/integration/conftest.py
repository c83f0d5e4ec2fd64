"""Pytest fixtures for leasekeeper MongoDB integration tests.

Set MONGODB_URI (e.g. mongodb://localhost:27017) to run them; they are
skipped otherwise. Each test gets its own collection, dropped afterwards.
"""

from __future__ import annotations

import os
import uuid
from typing import Any, Generator

import pytest

MONGODB_URI_ENV = "MONGODB_URI"


def _mongodb_uri() -> str | None:
    uri = os.environ.get(MONGODB_URI_ENV, "").strip()
    return uri or None


def pytest_collection_modifyitems(config: Any, items: list[pytest.Item]) -> None:
    """Skip integration tests when no MongoDB is configured."""
    if _mongodb_uri() is not None:
        return

    skip = pytest.mark.skip(reason=f"{MONGODB_URI_ENV} not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def mongo_client() -> Generator[Any, None, None]:
    """Session-wide client for the MongoDB at MONGODB_URI."""
    uri = _mongodb_uri()
    if uri is None:
        pytest.skip(f"{MONGODB_URI_ENV} not set")

    from pymongo import MongoClient

    client: Any = MongoClient(uri, tz_aware=True, serverSelectionTimeoutMS=3000)
    yield client
    client.close()


@pytest.fixture
def lease_collection(mongo_client: Any) -> Generator[Any, None, None]:
    """A fresh, uniquely named collection."""
    database = mongo_client["leasekeeper_test"]
    name = f"leases_{uuid.uuid4().hex[:8]}"
    yield database[name]
    database.drop_collection(name)
