"""
Root conftest.py for jsonblob tests.

This file provides:
1. Common pytest markers for test categorization
2. A controllable clock so timestamp assertions are deterministic
3. Store, manager and mock Mongo collection fixtures
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from jsonblob.app.settings import BlobSettings
from jsonblob.manager import BlobManager
from jsonblob.obs.metrics import BlobMetrics
from jsonblob.store.memory import InMemoryBlobStore


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    # Ensure custom markers are registered even if pyproject.toml isn't picked up in some contexts
    for name, desc in [
        ("jobs", "Background jobs and scheduling tests"),
        ("storage", "Blob store engine tests"),
        ("concurrency", "Locking and concurrent access tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# CLOCK
# =============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# STORE / MANAGER FIXTURES
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def blob_settings() -> BlobSettings:
    return BlobSettings(
        cleanup_frequency=timedelta(hours=1),
        blob_access_ttl=timedelta(days=30),
        flush_interval=timedelta(minutes=1),
        blob_count_refresh=timedelta(hours=1),
    )


@pytest.fixture
def metrics() -> BlobMetrics:
    return BlobMetrics(CollectorRegistry())


@pytest.fixture
def manager(memory_store, blob_settings, metrics, clock) -> BlobManager:
    return BlobManager(memory_store, blob_settings, metrics=metrics, clock=clock)


@pytest.fixture
def mock_mongo_collection():
    """Create a mock pymongo collection for testing."""
    collection = Mock()
    collection.insert_one = Mock()
    collection.find_one = Mock(return_value=None)
    collection.find = Mock()
    collection.replace_one = Mock()
    collection.update_one = Mock()
    collection.delete_one = Mock()
    collection.count_documents = Mock(return_value=0)
    collection.create_index = Mock(return_value="accessed_1")
    return collection
