from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from jsonblob.obs.metrics import BlobMetrics


def test_time_observes_operation():
    registry = CollectorRegistry()
    metrics = BlobMetrics(registry)

    with metrics.time("read"):
        pass

    assert registry.get_sample_value("jsonblob_operation_seconds_count", {"operation": "read"}) == 1
    assert registry.get_sample_value("jsonblob_operation_seconds_count", {"operation": "create"}) == 0


def test_time_still_observes_when_operation_raises():
    registry = CollectorRegistry()
    metrics = BlobMetrics(registry)

    with pytest.raises(KeyError):
        with metrics.time("delete"):
            raise KeyError("x")

    assert registry.get_sample_value("jsonblob_operation_seconds_count", {"operation": "delete"}) == 1


def test_unknown_operation_is_rejected():
    with pytest.raises(ValueError):
        with BlobMetrics(CollectorRegistry()).time("list"):
            pass


def test_blob_count_gauge():
    registry = CollectorRegistry()
    metrics = BlobMetrics(registry)
    metrics.set_blob_count(12)
    assert registry.get_sample_value("jsonblob_blob_count") == 12


def test_registries_are_independent():
    BlobMetrics(CollectorRegistry())
    BlobMetrics(CollectorRegistry())


def test_same_registry_shares_collectors():
    registry = CollectorRegistry()
    first = BlobMetrics(registry)
    second = BlobMetrics(registry)

    with first.time("create"):
        pass
    with second.time("create"):
        pass

    assert first.operation_seconds is second.operation_seconds
    assert registry.get_sample_value("jsonblob_operation_seconds_count", {"operation": "create"}) == 2
