from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Gauge, Histogram

OPERATIONS = ("create", "read", "update", "delete")

# registry -> namespace -> collectors; a registry rejects a second collector
# with the same name, so every BlobMetrics on it shares the first pair.
_collectors: "weakref.WeakKeyDictionary[CollectorRegistry, dict[str, Tuple[Histogram, Gauge]]]" = (
    weakref.WeakKeyDictionary()
)
_collectors_lock = threading.Lock()


def _get_collectors(registry: CollectorRegistry, namespace: str) -> Tuple[Histogram, Gauge]:
    with _collectors_lock:
        per_registry = _collectors.setdefault(registry, {})
        found = per_registry.get(namespace)
        if found is None:
            found = (
                Histogram(
                    "operation_seconds",
                    "Time spent in blob manager operations",
                    labelnames=("operation",),
                    namespace=namespace,
                    registry=registry,
                ),
                Gauge(
                    "blob_count",
                    "Number of stored blobs at the last refresh",
                    namespace=namespace,
                    registry=registry,
                ),
            )
            per_registry[namespace] = found
        return found


class BlobMetrics:
    """Per-operation timers and a blob count gauge for the blob manager.

    Instances built on the same registry and namespace share one set of
    collectors, so any number of managers can use the default registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, *, namespace: str = "jsonblob"):
        registry = registry if registry is not None else REGISTRY
        self.registry = registry
        self.operation_seconds, self.blob_count = _get_collectors(registry, namespace)
        for op in OPERATIONS:
            self.operation_seconds.labels(operation=op)

    @contextmanager
    def time(self, operation: str) -> Iterator[None]:
        if operation not in OPERATIONS:
            raise ValueError(f"unknown operation {operation!r}")
        with self.operation_seconds.labels(operation=operation).time():
            yield

    def set_blob_count(self, count: int) -> None:
        self.blob_count.set(count)
