from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, Iterator, Optional

from ..exceptions import BlobNotFoundError, StorageError
from ..ids import BlobId
from ..models import BlobRecord


class InMemoryBlobStore:
    """Dict-backed blob store for tests/dev only."""

    def __init__(self) -> None:
        self._records: Dict[BlobId, BlobRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: BlobRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise StorageError(f"duplicate blob id {record.id}")
            self._records[record.id] = record

    def find_by_id(self, blob_id: BlobId) -> Optional[BlobRecord]:
        with self._lock:
            return self._records.get(blob_id)

    def replace(self, old: BlobRecord, new: BlobRecord) -> None:
        with self._lock:
            current = self._records.get(old.id)
            if current is None or current.updated != old.updated:
                raise BlobNotFoundError(old.id)
            self._records[old.id] = new

    def remove(self, record: BlobRecord) -> int:
        with self._lock:
            current = self._records.get(record.id)
            if current is None or current.updated != record.updated:
                return 0
            del self._records[record.id]
            return 1

    def remove_expired(self, record: BlobRecord, cutoff: datetime) -> int:
        with self._lock:
            current = self._records.get(record.id)
            if current is None or current.updated != record.updated or current.accessed >= cutoff:
                return 0
            del self._records[record.id]
            return 1

    def scan_accessed_before(self, cutoff: datetime) -> Iterator[BlobRecord]:
        with self._lock:
            matched = [r for r in self._records.values() if r.accessed < cutoff]
        return iter(matched)

    def set_accessed(self, blob_id: BlobId, accessed: datetime) -> None:
        with self._lock:
            current = self._records.get(blob_id)
            if current is not None:
                self._records[blob_id] = current.with_accessed(accessed)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def close(self) -> None:
        return None
