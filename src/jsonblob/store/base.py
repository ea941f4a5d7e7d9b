from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional, Protocol

from ..ids import BlobId
from ..models import BlobRecord


class BlobStore(Protocol):
    """Persistence contract for blob records.

    Implementations:
      - never raise for a miss in ``find_by_id``; return None
      - raise StorageError when the engine fails
      - make ``replace`` conditional on the stored record still matching
        ``old`` (same id and ``updated`` stamp) and raise BlobNotFoundError
        otherwise
      - make ``remove`` match on the same id and ``updated`` stamp, returning 0
        when the record is gone or has been replaced
      - make ``remove_expired`` match like ``remove`` and additionally require
        ``accessed < cutoff``, so a blob read after the scan survives the sweep
      - return a one-shot lazy iterator from ``scan_accessed_before``
    """

    def insert(self, record: BlobRecord) -> None:
        ...

    def find_by_id(self, blob_id: BlobId) -> Optional[BlobRecord]:
        ...

    def replace(self, old: BlobRecord, new: BlobRecord) -> None:
        ...

    def remove(self, record: BlobRecord) -> int:
        ...

    def remove_expired(self, record: BlobRecord, cutoff: datetime) -> int:
        ...

    def scan_accessed_before(self, cutoff: datetime) -> Iterator[BlobRecord]:
        ...

    def set_accessed(self, blob_id: BlobId, accessed: datetime) -> None:
        ...

    def count(self) -> int:
        ...

    def close(self) -> None:
        ...
