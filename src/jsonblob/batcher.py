from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Dict, List, Tuple

from .ids import BlobId
from .store.base import BlobStore

logger = logging.getLogger(__name__)


class AccessTimeBatcher:
    """Buffers last-accessed timestamps and writes them back in batches.

    One pending value per blob id; a later access overwrites the earlier one.
    The lock only ever guards the in-memory map, store writes happen after it
    is released.
    """

    def __init__(self, store: BlobStore):
        self._store = store
        self._pending: Dict[BlobId, datetime] = {}
        self._lock = threading.Lock()
        self.last_failures: List[Tuple[BlobId, Exception]] = []

    def record_access(self, blob_id: BlobId, accessed: datetime) -> None:
        with self._lock:
            self._pending[blob_id] = accessed

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def pending(self) -> Dict[BlobId, datetime]:
        with self._lock:
            return dict(self._pending)

    def flush(self) -> Dict[BlobId, datetime]:
        with self._lock:
            drained, self._pending = self._pending, {}

        failures: List[Tuple[BlobId, Exception]] = []
        logger.debug("updating last accessed time for %d blobs", len(drained))
        for blob_id, accessed in drained.items():
            try:
                self._store.set_accessed(blob_id, accessed)
            except Exception as exc:
                logger.warning(
                    "failed to update last accessed time for blob with id='%s'",
                    blob_id,
                    exc_info=True,
                    extra={"blob_id": str(blob_id)},
                )
                failures.append((blob_id, exc))
            else:
                logger.debug("updated last accessed time for blob with id='%s' to %s", blob_id, accessed)
        if failures:
            logger.error("%d of %d last accessed updates failed", len(failures), len(drained))
        self.last_failures = failures
        return drained
