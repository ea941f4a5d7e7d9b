from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from .models import utc_now
from .store.base import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    scanned: int = 0
    removed: int = 0
    skipped: int = 0
    failed: int = 0


class CleanupSweeper:
    """Deletes blobs whose last access is older than ``ttl``."""

    def __init__(
        self,
        store: BlobStore,
        ttl: timedelta,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        cutoff = (now or self._clock()) - self._ttl
        result = SweepResult()
        logger.info("removing blobs not accessed since %s", cutoff.isoformat())
        try:
            for record in self._store.scan_accessed_before(cutoff):
                result.scanned += 1
                try:
                    removed = self._store.remove_expired(record, cutoff)
                except Exception:
                    result.failed += 1
                    logger.warning(
                        "failed to remove expired blob with id='%s'",
                        record.id,
                        exc_info=True,
                        extra={"blob_id": str(record.id)},
                    )
                    continue
                if removed:
                    result.removed += removed
                    logger.debug("removed expired blob with id='%s'", record.id)
                else:
                    # deleted, replaced or read since the scan
                    result.skipped += 1
        except Exception:
            logger.exception("blob cleanup scan aborted after %d blobs", result.scanned)
        logger.info(
            "blob cleanup done: scanned=%d removed=%d skipped=%d failed=%d",
            result.scanned,
            result.removed,
            result.skipped,
            result.failed,
        )
        return result

    def __call__(self) -> None:
        self.sweep()
