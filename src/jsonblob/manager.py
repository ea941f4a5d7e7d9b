from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from . import ids
from .app.settings import BlobSettings, get_blob_settings
from .batcher import AccessTimeBatcher
from .exceptions import BlobNotFoundError, InternalError
from .ids import BlobId
from .jobs.scheduler import PeriodicScheduler
from .models import BlobRecord, utc_now
from .obs.metrics import BlobMetrics
from .store.base import BlobStore
from .sweeper import CleanupSweeper
from .validation import ensure_valid_json

logger = logging.getLogger(__name__)

JsonText = Union[str, bytes, bytearray]


def _as_text(json: JsonText) -> str:
    if isinstance(json, (bytes, bytearray)):
        return bytes(json).decode("utf-8")
    return json


class BlobManager:
    """Create/read/update/delete JSON blobs and run their background upkeep.

    Reads queue the access time in an AccessTimeBatcher instead of writing it;
    the batcher is flushed every ``flush_interval`` and once more on stop().
    A CleanupSweeper removes blobs not read within ``blob_access_ttl`` every
    ``cleanup_frequency``, first run right after start().

    All CRUD methods are synchronous and safe to call from many threads.
    """

    def __init__(
        self,
        store: BlobStore,
        settings: Optional[BlobSettings] = None,
        *,
        metrics: Optional[BlobMetrics] = None,
        scheduler: Optional[PeriodicScheduler] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or get_blob_settings()
        self.store = store
        self.metrics = metrics or BlobMetrics()
        self.scheduler = scheduler or PeriodicScheduler()
        self._clock = clock
        self.batcher = AccessTimeBatcher(store)
        self.sweeper = CleanupSweeper(store, self.settings.blob_access_ttl, clock=clock)

    @property
    def blob_access_ttl(self) -> timedelta:
        return self.settings.blob_access_ttl

    # ---- lifecycle -------------------------------------------------------

    def start(self) -> None:
        if self.scheduler.running:
            return
        cfg = self.settings
        if not any(t.name == "blob-cleanup" for t in self.scheduler.tasks):
            self._schedule(cfg)
        self.scheduler.start()
        logger.info(
            "blob manager started (cleanup every %s, ttl %s)",
            cfg.cleanup_frequency,
            cfg.blob_access_ttl,
        )

    def _schedule(self, cfg: BlobSettings) -> None:
        self.scheduler.add_task(
            "blob-cleanup",
            cfg.cleanup_frequency.total_seconds(),
            self.sweeper.sweep,
            initial_delay=0,
        )
        self.scheduler.add_task(
            "access-flush",
            cfg.flush_interval.total_seconds(),
            self.flush_access_times,
            initial_delay=cfg.flush_interval.total_seconds(),
        )
        self.scheduler.add_task(
            "blob-count",
            cfg.blob_count_refresh.total_seconds(),
            self.refresh_blob_count,
        )

    def stop(self) -> None:
        self.scheduler.stop()
        self.flush_access_times()
        logger.info("blob manager stopped")

    def __enter__(self) -> "BlobManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def flush_access_times(self) -> int:
        return len(self.batcher.flush())

    def refresh_blob_count(self) -> int:
        count = self.store.count()
        self.metrics.set_blob_count(count)
        return count

    # ---- record level ----------------------------------------------------

    def _create(self, json: str) -> BlobRecord:
        with self.metrics.time("create"):
            logger.debug("inserting blob")
            record = BlobRecord.new(ids.mint(), json, now=self._clock())
            self.store.insert(record)
            logger.debug("successfully inserted blob of json as id='%s'", record.id)
            return record

    def _read(self, blob_id: BlobId) -> BlobRecord:
        with self.metrics.time("read"):
            logger.debug("attempting to retrieve blob with id='%s'", blob_id)
            record = self.store.find_by_id(blob_id)
            if record is None:
                logger.debug("couldn't retrieve blob with id='%s'", blob_id)
                raise BlobNotFoundError(blob_id)
            self.batcher.record_access(blob_id, self._clock())
            return record

    def _update(self, blob_id: BlobId, json: str) -> BlobRecord:
        with self.metrics.time("update"):
            logger.debug("attempting to update blob with id='%s'", blob_id)
            current = self.store.find_by_id(blob_id)
            if current is None:
                logger.debug("couldn't update blob with id='%s'", blob_id)
                raise BlobNotFoundError(blob_id)
            replacement = current.replaced(json, now=self._clock())
            self.store.replace(current, replacement)
            logger.debug("successfully updated blob of json with id='%s'", blob_id)
            return replacement

    def _delete(self, blob_id: BlobId) -> None:
        with self.metrics.time("delete"):
            logger.debug("attempting to delete blob with id='%s'", blob_id)
            current = self.store.find_by_id(blob_id)
            if current is None:
                logger.debug("couldn't remove blob with id='%s'", blob_id)
                raise BlobNotFoundError(blob_id)
            removed = self.store.remove(current)
            if not removed:
                logger.debug("did not remove any blob with id='%s'", blob_id)
                raise BlobNotFoundError(blob_id)
            logger.debug("successfully removed %d blob(s) with id='%s'", removed, blob_id)

    # ---- public contract -------------------------------------------------

    def create_blob(self, json: JsonText) -> str:
        ensure_valid_json(json)
        record = self._create(_as_text(json))
        if record.id is None:
            raise InternalError("Blob ID was null")
        return str(record.id)

    def get_blob(self, blob_id: str) -> str:
        return self._read(ids.parse(blob_id)).body

    def update_blob(self, blob_id: str, json: JsonText) -> bool:
        ensure_valid_json(json)
        self._update(ids.mint(blob_id), _as_text(json))
        return True

    def delete_blob(self, blob_id: str) -> bool:
        self._delete(ids.parse(blob_id))
        return True

    def blob_exists(self, blob_id: str) -> bool:
        if not ids.is_valid(blob_id):
            return False
        return self.store.find_by_id(ids.parse(blob_id)) is not None
