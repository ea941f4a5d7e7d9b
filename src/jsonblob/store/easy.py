from __future__ import annotations

import logging
from typing import Optional

from .base import BlobStore
from .memory import InMemoryBlobStore
from .settings import StoreSettings, get_store_settings

logger = logging.getLogger(__name__)


def easy_store(settings: Optional[StoreSettings] = None) -> BlobStore:
    """Build the blob store selected by ``settings.backend`` (env driven by default)."""
    cfg = settings or get_store_settings()
    logger.info("using %s blob store", cfg.backend)
    if cfg.backend == "mongo":
        from .mongo import MongoBlobStore

        return MongoBlobStore.from_settings(cfg)
    if cfg.backend == "sql":
        from .sql import SqlBlobStore

        return SqlBlobStore.from_settings(cfg)
    return InMemoryBlobStore()
