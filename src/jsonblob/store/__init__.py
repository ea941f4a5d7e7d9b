# Public store API exports
from .base import BlobStore
from .easy import easy_store
from .memory import InMemoryBlobStore
from .mongo import MongoBlobStore
from .settings import StoreSettings, get_store_settings
from .sql import SqlBlobStore

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "MongoBlobStore",
    "SqlBlobStore",
    "StoreSettings",
    "get_store_settings",
    "easy_store",
]
