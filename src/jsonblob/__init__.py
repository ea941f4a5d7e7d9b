from . import ids

# Base exception and error kinds
from .exceptions import (
    BlobNotFoundError,
    InternalError,
    InvalidIdentifierError,
    InvalidInputError,
    JsonBlobError,
    StorageError,
)

# Core
from .batcher import AccessTimeBatcher
from .manager import BlobManager
from .models import BlobRecord
from .sweeper import CleanupSweeper, SweepResult
from .validation import is_valid_json

# Stores
from .store import BlobStore, InMemoryBlobStore, MongoBlobStore, SqlBlobStore, easy_store

__all__ = [
    # Modules
    "ids",
    # Errors
    "JsonBlobError",
    "InvalidInputError",
    "InvalidIdentifierError",
    "BlobNotFoundError",
    "StorageError",
    "InternalError",
    # Core
    "BlobManager",
    "BlobRecord",
    "AccessTimeBatcher",
    "CleanupSweeper",
    "SweepResult",
    "is_valid_json",
    # Stores
    "BlobStore",
    "InMemoryBlobStore",
    "MongoBlobStore",
    "SqlBlobStore",
    "easy_store",
]
