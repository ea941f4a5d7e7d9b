from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterator, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..exceptions import BlobNotFoundError, StorageError
from ..ids import BlobId
from ..models import (
    ACCESSED_ATTR_NAME,
    ID_ATTR_NAME,
    UPDATED_ATTR_NAME,
    BlobRecord,
)
from .settings import StoreSettings

logger = logging.getLogger(__name__)


class MongoBlobStore:
    """Blob store over a single MongoDB collection.

    Documents look like ``{_id, blob, created, updated, accessed}``. The client
    should be created with ``tz_aware=True``; naive datetimes are still read
    back as UTC.
    """

    def __init__(
        self,
        collection: Collection,
        *,
        client: Optional[MongoClient] = None,
        ensure_indexes: bool = True,
    ):
        self._collection = collection
        self._client = client
        if ensure_indexes:
            try:
                self._collection.create_index([(ACCESSED_ATTR_NAME, ASCENDING)])
            except PyMongoError as exc:
                raise StorageError("failed to create accessed index") from exc

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "MongoBlobStore":
        client = MongoClient(settings.resolved_mongo_url, tz_aware=True)
        collection = client[settings.mongo_database][settings.collection]
        return cls(collection, client=client)

    @property
    def collection(self) -> Collection:
        return self._collection

    def insert(self, record: BlobRecord) -> None:
        try:
            self._collection.insert_one(record.to_document())
        except PyMongoError as exc:
            raise StorageError(f"failed to insert blob {record.id}") from exc

    def find_by_id(self, blob_id: BlobId) -> Optional[BlobRecord]:
        try:
            doc = self._collection.find_one({ID_ATTR_NAME: blob_id})
        except PyMongoError as exc:
            raise StorageError(f"failed to find blob {blob_id}") from exc
        return BlobRecord.from_document(doc) if doc is not None else None

    def replace(self, old: BlobRecord, new: BlobRecord) -> None:
        # Matching on the old ``updated`` stamp turns a concurrent replace or
        # delete into a miss instead of a silent overwrite.
        try:
            result = self._collection.replace_one(
                {ID_ATTR_NAME: old.id, UPDATED_ATTR_NAME: old.updated},
                new.to_document(),
            )
        except PyMongoError as exc:
            raise StorageError(f"failed to replace blob {old.id}") from exc
        if result.matched_count == 0:
            raise BlobNotFoundError(old.id)

    def remove(self, record: BlobRecord) -> int:
        return self._delete_one(record, {ID_ATTR_NAME: record.id, UPDATED_ATTR_NAME: record.updated})

    def remove_expired(self, record: BlobRecord, cutoff: datetime) -> int:
        return self._delete_one(
            record,
            {
                ID_ATTR_NAME: record.id,
                UPDATED_ATTR_NAME: record.updated,
                ACCESSED_ATTR_NAME: {"$lt": cutoff},
            },
        )

    def _delete_one(self, record: BlobRecord, query: dict) -> int:
        try:
            result = self._collection.delete_one(query)
        except PyMongoError as exc:
            raise StorageError(f"failed to remove blob {record.id}") from exc
        if not result.acknowledged:
            return 0
        return int(result.deleted_count)

    def scan_accessed_before(self, cutoff: datetime) -> Iterator[BlobRecord]:
        try:
            cursor = self._collection.find({ACCESSED_ATTR_NAME: {"$lt": cutoff}})
        except PyMongoError as exc:
            raise StorageError("failed to scan for expired blobs") from exc
        return self._iter_cursor(cursor)

    @staticmethod
    def _iter_cursor(cursor) -> Iterator[BlobRecord]:
        try:
            for doc in cursor:
                yield BlobRecord.from_document(doc)
        except PyMongoError as exc:
            raise StorageError("cursor failed while scanning blobs") from exc
        finally:
            cursor.close()

    def set_accessed(self, blob_id: BlobId, accessed: datetime) -> None:
        try:
            self._collection.update_one(
                {ID_ATTR_NAME: blob_id},
                {"$set": {ACCESSED_ATTR_NAME: accessed}},
                upsert=False,
            )
        except PyMongoError as exc:
            raise StorageError(f"failed to set accessed time for blob {blob_id}") from exc

    def count(self) -> int:
        try:
            return int(self._collection.count_documents({}))
        except PyMongoError as exc:
            raise StorageError("failed to count blobs") from exc

    def close(self) -> None:
        if self._client is not None:
            logger.debug("closing mongo client")
            self._client.close()
