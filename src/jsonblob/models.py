from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .ids import BlobId

ID_ATTR_NAME = "_id"
BLOB_ATTR_NAME = "blob"
CREATED_ATTR_NAME = "created"
UPDATED_ATTR_NAME = "updated"
ACCESSED_ATTR_NAME = "accessed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes coming back from an engine."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class BlobRecord:
    id: BlobId
    body: str
    created: datetime
    updated: datetime
    accessed: datetime

    @classmethod
    def new(cls, id: BlobId, body: str, *, now: Optional[datetime] = None) -> "BlobRecord":
        ts = now or utc_now()
        return cls(id=id, body=body, created=ts, updated=ts, accessed=ts)

    def replaced(self, body: str, *, now: Optional[datetime] = None) -> "BlobRecord":
        """New content under the same id; ``created`` is kept."""
        ts = now or utc_now()
        return replace(self, body=body, updated=ts, accessed=ts)

    def with_accessed(self, accessed: datetime) -> "BlobRecord":
        return replace(self, accessed=accessed)

    def to_document(self) -> Dict[str, Any]:
        return {
            ID_ATTR_NAME: self.id,
            BLOB_ATTR_NAME: self.body,
            CREATED_ATTR_NAME: self.created,
            UPDATED_ATTR_NAME: self.updated,
            ACCESSED_ATTR_NAME: self.accessed,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "BlobRecord":
        return cls(
            id=doc[ID_ATTR_NAME],
            body=doc[BLOB_ATTR_NAME],
            created=as_utc(doc[CREATED_ATTR_NAME]),
            updated=as_utc(doc[UPDATED_ATTR_NAME]),
            accessed=as_utc(doc[ACCESSED_ATTR_NAME]),
        )
