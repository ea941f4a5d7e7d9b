from __future__ import annotations

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from .exceptions import InvalidIdentifierError

BlobId = ObjectId


def mint(seed: Optional[str] = None) -> BlobId:
    """
    Produce a blob identifier.

    Without a seed a fresh ObjectId is generated. With a seed the id is derived
    from it deterministically; the seed has to fit the 12-byte ObjectId shape
    (24 hex characters), otherwise InvalidIdentifierError is raised.
    """
    if seed is None:
        return ObjectId()
    return parse(seed)


def parse(text: object) -> BlobId:
    if isinstance(text, ObjectId):
        return text
    if not isinstance(text, str):
        raise InvalidIdentifierError(text)
    try:
        return ObjectId(text.strip())
    except (InvalidId, TypeError) as exc:
        raise InvalidIdentifierError(text) from exc


def is_valid(text: object) -> bool:
    return isinstance(text, str) and ObjectId.is_valid(text.strip())
