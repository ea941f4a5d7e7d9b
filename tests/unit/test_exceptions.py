from __future__ import annotations

from jsonblob.exceptions import (
    BlobNotFoundError,
    InternalError,
    InvalidIdentifierError,
    InvalidInputError,
    JsonBlobError,
    StorageError,
)


def test_status_codes_map_error_kinds():
    assert InvalidInputError("bad").status_code == 400
    assert InvalidIdentifierError("x").status_code == 400
    assert BlobNotFoundError("abc").status_code == 404
    assert StorageError("down").status_code == 500
    assert InternalError("oops").status_code == 500


def test_hierarchy():
    for cls in (InvalidInputError, BlobNotFoundError, StorageError, InternalError):
        assert issubclass(cls, JsonBlobError)
    assert issubclass(InvalidIdentifierError, InvalidInputError)
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(BlobNotFoundError, LookupError)


def test_not_found_keeps_id():
    err = BlobNotFoundError("5f1d7a2b9c3e4d5f6a7b8c9d")
    assert err.blob_id == "5f1d7a2b9c3e4d5f6a7b8c9d"
    assert "not found" in str(err).lower()
