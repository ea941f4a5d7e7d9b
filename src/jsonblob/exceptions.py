from __future__ import annotations


class JsonBlobError(Exception):
    """Base class for every error raised by jsonblob.

    ``status_code`` is the HTTP status a resource layer should answer with.
    """

    status_code: int = 500


class InvalidInputError(JsonBlobError, ValueError):
    """Caller supplied malformed JSON or a malformed identifier."""

    status_code = 400


class InvalidIdentifierError(InvalidInputError):
    def __init__(self, value: object):
        super().__init__(f"Invalid blob id: {value!r}")
        self.value = value


class BlobNotFoundError(JsonBlobError, LookupError):
    status_code = 404

    def __init__(self, blob_id: object):
        super().__init__(f"Blob not found: {blob_id}")
        self.blob_id = str(blob_id)


class StorageError(JsonBlobError):
    """The underlying store failed an operation. The engine error is ``__cause__``."""


class InternalError(JsonBlobError):
    """An invariant was violated inside the manager."""
