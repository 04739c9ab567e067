"""Error taxonomy for collection, markdown and image operations.

Every error carries the HTTP status the server answers with, so the API layer
needs a single exception handler instead of one ``try`` block per route.
"""

from __future__ import annotations


class InkpactError(Exception):
    """Base class for all dashboard errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        """Build the JSON body returned to API clients."""
        return {"success": False, "message": self.message}


class MalformedCollectionError(InkpactError):
    """A collection document does not have the expected JSON shape."""

    status_code = 400

    def __init__(self, collection: str, detail: str = "") -> None:
        message = (
            f"{collection}.json should contain an array of {collection} "
            f"or an object {{\"{collection}\": [...]}}"
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.collection = collection


class InvalidIndexError(InkpactError):
    """A positional record reference is stale or out of range."""

    status_code = 400

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"No record at index {index} (collection has {size})")
        self.index = index
        self.size = size


class InvalidFilenameError(InkpactError):
    """A filename failed validation before touching the filesystem."""

    status_code = 400


class UnsupportedMediaTypeError(InkpactError):
    """An upload's MIME type is not on the image allow-list."""

    status_code = 415


class PayloadTooLargeError(InkpactError):
    """An upload exceeds the configured size ceiling."""

    status_code = 413


class NotFoundError(InkpactError):
    """A collection file, markdown file or image does not exist."""

    status_code = 404


class PersistenceError(InkpactError):
    """Writing a file failed; wraps the underlying cause."""

    status_code = 500

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause
