"""Uploaded thumbnails and avatars, one directory per category."""

from __future__ import annotations

import logging
import random
import re
import time
from pathlib import Path

from inkpact.content.models import StoredImage
from inkpact.errors import (
    InvalidFilenameError,
    NotFoundError,
    PayloadTooLargeError,
    PersistenceError,
    UnsupportedMediaTypeError,
)

logger = logging.getLogger(__name__)

CATEGORIES = ("blogs", "books", "profiles")
FALLBACK_CATEGORY = "general"

ALLOWED_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

IMAGE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)


def resolve_category(name: str | None) -> str:
    """Map a request's section onto a known category directory."""
    name = (name or "").strip().lower()
    return name if name in CATEGORIES else FALLBACK_CATEGORY


def _extension_for(original_name: str, content_type: str) -> str:
    ext = Path(original_name or "").suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return ext
    return _TYPE_EXTENSIONS.get(content_type, "")


def unique_filename(extension: str) -> str:
    """Return ``<epoch-ms>-<random><ext>``; the client's filename is never used."""
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"


class ImageGateway:
    """Stores, lists and deletes images under ``<data>/thumbnails/<category>/``."""

    def __init__(
        self,
        data_dir: Path,
        *,
        max_bytes: int = MAX_UPLOAD_BYTES,
        allowed_types: tuple[str, ...] | list[str] = ALLOWED_TYPES,
    ) -> None:
        self._root = Path(data_dir) / "thumbnails"
        self.max_bytes = max_bytes
        self.allowed_types = tuple(allowed_types)

    @property
    def root(self) -> Path:
        return self._root

    def directory(self, category: str) -> Path:
        return self._root / resolve_category(category)

    def ensure_directories(self) -> None:
        for category in CATEGORIES:
            (self._root / category).mkdir(parents=True, exist_ok=True)

    def check_upload(self, content_type: str, size: int) -> None:
        """Validate type and size before anything is written.

        Raises:
            UnsupportedMediaTypeError: Type not on the allow-list.
            PayloadTooLargeError: More than ``max_bytes``.
        """
        if (content_type or "").lower() not in self.allowed_types:
            raise UnsupportedMediaTypeError(
                "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
            )
        if size > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise PayloadTooLargeError(f"File too large. Maximum size is {limit_mb}MB")

    def save(self, category: str, original_name: str, content_type: str, data: bytes) -> StoredImage:
        """Validate and store one uploaded image."""
        self.check_upload(content_type, len(data))
        section = resolve_category(category)
        target_dir = self._root / section
        filename = unique_filename(_extension_for(original_name, content_type.lower()))
        path = target_dir / filename
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise PersistenceError(f"Could not store image {filename}", exc) from exc
        logger.info("Stored %s image %s (%d bytes)", section, filename, len(data))
        return StoredImage(
            filename=filename,
            path=f"data/thumbnails/{section}/{filename}",
            section=section,
            size=len(data),
        )

    def list_images(self, category: str) -> list[str]:
        """Return image filenames in ``category``; a missing directory is empty."""
        directory = self.directory(category)
        if not directory.is_dir():
            return []
        return sorted(
            p.name
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        )

    def delete(self, category: str, filename: str) -> None:
        """Remove one image.

        Raises:
            InvalidFilenameError: Name outside ``[A-Za-z0-9_-]+.<image ext>``.
            NotFoundError: No such file.
        """
        if not IMAGE_NAME_RE.match(filename or ""):
            raise InvalidFilenameError("Invalid filename")
        path = self.directory(category) / filename
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(f"Image {filename} not found") from None
        except OSError as exc:
            raise PersistenceError(f"Could not delete {filename}", exc) from exc
        logger.info("Deleted image %s", path)
