"""File-backed collection store.

Each collection lives in one JSON file under the data directory and is always
replaced as a whole. There is no locking: two concurrent replaces of the same
collection are resolved by whichever write lands last.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from inkpact.content.models import (
    PROFILE_FIELDS,
    CollectionKind,
    LoadedCollection,
    SaveResult,
)
from inkpact.content.normalizer import extract_records, normalize
from inkpact.errors import MalformedCollectionError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

# Blogs were historically written with a 4-space indent, the others with 2.
_INDENT: dict[CollectionKind, int] = {
    CollectionKind.BLOG: 4,
    CollectionKind.BOOK: 2,
    CollectionKind.PROFILE: 2,
}


def project_profiles(document: Any) -> dict[str, list[dict[str, Any]]]:
    """Keep only the persisted profile fields, dropping everything else.

    Raises:
        MalformedCollectionError: If ``document`` is not ``{"profiles": [...]}``.
    """
    if not isinstance(document, dict) or not isinstance(document.get("profiles"), list):
        raise MalformedCollectionError(
            "profiles", "Invalid profiles data structure. Expected {profiles: [...]}"
        )
    projected = []
    for profile in document["profiles"]:
        if not isinstance(profile, dict):
            raise MalformedCollectionError("profiles", "profile entries must be objects")
        projected.append({field: profile[field] for field in PROFILE_FIELDS if field in profile})
    return {"profiles": projected}


def _write_in_place(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def _atomic_write(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temp file, then rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class CollectionStore:
    """Reads and replaces the blog, book and profile collection files."""

    def __init__(self, data_dir: Path, *, atomic_writes: bool = False) -> None:
        self._data_dir = Path(data_dir)
        self._atomic = atomic_writes

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, kind: CollectionKind) -> Path:
        return self._data_dir / kind.filename

    def read(self, kind: CollectionKind) -> Any:
        """Return the raw parsed JSON for ``kind``.

        Raises:
            NotFoundError: If the collection file does not exist.
            MalformedCollectionError: If the file is not valid JSON.
        """
        path = self.path_for(kind)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(f"{kind.filename} not found") from None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedCollectionError(kind.plural, f"invalid JSON: {exc}") from exc

    def load(self, kind: CollectionKind) -> LoadedCollection:
        """Read and normalize a collection, degrading to empty on failure.

        A missing file is an empty collection. A malformed one is also
        returned empty, with ``warning`` set so the caller can show it.
        """
        try:
            return normalize(self.read(kind), kind)
        except NotFoundError:
            return LoadedCollection(kind=kind)
        except MalformedCollectionError as exc:
            logger.warning("Could not load %s: %s", self.path_for(kind), exc.message)
            return LoadedCollection(kind=kind, warning=exc.message)

    def replace(self, kind: CollectionKind, document: Any) -> SaveResult:
        """Overwrite the collection file with ``document``.

        Profiles are projected onto their persisted fields first; blogs and
        books are written exactly as submitted.

        Raises:
            MalformedCollectionError: If a profiles document has the wrong shape.
            PersistenceError: If serialization or the write fails.
        """
        if kind is CollectionKind.PROFILE:
            document = project_profiles(document)
        path = self.path_for(kind)
        try:
            text = json.dumps(document, indent=_INDENT[kind], ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not serialize {kind.plural}", exc) from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if self._atomic:
                _atomic_write(path, text)
            else:
                _write_in_place(path, text)
        except OSError as exc:
            raise PersistenceError(f"Could not write {path}", exc) from exc

        count = _count_records(document, kind)
        logger.info("Saved %d %s to %s (%d bytes)", count, kind.plural, path, len(text))
        return SaveResult(
            message=f"{kind.plural.capitalize()} data saved successfully",
            kind=kind,
            count=count,
            file_path=str(path),
        )


def _count_records(document: Any, kind: CollectionKind) -> int:
    try:
        return len(extract_records(document, kind))
    except MalformedCollectionError:
        return 0
