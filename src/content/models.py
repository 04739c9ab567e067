"""Collection kinds, canonical field sets and result models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class CollectionKind(StrEnum):
    """The three persisted collections."""

    BLOG = "blog"
    BOOK = "book"
    PROFILE = "profile"

    @property
    def plural(self) -> str:
        """Envelope property and file stem, e.g. ``blogs``."""
        return f"{self.value}s"

    @property
    def filename(self) -> str:
        return f"{self.plural}.json"

    @classmethod
    def parse(cls, value: str) -> CollectionKind:
        """Accept either the singular or the plural name."""
        name = value.strip().lower()
        for kind in cls:
            if name in (kind.value, kind.plural):
                return kind
        raise ValueError(f"Unknown collection: {value!r} (expected blogs, books or profiles)")


PROFILE_ROLES = ("Writer", "Content Writer", "Graphic Designer", "Editor", "Admin")

# Persisted field allow-list for profiles; other kinds keep unknown fields.
PROFILE_FIELDS = ("id", "name", "role", "term", "bio", "avatar")

# Canonical field -> legacy alias, resolved once at load time.
FIELD_ALIASES: dict[CollectionKind, dict[str, str]] = {
    CollectionKind.BLOG: {
        "blogName": "title",
        "writers": "writer",
        "mdPath": "contentFile",
        "image": "thumbnail",
    },
    CollectionKind.BOOK: {
        "thumbnail": "cover",
    },
    CollectionKind.PROFILE: {
        "avatar": "image",
    },
}

LIST_FIELDS = frozenset({"categories", "writers", "graphicDesigners"})

NUMERIC_FIELDS: dict[CollectionKind, frozenset[str]] = {
    CollectionKind.BLOG: frozenset({"id"}),
    CollectionKind.BOOK: frozenset({"pages"}),
    CollectionKind.PROFILE: frozenset(),
}

Record = dict[str, Any]


class LoadedCollection(BaseModel):
    """An ordered list of canonical records for one collection.

    A record's position in ``records`` is its stable index for the lifetime
    of this object. Reloading produces a new ``LoadedCollection`` and every
    index taken from the previous one must be considered stale.
    """

    kind: CollectionKind
    records: list[Record] = Field(default_factory=list)
    warning: str = ""

    def __len__(self) -> int:
        return len(self.records)

    @property
    def degraded(self) -> bool:
        """True when the load failed and an empty collection was substituted."""
        return bool(self.warning)


class SaveResult(BaseModel):
    """Confirmation returned after a collection replace."""

    success: bool = True
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    kind: CollectionKind
    count: int = 0
    file_path: str = ""

    def to_response(self) -> dict[str, object]:
        return {
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            f"{self.kind.plural}Count": self.count,
        }


class MarkdownDocument(BaseModel):
    """A markdown asset read from or written to disk."""

    filename: str
    path: str
    content: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class StoredImage(BaseModel):
    """An uploaded image after it has been written to its category directory."""

    filename: str
    path: str
    section: str
    size: int
    timestamp: datetime = Field(default_factory=datetime.now)
