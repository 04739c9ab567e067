"""Turn on-disk collection documents into canonical record lists.

Two document shapes are accepted: the envelope ``{"blogs": [...]}`` and the
legacy bare array ``[...]``. Legacy field names (``title`` for ``blogName``,
a single ``writer`` string, ``cover`` for a book thumbnail, ...) are resolved
here, once, so nothing downstream has to know about them.
"""

from __future__ import annotations

import copy
from typing import Any

from inkpact.content.models import (
    FIELD_ALIASES,
    CollectionKind,
    LoadedCollection,
    Record,
)
from inkpact.errors import MalformedCollectionError


def extract_records(document: Any, kind: CollectionKind) -> list[Any]:
    """Return the record list from an envelope or a bare array.

    Raises:
        MalformedCollectionError: If the document is neither shape.
    """
    if isinstance(document, dict):
        records = document.get(kind.plural)
        if isinstance(records, list):
            return records
        if kind.plural in document:
            raise MalformedCollectionError(
                kind.plural, f"'{kind.plural}' is {type(records).__name__}, not an array"
            )
        raise MalformedCollectionError(kind.plural, f"missing '{kind.plural}' property")
    if isinstance(document, list):
        return document
    raise MalformedCollectionError(kind.plural, f"got {type(document).__name__}")


def canonicalize(record: Any, kind: CollectionKind) -> Record:
    """Return a copy of ``record`` with canonical fields resolved from aliases.

    Unknown fields and the alias fields themselves are kept; a canonical
    field that is already present always wins over its alias.
    """
    if not isinstance(record, dict):
        raise MalformedCollectionError(
            kind.plural, f"record is {type(record).__name__}, not an object"
        )
    out = copy.deepcopy(record)
    for canonical, alias in FIELD_ALIASES[kind].items():
        if _present(out.get(canonical)) or alias not in out:
            continue
        value = out[alias]
        if canonical == "writers":
            value = _as_name_list(value)
        out[canonical] = value
    if kind is CollectionKind.BLOG:
        for field in ("writers", "graphicDesigners"):
            if isinstance(out.get(field), str):
                out[field] = _as_name_list(out[field])
    return out


def normalize(document: Any, kind: CollectionKind) -> LoadedCollection:
    """Normalize a parsed JSON document into a ``LoadedCollection``."""
    records = extract_records(document, kind)
    return LoadedCollection(kind=kind, records=[canonicalize(r, kind) for r in records])


def is_pdf_book(record: Record) -> bool:
    """Books with a ``pdfUrl`` are shown as PDF books, the rest as physical ones."""
    return bool(record.get("pdfUrl"))


def _present(value: Any) -> bool:
    return value not in (None, "", [])


def _as_name_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    if value in (None, ""):
        return []
    return [s.strip() for s in str(value).split(",") if s.strip()]
