"""Create/edit/delete a single record and produce the next full collection.

Every function here is pure: it takes the current record list and returns a
new one, leaving persistence to ``CollectionStore.replace``.
"""

from __future__ import annotations

import re
import time
from datetime import date
from typing import Any

from inkpact.content.models import (
    LIST_FIELDS,
    NUMERIC_FIELDS,
    CollectionKind,
    Record,
)
from inkpact.errors import InvalidIndexError

# Position used for "a record that is not in the collection yet".
CREATING = -1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def new_template(kind: CollectionKind, now: float | None = None, today: date | None = None) -> Record:
    """Return the blank record a create form starts from.

    The blog template carries a placeholder id taken from the clock (in
    milliseconds). It only names the markdown file; the persisted id is
    assigned sequentially by ``apply_create``.
    """
    today = today or date.today()
    if kind is CollectionKind.BLOG:
        placeholder = int((time.time() if now is None else now) * 1000)
        return {
            "id": placeholder,
            "blogName": "",
            "writers": [""],
            "graphicDesigners": [""],
            "date": today.isoformat(),
            "description": "",
            "mdPath": f"../data/blogs/{placeholder}.md",
            "categories": [],
            "readTime": "5 min read",
            "image": "",
        }
    if kind is CollectionKind.BOOK:
        return {
            "title": "",
            "author": "",
            "genre": "",
            "pages": 0,
            "thumbnail": "",
            "description": "",
            "date": "",
            "size": "",
            "pdfUrl": "",
        }
    return {
        "name": "",
        "role": "Writer",
        "term": f"{today.year} - Present",
        "avatar": "",
        "bio": "",
    }


def split_list(value: Any) -> list[str]:
    """Split a comma-separated form value into trimmed, non-empty items."""
    items = value if isinstance(value, list) else str(value or "").split(",")
    return [s for s in (str(i).strip() for i in items) if s]


def parse_int(value: Any) -> int:
    """Parse a numeric form value, falling back to 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value if value is not None else ""))
    return int(match.group(1)) if match else 0


def coerce_form(fields: Record, numeric_fields: frozenset[str] = frozenset()) -> Record:
    """Coerce submitted form fields to their stored types."""
    out: Record = {}
    for key, value in fields.items():
        if key in LIST_FIELDS:
            out[key] = split_list(value)
        elif key in numeric_fields:
            out[key] = parse_int(value)
        else:
            out[key] = value
    return out


def _as_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _taken_ids(records: list[Record]) -> set[int]:
    ids = (_as_id(r.get("id")) for r in records if isinstance(r, dict))
    return {i for i in ids if i is not None}


def next_id(records: list[Record]) -> int:
    """Return ``max(existing ids, 0) + 1``.

    Digit-only string ids left by older saves count with their numeric
    value; anything else counts as 0.
    """
    return max(_taken_ids(records) | {0}) + 1


def claim_id(records: list[Record], submitted: Any = None) -> int:
    """Return ``submitted`` if it is a positive int no other record uses, else ``next_id``."""
    candidate = _as_id(submitted)
    if candidate is not None and candidate > 0 and candidate not in _taken_ids(records):
        return candidate
    return next_id(records)


def check_index(records: list[Record], index: int) -> None:
    if not 0 <= index < len(records):
        raise InvalidIndexError(index, len(records))


def apply_create(
    records: list[Record],
    kind: CollectionKind,
    fields: Record,
    template: Record | None = None,
) -> list[Record]:
    """Append a new record built from ``template`` overlaid with ``fields``."""
    base = dict(template if template is not None else new_template(kind))
    base.pop("id", None)
    record = coerce_form({**base, **fields}, NUMERIC_FIELDS[kind])
    if kind is CollectionKind.BLOG:
        record["id"] = claim_id(records, record.get("id"))
    return [*records, record]


def apply_edit(
    records: list[Record],
    kind: CollectionKind,
    index: int,
    fields: Record,
) -> list[Record]:
    """Shallow-merge ``fields`` into the record at ``index``.

    Fields that were not submitted keep their existing values.
    """
    check_index(records, index)
    existing = records[index]
    coerced = coerce_form(fields, NUMERIC_FIELDS[kind])
    merged = {**existing, **coerced}
    if kind is CollectionKind.BLOG:
        others = records[:index] + records[index + 1 :]
        merged["id"] = existing.get("id") or claim_id(others, coerced.get("id"))
    out = list(records)
    out[index] = merged
    return out


def apply_delete(records: list[Record], index: int) -> list[Record]:
    """Remove the record at ``index``."""
    check_index(records, index)
    return records[:index] + records[index + 1 :]


def wrap(records: list[Record], kind: CollectionKind) -> dict[str, list[Record]]:
    """Wrap records in the collection's envelope."""
    return {kind.plural: list(records)}
