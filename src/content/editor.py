"""Editing session over one collection.

``CollectionEditor`` replaces the dashboard's ambient "current data / current
edit target" state with an explicit object: it owns the loaded collection,
applies one change at a time through the merge functions, persists the whole
envelope and reloads.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from inkpact.content.markdown import MarkdownGateway, starter_content
from inkpact.content.merge import (
    CREATING,
    apply_create,
    apply_delete,
    apply_edit,
    check_index,
    new_template,
    wrap,
)
from inkpact.content.models import CollectionKind, LoadedCollection, Record, SaveResult
from inkpact.content.store import CollectionStore
from inkpact.errors import InkpactError

logger = logging.getLogger(__name__)


class CollectionEditor:
    """Load, mutate and persist a single collection."""

    def __init__(
        self,
        store: CollectionStore,
        kind: CollectionKind,
        markdown: MarkdownGateway | None = None,
    ) -> None:
        self.store = store
        self.kind = kind
        self.markdown = markdown
        self.collection: LoadedCollection = store.load(kind)
        self._draft: Record | None = None

    @property
    def records(self) -> list[Record]:
        return self.collection.records

    @property
    def warning(self) -> str:
        return self.collection.warning

    def reload(self) -> LoadedCollection:
        """Re-read the collection; any index taken before this call is stale."""
        self.collection = self.store.load(self.kind)
        return self.collection

    def template(self) -> Record:
        """Return the create-form template, reused until the next successful create."""
        if self._draft is None:
            self._draft = new_template(self.kind)
        return copy.deepcopy(self._draft)

    def record(self, index: int) -> Record:
        if index == CREATING:
            return self.template()
        check_index(self.records, index)
        return self.records[index]

    def save(self, index: int, fields: dict[str, Any]) -> SaveResult:
        """Create (``index == CREATING``) or edit the record at ``index``."""
        if index == CREATING:
            return self.create(fields)
        return self.edit(index, fields)

    def create(self, fields: dict[str, Any], template: Record | None = None) -> SaveResult:
        records = apply_create(self.records, self.kind, fields, template or self.template())
        result = self._persist(records)
        self._draft = None
        created = records[-1]
        if self.kind is CollectionKind.BLOG and created.get("mdPath"):
            self._precreate_markdown(created["mdPath"], created.get("blogName") or "Untitled Blog")
        return result

    def edit(self, index: int, fields: dict[str, Any]) -> SaveResult:
        return self._persist(apply_edit(self.records, self.kind, index, fields))

    def delete(self, index: int) -> SaveResult:
        return self._persist(apply_delete(self.records, index))

    def _persist(self, records: list[Record]) -> SaveResult:
        result = self.store.replace(self.kind, wrap(records, self.kind))
        self.reload()
        return result

    def _precreate_markdown(self, md_path: str, title: str) -> None:
        """Write starter content for a new blog post; failures never abort the create."""
        if self.markdown is None:
            return
        try:
            self.markdown.write(md_path, starter_content(title))
        except InkpactError as exc:
            logger.warning("Could not create markdown file %s: %s", md_path, exc.message)
