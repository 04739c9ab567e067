"""Collection persistence for the dashboard.

Normalizes blog, book and profile documents read from disk, applies single
record edits to the in-memory list, and writes the whole collection back.
Markdown and image assets live alongside the JSON files in the data
directory.
"""

from inkpact.content.editor import CollectionEditor
from inkpact.content.images import ImageGateway
from inkpact.content.markdown import MarkdownGateway
from inkpact.content.models import CollectionKind, LoadedCollection, SaveResult
from inkpact.content.normalizer import normalize
from inkpact.content.store import CollectionStore

__all__ = [
    "CollectionEditor",
    "CollectionKind",
    "CollectionStore",
    "ImageGateway",
    "LoadedCollection",
    "MarkdownGateway",
    "SaveResult",
    "normalize",
]
