"""Markdown content files that back blog posts."""

from __future__ import annotations

import logging
import posixpath
import re
from datetime import date
from pathlib import Path

from inkpact.content.models import MarkdownDocument
from inkpact.errors import InvalidFilenameError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

MARKDOWN_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+\.md$")

# Blog records store paths relative to the dashboard page, e.g. ../data/blogs/x.md
_DATA_PREFIXES = ("../data/", "data/")


def split_markdown_path(name: str) -> tuple[str, bool]:
    """Validate ``name`` and return ``(basename, in_blogs_dir)``.

    Raises:
        InvalidFilenameError: On ``..`` segments or a basename outside
            ``[A-Za-z0-9_-]+.md``.
    """
    raw = (name or "").strip().replace("\\", "/")
    if not raw:
        raise InvalidFilenameError("Filename is required")
    normalized = posixpath.normpath(raw)
    for prefix in _DATA_PREFIXES:
        if normalized.startswith(prefix):
            normalized = normalized[len(prefix):]
            break
    if ".." in normalized.split("/"):
        raise InvalidFilenameError(f"Invalid filename {name!r}: path traversal is not allowed")
    basename = posixpath.basename(normalized)
    if not MARKDOWN_NAME_RE.match(basename):
        raise InvalidFilenameError(
            "Invalid filename format. Only alphanumeric characters, hyphens, "
            "and underscores are allowed."
        )
    return basename, "blogs/" in normalized


def validate_filename(name: str) -> str:
    """Return the validated basename of ``name``."""
    return split_markdown_path(name)[0]


def starter_content(title: str, today: date | None = None) -> str:
    """Body for a freshly created blog post."""
    today = today or date.today()
    return f"""# {title}

This is a new blog post. Start writing your content here...

## Introduction

Write your introduction here.

## Main Content

Add your main content here.

### Subsection

More details...

## Conclusion

Wrap up your post here.

---

*Created on {today.isoformat()}*"""


class MarkdownGateway:
    """Reads and writes markdown files under ``data/`` and ``data/blogs/``."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def blogs_dir(self) -> Path:
        return self._data_dir / "blogs"

    def candidates(self, basename: str) -> list[Path]:
        return [self.blogs_dir / basename, self._data_dir / basename]

    def read(self, name: str) -> MarkdownDocument:
        """Return the first existing copy of ``name``.

        Raises:
            InvalidFilenameError: If ``name`` fails validation.
            NotFoundError: If no candidate directory holds the file.
        """
        basename = validate_filename(name)
        for path in self.candidates(basename):
            try:
                content = path.read_text(encoding="utf-8")
            except (FileNotFoundError, IsADirectoryError):
                continue
            return MarkdownDocument(filename=basename, path=str(path), content=content)
        raise NotFoundError("Markdown file not found")

    def write(self, name: str, content: str) -> MarkdownDocument:
        """Overwrite ``name`` with ``content``.

        Paths containing a ``blogs/`` segment go to ``data/blogs/``, all
        others to ``data/``.
        """
        basename, in_blogs = split_markdown_path(name)
        target_dir = self.blogs_dir if in_blogs else self._data_dir
        path = target_dir / basename
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not write {path}", exc) from exc
        logger.info("Saved markdown %s (%d chars)", path, len(content))
        return MarkdownDocument(filename=basename, path=str(path), content=content)
