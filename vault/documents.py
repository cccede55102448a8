"""
vault/documents.py

Loading notes from a content folder.

A note is a Markdown file with an optional YAML front matter block::

    ---
    title: Harbour
    marker:
      - coordinates: "120, 340"
        mapName: Town
    ---
    Body text...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from vault.paths import slugify

log = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"


@dataclass
class Document:
    """One note of the document set."""

    slug: str
    title: Optional[str]
    body: str = ""
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    source_path: Optional[Path] = None

    @property
    def is_folder_index(self) -> bool:
        return self.slug == "index" or self.slug.endswith("/index")

    @property
    def folder(self) -> str:
        """Slug of the containing folder ('' for the root)."""
        return self.slug.rsplit("/", 1)[0] if "/" in self.slug else ""


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a leading YAML front matter block from a note.

    Args:
        text: Full note text

    Returns:
        ``(frontmatter, body)``. Missing, invalid or non-mapping front
        matter yields an empty dict; the body is then everything after the
        closing delimiter (or the whole text when there is no block).
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return {}, text

    for i in range(1, len(lines)):
        if lines[i].strip() == FRONTMATTER_DELIMITER:
            raw = "".join(lines[1:i])
            body = "".join(lines[i + 1:])
            try:
                data = yaml.safe_load(raw)
            except (yaml.YAMLError, ValueError) as e:
                log.warning("Ignoring invalid front matter: %s", e)
                return {}, body
            if data is None:
                return {}, body
            if not isinstance(data, dict):
                log.warning("Ignoring front matter that is not a mapping")
                return {}, body
            return data, body

    # Unterminated block: treat as plain text
    return {}, text


def load_document(path: Path, content_root: Path) -> Document:
    """Read one note. The title defaults to the file name."""
    text = path.read_text(encoding="utf-8")
    frontmatter, body = split_frontmatter(text)
    rel = path.relative_to(content_root).as_posix()
    title = frontmatter.get("title")
    if title is None or title == "":
        title = path.stem
    return Document(
        slug=slugify(rel),
        title=str(title),
        body=body,
        frontmatter=frontmatter,
        source_path=path,
    )


def load_vault(content_root: Path) -> Tuple[List[Document], List[str]]:
    """
    Load every note under *content_root*.

    Hidden files and folders (leading ``.``) are skipped.

    Returns:
        ``(documents, asset_slugs)`` with documents sorted by slug and
        asset slugs keeping their file extension.
    """
    content_root = Path(content_root)
    documents: List[Document] = []
    assets: List[str] = []

    for path in sorted(content_root.rglob("*")):
        rel_parts = path.relative_to(content_root).parts
        if any(part.startswith(".") for part in rel_parts):
            continue
        if not path.is_file():
            continue
        if path.suffix.lower() == ".md":
            documents.append(load_document(path, content_root))
        else:
            assets.append(slugify(path.relative_to(content_root).as_posix()))

    documents.sort(key=lambda d: d.slug)
    log.info("Loaded %d notes and %d assets from %s", len(documents), len(assets), content_root)
    return documents, assets
