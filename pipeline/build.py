"""
pipeline/build.py

Two-phase site build.

Phase one extracts markers from every note into the registry; the registry
is then sealed; phase two renders each note, attaching markers to the maps
it declares. A note rendered before extraction has covered the whole
document set would silently miss markers, so the phases never interleave.
"""

from __future__ import annotations

import html
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from markdown_it import MarkdownIt

from pipeline.extractor import extract_markers
from pipeline.registry import MarkerRegistry
from pipeline.transform import transform_document
from settings import MapDefaults, MarkerDefaults
from vault.documents import Document, load_vault
from vault.paths import slugify

log = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<article data-slug="{slug}">
<h1>{title}</h1>
{body}
</article>
</body>
</html>
"""


@dataclass
class RenderedPage:
    """HTML body of one rendered note."""
    slug: str
    title: str
    html: str
    map_count: int = 0


def create_markdown() -> MarkdownIt:
    """Markdown renderer used for every note (CommonMark, raw HTML allowed)."""
    return MarkdownIt("commonmark", {"html": True})


class SiteBuilder:
    """
    Builds every note of a content folder.

    Args:
        content_root: Folder holding the notes and their assets.
        map_defaults: Fallbacks for omitted map fields.
        marker_defaults: Fallbacks for omitted marker fields.
    """

    def __init__(
        self,
        content_root: Path,
        map_defaults: Optional[MapDefaults] = None,
        marker_defaults: Optional[MarkerDefaults] = None,
    ):
        self.content_root = Path(content_root)
        self.map_defaults = map_defaults or MapDefaults()
        self.marker_defaults = marker_defaults or MarkerDefaults()
        self.md = create_markdown()
        self.registry = MarkerRegistry()
        self.documents: List[Document] = []
        self.asset_slugs: List[str] = []
        self.pages: Dict[str, RenderedPage] = {}

    @property
    def all_slugs(self) -> List[str]:
        return [d.slug for d in self.documents] + self.asset_slugs

    def load(self) -> List[Document]:
        self.documents, self.asset_slugs = load_vault(self.content_root)
        return self.documents

    def use_documents(self, documents: List[Document], asset_slugs: Optional[List[str]] = None) -> None:
        """Build an in-memory document set instead of loading from disk."""
        self.documents = list(documents)
        self.asset_slugs = list(asset_slugs or [])

    def extract_all(self) -> int:
        """Phase one: collect markers from every note, then seal the registry."""
        count = 0
        for doc in self.documents:
            count += len(extract_markers(doc, self.registry))
        self.registry.seal()
        log.info("Collected %d marker(s) from %d note(s)", count, len(self.documents))
        return count

    def render_document(self, document: Document) -> RenderedPage:
        """Phase two for one note. Requires a sealed registry."""
        tokens = self.md.parse(document.body)
        map_count = transform_document(
            tokens,
            document,
            self.registry,
            self.all_slugs,
            self.map_defaults,
            self.marker_defaults,
        )
        body = self.md.renderer.render(tokens, self.md.options, {})
        return RenderedPage(
            slug=document.slug,
            title=document.title or document.slug,
            html=body,
            map_count=map_count,
        )

    def render_all(self) -> Dict[str, RenderedPage]:
        """Phase two: render every note."""
        self.registry.require_sealed()
        self.pages = {doc.slug: self.render_document(doc) for doc in self.documents}
        maps = sum(p.map_count for p in self.pages.values())
        log.info("Rendered %d page(s) with %d map(s)", len(self.pages), maps)
        return self.pages

    def build(self) -> Dict[str, RenderedPage]:
        """Load (unless documents were supplied), extract, seal, render."""
        if not self.documents:
            self.load()
        self.extract_all()
        return self.render_all()

    def write(self, output_dir: Path) -> List[Path]:
        """
        Write rendered pages and copy assets into *output_dir*.

        Returns:
            Paths of the written HTML pages
        """
        output_dir = Path(output_dir)
        written: List[Path] = []
        for page in self.pages.values():
            target = output_dir / f"{page.slug}.html"
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(
                PAGE_TEMPLATE.format(
                    title=html.escape(page.title),
                    slug=html.escape(page.slug),
                    body=page.html,
                ),
                encoding="utf-8",
            )
            written.append(target)

        for slug in self.asset_slugs:
            source = self.asset_path(slug)
            if source is None:
                continue
            target = output_dir / slug
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)

        log.info("Wrote %d page(s) to %s", len(written), output_dir)
        return written

    def asset_path(self, slug: str) -> Optional[Path]:
        """Source file of an asset slug."""
        candidate = self.content_root / slug
        if candidate.is_file():
            return candidate
        # Slugs rewrite some characters; fall back to scanning the folder
        for path in self.content_root.rglob("*"):
            if path.is_file() and slugify(path.relative_to(self.content_root).as_posix()) == slug:
                return path
        log.warning("Asset %s not found under %s", slug, self.content_root)
        return None
