"""
vault package

The document set: notes with YAML front matter, slugs, links between notes,
and explorer ordering.
"""

from vault.documents import Document, load_document, load_vault, split_frontmatter
from vault.explorer import ExplorerNode, build_tree
from vault.paths import resolve_href, resolve_relative, transform_link

__all__ = [
    "Document",
    "load_document",
    "load_vault",
    "split_frontmatter",
    "ExplorerNode",
    "build_tree",
    "resolve_href",
    "resolve_relative",
    "transform_link",
]
