"""
vault/explorer.py

Explorer tree ordering for the viewer's note list.

Ordering rules, applied in turn:
  1. A node whose note declares a higher front matter ``priority`` comes first;
     any prioritised node comes before an unprioritised one.
  2. Folders come before files.
  3. Display names compare naturally ("Day 2" before "Day 10"), ignoring case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Dict, List, Optional

from utils import natural_key
from vault.documents import Document


@dataclass
class ExplorerNode:
    """A folder or a note in the explorer tree."""

    name: str
    display_name: str
    slug: Optional[str] = None  # None for folders without an index note
    is_folder: bool = False
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    children: List["ExplorerNode"] = field(default_factory=list)

    @property
    def priority(self) -> Optional[float]:
        value = self.frontmatter.get("priority")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


def _natural_cmp(a: str, b: str) -> int:
    ka, kb = natural_key(a), natural_key(b)
    return (ka > kb) - (ka < kb)


def compare_nodes(a: ExplorerNode, b: ExplorerNode) -> int:
    """cmp-style comparison implementing the explorer ordering."""
    pa, pb = a.priority, b.priority
    if pa is not None or pb is not None:
        if pa is None:
            return 1
        if pb is None:
            return -1
        if pa != pb:
            return -1 if pa > pb else 1

    if a.is_folder == b.is_folder:
        return _natural_cmp(a.display_name, b.display_name)
    return -1 if a.is_folder else 1


def sort_nodes(nodes: List[ExplorerNode]) -> List[ExplorerNode]:
    """Sort *nodes* recursively, in place, and return them."""
    nodes.sort(key=cmp_to_key(compare_nodes))
    for node in nodes:
        if node.children:
            sort_nodes(node.children)
    return nodes


def build_tree(documents: List[Document]) -> List[ExplorerNode]:
    """
    Build the sorted explorer tree for a document set.

    Folder ``index`` notes are not listed as children; they give their
    folder its display name, slug and front matter instead.
    """
    root = ExplorerNode(name="", display_name="", is_folder=True)
    folders: Dict[str, ExplorerNode] = {"": root}

    def folder_node(path: str) -> ExplorerNode:
        if path in folders:
            return folders[path]
        parent_path, _, name = path.rpartition("/")
        node = ExplorerNode(name=name, display_name=name.replace("-", " "), is_folder=True)
        folder_node(parent_path).children.append(node)
        folders[path] = node
        return node

    for doc in documents:
        if doc.is_folder_index and doc.folder:
            node = folder_node(doc.folder)
            node.slug = doc.slug
            node.display_name = doc.title or node.display_name
            node.frontmatter = doc.frontmatter
            continue
        parent = folder_node(doc.folder)
        parent.children.append(ExplorerNode(
            name=doc.slug.rsplit("/", 1)[-1],
            display_name=doc.title or doc.slug,
            slug=doc.slug,
            frontmatter=doc.frontmatter,
        ))

    return sort_nodes(root.children)
