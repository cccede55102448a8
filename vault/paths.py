"""
vault/paths.py

Slug and link arithmetic between notes.

A slug is a note's POSIX path relative to the content root, without the
``.md`` suffix (``places/harbour``). Assets keep their extension
(``assets/town.png``). Rendered pages refer to one another with paths
relative to the current page's folder.
"""

from __future__ import annotations

import posixpath
import re
from typing import Iterable, Tuple

_URL_RE = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)
_WIKILINK_RE = re.compile(r"^!?\[\[(.*)\]\]$")


def is_external(target: str) -> bool:
    return bool(_URL_RE.match(target))


def slugify(path: str) -> str:
    """Turn a relative file path into a slug."""
    path = path.replace("\\", "/").strip("/")
    if path.lower().endswith(".md"):
        path = path[:-3]
    path = path.replace("&", "-and-").replace(" ", "-")
    for ch in "%?#":
        path = path.replace(ch, "")
    return path


def strip_wikilink(text: str) -> str:
    """``[[town.png|Town]]`` -> ``town.png``; other text is returned stripped."""
    text = text.strip()
    m = _WIKILINK_RE.match(text)
    if m:
        text = m.group(1)
    return text.split("|", 1)[0].strip()


def split_anchor(target: str) -> Tuple[str, str]:
    if "#" not in target:
        return target, ""
    path, anchor = target.split("#", 1)
    return path, "#" + anchor


def simplify_slug(slug: str) -> str:
    """Drop a trailing ``index`` segment so folder notes link to the folder."""
    if slug == "index":
        return ""
    if slug.endswith("/index"):
        return slug[: -len("index")]
    return slug


def path_to_root(slug: str) -> str:
    """Relative path from the folder containing *slug* back to the root."""
    depth = len([p for p in slug.split("/") if p]) - 1
    if depth <= 0:
        return "."
    return "/".join([".."] * depth)


def join_segments(*segments: str) -> str:
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    joined = "/".join(parts)
    if segments and segments[-1].endswith("/") and joined:
        joined += "/"
    return joined


def resolve_relative(current: str, target: str) -> str:
    """Link from page *current* to page *target*, relative to *current*."""
    return join_segments(path_to_root(current), simplify_slug(target))


def transform_link(current: str, target: str, all_slugs: Iterable[str], strategy: str = "shortest") -> str:
    """
    Resolve an author-written link target for the page *current*.

    With the ``shortest`` strategy a bare file name (``town.png``) that
    matches the last segment of exactly one known slug links to that slug.
    Anything else is taken as a path from the content root.

    Args:
        current: Slug of the page holding the link
        target: Link target as written by the author
        all_slugs: Every slug in the document set (notes and assets)
        strategy: ``shortest``, ``absolute`` or ``relative``

    Returns:
        Path relative to *current*'s folder, or the target unchanged if it
        is an external URL.
    """
    target = strip_wikilink(target)
    if is_external(target):
        return target

    target, anchor = split_anchor(target)
    target_slug = slugify(target)
    if strategy == "relative":
        return target_slug + anchor

    canonical = target_slug[2:] if target_slug.startswith("./") else target_slug
    canonical = canonical.strip("/")

    if strategy == "shortest":
        matches = [s for s in all_slugs if s.split("/")[-1] == canonical]
        if len(matches) == 1:
            return resolve_relative(current, matches[0]) + anchor

    return join_segments(path_to_root(current), canonical) + anchor


def resolve_href(current: str, href: str) -> str:
    """
    Turn a relative link found on page *current* back into a slug.

    Inverse of :func:`resolve_relative`; folder links resolve to the
    folder's ``index`` note.
    """
    href, _ = split_anchor(href)
    folder = posixpath.dirname(current)
    resolved = posixpath.normpath(posixpath.join(folder, href))
    if resolved in (".", ""):
        return "index"
    resolved = resolved.lstrip("/")
    if href.endswith("/"):
        resolved = f"{resolved}/index"
    return resolved
