"""
pipeline/extractor.py

Extraction phase: collect marker declarations from a note's front matter.
"""

from __future__ import annotations

import logging
from typing import List

from models import MARKER_FRONTMATTER_KEY, MarkerRecord
from pipeline.registry import MarkerRegistry
from schemas import MARKER_SCHEMA, check_record, is_flat_record
from vault.documents import Document

log = logging.getLogger(__name__)


def parse_marker_entry(entry, name: str, link: str) -> MarkerRecord | None:
    """
    Turn one front matter entry into a marker record.

    Args:
        entry: Raw list item from the ``marker`` front matter key
        name: Title of the declaring note
        link: Slug of the declaring note

    Returns:
        The record, or None if the entry is not a flat record of strings
        and numbers or fails the marker schema.
    """
    if not is_flat_record(entry):
        log.debug("%s: dropping marker %r (not a flat record)", link, entry)
        return None
    ok, errors = check_record(MARKER_SCHEMA, entry)
    if not ok:
        log.debug("%s: dropping marker %r (%s)", link, entry, "; ".join(errors))
        return None
    return MarkerRecord.from_entry(entry, name, link)


def extract_markers(document: Document, registry: MarkerRegistry) -> List[MarkerRecord]:
    """
    Add every valid marker declared by *document* to *registry*.

    Notes without a title or slug, and notes whose ``marker`` key is
    missing or not a list, contribute nothing.

    Returns:
        The records that were added, in declaration order.
    """
    if not document.slug or not document.title:
        return []
    entries = document.frontmatter.get(MARKER_FRONTMATTER_KEY)
    if not isinstance(entries, list):
        return []

    added: List[MarkerRecord] = []
    for entry in entries:
        marker = parse_marker_entry(entry, document.title, document.slug)
        if marker is None:
            continue
        registry.add(marker)
        added.append(marker)

    if added:
        log.debug("%s: %d marker(s) collected", document.slug, len(added))
    return added
