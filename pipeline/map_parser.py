"""
pipeline/map_parser.py

Render phase, step one: find map declarations inside a note.

Maps are declared in a fenced block tagged ``base`` whose YAML body holds
a ``views`` list::

    ```base
    views:
      - type: leaflet-map
        name: Town
        image: town.png
        maxZoom: 3
        scale: 2
        unit: ft
    ```

Only views of type ``leaflet-map`` that are flat records are candidates.
The first candidate decides the block: if it fails the map schema the
block yields no map and later candidates are not tried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import yaml
from markdown_it.token import Token

from models import MAP_BLOCK_LANGUAGE, MAP_VIEW_TYPE, MapDeclaration
from schemas import MAP_SCHEMA, check_record, is_flat_record, is_non_empty_mapping
from utils import coerce_number

log = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("height", "minZoom", "maxZoom", "defaultZoom", "zoomDelta", "scale")


def fence_language(token: Token) -> str:
    """First word of a fence's info string, lower-cased."""
    info = (token.info or "").strip()
    return info.split(maxsplit=1)[0].lower() if info else ""


def find_map_blocks(tokens: Sequence[Token]) -> List[int]:
    """Indices of fenced ``base`` blocks in a markdown-it token stream."""
    return [
        i for i, tok in enumerate(tokens)
        if tok.type == "fence" and fence_language(tok) == MAP_BLOCK_LANGUAGE
    ]


def _candidate_from_view(view: Dict[str, Any]) -> Dict[str, Any]:
    """Build a map record from a view, coercing numeric fields."""
    candidate: Dict[str, Any] = {
        "name": view.get("name", view.get("mapName")),
        "image": view.get("image"),
        "unit": view.get("unit"),
    }
    for key in _NUMERIC_FIELDS:
        candidate[key] = coerce_number(view.get(key))
    if isinstance(candidate["name"], str) and not candidate["name"].strip():
        candidate["name"] = None
    return candidate


def map_candidates(entry: Any) -> List[Dict[str, Any]]:
    """Candidate map records of a parsed block, in view order."""
    if not is_non_empty_mapping(entry) or not isinstance(entry.get("views"), list):
        return []
    candidates = []
    for view in entry["views"]:
        if not is_flat_record(view):
            continue
        if view.get("type") != MAP_VIEW_TYPE:
            continue
        candidates.append(_candidate_from_view(view))
    return candidates


def parse_map_block(source: str) -> Optional[MapDeclaration]:
    """
    Parse the body of a ``base`` block.

    Args:
        source: Raw text of the fenced block

    Returns:
        The declaration of the block's first map view, or None when the
        body is not valid YAML (or holds an impossible date), has no
        ``views`` list, has no map view, or its first map view fails
        validation.
    """
    try:
        entry = yaml.safe_load(source)
    except (yaml.YAMLError, ValueError) as e:
        log.debug("base block is not valid YAML: %s", e)
        return None

    candidates = map_candidates(entry)
    if not candidates:
        return None

    first = candidates[0]
    ok, errors = check_record(MAP_SCHEMA, first)
    if not ok:
        log.debug("map view rejected (%s)", "; ".join(errors))
        return None
    return MapDeclaration.from_record(first)
