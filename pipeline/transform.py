"""
pipeline/transform.py

Render phase, step two: turn a map declaration into the map container.

The container is a ``div.leaflet-map`` carrying the resolved map parameters
as ``data-*`` attributes, with one inert ``div.leaflet-marker`` child per
marker. The viewer reads these elements back (see canvas/container.py).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup
from markdown_it.token import Token

from models import (
    ICON_NAMESPACE_PREFIX,
    MAP_CONTAINER_CLASS,
    MARKER_ELEMENT_CLASS,
    MapDeclaration,
    MapRenderSpec,
    MarkerRecord,
)
from pipeline.map_parser import find_map_blocks, parse_map_block
from pipeline.registry import MarkerRegistry
from settings import MapDefaults, MarkerDefaults
from utils import clamp, format_number, source_to_text
from vault.documents import Document
from vault.paths import resolve_relative, transform_link

log = logging.getLogger(__name__)


def effective_zoom(declaration: MapDeclaration, defaults: MapDefaults) -> tuple[float, float, float]:
    """
    Effective ``(min, max, default)`` zoom of a map.

    The maximum never falls below the minimum, and the default zoom is
    clamped into ``[min, max]``.
    """
    min_zoom = declaration.min_zoom if declaration.min_zoom is not None else defaults.min_zoom
    max_zoom = declaration.max_zoom if declaration.max_zoom is not None else defaults.max_zoom
    max_zoom = max(max_zoom, min_zoom)
    default = declaration.default_zoom if declaration.default_zoom is not None else min_zoom
    return min_zoom, max_zoom, clamp(default, min_zoom, max_zoom)


def build_render_spec(
    declaration: MapDeclaration,
    current_slug: str,
    registry: MarkerRegistry,
    all_slugs: Iterable[str],
    defaults: Optional[MapDefaults] = None,
) -> MapRenderSpec:
    """
    Resolve a declaration and its markers for the note *current_slug*.

    Args:
        declaration: Validated map declaration
        current_slug: Slug of the note being rendered
        registry: Sealed marker registry
        all_slugs: Every slug of the document set, for image lookup
        defaults: Fallbacks for omitted fields

    Returns:
        The render spec, markers ordered shared bucket first
    """
    defaults = defaults or MapDefaults()
    registry.require_sealed()

    min_zoom, max_zoom, default_zoom = effective_zoom(declaration, defaults)
    src = transform_link(current_slug, source_to_text(declaration.image), all_slugs, strategy="shortest")

    def pick(value, fallback):
        return value if value is not None else fallback

    return MapRenderSpec(
        src=src,
        height=pick(declaration.height, defaults.height),
        min_zoom=min_zoom,
        max_zoom=max_zoom,
        default_zoom=default_zoom,
        zoom_delta=pick(declaration.zoom_delta, defaults.zoom_delta),
        scale=pick(declaration.scale, defaults.scale),
        unit=pick(declaration.unit, defaults.unit),
        name=declaration.name,
        markers=registry.markers_for(declaration.name),
    )


def marker_icon(icon: Optional[str], defaults: MarkerDefaults) -> str:
    """Icon name without its namespace prefix (``lucide-castle`` -> ``castle``)."""
    icon = icon or defaults.icon
    if ":" in icon:
        icon = icon.split(":", 1)[1]
    if icon.startswith(ICON_NAMESPACE_PREFIX):
        icon = icon[len(ICON_NAMESPACE_PREFIX):]
    return icon


def marker_attributes(
    marker: MarkerRecord,
    current_slug: str,
    map_min_zoom: float,
    defaults: MarkerDefaults,
) -> dict:
    min_zoom = marker.min_zoom if marker.min_zoom is not None else map_min_zoom
    return {
        "class": MARKER_ELEMENT_CLASS,
        "data-name": marker.name,
        "data-link": resolve_relative(current_slug, marker.link),
        "data-coordinates": marker.coordinates,
        "data-icon": marker_icon(marker.icon, defaults),
        "data-colour": marker.colour or defaults.colour,
        "data-min-zoom": format_number(min_zoom),
    }


def render_container(
    spec: MapRenderSpec,
    current_slug: str,
    defaults: Optional[MarkerDefaults] = None,
) -> str:
    """Serialize a render spec to the container HTML."""
    defaults = defaults or MarkerDefaults()
    soup = BeautifulSoup("", "html.parser")

    wrapper = soup.new_tag("div")
    attrs = {"class": MAP_CONTAINER_CLASS}
    attrs.update({k: format_number(v) for k, v in spec.attributes().items()})
    container = soup.new_tag("div", attrs=attrs)
    wrapper.append(container)

    for marker in spec.markers:
        container.append(soup.new_tag(
            "div", attrs=marker_attributes(marker, current_slug, spec.min_zoom, defaults)
        ))

    return str(wrapper)


def _html_block(content: str, replaced: Token) -> Token:
    token = Token("html_block", "", 0)
    token.content = content + "\n"
    token.block = True
    token.map = replaced.map
    return token


def transform_document(
    tokens: List[Token],
    document: Document,
    registry: MarkerRegistry,
    all_slugs: Iterable[str],
    map_defaults: Optional[MapDefaults] = None,
    marker_defaults: Optional[MarkerDefaults] = None,
) -> int:
    """
    Replace every map block of a note's token stream with its container.

    Replacement happens in place, at the block's own index, so the map
    keeps its position among its siblings. Blocks that do not declare a
    valid map are left untouched.

    Returns:
        Number of maps rendered
    """
    registry.require_sealed()
    all_slugs = list(all_slugs)
    rendered = 0

    for index in find_map_blocks(tokens):
        declaration = parse_map_block(tokens[index].content)
        if declaration is None:
            continue
        spec = build_render_spec(declaration, document.slug, registry, all_slugs, map_defaults)
        tokens[index] = _html_block(render_container(spec, document.slug, marker_defaults), tokens[index])
        rendered += 1
        log.debug("%s: map '%s' rendered with %d marker(s)", document.slug, spec.name or "", len(spec.markers))

    return rendered
