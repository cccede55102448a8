"""
canvas/container.py

Reading rendered map containers back into typed descriptors.

The container attributes are written by pipeline/transform.py. Marker
children are inert data carriers: once read they are removed from the
tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4 import Tag

from models import MAP_CONTAINER_CLASS, MARKER_ELEMENT_CLASS

_COORDINATES_RE = re.compile(r"^\s*(\d+)\s*,\s*(\d+)\s*$")

MAP_ATTRIBUTES = (
    "data-src", "data-height", "data-min-zoom", "data-max-zoom",
    "data-default-zoom", "data-zoom-delta", "data-scale", "data-unit",
)
MARKER_ATTRIBUTES = (
    "data-name", "data-link", "data-coordinates",
    "data-icon", "data-colour", "data-min-zoom",
)


@dataclass(frozen=True)
class MarkerDescriptor:
    """A marker as read from the page."""
    name: str
    link: str
    coordinates: Tuple[int, int]
    icon: str
    colour: str
    min_zoom: float


@dataclass(frozen=True)
class MapContainerData:
    """Map parameters as read from the page."""
    src: str
    height: float
    min_zoom: float
    max_zoom: float
    default_zoom: float
    zoom_delta: float
    scale: float
    unit: str


def parse_coordinates(text: str) -> Tuple[int, int]:
    """``"10, 20"`` -> ``(10, 20)``. Raises ValueError on anything else."""
    m = _COORDINATES_RE.match(text)
    if not m:
        raise ValueError(f"invalid coordinates: {text!r}")
    return int(m.group(1)), int(m.group(2))


def find_map_containers(root: Tag) -> List[Tag]:
    return root.find_all("div", class_=MAP_CONTAINER_CLASS)


def read_map_container(tag: Tag) -> Optional[MapContainerData]:
    """Container parameters, or None when an attribute is missing or unreadable."""
    if any(tag.get(attr) is None for attr in MAP_ATTRIBUTES):
        return None
    try:
        return MapContainerData(
            src=tag["data-src"],
            height=float(tag["data-height"]),
            min_zoom=float(tag["data-min-zoom"]),
            max_zoom=float(tag["data-max-zoom"]),
            default_zoom=float(tag["data-default-zoom"]),
            zoom_delta=float(tag["data-zoom-delta"]),
            scale=float(tag["data-scale"]),
            unit=tag["data-unit"],
        )
    except ValueError:
        return None


def read_marker_element(tag: Tag) -> Optional[MarkerDescriptor]:
    """One marker descriptor, or None if a required attribute is missing."""
    values = {attr: tag.get(attr) for attr in MARKER_ATTRIBUTES}
    if any(v is None or v == "" for v in values.values()):
        return None
    try:
        return MarkerDescriptor(
            name=values["data-name"],
            link=values["data-link"],
            coordinates=parse_coordinates(values["data-coordinates"]),
            icon=values["data-icon"],
            colour=values["data-colour"],
            min_zoom=float(values["data-min-zoom"]),
        )
    except ValueError:
        return None


def read_marker_elements(container: Tag) -> List[MarkerDescriptor]:
    """
    Read every marker child of *container* and remove the placeholders.

    Incomplete markers are discarded.
    """
    markers: List[MarkerDescriptor] = []
    for element in container.find_all("div", class_=MARKER_ELEMENT_CLASS):
        marker = read_marker_element(element)
        if marker is not None:
            markers.append(marker)
        element.decompose()
    return markers
