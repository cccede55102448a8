"""
models.py

Data models and constants shared by the build pipeline and the map viewer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


# ----------------------------
# Author-facing keys
# ----------------------------

MARKER_FRONTMATTER_KEY = "marker"   # front matter list of marker declarations
MAP_BLOCK_LANGUAGE = "base"         # fenced block discriminator
MAP_VIEW_TYPE = "leaflet-map"       # view discriminator inside a block

MAP_CONTAINER_CLASS = "leaflet-map"
MARKER_ELEMENT_CLASS = "leaflet-marker"

ICON_NAMESPACE_PREFIX = "lucide-"


# ----------------------------
# Marker model
# ----------------------------

@dataclass(frozen=True)
class MarkerRecord:
    """A validated marker declaration bound to the note that declared it.

    ``name`` is the owning note's title and ``link`` its slug. Records are
    never mutated after extraction.
    """
    coordinates: str
    name: str
    link: str
    map_name: Optional[str] = None
    icon: Optional[str] = None
    colour: Optional[str] = None
    min_zoom: Optional[float] = None

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any], name: str, link: str) -> "MarkerRecord":
        """Create a record from a validated front matter entry.

        Args:
            entry: Flat record that already passed the marker schema.
            name: Title of the declaring note.
            link: Slug of the declaring note.
        """
        min_zoom = entry.get("minZoom")
        return cls(
            coordinates=entry["coordinates"],
            name=name,
            link=link,
            map_name=entry.get("mapName") or None,
            icon=entry.get("icon"),
            colour=entry.get("colour"),
            min_zoom=float(min_zoom) if min_zoom is not None else None,
        )


# ----------------------------
# Map model
# ----------------------------

ImageSource = Union[str, List[Any]]


@dataclass
class MapDeclaration:
    """An image map declared by a ``leaflet-map`` view in a ``base`` block."""
    image: ImageSource
    name: Optional[str] = None
    height: Optional[float] = None
    min_zoom: Optional[float] = None
    max_zoom: Optional[float] = None
    default_zoom: Optional[float] = None
    zoom_delta: Optional[float] = None
    scale: Optional[float] = None
    unit: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "MapDeclaration":
        """Create a declaration from a record that passed the map schema."""
        return cls(
            image=record["image"],
            name=record.get("name") or None,
            height=record.get("height"),
            min_zoom=record.get("minZoom"),
            max_zoom=record.get("maxZoom"),
            default_zoom=record.get("defaultZoom"),
            zoom_delta=record.get("zoomDelta"),
            scale=record.get("scale"),
            unit=record.get("unit"),
        )


@dataclass(frozen=True)
class MapRenderSpec:
    """Resolved parameters for one rendered map instance."""
    src: str
    height: float
    min_zoom: float
    max_zoom: float
    default_zoom: float
    zoom_delta: float
    scale: float
    unit: str
    name: Optional[str] = None
    markers: Tuple[MarkerRecord, ...] = field(default_factory=tuple)

    def attributes(self) -> Dict[str, Any]:
        """Container ``data-*`` attribute values, in emission order."""
        return {
            "data-src": self.src,
            "data-height": self.height,
            "data-min-zoom": self.min_zoom,
            "data-max-zoom": self.max_zoom,
            "data-default-zoom": self.default_zoom,
            "data-zoom-delta": self.zoom_delta,
            "data-scale": self.scale,
            "data-unit": self.unit,
        }
