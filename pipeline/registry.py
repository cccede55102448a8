"""
pipeline/registry.py

Marker registry shared by every note of one build run.

Markers are collected during the extraction phase and grouped by the map
they target. Markers that name no map go to a shared bucket and appear on
every map. The registry is sealed once extraction has run over the whole
document set; rendering reads it only after that point.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from models import MarkerRecord

IMPLICIT_MAP_KEY = "notDefinedMap"


class RegistrySealedError(RuntimeError):
    """Raised when the two build phases are scheduled out of order."""


class MarkerRegistry:
    """Markers grouped by target map name, with an explicit sealed state."""

    def __init__(self):
        self._buckets: Dict[str, List[MarkerRecord]] = {IMPLICIT_MAP_KEY: []}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """End the extraction phase. Sealing twice is harmless."""
        self._sealed = True

    def require_sealed(self) -> None:
        if not self._sealed:
            raise RegistrySealedError("marker registry read before extraction finished")

    def add(self, marker: MarkerRecord) -> None:
        """File *marker* under its map name, or the shared bucket."""
        if self._sealed:
            raise RegistrySealedError(
                f"cannot add marker for '{marker.link}': registry is sealed"
            )
        key = marker.map_name or IMPLICIT_MAP_KEY
        self._buckets.setdefault(key, []).append(marker)

    def bucket(self, key: str) -> Tuple[MarkerRecord, ...]:
        return tuple(self._buckets.get(key, ()))

    def markers_for(self, map_name: Optional[str]) -> Tuple[MarkerRecord, ...]:
        """Markers shown on a map: the shared bucket, then the named bucket."""
        shared = self.bucket(IMPLICIT_MAP_KEY)
        if not map_name:
            return shared
        return shared + self.bucket(map_name)

    def __len__(self) -> int:
        return sum(len(v) for v in self._buckets.values())
