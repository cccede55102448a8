"""Tests for marker extraction and the marker registry."""
from __future__ import annotations

import pytest

from models import MarkerRecord
from pipeline.extractor import extract_markers, parse_marker_entry
from pipeline.registry import IMPLICIT_MAP_KEY, MarkerRegistry, RegistrySealedError
from vault.documents import Document


def _doc(slug="places/harbour", title="Harbour", markers=None, **frontmatter):
    if markers is not None:
        frontmatter["marker"] = markers
    return Document(slug=slug, title=title, frontmatter=frontmatter)


# ─────────────────────────────────────────────────────────
# parse_marker_entry
# ─────────────────────────────────────────────────────────


class TestParseMarkerEntry:
    def test_valid_entry(self):
        m = parse_marker_entry({"coordinates": "10, 20", "mapName": "Town", "minZoom": 2}, "Harbour", "harbour")
        assert m == MarkerRecord(
            coordinates="10, 20", name="Harbour", link="harbour", map_name="Town", min_zoom=2.0,
        )

    def test_invalid_coordinates_dropped(self):
        assert parse_marker_entry({"coordinates": "abc"}, "Harbour", "harbour") is None

    def test_nested_entry_dropped(self):
        assert parse_marker_entry({"coordinates": "1, 2", "style": {"colour": "#fff"}}, "H", "h") is None

    def test_non_mapping_dropped(self):
        assert parse_marker_entry("10, 20", "H", "h") is None

    def test_records_are_frozen(self):
        m = parse_marker_entry({"coordinates": "1, 2"}, "H", "h")
        with pytest.raises(AttributeError):
            m.name = "other"


# ─────────────────────────────────────────────────────────
# extract_markers
# ─────────────────────────────────────────────────────────


class TestExtractMarkers:
    def test_collects_valid_markers_in_order(self):
        registry = MarkerRegistry()
        doc = _doc(markers=[
            {"coordinates": "1, 1"},
            {"coordinates": "abc"},
            {"coordinates": "2, 2", "mapName": "Town"},
        ])
        added = extract_markers(doc, registry)
        assert [m.coordinates for m in added] == ["1, 1", "2, 2"]
        assert len(registry) == 2

    def test_rejected_marker_in_no_bucket(self):
        registry = MarkerRegistry()
        extract_markers(_doc(markers=[{"coordinates": "abc", "mapName": "Town"}]), registry)
        assert len(registry) == 0
        assert registry.bucket("Town") == ()
        assert registry.bucket(IMPLICIT_MAP_KEY) == ()

    def test_name_and_link_come_from_document(self):
        registry = MarkerRegistry()
        (m,) = extract_markers(_doc(markers=[{"coordinates": "1, 1"}]), registry)
        assert m.name == "Harbour"
        assert m.link == "places/harbour"

    def test_marker_key_not_a_list(self):
        registry = MarkerRegistry()
        assert extract_markers(_doc(markers={"coordinates": "1, 1"}), registry) == []

    def test_document_without_title(self):
        registry = MarkerRegistry()
        assert extract_markers(_doc(title=None, markers=[{"coordinates": "1, 1"}]), registry) == []

    def test_no_marker_key(self):
        assert extract_markers(_doc(), MarkerRegistry()) == []


# ─────────────────────────────────────────────────────────
# MarkerRegistry
# ─────────────────────────────────────────────────────────


class TestRegistry:
    def _marker(self, map_name=None, coords="1, 1"):
        return MarkerRecord(coordinates=coords, name="N", link="n", map_name=map_name)

    def test_unnamed_markers_go_to_shared_bucket(self):
        registry = MarkerRegistry()
        registry.add(self._marker())
        assert len(registry.bucket(IMPLICIT_MAP_KEY)) == 1

    def test_markers_for_named_map(self):
        registry = MarkerRegistry()
        shared = self._marker(coords="1, 1")
        town = self._marker("Town", "2, 2")
        other = self._marker("Other", "3, 3")
        for m in (town, shared, other):
            registry.add(m)
        assert registry.markers_for("Town") == (shared, town)
        assert registry.markers_for("Other") == (shared, other)
        assert registry.markers_for(None) == (shared,)

    def test_add_after_seal_raises(self):
        registry = MarkerRegistry()
        registry.seal()
        with pytest.raises(RegistrySealedError):
            registry.add(self._marker())

    def test_require_sealed(self):
        registry = MarkerRegistry()
        with pytest.raises(RegistrySealedError):
            registry.require_sealed()
        registry.seal()
        registry.seal()
        registry.require_sealed()
