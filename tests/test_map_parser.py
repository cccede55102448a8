"""Tests for finding and parsing map blocks."""
from __future__ import annotations

from markdown_it import MarkdownIt

from pipeline.map_parser import find_map_blocks, map_candidates, parse_map_block


def _block(views: str) -> str:
    return "views:\n" + views


class TestParseMapBlock:
    def test_single_valid_view(self):
        decl = parse_map_block(_block(
            "  - type: leaflet-map\n"
            "    name: Town\n"
            "    image: town.png\n"
            "    maxZoom: 3\n"
            "    scale: 2\n"
            "    unit: ft\n"
        ))
        assert decl is not None
        assert decl.name == "Town"
        assert decl.image == "town.png"
        assert decl.max_zoom == 3.0
        assert decl.scale == 2.0
        assert decl.unit == "ft"
        assert decl.min_zoom is None

    def test_first_candidate_decides(self):
        # The first map view is missing its image; the valid one after it is not used
        source = _block(
            "  - type: leaflet-map\n"
            "    name: Broken\n"
            "  - type: leaflet-map\n"
            "    image: town.png\n"
        )
        assert parse_map_block(source) is None

    def test_non_map_views_are_skipped(self):
        source = _block(
            "  - type: table\n"
            "    name: Inventory\n"
            "  - type: leaflet-map\n"
            "    image: town.png\n"
        )
        assert parse_map_block(source).image == "town.png"

    def test_nested_views_are_not_candidates(self):
        source = _block(
            "  - type: leaflet-map\n"
            "    image: town.png\n"
            "    order: [a, b]\n"
        )
        assert parse_map_block(source) is None

    def test_numeric_strings_are_coerced(self):
        decl = parse_map_block(_block(
            "  - type: leaflet-map\n"
            "    image: town.png\n"
            "    height: '400px'\n"
            "    zoomDelta: '0.25'\n"
        ))
        assert decl.height == 400.0
        assert decl.zoom_delta == 0.25

    def test_unreadable_number_rejects_the_map(self):
        source = _block(
            "  - type: leaflet-map\n"
            "    image: town.png\n"
            "    scale: lots\n"
        )
        assert parse_map_block(source) is None

    def test_map_name_fallback(self):
        decl = parse_map_block(_block(
            "  - type: leaflet-map\n"
            "    mapName: Town\n"
            "    image: town.png\n"
        ))
        assert decl.name == "Town"

    def test_invalid_yaml(self):
        assert parse_map_block("views: [unclosed") is None

    def test_out_of_range_date(self):
        # yaml reads the value as a timestamp and fails with ValueError
        assert parse_map_block(
            "views:\n"
            "  - type: leaflet-map\n"
            "    image: town.png\n"
            "    note: 2020-13-45\n"
        ) is None

    def test_no_views(self):
        assert parse_map_block("title: nothing here") is None
        assert parse_map_block("views: not-a-list") is None
        assert parse_map_block("") is None


class TestCandidates:
    def test_candidates_in_view_order(self):
        entry = {"views": [
            {"type": "leaflet-map", "image": "a.png"},
            {"type": "cards"},
            {"type": "leaflet-map", "image": "b.png"},
        ]}
        assert [c["image"] for c in map_candidates(entry)] == ["a.png", "b.png"]

    def test_entry_not_a_mapping(self):
        assert map_candidates(["views"]) == []


class TestFindMapBlocks:
    def test_only_base_fences(self):
        md = MarkdownIt("commonmark")
        tokens = md.parse(
            "# Title\n\n"
            "```base\nviews: []\n```\n\n"
            "```python\nprint(1)\n```\n\n"
            "```Base extra\nviews: []\n```\n"
        )
        indices = find_map_blocks(tokens)
        assert len(indices) == 2
        assert all(tokens[i].type == "fence" for i in indices)
