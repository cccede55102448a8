"""Tests for reading map containers back from rendered HTML."""
from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from canvas.container import (
    find_map_containers,
    parse_coordinates,
    read_map_container,
    read_marker_elements,
)

CONTAINER = (
    '<div><div class="leaflet-map" data-src="./town.png" data-height="400" '
    'data-min-zoom="0" data-max-zoom="2" data-default-zoom="1" data-zoom-delta="0.5" '
    'data-scale="2" data-unit="ft">'
    '<div class="leaflet-marker" data-name="Harbour" data-link="./harbour" '
    'data-coordinates="10, 20" data-icon="anchor" data-colour="#f00" data-min-zoom="1"></div>'
    '<div class="leaflet-marker" data-name="Broken" data-link="./broken" '
    'data-icon="anchor" data-colour="#f00" data-min-zoom="1"></div>'
    '</div></div>'
)


def _container(html=CONTAINER):
    soup = BeautifulSoup(html, "html.parser")
    (tag,) = find_map_containers(soup)
    return tag


class TestParseCoordinates:
    def test_pair(self):
        assert parse_coordinates("10, 20") == (10, 20)
        assert parse_coordinates(" 3 ,4") == (3, 4)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_coordinates("abc")


class TestReadMapContainer:
    def test_attributes(self):
        data = read_map_container(_container())
        assert data.src == "./town.png"
        assert data.height == 400
        assert (data.min_zoom, data.max_zoom, data.default_zoom) == (0, 2, 1)
        assert data.zoom_delta == 0.5
        assert data.scale == 2
        assert data.unit == "ft"

    def test_empty_unit_is_allowed(self):
        data = read_map_container(_container(CONTAINER.replace('data-unit="ft"', 'data-unit=""')))
        assert data.unit == ""

    def test_missing_attribute(self):
        assert read_map_container(_container(CONTAINER.replace('data-scale="2" ', ""))) is None

    def test_unreadable_number(self):
        assert read_map_container(_container(CONTAINER.replace('data-height="400"', 'data-height="tall"'))) is None


class TestReadMarkers:
    def test_incomplete_markers_discarded(self):
        markers = read_marker_elements(_container())
        assert len(markers) == 1
        m = markers[0]
        assert (m.name, m.link, m.coordinates, m.icon, m.colour, m.min_zoom) == (
            "Harbour", "./harbour", (10, 20), "anchor", "#f00", 1.0,
        )

    def test_placeholders_removed(self):
        tag = _container()
        read_marker_elements(tag)
        assert tag.find_all("div", class_="leaflet-marker") == []
