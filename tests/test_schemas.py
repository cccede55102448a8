"""Tests for the field predicates and record validation in schemas/."""
from __future__ import annotations

import math

import pytest

from schemas import (
    MAP_SCHEMA,
    MARKER_SCHEMA,
    check_record,
    is_colour,
    is_coordinates,
    is_flat_record,
    is_icon,
    is_number,
    is_positive_number,
    is_source,
    validate_map,
    validate_marker,
)


# ─────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────


class TestCoordinates:
    @pytest.mark.parametrize("value", ["10, 20", "10,20", "0 ,  5", " 3,4 "])
    def test_accepts_integer_pairs(self, value):
        assert is_coordinates(value)

    @pytest.mark.parametrize("value", ["abc", "10", "10, 20, 30", "1.5, 2", "-1, 2", "", "10,"])
    def test_rejects_everything_else(self, value):
        assert not is_coordinates(value)

    def test_rejects_non_strings(self):
        assert not is_coordinates([10, 20])
        assert not is_coordinates(1020)


class TestIcon:
    @pytest.mark.parametrize("value", ["castle", "map-pin", "lucide-castle", "lucide:castle", "circle-small", "building-2", "lucide-trash-2"])
    def test_accepts_slugs(self, value):
        assert is_icon(value)

    @pytest.mark.parametrize("value", ["Castle", "map_pin", "-pin", "pin-", "pin--2", "", "a:b:c"])
    def test_rejects_other_text(self, value):
        assert not is_icon(value)


class TestColour:
    @pytest.mark.parametrize("value", ["#fff", "#FFF", "#21409a", "#A0b1C2"])
    def test_accepts_hex(self, value):
        assert is_colour(value)

    @pytest.mark.parametrize("value", ["fff", "#ffff", "#12345", "#ggg", "red", "#1234567"])
    def test_rejects_other_text(self, value):
        assert not is_colour(value)


class TestNumbers:
    def test_number(self):
        assert is_number(0)
        assert is_number(2.5)
        assert not is_number(True)
        assert not is_number("2")
        assert not is_number(math.nan)
        assert not is_number(math.inf)

    def test_positive_number(self):
        assert is_positive_number(0.5)
        assert not is_positive_number(0)
        assert not is_positive_number(-1)


class TestSource:
    def test_strings_and_lists(self):
        assert is_source("town.png")
        assert is_source([["town.png"]])

    def test_empty_values(self):
        assert not is_source("")
        assert not is_source([])
        assert not is_source(None)


class TestFlatRecord:
    def test_strings_and_numbers(self):
        assert is_flat_record({"coordinates": "1, 2", "minZoom": 1})

    def test_nested_values_disqualify(self):
        assert not is_flat_record({"coordinates": "1, 2", "extra": {"a": 1}})
        assert not is_flat_record({"coordinates": "1, 2", "extra": [1]})
        assert not is_flat_record({"coordinates": "1, 2", "flag": True})
        assert not is_flat_record({"coordinates": "1, 2", "empty": None})

    def test_empty_or_not_a_mapping(self):
        assert not is_flat_record({})
        assert not is_flat_record("coordinates")


# ─────────────────────────────────────────────────────────
# Record validation
# ─────────────────────────────────────────────────────────


class TestMarkerSchema:
    def test_minimal_marker(self):
        assert validate_marker({"coordinates": "10, 20"})

    def test_full_marker(self):
        assert validate_marker({
            "coordinates": "10, 20",
            "mapName": "Town",
            "icon": "lucide-castle",
            "colour": "#f00",
            "minZoom": 1,
        })

    def test_missing_coordinates(self):
        ok, errors = check_record(MARKER_SCHEMA, {"mapName": "Town"})
        assert not ok
        assert any("coordinates" in e for e in errors)

    def test_bad_coordinates(self):
        assert not validate_marker({"coordinates": "abc"})

    def test_icon_with_number_segment(self):
        assert validate_marker({"coordinates": "1,2", "icon": "building-2"})

    def test_unknown_keys_are_ignored(self):
        assert validate_marker({"coordinates": "1, 1", "note": "anything"})

    def test_bad_optional_field(self):
        assert not validate_marker({"coordinates": "1, 1", "colour": "blue"})
        assert not validate_marker({"coordinates": "1, 1", "minZoom": "high"})

    def test_empty_record(self):
        assert not validate_marker({})
        assert not validate_marker(None)


class TestMapSchema:
    def test_image_only(self):
        assert validate_map({"image": "town.png"})

    def test_missing_image(self):
        ok, errors = check_record(MAP_SCHEMA, {"name": "Town", "minZoom": 0})
        assert not ok
        assert errors == ["image: required field missing"]

    def test_zoom_delta_must_be_positive(self):
        assert not validate_map({"image": "town.png", "zoomDelta": 0})
        assert validate_map({"image": "town.png", "zoomDelta": 0.25})

    def test_nan_from_coercion_is_rejected(self):
        assert not validate_map({"image": "town.png", "scale": math.nan})

    def test_absent_optional_fields(self):
        assert validate_map({"image": "town.png", "scale": None, "unit": None})
