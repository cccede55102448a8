"""
schemas/__init__.py

Declarative schemas for author-supplied marker and map records.

A schema maps a field name to a :class:`FieldRule` (a predicate plus a
required flag) and every record is checked against it the same way. Schemas
are open: keys that are not listed are ignored.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Tuple

Predicate = Callable[[Any], bool]

COORDINATES_RE = re.compile(r"[0-9]+\s*,\s*[0-9]+")
ICON_RE = re.compile(r"([a-z]+:)?[a-z0-9]+(-[a-z0-9]+)*")
COLOUR_RE = re.compile(r"#([0-9a-f]{3}){1,2}", re.IGNORECASE)


# -------------------------------------------------------------------------
# Predicates
# -------------------------------------------------------------------------

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_source(value: Any) -> bool:
    """An image reference: any value with a non-empty string form."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return bool(str(value))


def is_number(value: Any) -> bool:
    """Finite int or float. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_positive_number(value: Any) -> bool:
    return is_number(value) and value > 0


def is_coordinates(value: Any) -> bool:
    """``"<int>,<int>"`` with optional whitespace around the comma."""
    return isinstance(value, str) and COORDINATES_RE.fullmatch(value.strip()) is not None


def is_icon(value: Any) -> bool:
    """Icon slug such as ``castle`` or ``lucide-map-pin``; ``ns:`` prefix allowed."""
    return isinstance(value, str) and ICON_RE.fullmatch(value) is not None


def is_colour(value: Any) -> bool:
    """``#`` followed by 3 or 6 hex digits."""
    return isinstance(value, str) and COLOUR_RE.fullmatch(value) is not None


# -------------------------------------------------------------------------
# Schema structure
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldRule:
    """Validation rule for one field of a flat record."""

    predicate: Predicate
    required: bool = False


Schema = Mapping[str, FieldRule]


MARKER_SCHEMA: Dict[str, FieldRule] = {
    "mapName": FieldRule(is_string),
    "coordinates": FieldRule(is_coordinates, required=True),
    "icon": FieldRule(is_icon),
    "colour": FieldRule(is_colour),
    "minZoom": FieldRule(is_number),
}

MAP_SCHEMA: Dict[str, FieldRule] = {
    "name": FieldRule(is_string),
    "image": FieldRule(is_source, required=True),
    "height": FieldRule(is_number),
    "minZoom": FieldRule(is_number),
    "maxZoom": FieldRule(is_number),
    "defaultZoom": FieldRule(is_number),
    "zoomDelta": FieldRule(is_positive_number),
    "scale": FieldRule(is_number),
    "unit": FieldRule(is_string),
}


def is_non_empty_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) > 0


def is_flat_record(value: Any) -> bool:
    """Non-empty mapping whose values are all strings or numbers.

    Nested mappings, lists, booleans and nulls disqualify the record
    outright, independent of any schema.
    """
    if not is_non_empty_mapping(value):
        return False
    return all(
        isinstance(v, (str, int, float)) and not isinstance(v, bool)
        for v in value.values()
    )


def check_record(schema: Schema, value: Any) -> Tuple[bool, List[str]]:
    """
    Check a record against a schema.

    Args:
        schema: Field name -> :class:`FieldRule`
        value: The candidate record

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    if not is_non_empty_mapping(value):
        return False, ["record is empty or not a mapping"]

    errors: List[str] = []
    for key, rule in schema.items():
        field_value = value.get(key)
        if field_value is None:
            if rule.required:
                errors.append(f"{key}: required field missing")
            continue
        if not rule.predicate(field_value):
            errors.append(f"{key}: invalid value {field_value!r}")

    return not errors, errors


def validate_record(schema: Schema, value: Any) -> bool:
    """Return True when *value* satisfies every rule in *schema*."""
    ok, _ = check_record(schema, value)
    return ok


def validate_marker(value: Any) -> bool:
    return validate_record(MARKER_SCHEMA, value)


def validate_map(value: Any) -> bool:
    return validate_record(MAP_SCHEMA, value)
