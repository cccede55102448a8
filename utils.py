"""
utils.py

Utility functions shared by the build pipeline and the viewer.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Union

_NUMBER_PREFIX_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_NATURAL_SPLIT_RE = re.compile(r"(\d+)")


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* into ``[lo, hi]``."""
    return min(max(value, lo), hi)


def coerce_number(value: Any) -> Optional[float]:
    """
    Coerce an author-supplied value to a float.

    Numbers pass through as floats. Strings are read by their leading numeric
    prefix, so ``"2.5 ft"`` becomes ``2.5``. ``None`` and blank strings mean
    "not given" and return ``None``. Anything else that cannot be read
    returns NaN, which the schema predicates reject.

    Args:
        value: Raw value from a YAML view record

    Returns:
        The float value, ``None`` when absent, or NaN when unreadable
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value)
    if not text.strip():
        return None
    match = _NUMBER_PREFIX_RE.match(text)
    if not match:
        return math.nan
    return float(match.group(0))


def format_number(value: Union[int, float, str]) -> str:
    """
    Format a number for an HTML attribute.

    Integral floats drop their decimal part (``2.0`` -> ``"2"``); other
    values use Python's shortest round-trip representation.
    """
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def source_to_text(value: Any) -> str:
    """
    Flatten an image reference to text.

    Strings pass through; nested lists (``[[town.png]]`` parsed by YAML as a
    list of lists) are flattened and comma-joined.
    """
    if isinstance(value, (list, tuple)):
        return ",".join(source_to_text(v) for v in value)
    if value is None:
        return ""
    return str(value)


def natural_key(text: str) -> List[Any]:
    """Case-insensitive sort key that orders embedded numbers numerically."""
    parts = _NATURAL_SPLIT_RE.split(text.casefold())
    return [(0, int(p)) if p.isdigit() else (1, p) for p in parts if p != ""]
