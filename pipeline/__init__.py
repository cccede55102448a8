"""
pipeline package

Build pipeline: marker extraction, map block parsing, container rendering
and the two-phase site builder.
"""

from pipeline.build import RenderedPage, SiteBuilder
from pipeline.extractor import extract_markers
from pipeline.map_parser import find_map_blocks, parse_map_block
from pipeline.registry import IMPLICIT_MAP_KEY, MarkerRegistry, RegistrySealedError
from pipeline.transform import build_render_spec, render_container, transform_document

__all__ = [
    "RenderedPage",
    "SiteBuilder",
    "extract_markers",
    "find_map_blocks",
    "parse_map_block",
    "IMPLICIT_MAP_KEY",
    "MarkerRegistry",
    "RegistrySealedError",
    "build_render_spec",
    "render_container",
    "transform_document",
]
