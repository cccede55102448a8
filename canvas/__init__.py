"""
canvas package

PyQt6 map viewer: container reading, scene, view, marker pins, tools and
the per-map controller.
"""

from canvas.container import (
    MapContainerData,
    MarkerDescriptor,
    find_map_containers,
    parse_coordinates,
    read_map_container,
    read_marker_elements,
)
from canvas.controller import MapController, PageLifecycle, marker_visible
from canvas.items import MarkerPinItem, MeasureLabelItem, MeasureVertexItem
from canvas.measure import MeasureEvent, MeasurementSession, MeasureState, TRANSITIONS
from canvas.scene import MapScene
from canvas.tools import MapTool, MeasureTool, PanTool, ToolBar, ToolNotAttachedError
from canvas.view import MapView

__all__ = [
    "MapContainerData",
    "MarkerDescriptor",
    "find_map_containers",
    "parse_coordinates",
    "read_map_container",
    "read_marker_elements",
    "MapController",
    "PageLifecycle",
    "marker_visible",
    "MarkerPinItem",
    "MeasureLabelItem",
    "MeasureVertexItem",
    "MeasureEvent",
    "MeasurementSession",
    "MeasureState",
    "TRANSITIONS",
    "MapScene",
    "MapTool",
    "MeasureTool",
    "PanTool",
    "ToolBar",
    "ToolNotAttachedError",
    "MapView",
]
