"""Tests for the map view zoom model, graphics items and the tool bar.

Runs on Qt's offscreen platform (see conftest.py).
"""
from __future__ import annotations

import pytest
from PyQt6.QtCore import Qt, QPointF
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsView

from canvas.container import MarkerDescriptor
from canvas.items import MarkerPinItem, glyph_for_icon, hex_to_qcolor, pin_path
from canvas.measure import MeasureState
from canvas.scene import MapScene
from canvas.tools import MeasureTool, PanTool, ToolBar, ToolNotAttachedError
from canvas.view import MapView, snap_zoom


class _Host:
    """Minimal tool host: a scene and a view over it."""

    def __init__(self, width=100, height=80):
        self.scene = MapScene(width, height)
        self.view = MapView(self.scene, min_zoom=0, max_zoom=2, zoom_delta=0.5)


@pytest.fixture()
def host(qapp):
    return _Host()


@pytest.fixture()
def toolbar(host):
    tb = ToolBar(host)
    tb.add_tool(PanTool())
    tb.add_tool(MeasureTool(scale=1.0, unit="ft"))
    return tb


def _click(toolbar, host, lat, lng, item=None):
    toolbar.dispatch_click(host.scene.map_to_scene(lat, lng), item)


# ─────────────────────────────────────────────────────────
# Scene and view
# ─────────────────────────────────────────────────────────


class TestMapScene:
    def test_coordinate_conversion(self, qapp):
        scene = MapScene(200, 100)
        p = scene.map_to_scene(10, 20)
        assert (p.x(), p.y()) == (20, 90)
        assert scene.scene_to_map(p) == (10, 20)

    def test_missing_image_draws_placeholder(self, qapp):
        scene = MapScene(50, 50)
        assert scene.set_image(None) is False
        assert scene.placeholder_item is not None


class TestMapView:
    def test_snap(self):
        assert snap_zoom(0.013, 0.01) == pytest.approx(0.01)
        assert snap_zoom(1.2345, 0) == 1.2345

    def test_set_zoom_clamps(self, host):
        assert host.view.set_zoom(5) == 2
        assert host.view.set_zoom(-3) == 0

    def test_scale_follows_zoom(self, host):
        host.view.set_zoom(1)
        assert host.view.transform().m11() == pytest.approx(2.0)

    def test_zoom_changed_signal(self, host):
        seen = []
        host.view.zoom_changed.connect(seen.append)
        host.view.zoom_in()
        host.view.zoom_in()
        host.view.set_zoom(1.0)  # unchanged, no signal
        assert seen == [0.5, 1.0]


# ─────────────────────────────────────────────────────────
# Items
# ─────────────────────────────────────────────────────────


class TestItems:
    def test_hex_colours(self, qapp):
        assert hex_to_qcolor("#f00").name() == "#ff0000"
        assert hex_to_qcolor("#21409a").name() == "#21409a"
        assert hex_to_qcolor("red", fallback="#000000").name() == "#000000"

    def test_pin_tip_at_origin(self, qapp):
        rect = pin_path().boundingRect()
        assert rect.width() == pytest.approx(32, abs=0.5)
        assert rect.bottom() == pytest.approx(0, abs=0.5)
        assert rect.center().x() == pytest.approx(0, abs=0.5)

    def test_marker_pin(self, qapp):
        marker = MarkerDescriptor("Harbour", "./harbour", (1, 2), "anchor", "#f00", 0)
        pin = MarkerPinItem(marker)
        assert pin.toolTip() == "Harbour"
        assert pin.link == "./harbour"
        assert pin.flags() & QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations
        assert glyph_for_icon("no-such-icon") == glyph_for_icon("circle-small")


# ─────────────────────────────────────────────────────────
# Tool bar and tools
# ─────────────────────────────────────────────────────────


class TestToolLifecycle:
    def test_unattached_tool_raises(self):
        with pytest.raises(ToolNotAttachedError):
            MeasureTool().on_selected()
        with pytest.raises(ToolNotAttachedError):
            PanTool().on_deselected()

    def test_first_tool_is_active(self, toolbar, host):
        assert toolbar.active_index == 0
        assert host.view.dragMode() == QGraphicsView.DragMode.ScrollHandDrag

    def test_measure_selection_changes_cursor_and_drag(self, toolbar, host):
        toolbar.select_by_name("measure")
        assert host.view.dragMode() == QGraphicsView.DragMode.NoDrag
        assert host.view.viewport().cursor().shape() == Qt.CursorShape.CrossCursor
        toolbar.select_by_name("pan")
        assert host.view.dragMode() == QGraphicsView.DragMode.ScrollHandDrag
        assert host.view.viewport().cursor().shape() != Qt.CursorShape.CrossCursor

    def test_unknown_tool_name(self, toolbar):
        with pytest.raises(KeyError):
            toolbar.select_by_name("lasso")

    def test_pan_ignores_clicks(self, toolbar, host):
        _click(toolbar, host, 0, 0)
        assert host.scene.items() == []


class TestMeasureTool:
    def test_full_measurement(self, toolbar, host):
        toolbar.select_by_name("measure")
        tool = toolbar.active_tool

        _click(toolbar, host, 0, 0)
        _click(toolbar, host, 3, 4)
        assert tool.state is MeasureState.MEASURING
        assert tool.session.distance == pytest.approx(5.0)

        toolbar.dispatch_pointer(host.scene.map_to_scene(3, 10))
        assert tool._preview_item is not None

        toolbar.dispatch_click(QPointF(), tool._vertex_items[-1])
        assert tool.state is MeasureState.FINISHING

        _click(toolbar, host, 50, 50)
        assert tool.state is MeasureState.DONE
        assert tool._preview_item is None
        assert tool._label_item.text() == "5.0 ft"
        assert len(tool._vertex_items) == 2

        _click(toolbar, host, 10, 10)
        assert tool.state is MeasureState.READY
        assert tool.rendered_items == []
        assert host.scene.items() == []

    def test_switching_tools_clears_the_path(self, toolbar, host):
        toolbar.select_by_name("measure")
        tool = toolbar.active_tool
        _click(toolbar, host, 0, 0)
        _click(toolbar, host, 0, 5)
        assert host.scene.items()

        toolbar.select_by_name("pan")
        assert tool.state is MeasureState.READY
        assert tool.session.distance == 0
        assert host.scene.items() == []

        toolbar.select_by_name("measure")
        assert tool.state is MeasureState.READY
        assert tool.rendered_items == []

    def test_zoom_buttons(self, toolbar, host):
        toolbar.add_zoom_controls()
        zoom_in, zoom_out = toolbar.zoom_buttons
        zoom_in.click()
        assert host.view.zoom == 0.5
        zoom_out.click()
        zoom_out.click()
        assert host.view.zoom == 0

    def test_update_settings(self, toolbar):
        toolbar.update_settings(2.0, "mi")
        tool = toolbar.tools[1]
        assert (tool.session.scale, tool.session.unit) == (2.0, "mi")

    def test_remove_all_detaches_tools(self, toolbar, host):
        toolbar.add_zoom_controls()
        toolbar.select_by_name("measure")
        tool = toolbar.active_tool
        _click(toolbar, host, 0, 0)
        toolbar.remove_all()
        assert toolbar.zoom_buttons == []
        assert toolbar.active_tool is None
        assert not tool.attached
        assert host.scene.items() == []
