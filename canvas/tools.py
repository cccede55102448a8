"""
canvas/tools.py

Map tools and the tool bar that switches between them.

A tool is added to a tool bar once, then selected and deselected any number
of times. Only the active tool receives map clicks and pointer moves.
"""

from __future__ import annotations

from typing import List, Optional

from PyQt6.QtCore import Qt, QPointF, pyqtSignal
from PyQt6.QtGui import QTransform
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsView, QHBoxLayout, QToolButton, QWidget

from canvas.items import MeasureLabelItem, MeasurePathItem, MeasureVertexItem
from canvas.measure import MeasureAction, MeasureEvent, MeasurementSession, MeasureState
from debug_trace import trace
from settings import MeasureSettings

# Offset of the running distance label from the pointer, in pixels
LABEL_OFFSET = QPointF(12, -12)


class ToolNotAttachedError(RuntimeError):
    """A tool was used before being added to a tool bar."""


class MapTool:
    """
    Base class for map tools.

    The host passed to :meth:`on_added` must expose ``view`` (MapView) and
    ``scene`` (MapScene).
    """

    name = "tool"
    label = "Tool"
    tooltip = ""

    def __init__(self):
        self.host = None

    @property
    def attached(self) -> bool:
        return self.host is not None

    def _require_host(self):
        if self.host is None:
            raise ToolNotAttachedError(f"{type(self).__name__} is not attached to a tool bar")
        return self.host

    def on_added(self, host) -> None:
        self.host = host

    def on_removed(self) -> None:
        self._require_host()
        self.host = None

    def on_selected(self) -> None:
        self._require_host()

    def on_deselected(self) -> None:
        self._require_host()

    def map_clicked(self, scene_pos: QPointF, item: Optional[QGraphicsItem]) -> None:
        pass

    def pointer_moved(self, scene_pos: QPointF) -> None:
        pass

    def update_settings(self, scale: float, unit: str) -> None:
        pass


class PanTool(MapTool):
    """Drag to pan. Active by default."""

    name = "pan"
    label = "Pan"
    tooltip = "Drag to move the map"

    def on_selected(self) -> None:
        host = self._require_host()
        host.view.set_tool_cursor(None)
        host.view.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)


class MeasureTool(MapTool):
    """
    Click to lay down a path and read its length.

    Clicking the last vertex, then clicking once more, finishes the path.
    The next click clears it.
    """

    name = "measure"
    label = "Measure"
    tooltip = "Measure distances"

    def __init__(self, scale: float = 1.0, unit: str = "", settings: Optional[MeasureSettings] = None):
        super().__init__()
        self.settings = settings or MeasureSettings()
        self.session = MeasurementSession(scale=scale, unit=unit)
        self._vertex_items: List[MeasureVertexItem] = []
        self._path_item: Optional[MeasurePathItem] = None
        self._preview_item: Optional[MeasurePathItem] = None
        self._label_item: Optional[MeasureLabelItem] = None

    @property
    def state(self) -> MeasureState:
        return self.session.state

    @property
    def rendered_items(self) -> List[QGraphicsItem]:
        items: List[QGraphicsItem] = list(self._vertex_items)
        for it in (self._path_item, self._preview_item, self._label_item):
            if it is not None:
                items.append(it)
        return items

    def update_settings(self, scale: float, unit: str) -> None:
        self.session.scale = scale
        self.session.unit = unit

    def on_selected(self) -> None:
        host = self._require_host()
        self.session.reset()
        host.view.setDragMode(QGraphicsView.DragMode.NoDrag)
        host.view.set_tool_cursor(Qt.CursorShape.CrossCursor)

    def on_deselected(self) -> None:
        host = self._require_host()
        self.session.reset()
        self._clear_items()
        host.view.set_tool_cursor(None)
        host.view.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)

    def on_removed(self) -> None:
        self._clear_items()
        super().on_removed()

    # ---- Events ----

    def map_clicked(self, scene_pos: QPointF, item: Optional[QGraphicsItem]) -> None:
        host = self._require_host()
        if self._vertex_items and item is self._vertex_items[-1]:
            action = self.session.handle(MeasureEvent.CLICK_LAST_VERTEX)
        else:
            action = self.session.handle(MeasureEvent.CLICK, host.scene.scene_to_map(scene_pos))
        trace(f"measure {action.name} -> {self.session.state.name}", "TOOL")

        if action in (MeasureAction.START_PATH, MeasureAction.ADD_VERTEX):
            self._add_vertex()
        elif action is MeasureAction.FINISH:
            self._finish()
        elif action is MeasureAction.CLEAR:
            self._clear_items()

    def pointer_moved(self, scene_pos: QPointF) -> None:
        if self.host is None or self.session.state is not MeasureState.MEASURING:
            return
        last = self._vertex_scene_points()[-1]
        self._ensure_preview().set_points([last, scene_pos])
        pointer = self.host.scene.scene_to_map(scene_pos)
        self._show_label(self.session.label(self.session.preview_distance(pointer)), scene_pos)

    # ---- Rendering ----

    def _vertex_scene_points(self) -> List[QPointF]:
        scene = self.host.scene
        return [scene.map_to_scene(lat, lng) for lat, lng in self.session.vertices]

    def _add_vertex(self) -> None:
        scene = self.host.scene
        points = self._vertex_scene_points()
        vertex = MeasureVertexItem(self.settings.vertex_radius, self.settings.line_color)
        vertex.setPos(points[-1])
        scene.addItem(vertex)
        self._vertex_items.append(vertex)

        if self._path_item is None:
            self._path_item = MeasurePathItem(self.settings.line_color)
            scene.addItem(self._path_item)
        self._path_item.set_points(points)
        self._show_label(self.session.label(), points[-1])

    def _finish(self) -> None:
        self._remove_item(self._preview_item)
        self._preview_item = None
        self._show_label(self.session.label(), self._vertex_scene_points()[-1])

    def _ensure_preview(self) -> MeasurePathItem:
        if self._preview_item is None:
            self._preview_item = MeasurePathItem(self.settings.line_color, self.settings.dash_length)
            self.host.scene.addItem(self._preview_item)
        return self._preview_item

    def _show_label(self, text: str, anchor: QPointF) -> None:
        if self._label_item is None:
            self._label_item = MeasureLabelItem()
            # Offset in screen pixels; the label ignores view scaling
            self._label_item.setTransform(QTransform.fromTranslate(LABEL_OFFSET.x(), LABEL_OFFSET.y()))
            self.host.scene.addItem(self._label_item)
        self._label_item.setText(text)
        self._label_item.setPos(anchor)

    def _remove_item(self, item: Optional[QGraphicsItem]) -> None:
        if item is not None and item.scene() is not None:
            item.scene().removeItem(item)

    def _clear_items(self) -> None:
        for item in self.rendered_items:
            self._remove_item(item)
        self._vertex_items = []
        self._path_item = None
        self._preview_item = None
        self._label_item = None


class ToolBar(QWidget):
    """
    Row of exclusive tool buttons.

    Signals:
        tool_changed(str): Emitted with the name of the newly active tool
    """

    tool_changed = pyqtSignal(str)

    def __init__(self, host, parent=None):
        super().__init__(parent)
        self.host = host
        self.tools: List[MapTool] = []
        self.buttons: List[QToolButton] = []
        self.zoom_buttons: List[QToolButton] = []
        self.active_index: Optional[int] = None

        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(4, 4, 4, 4)
        self._layout.setSpacing(2)
        self._layout.addStretch(1)

    @property
    def active_tool(self) -> Optional[MapTool]:
        if self.active_index is None:
            return None
        return self.tools[self.active_index]

    def add_tool(self, tool: MapTool) -> int:
        """Attach *tool*; the first tool added becomes active."""
        tool.on_added(self.host)
        index = len(self.tools)
        self.tools.append(tool)

        btn = QToolButton(self)
        btn.setText(tool.label)
        btn.setToolTip(tool.tooltip)
        btn.setCheckable(True)
        btn.clicked.connect(lambda checked, i=index: self.select(i))
        self._layout.insertWidget(index, btn)
        self.buttons.append(btn)

        if self.active_index is None:
            self.select(index)
        return index

    def select(self, index: int) -> None:
        """Make the tool at *index* active, deselecting the previous one first."""
        if index == self.active_index:
            self.buttons[index].setChecked(True)
            return
        previous = self.active_tool
        if previous is not None:
            previous.on_deselected()
            self.buttons[self.active_index].setChecked(False)

        self.active_index = index
        self.tools[index].on_selected()
        self.buttons[index].setChecked(True)
        self.tool_changed.emit(self.tools[index].name)

    def select_by_name(self, name: str) -> None:
        for i, tool in enumerate(self.tools):
            if tool.name == name:
                self.select(i)
                return
        raise KeyError(name)

    def add_zoom_controls(self) -> None:
        """Add zoom in and zoom out buttons acting on the host view."""
        for text, tip, slot in (("+", "Zoom in", self.zoom_in), ("-", "Zoom out", self.zoom_out)):
            btn = QToolButton(self)
            btn.setText(text)
            btn.setToolTip(tip)
            btn.clicked.connect(slot)
            self._layout.addWidget(btn)
            self.zoom_buttons.append(btn)

    def zoom_in(self) -> None:
        self.host.view.zoom_in()

    def zoom_out(self) -> None:
        self.host.view.zoom_out()

    def update_settings(self, scale: float, unit: str) -> None:
        for tool in self.tools:
            tool.update_settings(scale, unit)

    def dispatch_click(self, scene_pos: QPointF, item: Optional[QGraphicsItem]) -> None:
        tool = self.active_tool
        if tool is not None:
            tool.map_clicked(scene_pos, item)

    def dispatch_pointer(self, scene_pos: QPointF) -> None:
        tool = self.active_tool
        if tool is not None:
            tool.pointer_moved(scene_pos)

    def remove_all(self) -> None:
        """Deselect the active tool and detach every tool."""
        tool = self.active_tool
        if tool is not None:
            tool.on_deselected()
        self.active_index = None
        for tool in self.tools:
            tool.on_removed()
        self.tools = []
        for btn in self.buttons + self.zoom_buttons:
            btn.clicked.disconnect()
            btn.deleteLater()
        self.buttons = []
        self.zoom_buttons = []
