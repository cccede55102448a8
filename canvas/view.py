"""
canvas/view.py

QGraphicsView with a discrete zoom level, wheel zoom and click detection.

Zoom level *z* displays the image at a scale of ``2 ** z`` screen pixels
per image pixel. Levels are snapped to a grid and clamped to the map's
zoom range.
"""

from __future__ import annotations

import math
from typing import Optional

from PyQt6.QtCore import Qt, QPoint, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QTransform
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import MapScene
from debug_trace import trace

# Press/release farther apart than this (in pixels) is a drag, not a click
CLICK_TOLERANCE = 3


def snap_zoom(zoom: float, snap: float) -> float:
    """Round *zoom* to the nearest multiple of *snap* (no rounding if snap <= 0)."""
    if snap <= 0:
        return zoom
    return round(round(zoom / snap) * snap, 6)


class MapView(QGraphicsView):
    """
    Pan/zoom view over a :class:`MapScene`.

    Signals:
        zoom_changed(float): Emitted with the new level after every change
        map_clicked(QPointF, object): Scene position of a click and the topmost
            item under it (None over empty space)
        pointer_moved(QPointF): Scene position of the pointer
    """

    zoom_changed = pyqtSignal(float)
    map_clicked = pyqtSignal(QPointF, object)
    pointer_moved = pyqtSignal(QPointF)

    def __init__(self, scene: MapScene, min_zoom: float = 0.0, max_zoom: float = 2.0,
                 zoom_delta: float = 0.5, zoom_snap: float = 0.01, parent=None):
        super().__init__(scene, parent)
        self.min_zoom = min_zoom
        self.max_zoom = max(max_zoom, min_zoom)
        self.zoom_delta = zoom_delta
        self.zoom_snap = zoom_snap
        self._zoom = min_zoom
        self._press_pos: Optional[QPoint] = None

        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setMouseTracking(True)
        self._apply_transform()

    # ---- Zoom ----

    @property
    def zoom(self) -> float:
        return self._zoom

    def normalize_zoom(self, zoom: float) -> float:
        """Snap then clamp a requested level."""
        zoom = snap_zoom(zoom, self.zoom_snap)
        return min(max(zoom, self.min_zoom), self.max_zoom)

    def set_zoom(self, zoom: float, anchor_under_mouse: bool = False) -> float:
        """
        Change the zoom level.

        Args:
            zoom: Requested level (snapped and clamped)
            anchor_under_mouse: Keep the point under the cursor fixed
                instead of the view centre

        Returns:
            The level actually applied
        """
        zoom = self.normalize_zoom(zoom)
        if zoom == self._zoom:
            return zoom

        anchor = (
            QGraphicsView.ViewportAnchor.AnchorUnderMouse
            if anchor_under_mouse else QGraphicsView.ViewportAnchor.AnchorViewCenter
        )
        saved = self.transformationAnchor()
        self.setTransformationAnchor(anchor)
        self._zoom = zoom
        self._apply_transform()
        self.setTransformationAnchor(saved)

        trace(f"zoom -> {zoom}", "ZOOM")
        self.zoom_changed.emit(zoom)
        return zoom

    def _apply_transform(self) -> None:
        s = 2.0 ** self._zoom
        self.setTransform(QTransform.fromScale(s, s))

    def fit_bounds(self, rect: Optional[QRectF] = None) -> float:
        """Zoom so *rect* (default: the whole map) fits the viewport, and centre it."""
        scene = self.scene()
        rect = rect if rect is not None else scene.sceneRect()
        vp = self.viewport().rect()
        if rect.width() > 0 and rect.height() > 0 and vp.width() > 0 and vp.height() > 0:
            ratio = min(vp.width() / rect.width(), vp.height() / rect.height())
            zoom = math.floor(math.log2(ratio) / self.zoom_snap) * self.zoom_snap if self.zoom_snap > 0 \
                else math.log2(ratio)
            self.set_zoom(zoom)
        self.centerOn(rect.center())
        return self._zoom

    def zoom_in(self):
        self.set_zoom(self._zoom + self.zoom_delta)

    def zoom_out(self):
        self.set_zoom(self._zoom - self.zoom_delta)

    def wheelEvent(self, event):
        """Zoom by one step per wheel notch, around the cursor."""
        delta = event.angleDelta().y()
        if delta == 0:
            event.ignore()
            return
        step = self.zoom_delta if delta > 0 else -self.zoom_delta
        self.set_zoom(self._zoom + step, anchor_under_mouse=True)
        event.accept()

    # ---- Pointer ----

    def set_tool_cursor(self, shape: Optional[Qt.CursorShape]) -> None:
        """Set a cursor on the viewport, or restore the default with None."""
        if shape is None:
            self.viewport().unsetCursor()
        else:
            self.viewport().setCursor(shape)

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        self.pointer_moved.emit(self.mapToScene(event.position().toPoint()))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        super().mouseReleaseEvent(event)
        if event.button() != Qt.MouseButton.LeftButton or self._press_pos is None:
            return

        pos = event.position().toPoint()
        moved = (pos - self._press_pos).manhattanLength()
        self._press_pos = None
        if moved > CLICK_TOLERANCE:
            return

        item = self.itemAt(pos)
        if item is not None and item.zValue() < 0:
            item = None  # the image itself
        self.map_clicked.emit(self.mapToScene(pos), item)
