"""
canvas/scene.py

Scene holding one map image and its overlay items.

Map coordinates follow a flat y-up system: the image covers
``[0, 0]`` to ``[height, width]`` as ``(lat, lng)`` pairs, with ``(0, 0)``
at the bottom-left corner. Scene coordinates are image pixels, y-down.
"""

from __future__ import annotations

from typing import Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QPen, QPixmap
from PyQt6.QtWidgets import QGraphicsPixmapItem, QGraphicsRectItem, QGraphicsScene

from debug_trace import trace


class MapScene(QGraphicsScene):
    """Graphics scene sized to the natural dimensions of the map image."""

    def __init__(self, width: int, height: int, parent=None):
        super().__init__(parent)
        self.image_width = width
        self.image_height = height
        self.image_item: Optional[QGraphicsPixmapItem] = None
        self.placeholder_item: Optional[QGraphicsRectItem] = None
        self.setSceneRect(self.bounds())
        self.setBackgroundBrush(QBrush(QColor("#dddddd")))

    def bounds(self) -> QRectF:
        return QRectF(0, 0, self.image_width, self.image_height)

    def set_image(self, path: Optional[str]) -> bool:
        """
        Show the image at *path* stretched over the map bounds.

        Returns:
            False if the image could not be loaded (a plain rectangle is
            drawn in its place)
        """
        pixmap = QPixmap(path) if path else QPixmap()
        if pixmap.isNull():
            trace(f"Map image not loadable: {path}", "MAP")
            if self.placeholder_item is None:
                self.placeholder_item = self.addRect(
                    self.bounds(), QPen(QColor("#999999"), 1), QBrush(QColor("#f4f4f4"))
                )
                self.placeholder_item.setZValue(-1)
            return False

        if pixmap.width() != self.image_width or pixmap.height() != self.image_height:
            pixmap = pixmap.scaled(
                self.image_width,
                self.image_height,
                Qt.AspectRatioMode.IgnoreAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        if self.image_item is None:
            self.image_item = self.addPixmap(pixmap)
            self.image_item.setZValue(-1)
            self.image_item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
        else:
            self.image_item.setPixmap(pixmap)
        return True

    def map_to_scene(self, lat: float, lng: float) -> QPointF:
        return QPointF(lng, self.image_height - lat)

    def scene_to_map(self, point: QPointF) -> Tuple[float, float]:
        return self.image_height - point.y(), point.x()
