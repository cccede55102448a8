"""
canvas/items.py

Graphics items drawn over a map image: marker pins and the pieces of a
distance measurement.

Pins, vertices and labels ignore the view transform so they keep their
on-screen size at every zoom level. Lines use cosmetic pens for the same
reason.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPainterPath, QPen
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsSimpleTextItem,
)

from canvas.container import MarkerDescriptor

# Pin outline, 32 x 48 px, anchored at its bottom centre
PIN_WIDTH = 32.0
PIN_HEIGHT = 48.0
PIN_HEAD_CENTER = QPointF(0.0, 19.0 - PIN_HEIGHT)

_HEX_COLOUR_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# Icon names with a text glyph; anything else gets a dot
ICON_GLYPHS: Dict[str, str] = {
    "anchor": "⚓",
    "castle": "♜",
    "circle": "●",
    "circle-small": "•",
    "crown": "♛",
    "flag": "⚑",
    "home": "⌂",
    "house": "⌂",
    "mountain": "▲",
    "skull": "☠",
    "star": "★",
    "swords": "⚔",
    "tree-pine": "♣",
}
DEFAULT_GLYPH = "•"


def hex_to_qcolor(value: str, fallback: str = "#21409a") -> QColor:
    """``#rgb`` or ``#rrggbb`` to a QColor; *fallback* for anything else."""
    if not _HEX_COLOUR_RE.match(value or ""):
        return QColor(fallback)
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return QColor(f"#{digits}")


def glyph_for_icon(icon: str) -> str:
    return ICON_GLYPHS.get(icon, DEFAULT_GLYPH)


def pin_path() -> QPainterPath:
    """Teardrop pin in item coordinates, tip at the origin."""
    path = QPainterPath(QPointF(32, 19))
    path.cubicTo(QPointF(32, 31), QPointF(20, 43), QPointF(16, 48))
    path.cubicTo(QPointF(12, 43), QPointF(0, 32), QPointF(0, 19))
    path.arcTo(QRectF(0, 0, 32, 38), 180, -180)
    path.closeSubpath()
    return path.translated(-PIN_WIDTH / 2, -PIN_HEIGHT)


class MarkerPinItem(QGraphicsPathItem):
    """
    A marker pin.

    The item is positioned at the marker's scene point; the pin tip sits
    exactly on it. Hovering shows the marker name; clicking is handled by
    the view, which reports the item under the cursor.
    """

    def __init__(self, marker: MarkerDescriptor, parent: Optional[QGraphicsItem] = None):
        super().__init__(pin_path(), parent)
        self.marker = marker
        self.glyph = glyph_for_icon(marker.icon)

        self.setBrush(QBrush(hex_to_qcolor(marker.colour)))
        self.setPen(QPen(QColor(255, 255, 255, 200), 1.5))
        self.setToolTip(marker.name)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setAcceptHoverEvents(True)

    @property
    def link(self) -> str:
        return self.marker.link

    @property
    def min_zoom(self) -> float:
        return self.marker.min_zoom

    def paint(self, painter: QPainter, option, widget=None):
        super().paint(painter, option, widget)

        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        font = QFont(painter.font())
        font.setPixelSize(16)
        painter.setFont(font)
        painter.setPen(QPen(QColor("#ffffff")))
        glyph_rect = QRectF(PIN_HEAD_CENTER.x() - 10, PIN_HEAD_CENTER.y() - 10, 20, 20)
        painter.drawText(glyph_rect, Qt.AlignmentFlag.AlignCenter, self.glyph)


class MeasureVertexItem(QGraphicsEllipseItem):
    """Filled circle marking one vertex of a measurement path."""

    def __init__(self, radius: float, colour: str, parent: Optional[QGraphicsItem] = None):
        super().__init__(-radius, -radius, radius * 2, radius * 2, parent)
        self.setBrush(QBrush(hex_to_qcolor(colour)))
        self.setPen(QPen(hex_to_qcolor(colour), 1))
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setZValue(20)


class MeasurePathItem(QGraphicsPathItem):
    """Polyline through the committed vertices, or the dashed preview segment."""

    def __init__(self, colour: str, dash_length: Optional[float] = None,
                 parent: Optional[QGraphicsItem] = None):
        super().__init__(parent)
        pen = QPen(hex_to_qcolor(colour), 3)
        pen.setCosmetic(True)
        if dash_length:
            # Dash pattern is in units of the pen width
            pen.setDashPattern([dash_length / 3, dash_length / 3])
        self.setPen(pen)
        self.setZValue(10)

    def set_points(self, points) -> None:
        path = QPainterPath()
        for i, pt in enumerate(points):
            if i == 0:
                path.moveTo(pt)
            else:
                path.lineTo(pt)
        self.setPath(path)


class MeasureLabelItem(QGraphicsSimpleTextItem):
    """Running distance shown next to the pointer or the last vertex."""

    PADDING = 4.0

    def __init__(self, parent: Optional[QGraphicsItem] = None):
        super().__init__(parent)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setBrush(QBrush(QColor("#222222")))
        self.setZValue(30)

    def boundingRect(self) -> QRectF:
        p = self.PADDING
        return super().boundingRect().adjusted(-p, -p, p, p)

    def paint(self, painter: QPainter, option, widget=None):
        painter.setPen(QPen(QColor(0, 0, 0, 60), 1))
        painter.setBrush(QBrush(QColor(255, 255, 255, 230)))
        painter.drawRoundedRect(self.boundingRect(), 3, 3)
        super().paint(painter, option, widget)
