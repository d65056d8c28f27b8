from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen

Point = Tuple[float, float]

GEAR_OUTLINE_COLOR = QColor(255, 255, 255, 77)   # rgba(255, 255, 255, 0.3)
PEN_ARM_COLOR = QColor(255, 255, 255, 128)       # rgba(255, 255, 255, 0.5)


def _map_points(points: Iterable[Point]) -> List[QPointF]:
    return [QPointF(x, y) for (x, y) in points]


def draw_polyline(
    painter: QPainter,
    points: Sequence[Point],
    *,
    color: str = "#606060",
    width: float = 1.0,
) -> None:
    """Stroke ``points`` as one polyline with round caps and joins.

    Fewer than two points draw nothing.
    """

    if len(points) < 2:
        return
    pen = QPen(QColor(color))
    pen.setWidthF(width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawPolyline(_map_points(points))


def draw_gear_outline(
    painter: QPainter,
    *,
    center: Point,
    radius: float,
    color: QColor = GEAR_OUTLINE_COLOR,
    width: float = 2.0,
    dashed: bool = True,
) -> None:
    """Draw a gear as a (dashed) circle outline."""

    pen = QPen(color)
    pen.setWidthF(width)
    if dashed:
        # Motif en unités de largeur de trait : 5 px plein, 5 px vide
        pen.setDashPattern([5.0 / width, 5.0 / width])
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(QPointF(center[0], center[1]), radius, radius)


def draw_line(
    painter: QPainter,
    start: Point,
    end: Point,
    *,
    color: QColor = PEN_ARM_COLOR,
    width: float = 1.0,
) -> None:
    pen = QPen(color)
    pen.setWidthF(width)
    painter.setPen(pen)
    painter.drawLine(QPointF(start[0], start[1]), QPointF(end[0], end[1]))


def draw_marker(
    painter: QPainter,
    point: Point,
    *,
    radius: float = 4.0,
    color: str = "#e62739",
) -> None:
    """Draw a filled disc centred on ``point``."""

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(QColor(color)))
    painter.drawEllipse(QPointF(point[0], point[1]), radius, radius)
    painter.setBrush(Qt.BrushStyle.NoBrush)
