from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtGui import QColor, QImage, QPainter

import drawing
from segment_store import Segment
from spiro_errors import RenderTargetUnavailable
from spiro_geometry import GearConfig, Point, pen_arm

_LOGGER = logging.getLogger(__name__)

PEN_MARKER_RADIUS = 4.0


@dataclass(frozen=True)
class Decoration:
    show_gears: bool
    drive_angle: float
    gear: GearConfig
    center: Point
    pen_color: str


def new_canvas(width: int, height: int) -> QImage:
    if width <= 0 or height <= 0:
        raise RenderTargetUnavailable(f"Invalid canvas size {width}x{height}")
    return QImage(int(width), int(height), QImage.Format.Format_ARGB32_Premultiplied)


def _draw_decoration(painter: QPainter, decoration: Decoration) -> None:
    gear = decoration.gear
    inner_center, pen_point = pen_arm(decoration.drive_angle, gear, decoration.center)
    drawing.draw_gear_outline(painter, center=decoration.center, radius=gear.outer_radius)
    drawing.draw_gear_outline(painter, center=inner_center, radius=gear.inner_radius)
    drawing.draw_line(painter, inner_center, pen_point)
    drawing.draw_marker(painter, pen_point, radius=PEN_MARKER_RADIUS, color=decoration.pen_color)


def render_frame(
    target: Optional[QImage],
    background: str,
    segments: Sequence[Segment],
    decoration: Optional[Decoration] = None,
) -> QImage:
    """
    Paint a full frame onto ``target`` and return it.

    Segments are stroked oldest first; the gear decoration, when enabled,
    is painted last so strokes never hide it. Nothing outside the
    arguments is read or written.
    """
    if target is None or target.isNull():
        raise RenderTargetUnavailable("No raster surface to render on")

    painter = QPainter()
    if not painter.begin(target):
        raise RenderTargetUnavailable("QPainter could not open the raster surface")
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(target.rect(), QColor(background))
        for segment in segments:
            drawing.draw_polyline(
                painter,
                segment.points,
                color=segment.color,
                width=segment.stroke_width,
            )
        if decoration is not None and decoration.show_gears:
            _draw_decoration(painter, decoration)
    finally:
        painter.end()
    return target


def encode_png(image: QImage) -> bytes:
    if image is None or image.isNull():
        raise RenderTargetUnavailable("Cannot encode an empty image")
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    try:
        if not image.save(buffer, "PNG"):
            raise RenderTargetUnavailable("PNG encoding failed")
    finally:
        buffer.close()
    _LOGGER.debug("Encoded %dx%d frame to %d bytes", image.width(), image.height(), data.size())
    return bytes(data.data())


__all__ = ["Decoration", "PEN_MARKER_RADIUS", "encode_png", "new_canvas", "render_frame"]
