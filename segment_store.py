from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable, List, Optional, Tuple

from spiro_errors import SegmentStateError
from spiro_geometry import DrivePoint

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    color: str
    stroke_width: float
    points: Tuple[DrivePoint, ...] = ()


@dataclass
class _OpenSegment:
    color: str
    stroke_width: float
    points: List[DrivePoint] = field(default_factory=list)

    def freeze(self) -> Segment:
        return Segment(self.color, self.stroke_width, tuple(self.points))


class SegmentStore:
    """
    Archive of closed strokes plus at most one stroke under construction.

    Closed segments are frozen; the archive only grows until ``clear()``.
    Reading order is oldest first, so later strokes paint over earlier ones.
    """

    def __init__(self) -> None:
        self._archive: List[Segment] = []
        self._open: Optional[_OpenSegment] = None

    @property
    def archive(self) -> Tuple[Segment, ...]:
        return tuple(self._archive)

    @property
    def open_segment(self) -> Optional[Segment]:
        if self._open is None:
            return None
        return self._open.freeze()

    @property
    def has_open_segment(self) -> bool:
        return self._open is not None

    def open_style(self) -> Optional[Tuple[str, float]]:
        if self._open is None:
            return None
        return self._open.color, self._open.stroke_width

    def begin_segment(self, color: str, stroke_width: float) -> None:
        self.close_segment()
        self._open = _OpenSegment(color, float(stroke_width))

    def append_point(self, point: DrivePoint) -> None:
        if self._open is None:
            raise SegmentStateError("append_point() called with no open segment")
        self._open.points.append(point)

    def extend(self, points: Iterable[DrivePoint]) -> None:
        if self._open is None:
            raise SegmentStateError("extend() called with no open segment")
        self._open.points.extend(points)

    def close_segment(self) -> Optional[Segment]:
        if self._open is None:
            return None
        closed = self._open.freeze()
        self._archive.append(closed)
        self._open = None
        _LOGGER.debug(
            "Segment archived (%d points, color=%s, width=%s)",
            len(closed.points),
            closed.color,
            closed.stroke_width,
        )
        return closed

    def clear(self) -> None:
        self._archive.clear()
        self._open = None

    def segments(self) -> List[Segment]:
        result = list(self._archive)
        if self._open is not None:
            result.append(self._open.freeze())
        return result

    def point_count(self) -> int:
        total = sum(len(s.points) for s in self._archive)
        if self._open is not None:
            total += len(self._open.points)
        return total

    def __len__(self) -> int:
        return len(self._archive) + (1 if self._open is not None else 0)


__all__ = ["Segment", "SegmentStore"]
