from __future__ import annotations

from typing import List, Sequence

import spiro_geometry as sg


def sample_points(
    angles: Sequence[float],
    gear: sg.GearConfig,
    center: sg.Point,
) -> List[sg.DrivePoint]:
    """
    Sample the pen position for every drive angle in ``angles``.

    Reference implementation: one call to :func:`spiro_geometry.sample_point`
    per angle.
    """
    R = float(gear.outer_radius)
    r = float(gear.inner_radius)
    d = float(gear.pen_distance)
    return [sg.sample_point(float(t), R, r, d, center) for t in angles]
