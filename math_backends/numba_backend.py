from __future__ import annotations

import importlib.util
import math
from typing import List, Sequence

import spiro_geometry as sg
from spiro_errors import ConfigurationError
from math_backends import python_backend

NUMBA_AVAILABLE = importlib.util.find_spec("numba") is not None
if NUMBA_AVAILABLE:
    import numba
    import numpy as np

    @numba.njit(cache=True)
    def _hypotrochoid_numba(
        angles: np.ndarray,
        R: float,
        r: float,
        d: float,
        cx: float,
        cy: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        n = len(angles)
        out_x = np.empty(n, dtype=np.float64)
        out_y = np.empty(n, dtype=np.float64)
        diff = R - r
        ratio = diff / r
        for i in range(n):
            t = angles[i]
            out_x[i] = cx + diff * math.cos(t) + d * math.cos(ratio * t)
            out_y[i] = cy + diff * math.sin(t) - d * math.sin(ratio * t)
        return out_x, out_y


def sample_points(
    angles: Sequence[float],
    gear: sg.GearConfig,
    center: sg.Point,
) -> List[sg.DrivePoint]:
    if not NUMBA_AVAILABLE:
        return python_backend.sample_points(angles, gear, center)
    if gear.inner_radius == 0:
        raise ConfigurationError("Inner radius must not be zero")
    if len(angles) == 0:
        return []

    t_values = np.asarray(angles, dtype=np.float64)
    px, py = _hypotrochoid_numba(
        t_values,
        float(gear.outer_radius),
        float(gear.inner_radius),
        float(gear.pen_distance),
        float(center[0]),
        float(center[1]),
    )
    return [sg.DrivePoint(float(x), float(y)) for x, y in zip(px, py)]
