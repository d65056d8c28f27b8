from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List

# Pas angulaire entre deux points interpolés (radians)
INTERPOLATION_STEP = 0.02


def unwrap_delta(raw_angle: float, previous_raw: float) -> float:
    """
    Shortest signed rotation from ``previous_raw`` to ``raw_angle``.

    Both inputs come from ``atan2`` and live in (-pi, pi]; the result is
    folded back into [-pi, pi] so crossing the seam never looks like a
    near-full turn.
    """
    delta = raw_angle - previous_raw
    if delta > math.pi:
        delta -= 2.0 * math.pi
    if delta < -math.pi:
        delta += 2.0 * math.pi
    return delta


def interpolation_steps(delta: float, step: float = INTERPOLATION_STEP) -> int:
    return max(1, int(math.floor(abs(delta) / step)))


def interpolate_angles(start: float, delta: float, step: float = INTERPOLATION_STEP) -> List[float]:
    """Angles strictly after ``start`` up to and including ``start + delta``."""
    steps = interpolation_steps(delta, step)
    step_size = delta / steps
    return [start + step_size * i for i in range(1, steps + 1)]


@dataclass
class DriveState:
    cumulative_angle: float = 0.0
    last_raw_angle: float = 0.0

    def set_baseline(self, raw_angle: float) -> None:
        self.last_raw_angle = raw_angle

    def advance(self, raw_angle: float, step: float = INTERPOLATION_STEP) -> List[float]:
        """
        Fold ``raw_angle`` into the cumulative drive angle.

        Returns the interpolated drive angles between the previous and the
        new cumulative angle; the last entry is the new cumulative angle.
        """
        delta = unwrap_delta(raw_angle, self.last_raw_angle)
        angles = interpolate_angles(self.cumulative_angle, delta, step)
        self.cumulative_angle += delta
        self.last_raw_angle = raw_angle
        return angles

    def reset(self) -> None:
        self.cumulative_angle = 0.0
        self.last_raw_angle = 0.0


__all__ = [
    "DriveState",
    "INTERPOLATION_STEP",
    "interpolate_angles",
    "interpolation_steps",
    "unwrap_delta",
]
