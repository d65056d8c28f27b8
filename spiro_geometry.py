from __future__ import annotations

from dataclasses import dataclass
import math
from typing import NamedTuple, Tuple

from spiro_errors import ConfigurationError


class DrivePoint(NamedTuple):
    x: float
    y: float


Point = Tuple[float, float]


@dataclass(frozen=True)
class GearConfig:
    outer_radius: float = 120.0   # R : anneau fixe
    inner_radius: float = 45.0    # r : roue mobile
    pen_distance: float = 75.0    # d : trou du stylo

    def validate(self) -> "GearConfig":
        """
        Reject gear combinations the curve formula cannot handle.

        Returns ``self`` so callers can validate inline.
        """
        values = (self.outer_radius, self.inner_radius, self.pen_distance)
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"Gear values must be finite: {values}")
        if self.outer_radius <= 0:
            raise ConfigurationError(f"Outer radius must be positive, got {self.outer_radius}")
        if self.inner_radius <= 0:
            raise ConfigurationError(f"Inner radius must be positive, got {self.inner_radius}")
        if self.inner_radius >= self.outer_radius:
            raise ConfigurationError(
                f"Inner radius ({self.inner_radius}) must be smaller than "
                f"outer radius ({self.outer_radius})"
            )
        if self.pen_distance < 0:
            raise ConfigurationError(f"Pen distance must be >= 0, got {self.pen_distance}")
        return self


def sample_point(angle: float, R: float, r: float, d: float, center: Point) -> DrivePoint:
    """Pen position of the hypotrochoid for the drive angle ``angle``."""
    if r == 0:
        raise ConfigurationError("Inner radius must not be zero")
    diff = R - r
    ratio = diff / r
    cx, cy = center
    x = cx + diff * math.cos(angle) + d * math.cos(ratio * angle)
    y = cy + diff * math.sin(angle) - d * math.sin(ratio * angle)
    return DrivePoint(x, y)


def sample_gear_point(angle: float, gear: GearConfig, center: Point) -> DrivePoint:
    return sample_point(angle, gear.outer_radius, gear.inner_radius, gear.pen_distance, center)


def rounded_gcd(a: float, b: float) -> int:
    """
    gcd of the rounded magnitudes of ``a`` and ``b``.

    Non-integer sizes are rounded first, so the repeat period is exact only
    for integer radii.
    """
    return math.gcd(int(round(abs(a))), int(round(abs(b))))


def total_rotations(R: float, r: float) -> float:
    if R <= 0 or r <= 0:
        raise ConfigurationError(f"Radii must be positive, got R={R}, r={r}")
    g = rounded_gcd(R, r) or 1
    return r / g


def cycle_extent(R: float, r: float) -> float:
    """Drive-angle range needed for the curve to close on itself."""
    return total_rotations(R, r) * 2.0 * math.pi


def inner_gear_center(angle: float, R: float, r: float, center: Point) -> DrivePoint:
    diff = R - r
    cx, cy = center
    return DrivePoint(cx + diff * math.cos(angle), cy + diff * math.sin(angle))


def pen_arm(angle: float, gear: GearConfig, center: Point) -> Tuple[DrivePoint, DrivePoint]:
    """Return ``(inner_center, pen_point)`` for drawing the wheel's radius line."""
    inner = inner_gear_center(angle, gear.outer_radius, gear.inner_radius, center)
    return inner, sample_gear_point(angle, gear, center)


def pointer_angle(x: float, y: float, center: Point) -> float:
    return math.atan2(y - center[1], x - center[0])


__all__ = [
    "DrivePoint",
    "GearConfig",
    "Point",
    "cycle_extent",
    "inner_gear_center",
    "pen_arm",
    "pointer_angle",
    "rounded_gcd",
    "sample_gear_point",
    "sample_point",
    "total_rotations",
]
