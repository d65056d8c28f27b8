from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QStandardPaths
from PySide6.QtGui import QColor

from drive_controllers import DrawingMode
from spiro_errors import ConfigurationError
from spiro_geometry import GearConfig

_LOGGER = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "spirodraw_config.json"
SETTINGS_VERSION = 1


@dataclass(frozen=True)
class Preset:
    name: str
    R: float
    r: float
    d: float

    @property
    def gear(self) -> GearConfig:
        return GearConfig(self.R, self.r, self.d)


PRESET_PATTERNS: List[Preset] = [
    Preset("Classic Star", 120, 45, 75),
    Preset("Flower", 150, 90, 120),
    Preset("Tight Loops", 105, 30, 90),
    Preset("Wild Card", 135, 68, 128),
    Preset("Delicate", 150, 38, 30),
    Preset("Galaxy", 128, 83, 135),
]

PEN_COLORS: List[str] = [
    "#E63946", "#F4A261", "#E9C46A", "#2A9D8F", "#264653",
    "#7209B7", "#3A0CA3", "#4361EE", "#4CC9F0", "#06D6A0",
    "#FF006E", "#FB5607", "#FFBE0B", "#8338EC", "#3A86FF",
]

BACKGROUND_COLORS: List[str] = ["#1a1a2e", "#0a0a0a", "#1e3a5f", "#2d1b4e", "#1b2e1b"]

# Bornes des curseurs de l'interface
OUTER_RADIUS_RANGE = (40.0, 250.0)
INNER_RADIUS_MIN = 10.0
INNER_RADIUS_MARGIN = 5.0          # r <= R - 5
PEN_DISTANCE_RANGE = (5.0, 200.0)
SPEED_RANGE = (1.0, 10.0)
LINE_WIDTH_RANGE = (0.5, 5.0)


@dataclass
class SessionSettings:
    outer_radius: float = 120.0
    inner_radius: float = 45.0
    pen_distance: float = 75.0
    pen_color: str = "#E63946"
    line_width: float = 1.5
    speed: float = 3.0
    show_gears: bool = True
    background_color: str = "#1a1a2e"
    mode: DrawingMode = DrawingMode.MANUAL
    canvas_width: int = 900
    canvas_height: int = 900

    @property
    def gear(self) -> GearConfig:
        return GearConfig(self.outer_radius, self.inner_radius, self.pen_distance)

    @property
    def center(self):
        return (self.canvas_width / 2.0, self.canvas_height / 2.0)


def find_preset(name: str) -> Preset:
    wanted = (name or "").strip().lower()
    for preset in PRESET_PATTERNS:
        if preset.name.lower() == wanted:
            return preset
    raise ConfigurationError(f"Unknown preset: {name!r}")


def normalize_color_string(s: str) -> Optional[str]:
    """
    Normalise a colour given as ``#rgb``, ``#rrggbb``, ``#aarrggbb`` or an
    SVG colour name. Returns ``#rrggbb`` (``#aarrggbb`` when translucent) or
    ``None`` when Qt does not recognise it.
    """
    if not isinstance(s, str) or not s.strip():
        return None
    color = QColor(s.strip())
    if not color.isValid():
        return None
    if color.alpha() < 255:
        return color.name(QColor.NameFormat.HexArgb)
    return color.name()


def require_color(s: str) -> str:
    norm = normalize_color_string(s)
    if norm is None:
        raise ConfigurationError(f"Invalid color: {s!r}")
    return norm


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_settings(settings: SessionSettings) -> SessionSettings:
    """Bring gear, speed and width values back inside the UI slider ranges."""
    R = _clamp(float(settings.outer_radius), *OUTER_RADIUS_RANGE)
    r = _clamp(float(settings.inner_radius), INNER_RADIUS_MIN, R - INNER_RADIUS_MARGIN)
    return replace(
        settings,
        outer_radius=R,
        inner_radius=r,
        pen_distance=_clamp(float(settings.pen_distance), *PEN_DISTANCE_RANGE),
        speed=_clamp(float(settings.speed), *SPEED_RANGE),
        line_width=_clamp(float(settings.line_width), *LINE_WIDTH_RANGE),
    )


def settings_to_dict(settings: SessionSettings) -> Dict[str, Any]:
    data = asdict(settings)
    data["mode"] = settings.mode.value
    data["version"] = SETTINGS_VERSION
    return data


def settings_from_dict(data: Dict[str, Any]) -> SessionSettings:
    defaults = SessionSettings()
    values: Dict[str, Any] = {}
    for f in fields(SessionSettings):
        if f.name not in data:
            continue
        raw = data[f.name]
        default = getattr(defaults, f.name)
        if f.name == "mode":
            try:
                values["mode"] = DrawingMode(raw)
            except ValueError:
                _LOGGER.warning("Ignoring unknown drawing mode %r", raw)
        elif isinstance(default, bool):
            values[f.name] = bool(raw)
        elif isinstance(default, int):
            values[f.name] = int(raw)
        elif isinstance(default, float):
            values[f.name] = float(raw)
        else:
            values[f.name] = str(raw)
    return replace(defaults, **values)


def default_settings_path() -> Path:
    base_dir = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)
    if not base_dir:
        base_dir = os.path.expanduser("~")
    return Path(base_dir) / SETTINGS_FILE_NAME


def load_settings(path: Optional[Path] = None) -> SessionSettings:
    cfg_path = Path(path) if path is not None else default_settings_path()
    if not cfg_path.exists():
        return SessionSettings()
    try:
        with cfg_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        settings = settings_from_dict(data)
    except (OSError, ValueError, TypeError) as exc:
        _LOGGER.warning("Could not read settings from %s: %s", cfg_path, exc)
        return SessionSettings()
    _LOGGER.info("Settings loaded from %s", cfg_path)
    return settings


def save_settings(settings: SessionSettings, path: Optional[Path] = None) -> Path:
    cfg_path = Path(path) if path is not None else default_settings_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    with cfg_path.open("w", encoding="utf-8") as handle:
        json.dump(settings_to_dict(settings), handle, indent=2, ensure_ascii=False)
    _LOGGER.info("Settings saved to %s", cfg_path)
    return cfg_path


__all__ = [
    "BACKGROUND_COLORS",
    "PEN_COLORS",
    "PRESET_PATTERNS",
    "Preset",
    "SessionSettings",
    "clamp_settings",
    "default_settings_path",
    "find_preset",
    "load_settings",
    "normalize_color_string",
    "require_color",
    "save_settings",
    "settings_from_dict",
    "settings_to_dict",
]
