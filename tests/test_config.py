import json

import pytest

from drive_controllers import DrawingMode
from spiro_config import (
    PEN_COLORS,
    PRESET_PATTERNS,
    SessionSettings,
    clamp_settings,
    find_preset,
    load_settings,
    normalize_color_string,
    require_color,
    save_settings,
    settings_from_dict,
)
from spiro_errors import ConfigurationError
from spiro_geometry import GearConfig


def test_presets_are_valid_gears():
    assert len(PRESET_PATTERNS) == 6
    for preset in PRESET_PATTERNS:
        assert preset.gear.validate() == GearConfig(preset.R, preset.r, preset.d)


def test_find_preset_is_case_insensitive():
    assert find_preset("classic star").gear == GearConfig(120, 45, 75)
    with pytest.raises(ConfigurationError):
        find_preset("Spiral")


def test_normalize_color_string():
    assert normalize_color_string("#E63946") == "#e63946"
    assert normalize_color_string("red") == "#ff0000"
    assert normalize_color_string("#0f0") == "#00ff00"
    assert normalize_color_string("#80ff0000") == "#80ff0000"
    assert normalize_color_string("definitely not a colour") is None
    assert normalize_color_string("") is None
    assert all(normalize_color_string(c) for c in PEN_COLORS)
    with pytest.raises(ConfigurationError):
        require_color("zzz")


def test_clamp_settings_uses_slider_ranges():
    settings = clamp_settings(
        SessionSettings(outer_radius=500, inner_radius=400, pen_distance=1, speed=20, line_width=0.1)
    )
    assert settings.outer_radius == 250
    assert settings.inner_radius == 245
    assert settings.pen_distance == 5
    assert settings.speed == 10
    assert settings.line_width == 0.5
    assert settings.gear.validate()


def test_save_and_load_settings(tmp_path):
    path = tmp_path / "cfg" / "settings.json"
    original = SessionSettings(outer_radius=150, inner_radius=90, mode=DrawingMode.TIMED)
    save_settings(original, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["mode"] == "auto"
    assert data["version"] == 1
    assert load_settings(path) == original


def test_load_settings_falls_back_to_defaults(tmp_path):
    assert load_settings(tmp_path / "missing.json") == SessionSettings()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_settings(broken) == SessionSettings()


def test_settings_from_dict_ignores_unknown_keys_and_modes():
    settings = settings_from_dict({"mode": "sideways", "speed": "4", "extra": 1, "show_gears": 0})
    assert settings.mode is DrawingMode.MANUAL
    assert settings.speed == 4.0
    assert settings.show_gears is False
