"""Render one complete spirograph cycle to a PNG file, without a window."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys
from typing import List, Optional

import spiro_backends
import spiro_render
from drive_controllers import DrawingMode
from spiro_config import SessionSettings, clamp_settings, find_preset, load_settings, save_settings
from spiro_errors import ConfigurationError, RenderTargetUnavailable
from spiro_session import SpiroSession
from tick_scheduler import ManualTickScheduler

_LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--settings",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Start from a saved settings file (the user settings file when PATH is omitted).",
    )
    parser.add_argument(
        "--save-settings",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write the effective settings to PATH.",
    )
    parser.add_argument("--preset", help="Preset pattern name, e.g. 'Classic Star'.")
    parser.add_argument("-R", "--outer-radius", type=float, default=None)
    parser.add_argument("-r", "--inner-radius", type=float, default=None)
    parser.add_argument("-d", "--pen-distance", type=float, default=None)
    parser.add_argument("--color", default=None)
    parser.add_argument("--width", type=float, default=None)
    parser.add_argument("--background", default=None)
    parser.add_argument("--size", type=int, default=None)
    parser.add_argument("--speed", type=float, default=None)
    parser.add_argument(
        "--backend",
        choices=[b.name for b in spiro_backends.list_backends()],
        default=spiro_backends.get_backend_name(),
    )
    parser.add_argument(
        "--show-gears",
        action="store_true",
        default=None,
        help="Draw the gears at the start position on top of the curve.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("spirograph.png"),
        help="Path of the PNG file to write.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> SessionSettings:
    """Saved settings (if requested), then preset, then explicit options."""
    if args.settings is not None:
        settings = clamp_settings(load_settings(Path(args.settings) if args.settings else None))
    else:
        settings = SessionSettings(show_gears=False)
    settings.mode = DrawingMode.TIMED
    if args.color is not None:
        settings.pen_color = args.color
    if args.width is not None:
        settings.line_width = args.width
    if args.background is not None:
        settings.background_color = args.background
    if args.speed is not None:
        settings.speed = args.speed
    if args.show_gears is not None:
        settings.show_gears = args.show_gears
    if args.size is not None:
        settings.canvas_width = args.size
        settings.canvas_height = args.size
    if args.preset:
        preset = find_preset(args.preset)
        settings.outer_radius = preset.R
        settings.inner_radius = preset.r
        settings.pen_distance = preset.d
    if args.outer_radius is not None:
        settings.outer_radius = args.outer_radius
    if args.inner_radius is not None:
        settings.inner_radius = args.inner_radius
    if args.pen_distance is not None:
        settings.pen_distance = args.pen_distance
    return settings


def render_cycle(settings: SessionSettings) -> bytes:
    session = SpiroSession(settings, scheduler=ManualTickScheduler())
    session.start()
    session.finish_now()
    image = session.render()
    if settings.show_gears:
        decoration = spiro_render.Decoration(
            show_gears=True,
            drive_angle=0.0,
            gear=session.gear,
            center=session.center,
            pen_color=session.pen_color,
        )
        image = spiro_render.render_frame(
            image, session.background_color, session.segments(), decoration
        )
    return spiro_render.encode_png(image)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # Rendu hors écran : pas besoin d'affichage
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])  # noqa: F841

    try:
        spiro_backends.set_backend(args.backend)
        settings = build_settings(args)
        png = render_cycle(settings)
        if args.save_settings is not None:
            save_settings(settings, args.save_settings)
    except (ConfigurationError, ValueError) as exc:
        _LOGGER.error("%s", exc)
        return 2
    except RenderTargetUnavailable as exc:
        _LOGGER.error("Rendering failed: %s", exc)
        return 1
    except OSError as exc:
        _LOGGER.error("Could not write settings: %s", exc)
        return 1

    args.output.write_bytes(png)
    _LOGGER.info("Wrote %s (%d bytes)", args.output, len(png))
    return 0


if __name__ == "__main__":
    sys.exit(main())
