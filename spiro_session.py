from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtGui import QImage

import spiro_render
from drive_controllers import DrawingMode, ManualController, TimedController, TimedState
from segment_store import Segment, SegmentStore
from spiro_config import SessionSettings, find_preset, require_color
from spiro_errors import ConfigurationError, InvalidStateTransition
from spiro_geometry import GearConfig, Point, pointer_angle
from tick_scheduler import QtTickScheduler

_LOGGER = logging.getLogger(__name__)


class SpiroSession:
    """
    One drawing surface: gear settings, the segment store and both drive
    controllers.

    Exactly one controller is active, chosen by :attr:`mode`. Verbs issued
    in the wrong mode or state are logged and ignored (they return
    ``False``); configuration errors are raised.
    """

    def __init__(
        self,
        settings: Optional[SessionSettings] = None,
        *,
        scheduler=None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        settings = settings or SessionSettings()
        self.on_change = on_change
        self.store = SegmentStore()
        self.scheduler = scheduler if scheduler is not None else QtTickScheduler()
        self.timed = TimedController(
            self.store, self.scheduler, speed=settings.speed, on_change=self._changed
        )
        self.manual = ManualController(self.store)
        self.canvas_width = int(settings.canvas_width)
        self.canvas_height = int(settings.canvas_height)
        self.show_gears = bool(settings.show_gears)
        self.mode = settings.mode
        self.gear = GearConfig()
        self.pen_color = require_color("#E63946")
        self.line_width = 1.5
        self.background_color = require_color("#1a1a2e")
        self.configure(
            settings.gear,
            settings.pen_color,
            settings.line_width,
            settings.background_color,
        )

    # ----- Configuration -----

    @property
    def center(self) -> Point:
        return (self.canvas_width / 2.0, self.canvas_height / 2.0)

    def configure(
        self,
        gear: GearConfig,
        color: Optional[str] = None,
        width: Optional[float] = None,
        background: Optional[str] = None,
    ) -> None:
        """
        Validate and apply gear, pen and background settings.

        A timed run in progress keeps the gears it started with; the new
        ones apply to the next run. In manual mode a colour or width change
        opens a new segment at the next pointer-down.
        """
        gear = gear.validate()
        new_color = require_color(color) if color is not None else self.pen_color
        new_width = self.line_width if width is None else float(width)
        if not new_width > 0:
            raise ConfigurationError(f"Line width must be positive, got {width}")
        new_background = (
            require_color(background) if background is not None else self.background_color
        )
        self.gear = gear
        self.pen_color = new_color
        self.line_width = new_width
        self.background_color = new_background
        _LOGGER.debug(
            "Configured R=%s r=%s d=%s color=%s width=%s",
            gear.outer_radius,
            gear.inner_radius,
            gear.pen_distance,
            new_color,
            new_width,
        )
        self._changed()

    def apply_preset(self, name: str) -> None:
        preset = find_preset(name)
        self._reset()
        self.configure(preset.gear)

    def set_speed(self, speed: float) -> None:
        self.timed.set_speed(speed)

    def set_show_gears(self, show: bool) -> None:
        self.show_gears = bool(show)
        self._changed()

    def set_mode(self, mode: DrawingMode) -> None:
        mode = DrawingMode(mode)
        self._reset()
        self.mode = mode
        _LOGGER.debug("Drawing mode set to %s", mode.value)
        self._changed()

    # ----- Mode automatique -----

    def start(self) -> bool:
        return self._timed_verb(
            "start",
            lambda: self.timed.start(self.gear, self.center, self.pen_color, self.line_width),
        )

    def pause(self) -> bool:
        return self._timed_verb("pause", self.timed.pause)

    def resume(self) -> bool:
        return self._timed_verb("resume", self.timed.resume)

    def stop(self) -> bool:
        return self._timed_verb("stop", self.timed.stop)

    def finish_now(self) -> bool:
        return self._timed_verb("finish_now", self.timed.finish_now)

    @property
    def progress(self) -> float:
        return self.timed.progress

    @property
    def timed_state(self) -> TimedState:
        return self.timed.state

    # ----- Mode manuel -----

    def pointer_down(self, raw_angle: float) -> bool:
        return self._manual_verb(
            "pointer_down",
            lambda: self.manual.pointer_down(
                raw_angle, self.gear, self.center, self.pen_color, self.line_width
            ),
        )

    def pointer_move(self, raw_angle: float) -> bool:
        return self._manual_verb(
            "pointer_move",
            lambda: self.manual.pointer_move(raw_angle, self.gear, self.center),
        )

    def pointer_up(self) -> bool:
        # Le relâchement peut arriver hors du canevas : toujours accepté
        self.manual.pointer_up()
        return True

    def pointer_down_at(self, x: float, y: float) -> bool:
        return self.pointer_down(pointer_angle(x, y, self.center))

    def pointer_move_at(self, x: float, y: float) -> bool:
        return self.pointer_move(pointer_angle(x, y, self.center))

    # ----- Commun -----

    def clear(self) -> None:
        self._reset()
        _LOGGER.debug("Session cleared")
        self._changed()

    def segments(self) -> List[Segment]:
        return self.store.segments()

    def drive_angle(self) -> float:
        if self.mode is DrawingMode.MANUAL:
            return self.manual.drive_angle
        return self.timed.drive_angle

    def decoration(self) -> Optional[spiro_render.Decoration]:
        if not self.show_gears:
            return None
        if self.mode is DrawingMode.TIMED:
            open_segment = self.store.open_segment
            if not (self.timed.is_running and open_segment and open_segment.points):
                return None
            gear = self.timed.gear or self.gear
        else:
            gear = self.gear
        return spiro_render.Decoration(
            show_gears=True,
            drive_angle=self.drive_angle(),
            gear=gear,
            center=self.center,
            pen_color=self.pen_color,
        )

    def render(self, target: Optional[QImage] = None) -> QImage:
        if target is None:
            target = spiro_render.new_canvas(self.canvas_width, self.canvas_height)
        return spiro_render.render_frame(
            target,
            self.background_color,
            self.store.segments(),
            self.decoration(),
        )

    def export_raster(self) -> bytes:
        return spiro_render.encode_png(self.render())

    # ----- Interne -----

    def _reset(self) -> None:
        # Annuler le tick en attente avant d'effacer le stockage
        self.timed.clear()
        self.manual.clear()
        self.store.clear()

    def _timed_verb(self, name: str, action: Callable[[], None]) -> bool:
        if self.mode is not DrawingMode.TIMED:
            _LOGGER.warning("%s() ignored: drawing mode is %s", name, self.mode.value)
            return False
        return self._run_verb(name, action)

    def _manual_verb(self, name: str, action: Callable[[], None]) -> bool:
        if self.mode is not DrawingMode.MANUAL:
            _LOGGER.warning("%s() ignored: drawing mode is %s", name, self.mode.value)
            return False
        return self._run_verb(name, action)

    def _run_verb(self, name: str, action: Callable[[], None]) -> bool:
        try:
            action()
        except InvalidStateTransition as exc:
            _LOGGER.warning("%s() ignored: %s", name, exc)
            return False
        self._changed()
        return True

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()


__all__ = ["SpiroSession"]
