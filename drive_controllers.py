from __future__ import annotations

from enum import Enum
import logging
import math
from typing import Callable, List, Optional

import spiro_backends
from angle_unwrap import INTERPOLATION_STEP, DriveState
from segment_store import SegmentStore
from spiro_errors import ConfigurationError, InvalidStateTransition
from spiro_geometry import DrivePoint, GearConfig, Point, cycle_extent, sample_gear_point

_LOGGER = logging.getLogger(__name__)

# Pas angulaire de base d'un tick d'animation, multiplié par la vitesse
BASE_STEP = 0.02


class DrawingMode(Enum):
    TIMED = "auto"
    MANUAL = "manual"


class TimedState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


class ManualState(Enum):
    INACTIVE = "inactive"
    DRAGGING = "dragging"


def _check_speed(speed: float) -> float:
    speed = float(speed)
    if not math.isfinite(speed) or speed <= 0:
        raise ConfigurationError(f"Speed multiplier must be a positive number, got {speed}")
    return speed


class TimedController:
    """
    Animates one full closed cycle of the curve, one point per tick.

    The gear configuration is captured by :meth:`start` and stays fixed for
    the run. Ticks come from a scheduler (``start(callback) -> handle`` /
    ``cancel(handle)``); every scheduled callback carries the generation it
    was created under, so a callback that fires after a cancel is ignored.
    ``on_change`` is called after each timer tick.
    """

    def __init__(
        self,
        store: SegmentStore,
        scheduler,
        *,
        speed: float = 3.0,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._on_change = on_change
        self._speed = _check_speed(speed)
        self._state = TimedState.IDLE
        self._gear: Optional[GearConfig] = None
        self._center: Point = (0.0, 0.0)
        self._run_step = BASE_STEP * self._speed
        self._current_step = 0
        self._progress = 0.0
        self._generation = 0
        self._task = None

    # ----- Lecture -----

    @property
    def state(self) -> TimedState:
        return self._state

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def gear(self) -> Optional[GearConfig]:
        return self._gear

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def percent(self) -> float:
        return self._progress * 100.0

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def step_size(self) -> float:
        return self._run_step

    @property
    def total_steps(self) -> float:
        if self._gear is None:
            return 0.0
        return cycle_extent(self._gear.outer_radius, self._gear.inner_radius) / self._run_step

    @property
    def drive_angle(self) -> float:
        if self._gear is None:
            return 0.0
        return self._progress * cycle_extent(self._gear.outer_radius, self._gear.inner_radius)

    @property
    def is_running(self) -> bool:
        return self._state is TimedState.RUNNING

    # ----- Verbes -----

    def set_speed(self, speed: float) -> None:
        self._speed = _check_speed(speed)
        if self._state in (TimedState.RUNNING, TimedState.PAUSED):
            self._rebase_step()

    def start(self, gear: GearConfig, center: Point, color: str, stroke_width: float) -> None:
        if self._state in (TimedState.RUNNING, TimedState.PAUSED):
            raise InvalidStateTransition(f"start() not allowed while {self._state.value}")
        self._gear = gear.validate()
        self._center = (float(center[0]), float(center[1]))
        self._run_step = BASE_STEP * self._speed
        self._current_step = 0
        self._progress = 0.0
        self._store.begin_segment(color, stroke_width)
        self._state = TimedState.RUNNING
        _LOGGER.debug(
            "Timed run started: R=%s r=%s d=%s, %.1f steps",
            gear.outer_radius,
            gear.inner_radius,
            gear.pen_distance,
            self.total_steps,
        )
        self._schedule()

    def pause(self) -> None:
        if self._state is not TimedState.RUNNING:
            raise InvalidStateTransition(f"pause() not allowed while {self._state.value}")
        self._cancel()
        self._state = TimedState.PAUSED
        _LOGGER.debug("Timed run paused at %.1f%%", self.percent)

    def resume(self) -> None:
        if self._state is not TimedState.PAUSED:
            raise InvalidStateTransition(f"resume() not allowed while {self._state.value}")
        if self._progress >= 1.0:
            # Courbe déjà entièrement tracée : reprise sans effet
            raise InvalidStateTransition("resume() not allowed: the cycle is already drawn")
        self._rebase_step()
        self._state = TimedState.RUNNING
        self._schedule()

    def stop(self) -> None:
        """Cancel the run and archive the partial curve as it stands."""
        if self._state not in (TimedState.RUNNING, TimedState.PAUSED):
            raise InvalidStateTransition(f"stop() not allowed while {self._state.value}")
        self._cancel()
        closed = self._store.close_segment()
        self._state = TimedState.IDLE
        self._current_step = 0
        self._progress = 0.0
        _LOGGER.debug(
            "Timed run stopped, %d points kept",
            len(closed.points) if closed is not None else 0,
        )

    def finish_now(self) -> None:
        """Sample every remaining step in one batch and complete the run."""
        if self._state not in (TimedState.RUNNING, TimedState.PAUSED):
            raise InvalidStateTransition(f"finish_now() not allowed while {self._state.value}")
        self._cancel()
        last = int(math.ceil(self.total_steps))
        angles = [i * self._run_step for i in range(self._current_step, last)]
        if angles:
            self._store.extend(spiro_backends.sample_points(angles, self._gear, self._center))
        self._current_step = max(self._current_step, last)
        self._complete()

    def clear(self) -> None:
        self._cancel()
        self._state = TimedState.IDLE
        self._current_step = 0
        self._progress = 0.0

    def advance(self) -> List[DrivePoint]:
        """
        Run one animation tick.

        Returns the sampled point (zero or one) so callers can treat both
        controllers the same way.
        """
        if self._state is not TimedState.RUNNING:
            return []
        if self._current_step >= self.total_steps:
            self._complete()
            return []
        angle = self._current_step * self._run_step
        point = sample_gear_point(angle, self._gear, self._center)
        self._store.append_point(point)
        self._current_step += 1
        self._progress = min(1.0, self._current_step / self.total_steps)
        return [point]

    # ----- Interne -----

    def _rebase_step(self) -> None:
        new_step = BASE_STEP * self._speed
        if new_step == self._run_step:
            return
        self._run_step = new_step
        self._current_step = int(math.floor(self._progress * self.total_steps))

    def _schedule(self) -> None:
        self._cancel()
        generation = self._generation
        self._task = self._scheduler.start(lambda: self._on_tick(generation))

    def _cancel(self) -> None:
        if self._task is not None:
            self._scheduler.cancel(self._task)
            self._task = None
        self._generation += 1

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation:
            return
        self.advance()
        self._notify()

    def _complete(self) -> None:
        self._cancel()
        closed = self._store.close_segment()
        self._progress = 1.0
        self._state = TimedState.COMPLETE
        _LOGGER.info(
            "Timed run complete: %d points",
            len(closed.points) if closed is not None else 0,
        )

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()


class ManualController:
    """Drives the curve from pointer angles around the canvas center."""

    def __init__(
        self,
        store: SegmentStore,
        *,
        interpolation_step: float = INTERPOLATION_STEP,
    ) -> None:
        self._store = store
        self.interpolation_step = interpolation_step
        self.drive = DriveState()
        self._state = ManualState.INACTIVE

    @property
    def state(self) -> ManualState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is ManualState.DRAGGING

    @property
    def drive_angle(self) -> float:
        return self.drive.cumulative_angle

    def pointer_down(
        self,
        raw_angle: float,
        gear: GearConfig,
        center: Point,
        color: str,
        stroke_width: float,
    ) -> None:
        if self._store.open_style() != (color, float(stroke_width)):
            # Nouvelle couleur/épaisseur : nouveau segment, raccordé au précédent
            self._store.begin_segment(color, stroke_width)
            self._store.append_point(sample_gear_point(self.drive.cumulative_angle, gear, center))
        self.drive.set_baseline(raw_angle)
        self._state = ManualState.DRAGGING

    def pointer_move(self, raw_angle: float, gear: GearConfig, center: Point) -> List[DrivePoint]:
        if self._state is not ManualState.DRAGGING:
            raise InvalidStateTransition("pointer_move() without a prior pointer_down()")
        angles = self.drive.advance(raw_angle, self.interpolation_step)
        points = [sample_gear_point(t, gear, center) for t in angles]
        self._store.extend(points)
        return points

    def pointer_up(self) -> None:
        self._state = ManualState.INACTIVE

    def clear(self) -> None:
        self.drive.reset()
        self._state = ManualState.INACTIVE


__all__ = [
    "BASE_STEP",
    "DrawingMode",
    "ManualController",
    "ManualState",
    "TimedController",
    "TimedState",
]
