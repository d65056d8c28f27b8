import math

import pytest

from drive_controllers import BASE_STEP, TimedController, TimedState
from segment_store import SegmentStore
from spiro_errors import ConfigurationError, InvalidStateTransition
from spiro_geometry import GearConfig, cycle_extent, sample_gear_point
from tick_scheduler import ManualTickScheduler

CENTER = (450.0, 450.0)
GEAR = GearConfig(120, 45, 75)


def _controller(speed=3.0):
    store = SegmentStore()
    scheduler = ManualTickScheduler()
    return TimedController(store, scheduler, speed=speed), store, scheduler


def test_run_to_completion():
    timed, store, scheduler = _controller(speed=3.0)
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    assert timed.state is TimedState.RUNNING
    assert scheduler.pending == 1

    scheduler.run_until_idle()

    total = cycle_extent(120, 45) / (BASE_STEP * 3.0)
    assert timed.state is TimedState.COMPLETE
    assert timed.percent == 100.0
    assert not store.has_open_segment
    assert len(store.archive) == 1
    points = store.archive[0].points
    assert len(points) >= 2
    assert len(points) == math.ceil(total)
    assert points[0] == sample_gear_point(0.0, GEAR, CENTER)
    assert scheduler.pending == 0


def test_progress_tracks_steps():
    timed, store, scheduler = _controller()
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    for _ in range(10):
        scheduler.tick()
    assert timed.current_step == 10
    assert math.isclose(timed.progress, 10 / timed.total_steps)
    assert math.isclose(timed.drive_angle, timed.progress * cycle_extent(120, 45))
    assert store.point_count() == 10


def test_pause_cancels_tick_and_resume_continues():
    timed, store, scheduler = _controller()
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    scheduler.tick()
    scheduler.tick()
    timed.pause()
    assert timed.state is TimedState.PAUSED
    assert scheduler.pending == 0
    assert store.has_open_segment

    timed.resume()
    assert timed.state is TimedState.RUNNING
    scheduler.tick()
    assert store.point_count() == 3
    assert len(store.archive) == 0


def test_invalid_transitions_raise():
    timed, _, _ = _controller()
    with pytest.raises(InvalidStateTransition):
        timed.pause()
    with pytest.raises(InvalidStateTransition):
        timed.resume()
    with pytest.raises(InvalidStateTransition):
        timed.stop()
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    with pytest.raises(InvalidStateTransition):
        timed.start(GEAR, CENTER, "#e63946", 1.5)


def test_resume_after_completion_is_rejected():
    timed, _, scheduler = _controller(speed=10.0)
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    scheduler.run_until_idle()
    with pytest.raises(InvalidStateTransition):
        timed.resume()
    assert timed.state is TimedState.COMPLETE


def test_resume_with_nothing_left_to_draw_stays_paused():
    timed, store, scheduler = _controller(speed=10.0)
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    while timed.progress < 1.0:
        scheduler.tick()
    assert timed.state is TimedState.RUNNING
    timed.pause()
    count = store.point_count()

    with pytest.raises(InvalidStateTransition):
        timed.resume()
    assert timed.state is TimedState.PAUSED
    assert timed.progress == 1.0
    assert scheduler.pending == 0
    assert store.has_open_segment
    assert len(store.archive) == 0
    assert store.point_count() == count


def test_stop_archives_partial_curve():
    timed, store, scheduler = _controller()
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    for _ in range(5):
        scheduler.tick()
    timed.stop()
    assert timed.state is TimedState.IDLE
    assert timed.progress == 0.0
    assert scheduler.pending == 0
    assert len(store.archive) == 1
    assert len(store.archive[0].points) == 5
    assert not store.has_open_segment


def test_stale_tick_after_clear_is_ignored():
    timed, store, scheduler = _controller()
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    scheduler.tick()
    stale = scheduler.callbacks()
    timed.clear()
    store.clear()
    for callback in stale:
        callback()
    assert store.point_count() == 0
    assert store.segments() == []
    assert timed.state is TimedState.IDLE


def test_finish_now_matches_ticked_run():
    ticked, ticked_store, scheduler = _controller()
    ticked.start(GEAR, CENTER, "#e63946", 1.5)
    scheduler.run_until_idle()

    instant, instant_store, instant_scheduler = _controller()
    instant.start(GEAR, CENTER, "#e63946", 1.5)
    for _ in range(7):
        instant_scheduler.tick()
    instant.finish_now()

    assert instant.state is TimedState.COMPLETE
    assert instant_scheduler.pending == 0
    a = ticked_store.archive[0].points
    b = instant_store.archive[0].points
    assert len(a) == len(b)
    for p, q in zip(a, b):
        assert math.isclose(p.x, q.x, abs_tol=1e-9)
        assert math.isclose(p.y, q.y, abs_tol=1e-9)


def test_speed_change_while_paused_rebases_step_index():
    timed, _, scheduler = _controller(speed=3.0)
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    for _ in range(101):
        scheduler.tick()
    timed.pause()
    progress = timed.progress
    timed.set_speed(6.0)
    timed.resume()
    assert math.isclose(timed.step_size, BASE_STEP * 6.0)
    assert timed.current_step == 50
    assert timed.current_step == math.floor(progress * timed.total_steps)


def test_restart_after_completion_opens_new_segment():
    timed, store, scheduler = _controller(speed=10.0)
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    scheduler.run_until_idle()
    timed.start(GEAR, CENTER, "#4361ee", 2.0)
    assert timed.progress == 0.0
    scheduler.run_until_idle()
    assert [s.color for s in store.archive] == ["#e63946", "#4361ee"]


def test_invalid_speed_rejected():
    timed, _, _ = _controller()
    with pytest.raises(ConfigurationError):
        timed.set_speed(0)
    with pytest.raises(ConfigurationError):
        TimedController(SegmentStore(), ManualTickScheduler(), speed=-1)


def test_start_validates_gear():
    timed, store, _ = _controller()
    with pytest.raises(ConfigurationError):
        timed.start(GearConfig(40, 45, 10), CENTER, "#e63946", 1.5)
    assert timed.state is TimedState.IDLE
    assert not store.has_open_segment


def test_on_change_fires_once_per_tick():
    calls = []
    store = SegmentStore()
    scheduler = ManualTickScheduler()
    timed = TimedController(store, scheduler, on_change=lambda: calls.append(1))
    timed.start(GEAR, CENTER, "#e63946", 1.5)
    assert calls == []
    scheduler.tick()
    scheduler.tick()
    assert len(calls) == 2
    timed.stop()
    assert len(calls) == 2
