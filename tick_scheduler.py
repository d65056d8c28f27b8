from __future__ import annotations

import itertools
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, QTimer

# ~60 images/seconde, comme le minuteur d'animation de la fenêtre principale
FRAME_INTERVAL_MS = 16

Callback = Callable[[], None]


class QtTickScheduler:
    """Repeating tick tasks backed by one ``QTimer`` per task."""

    def __init__(self, interval_ms: int = FRAME_INTERVAL_MS, parent: Optional[QObject] = None):
        self.interval_ms = interval_ms
        self._parent = parent
        self._timers: Dict[int, QTimer] = {}
        self._ids = itertools.count(1)

    def start(self, callback: Callback) -> int:
        handle = next(self._ids)
        timer = QTimer(self._parent)
        timer.setInterval(self.interval_ms)
        timer.timeout.connect(callback)
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()

    def is_active(self, handle: Optional[int]) -> bool:
        timer = self._timers.get(handle) if handle is not None else None
        return timer is not None and timer.isActive()


class ManualTickScheduler:
    """
    Scheduler whose ticks are fired explicitly with :meth:`tick`.

    Used for headless rendering and tests: nothing runs until the caller
    asks for it, which keeps runs deterministic.
    """

    def __init__(self) -> None:
        self._tasks: Dict[int, Callback] = {}
        self._ids = itertools.count(1)

    def start(self, callback: Callback) -> int:
        handle = next(self._ids)
        self._tasks[handle] = callback
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._tasks.pop(handle, None)

    def is_active(self, handle: Optional[int]) -> bool:
        return handle in self._tasks

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def callbacks(self) -> List[Callback]:
        return list(self._tasks.values())

    def tick(self) -> int:
        """Fire every active task once; returns how many fired."""
        fired = 0
        for handle, callback in list(self._tasks.items()):
            if handle in self._tasks:
                callback()
                fired += 1
        return fired

    def run_until_idle(self, max_ticks: int = 1_000_000) -> int:
        ticks = 0
        while self._tasks and ticks < max_ticks:
            self.tick()
            ticks += 1
        return ticks


__all__ = ["FRAME_INTERVAL_MS", "ManualTickScheduler", "QtTickScheduler"]
