from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, List, Sequence

import spiro_geometry as sg
from math_backends import numba_backend, python_backend

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MathBackend:
    name: str
    label: str
    available: bool
    sampler: Callable


_BACKENDS: dict[str, MathBackend] = {}
_ACTIVE_BACKEND = "python"


def register_backend(backend: MathBackend) -> None:
    _BACKENDS[backend.name] = backend


def list_backends(*, available_only: bool = False) -> list[MathBackend]:
    backends = list(_BACKENDS.values())
    if available_only:
        backends = [b for b in backends if b.available]
    return sorted(backends, key=lambda b: b.name)


def get_backend_name() -> str:
    return _ACTIVE_BACKEND


def set_backend(name: str) -> None:
    backend = _BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unknown math backend: {name}")
    if not backend.available:
        raise ValueError(f"Math backend not available: {name}")
    global _ACTIVE_BACKEND
    _ACTIVE_BACKEND = backend.name
    _LOGGER.debug("Math backend set to %s", name)


def sample_points(
    angles: Sequence[float],
    gear: sg.GearConfig,
    center: sg.Point,
) -> List[sg.DrivePoint]:
    """Sample many drive angles at once with the active backend."""
    backend = _BACKENDS.get(_ACTIVE_BACKEND)
    if backend is None:
        raise ValueError(f"Unknown math backend: {_ACTIVE_BACKEND}")
    return backend.sampler(angles, gear, center)


register_backend(
    MathBackend(
        name="python",
        label="Python",
        available=True,
        sampler=python_backend.sample_points,
    )
)
register_backend(
    MathBackend(
        name="numba",
        label="Numba",
        available=numba_backend.NUMBA_AVAILABLE,
        sampler=numba_backend.sample_points,
    )
)


__all__ = [
    "MathBackend",
    "get_backend_name",
    "list_backends",
    "register_backend",
    "sample_points",
    "set_backend",
]
