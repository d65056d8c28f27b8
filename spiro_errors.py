from __future__ import annotations


class SpiroError(Exception):
    """Base class for errors raised by the spirograph engine."""


class ConfigurationError(SpiroError, ValueError):
    """Gear, pen or speed settings that cannot produce a curve."""


class InvalidStateTransition(SpiroError):
    """A verb was issued in a mode or state that does not accept it."""


class RenderTargetUnavailable(SpiroError):
    """The raster surface cannot be painted on (null image, zero size...)."""


class SegmentStateError(SpiroError, AssertionError):
    """Points were pushed while no segment was open."""


__all__ = [
    "ConfigurationError",
    "InvalidStateTransition",
    "RenderTargetUnavailable",
    "SegmentStateError",
    "SpiroError",
]
