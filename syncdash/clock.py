"""
Time sources for the simulation.

The synchronization layer never calls time.* directly; it asks a clock.
ManualClock is advanced explicitly by the fixed-step loop (deterministic,
used by sessions and tests). MonotonicClock reads time.monotonic() for
wall-clock driven hosts.
"""

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current time in seconds."""

    def now(self) -> float:
        ...


class ManualClock:
    """Clock that only moves when told to.

    Args:
        start: Initial time in seconds
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, dt: float) -> float:
        """Move time forward by dt seconds and return the new time."""
        if dt < 0:
            raise ValueError(f"Cannot advance clock backwards (dt={dt})")
        self._now += dt
        return self._now

    def set(self, t: float) -> None:
        """Jump to an absolute time (must not go backwards)."""
        if t < self._now:
            raise ValueError(f"Cannot move clock backwards ({t} < {self._now})")
        self._now = float(t)

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now:.4f})"


class MonotonicClock:
    """Clock backed by time.monotonic(), zeroed at construction."""

    def __init__(self):
        self._origin = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._origin
