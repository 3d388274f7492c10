"""Wall-clock abstraction.

Everything time-dependent in the nursery takes an explicit ``now`` (epoch
seconds). Long-lived owners such as ``SessionTracker`` get that value from
an injected ``Clock`` so tests can drive time deterministically instead of
sleeping.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current time in epoch seconds."""

    def now(self) -> float:
        """Return the current time in seconds."""


class SystemClock:
    """Real wall-clock time."""

    def now(self) -> float:
        return time.time()

    def __repr__(self) -> str:
        return "SystemClock()"


class ManualClock:
    """A clock that only moves when told to.

    Example:
        clock = ManualClock(start=0.0)
        clock.advance(1800)
        clock.now()  # 1800.0
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        """Move time forward and return the new reading."""
        if seconds < 0:
            raise ValueError(f"ManualClock cannot go backwards ({seconds}s)")
        self._now += seconds
        return self._now

    def set(self, timestamp: float) -> None:
        self._now = float(timestamp)

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now})"
