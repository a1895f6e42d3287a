# src/raptor/engine/clock.py
"""Clock abstraction for testable collapse timing.

Stress scoring reads elapsed session time and the cooldown gate reads the
time since the last collapse. Both go through a Clock so tests and the
offline simulator can drive time explicitly.

Production code uses SystemClock (the default).
Tests inject MockClock to control time advancement.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Abstract monotonic clock.

    Implementations:
    - SystemClock: Uses time.monotonic() (production)
    - MockClock: Returns controllable times (testing, simulation)
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds.

        Must never go backwards. Suitable for elapsed time and cooldown
        calculations. Corresponds to time.monotonic().
        """
        ...


class SystemClock:
    """Production clock using time.monotonic()."""

    def monotonic(self) -> float:
        """Return system monotonic time."""
        return time.monotonic()


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(start=0.0)
        engine = ChaosEngine(config, clock=clock, scheduler=ManualScheduler(clock))

        engine.force_collapse()
        clock.advance(5.0)
        assert engine.view().collapse_on_cooldown
    """

    def __init__(self, start: float = 0.0) -> None:
        """Initialize mock clock at a given time.

        Args:
            start: Initial monotonic time value (default 0.0).
        """
        self._current = start

    def monotonic(self) -> float:
        """Return current mock time."""
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds

    def set(self, value: float) -> None:
        """Set mock time to an absolute value.

        Note:
            Unlike advance(), this can move time backwards. ManualScheduler
            only ever moves it forwards.
        """
        self._current = value


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
