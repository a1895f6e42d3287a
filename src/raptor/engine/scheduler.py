# src/raptor/engine/scheduler.py
"""Non-blocking delayed continuations for the collapse state machine.

A collapse schedules three follow-ups (capture-and-mutate, apply, return to
idle). None of them may block the caller, and all of them must be
discardable when the session is reset before they fire. The Scheduler
protocol hides how the delay is realised:

- AsyncioScheduler: loop.call_later() on the running event loop (server)
- ManualScheduler: a heap of due callbacks advanced with a MockClock
  (tests and the offline simulator)

Callbacks are grouped under a CancellationToken tagged with the session
epoch, so a reset can cancel every pending continuation as one unit.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from raptor.engine.clock import MockClock


class ScheduledCall(Protocol):
    """Handle for a pending callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. Idempotent."""
        ...


class Scheduler(Protocol):
    """Schedules a callback to run after a delay without blocking."""

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run callback once, delay_sec seconds from now."""
        ...


@dataclass
class CancellationToken:
    """Groups the scheduled continuations of one session epoch.

    Attributes:
        epoch: Session epoch the continuations belong to.
        cancelled: Set once cancel() runs; continuations check it before acting.
    """

    epoch: int
    cancelled: bool = False
    _handles: list[ScheduledCall] = field(default_factory=list, repr=False)

    def track(self, handle: ScheduledCall) -> ScheduledCall:
        """Register a handle so cancel() can reach it."""
        self._handles.append(handle)
        return handle

    def cancel(self) -> None:
        """Cancel every tracked handle and mark the token stale."""
        self.cancelled = True
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    def is_current(self, epoch: int) -> bool:
        """True if the token is live and belongs to the given epoch."""
        return not self.cancelled and self.epoch == epoch


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    If no loop is given, the running loop at call time is used, so the
    scheduler must be called from inside a coroutine (e.g. an ASGI handler).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ScheduledCall:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay_sec, callback)


class _ManualHandle:
    __slots__ = ("callback", "cancelled", "due")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler that runs callbacks as a MockClock advances.

    Example:
        clock = MockClock()
        scheduler = ManualScheduler(clock)
        scheduler.call_later(0.1, lambda: fired.append("a"))
        scheduler.advance(0.05)   # nothing runs
        scheduler.advance(0.05)   # "a" runs with clock at 0.1

    Callbacks run in due-time order (ties in scheduling order). Callbacks
    scheduled by a running callback are picked up within the same advance()
    if they fall due before its target time. The clock is moved to each
    callback's due time before it runs.
    """

    def __init__(self, clock: MockClock) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._sequence = itertools.count()

    @property
    def clock(self) -> MockClock:
        return self._clock

    @property
    def pending(self) -> int:
        """Number of callbacks that are scheduled and not cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay_sec < 0:
            raise ValueError(f"Cannot schedule with negative delay: {delay_sec}")
        handle = _ManualHandle(self._clock.monotonic() + delay_sec, callback)
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Advance the clock by seconds, running every callback that falls due.

        Returns:
            Number of callbacks that ran.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        target = self._clock.monotonic() + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            if due > self._clock.monotonic():
                self._clock.set(due)
            handle.callback()
            ran += 1
        if target > self._clock.monotonic():
            self._clock.set(target)
        return ran

    def run_all(self) -> int:
        """Run every pending callback, advancing the clock as needed."""
        ran = 0
        while self.pending:
            next_due = min(due for due, _, handle in self._queue if not handle.cancelled)
            ran += self.advance(max(0.0, next_due - self._clock.monotonic()))
        return ran
