"""Timing primitives: clocks and schedulers for delayed continuations."""

from raptor.engine.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from raptor.engine.scheduler import (
    AsyncioScheduler,
    CancellationToken,
    ManualScheduler,
    ScheduledCall,
    Scheduler,
)

__all__ = [
    "DEFAULT_CLOCK",
    "AsyncioScheduler",
    "CancellationToken",
    "Clock",
    "ManualScheduler",
    "MockClock",
    "ScheduledCall",
    "Scheduler",
    "SystemClock",
]
