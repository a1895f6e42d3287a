# src/raptor/chaos/history.py
"""Fixed-capacity ring of recent stability samples (for graphing)."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

FULL_STABILITY = 100.0


class StabilityHistory:
    """Most-recent-last ring buffer of stability samples.

    When full, appending drops the oldest sample (FIFO).
    """

    def __init__(self, capacity: int = 100, *, initial: tuple[float, ...] = (FULL_STABILITY,)) -> None:
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._samples: deque[float] = deque(initial, maxlen=capacity)

    @property
    def capacity(self) -> int:
        maxlen = self._samples.maxlen
        return maxlen if maxlen is not None else 0

    def append(self, stability: float) -> None:
        self._samples.append(stability)

    def reset(self) -> None:
        """Drop every sample and start again from full stability."""
        self._samples.clear()
        self._samples.append(FULL_STABILITY)

    def snapshot(self) -> tuple[float, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)
