# tests/unit/chaos/test_history.py
"""Unit tests for StabilityHistory."""

from __future__ import annotations

import pytest

from raptor.chaos.history import FULL_STABILITY, StabilityHistory


class TestStabilityHistory:
    """Fixed-capacity FIFO of stability samples."""

    def test_starts_at_full_stability(self) -> None:
        history = StabilityHistory()
        assert history.snapshot() == (FULL_STABILITY,)
        assert history.capacity == 100

    def test_append_in_order(self) -> None:
        history = StabilityHistory()
        history.append(90.0)
        history.append(80.0)
        assert list(history) == [100.0, 90.0, 80.0]
        assert len(history) == 3

    def test_drops_oldest_when_full(self) -> None:
        history = StabilityHistory(capacity=3)
        for value in (90.0, 80.0, 70.0, 60.0):
            history.append(value)
        assert history.snapshot() == (80.0, 70.0, 60.0)

    def test_hundred_and_first_sample_evicts_first(self) -> None:
        history = StabilityHistory()
        for i in range(100):
            history.append(float(i))
        assert len(history) == 100
        assert history.snapshot()[0] == 0.0
        assert history.snapshot()[-1] == 99.0

    def test_reset(self) -> None:
        history = StabilityHistory(capacity=5)
        history.append(10.0)
        history.reset()
        assert history.snapshot() == (FULL_STABILITY,)

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity"):
            StabilityHistory(capacity=0)
