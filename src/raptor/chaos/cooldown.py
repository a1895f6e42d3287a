# src/raptor/chaos/cooldown.py
"""Cooldown gate layered over the time of the last collapse.

The cooldown has no state of its own. It is recomputed from
``last_collapse_at`` each time it is asked, so there is nothing to arm or
disarm beyond recording when the last collapse fired.
"""

from __future__ import annotations


class CooldownTimer:
    """Temporal gate that blocks stress accumulation after a collapse.

    Usage:
        timer = CooldownTimer(duration_sec=10.0)
        timer.is_active(last_collapse_at=None, now=5.0)    # False
        timer.is_active(last_collapse_at=100.0, now=105.0) # True
        timer.remaining(last_collapse_at=100.0, now=105.0) # 5.0
    """

    def __init__(self, duration_sec: float) -> None:
        if duration_sec <= 0:
            raise ValueError(f"Cooldown duration must be positive, got {duration_sec}")
        self._duration_sec = duration_sec

    @property
    def duration_sec(self) -> float:
        return self._duration_sec

    def is_active(self, last_collapse_at: float | None, now: float) -> bool:
        """True while fewer than duration_sec seconds have passed since the last collapse."""
        if last_collapse_at is None:
            return False
        return (now - last_collapse_at) < self._duration_sec

    def remaining(self, last_collapse_at: float | None, now: float) -> float:
        """Seconds until the cooldown expires (0.0 when inactive)."""
        if last_collapse_at is None:
            return 0.0
        return max(0.0, self._duration_sec - (now - last_collapse_at))
