# src/raptor/execution/latency.py
"""Latency simulation for the execution stub.

The LatencySimulator adds a configurable artificial delay so a "run" in the
editor feels like it takes time.
"""

import random as random_module

from raptor.chaos.config import LatencyConfig


class LatencySimulator:
    """Computes artificial delays. Stateless apart from the random source.

    Usage:
        simulator = LatencySimulator(LatencyConfig(base_ms=500, jitter_ms=100))
        await asyncio.sleep(simulator.simulate())
    """

    def __init__(
        self,
        config: LatencyConfig,
        *,
        rng: random_module.Random | None = None,
    ) -> None:
        """Initialize the latency simulator.

        Args:
            config: Latency simulation configuration
            rng: Random instance for testing (default: creates new Random instance).
        """
        self._config = config
        self._rng = rng if rng is not None else random_module.Random()

    @property
    def config(self) -> LatencyConfig:
        return self._config

    def simulate(self) -> float:
        """Delay in seconds: (base_ms +/- uniform jitter_ms) / 1000, never negative."""
        jitter = self._rng.uniform(-self._config.jitter_ms, self._config.jitter_ms)
        delay_ms = max(0.0, self._config.base_ms + jitter)
        return delay_ms / 1000.0
