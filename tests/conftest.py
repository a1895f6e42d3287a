# tests/conftest.py
"""Shared test fixtures.

Engine fixtures run on simulated time: a MockClock and a ManualScheduler
driven by it, so collapse continuations fire only when a test advances
the scheduler.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
import random

import pytest
from hypothesis import Phase, Verbosity, settings

from raptor.chaos.config import RaptorConfig
from raptor.chaos.engine import ChaosEngine
from raptor.engine.clock import MockClock
from raptor.engine.scheduler import ManualScheduler

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Simulated-time fixtures
# =============================================================================


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start=0.0)


@pytest.fixture
def scheduler(clock: MockClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def config() -> RaptorConfig:
    """Built-in defaults: 3s collapse, 10s cooldown, 50 words to the ceiling."""
    return RaptorConfig()


@pytest.fixture
def engine(config: RaptorConfig, clock: MockClock, scheduler: ManualScheduler) -> ChaosEngine:
    """Chaos engine on simulated time with a seeded random source."""
    return ChaosEngine(config, clock=clock, scheduler=scheduler, rng=random.Random(42))


def words(count: int, word: str = "word") -> str:
    """Whitespace-separated text with exactly count words."""
    return " ".join([word] * count)
