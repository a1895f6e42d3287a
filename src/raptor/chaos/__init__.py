"""Chaos engine: stress scoring, collapse state machine and text mutation.

Building blocks, leaf-first:

- StressModel: (text, keystrokes, elapsed time, cooldown) -> stress/stability
- StabilityHistory: fixed-capacity ring of stability samples
- CooldownTimer: gates stress accumulation after a collapse
- ProfileSelector: draws a mutation profile and editor mode per collapse
- MutationPipeline: ordered, probabilistic, lossy text transforms
- ChaosEngine: owns a session and runs the collapse state machine
"""

from raptor.chaos.config import (
    MUTATION_STAGES,
    LatencyConfig,
    MutationConfig,
    RaptorConfig,
    ServerConfig,
    StressConfig,
    TimingConfig,
    list_presets,
    load_config,
    load_preset,
)
from raptor.chaos.cooldown import CooldownTimer
from raptor.chaos.engine import ChaosEngine
from raptor.chaos.history import StabilityHistory
from raptor.chaos.mutation import MutationPipeline
from raptor.chaos.profiles import PROFILE_CATALOG, ProfileSelector, get_profile
from raptor.chaos.session import SessionState
from raptor.chaos.stress import StressModel
from raptor.chaos.types import (
    CollapsePhase,
    CollapseRecord,
    CollapseTrigger,
    EditorMode,
    MutationProfile,
    SessionView,
    StressReading,
)

__all__ = [
    "MUTATION_STAGES",
    "PROFILE_CATALOG",
    "ChaosEngine",
    "CollapsePhase",
    "CollapseRecord",
    "CollapseTrigger",
    "CooldownTimer",
    "EditorMode",
    "LatencyConfig",
    "MutationConfig",
    "MutationPipeline",
    "MutationProfile",
    "ProfileSelector",
    "RaptorConfig",
    "ServerConfig",
    "SessionState",
    "SessionView",
    "StabilityHistory",
    "StressConfig",
    "StressModel",
    "StressReading",
    "TimingConfig",
    "get_profile",
    "list_presets",
    "load_config",
    "load_preset",
]
