# src/raptor/chaos/session.py
"""Mutable session state owned by a single ChaosEngine.

Nothing outside the engine should write to a SessionState. Presentation
layers read the SessionView projection instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from raptor.chaos.history import FULL_STABILITY, StabilityHistory
from raptor.chaos.types import CollapsePhase, CollapseRecord, EditorMode, MutationProfile

DEFAULT_LANGUAGE = "python"
DEFAULT_BACKGROUND_COLOR = "#0a0e14"
DEFAULT_TEXT_COLOR = "#c9d1d9"
DEFAULT_FONT_SIZE = 14
DEFAULT_INDENT_SIZE = 4


@dataclass
class SessionState:
    """Everything the chaos engine knows about one editing session.

    Invariant: stability == 100 - stress whenever the engine is not in the
    middle of an operation.

    Attributes:
        session_started_at: Monotonic start of the current generation (feeds
            the elapsed-time stress term).
        last_collapse_at: Monotonic time of the last trigger; the cooldown
            is derived from it.
        epoch: Bumped on every explicit reset. Scheduled continuations
            carry the epoch they were created in and are discarded when it
            no longer matches.
    """

    session_started_at: float
    history_capacity: int = 100
    text: str = ""
    language: str = DEFAULT_LANGUAGE
    stress: float = 0.0
    stability: float = FULL_STABILITY
    generation: int = 0
    total_keystrokes: int = 0
    collapse_count: int = 0
    phase: CollapsePhase = CollapsePhase.IDLE
    last_collapse_at: float | None = None
    collapse_on_cooldown: bool = False
    current_profile: MutationProfile | None = None
    editor_mode: EditorMode = EditorMode.VSCODE
    background_color: str = DEFAULT_BACKGROUND_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    font_size: int = DEFAULT_FONT_SIZE
    indent_size: int = DEFAULT_INDENT_SIZE
    collapse_history: list[CollapseRecord] = field(default_factory=list)
    epoch: int = 0
    stability_history: StabilityHistory = field(init=False)

    def __post_init__(self) -> None:
        self.stability_history = StabilityHistory(self.history_capacity)

    @property
    def is_crashing(self) -> bool:
        return self.phase is CollapsePhase.COLLIDING

    def apply_profile(self, profile: MutationProfile, editor_mode: EditorMode) -> None:
        """Switch presentation to a collapse's profile and editor skin."""
        self.current_profile = profile
        self.editor_mode = editor_mode
        self.background_color = profile.background_color
        self.text_color = profile.text_color
        self.font_size = profile.font_size
        self.indent_size = profile.indent_size

    def complete_generation(self, now: float) -> None:
        """Return to idle after a collapse. The text is kept as mutated."""
        self.phase = CollapsePhase.IDLE
        self.stress = 0.0
        self.stability = FULL_STABILITY
        self.generation += 1
        self.total_keystrokes = 0
        self.session_started_at = now
        self.stability_history.reset()

    def reset(self, now: float) -> None:
        """Restore every field to its initial value and bump the epoch."""
        self.text = ""
        self.language = DEFAULT_LANGUAGE
        self.stress = 0.0
        self.stability = FULL_STABILITY
        self.generation = 0
        self.total_keystrokes = 0
        self.collapse_count = 0
        self.phase = CollapsePhase.IDLE
        self.last_collapse_at = None
        self.collapse_on_cooldown = False
        self.current_profile = None
        self.editor_mode = EditorMode.VSCODE
        self.background_color = DEFAULT_BACKGROUND_COLOR
        self.text_color = DEFAULT_TEXT_COLOR
        self.font_size = DEFAULT_FONT_SIZE
        self.indent_size = DEFAULT_INDENT_SIZE
        self.collapse_history.clear()
        self.session_started_at = now
        self.stability_history.reset()
        self.epoch += 1
