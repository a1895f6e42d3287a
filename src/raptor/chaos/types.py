# src/raptor/chaos/types.py
"""Value types for the chaos engine.

Immutable records that cross component boundaries: mutation profiles from
the catalog, collapse records in the session history, stress readings from
the stress model, and the read-only SessionView projected for presentation
layers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class EditorMode(StrEnum):
    """Editor skin identifiers. One is drawn at random on every collapse."""

    VSCODE = "vscode"
    TERMINAL = "terminal"
    RETRO = "retro"
    NANO = "nano"
    NOTEPAD = "notepad"


class CollapseTrigger(StrEnum):
    """What started a collapse.

    Only AUTOMATIC collapses rewrite the text; a MANUAL collapse mutates
    presentation and arms the cooldown but leaves the text alone.
    """

    AUTOMATIC = "automatic"  # Stress reached the ceiling after a keystroke
    MANUAL = "manual"  # Explicit force-collapse request


class CollapsePhase(StrEnum):
    """Collapse state machine states.

    Cooling down is not a phase of its own: the cooldown runs on its own
    clock from the trigger time and is evaluated lazily by the stress model.
    """

    IDLE = "idle"
    COLLIDING = "colliding"


@dataclass(frozen=True, slots=True)
class MutationProfile:
    """A named bundle of presentation parameters.

    Profiles only change how the editor looks. They never influence stress
    scoring or text mutation.
    """

    name: str
    background_color: str
    text_color: str
    font_size: int
    indent_size: int
    visual_effect: str


@dataclass(frozen=True, slots=True)
class CollapseRecord:
    """Snapshot of the session at the moment a collapse fired.

    Attributes:
        text: Text buffer at trigger time (before any mutation).
        timestamp_utc: Wall-clock trigger time, ISO-8601.
        generation: Generation the collapse ended.
        stress: Stress at trigger time.
        trigger: Automatic or manual.
        profile_name: Mutation profile selected for this collapse.
        editor_mode: Editor skin selected for this collapse.
    """

    text: str
    timestamp_utc: str
    generation: int
    stress: float
    trigger: CollapseTrigger
    profile_name: str
    editor_mode: EditorMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "timestamp_utc": self.timestamp_utc,
            "generation": self.generation,
            "stress": self.stress,
            "trigger": str(self.trigger),
            "profile_name": self.profile_name,
            "editor_mode": str(self.editor_mode),
        }


@dataclass(frozen=True, slots=True)
class StressReading:
    """Result of one stress evaluation.

    Invariant: stability == 100 - stress, both within [0, 100].
    """

    stress: float
    stability: float
    cooling_down: bool = False


@dataclass(frozen=True, slots=True)
class SessionView:
    """Read-only projection of the session for presentation layers."""

    text: str
    language: str
    stress: float
    stability: float
    generation: int
    collapse_count: int
    total_keystrokes: int
    stability_history: tuple[float, ...]
    is_crashing: bool
    crash_intensity: int
    current_mutation: MutationProfile | None
    current_visual_effect: str | None
    background_color: str
    text_color: str
    font_size: int
    indent_size: int
    editor_mode: EditorMode
    collapse_on_cooldown: bool
    cooldown_remaining_sec: float
    warnings: tuple[str, ...]
    stability_color: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict (tuples become lists, enums become strings)."""
        data = asdict(self)
        data["stability_history"] = list(self.stability_history)
        data["warnings"] = list(self.warnings)
        data["editor_mode"] = str(self.editor_mode)
        return data
