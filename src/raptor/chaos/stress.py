# src/raptor/chaos/stress.py
"""Stress and stability scoring.

Stress is a weighted sum of text volume, typing activity and a few syntax
signals, clamped to [0, 100]. Stability is always its complement. Word
count dominates the sum so the ceiling is reached by writing, not by
punctuation noise.

While the cooldown after a collapse is active, no scoring happens at all:
stress is pinned to zero and stability to 100.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from raptor.chaos.config import StressConfig
from raptor.chaos.cooldown import CooldownTimer
from raptor.chaos.history import FULL_STABILITY
from raptor.chaos.session import SessionState
from raptor.chaos.types import StressReading

logger = structlog.get_logger(__name__)

MAX_STRESS = 100.0

STRESS_KEYWORDS: tuple[str, ...] = (
    "function",
    "class",
    "if",
    "for",
    "while",
    "def",
    "return",
    "import",
    "const",
    "let",
    "var",
)

_KEYWORD_PATTERN = re.compile(r"\b(?:" + "|".join(STRESS_KEYWORDS) + r")\b")
_BRACKET_CHARS = frozenset("{}[]()")


@dataclass(frozen=True, slots=True)
class TextMetrics:
    """Counts extracted from the text buffer."""

    words: int
    lines: int
    brackets: int
    semicolons: int
    keywords: int

    @classmethod
    def from_text(cls, text: str) -> TextMetrics:
        return cls(
            words=len(text.split()),
            lines=len(text.split("\n")),
            brackets=sum(1 for ch in text if ch in _BRACKET_CHARS),
            semicolons=text.count(";"),
            keywords=len(_KEYWORD_PATTERN.findall(text)),
        )


def compute_stress(
    metrics: TextMetrics,
    *,
    total_keystrokes: int,
    elapsed_sec: float,
    config: StressConfig,
) -> float:
    """Weighted stress score, clamped to [0, 100]."""
    stress = (
        config.word_weight * metrics.words
        + config.line_weight * metrics.lines
        + config.keystroke_weight * total_keystrokes
        + config.elapsed_weight * max(0.0, elapsed_sec)
        + config.bracket_weight * metrics.brackets
        + config.semicolon_weight * metrics.semicolons
        + config.keyword_weight * metrics.keywords
    )
    return min(max(stress, 0.0), MAX_STRESS)


class StressModel:
    """Scores a session and records the result in its stability history.

    Deterministic: the same session contents at the same time always give
    the same reading.
    """

    def __init__(self, config: StressConfig, cooldown: CooldownTimer) -> None:
        self._config = config
        self._cooldown = cooldown

    @property
    def config(self) -> StressConfig:
        return self._config

    def evaluate(self, session: SessionState, now: float) -> StressReading:
        """Recompute stress and stability for the session at time now.

        Side effects: updates session.stress, session.stability and
        session.collapse_on_cooldown, and appends the stability to the
        session's history.
        """
        if self._cooldown.is_active(session.last_collapse_at, now):
            session.stress = 0.0
            session.stability = FULL_STABILITY
            session.collapse_on_cooldown = True
            session.stability_history.append(FULL_STABILITY)
            return StressReading(stress=0.0, stability=FULL_STABILITY, cooling_down=True)

        if session.collapse_on_cooldown:
            session.collapse_on_cooldown = False
            logger.info("Cooldown expired", generation=session.generation)

        stress = compute_stress(
            TextMetrics.from_text(session.text),
            total_keystrokes=session.total_keystrokes,
            elapsed_sec=now - session.session_started_at,
            config=self._config,
        )
        stability = MAX_STRESS - stress

        session.stress = stress
        session.stability = stability
        session.stability_history.append(stability)
        return StressReading(stress=stress, stability=stability)
