# src/raptor/chaos/engine.py
"""Collapse state machine: the owner of a session and its timers.

States and transitions:

    IDLE --trigger--> COLLIDING --collapse_duration--> IDLE

On trigger the engine records a CollapseRecord, arms the cooldown (it runs
on its own clock from the trigger time), draws a mutation profile and an
editor mode, and applies the profile at once. Automatic triggers also
schedule the text mutation:

    +mutation_delay                  capture live text, run the pipeline
    +mutation_delay + apply_delay    replace live text with the result
    +collapse_duration               reset stress, bump generation, IDLE

TimingConfig guarantees the replacement lands before the idle reset.

All public methods and every scheduled continuation run under one lock.
Continuations belong to a CancellationToken tagged with the session epoch;
reset() cancels the token and bumps the epoch, so a continuation that
still fires afterwards sees a stale epoch and does nothing.
"""

from __future__ import annotations

import random as random_module
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from functools import partial

import structlog

from raptor.chaos.config import RaptorConfig
from raptor.chaos.cooldown import CooldownTimer
from raptor.chaos.indicators import detect_language, stability_color, stability_warnings
from raptor.chaos.mutation import MutationPipeline
from raptor.chaos.profiles import ProfileSelector
from raptor.chaos.session import SessionState
from raptor.chaos.stress import StressModel
from raptor.chaos.types import (
    CollapsePhase,
    CollapseRecord,
    CollapseTrigger,
    SessionView,
    StressReading,
)
from raptor.engine.clock import DEFAULT_CLOCK, Clock
from raptor.engine.scheduler import AsyncioScheduler, CancellationToken, Scheduler

logger = structlog.get_logger(__name__)

CRASH_INTENSITY = 100


class ChaosEngine:
    """Owns one SessionState and drives it through collapse cycles.

    Usage:
        clock = MockClock()
        scheduler = ManualScheduler(clock)
        engine = ChaosEngine(clock=clock, scheduler=scheduler, rng=random.Random(1))

        engine.update_text("word " * 60)   # reaches the ceiling, collapses
        scheduler.advance(3.0)             # mutation applied, back to IDLE
        engine.view().generation           # 1

    Production callers (the ASGI server) use the defaults: the system clock
    and an AsyncioScheduler on the running loop.
    """

    def __init__(
        self,
        config: RaptorConfig | None = None,
        *,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        rng: random_module.Random | None = None,
    ) -> None:
        """Initialize the engine with a fresh session.

        Args:
            config: Stress, timing and mutation configuration (default: built-in defaults).
            clock: Time source (default: system monotonic clock).
            scheduler: Delayed-continuation backend (default: asyncio running loop).
            rng: Random instance shared by profile selection and mutation
                 (default: creates new Random instance).
        """
        self._config = config if config is not None else RaptorConfig()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._rng = rng if rng is not None else random_module.Random()

        timing = self._config.timing
        self._ceiling = self._config.stress.ceiling
        self._collapse_duration_sec = timing.collapse_duration_ms / 1000.0
        self._mutation_delay_sec = timing.mutation_delay_ms / 1000.0
        self._apply_delay_sec = timing.apply_delay_ms / 1000.0

        self._cooldown = CooldownTimer(timing.cooldown_ms / 1000.0)
        self._stress_model = StressModel(self._config.stress, self._cooldown)
        self._selector = ProfileSelector(rng=self._rng)
        self._pipeline = MutationPipeline(self._config.mutation, rng=self._rng)

        self._lock = threading.RLock()
        self._session = SessionState(
            session_started_at=self._clock.monotonic(),
            history_capacity=self._config.stress.history_capacity,
        )
        self._pending: CancellationToken | None = None

    @property
    def config(self) -> RaptorConfig:
        return self._config

    @property
    def phase(self) -> CollapsePhase:
        with self._lock:
            return self._session.phase

    @property
    def collapse_history(self) -> tuple[CollapseRecord, ...]:
        with self._lock:
            return tuple(self._session.collapse_history)

    # === Inputs ===

    def update_text(self, text: str) -> StressReading:
        """Handle one keystroke: store the text, rescore, maybe collapse.

        An automatic collapse fires when stress reaches the ceiling and no
        collapse or cooldown is in progress.
        """
        with self._lock:
            session = self._session
            session.text = text
            session.language = detect_language(text, session.language)
            session.total_keystrokes += 1
            reading = self._stress_model.evaluate(session, self._clock.monotonic())
            if reading.stress >= self._ceiling:
                self._trigger(CollapseTrigger.AUTOMATIC)
            return reading

    def evaluate(self) -> StressReading:
        """Rescore the session without counting a keystroke or triggering."""
        with self._lock:
            return self._stress_model.evaluate(self._session, self._clock.monotonic())

    def force_collapse(self) -> bool:
        """Manually trigger a collapse.

        Returns:
            True if the collapse started, False if one is already in
            progress or the cooldown is active.
        """
        with self._lock:
            return self._trigger(CollapseTrigger.MANUAL)

    def reset(self) -> None:
        """Restore the initial session and drop every pending continuation."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._session.reset(self._clock.monotonic())
            logger.info("Session reset", epoch=self._session.epoch)

    # === Outputs ===

    def view(self) -> SessionView:
        """Read-only projection of the session for presentation layers."""
        with self._lock:
            session = self._session
            now = self._clock.monotonic()
            profile = session.current_profile
            return SessionView(
                text=session.text,
                language=session.language,
                stress=session.stress,
                stability=session.stability,
                generation=session.generation,
                collapse_count=session.collapse_count,
                total_keystrokes=session.total_keystrokes,
                stability_history=session.stability_history.snapshot(),
                is_crashing=session.is_crashing,
                crash_intensity=CRASH_INTENSITY if session.is_crashing else 0,
                current_mutation=profile,
                current_visual_effect=profile.visual_effect if profile is not None else None,
                background_color=session.background_color,
                text_color=session.text_color,
                font_size=session.font_size,
                indent_size=session.indent_size,
                editor_mode=session.editor_mode,
                collapse_on_cooldown=self._cooldown.is_active(session.last_collapse_at, now),
                cooldown_remaining_sec=self._cooldown.remaining(session.last_collapse_at, now),
                warnings=stability_warnings(session.stability),
                stability_color=stability_color(session.stability),
            )

    # === State machine ===

    def _trigger(self, trigger: CollapseTrigger) -> bool:
        """IDLE -> COLLIDING. Caller holds the lock."""
        session = self._session
        now = self._clock.monotonic()

        if session.is_crashing or self._cooldown.is_active(session.last_collapse_at, now):
            logger.debug(
                "Collapse trigger refused",
                trigger=str(trigger),
                phase=str(session.phase),
                cooldown_remaining_sec=self._cooldown.remaining(session.last_collapse_at, now),
            )
            return False

        editor_mode = self._selector.select_editor_mode()
        profile = self._selector.select()

        session.collapse_history.append(
            CollapseRecord(
                text=session.text,
                timestamp_utc=datetime.now(UTC).isoformat(),
                generation=session.generation,
                stress=session.stress,
                trigger=trigger,
                profile_name=profile.name,
                editor_mode=editor_mode,
            )
        )
        session.phase = CollapsePhase.COLLIDING
        session.collapse_count += 1
        session.last_collapse_at = now
        session.collapse_on_cooldown = True
        session.apply_profile(profile, editor_mode)

        token = CancellationToken(epoch=session.epoch)
        self._pending = token
        if trigger is CollapseTrigger.AUTOMATIC:
            self._schedule(token, self._mutation_delay_sec, partial(self._capture_and_mutate, token))
        self._schedule(token, self._collapse_duration_sec, self._complete_collapse)

        logger.info(
            "Collapse triggered",
            trigger=str(trigger),
            generation=session.generation,
            collapse_count=session.collapse_count,
            stress=session.stress,
            profile=profile.name,
            editor_mode=str(editor_mode),
        )
        return True

    def _schedule(self, token: CancellationToken, delay_sec: float, callback: Callable[[], None]) -> None:
        """Schedule callback under token; it runs locked and only if the token is current."""

        def _run() -> None:
            with self._lock:
                if not token.is_current(self._session.epoch):
                    logger.debug(
                        "Discarded stale collapse continuation",
                        token_epoch=token.epoch,
                        session_epoch=self._session.epoch,
                    )
                    return
                callback()

        token.track(self._scheduler.call_later(delay_sec, _run))

    def _capture_and_mutate(self, token: CancellationToken) -> None:
        session = self._session
        captured = session.text
        mutated = self._pipeline.mutate(captured, session.current_profile)
        self._schedule(token, self._apply_delay_sec, partial(self._apply_mutation, mutated))

    def _apply_mutation(self, mutated: str) -> None:
        session = self._session
        changed = mutated != session.text
        session.text = mutated
        session.language = detect_language(mutated, session.language)
        logger.info("Collapse mutated text", generation=session.generation, changed=changed, length=len(mutated))

    def _complete_collapse(self) -> None:
        """COLLIDING -> IDLE."""
        session = self._session
        session.complete_generation(self._clock.monotonic())
        self._pending = None
        logger.info("Collapse completed", generation=session.generation, collapse_count=session.collapse_count)
