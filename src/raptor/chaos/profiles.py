# src/raptor/chaos/profiles.py
"""Mutation profile catalog and per-collapse selection.

Every collapse draws one profile and, independently, one editor mode.
Both draws are uniform over fixed catalogs and depend only on the injected
random source.
"""

from __future__ import annotations

import random as random_module

from raptor.chaos.types import EditorMode, MutationProfile

PROFILE_CATALOG: tuple[MutationProfile, ...] = (
    MutationProfile(
        name="NEON_PULSE",
        background_color="#0a0e14",
        text_color="#00f5ff",
        font_size=14,
        indent_size=2,
        visual_effect="chromatic-aberration",
    ),
    MutationProfile(
        name="DARK_MATTER",
        background_color="#000000",
        text_color="#a0a0a0",
        font_size=13,
        indent_size=4,
        visual_effect="blur-wave",
    ),
    MutationProfile(
        name="BLOOD_MOON",
        background_color="#1a0000",
        text_color="#ff6b6b",
        font_size=14,
        indent_size=3,
        visual_effect="red-tint",
    ),
    MutationProfile(
        name="MATRIX_RAIN",
        background_color="#0d1b0d",
        text_color="#00ff41",
        font_size=13,
        indent_size=2,
        visual_effect="scanlines",
    ),
    MutationProfile(
        name="SYNTHWAVE",
        background_color="#1a1a2e",
        text_color="#ff00ff",
        font_size=14,
        indent_size=4,
        visual_effect="glow",
    ),
    MutationProfile(
        name="ARCTIC_FOG",
        background_color="#0a1a1a",
        text_color="#a8dadc",
        font_size=15,
        indent_size=2,
        visual_effect="blur-subtle",
    ),
    MutationProfile(
        name="VOID_WALKER",
        background_color="#050505",
        text_color="#6a6a6a",
        font_size=13,
        indent_size=3,
        visual_effect="vignette",
    ),
    MutationProfile(
        name="CYBER_GOLD",
        background_color="#0f0f0f",
        text_color="#ffd700",
        font_size=14,
        indent_size=4,
        visual_effect="text-shadow",
    ),
)

EDITOR_MODES: tuple[EditorMode, ...] = tuple(EditorMode)

_PROFILES_BY_NAME: dict[str, MutationProfile] = {profile.name: profile for profile in PROFILE_CATALOG}


def get_profile(name: str) -> MutationProfile:
    """Look up a catalog profile by name.

    Raises:
        KeyError: If no profile has that name.
    """
    try:
        return _PROFILES_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown mutation profile '{name}'. Available: {sorted(_PROFILES_BY_NAME)}") from None


class ProfileSelector:
    """Uniform random draws from the profile and editor-mode catalogs."""

    def __init__(self, *, rng: random_module.Random | None = None) -> None:
        """Initialize the selector.

        Args:
            rng: Random instance for testing (default: creates new Random instance).
        """
        self._rng = rng if rng is not None else random_module.Random()

    def select(self) -> MutationProfile:
        return self._rng.choice(PROFILE_CATALOG)

    def select_editor_mode(self) -> EditorMode:
        return self._rng.choice(EDITOR_MODES)
