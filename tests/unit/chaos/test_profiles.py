# tests/unit/chaos/test_profiles.py
"""Unit tests for the mutation profile catalog and ProfileSelector."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from raptor.chaos.profiles import EDITOR_MODES, PROFILE_CATALOG, ProfileSelector, get_profile
from raptor.chaos.types import EditorMode


class TestCatalog:
    """The catalog is fixed and well formed."""

    def test_eight_profiles_with_unique_names(self) -> None:
        names = [profile.name for profile in PROFILE_CATALOG]
        assert len(names) == 8
        assert len(set(names)) == 8

    def test_colors_are_hex(self) -> None:
        for profile in PROFILE_CATALOG:
            assert profile.background_color.startswith("#")
            assert profile.text_color.startswith("#")

    def test_get_profile(self) -> None:
        profile = get_profile("MATRIX_RAIN")
        assert profile.text_color == "#00ff41"
        assert profile.visual_effect == "scanlines"

    def test_get_unknown_profile(self) -> None:
        with pytest.raises(KeyError, match="Unknown mutation profile"):
            get_profile("NOPE")

    def test_editor_modes_cover_enum(self) -> None:
        assert set(EDITOR_MODES) == set(EditorMode)
        assert len(EDITOR_MODES) == 5


class TestProfileSelector:
    """Uniform draws that depend only on the random source."""

    def test_select_from_catalog(self) -> None:
        selector = ProfileSelector(rng=random.Random(1))
        for _ in range(50):
            assert selector.select() in PROFILE_CATALOG
            assert selector.select_editor_mode() in EDITOR_MODES

    def test_deterministic_with_seed(self) -> None:
        first = ProfileSelector(rng=random.Random(99))
        second = ProfileSelector(rng=random.Random(99))
        for _ in range(20):
            assert first.select() == second.select()
            assert first.select_editor_mode() == second.select_editor_mode()

    def test_every_profile_reachable(self) -> None:
        selector = ProfileSelector(rng=random.Random(7))
        counts = Counter(selector.select().name for _ in range(2000))
        assert set(counts) == {profile.name for profile in PROFILE_CATALOG}
