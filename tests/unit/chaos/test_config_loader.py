# tests/unit/chaos/test_config_loader.py
"""Tests for the generic configuration loading utilities."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import BaseModel

from raptor.chaos.config_loader import deep_merge, list_presets, load_config, load_preset


class _Inner(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    rate: float = 1.0
    label: str = "base"


class _Outer(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    inner: _Inner = _Inner()
    enabled: bool = False
    preset_name: str | None = None


class TestDeepMerge:
    def test_nested_override(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        override = {"a": {"y": 3}}
        assert deep_merge(base, override) == {"a": {"x": 1, "y": 3}, "b": 1}

    def test_inputs_not_mutated(self) -> None:
        base = {"a": {"x": 1}}
        override = {"a": {"x": 2}}
        deep_merge(base, override)
        assert base == {"a": {"x": 1}}
        assert override == {"a": {"x": 2}}

    def test_non_dict_replaces_dict(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": 5}) == {"a": 5}

    def test_lists_replaced_not_merged(self) -> None:
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


class TestPresetFiles:
    def test_list_presets_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b.yaml").write_text("enabled: true\n")
        (tmp_path / "a.yaml").write_text("enabled: false\n")
        (tmp_path / "notes.txt").write_text("ignored")
        assert list_presets(tmp_path) == ["a", "b"]

    def test_list_presets_missing_dir(self, tmp_path: Path) -> None:
        assert list_presets(tmp_path / "nope") == []

    def test_load_preset_not_found_lists_available(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text("enabled: true\n")
        with pytest.raises(FileNotFoundError, match=r"Available presets: \['a'\]"):
            load_preset(tmp_path, "zzz")

    def test_load_preset_must_be_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "bad.yaml").write_text("just a string\n")
        with pytest.raises(ValueError, match="must be a YAML mapping"):
            load_preset(tmp_path, "bad")


class TestLoadConfig:
    def test_defaults_only(self, tmp_path: Path) -> None:
        config = load_config(_Outer, tmp_path)
        assert config == _Outer()

    def test_full_precedence(self, tmp_path: Path) -> None:
        (tmp_path / "p.yaml").write_text("inner:\n  rate: 2.0\n  label: preset\nenabled: true\n")
        config_file = tmp_path / "user.yaml"
        config_file.write_text("inner:\n  label: file\n")

        config = load_config(
            _Outer,
            tmp_path,
            preset="p",
            config_file=config_file,
            cli_overrides={"inner": {"rate": 9.0}},
        )

        assert config.inner.rate == 9.0
        assert config.inner.label == "file"
        assert config.enabled is True
        assert config.preset_name == "p"
