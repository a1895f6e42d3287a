# tests/unit/test_cli.py
"""Tests for the raptor command line interface."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from typer.testing import CliRunner

from raptor import __version__
from raptor.cli import app
from tests.conftest import words

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI callback reconfigures logging onto the runner's stdout."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "draft.py"
    path.write_text("def compute(value):\n    return 'x' + value\n")
    return path


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"raptor version {__version__}" in result.output

    def test_missing_env_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "none.env"), "presets"])
        assert result.exit_code == 1
        assert ".env file not found" in result.output


class TestPresetsCommand:
    def test_lists_presets(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "presets"])
        assert result.exit_code == 0
        for name in ("default", "gentle", "brutal", "calm"):
            assert f"- {name}" in result.output


class TestShowConfigCommand:
    def test_json(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "show-config", "--preset", "brutal", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["stress"]["word_weight"] == 4.0
        assert data["preset_name"] == "brutal"

    def test_yaml(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "show-config"])
        assert result.exit_code == 0
        assert "cooldown_ms: 10000" in result.output

    def test_unknown_preset(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "show-config", "--preset", "missing"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("timing:\n  mutation_delay_ms: 5000\n")
        result = runner.invoke(app, ["--no-dotenv", "show-config", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestServeCommand:
    @pytest.fixture
    def uvicorn_calls(self, monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
        calls: list[dict[str, Any]] = []

        def fake_run(app_: Any, **kwargs: Any) -> None:
            calls.append({"app": app_, **kwargs})

        monkeypatch.setattr("uvicorn.run", fake_run)
        return calls

    def test_serve_with_overrides(self, uvicorn_calls: list[dict[str, Any]]) -> None:
        result = runner.invoke(app, ["--no-dotenv", "serve", "--preset", "gentle", "--port", "5050"])
        assert result.exit_code == 0, result.output
        (call,) = uvicorn_calls
        assert call["host"] == "127.0.0.1"
        assert call["port"] == 5050
        assert call["app"].state.server.engine.config.preset_name == "gentle"
        assert "workers" not in call

    def test_workers_option_rejected(self, uvicorn_calls: list[dict[str, Any]]) -> None:
        result = runner.invoke(app, ["--no-dotenv", "serve", "--workers", "2"])
        assert result.exit_code != 0
        assert uvicorn_calls == []

    def test_port_from_environment(self, uvicorn_calls: list[dict[str, Any]]) -> None:
        result = runner.invoke(app, ["--no-dotenv", "serve"], env={"PORT": "6001"})
        assert result.exit_code == 0, result.output
        assert uvicorn_calls[0]["port"] == 6001

    def test_client_url_sets_cors_origin(self, uvicorn_calls: list[dict[str, Any]]) -> None:
        result = runner.invoke(app, ["--no-dotenv", "serve"], env={"CLIENT_URL": "http://editor.test"})
        assert result.exit_code == 0, result.output
        assert uvicorn_calls[0]["app"].state.server.engine.config.cors_origins == ("http://editor.test",)

    def test_external_bind_refused(self, uvicorn_calls: list[dict[str, Any]]) -> None:
        result = runner.invoke(app, ["--no-dotenv", "serve", "--host", "0.0.0.0"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert uvicorn_calls == []


class TestMutateCommand:
    def test_calm_preset_leaves_text(self, source_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "mutate", str(source_file), "--preset", "calm", "--seed", "1"])
        assert result.exit_code == 0, result.output
        assert source_file.read_text() in result.output
        assert "Profile:" in result.output

    def test_named_profile(self, source_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "mutate", str(source_file), "--profile", "SYNTHWAVE"])
        assert result.exit_code == 0, result.output
        assert "Profile: SYNTHWAVE (glow)" in result.output

    def test_unknown_profile(self, source_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "mutate", str(source_file), "--profile", "NOPE"])
        assert result.exit_code == 1
        assert "Unknown mutation profile" in result.output

    def test_output_file(self, source_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "out.py"
        result = runner.invoke(
            app,
            ["--no-dotenv", "mutate", str(source_file), "--preset", "calm", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert output.read_text() == source_file.read_text()

    def test_seed_is_reproducible(self, source_file: Path) -> None:
        args = ["--no-dotenv", "mutate", str(source_file), "--preset", "brutal", "--seed", "9"]
        assert runner.invoke(app, args).output == runner.invoke(app, args).output


class TestSimulateCommand:
    def test_replay_collapses_once(self, tmp_path: Path) -> None:
        path = tmp_path / "long.py"
        path.write_text(words(60, "token"))
        result = runner.invoke(
            app,
            ["--no-dotenv", "simulate", str(path), "--preset", "calm", "--seed", "3", "--interval-ms", "100"],
        )
        assert result.exit_code == 0, result.output
        assert "collapse #1" in result.output
        assert "Generation: 1" in result.output
        assert "Collapses: 1" in result.output

    def test_short_file_never_collapses(self, tmp_path: Path) -> None:
        path = tmp_path / "short.py"
        path.write_text("x = 1\n")
        result = runner.invoke(app, ["--no-dotenv", "simulate", str(path)])
        assert result.exit_code == 0, result.output
        assert "Collapses: 0" in result.output
        assert "x = 1" in result.output
