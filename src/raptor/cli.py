# src/raptor/cli.py
"""Raptor Command Line Interface.

Usage:
    raptor serve                                  # Start with defaults
    raptor serve --preset=brutal --port=5000      # Use a preset
    raptor serve --config=my_chaos.yaml           # Custom config
    raptor presets                                # List presets
    raptor show-config --preset=gentle            # Effective config
    raptor mutate draft.py --seed=7               # One collapse's mutation
    raptor simulate draft.py --interval-ms=250    # Replay typing offline
"""

from __future__ import annotations

import json
import random
import re
from pathlib import Path
from typing import Annotated, Any

import pydantic
import typer
import yaml

from raptor import __version__
from raptor.chaos.config import RaptorConfig, list_presets, load_config

app = typer.Typer(
    name="raptor",
    help="Raptor: an editor whose code collapses under its own entropy.",
    no_args_is_help=True,
)

_TOKEN_PATTERN = re.compile(r"\s*\S+")

PresetOption = Annotated[
    str | None,
    typer.Option("--preset", "-p", help="Preset configuration to use. Use 'raptor presets' to list available."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to YAML configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"raptor version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


def _load_config_or_exit(
    *,
    preset: str | None,
    config_file: Path | None,
    cli_overrides: dict[str, Any] | None = None,
) -> RaptorConfig:
    try:
        return load_config(preset=preset, config_file=config_file, cli_overrides=cli_overrides)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except (pydantic.ValidationError, yaml.YAMLError, ValueError) as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Raptor: an editor whose code collapses under its own entropy."""
    from raptor.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


@app.command()
def serve(
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-h", help="Host address to bind to."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-P", help="Port to listen on.", min=1, max=65535, envvar="PORT"),
    ] = None,
    client_url: Annotated[
        str | None,
        typer.Option("--client-url", help="Origin allowed by CORS.", envvar="CLIENT_URL"),
    ] = None,
    cooldown_ms: Annotated[
        int | None,
        typer.Option("--cooldown-ms", help="Cooldown after a collapse in milliseconds.", min=1),
    ] = None,
    word_weight: Annotated[
        float | None,
        typer.Option("--word-weight", help="Stress added per word.", min=0.0),
    ] = None,
    corrupt_pct: Annotated[
        float | None,
        typer.Option("--corrupt-pct", help="Identifier corruption percentage.", min=0.0, max=100.0),
    ] = None,
) -> None:
    """Start the Raptor session server and event relay.

    Configuration precedence (highest to lowest):
    1. Command-line flags (and PORT / CLIENT_URL environment variables)
    2. Config file (--config)
    3. Preset (--preset)
    4. Built-in defaults
    """
    cli_overrides: dict[str, Any] = {}

    server_overrides: dict[str, Any] = {}
    if host is not None:
        server_overrides["host"] = host
    if port is not None:
        server_overrides["port"] = port
    if server_overrides:
        cli_overrides["server"] = server_overrides

    if client_url is not None:
        cli_overrides["cors_origins"] = [client_url]
    if cooldown_ms is not None:
        cli_overrides["timing"] = {"cooldown_ms": cooldown_ms}
    if word_weight is not None:
        cli_overrides["stress"] = {"word_weight": word_weight}
    if corrupt_pct is not None:
        cli_overrides["mutation"] = {"corrupt_pct": corrupt_pct}

    config = _load_config_or_exit(preset=preset, config_file=config_file, cli_overrides=cli_overrides)

    typer.secho(
        f"Starting Raptor server on {config.server.host}:{config.server.port}",
        fg=typer.colors.GREEN,
    )
    if preset:
        typer.echo(f"  Preset: {preset}")
    if config_file:
        typer.echo(f"  Config: {config_file}")
    typer.echo(f"  Health: http://{config.server.host}:{config.server.port}/api/health")
    typer.echo(f"  Cooldown: {config.timing.cooldown_ms}ms, collapse window: {config.timing.collapse_duration_ms}ms")
    if config.mutation.disabled_stages:
        typer.echo(f"  Disabled stages: {', '.join(config.mutation.disabled_stages)}")
    typer.echo()

    import uvicorn

    from raptor.relay.server import create_app

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )


@app.command()
def presets() -> None:
    """List available preset configurations."""
    available = list_presets()
    if not available:
        typer.echo("No presets found.")
        return

    typer.secho("Available presets:", fg=typer.colors.GREEN)
    for name in sorted(available):
        typer.echo(f"  - {name}")

    typer.echo()
    typer.echo("Use with: raptor serve --preset=<name>")


@app.command()
def show_config(
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json or yaml."),
    ] = "yaml",
) -> None:
    """Show the effective configuration."""
    config = _load_config_or_exit(preset=preset, config_file=config_file)

    config_dict = config.model_dump(mode="json")
    if output_format == "json":
        typer.echo(json.dumps(config_dict, indent=2))
    else:
        typer.echo(yaml.dump(config_dict, default_flow_style=False, sort_keys=False))


@app.command()
def mutate(
    source: Annotated[
        Path,
        typer.Argument(help="File to mutate.", exists=True, file_okay=True, dir_okay=False, resolve_path=True),
    ],
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", "-s", help="Random seed for a reproducible mutation."),
    ] = None,
    profile_name: Annotated[
        str | None,
        typer.Option("--profile", help="Mutation profile name (default: random draw)."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here instead of stdout."),
    ] = None,
) -> None:
    """Run one collapse's text mutation over a file."""
    from raptor.chaos.mutation import MutationPipeline
    from raptor.chaos.profiles import ProfileSelector, get_profile

    config = _load_config_or_exit(preset=preset, config_file=config_file)
    rng = random.Random(seed)

    if profile_name is not None:
        try:
            profile = get_profile(profile_name)
        except KeyError as e:
            typer.secho(f"Error: {e.args[0]}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from e
    else:
        profile = ProfileSelector(rng=rng).select()

    mutated = MutationPipeline(config.mutation, rng=rng).mutate(source.read_text(encoding="utf-8"), profile)

    typer.secho(f"Profile: {profile.name} ({profile.visual_effect})", fg=typer.colors.MAGENTA, err=True)
    if output is not None:
        output.write_text(mutated, encoding="utf-8")
        typer.echo(f"Wrote {output}", err=True)
    else:
        typer.echo(mutated)


@app.command()
def simulate(
    source: Annotated[
        Path,
        typer.Argument(help="File to replay as typing.", exists=True, file_okay=True, dir_okay=False, resolve_path=True),
    ],
    preset: PresetOption = None,
    config_file: ConfigOption = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", "-s", help="Random seed for reproducible collapses."),
    ] = None,
    interval_ms: Annotated[
        int,
        typer.Option("--interval-ms", help="Simulated time between typed words.", min=0),
    ] = 250,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the final session as JSON."),
    ] = False,
) -> None:
    """Replay a file word by word through a chaos engine on a simulated clock.

    Each typed word is appended to the session's current text, so words
    typed after a collapse land on the mutated text.
    """
    from raptor.chaos.engine import ChaosEngine
    from raptor.engine.clock import MockClock
    from raptor.engine.scheduler import ManualScheduler

    config = _load_config_or_exit(preset=preset, config_file=config_file)
    clock = MockClock()
    scheduler = ManualScheduler(clock)
    engine = ChaosEngine(config, clock=clock, scheduler=scheduler, rng=random.Random(seed))

    collapses_seen = 0
    for token in _TOKEN_PATTERN.findall(source.read_text(encoding="utf-8")):
        engine.update_text(engine.view().text + token)
        view = engine.view()
        if view.collapse_count > collapses_seen:
            collapses_seen = view.collapse_count
            profile = view.current_mutation.name if view.current_mutation is not None else "-"
            typer.secho(
                f"[t={clock.monotonic():8.2f}s] collapse #{view.collapse_count} "
                f"(generation {view.generation}, profile {profile}, mode {view.editor_mode})",
                fg=typer.colors.RED,
            )
        scheduler.advance(interval_ms / 1000.0)
    scheduler.run_all()

    final = engine.view()
    if as_json:
        typer.echo(json.dumps(final.to_dict(), indent=2))
        return
    typer.echo()
    typer.echo(f"Generation: {final.generation}")
    typer.echo(f"Collapses: {final.collapse_count}")
    typer.echo(f"Stress: {final.stress:.1f}  Stability: {final.stability:.1f}")
    typer.echo()
    typer.echo(final.text)


if __name__ == "__main__":
    app()
