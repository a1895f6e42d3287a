# src/raptor/chaos/config.py
"""Configuration schema and loading for the chaos engine and its server.

Uses Pydantic for validation with frozen (immutable) models.
Configuration precedence: CLI > YAML file > preset > defaults.

Percentages are 0-100 (e.g., 40.0 means a 40% chance), durations are
milliseconds.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from raptor.chaos.config_loader import list_presets as _list_presets
from raptor.chaos.config_loader import load_config as _load_config
from raptor.chaos.config_loader import load_preset as _load_preset

# Stage names in pipeline order. Mutation stages are applied in exactly
# this order; later stages see the output of earlier ones.
MUTATION_STAGES: tuple[str, ...] = (
    "fold_conditionals",
    "corrupt_identifiers",
    "inject_comments",
    "unroll_range_loops",
    "flip_quotes",
    "jitter_indentation",
    "jitter_operator_spacing",
    "insert_blank_lines",
)


# === Shared Server Types ===


class ServerConfig(BaseModel):
    """Server binding for the single-process session server."""

    model_config = {"frozen": True, "extra": "forbid"}

    host: str = Field(
        default="127.0.0.1",
        description="Host address to bind to",
    )
    port: int = Field(
        default=5000,
        gt=0,
        le=65535,
        description="Port to listen on",
    )

class LatencyConfig(BaseModel):
    """Simulated execution latency for the code-execution stub."""

    model_config = {"frozen": True, "extra": "forbid"}

    base_ms: int = Field(
        default=500,
        ge=0,
        description="Base latency in milliseconds",
    )
    jitter_ms: int = Field(
        default=0,
        ge=0,
        description="Random jitter added to base latency (+/- ms)",
    )


# === Chaos Engine ===


class StressConfig(BaseModel):
    """Stress scoring weights.

    stress = word_weight*words + line_weight*lines + keystroke_weight*keystrokes
             + elapsed_weight*seconds + bracket_weight*brackets
             + semicolon_weight*semicolons + keyword_weight*keywords

    Word count dominates: with the defaults 50 words alone reach the ceiling.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    word_weight: float = Field(default=2.0, ge=0.0, description="Stress per whitespace-delimited word")
    line_weight: float = Field(default=0.3, ge=0.0, description="Stress per line")
    keystroke_weight: float = Field(default=0.05, ge=0.0, description="Stress per keystroke this generation")
    elapsed_weight: float = Field(default=0.1, ge=0.0, description="Stress per second since generation start")
    bracket_weight: float = Field(default=0.15, ge=0.0, description="Stress per bracket character")
    semicolon_weight: float = Field(default=0.08, ge=0.0, description="Stress per semicolon")
    keyword_weight: float = Field(default=0.25, ge=0.0, description="Stress per language keyword")
    ceiling: float = Field(
        default=100.0,
        gt=0.0,
        le=100.0,
        description="Stress at which an automatic collapse fires",
    )
    history_capacity: int = Field(
        default=100,
        gt=0,
        description="Number of stability samples kept for graphing",
    )


class TimingConfig(BaseModel):
    """Collapse timing, all in milliseconds and measured from the trigger.

    The text replacement (mutation_delay_ms + apply_delay_ms) must land
    strictly before the collapse window closes, otherwise the idle reset
    could run before the mutated text is applied.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    collapse_duration_ms: int = Field(
        default=3000,
        gt=0,
        description="Length of the colliding window before returning to idle",
    )
    cooldown_ms: int = Field(
        default=10000,
        gt=0,
        description="Window after a trigger during which stress is pinned to zero",
    )
    mutation_delay_ms: int = Field(
        default=100,
        ge=0,
        description="Delay before the live text is captured and mutated",
    )
    apply_delay_ms: int = Field(
        default=2500,
        ge=0,
        description="Further delay before the mutated text replaces the live text",
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> "TimingConfig":
        """Ensure text replacement happens strictly before the idle reset."""
        apply_at = self.mutation_delay_ms + self.apply_delay_ms
        if apply_at >= self.collapse_duration_ms:
            raise ValueError(
                f"mutation_delay_ms + apply_delay_ms ({apply_at}) must be < collapse_duration_ms ({self.collapse_duration_ms})"
            )
        return self


class MutationConfig(BaseModel):
    """Probabilities for the text mutation pipeline (0-100).

    "Per match" rates roll independently for every candidate; "session"
    rates roll once per pipeline run and switch a stage on or off wholesale.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    fold_pct: float = Field(default=50.0, ge=0.0, le=100.0, description="Per if/else pair: fold to a ternary")
    corrupt_pct: float = Field(default=40.0, ge=0.0, le=100.0, description="Per distinct identifier: corrupt it")
    def_comment_pct: float = Field(default=60.0, ge=0.0, le=100.0, description="Per def line: inject a comment")
    class_comment_pct: float = Field(default=40.0, ge=0.0, le=100.0, description="Per class line: inject a comment")
    loop_pct: float = Field(default=30.0, ge=0.0, le=100.0, description="Per range loop: rewrite as while")
    quote_flip_pct: float = Field(default=40.0, ge=0.0, le=100.0, description="Session: single to double quotes")
    indent_jitter_pct: float = Field(default=30.0, ge=0.0, le=100.0, description="Per indented line: shift indent")
    operator_spacing_pct: float = Field(default=35.0, ge=0.0, le=100.0, description="Session: re-space operators")
    blank_lines_pct: float = Field(default=20.0, ge=0.0, le=100.0, description="Session: enable blank-line insertion")
    blank_line_insert_pct: float = Field(
        default=15.0,
        ge=0.0,
        le=100.0,
        description="Per non-empty line once blank-line insertion is enabled",
    )
    disabled_stages: tuple[str, ...] = Field(
        default=(),
        description=f"Stage names to skip. Known stages: {', '.join(MUTATION_STAGES)}",
    )

    @field_validator("disabled_stages", mode="before")
    @classmethod
    def parse_stages(cls, v: Any) -> tuple[str, ...]:
        """Accept a list or tuple of stage names."""
        if isinstance(v, (list, tuple)):
            return tuple(str(name) for name in v)
        raise ValueError(f"Expected a list of stage names, got {v!r}")

    @model_validator(mode="after")
    def validate_stage_names(self) -> "MutationConfig":
        unknown = sorted(set(self.disabled_stages) - set(MUTATION_STAGES))
        if unknown:
            raise ValueError(f"Unknown mutation stages: {unknown}. Known stages: {list(MUTATION_STAGES)}")
        return self


# === Top-Level Config ===


class RaptorConfig(BaseModel):
    """Top-level Raptor configuration.

    Configuration precedence (highest to lowest):
    1. CLI flags
    2. YAML config file
    3. Preset defaults
    4. Built-in defaults
    """

    model_config = {"frozen": True, "extra": "forbid"}

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server binding configuration",
    )
    stress: StressConfig = Field(
        default_factory=StressConfig,
        description="Stress scoring weights",
    )
    timing: TimingConfig = Field(
        default_factory=TimingConfig,
        description="Collapse and cooldown timing",
    )
    mutation: MutationConfig = Field(
        default_factory=MutationConfig,
        description="Text mutation probabilities",
    )
    execution_latency: LatencyConfig = Field(
        default_factory=LatencyConfig,
        description="Simulated latency of the code-execution stub",
    )
    cors_origins: tuple[str, ...] = Field(
        default=("http://localhost:3000",),
        description="Origins allowed to call the HTTP API",
    )
    allow_external_bind: bool = Field(
        default=False,
        description="Allow binding to 0.0.0.0 or :: (all interfaces). Blocked by default.",
    )
    preset_name: str | None = Field(
        default=None,
        description="Preset name used to build this config (if any)",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_origins(cls, v: Any) -> tuple[str, ...]:
        """Accept a single origin string or a list of origins."""
        if isinstance(v, str):
            return (v,)
        if isinstance(v, (list, tuple)):
            return tuple(str(origin) for origin in v)
        raise ValueError(f"Expected an origin or list of origins, got {v!r}")

    @model_validator(mode="after")
    def validate_host_binding(self) -> "RaptorConfig":
        """Block binding to all interfaces unless explicitly allowed."""
        dangerous_hosts = {"0.0.0.0", "::", "0:0:0:0:0:0:0:0"}
        if self.server.host in dangerous_hosts and not self.allow_external_bind:
            raise ValueError(
                f"Binding to '{self.server.host}' exposes the Raptor server to the network. "
                f"Use allow_external_bind: true to override, or bind to 127.0.0.1."
            )
        return self


# === Preset Loading ===


def _get_presets_dir() -> Path:
    """Get the presets directory path."""
    return Path(__file__).parent / "presets"


def list_presets() -> list[str]:
    """List available preset names."""
    return _list_presets(_get_presets_dir())


def load_preset(preset_name: str) -> dict[str, Any]:
    """Load a preset configuration by name."""
    return _load_preset(_get_presets_dir(), preset_name)


def load_config(
    *,
    preset: str | None = None,
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> RaptorConfig:
    """Load Raptor configuration with precedence handling.

    Precedence (highest to lowest):
    1. cli_overrides - Direct overrides from CLI flags
    2. config_file - User's YAML configuration file
    3. preset - Named preset configuration
    4. defaults - Built-in Pydantic defaults
    """
    return _load_config(
        RaptorConfig,
        _get_presets_dir(),
        preset=preset,
        config_file=config_file,
        cli_overrides=cli_overrides,
    )
