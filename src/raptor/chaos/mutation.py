# src/raptor/chaos/mutation.py
"""Lossy text mutation pipeline applied once per collapse.

Each stage is a pure function of (text, random source, probabilities) and
can be called on its own. The MutationPipeline composes them in a fixed
order; later stages see the output of earlier ones:

1. fold_conditionals        if/else assignment pairs -> ternary (per match)
2. corrupt_identifiers      rename identifiers consistently (per identifier)
3. inject_comments          quotes after def/class lines (per line)
4. unroll_range_loops       for-range -> counter + while (per match)
5. flip_quotes              single -> double quotes (whole text or nothing)
6. jitter_indentation       shift indented lines by +2/-1 (per line)
7. jitter_operator_spacing  re-space operators (whole text or nothing)
8. insert_blank_lines       sprinkle blank lines (whole text or nothing)

Mutated text is not meant to keep its meaning. The stages only promise to
be total: any input string produces some output string.
"""

from __future__ import annotations

import keyword
import random as random_module
import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

import structlog

from raptor.chaos.config import MUTATION_STAGES, MutationConfig
from raptor.chaos.types import MutationProfile

logger = structlog.get_logger(__name__)

# Words never corrupted, compared case-insensitively.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "def",
        "class",
        "if",
        "else",
        "elif",
        "for",
        "while",
        "return",
        "import",
        "from",
        "print",
        "range",
        "len",
        "str",
        "int",
        "list",
        "dict",
        "true",
        "false",
        "none",
    }
    | {kw.lower() for kw in keyword.kwlist}
)

CHAOS_QUOTES: tuple[str, ...] = (
    "# reality.reformat()",
    "# entropy increasing...",
    "# system evolution detected",
    "# mutation protocol active",
    "# generation consciousness emerging",
    "# code dreams of electric sheep",
    "# the void compiles",
    "# digital entropy manifest",
    "# chaos.init()",
    "# evolution in progress",
    "# syntax.mutate()",
    "# reality.glitch()",
    "# consciousness.emerge()",
    "# void.execute()",
)

COMMENT_INDENT = "    "

_CONDITIONAL_PATTERN = re.compile(r"\bif[ \t]+(.+?):[ \t]*\n[ \t]+(.+?)[ \t]*\n[ \t]*else:[ \t]*\n[ \t]+(.+)")
_ASSIGNMENT_PATTERN = re.compile(r"^(\w+)\s*=(?!=)\s*(.+)$")
_IDENTIFIER_PATTERN = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]{2,}\b")
_RANGE_LOOP_PATTERN = re.compile(r"^([ \t]*)for\s+(\w+)\s+in\s+range\((\d+)\):", re.MULTILINE)
_SINGLE_QUOTED_PATTERN = re.compile(r"'([^']*)'")
_OPERATOR_PATTERN = re.compile(r"[+\-*/%=]")
_VOWEL_PATTERN = re.compile(r"[aeiou]", re.IGNORECASE)
_CONSONANT_PATTERN = re.compile(r"([bcdfghjklmnpqrstvwxyz])", re.IGNORECASE)


def should_trigger(rng: random_module.Random, percentage: float) -> bool:
    """Roll against a percentage (0-100). 0 never fires, 100 always does."""
    if percentage <= 0:
        return False
    return rng.random() * 100 < percentage


# =============================================================================
# Stage 1: conditional folding
# =============================================================================


def fold_conditionals(text: str, *, rng: random_module.Random, fold_pct: float = 50.0) -> str:
    """Fold ``if c:`` / ``else:`` assignment pairs into one ternary line.

    ``if x > 0:\\n    y = 1\\nelse:\\n    y = 2`` becomes ``y = 1 if x > 0 else 2``.
    Pairs whose bodies are not both assignments are left alone.
    """

    def _fold(match: re.Match[str]) -> str:
        condition, if_body, else_body = match.group(1), match.group(2), match.group(3).rstrip()
        if_assign = _ASSIGNMENT_PATTERN.match(if_body)
        else_assign = _ASSIGNMENT_PATTERN.match(else_body)
        if if_assign is None or else_assign is None:
            return match.group(0)
        if not should_trigger(rng, fold_pct):
            return match.group(0)
        return f"{if_assign.group(1)} = {if_assign.group(2)} if {condition} else {else_assign.group(2)}"

    return _CONDITIONAL_PATTERN.sub(_fold, text)


# =============================================================================
# Stage 2: identifier corruption
# =============================================================================


def _strip_vowels(name: str, rng: random_module.Random) -> str:
    return name[0] + _VOWEL_PATTERN.sub("", name[1:])


def _version_suffix(name: str, rng: random_module.Random) -> str:
    return f"{name}_v{rng.randint(1, 9)}"


def _scramble_case(name: str, rng: random_module.Random) -> str:
    return "".join(ch.upper() if rng.random() > 0.6 else ch for ch in name)


def _double_consonant(name: str, rng: random_module.Random) -> str:
    return _CONSONANT_PATTERN.sub(r"\1\1", name, count=1)


def _mutant_suffix(name: str, rng: random_module.Random) -> str:
    return f"{name}_mut"


def _digit_for_vowel(name: str, rng: random_module.Random) -> str:
    return _VOWEL_PATTERN.sub(str(rng.randint(0, 9)), name, count=1)


CORRUPTION_STRATEGIES: tuple[Callable[[str, random_module.Random], str], ...] = (
    _strip_vowels,
    _version_suffix,
    _scramble_case,
    _double_consonant,
    _mutant_suffix,
    _digit_for_vowel,
)


def corrupt_identifiers(text: str, *, rng: random_module.Random, corrupt_pct: float = 40.0) -> str:
    """Corrupt a random subset of identifiers.

    Each distinct identifier (three or more word characters, not reserved)
    is rolled once. The outcome, corrupted or not, sticks for every later
    occurrence in this pass.
    """
    decided: dict[str, str] = {}

    def _corrupt(match: re.Match[str]) -> str:
        name = match.group(0)
        if name.lower() in RESERVED_WORDS:
            return name
        if name in decided:
            return decided[name]
        replacement = name
        if should_trigger(rng, corrupt_pct):
            strategy = rng.choice(CORRUPTION_STRATEGIES)
            replacement = strategy(name, rng)
        decided[name] = replacement
        return replacement

    return _IDENTIFIER_PATTERN.sub(_corrupt, text)


# =============================================================================
# Stage 3: comment injection
# =============================================================================


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def inject_comments(
    text: str,
    *,
    rng: random_module.Random,
    def_comment_pct: float = 60.0,
    class_comment_pct: float = 40.0,
) -> str:
    """Insert a quote from CHAOS_QUOTES after some def and class lines."""
    injected: list[str] = []
    for line in text.split("\n"):
        injected.append(line)
        stripped = line.strip()
        if stripped.startswith("def "):
            pct = def_comment_pct
        elif stripped.startswith("class "):
            pct = class_comment_pct
        else:
            continue
        if should_trigger(rng, pct):
            injected.append(f"{_leading_whitespace(line)}{COMMENT_INDENT}{rng.choice(CHAOS_QUOTES)}")
    return "\n".join(injected)


# =============================================================================
# Stage 4: loop-form substitution
# =============================================================================


def unroll_range_loops(text: str, *, rng: random_module.Random, loop_pct: float = 30.0) -> str:
    """Rewrite ``for x in range(N):`` as ``x = 0`` plus ``while x < N:``.

    The counter is never incremented in the rewritten loop.
    """

    def _unroll(match: re.Match[str]) -> str:
        if not should_trigger(rng, loop_pct):
            return match.group(0)
        indent, var, bound = match.group(1), match.group(2), match.group(3)
        return f"{indent}{var} = 0\n{indent}while {var} < {bound}:"

    return _RANGE_LOOP_PATTERN.sub(_unroll, text)


# =============================================================================
# Stage 5: quote-style flip
# =============================================================================


def flip_quotes(text: str, *, rng: random_module.Random, quote_flip_pct: float = 40.0) -> str:
    """Turn every single-quoted literal into a double-quoted one, or none."""
    if not should_trigger(rng, quote_flip_pct):
        return text
    return _SINGLE_QUOTED_PATTERN.sub(r'"\1"', text)


# =============================================================================
# Stage 6: indentation jitter
# =============================================================================


def jitter_indentation(text: str, *, rng: random_module.Random, indent_jitter_pct: float = 30.0) -> str:
    """Shift some indented lines by +2 or -1 spaces (never below zero)."""
    jittered: list[str] = []
    for line in text.split("\n"):
        body = line.lstrip()
        leading = len(line) - len(body)
        if leading == 0 or not should_trigger(rng, indent_jitter_pct):
            jittered.append(line)
            continue
        variation = 2 if rng.random() > 0.5 else -1
        jittered.append(" " * max(0, leading + variation) + body)
    return "\n".join(jittered)


# =============================================================================
# Stage 7: operator spacing jitter
# =============================================================================


def _spacing_variants(op: str) -> tuple[str, ...]:
    return (f" {op} ", f"  {op}  ", op, f" {op}", f"{op} ")


def jitter_operator_spacing(
    text: str,
    *,
    rng: random_module.Random,
    operator_spacing_pct: float = 35.0,
) -> str:
    """Re-space every ``+-*/%=`` character, or leave the text alone."""
    if not should_trigger(rng, operator_spacing_pct):
        return text
    return _OPERATOR_PATTERN.sub(lambda m: rng.choice(_spacing_variants(m.group(0))), text)


# =============================================================================
# Stage 8: blank-line insertion
# =============================================================================


def insert_blank_lines(
    text: str,
    *,
    rng: random_module.Random,
    blank_lines_pct: float = 20.0,
    blank_line_insert_pct: float = 15.0,
) -> str:
    """Once enabled, follow some non-empty lines with an empty one."""
    if not should_trigger(rng, blank_lines_pct):
        return text
    spaced: list[str] = []
    for line in text.split("\n"):
        spaced.append(line)
        if line.strip() and should_trigger(rng, blank_line_insert_pct):
            spaced.append("")
    return "\n".join(spaced)


# =============================================================================
# Pipeline
# =============================================================================


@dataclass(frozen=True, slots=True)
class MutationStage:
    """A named stage with its probabilities already bound.

    ``apply(text, rng=rng)`` runs the stage.
    """

    name: str
    apply: Callable[..., str]


def build_stages(config: MutationConfig) -> tuple[MutationStage, ...]:
    """Bind configured probabilities to each enabled stage, in pipeline order."""
    bound: dict[str, Callable[..., str]] = {
        "fold_conditionals": partial(fold_conditionals, fold_pct=config.fold_pct),
        "corrupt_identifiers": partial(corrupt_identifiers, corrupt_pct=config.corrupt_pct),
        "inject_comments": partial(
            inject_comments,
            def_comment_pct=config.def_comment_pct,
            class_comment_pct=config.class_comment_pct,
        ),
        "unroll_range_loops": partial(unroll_range_loops, loop_pct=config.loop_pct),
        "flip_quotes": partial(flip_quotes, quote_flip_pct=config.quote_flip_pct),
        "jitter_indentation": partial(jitter_indentation, indent_jitter_pct=config.indent_jitter_pct),
        "jitter_operator_spacing": partial(
            jitter_operator_spacing,
            operator_spacing_pct=config.operator_spacing_pct,
        ),
        "insert_blank_lines": partial(
            insert_blank_lines,
            blank_lines_pct=config.blank_lines_pct,
            blank_line_insert_pct=config.blank_line_insert_pct,
        ),
    }
    disabled = set(config.disabled_stages)
    return tuple(MutationStage(name, bound[name]) for name in MUTATION_STAGES if name not in disabled)


class MutationPipeline:
    """Runs the enabled mutation stages in order over a text.

    Usage:
        pipeline = MutationPipeline(MutationConfig(), rng=random.Random(7))
        mutated = pipeline.mutate(source, profile)
    """

    def __init__(
        self,
        config: MutationConfig,
        *,
        rng: random_module.Random | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Stage probabilities and disabled stages.
            rng: Random instance for testing (default: creates new Random instance).
        """
        self._config = config
        self._rng = rng if rng is not None else random_module.Random()
        self._stages = build_stages(config)

    @property
    def stages(self) -> tuple[MutationStage, ...]:
        return self._stages

    def mutate(self, text: str, profile: MutationProfile | None) -> str:
        """Mutate text for a collapse. Without a profile nothing changes."""
        if profile is None:
            return text
        mutated = text
        for stage in self._stages:
            result = stage.apply(mutated, rng=self._rng)
            if result != mutated:
                logger.debug("Mutation stage changed text", stage=stage.name, profile=profile.name)
            mutated = result
        return mutated
