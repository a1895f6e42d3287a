# src/raptor/execution/stub.py
"""Fake Python runner for the editor's Run button.

Nothing is ever evaluated. The stub waits a simulated latency, then echoes
the arguments of each ``print(...)`` call with quotes removed.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from raptor.execution.latency import LatencySimulator

OUTPUT_HEADER = ">>> Running Python code...\n\n"
OUTPUT_FOOTER = "\n[Process completed]"
NO_PRINT_MESSAGE = "Code executed successfully.\n"

_PRINT_PATTERN = re.compile(r"print\((.*?)\)")
_QUOTES_PATTERN = re.compile(r"['\"]")


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Simulated run output.

    Attributes:
        output: Console text shown to the user.
        delay_sec: Simulated execution time that was waited.
    """

    output: str
    delay_sec: float


def render_output(code: str) -> str:
    """Build the simulated console output for a piece of code."""
    output = OUTPUT_HEADER
    if "print" in code:
        for args in _PRINT_PATTERN.findall(code):
            output += _QUOTES_PATTERN.sub("", args) + "\n"
    else:
        output += NO_PRINT_MESSAGE
    return output + OUTPUT_FOOTER


class ExecutionStub:
    """Async facade over render_output with simulated latency."""

    def __init__(self, latency: LatencySimulator) -> None:
        self._latency = latency

    async def execute(self, code: str) -> ExecutionResult:
        delay = self._latency.simulate()
        if delay > 0:
            await asyncio.sleep(delay)
        return ExecutionResult(output=render_output(code), delay_sec=delay)
