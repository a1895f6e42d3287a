# tests/unit/execution/test_stub.py
"""Tests for the simulated execution stub and its latency."""

from __future__ import annotations

import asyncio
import random

import pytest

from raptor.chaos.config import LatencyConfig
from raptor.execution.latency import LatencySimulator
from raptor.execution.stub import (
    NO_PRINT_MESSAGE,
    OUTPUT_FOOTER,
    OUTPUT_HEADER,
    ExecutionStub,
    render_output,
)


class TestRenderOutput:
    """Console text built from print(...) calls, never by running code."""

    def test_print_arguments_echoed_without_quotes(self) -> None:
        output = render_output("print('hello')\nx = 1\nprint(\"world\", x)")
        assert output == OUTPUT_HEADER + "hello\nworld, x\n" + OUTPUT_FOOTER

    def test_no_print(self) -> None:
        assert render_output("x = 1") == OUTPUT_HEADER + NO_PRINT_MESSAGE + OUTPUT_FOOTER

    def test_print_word_without_call(self) -> None:
        # Mentions print but has no call: nothing echoed, no success message
        assert render_output("# print later") == OUTPUT_HEADER + OUTPUT_FOOTER

    def test_code_is_not_evaluated(self) -> None:
        output = render_output("raise SystemExit(1)")
        assert output.endswith("[Process completed]")

    def test_exact_frame(self) -> None:
        assert OUTPUT_HEADER == ">>> Running Python code...\n\n"
        assert OUTPUT_FOOTER == "\n[Process completed]"


class TestLatencySimulator:
    def test_base_only(self) -> None:
        simulator = LatencySimulator(LatencyConfig(base_ms=500, jitter_ms=0), rng=random.Random(1))
        assert simulator.simulate() == pytest.approx(0.5)

    def test_jitter_within_bounds(self) -> None:
        simulator = LatencySimulator(LatencyConfig(base_ms=100, jitter_ms=50), rng=random.Random(1))
        for _ in range(100):
            assert 0.05 <= simulator.simulate() <= 0.15

    def test_never_negative(self) -> None:
        simulator = LatencySimulator(LatencyConfig(base_ms=0, jitter_ms=100), rng=random.Random(1))
        for _ in range(100):
            assert simulator.simulate() >= 0.0


class TestExecutionStub:
    def test_execute_returns_output_and_delay(self) -> None:
        stub = ExecutionStub(LatencySimulator(LatencyConfig(base_ms=0, jitter_ms=0)))
        result = asyncio.run(stub.execute("print('hi')"))
        assert result.output == OUTPUT_HEADER + "hi\n" + OUTPUT_FOOTER
        assert result.delay_sec == 0.0

    def test_execute_waits_latency(self) -> None:
        stub = ExecutionStub(LatencySimulator(LatencyConfig(base_ms=10, jitter_ms=0)))
        result = asyncio.run(stub.execute("x = 1"))
        assert result.delay_sec == pytest.approx(0.01)
