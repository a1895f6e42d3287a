"""Mocked code execution: pattern-matches print() calls, never runs code."""

from raptor.execution.latency import LatencySimulator
from raptor.execution.stub import ExecutionResult, ExecutionStub

__all__ = [
    "ExecutionResult",
    "ExecutionStub",
    "LatencySimulator",
]
