# tests/property/__init__.py
"""Property-based tests for Raptor.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- chaos/: stress bounds, stability complement, history capacity,
  mutation totality, collapse timelines
"""
