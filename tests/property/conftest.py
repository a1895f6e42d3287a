# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Source text (code-like lines plus arbitrary unicode)
- Percentages (0-100, including the boundaries)
- Seeds for the injected random source

Usage:
    from tests.property.conftest import source_text, percentages

    @given(text=source_text, pct=percentages)
    def test_stage_is_total(text: str, pct: float) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

# =============================================================================
# Source Text
# =============================================================================

# Lines that exercise every mutation stage's pattern
code_lines = st.sampled_from(
    [
        "def compute(value):",
        "class Widget:",
        "    return value * 2",
        "for i in range(10):",
        "    total += i",
        "if x > 0:",
        "    y = 1",
        "else:",
        "    y = 2",
        "name = 'chaos'",
        "print('hello', name)",
        "    ",
        "",
        "a = b + c - d / e % f",
    ]
)

code_text = st.lists(code_lines, max_size=30).map("\n".join)

# Arbitrary text, including control characters and non-ASCII
any_text = st.text(max_size=500)

source_text = st.one_of(code_text, any_text)

# =============================================================================
# Numeric Strategies
# =============================================================================

percentages = st.one_of(
    st.sampled_from([0.0, 100.0]),
    st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
)

seeds = st.integers(min_value=0, max_value=2**32 - 1)
