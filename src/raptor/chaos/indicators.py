# src/raptor/chaos/indicators.py
"""Derived indicators shown next to the editor.

Pure functions of the session fields: stability warning banners, the
stability bar colour, and a keyword heuristic for the buffer's language.
"""

from __future__ import annotations

import re

STABILITY_GREEN = "#00ff00"
STABILITY_YELLOW = "#ffff00"
STABILITY_ORANGE = "#ff9900"
STABILITY_RED = "#ff0000"

_PYTHON_PATTERN = re.compile(r"\b(def|import|from|class|print|if __name__|lambda)\b")
_JAVA_PATTERN = re.compile(r"\b(public|private|static|void|class|extends|implements|package)\b")
_CPP_PATTERN = re.compile(r"#include|std::|cout|cin|namespace|template")


def stability_warnings(stability: float) -> tuple[str, ...]:
    """Warning banners for a stability value, most severe band first."""
    if stability < 10:
        return ("CATASTROPHIC FAILURE", "POINT OF NO RETURN")
    if stability < 20:
        return ("IMMINENT COLLAPSE", "SYSTEM UNSTABLE")
    if stability < 30:
        return ("CRITICAL STRESS",)
    if stability < 50:
        return ("HIGH STRESS DETECTED",)
    return ()


def stability_color(stability: float) -> str:
    if stability > 70:
        return STABILITY_GREEN
    if stability > 40:
        return STABILITY_YELLOW
    if stability > 20:
        return STABILITY_ORANGE
    return STABILITY_RED


def detect_language(text: str, current: str) -> str:
    """Guess the buffer's language from keywords, keeping current when unsure.

    Python is checked first, so text with a ``class`` keyword and no
    stronger signal reads as Python.
    """
    if not text:
        return current
    if _PYTHON_PATTERN.search(text):
        return "python"
    if _JAVA_PATTERN.search(text):
        return "java"
    if _CPP_PATTERN.search(text):
        return "cpp"
    return current
