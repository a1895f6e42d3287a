"""
Raptor: an editor whose code collapses under its own entropy.

Typing builds stress; when stress hits the ceiling the session collapses,
the theme mutates and the source text is rewritten by a lossy pipeline.
"""

__version__ = "0.1.0"
