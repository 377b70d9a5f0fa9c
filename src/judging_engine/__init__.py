"""Judging Engine.

Route judges through live demo tables, rank teams from pairwise votes with
Elo, or aggregate weighted criteria scores.
"""

__version__ = "0.1.0"

from judging_engine.engine import JudgingEngine  # noqa: E402

__all__ = [
    "JudgingEngine",
    "__version__",
]
