"""
Backtests over a single symbol's history: signal hypotheses and setup retrospectives.
"""
from .hypothesis import SIGNAL_RULES, resolve_condition, run_hypothesis_test
from .retrospective import run_retrospective_analysis

__all__ = [
    "SIGNAL_RULES",
    "resolve_condition",
    "run_hypothesis_test",
    "run_retrospective_analysis",
]
