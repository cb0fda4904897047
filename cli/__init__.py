"""
Command-line entry points.

Provides command-line interfaces for:
- Multi-symbol context report
- Signal hypothesis backtest for one symbol
- Retrospective setup matching for one symbol
"""
