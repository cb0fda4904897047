#!/usr/bin/env python3
"""
Hypothesis backtest CLI.

Fetches one symbol's history and reports how often a signal condition was
followed by a positive 20-day return, by delegating to
`core.backtest.hypothesis.run_hypothesis_test`.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from core.analysis.snapshot import fetch_history
from core.backtest.hypothesis import run_hypothesis_test
from core.shared.errors import AnalysisError
from core.shared.defaults import HYPOTHESIS_WINDOWS, HYPOTHESIS_WARMUP_BARS
from core.shared.types import HypothesisCondition

from cli.common import make_fetcher, setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Backtest a signal condition on one symbol's daily history.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # MACD crossovers over the last 250 trading days
  python -m cli.hypothesis BBCA.JK --condition "MACD Bullish Crossover"

  # RSI dips over two years, JSON output
  python -m cli.hypothesis TLKM.JK --condition "RSI < 30" --window 500 --json
        """,
    )

    parser.add_argument("symbol", type=str, help="Ticker symbol")
    parser.add_argument(
        "--condition",
        type=str,
        default=HypothesisCondition.PRICE_ABOVE_MA20.value,
        choices=[c.value for c in HypothesisCondition],
        help="Signal condition (default: 'Price > MA-20')",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=250,
        choices=list(HYPOTHESIS_WINDOWS),
        help="Trading days to test (default: 250)",
    )
    parser.add_argument("--data-dir", type=str, help="Directory with {symbol}.csv files")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    fetcher = make_fetcher(Path(args.data_dir) if args.data_dir else None)
    try:
        history = fetch_history(args.symbol, fetcher, args.window + HYPOTHESIS_WARMUP_BARS)
    except AnalysisError as e:
        logger.error("%s", e)
        return 1

    result = run_hypothesis_test(history, args.condition, args.window)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"{args.symbol}: '{args.condition}' over {args.window} trading days")
    print(f"  Signals:       {result.total_signals}")
    print(f"  Positive 20d:  {result.positive_outcomes} ({result.success_rate:.1f}%)")
    print(f"  Negative 20d:  {result.negative_outcomes}")
    print(f"  Avg 20d return: {result.average_return:+.2f}%")
    if result.details:
        print(f"  {'Date':<12} {'5d':>8} {'10d':>8} {'20d':>8}")
        for d in result.details:
            print(
                f"  {d.date.isoformat():<12} {d.return_day5:>+7.2f}% "
                f"{d.return_day10:>+7.2f}% {d.return_day20:>+7.2f}%"
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
