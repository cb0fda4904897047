#!/usr/bin/env python3
"""
Retrospective setup CLI.

Analyzes one symbol, takes its current context tuple as the setup, and reports
what happened 5/10/20 bars after similar historical setups.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from core.analysis.snapshot import build_analysis, fetch_history, setup_from_analysis
from core.backtest.retrospective import run_retrospective_analysis
from core.shared.errors import AnalysisError
from core.shared.defaults import RETROSPECTIVE_LOOKBACK_DAYS, RETROSPECTIVE_PADDING_BARS

from cli.common import make_fetcher, setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Find historical setups matching a symbol's current contexts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cli.retrospective BBCA.JK
  python -m cli.retrospective BBRI.JK --lookback 500 --json
        """,
    )
    parser.add_argument("symbol", type=str, help="Ticker symbol")
    parser.add_argument(
        "--lookback",
        type=int,
        default=RETROSPECTIVE_LOOKBACK_DAYS,
        help=f"Trading days to search (default: {RETROSPECTIVE_LOOKBACK_DAYS})",
    )
    parser.add_argument("--data-dir", type=str, help="Directory with {symbol}.csv files")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    fetcher = make_fetcher(Path(args.data_dir) if args.data_dir else None)
    try:
        history = fetch_history(args.symbol, fetcher, args.lookback + RETROSPECTIVE_PADDING_BARS)
        analysis = build_analysis(args.symbol, history)
    except AnalysisError as e:
        logger.error("%s", e)
        return 1

    setup = setup_from_analysis(analysis)
    result = run_retrospective_analysis(history, setup, args.lookback)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(
        f"{args.symbol}: trend {setup.trend.value}, momentum {setup.momentum.value}, "
        f"participation {setup.participation.value}, "
        f"{'above' if setup.is_above_ma20 else 'below'} MA20"
    )
    print(f"  Similar setups in last {args.lookback} days: {result.total_occurrences}")
    for s in result.stats:
        if s.total_occurrences == 0:
            print(f"  +{s.horizon}d: no occurrences")
            continue
        print(
            f"  +{s.horizon}d: higher {s.higher_count}/{s.total_occurrences} ({s.positive_rate:.0f}%), "
            f"median {s.median_return:+.2f}%, range [{s.min_return:+.2f}%, {s.max_return:+.2f}%]"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
