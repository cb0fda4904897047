#!/usr/bin/env python3
"""
Multi-symbol context report CLI.

Analyzes every configured symbol (in parallel), then runs the configured
hypothesis test and the retrospective setup matcher on each successful symbol.
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from core.analysis.snapshot import analyze_symbols, setup_from_analysis
from core.backtest.hypothesis import run_hypothesis_test
from core.backtest.retrospective import run_retrospective_analysis
from core.config import ReportConfig, load_report_config
from core.shared.types import AnalysisResult, HypothesisResult, RetrospectiveAnalysis

from cli.common import make_fetcher, setup_logging

logger = logging.getLogger(__name__)


def build_symbol_report(result: AnalysisResult, cfg: ReportConfig) -> Dict[str, Any]:
    """Analysis plus hypothesis and retrospective summaries for one symbol."""
    entry: Dict[str, Any] = {"analysis": result.to_dict(), "hypothesis": None, "retrospective": None}
    if not result.ok:
        return entry
    entry["hypothesis"] = run_hypothesis_test(
        result.history, cfg.hypothesis_condition, cfg.hypothesis_window
    ).to_dict()
    entry["retrospective"] = run_retrospective_analysis(
        result.history, setup_from_analysis(result), cfg.retrospective_lookback
    ).to_dict()
    return entry


def format_symbol_report(entry: Dict[str, Any], cfg: ReportConfig) -> List[str]:
    """Plain-text lines for one symbol."""
    a = AnalysisResult.from_dict(entry["analysis"])
    lines = [f"{a.symbol}"]
    if not a.ok:
        lines.append(f"  ERROR: {a.error}")
        return lines

    c = a.contexts
    ma50 = f"{a.ma50:.2f}" if a.ma50 is not None else "-"
    lines.append(
        f"  Close {a.close:.2f} | MA20 {a.ma20:.2f} | MA50 {ma50} | "
        f"RSI {a.rsi:.1f} ({a.rsi_status.value}) | MACD {a.macd_status.value} | "
        f"Vol {a.volume_ratio:.2f}x | ATR {a.atr_relative:.2f}% ({a.volatility_status.value})"
    )
    lines.append(
        f"  Trend {c.trend.value} ({c.trend_longevity}d) | Momentum {c.momentum.value} | "
        f"Participation {c.participation.value} | Volatility {c.volatility.value}"
    )
    lines.append(f"  Alignment {a.alignment.value}: {a.alignment_reason}")
    for insight in a.insights:
        lines.append(f"    - {insight}")

    h = HypothesisResult.from_dict(entry["hypothesis"])
    lines.append(
        f"  Hypothesis '{cfg.hypothesis_condition.value}' ({cfg.hypothesis_window}d): "
        f"{h.total_signals} signals, {h.success_rate:.1f}% positive, avg 20d {h.average_return:+.2f}%"
    )
    r = RetrospectiveAnalysis.from_dict(entry["retrospective"])
    lines.append(f"  Retrospective: {r.total_occurrences} similar setups")
    for s in r.stats:
        if s.total_occurrences:
            lines.append(
                f"    +{s.horizon}d: median {s.median_return:+.2f}% "
                f"[{s.min_return:+.2f}%, {s.max_return:+.2f}%], higher {s.positive_rate:.0f}%"
            )
    return lines


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Technical context report for a basket of symbols.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report for the configured watchlist
  python -m cli.report

  # Override symbols, JSON output
  python -m cli.report --symbols BBCA.JK TLKM.JK --json

  # Read cached CSVs instead of Yahoo Finance
  python -m cli.report --data-dir data/tickers
        """,
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="configs/report.yaml",
        help="Report YAML config (default: configs/report.yaml)",
    )
    parser.add_argument("--symbols", nargs="+", help="Symbols to analyze (overrides config)")
    parser.add_argument("--data-dir", type=str, help="Directory with {symbol}.csv files")
    parser.add_argument("--workers", type=int, help="Parallel workers (overrides config)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--output", "-o", type=str, help="Write the report to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=str, help="Also log to this file")

    args = parser.parse_args()
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        cfg = load_report_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        if not args.symbols:
            logger.error("%s", e)
            return 1
        cfg = ReportConfig()
    if args.symbols:
        cfg.symbols = args.symbols
    if args.data_dir:
        cfg.data_dir = Path(args.data_dir)
    if args.workers:
        cfg.workers = args.workers

    fetcher = make_fetcher(cfg.data_dir)
    results = analyze_symbols(cfg.symbols, fetcher, days=cfg.fetch_days, max_workers=cfg.workers)
    entries = [build_symbol_report(r, cfg) for r in results]

    if args.json:
        text = json.dumps(
            {"timestamp": datetime.now().isoformat(), "data": entries},
            indent=2,
        )
    else:
        lines = ["=" * 80, f"Context report: {cfg.name} ({len(entries)} symbols)", "=" * 80]
        for entry in entries:
            lines.extend(format_symbol_report(entry, cfg))
            lines.append("")
        text = "\n".join(lines)

    if args.output:
        Path(args.output).write_text(text)
        logger.info("Report written to %s", args.output)
    else:
        print(text)

    return 0 if any(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
