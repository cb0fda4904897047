"""
Retrospective setup matcher: what usually happened after a setup like today's?

Re-derives the contexts at every historical bar of a trailing window, keeps the
bars whose context tuple matches the target setup, and summarizes their forward
returns at 5, 10 and 20 bars.
"""
import logging
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..analysis.contexts import evaluate_stock_contexts
from ..analysis.snapshot import volume_ratio
from ..data.frames import ensure_frame
from ..indicators.technical import TechnicalIndicators, classify_volatility
from ..shared.defaults import (
    HORIZONS,
    MAX_HORIZON,
    MIN_RETROSPECTIVE_BARS,
    RETROSPECTIVE_LOOKBACK_DAYS,
    RETROSPECTIVE_PADDING_BARS,
)
from ..shared.types import (
    Bar,
    ContextSnapshot,
    HorizonStats,
    MacdStatus,
    RetrospectiveAnalysis,
    SetupDefinition,
)
from .hypothesis import pct_return

logger = logging.getLogger(__name__)


def snapshot_at(values: pd.DataFrame, i: int) -> ContextSnapshot:
    """
    Lightweight snapshot of bar `i` from a batch IndicatorSet.

    MACD status here is line vs signal (Bullish/Bearish), without crossover detection.
    """
    row = values.iloc[i]
    close = float(row["close"])
    ma20 = float(row["ma20"])
    return ContextSnapshot(
        close=close,
        ma20=ma20,
        ma50=float(row["ma50"]),
        is_above_ma20=close > ma20,
        rsi=float(row["rsi"]),
        macd_status=MacdStatus.BULLISH if row["macd_line"] > row["macd_signal"] else MacdStatus.BEARISH,
        histogram=float(row["macd_histogram"]),
        volume_ratio=volume_ratio(float(row["volume"]), float(row["volume_ma20"])),
        volatility_status=classify_volatility(float(row["atr"]), float(row["atr_avg20"])),
    )


def matches_setup(snapshot: ContextSnapshot, history: pd.DataFrame, setup: SetupDefinition) -> bool:
    """
    Side of MA20, trend, momentum and participation must equal the setup.

    Volatility is not part of the match.
    """
    if snapshot.is_above_ma20 != setup.is_above_ma20:
        return False
    contexts = evaluate_stock_contexts(snapshot, history)
    return (
        contexts.trend is setup.trend
        and contexts.momentum is setup.momentum
        and contexts.participation is setup.participation
    )


def horizon_stats(closes, occurrences: List[int], horizon: int) -> HorizonStats:
    """Forward-return distribution over `occurrences` at one horizon (percent returns)."""
    if not occurrences:
        return HorizonStats(horizon=horizon)

    returns = []
    higher = 0
    for idx in occurrences:
        entry, exit_price = closes[idx], closes[idx + horizon]
        returns.append(pct_return(entry, exit_price))
        if exit_price > entry:
            higher += 1

    returns.sort()
    return HorizonStats(
        horizon=horizon,
        higher_count=higher,
        total_occurrences=len(returns),
        median_return=returns[(len(returns) - 1) // 2],
        min_return=returns[0],
        max_return=returns[-1],
        positive_rate=higher / len(returns) * 100,
    )


def empty_analysis(setup: SetupDefinition) -> RetrospectiveAnalysis:
    return RetrospectiveAnalysis(
        setup=setup,
        total_occurrences=0,
        stats=[HorizonStats(horizon=h) for h in HORIZONS],
    )


def run_retrospective_analysis(
    bars: Union[pd.DataFrame, Sequence[Bar]],
    setup: SetupDefinition,
    lookback_days: int = RETROSPECTIVE_LOOKBACK_DAYS,
    indicators: Optional[TechnicalIndicators] = None,
) -> RetrospectiveAnalysis:
    """
    Find historical bars matching `setup` and summarize what followed.

    Indicators are computed once over the whole slice (lookback_days + 60 bars);
    candidates run from max(50, len - lookback_days) to len - 20 so every match
    has all horizons available.

    Args:
        bars: Full OHLCV history, ascending by date
        setup: Target context tuple (usually from the current analysis)
        lookback_days: Trailing bars to search (default: 250)

    Returns:
        RetrospectiveAnalysis; zero matches give zeroed stats for every horizon
    """
    df = ensure_frame(bars).iloc[-(lookback_days + RETROSPECTIVE_PADDING_BARS):]
    if len(df) < MIN_RETROSPECTIVE_BARS:
        logger.debug("Retrospective skipped: %d bars (need %d)", len(df), MIN_RETROSPECTIVE_BARS)
        return empty_analysis(setup)

    values = (indicators or TechnicalIndicators()).calculate_all(df)

    start = max(MIN_RETROSPECTIVE_BARS, len(df) - lookback_days)
    end = len(df) - MAX_HORIZON
    occurrences = [
        i for i in range(start, end)
        if matches_setup(snapshot_at(values, i), df.iloc[: i + 1], setup)
    ]
    logger.debug("Retrospective found %d matches in %d candidates", len(occurrences), max(0, end - start))

    closes = values["close"].to_numpy(dtype=float)
    return RetrospectiveAnalysis(
        setup=setup,
        total_occurrences=len(occurrences),
        stats=[horizon_stats(closes, occurrences, h) for h in HORIZONS],
    )
