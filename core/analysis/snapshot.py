"""
Per-symbol snapshot analysis and the multi-symbol batch.

build_analysis() is pure: bars in, AnalysisResult out. analyze_stock() adds the
fetch and the per-symbol error boundary: any fetch failure or short history
becomes an error-flagged result instead of an exception, so one bad symbol
never aborts a batch.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..data.fetcher import MarketDataFetcher
from ..data.frames import ensure_frame, frame_to_bars
from ..indicators.technical import TechnicalIndicators, classify_volatility
from ..shared.defaults import (
    DEFAULT_FETCH_DAYS,
    MIN_ANALYSIS_BARS,
    RSI_OVERBOUGHT,
    RSI_OVERSOLD,
)
from ..shared.errors import AnalysisError, InsufficientDataError, UpstreamFetchError
from ..shared.types import (
    AnalysisResult,
    Bar,
    MacdStatus,
    RsiStatus,
    SetupDefinition,
)
from .contexts import calculate_alignment, evaluate_stock_contexts
from .insights import generate_insights

logger = logging.getLogger(__name__)


def classify_rsi(value: float) -> RsiStatus:
    if value > RSI_OVERBOUGHT:
        return RsiStatus.OVERBOUGHT
    if value < RSI_OVERSOLD:
        return RsiStatus.OVERSOLD
    return RsiStatus.NEUTRAL


def classify_macd(prev_histogram: float, histogram: float) -> MacdStatus:
    """Crossover when the histogram changes sign between the last two bars."""
    if prev_histogram <= 0 and histogram > 0:
        return MacdStatus.BULLISH_CROSSOVER
    if prev_histogram >= 0 and histogram < 0:
        return MacdStatus.BEARISH_CROSSOVER
    if histogram > 0:
        return MacdStatus.BULLISH
    return MacdStatus.BEARISH


def volume_ratio(volume: float, volume_ma: float) -> float:
    """Volume relative to its moving average; 1.0 when the average is zero."""
    if volume_ma <= 0:
        return 1.0
    return volume / volume_ma


def build_analysis(
    symbol: str,
    bars: Union[pd.DataFrame, Sequence[Bar]],
    indicators: Optional[TechnicalIndicators] = None,
) -> AnalysisResult:
    """
    Analyze the latest bar of a series.

    Args:
        symbol: Ticker symbol
        bars: OHLCV history, ascending by date
        indicators: Indicator calculator (default periods if None)

    Returns:
        AnalysisResult with contexts, alignment and insights

    Raises:
        InsufficientDataError: If fewer than MIN_ANALYSIS_BARS bars are given
    """
    df = ensure_frame(bars)
    if len(df) < MIN_ANALYSIS_BARS:
        raise InsufficientDataError(symbol, len(df), MIN_ANALYSIS_BARS)

    ind = indicators or TechnicalIndicators()
    values = ind.calculate_all(df)
    latest = values.iloc[-1]
    prev_histogram = float(values["macd_histogram"].iloc[-2])

    close = float(latest["close"])
    ma20 = float(latest["ma20"])
    rsi = float(latest["rsi"])
    histogram = float(latest["macd_histogram"])
    volume = float(latest["volume"])
    volume_ma20 = float(latest["volume_ma20"])
    atr = float(latest["atr"])

    result = AnalysisResult(
        symbol=symbol,
        close=close,
        ma20=ma20,
        ma50=float(latest["ma50"]) if len(df) >= ind.ma_long_period else None,
        is_above_ma20=close > ma20,
        rsi=rsi,
        rsi_status=classify_rsi(rsi),
        macd=float(latest["macd_line"]),
        signal=float(latest["macd_signal"]),
        histogram=histogram,
        macd_status=classify_macd(prev_histogram, histogram),
        volume=volume,
        volume_ma20=volume_ma20,
        volume_ratio=volume_ratio(volume, volume_ma20),
        atr=atr,
        atr_relative=(atr / close * 100) if close else 0.0,
        volatility_status=classify_volatility(atr, float(latest["atr_avg20"])),
        history=frame_to_bars(df),
    )
    result.contexts = evaluate_stock_contexts(result, df)
    result.alignment, result.alignment_reason = calculate_alignment(result.contexts)
    result.insights = generate_insights(result)
    return result


def fetch_history(symbol: str, fetcher: MarketDataFetcher, days: int) -> pd.DataFrame:
    """Fetch history, converting any provider failure or empty result into UpstreamFetchError."""
    try:
        history = fetcher.fetch(symbol, days)
    except UpstreamFetchError:
        raise
    except Exception as e:
        raise UpstreamFetchError(symbol, cause=e) from e
    if history is None or len(history) == 0:
        raise UpstreamFetchError(symbol, message=f"No data returned for {symbol}")
    return ensure_frame(history)


def analyze_stock(
    symbol: str,
    fetcher: MarketDataFetcher,
    days: int = DEFAULT_FETCH_DAYS,
) -> AnalysisResult:
    """
    Fetch and analyze one symbol.

    Never raises for data problems: fetch failures and short histories produce
    AnalysisResult.failed() with the error message.
    """
    try:
        history = fetch_history(symbol, fetcher, days)
        return build_analysis(symbol, history)
    except (AnalysisError, ValueError) as e:
        logger.warning("Analysis failed for %s: %s", symbol, e)
        return AnalysisResult.failed(symbol, str(e))


def analyze_symbols(
    symbols: Sequence[str],
    fetcher: MarketDataFetcher,
    days: int = DEFAULT_FETCH_DAYS,
    max_workers: Optional[int] = None,
) -> List[AnalysisResult]:
    """
    Analyze several symbols independently, in parallel when max_workers > 1.

    Results keep the order of `symbols`; failed symbols carry their own error.
    """
    workers = max(1, max_workers) if max_workers is not None else min(8, max(1, len(symbols)))
    logger.info("Analyzing %d symbols with %d workers", len(symbols), workers)

    if workers <= 1:
        results = [analyze_stock(s, fetcher, days) for s in symbols]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(lambda s: analyze_stock(s, fetcher, days), symbols))

    failed = [r.symbol for r in results if not r.ok]
    if failed:
        logger.warning("%d/%d symbols failed: %s", len(failed), len(results), ", ".join(failed))
    return results


def setup_from_analysis(result: AnalysisResult) -> SetupDefinition:
    """
    Current context tuple of an analysis, for the retrospective matcher.

    Raises:
        ValueError: If the analysis failed or has no contexts
    """
    if result.error is not None or result.contexts is None:
        raise ValueError(f"No contexts available for {result.symbol}: {result.error or 'not evaluated'}")
    c = result.contexts
    return SetupDefinition(
        trend=c.trend,
        momentum=c.momentum,
        participation=c.participation,
        volatility=c.volatility,
        is_above_ma20=result.is_above_ma20,
    )
