"""
Hypothesis tester: how did price behave after a signal fired in the past?

Scans a trailing window of bars for one signal definition and records the
forward returns 5, 10 and 20 bars after every trigger. Signal rules are plain
functions over precomputed indicator arrays; new conditions can be added to
SIGNAL_RULES without changing the scan.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..data.frames import ensure_frame
from ..indicators.technical import TechnicalIndicators
from ..shared.defaults import (
    HORIZONS,
    HYPOTHESIS_DEFAULT_WINDOW,
    HYPOTHESIS_DETAIL_LIMIT,
    HYPOTHESIS_WARMUP_BARS,
    HYPOTHESIS_WINDOWS,
    MAX_HORIZON,
    RSI_OVERSOLD,
    VOLATILITY_WINDOW,
)
from ..shared.types import Bar, HypothesisCondition, HypothesisDetail, HypothesisResult


@dataclass
class SignalInputs:
    """Indicator arrays for one hypothesis run, positionally aligned with the bars."""
    closes: np.ndarray
    volumes: np.ndarray
    ma20: np.ndarray
    volume_ma: np.ndarray
    rsi: np.ndarray
    histogram: np.ndarray
    atr: np.ndarray
    ma_ready: int  # First index with a real MA20 value

    def above_ma20(self, i: int) -> bool:
        # A placeholder MA counts as "not above"
        return i >= self.ma_ready and self.closes[i] > self.ma20[i]


SignalRule = Callable[[SignalInputs, int], bool]


def price_crosses_above_ma20(inp: SignalInputs, i: int) -> bool:
    return inp.above_ma20(i) and not inp.above_ma20(i - 1)


def price_crosses_above_ma20_high_volume(inp: SignalInputs, i: int) -> bool:
    return price_crosses_above_ma20(inp, i) and inp.volumes[i] > inp.volume_ma[i]


def macd_bullish_crossover(inp: SignalInputs, i: int) -> bool:
    return inp.histogram[i] > 0 and inp.histogram[i - 1] <= 0


def rsi_crosses_below_oversold(inp: SignalInputs, i: int) -> bool:
    return inp.rsi[i] < RSI_OVERSOLD and inp.rsi[i - 1] >= RSI_OVERSOLD


def atr_crosses_below_average(inp: SignalInputs, i: int) -> bool:
    """ATR drops below the mean of the 20 ATR values strictly before i."""
    if i < VOLATILITY_WINDOW:
        return False
    atr_ma = float(np.mean(inp.atr[i - VOLATILITY_WINDOW:i]))
    return inp.atr[i] < atr_ma and inp.atr[i - 1] >= atr_ma


SIGNAL_RULES: Dict[HypothesisCondition, SignalRule] = {
    HypothesisCondition.PRICE_ABOVE_MA20: price_crosses_above_ma20,
    HypothesisCondition.PRICE_ABOVE_MA20_HIGH_VOLUME: price_crosses_above_ma20_high_volume,
    HypothesisCondition.MACD_BULLISH_CROSSOVER: macd_bullish_crossover,
    HypothesisCondition.RSI_BELOW_30: rsi_crosses_below_oversold,
    HypothesisCondition.VOLATILITY_LOW_ATR: atr_crosses_below_average,
}


def resolve_condition(condition: Union[HypothesisCondition, str]) -> HypothesisCondition:
    """Accept the enum or its display name (e.g. 'RSI < 30')."""
    if isinstance(condition, HypothesisCondition):
        return condition
    try:
        return HypothesisCondition(condition)
    except ValueError:
        valid = [c.value for c in HypothesisCondition]
        raise ValueError(f"Unknown condition '{condition}'. Available: {valid}") from None


def pct_return(entry: float, exit_price: float) -> float:
    if entry == 0:
        return 0.0
    return float((exit_price - entry) / entry * 100)


def build_signal_inputs(df: pd.DataFrame, indicators: TechnicalIndicators) -> SignalInputs:
    closes = df["Close"].to_numpy(dtype=float)
    volumes = df["Volume"].to_numpy(dtype=float)
    _, _, histogram = indicators.calculate_macd(closes)
    return SignalInputs(
        closes=closes,
        volumes=volumes,
        ma20=indicators.calculate_ma(closes, indicators.ma_period).to_numpy(),
        volume_ma=indicators.calculate_ma(volumes, indicators.volume_ma_period).to_numpy(),
        rsi=indicators.calculate_rsi(closes).to_numpy(),
        histogram=histogram.to_numpy(),
        atr=indicators.calculate_atr(df).to_numpy(),
        ma_ready=indicators.ma_period - 1,
    )


def summarize_details(details: List[HypothesisDetail]) -> HypothesisResult:
    """Aggregate occurrences on their 20-day return; zero occurrences give all-zero stats."""
    total = len(details)
    if total == 0:
        return HypothesisResult()
    positive = sum(1 for d in details if d.return_day20 > 0)
    return HypothesisResult(
        total_signals=total,
        positive_outcomes=positive,
        negative_outcomes=total - positive,
        average_return=sum(d.return_day20 for d in details) / total,
        success_rate=positive / total * 100,
        details=details[-HYPOTHESIS_DETAIL_LIMIT:],
    )


def run_hypothesis_test(
    bars: Union[pd.DataFrame, Sequence[Bar]],
    condition: Union[HypothesisCondition, str],
    window_days: int = HYPOTHESIS_DEFAULT_WINDOW,
    indicators: Optional[TechnicalIndicators] = None,
) -> HypothesisResult:
    """
    Backtest one signal condition over the trailing `window_days` bars.

    The series is cut to window_days + 30 bars (30 bars of indicator warm-up).
    The scan covers the window itself, never starts before the first real MA20
    value, and stops 20 bars before the end so every trigger has all horizons.
    A history shorter than window_days + 30 bars starts the scan at the first
    real MA20 value (index 19) rather than at index 30.

    Args:
        bars: Full OHLCV history, ascending by date
        condition: HypothesisCondition or its name
        window_days: One of 125, 250, 500

    Returns:
        HypothesisResult (zero signals is a valid result)

    Raises:
        ValueError: On an unknown condition or window
    """
    rule = SIGNAL_RULES[resolve_condition(condition)]
    if window_days not in HYPOTHESIS_WINDOWS:
        raise ValueError(f"Unsupported window {window_days}. Available: {list(HYPOTHESIS_WINDOWS)}")

    df = ensure_frame(bars).iloc[-(window_days + HYPOTHESIS_WARMUP_BARS):]
    inputs = build_signal_inputs(df, indicators or TechnicalIndicators())

    start = max(1, inputs.ma_ready, len(df) - window_days)
    end = len(df) - MAX_HORIZON
    closes = inputs.closes
    details: List[HypothesisDetail] = []
    for i in range(start, end):
        if not rule(inputs, i):
            continue
        day5, day10, day20 = (pct_return(closes[i], closes[i + h]) for h in HORIZONS)
        details.append(HypothesisDetail(
            date=pd.Timestamp(df.index[i]).date(),
            return_day5=day5,
            return_day10=day10,
            return_day20=day20,
        ))

    return summarize_details(details)
