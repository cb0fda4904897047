"""
Technical indicators for context classification and signal backtests.

Provides MA, EMA, RSI, MACD and ATR over a price/volume series or an OHLCV
DataFrame. Every calculation returns a Series with the same length and index
as its input. Positions before an indicator's warm-up hold a placeholder
(MA = 0, RSI = 50) instead of NaN, so positional indexing never fails; callers
must not read placeholders as signals.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..data.frames import ensure_frame
from ..shared.defaults import (
    MA_PERIOD, MA_LONG_PERIOD, VOLUME_MA_PERIOD,
    RSI_PERIOD, RSI_NEUTRAL,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    ATR_PERIOD, VOLATILITY_WINDOW,
    VOLATILITY_HIGH_FACTOR, VOLATILITY_LOW_FACTOR,
)
from ..shared.types import Bar, VolatilityStatus

Values = Union[pd.Series, np.ndarray, Sequence[float]]
Bars = Union[pd.DataFrame, Sequence[Bar]]


@dataclass
class WilderAverage:
    """
    Running Wilder average: seeded with a simple mean, then
    avg = (avg * (period - 1) + x) / period for every new value.
    """
    period: int
    value: float = 0.0

    def seed(self, values: Iterable[float]) -> float:
        values = list(values)
        self.value = float(sum(values)) / len(values) if values else 0.0
        return self.value

    def update(self, x: float) -> float:
        self.value = (self.value * (self.period - 1) + x) / self.period
        return self.value


def _as_series(values: Values) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    # RS is capped at 100 when there are no losses to keep RSI finite
    rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def classify_volatility(
    atr: float,
    atr_average: float,
    high_factor: float = VOLATILITY_HIGH_FACTOR,
    low_factor: float = VOLATILITY_LOW_FACTOR,
) -> VolatilityStatus:
    """High if ATR > 1.2x its trailing average, Low if < 0.8x, else Normal."""
    if atr > atr_average * high_factor:
        return VolatilityStatus.HIGH
    if atr < atr_average * low_factor:
        return VolatilityStatus.LOW
    return VolatilityStatus.NORMAL


class TechnicalIndicators:
    """Calculates technical indicators from price data."""

    def __init__(
        self,
        ma_period: int = MA_PERIOD,
        ma_long_period: int = MA_LONG_PERIOD,
        volume_ma_period: int = VOLUME_MA_PERIOD,
        rsi_period: int = RSI_PERIOD,
        macd_fast: int = MACD_FAST,
        macd_slow: int = MACD_SLOW,
        macd_signal: int = MACD_SIGNAL,
        atr_period: int = ATR_PERIOD,
        volatility_window: int = VOLATILITY_WINDOW,
    ):
        """
        Initialize indicator calculator.

        Args:
            ma_period: Short simple moving average period (default: MA_PERIOD)
            ma_long_period: Long simple moving average period (default: MA_LONG_PERIOD)
            volume_ma_period: Volume moving average period (default: VOLUME_MA_PERIOD)
            rsi_period: Period for RSI calculation (default: RSI_PERIOD)
            macd_fast: MACD fast period (default: MACD_FAST)
            macd_slow: MACD slow period (default: MACD_SLOW)
            macd_signal: MACD signal period (default: MACD_SIGNAL)
            atr_period: ATR period (default: ATR_PERIOD)
            volatility_window: Trailing ATR window for the volatility status (default: VOLATILITY_WINDOW)
        """
        self.ma_period = ma_period
        self.ma_long_period = ma_long_period
        self.volume_ma_period = volume_ma_period
        self.rsi_period = rsi_period
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.atr_period = atr_period
        self.volatility_window = volatility_window

    def calculate_ma(self, values: Values, period: int) -> pd.Series:
        """Simple moving average of the trailing `period` values; 0 until `period` values exist."""
        s = _as_series(values)
        return s.rolling(period, min_periods=period).mean().fillna(0.0)

    def calculate_ema(self, values: Values, period: int) -> pd.Series:
        """
        Exponential Moving Average seeded with the first value.

        ema[i] = x[i] * k + ema[i-1] * (1 - k), k = 2 / (period + 1).
        Early values carry the seed bias and are not period-length averages.
        """
        s = _as_series(values)
        return s.ewm(span=period, adjust=False).mean()

    def calculate_rsi(self, prices: Values, period: Optional[int] = None) -> pd.Series:
        """
        Calculate Wilder's Relative Strength Index (RSI).

        RSI = 100 - (100 / (1 + RS))
        RS = Average Gain / Average Loss

        The first average is the simple mean of the first `period` gains/losses;
        later averages use Wilder smoothing. The first `period` positions hold 50.
        """
        period = period or self.rsi_period
        s = _as_series(prices)
        values = s.to_numpy(dtype=float)
        out = np.full(len(values), RSI_NEUTRAL)
        if len(values) <= period:
            return pd.Series(out, index=s.index)

        deltas = np.diff(values)
        gains = np.maximum(deltas, 0.0)
        losses = np.maximum(-deltas, 0.0)

        avg_gain = WilderAverage(period)
        avg_loss = WilderAverage(period)
        out[period] = _rsi_from_averages(
            avg_gain.seed(gains[:period]), avg_loss.seed(losses[:period])
        )
        for i in range(period, len(deltas)):
            out[i + 1] = _rsi_from_averages(
                avg_gain.update(gains[i]), avg_loss.update(losses[i])
            )
        return pd.Series(out, index=s.index)

    def calculate_macd(
        self,
        prices: Values,
        fast: Optional[int] = None,
        slow: Optional[int] = None,
        signal: Optional[int] = None,
    ) -> Tuple[pd.Series, pd.Series, pd.Series]:
        """
        Calculate MACD (Moving Average Convergence Divergence).

        Returns:
            Tuple of (MACD line, Signal line, Histogram)
        """
        s = _as_series(prices)
        ema_fast = self.calculate_ema(s, fast or self.macd_fast)
        ema_slow = self.calculate_ema(s, slow or self.macd_slow)

        macd_line = ema_fast - ema_slow
        signal_line = self.calculate_ema(macd_line, signal or self.macd_signal)
        histogram = macd_line - signal_line

        return macd_line, signal_line, histogram

    def calculate_true_range(self, bars: Bars) -> pd.Series:
        """True range per bar; bar 0 has no previous close and uses high - low."""
        df = ensure_frame(bars)
        high = df["High"].to_numpy(dtype=float)
        low = df["Low"].to_numpy(dtype=float)
        close = df["Close"].to_numpy(dtype=float)
        tr = high - low
        if len(tr) > 1:
            prev_close = close[:-1]
            tr[1:] = np.maximum.reduce([
                high[1:] - low[1:],
                np.abs(high[1:] - prev_close),
                np.abs(low[1:] - prev_close),
            ])
        return pd.Series(tr, index=df.index)

    def calculate_atr(self, bars: Bars, period: Optional[int] = None) -> pd.Series:
        """
        Calculate ATR (Average True Range) with Wilder smoothing.

        The seed (mean of the first `period` true ranges) is back-filled into
        positions 0..period-1, so those positions are all equal.
        """
        period = period or self.atr_period
        tr = self.calculate_true_range(bars)
        values = tr.to_numpy(dtype=float)
        out = np.zeros(len(values))
        if len(values) == 0:
            return pd.Series(out, index=tr.index)

        seed_count = min(period, len(values))
        avg = WilderAverage(period)
        out[:seed_count] = avg.seed(values[:seed_count])
        for i in range(period, len(values)):
            out[i] = avg.update(values[i])
        return pd.Series(out, index=tr.index)

    def calculate_atr_average(self, atr: pd.Series, window: Optional[int] = None) -> pd.Series:
        """Trailing mean of ATR over `window` bars ending at each bar (fewer at the start)."""
        window = window or self.volatility_window
        return atr.rolling(window, min_periods=1).mean()

    def calculate_volatility_status(self, atr: pd.Series, window: Optional[int] = None) -> pd.Series:
        """Per-bar VolatilityStatus of ATR against its own trailing average."""
        atr_avg = self.calculate_atr_average(atr, window)
        statuses = [classify_volatility(a, m) for a, m in zip(atr.to_numpy(), atr_avg.to_numpy())]
        return pd.Series(statuses, index=atr.index, dtype=object)

    def calculate_all(self, bars: Bars) -> pd.DataFrame:
        """
        Calculate all indicators and return as DataFrame (IndicatorSet).

        Args:
            bars: OHLCV DataFrame or sequence of Bar

        Returns:
            DataFrame index-aligned with the input, one column per indicator
        """
        data = ensure_frame(bars)
        close = data["Close"].astype(float)
        volume = data["Volume"].astype(float)

        df = pd.DataFrame(index=data.index)
        df["close"] = close
        df["volume"] = volume
        df["ma20"] = self.calculate_ma(close, self.ma_period)
        df["ma50"] = self.calculate_ma(close, self.ma_long_period)
        df["rsi"] = self.calculate_rsi(close)
        macd_line, signal_line, histogram = self.calculate_macd(close)
        df["macd_line"] = macd_line
        df["macd_signal"] = signal_line
        df["macd_histogram"] = histogram
        atr = self.calculate_atr(data)
        df["atr"] = atr
        df["atr_avg20"] = self.calculate_atr_average(atr)
        df["volume_ma20"] = self.calculate_ma(volume, self.volume_ma_period)
        return df


_DEFAULT = TechnicalIndicators()


def moving_average(values: Values, period: int) -> pd.Series:
    return _DEFAULT.calculate_ma(values, period)


def exponential_moving_average(values: Values, period: int) -> pd.Series:
    return _DEFAULT.calculate_ema(values, period)


def rsi(prices: Values, period: int = RSI_PERIOD) -> pd.Series:
    return _DEFAULT.calculate_rsi(prices, period)


def macd(
    prices: Values,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    return _DEFAULT.calculate_macd(prices, fast, slow, signal)


def atr(bars: Bars, period: int = ATR_PERIOD) -> pd.Series:
    return _DEFAULT.calculate_atr(bars, period)
