"""
Indicator calculation module.

Provides the indicators the context classifier and backtests are built on:
- Simple and exponential moving averages
- Wilder RSI and ATR
- MACD line, signal and histogram
- ATR-based volatility status

All indicators return series index-aligned with their input.
"""
from .technical import (
    TechnicalIndicators,
    WilderAverage,
    classify_volatility,
    moving_average,
    exponential_moving_average,
    rsi,
    macd,
    atr,
)

__all__ = [
    'TechnicalIndicators',
    'WilderAverage',
    'classify_volatility',
    'moving_average',
    'exponential_moving_average',
    'rsi',
    'macd',
    'atr',
]
