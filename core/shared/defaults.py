"""
Centralized default values for indicator and report parameters.

This is the SINGLE SOURCE OF TRUTH for all indicator parameter defaults.
All modules should import from here to ensure consistency.
"""

# Moving averages
MA_PERIOD = 20
MA_LONG_PERIOD = 50
VOLUME_MA_PERIOD = 20

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
RSI_NEUTRAL = 50.0  # Placeholder before the first Wilder average exists

# MACD (Moving Average Convergence Divergence) defaults
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# ATR / volatility status
ATR_PERIOD = 14
VOLATILITY_WINDOW = 20  # Trailing window of ATR values for the status comparison
VOLATILITY_HIGH_FACTOR = 1.2
VOLATILITY_LOW_FACTOR = 0.8

# Participation (volume ratio vs 20-day volume MA)
PARTICIPATION_HIGH = 1.3
PARTICIPATION_LOW = 0.7

# Divergence: last N bars, volume must fall by more than this fraction
DIVERGENCE_BARS = 5
DIVERGENCE_VOLUME_DROP = 0.9

# Minimum history
MIN_ANALYSIS_BARS = 35
MIN_RETROSPECTIVE_BARS = 50
DEFAULT_FETCH_DAYS = 100

# Hypothesis tester
HYPOTHESIS_WARMUP_BARS = 30
HYPOTHESIS_WINDOWS = (125, 250, 500)
HYPOTHESIS_DEFAULT_WINDOW = 250
HYPOTHESIS_DETAIL_LIMIT = 10

# Forward horizons (bars) for outcome measurement
HORIZONS = (5, 10, 20)
MAX_HORIZON = 20

# Retrospective matcher
RETROSPECTIVE_LOOKBACK_DAYS = 250
RETROSPECTIVE_PADDING_BARS = 60
