"""
Shared types, errors and defaults for the analysis engine.

This module provides:
- Closed status enumerations and data-model dataclasses
- Error types for the per-symbol boundary
- Centralized default values for all indicator parameters
"""
from .types import (
    Bar,
    RsiStatus,
    MacdStatus,
    VolatilityStatus,
    TrendContext,
    MomentumContext,
    ParticipationContext,
    VolatilityContext,
    Alignment,
    HypothesisCondition,
    Contexts,
    ContextSnapshot,
    AnalysisResult,
    HypothesisDetail,
    HypothesisResult,
    SetupDefinition,
    HorizonStats,
    RetrospectiveAnalysis,
)
from .errors import AnalysisError, InsufficientDataError, UpstreamFetchError
from .defaults import (
    MA_PERIOD, MA_LONG_PERIOD, VOLUME_MA_PERIOD,
    RSI_PERIOD, RSI_OVERSOLD, RSI_OVERBOUGHT, RSI_NEUTRAL,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    ATR_PERIOD, VOLATILITY_WINDOW,
    MIN_ANALYSIS_BARS, MIN_RETROSPECTIVE_BARS,
    HORIZONS,
)

__all__ = [
    'Bar',
    'RsiStatus', 'MacdStatus', 'VolatilityStatus',
    'TrendContext', 'MomentumContext', 'ParticipationContext', 'VolatilityContext',
    'Alignment', 'HypothesisCondition',
    'Contexts', 'ContextSnapshot', 'AnalysisResult',
    'HypothesisDetail', 'HypothesisResult',
    'SetupDefinition', 'HorizonStats', 'RetrospectiveAnalysis',
    'AnalysisError', 'InsufficientDataError', 'UpstreamFetchError',
    'MA_PERIOD', 'MA_LONG_PERIOD', 'VOLUME_MA_PERIOD',
    'RSI_PERIOD', 'RSI_OVERSOLD', 'RSI_OVERBOUGHT', 'RSI_NEUTRAL',
    'MACD_FAST', 'MACD_SLOW', 'MACD_SIGNAL',
    'ATR_PERIOD', 'VOLATILITY_WINDOW',
    'MIN_ANALYSIS_BARS', 'MIN_RETROSPECTIVE_BARS',
    'HORIZONS',
]
