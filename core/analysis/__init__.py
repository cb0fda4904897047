"""
Snapshot analysis: latest-bar indicators, contexts, alignment and insights.
"""
from .contexts import (
    DIVERGENCE_REASON,
    alignment_tier,
    calculate_alignment,
    evaluate_stock_contexts,
    trend_longevity,
)
from .insights import generate_insights
from .snapshot import (
    analyze_stock,
    analyze_symbols,
    build_analysis,
    classify_macd,
    classify_rsi,
    setup_from_analysis,
)

__all__ = [
    "DIVERGENCE_REASON",
    "alignment_tier",
    "calculate_alignment",
    "evaluate_stock_contexts",
    "trend_longevity",
    "generate_insights",
    "analyze_stock",
    "analyze_symbols",
    "build_analysis",
    "classify_macd",
    "classify_rsi",
    "setup_from_analysis",
]
