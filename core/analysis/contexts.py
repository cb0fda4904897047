"""
Context classification and alignment scoring.

Maps one indicator snapshot plus its price history into the four qualitative
contexts (trend, momentum, participation, volatility), detects price/volume
divergence, and tallies the contexts into a confluence tier with a readable
justification.
"""
from typing import List, Tuple, Union

import pandas as pd

from ..data.frames import ensure_frame
from ..shared.defaults import (
    RSI_OVERBOUGHT,
    PARTICIPATION_HIGH, PARTICIPATION_LOW,
    DIVERGENCE_BARS, DIVERGENCE_VOLUME_DROP,
)
from ..shared.types import (
    Alignment,
    AnalysisResult,
    Bar,
    Contexts,
    ContextSnapshot,
    MomentumContext,
    ParticipationContext,
    TrendContext,
    VolatilityContext,
    VolatilityStatus,
)

Snapshot = Union[AnalysisResult, ContextSnapshot]

DIVERGENCE_REASON = "Harga menguat sementara volume menurun (divergensi negatif)"

_VOLATILITY_CONTEXT = {
    VolatilityStatus.LOW: VolatilityContext.LOW,
    VolatilityStatus.NORMAL: VolatilityContext.MODERATE,
    VolatilityStatus.HIGH: VolatilityContext.ELEVATED,
}


def trend_longevity(closes, ma20: float, is_above_ma20: bool) -> int:
    """
    Count consecutive most-recent closes on the same side of `ma20` as the latest bar.

    Uses the current MA20 as a fixed reference for every historical close rather
    than each bar's own MA20.
    """
    count = 0
    for close in reversed(closes):
        if (close > ma20) != is_above_ma20:
            break
        count += 1
    return count


def classify_trend(snapshot: Snapshot) -> TrendContext:
    """Strong: price > MA20 and MA20 > MA50 (missing MA50 counts as satisfied)."""
    ma20_above_ma50 = snapshot.ma20 > snapshot.ma50 if snapshot.ma50 is not None else True
    if snapshot.is_above_ma20 and ma20_above_ma50:
        return TrendContext.STRONG
    if snapshot.is_above_ma20 or ma20_above_ma50:
        return TrendContext.MODERATE
    return TrendContext.WEAK


def classify_momentum(snapshot: Snapshot) -> MomentumContext:
    if snapshot.rsi > RSI_OVERBOUGHT:
        return MomentumContext.OVERHEATED
    if snapshot.macd_status.is_bullish:
        return MomentumContext.IMPROVING
    return MomentumContext.STABLE


def classify_participation(volume_ratio: float) -> ParticipationContext:
    if volume_ratio > PARTICIPATION_HIGH:
        return ParticipationContext.ABOVE_AVERAGE
    if volume_ratio < PARTICIPATION_LOW:
        return ParticipationContext.BELOW_AVERAGE
    return ParticipationContext.NORMAL


def classify_volatility_context(status: VolatilityStatus) -> VolatilityContext:
    return _VOLATILITY_CONTEXT[status]


def detect_divergence(closes, volumes, trend: TrendContext) -> bool:
    """Price up over the last 5 bars while volume fell more than 10%, in a Strong trend."""
    if len(closes) < DIVERGENCE_BARS or trend is not TrendContext.STRONG:
        return False
    recent_closes = closes[-DIVERGENCE_BARS:]
    recent_volumes = volumes[-DIVERGENCE_BARS:]
    price_rising = recent_closes[-1] > recent_closes[0]
    volume_falling = recent_volumes[-1] < recent_volumes[0] * DIVERGENCE_VOLUME_DROP
    return bool(price_rising and volume_falling)


def evaluate_stock_contexts(
    snapshot: Snapshot,
    history: Union[pd.DataFrame, List[Bar]],
) -> Contexts:
    """
    Evaluate the four technical contexts with trend longevity and divergence.

    Args:
        snapshot: Latest indicator values (AnalysisResult or ContextSnapshot)
        history: Bars up to and including the snapshot's bar

    Returns:
        Contexts for the snapshot
    """
    df = ensure_frame(history)
    closes = df["Close"].to_numpy(dtype=float)
    volumes = df["Volume"].to_numpy(dtype=float)

    trend = classify_trend(snapshot)
    is_divergent = detect_divergence(closes, volumes, trend)

    return Contexts(
        trend=trend,
        momentum=classify_momentum(snapshot),
        participation=classify_participation(snapshot.volume_ratio),
        volatility=classify_volatility_context(snapshot.volatility_status),
        trend_longevity=trend_longevity(closes, snapshot.ma20, snapshot.is_above_ma20),
        is_divergent=is_divergent,
        divergence_reason=DIVERGENCE_REASON if is_divergent else "",
    )


def alignment_tier(points: int) -> Alignment:
    """3+ points -> High, 2 -> Moderate, otherwise Low."""
    if points >= 3:
        return Alignment.HIGH
    if points >= 2:
        return Alignment.MODERATE
    return Alignment.LOW


def calculate_alignment(contexts: Contexts) -> Tuple[Alignment, str]:
    """
    Tally the contexts into a confluence tier.

    One point each for a Strong trend, Improving momentum, Above Average
    participation, and Low or Moderate volatility.

    Returns:
        Tuple of (alignment tier, reason string)
    """
    points = 0
    items: List[str] = []

    if contexts.trend is TrendContext.STRONG:
        points += 1
        items.append(f"tren sangat kokoh ({contexts.trend_longevity} hari)")
    elif contexts.trend is TrendContext.MODERATE:
        items.append("struktur tren moderat")

    if contexts.momentum is MomentumContext.IMPROVING:
        points += 1
        items.append("momentum mulai menguat")

    if contexts.participation is ParticipationContext.ABOVE_AVERAGE:
        points += 1
        items.append("partisipasi pasar tinggi")

    if contexts.volatility in (VolatilityContext.LOW, VolatilityContext.MODERATE):
        points += 1
        if contexts.volatility is VolatilityContext.LOW:
            items.append("volatilitas rendah (konsolidasi)")

    alignment = alignment_tier(points)
    if alignment is Alignment.HIGH:
        reason = f"Keselarasan tinggi karena {', '.join(items)}."
    elif alignment is Alignment.MODERATE:
        reason = f"Keselarasan moderat; {', '.join(items) if items else 'kondisi cenderung netral'}."
    else:
        reason = "Keselarasan rendah; konfluensi teknikal belum terbentuk kuat."

    if contexts.is_divergent and contexts.divergence_reason:
        reason += f" Perlu diperhatikan: {contexts.divergence_reason}."

    return alignment, reason
