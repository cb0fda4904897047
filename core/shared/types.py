"""
Shared types for the analysis engine.

This module consolidates the closed status enumerations and the data-model
dataclasses (bars, snapshots, contexts, backtest summaries) used across the
indicator, analysis and backtest modules.

Every dataclass converts to and from the external interface format with
``to_dict()`` / ``from_dict()``: camelCase keys, ISO dates and enum values as
their status strings, so a JSON round trip reproduces every field.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import pandas as pd


class RsiStatus(Enum):
    OVERBOUGHT = "Overbought"
    OVERSOLD = "Oversold"
    NEUTRAL = "Neutral"


class MacdStatus(Enum):
    BULLISH_CROSSOVER = "Bullish Crossover"
    BEARISH_CROSSOVER = "Bearish Crossover"
    BULLISH = "Bullish"
    BEARISH = "Bearish"

    @property
    def is_bullish(self) -> bool:
        return self in (MacdStatus.BULLISH, MacdStatus.BULLISH_CROSSOVER)


class VolatilityStatus(Enum):
    """ATR compared with its own trailing average."""
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


class TrendContext(Enum):
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"


class MomentumContext(Enum):
    STABLE = "Stable"
    IMPROVING = "Improving"
    OVERHEATED = "Overheated"


class ParticipationContext(Enum):
    BELOW_AVERAGE = "Below Average"
    NORMAL = "Normal"
    ABOVE_AVERAGE = "Above Average"


class VolatilityContext(Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    ELEVATED = "Elevated"


class Alignment(Enum):
    """Confluence tier across the four contexts (ordered Low < Moderate < High)."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _ALIGNMENT_RANK[self]


_ALIGNMENT_RANK = {Alignment.LOW: 0, Alignment.MODERATE: 1, Alignment.HIGH: 2}


class HypothesisCondition(Enum):
    """Signal definitions understood by the hypothesis tester."""
    PRICE_ABOVE_MA20 = "Price > MA-20"
    PRICE_ABOVE_MA20_HIGH_VOLUME = "Price > MA-20 + High Vol"
    MACD_BULLISH_CROSSOVER = "MACD Bullish Crossover"
    RSI_BELOW_30 = "RSI < 30"
    VOLATILITY_LOW_ATR = "Volatility Low (ATR)"


def _iso(d: Union[date, pd.Timestamp, str]) -> str:
    if isinstance(d, str):
        return d
    return pd.Timestamp(d).date().isoformat()


def _parse_date(value: Union[date, pd.Timestamp, str]) -> date:
    if type(value) is date:
        return value
    return pd.Timestamp(value).date()


@dataclass(frozen=True)
class Bar:
    """One trading day's open/high/low/close/volume."""
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _iso(self.date),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Bar":
        return cls(
            date=_parse_date(d["date"]),
            open=float(d["open"]),
            high=float(d["high"]),
            low=float(d["low"]),
            close=float(d["close"]),
            volume=float(d["volume"]),
        )


@dataclass
class Contexts:
    """The four qualitative contexts plus trend longevity and divergence."""
    trend: TrendContext
    momentum: MomentumContext
    participation: ParticipationContext
    volatility: VolatilityContext
    trend_longevity: int = 0
    is_divergent: bool = False
    divergence_reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend": self.trend.value,
            "momentum": self.momentum.value,
            "participation": self.participation.value,
            "volatility": self.volatility.value,
            "trendLongevity": self.trend_longevity,
            "isDivergent": self.is_divergent,
            "divergenceReason": self.divergence_reason,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Contexts":
        return cls(
            trend=TrendContext(d["trend"]),
            momentum=MomentumContext(d["momentum"]),
            participation=ParticipationContext(d["participation"]),
            volatility=VolatilityContext(d["volatility"]),
            trend_longevity=int(d.get("trendLongevity", 0)),
            is_divergent=bool(d.get("isDivergent", False)),
            divergence_reason=d.get("divergenceReason", ""),
        )


@dataclass
class ContextSnapshot:
    """
    Minimal view of one bar's indicator values, enough for context classification.

    The retrospective matcher builds one per historical index instead of a full
    AnalysisResult.
    """
    close: float
    ma20: float
    is_above_ma20: bool
    rsi: float
    macd_status: MacdStatus
    volume_ratio: float
    volatility_status: VolatilityStatus = VolatilityStatus.NORMAL
    ma50: Optional[float] = None
    histogram: float = 0.0


@dataclass
class AnalysisResult:
    """Latest-bar snapshot for one symbol, with contexts and alignment."""
    symbol: str
    close: float
    ma20: float
    is_above_ma20: bool
    rsi: float
    rsi_status: RsiStatus
    macd: float
    signal: float
    histogram: float
    macd_status: MacdStatus
    volume: float
    volume_ma20: float
    volume_ratio: float
    atr: float
    atr_relative: float  # ATR as percentage of close
    volatility_status: VolatilityStatus
    ma50: Optional[float] = None
    contexts: Optional[Contexts] = None
    alignment: Alignment = Alignment.LOW
    alignment_reason: str = ""
    insights: List[str] = field(default_factory=list)
    history: List[Bar] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, symbol: str, error: str) -> "AnalysisResult":
        """Structurally valid result with zeroed numbers and neutral statuses."""
        return cls(
            symbol=symbol,
            close=0.0,
            ma20=0.0,
            is_above_ma20=False,
            rsi=0.0,
            rsi_status=RsiStatus.NEUTRAL,
            macd=0.0,
            signal=0.0,
            histogram=0.0,
            macd_status=MacdStatus.BEARISH,
            volume=0.0,
            volume_ma20=0.0,
            volume_ratio=0.0,
            atr=0.0,
            atr_relative=0.0,
            volatility_status=VolatilityStatus.NORMAL,
            error=error or "Analysis failed",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "close": self.close,
            "ma20": self.ma20,
            "ma50": self.ma50,
            "isAboveMA20": self.is_above_ma20,
            "rsi": self.rsi,
            "rsiStatus": self.rsi_status.value,
            "macd": self.macd,
            "signal": self.signal,
            "histogram": self.histogram,
            "macdStatus": self.macd_status.value,
            "volume": self.volume,
            "volumeMA20": self.volume_ma20,
            "volumeRatio": self.volume_ratio,
            "atr": self.atr,
            "atrRelative": self.atr_relative,
            "volatilityStatus": self.volatility_status.value,
            "contexts": self.contexts.to_dict() if self.contexts is not None else None,
            "alignment": self.alignment.value,
            "alignmentReason": self.alignment_reason,
            "insights": list(self.insights),
            "history": [b.to_dict() for b in self.history],
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnalysisResult":
        contexts = d.get("contexts")
        return cls(
            symbol=d["symbol"],
            close=d["close"],
            ma20=d["ma20"],
            ma50=d.get("ma50"),
            is_above_ma20=d["isAboveMA20"],
            rsi=d["rsi"],
            rsi_status=RsiStatus(d["rsiStatus"]),
            macd=d["macd"],
            signal=d["signal"],
            histogram=d["histogram"],
            macd_status=MacdStatus(d["macdStatus"]),
            volume=d["volume"],
            volume_ma20=d["volumeMA20"],
            volume_ratio=d["volumeRatio"],
            atr=d["atr"],
            atr_relative=d["atrRelative"],
            volatility_status=VolatilityStatus(d["volatilityStatus"]),
            contexts=Contexts.from_dict(contexts) if contexts is not None else None,
            alignment=Alignment(d.get("alignment", Alignment.LOW.value)),
            alignment_reason=d.get("alignmentReason", ""),
            insights=list(d.get("insights", [])),
            history=[Bar.from_dict(b) for b in d.get("history", [])],
            error=d.get("error"),
        )


@dataclass
class HypothesisDetail:
    """One signal occurrence with its forward returns (percent)."""
    date: date
    return_day5: float
    return_day10: float
    return_day20: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _iso(self.date),
            "returnDay5": self.return_day5,
            "returnDay10": self.return_day10,
            "returnDay20": self.return_day20,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HypothesisDetail":
        return cls(
            date=_parse_date(d["date"]),
            return_day5=d["returnDay5"],
            return_day10=d["returnDay10"],
            return_day20=d["returnDay20"],
        )


@dataclass
class HypothesisResult:
    """Backtest summary for one condition over one window."""
    total_signals: int = 0
    positive_outcomes: int = 0
    negative_outcomes: int = 0
    average_return: float = 0.0
    success_rate: float = 0.0
    details: List[HypothesisDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSignals": self.total_signals,
            "positiveOutcomes": self.positive_outcomes,
            "negativeOutcomes": self.negative_outcomes,
            "averageReturn": self.average_return,
            "successRate": self.success_rate,
            "details": [x.to_dict() for x in self.details],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HypothesisResult":
        return cls(
            total_signals=d["totalSignals"],
            positive_outcomes=d["positiveOutcomes"],
            negative_outcomes=d["negativeOutcomes"],
            average_return=d["averageReturn"],
            success_rate=d["successRate"],
            details=[HypothesisDetail.from_dict(x) for x in d.get("details", [])],
        )


@dataclass(frozen=True)
class SetupDefinition:
    """Context tuple used as the retrospective matching key."""
    trend: TrendContext
    momentum: MomentumContext
    participation: ParticipationContext
    volatility: VolatilityContext
    is_above_ma20: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend": self.trend.value,
            "momentum": self.momentum.value,
            "participation": self.participation.value,
            "volatility": self.volatility.value,
            "isAboveMA20": self.is_above_ma20,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SetupDefinition":
        return cls(
            trend=TrendContext(d["trend"]),
            momentum=MomentumContext(d["momentum"]),
            participation=ParticipationContext(d["participation"]),
            volatility=VolatilityContext(d["volatility"]),
            is_above_ma20=bool(d["isAboveMA20"]),
        )


@dataclass
class HorizonStats:
    """Forward-return distribution at one horizon (returns in percent)."""
    horizon: int
    higher_count: int = 0
    total_occurrences: int = 0
    median_return: float = 0.0
    min_return: float = 0.0
    max_return: float = 0.0
    positive_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "horizon": self.horizon,
            "higherCount": self.higher_count,
            "totalOccurrences": self.total_occurrences,
            "medianReturn": self.median_return,
            "minReturn": self.min_return,
            "maxReturn": self.max_return,
            "positiveRate": self.positive_rate,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HorizonStats":
        return cls(
            horizon=d["horizon"],
            higher_count=d["higherCount"],
            total_occurrences=d["totalOccurrences"],
            median_return=d["medianReturn"],
            min_return=d["minReturn"],
            max_return=d["maxReturn"],
            positive_rate=d["positiveRate"],
        )


@dataclass
class RetrospectiveAnalysis:
    """Outcome distribution after historical bars matching a setup."""
    setup: SetupDefinition
    total_occurrences: int = 0
    stats: List[HorizonStats] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "setup": self.setup.to_dict(),
            "totalOccurrences": self.total_occurrences,
            "stats": [s.to_dict() for s in self.stats],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RetrospectiveAnalysis":
        return cls(
            setup=SetupDefinition.from_dict(d["setup"]),
            total_occurrences=d["totalOccurrences"],
            stats=[HorizonStats.from_dict(s) for s in d.get("stats", [])],
        )
