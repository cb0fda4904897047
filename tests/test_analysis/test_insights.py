"""
Tests for narrative insight generation.
"""
from datetime import date, timedelta

import pytest

from core.analysis.insights import consecutive_days_above_ma, generate_insights
from core.shared.types import (
    AnalysisResult,
    Bar,
    MacdStatus,
    RsiStatus,
    VolatilityStatus,
)


def _bars(closes):
    start = date(2024, 1, 1)
    return [
        Bar(date=start + timedelta(days=i), open=c, high=c + 1, low=c - 1, close=c, volume=1000.0)
        for i, c in enumerate(closes)
    ]


def _result(closes, **overrides):
    values = dict(
        symbol="TEST",
        close=closes[-1],
        ma20=0.0,
        is_above_ma20=True,
        rsi=50.0,
        rsi_status=RsiStatus.NEUTRAL,
        macd=0.0,
        signal=0.0,
        histogram=0.0,
        macd_status=MacdStatus.BULLISH,
        volume=1000.0,
        volume_ma20=1000.0,
        volume_ratio=1.0,
        atr=2.0,
        atr_relative=1.5,
        volatility_status=VolatilityStatus.NORMAL,
        history=_bars(closes),
    )
    values.update(overrides)
    return AnalysisResult(**values)


class TestConsecutiveDaysAboveMA:
    def test_uptrend_counts_all_ready_bars(self):
        closes = [100.0 + i for i in range(30)]
        # MA20 is ready from index 19 onward and every close sits above it
        assert consecutive_days_above_ma(closes, 20) == 11

    def test_zero_when_latest_below(self):
        closes = [100.0 + i for i in range(29)] + [50.0]
        assert consecutive_days_above_ma(closes, 20) == 0


class TestGenerateInsights:
    def test_short_history(self):
        insights = generate_insights(_result([100.0] * 10))
        assert insights == ["Data historis tidak mencukupi untuk analisis mendalam."]

    def test_stable_uptrend(self):
        insights = generate_insights(_result([100.0 + i for i in range(30)]))
        assert insights[0].startswith("Tren Penguatan Stabil")
        assert "11 hari" in insights[0]

    def test_young_trend(self):
        closes = [100.0] * 27 + [101.0, 102.0, 103.0]
        insights = generate_insights(_result(closes))
        assert insights[0].startswith("Indikasi Tren")
        assert "3 hari" in insights[0]

    def test_weak_trend(self):
        closes = [100.0 + i for i in range(29)] + [50.0]
        insights = generate_insights(_result(closes))
        assert insights[0].startswith("Tren Pelemahan")

    @pytest.mark.parametrize("ratio,prefix", [
        (1.6, "Partisipasi Tinggi"),
        (1.4, "Partisipasi Normal"),
        (0.5, "Partisipasi Rendah"),
    ])
    def test_participation(self, ratio, prefix):
        insights = generate_insights(_result([100.0] * 25, volume_ratio=ratio))
        assert insights[1].startswith(prefix)

    @pytest.mark.parametrize("status,prefix", [
        (VolatilityStatus.HIGH, "Volatilitas Meningkat"),
        (VolatilityStatus.LOW, "Volatilitas Rendah"),
        (VolatilityStatus.NORMAL, "Volatilitas Normal"),
    ])
    def test_volatility(self, status, prefix):
        insights = generate_insights(_result([100.0] * 25, volatility_status=status))
        assert insights[2].startswith(prefix)

    def test_overbought_and_crossover(self):
        insights = generate_insights(_result(
            [100.0] * 25, rsi=78.0, macd_status=MacdStatus.BULLISH_CROSSOVER,
        ))
        assert any(s.startswith("Status Overbought") for s in insights)
        assert any("Bullish Crossover" in s for s in insights)

    def test_oversold_and_bearish_crossover(self):
        insights = generate_insights(_result(
            [100.0] * 25, rsi=22.0, macd_status=MacdStatus.BEARISH_CROSSOVER,
        ))
        assert any(s.startswith("Status Oversold") for s in insights)
        assert any("Bearish Crossover" in s for s in insights)

    def test_neutral_momentum_adds_nothing(self):
        insights = generate_insights(_result([100.0] * 25))
        assert len(insights) == 3
