"""
Tests for the retrospective setup matcher.
"""
import pytest
import pandas as pd
import numpy as np

from core.backtest.retrospective import (
    empty_analysis,
    horizon_stats,
    run_retrospective_analysis,
    snapshot_at,
)
from core.indicators.technical import TechnicalIndicators
from core.shared.types import (
    HorizonStats,
    MacdStatus,
    MomentumContext,
    ParticipationContext,
    SetupDefinition,
    TrendContext,
    VolatilityContext,
    VolatilityStatus,
)


def _uptrend(days: int = 320) -> pd.DataFrame:
    closes = 100.0 + np.arange(days, dtype=float)
    return pd.DataFrame({
        'Open': closes,
        'High': closes + 1,
        'Low': closes - 1,
        'Close': closes,
        'Volume': np.full(days, 1000.0),
    }, index=pd.date_range('2021-01-04', periods=days, freq='B'))


def _setup(volatility=VolatilityContext.MODERATE, **overrides):
    values = dict(
        trend=TrendContext.STRONG,
        momentum=MomentumContext.OVERHEATED,
        participation=ParticipationContext.NORMAL,
        volatility=volatility,
        is_above_ma20=True,
    )
    values.update(overrides)
    return SetupDefinition(**values)


def _assert_empty(result):
    assert result.total_occurrences == 0
    assert [s.horizon for s in result.stats] == [5, 10, 20]
    for s in result.stats:
        assert s == HorizonStats(horizon=s.horizon)


class TestHorizonStats:
    def test_distribution(self):
        closes = [100.0, 110.0, 90.0, 100.0, 120.0]
        stats = horizon_stats(closes, [0, 1, 2], horizon=2)
        # returns: 100->90 -10%, 110->100 -9.09%, 90->120 +33.3%
        assert stats.total_occurrences == 3
        assert stats.higher_count == 1
        assert stats.min_return == pytest.approx(-10.0)
        assert stats.max_return == pytest.approx(100 / 3)
        assert stats.median_return == pytest.approx(-10 / 110 * 100)
        assert stats.positive_rate == pytest.approx(100 / 3)

    def test_even_count_uses_lower_middle(self):
        closes = [100.0, 100.0, 100.0, 100.0, 101.0, 102.0, 103.0, 104.0]
        stats = horizon_stats(closes, [0, 1, 2, 3], horizon=4)
        assert stats.median_return == pytest.approx(2.0)

    def test_no_occurrences(self):
        assert horizon_stats([1.0, 2.0], [], horizon=5) == HorizonStats(horizon=5)


class TestSnapshotAt:
    def test_reads_batch_values(self):
        values = TechnicalIndicators().calculate_all(_uptrend(80))
        snap = snapshot_at(values, 70)
        assert snap.close == 170.0
        assert snap.ma20 == pytest.approx(160.5)
        assert snap.ma50 == pytest.approx(145.5)
        assert snap.is_above_ma20
        assert snap.macd_status is MacdStatus.BULLISH
        assert snap.volume_ratio == pytest.approx(1.0)
        assert snap.volatility_status is VolatilityStatus.NORMAL


class TestRetrospective:
    def test_uptrend_matches_every_candidate(self):
        result = run_retrospective_analysis(_uptrend(320), _setup(), 250)

        # slice of 310 bars, candidates 60..289
        assert result.total_occurrences == 230
        assert [s.horizon for s in result.stats] == [5, 10, 20]
        five = result.stats[0]
        assert five.total_occurrences == 230
        assert five.higher_count == 230
        assert five.positive_rate == 100.0
        assert five.min_return == pytest.approx(5 / 399 * 100)
        assert five.max_return == pytest.approx(5 / 170 * 100)
        assert five.median_return == pytest.approx(5 / 285 * 100)
        assert result.stats[2].min_return == pytest.approx(20 / 399 * 100)

    def test_volatility_is_not_matched(self):
        for volatility in VolatilityContext:
            result = run_retrospective_analysis(_uptrend(320), _setup(volatility), 250)
            assert result.total_occurrences == 230

    def test_setup_is_echoed(self):
        setup = _setup()
        assert run_retrospective_analysis(_uptrend(320), setup, 250).setup == setup

    def test_shorter_lookback(self):
        result = run_retrospective_analysis(_uptrend(320), _setup(), 100)
        # slice of 160 bars, candidates 60..139
        assert result.total_occurrences == 80

    def test_no_matches(self):
        setup = _setup(trend=TrendContext.WEAK, is_above_ma20=False)
        _assert_empty(run_retrospective_analysis(_uptrend(320), setup, 250))

    def test_short_history(self):
        _assert_empty(run_retrospective_analysis(_uptrend(40), _setup(), 250))

    def test_history_without_room_for_horizons(self):
        # 60 bars: candidates start at 50 and must end before 40
        _assert_empty(run_retrospective_analysis(_uptrend(60), _setup(), 250))

    def test_empty_analysis(self):
        setup = _setup()
        result = empty_analysis(setup)
        assert result.setup == setup
        _assert_empty(result)
