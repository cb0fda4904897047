"""
Tests for the signal hypothesis tester.
"""
import pytest
import pandas as pd
import numpy as np

from core.backtest.hypothesis import (
    SIGNAL_RULES,
    pct_return,
    resolve_condition,
    run_hypothesis_test,
    summarize_details,
)
from core.shared.types import HypothesisCondition, HypothesisDetail, HypothesisResult


def _frame(closes, volumes=None, spread=1.0, highs=None, lows=None):
    closes = np.asarray(closes, dtype=float)
    n = len(closes)
    return pd.DataFrame({
        'Open': closes,
        'High': np.asarray(highs, dtype=float) if highs is not None else closes + spread,
        'Low': np.asarray(lows, dtype=float) if lows is not None else closes - spread,
        'Close': closes,
        'Volume': np.asarray(volumes, dtype=float) if volumes is not None else np.full(n, 1000.0),
    }, index=pd.date_range('2022-01-03', periods=n, freq='B'))


def _rally_then_selloff():
    """Rally to 149, drop 5 a day to 99, then flat at 99."""
    closes = [100.0 + i for i in range(50)]
    closes += [149.0 - 5 * (i - 49) for i in range(50, 60)]
    closes += [99.0] * 30
    return closes


class TestHelpers:
    def test_every_condition_has_a_rule(self):
        assert set(SIGNAL_RULES) == set(HypothesisCondition)

    def test_resolve_condition(self):
        assert resolve_condition("RSI < 30") is HypothesisCondition.RSI_BELOW_30
        assert resolve_condition(HypothesisCondition.RSI_BELOW_30) is HypothesisCondition.RSI_BELOW_30
        with pytest.raises(ValueError, match="Unknown condition"):
            resolve_condition("Golden Cross")

    def test_pct_return(self):
        assert pct_return(100.0, 110.0) == pytest.approx(10.0)
        assert pct_return(0.0, 110.0) == 0.0

    def test_summarize_empty(self):
        assert summarize_details([]) == HypothesisResult()

    def test_summarize_counts(self):
        day = pd.Timestamp('2022-01-03').date()
        details = [
            HypothesisDetail(date=day, return_day5=1.0, return_day10=2.0, return_day20=4.0),
            HypothesisDetail(date=day, return_day5=1.0, return_day10=2.0, return_day20=-2.0),
            HypothesisDetail(date=day, return_day5=1.0, return_day10=2.0, return_day20=0.0),
        ]
        result = summarize_details(details)
        assert result.total_signals == 3
        assert result.positive_outcomes == 1
        assert result.negative_outcomes == 2
        assert result.average_return == pytest.approx(2.0 / 3)
        assert result.success_rate == pytest.approx(100 / 3)


class TestPriceAboveMA20:
    def test_single_cross_when_ma_becomes_available(self):
        df = _frame([100.0 + i for i in range(60)])
        result = run_hypothesis_test(df, HypothesisCondition.PRICE_ABOVE_MA20, 125)

        assert result.total_signals == 1
        assert result.positive_outcomes == 1
        assert result.success_rate == 100.0
        detail = result.details[0]
        assert detail.date == df.index[19].date()
        assert detail.return_day5 == pytest.approx(5 / 119 * 100)
        assert detail.return_day10 == pytest.approx(10 / 119 * 100)
        assert detail.return_day20 == pytest.approx(20 / 119 * 100)
        assert result.average_return == pytest.approx(20 / 119 * 100)

    def test_string_and_enum_agree(self):
        df = _frame([100.0 + i for i in range(60)])
        assert run_hypothesis_test(df, "Price > MA-20", 125) == run_hypothesis_test(
            df, HypothesisCondition.PRICE_ABOVE_MA20, 125
        )

    @pytest.mark.parametrize("window", [125, 250, 500])
    @pytest.mark.parametrize("condition", [
        HypothesisCondition.PRICE_ABOVE_MA20,
        HypothesisCondition.PRICE_ABOVE_MA20_HIGH_VOLUME,
        HypothesisCondition.RSI_BELOW_30,
        HypothesisCondition.VOLATILITY_LOW_ATR,
    ])
    def test_flat_series_has_no_signals(self, condition, window):
        # long enough for the 500-bar window plus its warm-up
        df = _frame([100.0] * 600)
        assert run_hypothesis_test(df, condition, window) == HypothesisResult()

    def test_window_excludes_older_signals(self):
        closes = [100.0] * 100 + [100.0 + (i - 99) for i in range(100, 400)]
        df = _frame(closes)
        assert run_hypothesis_test(df, HypothesisCondition.PRICE_ABOVE_MA20, 500).total_signals == 1
        assert run_hypothesis_test(df, HypothesisCondition.PRICE_ABOVE_MA20, 125).total_signals == 0

    def test_details_keep_last_ten(self):
        i = np.arange(400)
        closes = 100 + 10 * np.sin(2 * np.pi * (i + 0.25) / 10)
        result = run_hypothesis_test(_frame(closes), HypothesisCondition.PRICE_ABOVE_MA20, 250)

        assert result.total_signals > 10
        assert len(result.details) == 10
        dates = [d.date for d in result.details]
        assert dates == sorted(dates)
        assert result.positive_outcomes + result.negative_outcomes == result.total_signals


class TestHighVolume:
    def test_requires_volume_above_average(self):
        closes = [100.0 + i for i in range(60)]
        assert run_hypothesis_test(
            _frame(closes), HypothesisCondition.PRICE_ABOVE_MA20_HIGH_VOLUME, 125
        ).total_signals == 0

        volumes = [1000.0] * 60
        volumes[19] = 5000.0
        result = run_hypothesis_test(
            _frame(closes, volumes), HypothesisCondition.PRICE_ABOVE_MA20_HIGH_VOLUME, 125
        )
        assert result.total_signals == 1


class TestRsiBelow30:
    def test_single_downward_cross(self):
        closes = _rally_then_selloff()
        df = _frame(closes)
        result = run_hypothesis_test(df, "RSI < 30", 125)

        assert result.total_signals == 1
        assert result.details[0].date == df.index[55].date()
        assert result.positive_outcomes == 0
        assert result.negative_outcomes == 1
        assert result.details[0].return_day20 == pytest.approx((99 - 119) / 119 * 100)


class TestVolatilityLow:
    def test_atr_drop_below_average(self):
        closes = [100.0] * 200
        highs = [105.0] * 100 + [101.0] * 100
        lows = [95.0] * 100 + [99.0] * 100
        df = _frame(closes, highs=highs, lows=lows)
        result = run_hypothesis_test(df, HypothesisCondition.VOLATILITY_LOW_ATR, 125)

        assert result.total_signals == 1
        assert result.details[0].date == df.index[100].date()
        assert result.details[0].return_day20 == 0.0
        assert result.positive_outcomes == 0


class TestValidation:
    def test_invalid_window(self):
        df = _frame([100.0 + i for i in range(60)])
        with pytest.raises(ValueError, match="Unsupported window"):
            run_hypothesis_test(df, HypothesisCondition.PRICE_ABOVE_MA20, 100)

    def test_invalid_condition(self):
        df = _frame([100.0 + i for i in range(60)])
        with pytest.raises(ValueError):
            run_hypothesis_test(df, "Price < MA-200", 250)

    def test_short_history_is_empty_result(self):
        df = _frame([100.0 + i for i in range(15)])
        assert run_hypothesis_test(df, HypothesisCondition.MACD_BULLISH_CROSSOVER, 250) == HypothesisResult()
