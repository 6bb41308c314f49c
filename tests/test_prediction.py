"""
Tests for the dual-timeframe prediction aggregator and the last-candle predictor.
"""

import pytest

from market_bias.engines.analysis_config import PredictionThresholds
from market_bias.engines.candles import Candle
from market_bias.engines.prediction import (
    INSUFFICIENT_DATA_REASON,
    classify_total_score,
    last_candle_confidence,
    predict_from_last_candle,
    predict_next_day,
)
from market_bias.engines.signals import Signal


def make_candle(o: float, h: float, l: float, c: float) -> Candle:
    """Helper to create a candle"""
    return Candle(timestamp="2024-01-01", open=o, high=h, low=l, close=c)


class TestPredictNextDay:
    """Aggregation across the daily and 4-hour series"""

    def test_insufficient_daily_data(self, uptrend_candles):
        result = predict_next_day(uptrend_candles[:19], uptrend_candles)
        assert result.prediction is Signal.NEUTRAL
        assert result.confidence == 0
        assert result.reasoning == [INSUFFICIENT_DATA_REASON]
        assert result.patterns == []
        assert result.timeframe_analysis == {}

    def test_strong_uptrend(self, uptrend_candles):
        # trend total = 1.0 * 2 + 1.0 -> 50 + 45
        result = predict_next_day(uptrend_candles, uptrend_candles)
        assert result.prediction is Signal.BULLISH
        assert result.confidence == 95
        assert result.patterns == []
        assert result.reasoning == [
            "Daily timeframe shows bullish trend with 100% strength",
            "4-hour timeframe shows bullish trend with 100% strength",
            "RSI indicates overbought conditions (100.0)",
        ]
        assert set(result.timeframe_analysis) == {"daily", "4h"}

    def test_short_four_hour_series_is_neutral_trend(self, uptrend_candles):
        result = predict_next_day(uptrend_candles, uptrend_candles[:5])
        assert result.timeframe_analysis["4h"].trend is Signal.NEUTRAL
        # 2.0 from daily minus 0 from the neutral 4h series
        assert result.prediction is Signal.BULLISH
        assert result.confidence == pytest.approx(80)

    def test_patterns_from_both_timeframes(self, uptrend_candles, engulfing_candles):
        result = predict_next_day(uptrend_candles, engulfing_candles)
        assert [p.label for p in result.patterns] == ["Bullish Engulfing"]
        assert "Detected patterns on 4-hour: Bullish Engulfing" in result.reasoning

    def test_downtrend_reasoning(self, downtrend_candles):
        result = predict_next_day(downtrend_candles, [])
        assert "RSI indicates oversold conditions (0.0)" in result.reasoning

    def test_to_dict(self, uptrend_candles):
        payload = predict_next_day(uptrend_candles, uptrend_candles).to_dict()
        assert payload["prediction"] == "bullish"
        assert payload["timeframeAnalysis"]["daily"] == {"trend": "bullish", "strength": 1.0}
        assert payload["patterns"] == []


class TestClassifyTotalScore:
    """Score to (prediction, confidence) mapping"""

    def test_neutral_band(self):
        assert classify_total_score(0) == (Signal.NEUTRAL, 50)
        assert classify_total_score(0.5) == (Signal.NEUTRAL, 40)
        assert classify_total_score(-1.0) == (Signal.NEUTRAL, 30)

    def test_directional(self):
        assert classify_total_score(2) == (Signal.BULLISH, 80)
        assert classify_total_score(-2) == (Signal.BEARISH, 80)

    def test_directional_capped(self):
        assert classify_total_score(10) == (Signal.BULLISH, 95)
        assert classify_total_score(-10) == (Signal.BEARISH, 95)

    def test_neutral_confidence_clamped_at_zero(self):
        config = PredictionThresholds(neutral_penalty_per_point=100)
        assert classify_total_score(1.0, config) == (Signal.NEUTRAL, 0.0)


class TestLastCandlePredictor:
    """Minimal single-candle prediction"""

    def test_empty_is_bearish(self):
        assert predict_from_last_candle([]) is Signal.BEARISH

    def test_direction_follows_last_candle(self):
        up = make_candle(1.0, 1.2, 0.9, 1.1)
        down = make_candle(1.1, 1.2, 0.9, 1.0)
        assert predict_from_last_candle([down, up]) is Signal.BULLISH
        assert predict_from_last_candle([up, down]) is Signal.BEARISH

    def test_unchanged_close_is_bearish(self):
        assert predict_from_last_candle([make_candle(1.0, 1.1, 0.9, 1.0)]) is Signal.BEARISH

    def test_confidence(self):
        assert last_candle_confidence([]) == 0
        assert last_candle_confidence([make_candle(1.0, 1.0, 1.0, 1.0)]) == 50
        assert last_candle_confidence([make_candle(0.0, 1.0, 0.0, 0.5)]) == 50
        assert last_candle_confidence([make_candle(0.0, 1.0, 0.0, 1.0)]) == 100

    def test_confidence_rounds_half_up(self):
        assert last_candle_confidence([make_candle(0.0, 1.0, 0.0, 0.125)]) == 13
