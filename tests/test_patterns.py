"""
Tests for candlestick pattern detection.
"""

from market_bias.engines.candles import Candle
from market_bias.engines.patterns import (
    CandlePattern,
    PatternMatch,
    detect_bearish_engulfing,
    detect_bullish_engulfing,
    detect_doji,
    detect_evening_star,
    detect_hammer,
    detect_morning_star,
    detect_patterns,
    detect_shooting_star,
    pattern_score,
)


def make_candle(o: float, h: float, l: float, c: float, ts: str = "2024-01-01") -> Candle:
    """Helper to create a candle"""
    return Candle(timestamp=ts, open=o, high=h, low=l, close=c)


class TestEngulfing:
    """Two-candle engulfing patterns"""

    def test_bullish_engulfing_fixture(self, engulfing_candles):
        assert detect_bullish_engulfing(engulfing_candles, 2) is True
        assert detect_bearish_engulfing(engulfing_candles, 2) is False

    def test_bearish_engulfing(self):
        candles = [
            make_candle(1.09, 1.11, 1.08, 1.10),
            make_candle(1.105, 1.11, 1.08, 1.085),
        ]
        assert detect_bearish_engulfing(candles, 1) is True
        assert detect_bullish_engulfing(candles, 1) is False

    def test_index_out_of_range(self, engulfing_candles):
        assert detect_bullish_engulfing(engulfing_candles, 0) is False
        assert detect_bullish_engulfing(engulfing_candles, 3) is False
        assert detect_bearish_engulfing(engulfing_candles, -1) is False


class TestSingleCandlePatterns:
    """Hammer, shooting star and doji shapes"""

    def test_hammer(self):
        candle = make_candle(10.0, 10.6, 8.0, 10.5)
        assert detect_hammer(candle) is True
        assert detect_shooting_star(candle) is False

    def test_shooting_star(self):
        candle = make_candle(10.5, 12.5, 9.95, 10.0)
        assert detect_shooting_star(candle) is True
        assert detect_hammer(candle) is False

    def test_doji(self):
        assert detect_doji(make_candle(10.0, 11.0, 9.0, 10.05)) is True
        assert detect_doji(make_candle(10.0, 11.0, 9.0, 10.5)) is False

    def test_flat_candle_matches_nothing(self):
        flat = make_candle(1.0, 1.0, 1.0, 1.0)
        assert detect_doji(flat) is False
        assert detect_hammer(flat) is False
        assert detect_shooting_star(flat) is False


class TestStars:
    """Three-candle star patterns"""

    def morning_star(self):
        return [
            make_candle(10.0, 10.1, 8.9, 9.0, "d1"),
            make_candle(8.9, 9.0, 8.8, 8.95, "d2"),
            make_candle(9.0, 9.85, 8.98, 9.8, "d3"),
        ]

    def test_morning_star(self):
        candles = self.morning_star()
        assert detect_morning_star(candles, 2) is True
        assert detect_evening_star(candles, 2) is False

    def test_evening_star(self):
        candles = [
            make_candle(9.0, 10.1, 8.9, 10.0, "d1"),
            make_candle(10.1, 10.2, 10.0, 10.05, "d2"),
            make_candle(10.0, 10.02, 9.1, 9.2, "d3"),
        ]
        assert detect_evening_star(candles, 2) is True
        assert detect_morning_star(candles, 2) is False

    def test_needs_two_prior_candles(self):
        candles = self.morning_star()
        assert detect_morning_star(candles, 1) is False
        assert detect_evening_star(candles, 1) is False

    def test_detect_patterns_reports_morning_star(self):
        matches = detect_patterns(self.morning_star())
        assert [m.label for m in matches] == ["Morning Star"]
        assert matches[0].score == 0.85


class TestDetectPatterns:
    """Aggregate detection on the latest candle"""

    def test_fewer_than_three_candles(self, engulfing_candles):
        assert detect_patterns(engulfing_candles[:2]) == []

    def test_engulfing_fixture(self, engulfing_candles):
        matches = detect_patterns(engulfing_candles)
        assert matches == [
            PatternMatch("Bullish Engulfing", 0.8, "Strong bullish reversal pattern detected")
        ]

    def test_flat_triple_has_no_patterns(self):
        flat = [make_candle(1.0, 1.0, 1.0, 1.0, f"d{i}") for i in range(3)]
        assert detect_patterns(flat) == []

    def test_only_latest_candle_is_evaluated(self, engulfing_candles):
        flat = make_candle(1.0, 1.0, 1.0, 1.0, "later")
        assert detect_patterns(engulfing_candles + [flat]) == []

    def test_uptrend_has_no_patterns(self, uptrend_candles):
        assert detect_patterns(uptrend_candles) == []


class TestCandlePatternEnum:
    """Closed set of pattern variants"""

    def test_order_and_scores(self):
        assert [(p.label, p.score) for p in CandlePattern] == [
            ("Bullish Engulfing", 0.8),
            ("Hammer", 0.7),
            ("Morning Star", 0.85),
            ("Bearish Engulfing", -0.8),
            ("Shooting Star", -0.7),
            ("Evening Star", -0.85),
            ("Doji", 0.0),
        ]

    def test_to_dict(self):
        assert CandlePattern.DOJI.to_match().to_dict() == {
            "pattern": "Doji",
            "score": 0.0,
            "description": "Market indecision, potential reversal",
        }

    def test_pattern_score_sums(self):
        matches = [CandlePattern.HAMMER.to_match(), CandlePattern.BEARISH_ENGULFING.to_match()]
        assert abs(pattern_score(matches) - (-0.1)) < 1e-9
        assert pattern_score([]) == 0


class TestScenarios:
    """End-to-end fixtures with round numbers"""

    def test_engulfing_pair(self):
        candles = [make_candle(10, 10.5, 8.5, 9, "a"), make_candle(8, 11.5, 7.5, 11, "b")]
        assert detect_bullish_engulfing(candles, 1) is True

    def test_flat_hundreds(self):
        flat = [make_candle(100, 100, 100, 100, f"d{i}") for i in range(3)]
        assert detect_patterns(flat) == []
