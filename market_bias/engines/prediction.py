"""
Next-Day Prediction

Dual-timeframe aggregator: pattern scores from both timeframes plus trend
strength (daily weighted double) produce a single verdict with a reasoning
trail. Also hosts the minimal last-candle predictor used by simple views.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .analysis_config import DEFAULT_CONFIG, PredictionThresholds, TrendThresholds, clamp
from .calculations import rsi
from .candles import Candle
from .patterns import PatternMatch, detect_patterns, pattern_score
from .signals import Signal
from .trend_strength import TrendStrength, analyze_trend_strength

logger = logging.getLogger(__name__)

DAILY = "daily"
FOUR_HOUR = "4h"

_TIMEFRAME_NAMES = {DAILY: "Daily", FOUR_HOUR: "4-hour"}

NO_SIGNAL_REASON = "No strong signals detected, market appears neutral"
INSUFFICIENT_DATA_REASON = "Insufficient data for analysis"


@dataclass
class PredictionResult:
    """Aggregated next-day prediction."""

    prediction: Signal
    confidence: float  # 0-100
    reasoning: List[str] = field(default_factory=list)
    patterns: List[PatternMatch] = field(default_factory=list)
    timeframe_analysis: Dict[str, TrendStrength] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction": self.prediction.value,
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
            "patterns": [p.to_dict() for p in self.patterns],
            "timeframeAnalysis": {tf: t.to_dict() for tf, t in self.timeframe_analysis.items()},
        }


def _trend_sentence(timeframe: str, trend: TrendStrength) -> str:
    return (
        f"{_TIMEFRAME_NAMES[timeframe]} timeframe shows {trend.trend.value} trend "
        f"with {trend.strength * 100:.0f}% strength"
    )


def _patterns_sentence(timeframe: str, patterns: Sequence[PatternMatch]) -> str:
    names = ", ".join(p.label for p in patterns)
    return f"Detected patterns on {_TIMEFRAME_NAMES[timeframe].lower()}: {names}"


def classify_total_score(
    total_score: float, config: Optional[PredictionThresholds] = None
) -> Tuple[Signal, float]:
    """
    Map a combined score to (prediction, confidence).

    Neutral confidence shrinks with |score| and is clamped at 0.
    """
    cfg = config or DEFAULT_CONFIG.prediction

    if total_score > cfg.decision_threshold:
        confidence = min(cfg.max_confidence, cfg.base_confidence + total_score * cfg.confidence_per_point)
        return Signal.BULLISH, confidence
    if total_score < -cfg.decision_threshold:
        confidence = min(
            cfg.max_confidence, cfg.base_confidence + abs(total_score) * cfg.confidence_per_point
        )
        return Signal.BEARISH, confidence

    confidence = cfg.base_confidence - abs(total_score) * cfg.neutral_penalty_per_point
    return Signal.NEUTRAL, clamp(confidence, 0.0, 100.0)


def predict_next_day(
    daily: Sequence[Candle],
    four_hour: Sequence[Candle],
    config: Optional[PredictionThresholds] = None,
    trend_config: Optional[TrendThresholds] = None,
) -> PredictionResult:
    """
    Predict next-day direction from daily and 4-hour candles.

    Returns:
        PredictionResult; neutral with zero confidence when the daily series
        is shorter than ``config.min_daily_candles``.
    """
    cfg = config or DEFAULT_CONFIG.prediction
    trend_cfg = trend_config or DEFAULT_CONFIG.trend

    if len(daily) < cfg.min_daily_candles:
        return PredictionResult(
            prediction=Signal.NEUTRAL,
            confidence=0.0,
            reasoning=[INSUFFICIENT_DATA_REASON],
        )

    daily_patterns = detect_patterns(daily)
    four_hour_patterns = detect_patterns(four_hour)

    daily_trend = analyze_trend_strength(daily, trend_cfg)
    four_hour_trend = analyze_trend_strength(four_hour, trend_cfg)

    patterns = daily_patterns + four_hour_patterns
    trend_total = (
        daily_trend.signed_strength * cfg.daily_trend_weight
        + four_hour_trend.signed_strength * cfg.intraday_trend_weight
    )
    total_score = pattern_score(patterns) + trend_total

    prediction, confidence = classify_total_score(total_score, cfg)

    reasoning: List[str] = []
    if daily_trend.trend is not Signal.NEUTRAL:
        reasoning.append(_trend_sentence(DAILY, daily_trend))
    if four_hour_trend.trend is not Signal.NEUTRAL:
        reasoning.append(_trend_sentence(FOUR_HOUR, four_hour_trend))
    if daily_patterns:
        reasoning.append(_patterns_sentence(DAILY, daily_patterns))
    if four_hour_patterns:
        reasoning.append(_patterns_sentence(FOUR_HOUR, four_hour_patterns))

    current_rsi = rsi(daily, trend_cfg.rsi_period)[-1]
    if current_rsi > cfg.rsi_overbought:
        reasoning.append(f"RSI indicates overbought conditions ({current_rsi:.1f})")
    elif current_rsi < cfg.rsi_oversold:
        reasoning.append(f"RSI indicates oversold conditions ({current_rsi:.1f})")

    if not reasoning:
        reasoning.append(NO_SIGNAL_REASON)

    logger.debug(
        "prediction=%s confidence=%.1f total=%.3f (patterns=%.2f trend=%.3f)",
        prediction.value,
        confidence,
        total_score,
        pattern_score(patterns),
        trend_total,
    )

    return PredictionResult(
        prediction=prediction,
        confidence=confidence,
        reasoning=reasoning,
        patterns=patterns,
        timeframe_analysis={DAILY: daily_trend, FOUR_HOUR: four_hour_trend},
    )


# =============================================================================
# LAST-CANDLE PREDICTOR
# =============================================================================


def predict_from_last_candle(candles: Sequence[Candle]) -> Signal:
    """Bullish if the latest candle closed above its open, otherwise bearish."""
    if not candles:
        return Signal.BEARISH
    return Signal.BULLISH if candles[-1].is_bullish else Signal.BEARISH


def last_candle_confidence(candles: Sequence[Candle]) -> float:
    """
    Share of the latest candle's range covered by its body, as a percentage.

    A zero-range candle reads 50 (no information either way).
    """
    if not candles:
        return 0.0

    latest = candles[-1]
    if latest.range == 0:
        return 50.0

    pct = latest.body / latest.range * 100
    return float(min(math.floor(pct + 0.5), 100))
