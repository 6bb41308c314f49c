"""
Candlestick Pattern Detection

Single- and multi-candle reversal patterns evaluated on the latest candle
(or the latest triplet) of a sequence:

    Bullish: Engulfing, Hammer, Morning Star
    Bearish: Engulfing, Shooting Star, Evening Star
    Neutral: Doji

The set of patterns is closed. Each CandlePattern member carries its label,
fixed score in [-1, 1] and description.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Sequence

from .candles import Candle

MIN_PATTERN_CANDLES = 3

# Shape ratios
SHADOW_TO_BODY_MIN = 2.0  # Long shadow must exceed this multiple of the body
OPPOSITE_SHADOW_MAX = 0.5  # Opposite shadow must stay under this multiple of the body
DOJI_BODY_TO_RANGE = 0.1
STAR_BODY_RATIO = 0.5  # Middle star body vs first candle body


@dataclass(frozen=True)
class PatternMatch:
    """A detected pattern on the latest candle(s)."""

    label: str
    score: float  # -1..+1
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"pattern": self.label, "score": self.score, "description": self.description}


# =============================================================================
# DETECTORS
# =============================================================================


def detect_bullish_engulfing(candles: Sequence[Candle], index: int) -> bool:
    """Bearish candle followed by a bullish candle whose body engulfs it."""
    if index < 1 or index >= len(candles):
        return False

    prev = candles[index - 1]
    curr = candles[index]

    engulfs = curr.open <= prev.close and curr.close >= prev.open
    return prev.is_bearish and curr.is_bullish and engulfs


def detect_bearish_engulfing(candles: Sequence[Candle], index: int) -> bool:
    """Bullish candle followed by a bearish candle whose body engulfs it."""
    if index < 1 or index >= len(candles):
        return False

    prev = candles[index - 1]
    curr = candles[index]

    engulfs = curr.open >= prev.close and curr.close <= prev.open
    return prev.is_bullish and curr.is_bearish and engulfs


def detect_hammer(candle: Candle) -> bool:
    """Small body, long lower shadow, little or no upper shadow."""
    body = candle.body
    return (
        candle.lower_shadow > body * SHADOW_TO_BODY_MIN
        and candle.upper_shadow < body * OPPOSITE_SHADOW_MAX
    )


def detect_shooting_star(candle: Candle) -> bool:
    """Small body, long upper shadow, little or no lower shadow."""
    body = candle.body
    return (
        candle.upper_shadow > body * SHADOW_TO_BODY_MIN
        and candle.lower_shadow < body * OPPOSITE_SHADOW_MAX
    )


def detect_doji(candle: Candle) -> bool:
    """
    Body smaller than 10% of the high-low range.

    Strict comparison: a fully flat candle (range 0) is not a doji.
    """
    return candle.body < candle.range * DOJI_BODY_TO_RANGE


def detect_morning_star(candles: Sequence[Candle], index: int) -> bool:
    """Bearish candle, small-bodied star, bullish close above the first body's midpoint."""
    if index < 2 or index >= len(candles):
        return False

    first, second, third = candles[index - 2], candles[index - 1], candles[index]

    small_body = second.body < first.body * STAR_BODY_RATIO
    closes_high = third.close > first.midpoint
    return first.is_bearish and small_body and third.is_bullish and closes_high


def detect_evening_star(candles: Sequence[Candle], index: int) -> bool:
    """Bullish candle, small-bodied star, bearish close below the first body's midpoint."""
    if index < 2 or index >= len(candles):
        return False

    first, second, third = candles[index - 2], candles[index - 1], candles[index]

    small_body = second.body < first.body * STAR_BODY_RATIO
    closes_low = third.close < first.midpoint
    return first.is_bullish and small_body and third.is_bearish and closes_low


# =============================================================================
# PATTERN VARIANTS
# =============================================================================


class CandlePattern(Enum):
    """Supported patterns, in evaluation order."""

    BULLISH_ENGULFING = ("Bullish Engulfing", 0.8, "Strong bullish reversal pattern detected")
    HAMMER = ("Hammer", 0.7, "Potential bullish reversal at support")
    MORNING_STAR = ("Morning Star", 0.85, "Strong bullish reversal pattern")
    BEARISH_ENGULFING = ("Bearish Engulfing", -0.8, "Strong bearish reversal pattern detected")
    SHOOTING_STAR = ("Shooting Star", -0.7, "Potential bearish reversal at resistance")
    EVENING_STAR = ("Evening Star", -0.85, "Strong bearish reversal pattern")
    DOJI = ("Doji", 0.0, "Market indecision, potential reversal")

    def __init__(self, label: str, score: float, description: str):
        self.label = label
        self.score = score
        self.description = description

    def matches(self, candles: Sequence[Candle], index: int) -> bool:
        """Evaluate this pattern at ``index``."""
        if self is CandlePattern.BULLISH_ENGULFING:
            return detect_bullish_engulfing(candles, index)
        if self is CandlePattern.BEARISH_ENGULFING:
            return detect_bearish_engulfing(candles, index)
        if self is CandlePattern.MORNING_STAR:
            return detect_morning_star(candles, index)
        if self is CandlePattern.EVENING_STAR:
            return detect_evening_star(candles, index)
        if self is CandlePattern.HAMMER:
            return detect_hammer(candles[index])
        if self is CandlePattern.SHOOTING_STAR:
            return detect_shooting_star(candles[index])
        return detect_doji(candles[index])

    def to_match(self) -> PatternMatch:
        return PatternMatch(label=self.label, score=self.score, description=self.description)


def detect_patterns(candles: Sequence[Candle]) -> List[PatternMatch]:
    """
    Detect patterns on the latest candle / triplet only.

    Returns:
        Matches in CandlePattern order; empty when fewer than 3 candles.
    """
    if len(candles) < MIN_PATTERN_CANDLES:
        return []

    last_index = len(candles) - 1
    return [p.to_match() for p in CandlePattern if p.matches(candles, last_index)]


def pattern_score(patterns: Sequence[PatternMatch]) -> float:
    """Sum of pattern scores."""
    return sum(p.score for p in patterns)
