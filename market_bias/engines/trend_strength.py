"""
Trend Strength Analyzer

Combines moving averages, a MACD proxy, RSI and recent candle momentum into a
normalized score in [-1, 1] for a single timeframe:

    +1    price > SMA20
    +1    price > SMA50
    +1    SMA20 > SMA50
    +1    EMA12 - EMA26 > 0
    +1    RSI > 50   (+0.5 more above 60, +0.5 more above 70)
    -1..1 (bullish candles in last 5 - 2.5) / 2.5

The total is divided by 7 and clamped. Short series get periods capped at
the series length so every average is defined.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .analysis_config import TrendThresholds, clamp, safe_divide
from .calculations import ema, rsi, sma
from .candles import Candle
from .signals import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendStrength:
    """Trend verdict for one timeframe."""

    trend: Signal
    strength: float  # 0..1

    @property
    def signed_strength(self) -> float:
        """Strength signed by direction. Neutral reads as negative."""
        return self.strength if self.trend is Signal.BULLISH else -self.strength

    def to_dict(self) -> Dict[str, Any]:
        return {"trend": self.trend.value, "strength": self.strength}


NEUTRAL_TREND = TrendStrength(trend=Signal.NEUTRAL, strength=0.0)


def trend_score(candles: Sequence[Candle], config: Optional[TrendThresholds] = None) -> float:
    """
    Raw normalized trend score in [-1, 1].

    Callers must pass at least ``config.min_candles`` candles.
    """
    cfg = config or TrendThresholds()
    n = len(candles)

    sma_fast = sma(candles, min(cfg.sma_fast_period, n))[-1]
    sma_slow = sma(candles, min(cfg.sma_slow_period, n))[-1]
    ema_fast = ema(candles, min(cfg.ema_fast_period, n))[-1]
    ema_slow = ema(candles, min(cfg.ema_slow_period, n))[-1]
    current_rsi = rsi(candles, cfg.rsi_period)[-1]
    price = candles[-1].close

    score = 0.0

    # Price vs moving averages
    if price > sma_fast:
        score += 1
    if price > sma_slow:
        score += 1
    if sma_fast > sma_slow:
        score += 1

    # MACD proxy
    if ema_fast - ema_slow > 0:
        score += 1

    # RSI
    if current_rsi > cfg.rsi_neutral:
        score += 1
    if current_rsi > cfg.rsi_strong:
        score += 0.5
    if current_rsi > cfg.rsi_extreme:
        score += 0.5

    # Recent momentum
    recent = candles[-cfg.momentum_window :]
    bullish = sum(1 for c in recent if c.is_bullish)
    half = cfg.momentum_window / 2
    score += safe_divide(bullish - half, half)

    normalized = clamp(safe_divide(score, cfg.score_divisor), -1.0, 1.0)
    logger.debug(
        "trend score raw=%.2f normalized=%.3f (price=%s sma=%.5f/%.5f rsi=%.1f)",
        score,
        normalized,
        price,
        sma_fast,
        sma_slow,
        current_rsi,
    )
    return normalized


def analyze_trend_strength(
    candles: Sequence[Candle], config: Optional[TrendThresholds] = None
) -> TrendStrength:
    """
    Classify trend direction and strength for one timeframe.

    Returns:
        (neutral, 0) when fewer than ``config.min_candles`` candles are given.
    """
    cfg = config or TrendThresholds()
    if len(candles) < max(cfg.min_candles, 1):
        return NEUTRAL_TREND

    score = trend_score(candles, cfg)

    if score > cfg.trend_threshold:
        return TrendStrength(trend=Signal.BULLISH, strength=score)
    if score < -cfg.trend_threshold:
        return TrendStrength(trend=Signal.BEARISH, strength=abs(score))
    return TrendStrength(trend=Signal.NEUTRAL, strength=abs(score))
