"""
Market Structure Analysis - Fair Value Gaps, Swings, Liquidity and Bias

Pipeline:
    CANDLES
        ↓
    FVG DETECTION (three-candle gaps + fill tracking)
        ↓
    SWING DETECTION (most recent swing high / swing low)
        ↓
    LIQUIDITY LEVELS
    ├─ IRL: unfilled FVG midpoints inside the swing range
    └─ ERL: just beyond the swing high / swing low
        ↓
    MARKET BIAS (FVG reaction → liquidity targeting → momentum → neutral)

Every function is pure: inputs are never mutated and each call recomputes
its output from scratch. Degenerate inputs (too few candles, zero-width
ranges) produce well-formed neutral output instead of raising.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .analysis_config import (
    DEFAULT_CONFIG,
    AnalysisConfig,
    BiasConfig,
    StructureThresholds,
    clamp,
    safe_divide,
)
from .candles import Candle
from .signals import LiquidityKind, LiquiditySide, Signal, SwingKind

logger = logging.getLogger(__name__)

MIN_FVG_CANDLES = 3

REASON_INSUFFICIENT_DATA = "Insufficient data"
REASON_BULLISH_FVG_REACTION = "Price reacted from bullish FVG, seeking higher levels"
REASON_BEARISH_FVG_REACTION = "Price reacted from bearish FVG, seeking lower levels"
REASON_BUY_SIDE_TARGET = "Price targeting external buy-side liquidity"
REASON_SELL_SIDE_TARGET = "Price targeting external sell-side liquidity"
REASON_BULLISH_MOMENTUM = "Recent price action shows bullish momentum"
REASON_BEARISH_MOMENTUM = "Recent price action shows bearish momentum"
REASON_NO_BIAS = "No clear directional bias"


@dataclass
class FairValueGap:
    """Fair Value Gap (three-candle imbalance zone)."""

    start: float  # Lower price bound
    end: float  # Upper price bound
    direction: Signal  # BULLISH (gap up) or BEARISH (gap down)
    created_at: str  # Timestamp of the middle candle
    is_filled: bool = False
    filled_at: Optional[str] = None  # Timestamp of the first candle closing inside the gap

    @property
    def midpoint(self) -> float:
        return (self.start + self.end) / 2

    def contains(self, price: float) -> bool:
        """True if price lies within [start, end]."""
        return self.start <= price <= self.end

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "start": self.start,
            "end": self.end,
            "direction": self.direction.value,
            "timestamp": self.created_at,
            "isFilled": self.is_filled,
        }
        if self.filled_at is not None:
            payload["fillTimestamp"] = self.filled_at
        return payload


@dataclass(frozen=True)
class SwingPoint:
    """A swing high or swing low."""

    price: float
    timestamp: str
    kind: SwingKind

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "timestamp": self.timestamp, "type": self.kind.value}


@dataclass(frozen=True)
class LiquidityLevel:
    """Internal or external range liquidity level."""

    price: float
    kind: LiquidityKind
    side: LiquiditySide

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "type": self.kind.value, "side": self.side.value}


@dataclass(frozen=True)
class MarketBias:
    """Final bias verdict."""

    direction: Signal
    confidence: float  # 0-100
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"bias": self.direction.value, "confidence": self.confidence, "reason": self.reason}


@dataclass
class MarketStructureResult:
    """Complete market structure analysis."""

    bias: MarketBias
    fvgs: List[FairValueGap] = field(default_factory=list)
    swing_high: Optional[SwingPoint] = None
    swing_low: Optional[SwingPoint] = None
    irl_levels: List[LiquidityLevel] = field(default_factory=list)
    erl_levels: List[LiquidityLevel] = field(default_factory=list)

    @property
    def active_fvgs(self) -> List[FairValueGap]:
        """Unfilled gaps."""
        return [f for f in self.fvgs if not f.is_filled]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape served to API consumers."""
        return {
            "fvgs": [f.to_dict() for f in self.fvgs],
            "swingHigh": self.swing_high.to_dict() if self.swing_high else None,
            "swingLow": self.swing_low.to_dict() if self.swing_low else None,
            "irlLevels": [lvl.to_dict() for lvl in self.irl_levels],
            "erlLevels": [lvl.to_dict() for lvl in self.erl_levels],
            "bias": self.bias.to_dict(),
        }


# =============================================================================
# FAIR VALUE GAPS
# =============================================================================


def _mark_fill(fvg: FairValueGap, candles: Sequence[Candle], from_idx: int) -> None:
    """Record the first candle from ``from_idx`` onward that closes inside the gap."""
    for candle in candles[from_idx:]:
        if fvg.contains(candle.close):
            fvg.is_filled = True
            fvg.filled_at = candle.timestamp
            return


def detect_fvgs(candles: Sequence[Candle]) -> List[FairValueGap]:
    """
    Detect Fair Value Gaps in a single forward pass.

    Bullish FVG: candle[i-2].high < candle[i].low, gap = [candle[i-2].high, candle[i].low]
    Bearish FVG: candle[i-2].low > candle[i].high, gap = [candle[i].high, candle[i-2].low]

    The gap is stamped with the middle candle's timestamp and is filled by
    the earliest later candle whose close lies inside it.
    """
    fvgs: List[FairValueGap] = []
    if len(candles) < MIN_FVG_CANDLES:
        return fvgs

    for i in range(2, len(candles)):
        first = candles[i - 2]
        middle = candles[i - 1]
        current = candles[i]

        if first.high < current.low:
            fvg = FairValueGap(
                start=first.high,
                end=current.low,
                direction=Signal.BULLISH,
                created_at=middle.timestamp,
            )
        elif first.low > current.high:
            fvg = FairValueGap(
                start=current.high,
                end=first.low,
                direction=Signal.BEARISH,
                created_at=middle.timestamp,
            )
        else:
            continue

        _mark_fill(fvg, candles, i + 1)
        fvgs.append(fvg)

    return fvgs


# =============================================================================
# SWING POINTS
# =============================================================================


def detect_swing_points(
    candles: Sequence[Candle], lookback: int = 5
) -> Tuple[Optional[SwingPoint], Optional[SwingPoint]]:
    """
    Find the most recent swing high and swing low.

    Swing High: high[i] > every high within ``lookback`` bars on both sides
    Swing Low:  low[i]  < every low within ``lookback`` bars on both sides

    The scan walks backward from the newest candle that has a full right-hand
    window, so the two points may come from different bars.

    Returns:
        (swing_high, swing_low), either of which may be None
    """
    if lookback < 1:
        raise ValueError(f"lookback must be >= 1, got {lookback}")

    if len(candles) < lookback * 2 + 1:
        return None, None

    swing_high: Optional[SwingPoint] = None
    swing_low: Optional[SwingPoint] = None

    for i in range(len(candles) - lookback - 1, lookback - 1, -1):
        current = candles[i]
        neighbours = [candles[i - j] for j in range(1, lookback + 1)]
        neighbours += [candles[i + j] for j in range(1, lookback + 1)]

        if swing_high is None and all(c.high < current.high for c in neighbours):
            swing_high = SwingPoint(price=current.high, timestamp=current.timestamp, kind=SwingKind.HIGH)

        if swing_low is None and all(c.low > current.low for c in neighbours):
            swing_low = SwingPoint(price=current.low, timestamp=current.timestamp, kind=SwingKind.LOW)

        if swing_high and swing_low:
            break

    return swing_high, swing_low


# =============================================================================
# LIQUIDITY LEVELS
# =============================================================================


def identify_liquidity_levels(
    swing_high: Optional[SwingPoint],
    swing_low: Optional[SwingPoint],
    fvgs: Sequence[FairValueGap],
    erl_offset: float = StructureThresholds.erl_offset,
) -> Tuple[List[LiquidityLevel], List[LiquidityLevel]]:
    """
    Derive Internal (IRL) and External (ERL) Range Liquidity levels.

    IRL: midpoint of every unfilled FVG that sits inside the swing range.
    ERL: buy-side just above the swing high, sell-side just below the swing low.

    Returns:
        (irl_levels, erl_levels); both empty unless both swings exist
    """
    irl_levels: List[LiquidityLevel] = []
    erl_levels: List[LiquidityLevel] = []

    if swing_high is None or swing_low is None:
        return irl_levels, erl_levels

    for fvg in fvgs:
        if fvg.is_filled:
            continue
        mid = fvg.midpoint
        if swing_low.price <= mid <= swing_high.price:
            irl_levels.append(
                LiquidityLevel(
                    price=mid,
                    kind=LiquidityKind.IRL,
                    side=LiquiditySide.BUY if fvg.direction is Signal.BULLISH else LiquiditySide.SELL,
                )
            )

    erl_levels.append(
        LiquidityLevel(
            price=swing_high.price * (1 + erl_offset),
            kind=LiquidityKind.ERL,
            side=LiquiditySide.BUY,
        )
    )
    erl_levels.append(
        LiquidityLevel(
            price=swing_low.price * (1 - erl_offset),
            kind=LiquidityKind.ERL,
            side=LiquiditySide.SELL,
        )
    )

    return irl_levels, erl_levels


# =============================================================================
# MARKET BIAS
# =============================================================================


def _reacted_to_fvgs(
    window: Sequence[Candle],
    fvgs: Sequence[FairValueGap],
    direction: Signal,
    reversal_check_count: int,
) -> bool:
    """True if the window touched an active gap of ``direction`` and then closed away from it."""
    tail = window[-reversal_check_count:]
    if direction is Signal.BULLISH:
        reversed_away = all(c.is_bullish for c in tail)
    else:
        reversed_away = all(c.is_bearish for c in tail)
    if not reversed_away:
        return False

    for fvg in fvgs:
        if direction is Signal.BULLISH and any(fvg.contains(c.low) for c in window):
            return True
        if direction is Signal.BEARISH and any(fvg.contains(c.high) for c in window):
            return True
    return False


def range_position(
    price: float, swing_high: SwingPoint, swing_low: SwingPoint, default: float = 0.5
) -> float:
    """Position of price inside the swing range (0 = swing low, 1 = swing high)."""
    return safe_divide(price - swing_low.price, swing_high.price - swing_low.price, default)


def determine_market_bias(
    candles: Sequence[Candle],
    fvgs: Sequence[FairValueGap],
    swing_high: Optional[SwingPoint],
    swing_low: Optional[SwingPoint],
    config: Optional[BiasConfig] = None,
) -> MarketBias:
    """
    Determine market bias from FVG reactions, liquidity targeting and momentum.

    Decision cascade (first match wins):
    1. FVG reaction - active gap touched in the window, last N candles close away
    2. Liquidity targeting - price near a swing extreme with momentum behind it
    3. Momentum - one side dominates the window by ``momentum_multiplier``
    4. Neutral

    Rules 1 and 2 earn a bonus when active gaps in the bias direction
    outnumber the opposite ones. Confidence never exceeds ``max_confidence``.
    """
    cfg = config or DEFAULT_CONFIG.bias

    if not candles:
        return MarketBias(Signal.NEUTRAL, cfg.insufficient_confidence, REASON_INSUFFICIENT_DATA)

    window = candles[-cfg.recent_candle_count :]
    bullish_count = sum(1 for c in window if c.is_bullish)
    bearish_count = len(window) - bullish_count

    active_bullish = [f for f in fvgs if f.direction is Signal.BULLISH and not f.is_filled]
    active_bearish = [f for f in fvgs if f.direction is Signal.BEARISH and not f.is_filled]

    def gap_bonus(direction: Signal) -> float:
        if direction is Signal.BULLISH and len(active_bullish) > len(active_bearish):
            return cfg.extra_fvg_confidence
        if direction is Signal.BEARISH and len(active_bearish) > len(active_bullish):
            return cfg.extra_fvg_confidence
        return 0.0

    direction = Signal.NEUTRAL
    confidence = cfg.base_confidence
    reason = REASON_NO_BIAS

    # 1. FVG reaction
    if _reacted_to_fvgs(window, active_bullish, Signal.BULLISH, cfg.reversal_check_count):
        direction = Signal.BULLISH
        confidence = cfg.reaction_confidence + gap_bonus(direction)
        reason = REASON_BULLISH_FVG_REACTION
    elif _reacted_to_fvgs(window, active_bearish, Signal.BEARISH, cfg.reversal_check_count):
        direction = Signal.BEARISH
        confidence = cfg.reaction_confidence + gap_bonus(direction)
        reason = REASON_BEARISH_FVG_REACTION
    else:
        # 2. Liquidity targeting
        targeting = Signal.NEUTRAL
        if swing_high is not None and swing_low is not None:
            position = range_position(
                candles[-1].close, swing_high, swing_low, cfg.degenerate_range_position
            )
            if position > cfg.liquidity_upper_threshold and bullish_count > bearish_count:
                targeting = Signal.BULLISH
            elif position < cfg.liquidity_lower_threshold and bearish_count > bullish_count:
                targeting = Signal.BEARISH

        if targeting is Signal.BULLISH:
            direction = Signal.BULLISH
            confidence = cfg.targeting_confidence + gap_bonus(direction)
            reason = REASON_BUY_SIDE_TARGET
        elif targeting is Signal.BEARISH:
            direction = Signal.BEARISH
            confidence = cfg.targeting_confidence + gap_bonus(direction)
            reason = REASON_SELL_SIDE_TARGET
        # 3. Momentum
        elif bullish_count > bearish_count * cfg.momentum_multiplier:
            direction = Signal.BULLISH
            confidence = cfg.momentum_confidence
            reason = REASON_BULLISH_MOMENTUM
        elif bearish_count > bullish_count * cfg.momentum_multiplier:
            direction = Signal.BEARISH
            confidence = cfg.momentum_confidence
            reason = REASON_BEARISH_MOMENTUM

    confidence = clamp(confidence, 0.0, cfg.max_confidence)
    logger.debug(
        "bias=%s confidence=%.1f bullish=%d bearish=%d active_gaps=%d/%d",
        direction.value,
        confidence,
        bullish_count,
        bearish_count,
        len(active_bullish),
        len(active_bearish),
    )
    return MarketBias(direction=direction, confidence=confidence, reason=reason)


# =============================================================================
# ENTRY POINT
# =============================================================================


def analyze_market_structure(
    candles: Sequence[Candle], config: Optional[AnalysisConfig] = None
) -> MarketStructureResult:
    """
    Complete market structure analysis.

    Args:
        candles: Chronologically ordered candles (not mutated)
        config: Thresholds; defaults to DEFAULT_CONFIG

    Returns:
        MarketStructureResult with gaps, swings, liquidity levels and bias
    """
    cfg = config or DEFAULT_CONFIG

    fvgs = detect_fvgs(candles)
    swing_high, swing_low = detect_swing_points(candles, cfg.structure.swing_lookback)
    irl_levels, erl_levels = identify_liquidity_levels(
        swing_high, swing_low, fvgs, cfg.structure.erl_offset
    )
    bias = determine_market_bias(candles, fvgs, swing_high, swing_low, cfg.bias)

    logger.debug(
        "analyzed %d candles: %d FVGs, swing high=%s, swing low=%s, bias=%s",
        len(candles),
        len(fvgs),
        swing_high.price if swing_high else None,
        swing_low.price if swing_low else None,
        bias.direction.value,
    )

    return MarketStructureResult(
        fvgs=fvgs,
        swing_high=swing_high,
        swing_low=swing_low,
        irl_levels=irl_levels,
        erl_levels=erl_levels,
        bias=bias,
    )
